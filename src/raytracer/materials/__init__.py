"""Materials module.

Components:
    phong: Phong material, point light and the lighting equation
"""

from .phong import (
    LightStruct,
    Material,
    MaterialStruct,
    PointLight,
    evaluate_lighting,
    lighting,
)

__all__ = [
    "Material",
    "PointLight",
    "MaterialStruct",
    "LightStruct",
    "lighting",
    "evaluate_lighting",
]
