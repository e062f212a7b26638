"""Phong reflection model: materials, the point light and the lighting equation.

The lighting result is the sum of three terms evaluated for a single point
light:

    ambient  = color * intensity * ambient
    diffuse  = color * intensity * diffuse * dot(light_v, normal)
    specular = intensity * specular * dot(reflect_v, eye_v) ** shininess

A point in shadow receives the ambient term only. Diffuse and specular are
dropped when the light sits behind the surface, and specular alone is dropped
when the reflection points away from the eye. The sum is not clamped; that is
left to whoever encodes the image.

Material coefficients are not validated. Negative values are accepted and
produce whatever the equation gives.

Example:
    >>> from src.raytracer.materials.phong import Material, PointLight, evaluate_lighting
    >>> from src.raytracer.core.tuples import point, vector
    >>> m = Material()
    >>> light = PointLight((1.0, 1.0, 1.0), point(0, 0, -10))
    >>> evaluate_lighting(m, light, point(0, 0, 0), vector(0, 0, -1), vector(0, 0, -1))
    array([1.9, 1.9, 1.9])
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import reflect, to_vec3, vec3
from src.raytracer.core.tuples import Color, Tuple4

# =============================================================================
# Host-side Data Structures
# =============================================================================


@dataclass
class Material:
    """Surface appearance under the Phong model.

    Attributes:
        color: Surface color as (R, G, B).
        ambient: Fraction of light reflected regardless of orientation.
        diffuse: Fraction of light reflected from a matte surface.
        specular: Strength of the specular highlight.
        shininess: Highlight exponent; larger values give a smaller, sharper
            highlight.
    """

    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0


@dataclass
class PointLight:
    """A light source with no size emitting from a single point.

    Attributes:
        intensity: Light color and brightness as (R, G, B).
        position: Light position (point).
    """

    intensity: tuple[float, float, float]
    position: Tuple4


# =============================================================================
# Taichi Data Structures
# =============================================================================


@ti.dataclass
class MaterialStruct:
    """Phong material inside Taichi kernels."""

    color: vec3
    ambient: ti.f64
    diffuse: ti.f64
    specular: ti.f64
    shininess: ti.f64


@ti.dataclass
class LightStruct:
    """Point light inside Taichi kernels."""

    intensity: vec3
    position: vec3


# =============================================================================
# Lighting (Taichi-compatible)
# =============================================================================


@ti.func
def lighting(
    material: MaterialStruct,
    light: LightStruct,
    point: vec3,
    eyev: vec3,
    normalv: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Evaluate the Phong model at a surface point.

    Args:
        material: Material of the surface being lit.
        light: The point light.
        point: Surface point being shaded.
        eyev: Unit vector from the point toward the eye.
        normalv: Unit surface normal at the point, facing the eye.
        in_shadow: 1 if the point is shadowed from the light.

    Returns:
        The unclamped RGB color.
    """
    effective_color = material.color * light.intensity
    ambient = effective_color * material.ambient
    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)

    if in_shadow == 0:
        lightv = tm.normalize(light.position - point)
        light_dot_normal = tm.dot(lightv, normalv)

        # Negative means the light is on the other side of the surface
        if light_dot_normal >= 0.0:
            diffuse = effective_color * material.diffuse * light_dot_normal

            reflectv = reflect(-lightv, normalv)
            reflect_dot_eye = tm.dot(reflectv, eyev)
            if reflect_dot_eye > 0.0:
                factor = ti.pow(reflect_dot_eye, material.shininess)
                specular = light.intensity * material.specular * factor

    return ambient + diffuse + specular


# =============================================================================
# Python-side Evaluation
# =============================================================================

_lighting_result = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _lighting_kernel(
    color: vec3,
    ambient: ti.f64,
    diffuse: ti.f64,
    specular: ti.f64,
    shininess: ti.f64,
    intensity: vec3,
    position: vec3,
    point: vec3,
    eyev: vec3,
    normalv: vec3,
    in_shadow: ti.i32,
):
    material = MaterialStruct(
        color=color,
        ambient=ambient,
        diffuse=diffuse,
        specular=specular,
        shininess=shininess,
    )
    light = LightStruct(intensity=intensity, position=position)
    _lighting_result[None] = lighting(material, light, point, eyev, normalv, in_shadow)


def evaluate_lighting(
    material: Material,
    light: PointLight,
    point: Tuple4,
    eyev: Tuple4,
    normalv: Tuple4,
    in_shadow: bool = False,
) -> Color:
    """Run :func:`lighting` for a single sample from Python.

    Args:
        material: Surface material.
        light: The point light.
        point: Surface point (point).
        eyev: Unit vector toward the eye.
        normalv: Unit surface normal.
        in_shadow: Whether the point is shadowed.

    Returns:
        The RGB color as a float64 array.
    """
    _lighting_kernel(
        to_vec3(material.color),
        float(material.ambient),
        float(material.diffuse),
        float(material.specular),
        float(material.shininess),
        to_vec3(light.intensity),
        to_vec3(light.position),
        to_vec3(point),
        to_vec3(eyev),
        to_vec3(normalv),
        int(in_shadow),
    )
    return np.asarray(_lighting_result.to_numpy(), dtype=np.float64)
