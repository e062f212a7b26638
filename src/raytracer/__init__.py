"""Taichi-based Phong ray tracer.

Renders scenes of spheres and planes lit by a single point light, with
hard shadows, using the Phong reflection model. Per-ray work runs in Taichi
kernels on the CPU; scenes and transforms are built on the host with NumPy.

Taichi must be initialised before importing any subpackage, because modules
declare their device fields at import time:

    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.raytracer.scene import default_world

Subpackages:
    core: Points, vectors, transforms and rays
    geometry: Sphere and plane primitives
    materials: Phong materials, the point light and the lighting equation
    scene: Intersections, hit selection and the world
    camera: Pinhole camera, ray generation and rendering
    preview: Canvas and image export
"""

__version__ = "0.1.0"
