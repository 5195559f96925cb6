"""Geometry module for shape primitives.

This module provides the parametric primitives the ray tracer intersects:

Components:
    sphere: Sphere primitive with analytic ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) so they can be
called per ray inside rendering kernels. Intersection is brute force: the
scene resolver tests every primitive for every ray.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .plane import Plane, hit_plane, make_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "make_plane",
]
