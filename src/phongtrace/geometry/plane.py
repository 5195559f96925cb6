"""Infinite plane primitive with ray-plane intersection.

A plane is defined by any point on it and its normal. Scene planes also carry
a finite width and height, but those only describe how large the plane is
drawn by an editor; the physical surface tested here is unbounded.

The ray-plane intersection solves

    dot(point - (ray_origin + t * ray_direction), normal) = 0
    t = dot(point - ray_origin, normal) / dot(ray_direction, normal)

and reports no hit when the ray runs parallel to the plane.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.geometry.plane import Plane, hit_plane
    >>> floor = Plane(point=ti.math.vec3(0, -1, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# |dot(direction, normal)| at or below this is treated as parallel
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Plane:
    """An infinite plane through a point with a given normal.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The plane normal (vec3). Reported unchanged on every hit.
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection against the infinite plane.

    The surface normal in the returned record is the plane's own normal,
    regardless of which side the ray arrives from.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
    """
    denom = tm.dot(ray_direction, plane.normal)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom

        if t > t_min and t < t_max:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = plane.normal

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane from a point and normal inside a Taichi kernel."""
    return Plane(point=point, normal=normal)
