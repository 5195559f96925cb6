"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere dataclass, the HitRecord shared by all
primitives, and the analytic intersection routine. Roots are computed with
the cancellation-free quadratic formula from Ray Tracing Gems.

The reported normal is always the outward normal (hit_point - center) / radius.
Rays starting inside the sphere are not flipped to face the ray; the shading
engine treats the sphere as a closed opaque surface seen from outside.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids catastrophic cancellation
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane; fall back to the plain formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |ray_origin + t * ray_direction - center|^2 = radius^2, i.e.

        a*t^2 + 2*h*t + c = 0

    with a = dot(d, d), h = dot(d, oc), c = dot(oc, oc) - r^2, oc = origin - center.

    A negative discriminant is a miss; a zero discriminant (tangent ray) is a
    hit. The nearer root is preferred; the farther root is used only when the
    nearer one falls outside (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = (hit_point - sphere.center) / sphere.radius

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
