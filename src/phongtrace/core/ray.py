"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the fundamental Ray dataclass and the small set of vector
helpers the intersection and shading code relies on. All operations are Taichi
functions so they can be called from inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Vectors shorter than this are treated as zero-length
ZERO_LENGTH_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Callers normalize it;
            the intersection routines compare hits by distance, so a unit
            direction keeps t and distance interchangeable.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    No bounds checking is done; negative t yields points behind the origin.

    Args:
        ray: The ray to evaluate.
        t: The parameter value.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, mapping zero-length input to the zero vector.

    Unlike tm.normalize this never divides by zero, so degenerate geometry
    (a light sitting on the shaded point, a camera on its own view plane)
    produces a zero direction instead of NaN.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or (0, 0, 0).
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > ZERO_LENGTH_EPSILON:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def mirror_direction(normal: vec3, to_viewer: vec3) -> vec3:
    """Compute the perfect mirror direction of the viewer about a normal.

    Evaluates 2 * dot(N, V) * N - V, where V points from the surface toward
    the viewer. Both inputs should be unit length.

    Args:
        normal: The surface normal.
        to_viewer: Unit direction from the surface point to the viewer.

    Returns:
        The reflected direction (leaving the surface).
    """
    return 2.0 * tm.dot(normal, to_viewer) * normal - to_viewer

