"""Whitted-style shading: ambient, Lambert and Phong terms with hard shadows and mirrors.

The color at a surface point is

    ambient * diffuse_color
    + sum over unoccluded lights of
        diffuse_color * kd * I * max(0, N . L)
      + specular_color * ks * I * max(0, N . H) ** shininess

where I = light_intensity / distance**2 and H = normalize(V + L), with V the
unit direction from the point toward the camera.

Mirror objects add the shaded color of whatever the perfect reflection ray
hits. Kernels cannot recurse, so shade() follows the chain of mirror bounces
in a loop, summing each hit's direct shading, and stops after max_depth
bounces. Without the cap two facing mirrors would bounce forever.

Shading coefficients live in Taichi fields and are set with setup_shading()
before rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.config import ShadingConfig
    >>> from phongtrace.core.shading import setup_shading, shade_point
    >>> setup_shading(ShadingConfig(ambient=0.2))
"""

import taichi as ti
import taichi.math as tm

from phongtrace.camera.render_camera import get_camera_position
from phongtrace.core.config import MAX_DEPTH_LIMIT, ShadingConfig
from phongtrace.core.ray import ZERO_LENGTH_EPSILON, mirror_direction, safe_normalize, vec3
from phongtrace.scene.intersection import (
    T_MIN,
    find_closest_hit,
    is_occluded,
    light_intensities,
    light_positions,
    num_lights,
    object_diffuse,
    object_mirror,
    object_specular,
    set_cull_behind_origin,
)

# =============================================================================
# Shading Parameters (GPU-accessible)
# =============================================================================

_ambient = ti.field(dtype=ti.f32, shape=())
_kd = ti.field(dtype=ti.f32, shape=())
_ks = ti.field(dtype=ti.f32, shape=())
_shininess = ti.field(dtype=ti.f32, shape=())
_shadow_bias = ti.field(dtype=ti.f32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())
_background = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_shading(config: ShadingConfig) -> None:
    """Copy shading coefficients into Taichi fields.

    Must be called before rendering and again whenever the configuration
    changes.

    Raises:
        ValueError: If the configuration is invalid.
    """
    config.validate()
    _ambient[None] = float(config.ambient)
    _kd[None] = float(config.kd)
    _ks[None] = float(config.ks)
    _shininess[None] = float(config.shininess)
    _shadow_bias[None] = float(config.shadow_bias)
    _max_depth[None] = int(config.max_depth)
    _background[None] = [float(c) for c in config.background]
    set_cull_behind_origin(config.cull_behind_origin)


def get_shading_info() -> dict:
    """Get the uploaded shading coefficients for debugging."""
    bg = _background[None]
    return {
        "ambient": float(_ambient[None]),
        "kd": float(_kd[None]),
        "ks": float(_ks[None]),
        "shininess": float(_shininess[None]),
        "shadow_bias": float(_shadow_bias[None]),
        "max_depth": int(_max_depth[None]),
        "background": (float(bg[0]), float(bg[1]), float(bg[2])),
    }


@ti.func
def get_background() -> vec3:
    """Color returned for rays that hit nothing."""
    return _background[None]


# =============================================================================
# Lighting Terms
# =============================================================================


@ti.func
def lambert(normal: vec3, light_dir: vec3, intensity: ti.f32) -> ti.f32:
    """Lambert diffuse factor kd * I * max(0, N . L)."""
    return _kd[None] * intensity * ti.max(0.0, tm.dot(normal, light_dir))


@ti.func
def phong(normal: vec3, half_vector: vec3, intensity: ti.f32) -> ti.f32:
    """Phong specular factor ks * I * max(0, N . H) ** shininess."""
    return _ks[None] * intensity * ti.pow(ti.max(0.0, tm.dot(normal, half_vector)), _shininess[None])


@ti.func
def shade_direct(point: vec3, normal: vec3, to_viewer: vec3, object_index: ti.i32) -> vec3:
    """Direct lighting at a surface point, without mirror bounces.

    Args:
        point: The shaded point.
        normal: Unit surface normal at the point.
        to_viewer: Unit direction from the point toward the viewer.
        object_index: Store index of the object that owns the point.

    Returns:
        Unclamped RGB color.
    """
    diffuse_color = object_diffuse[object_index]
    specular_color = object_specular[object_index]
    color = _ambient[None] * diffuse_color

    shadow_origin = point + _shadow_bias[None] * normal

    for li in range(num_lights[None]):
        to_light = light_positions[li] - point
        dist_sq = tm.dot(to_light, to_light)

        # A light sitting on the shaded point has no direction; skip it
        if dist_sq > ZERO_LENGTH_EPSILON:
            distance = ti.sqrt(dist_sq)
            light_dir = to_light / distance
            intensity = light_intensities[li] / dist_sq

            if is_occluded(shadow_origin, light_dir, point, distance) == 0:
                half_vector = safe_normalize(to_viewer + light_dir)
                diff = lambert(normal, light_dir, intensity)
                spec = phong(normal, half_vector, intensity)
                color += diffuse_color * diff + specular_color * spec

    return color


@ti.func
def shade(point: vec3, normal: vec3, to_viewer: vec3, object_index: ti.i32) -> vec3:
    """Shade a hit point, following mirror reflections.

    Sums the direct shading of the first hit and of every surface reached by
    successive perfect reflections off mirror objects. The chain ends at a
    non-mirror object, a reflection ray that escapes the scene, or after
    max_depth bounces.

    At every reflected hit V points from that hit toward the render camera,
    which also sets the direction of the next bounce.

    Args:
        point: First hit point.
        normal: Surface normal at the first hit (normalized here).
        to_viewer: Unit direction from the first hit toward the viewer.
        object_index: Store index of the hit object.

    Returns:
        Unclamped RGB color.
    """
    color = vec3(0.0, 0.0, 0.0)

    cur_point = point
    cur_normal = safe_normalize(normal)
    cur_view = to_viewer
    cur_index = object_index

    max_depth = _max_depth[None]
    depth = 0
    active = 1

    for _ in range(MAX_DEPTH_LIMIT + 1):
        if active == 1:
            color += shade_direct(cur_point, cur_normal, cur_view, cur_index)

            active = 0
            if object_mirror[cur_index] == 1 and depth < max_depth:
                reflected = safe_normalize(mirror_direction(cur_normal, cur_view))
                rec = find_closest_hit(cur_point, reflected, T_MIN)
                if rec.hit == 1:
                    cur_point = rec.point
                    cur_normal = safe_normalize(rec.normal)
                    cur_view = safe_normalize(get_camera_position() - cur_point)
                    cur_index = rec.object_index
                    depth += 1
                    active = 1

    return color


# =============================================================================
# Host-side Evaluation
# =============================================================================

_shade_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _shade_point_kernel(
    px: ti.f32, py: ti.f32, pz: ti.f32,
    nx: ti.f32, ny: ti.f32, nz: ti.f32,
    vx: ti.f32, vy: ti.f32, vz: ti.f32,
    object_index: ti.i32,
    follow_mirrors: ti.i32,
):  # fmt: skip
    point = vec3(px, py, pz)
    normal = safe_normalize(vec3(nx, ny, nz))
    to_viewer = safe_normalize(vec3(vx, vy, vz))
    if follow_mirrors == 1:
        _shade_result[None] = shade(point, normal, to_viewer, object_index)
    else:
        _shade_result[None] = shade_direct(point, normal, to_viewer, object_index)


def shade_point(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    to_viewer: tuple[float, float, float],
    object_index: int,
    follow_mirrors: bool = True,
) -> tuple[float, float, float]:
    """Shade one surface point from Python.

    Uses the currently uploaded scene and shading configuration.

    Args:
        point: The shaded point.
        normal: Surface normal at the point.
        to_viewer: Direction from the point toward the viewer. Reflected hits
            use the uploaded camera position instead.
        object_index: Store index of the object that owns the point.
        follow_mirrors: Follow mirror bounces (shade) or not (shade_direct).

    Returns:
        The unclamped RGB color.
    """
    _shade_point_kernel(
        float(point[0]), float(point[1]), float(point[2]),
        float(normal[0]), float(normal[1]), float(normal[2]),
        float(to_viewer[0]), float(to_viewer[1]), float(to_viewer[2]),
        int(object_index),
        int(follow_mirrors),
    )  # fmt: skip
    c = _shade_result[None]
    return (float(c[0]), float(c[1]), float(c[2]))
