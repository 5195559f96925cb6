"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    config: Shading and render configuration dataclasses
    shading: Ambient + Lambert + Phong shading with shadows and mirror bounces
    sampler: Per-pixel sampling (single sample or 3x3 supersampling)
    renderer: RayTracer for still images and animated sequences

All per-ray work runs in Taichi kernels; pixels are rendered in parallel.
"""

from .config import (
    MAX_DEPTH_LIMIT,
    RenderOptions,
    RenderSettings,
    ShadingConfig,
    options_from_dict,
    options_to_dict,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    mirror_direction,
    ray_at,
    safe_normalize,
    vec3,
)

# Note: shading, sampler and renderer are NOT imported here because they
# allocate Taichi fields on import. Import them after ti.init(), e.g.
#   from phongtrace.core.renderer import RayTracer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "dot",
    "cross",
    "safe_normalize",
    "mirror_direction",
    "ShadingConfig",
    "RenderSettings",
    "RenderOptions",
    "MAX_DEPTH_LIMIT",
    "options_from_dict",
    "options_to_dict",
]
