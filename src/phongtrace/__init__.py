"""Taichi-based Whitted-style ray tracer.

Renders scenes of spheres, infinite planes and point lights with:
- Ambient, Lambert diffuse and Phong specular shading
- Hard shadows
- Perfect mirror reflection with a bounded number of bounces
- Optional 3x3 supersampling anti-aliasing
- Linear keyframe animation rendered as numbered frame sequences

Subpackages:
    core: Ray utilities, configuration, shading, sampling and the RayTracer
    geometry: Sphere and plane primitives and their intersection routines
    camera: Render camera with a bounded view plane
    scene: Object model, GPU-side scene store, queries and scene manager
    animation: Keyframe interpolation and frame stepping
    preview: Display processing, Matplotlib preview and image export
"""

__version__ = "0.1.0"
