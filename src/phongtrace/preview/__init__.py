"""Preview module for output and visualization.

Components:
    display: Saturation, tone mapping, gamma and Matplotlib preview
    export: 8-bit conversion and image file export (Pillow)

Example:
    >>> from phongtrace.preview import save_image, show_preview
    >>> image = tracer.render()
    >>> show_preview(image)
    >>> save_image(image, "RayTraced.jpg")
"""

from phongtrace.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    saturate,
    show_preview,
    tone_map_reinhard,
)
from phongtrace.preview.export import frame_path, image_to_uint8, save_image

__all__ = [
    # Display functions
    "show_preview",
    # Display pipeline
    "saturate",
    "tone_map_reinhard",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_image",
    "image_to_uint8",
    "frame_path",
]
