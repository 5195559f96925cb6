"""Image export utilities for rendered images.

Rendered images are float arrays with unclamped channels. Export saturates
them to [0, 1], converts to 8 bits and writes the file with Pillow; the file
format follows the path suffix (the default output is JPEG).

Animated sequences write one file per frame with the frame number inserted
before the suffix: RayTraced.jpg becomes RayTraced.0.jpg, RayTraced.1.jpg, ...

Example:
    >>> from phongtrace.preview.export import frame_path, save_image
    >>> save_image(image, "RayTraced.jpg")
    >>> str(frame_path("RayTraced.jpg", 12))
    'RayTraced.12.jpg'
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from phongtrace.preview.display import ToneMapMethod, process_image_for_display


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none" or "reinhard").
        gamma: Gamma value (default 1.0).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma)
    return np.round(processed * 255.0).astype(np.uint8)


def save_image(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> Path:
    """Save a rendered image to a file.

    Args:
        image: Linear image array of shape (H, W, 3), row 0 at the top.
        filepath: Output path; the suffix picks the format (.jpg, .png, ...).
        tone_map: Tone mapping method ("none" or "reinhard").
        gamma: Gamma value (default 1.0).

    Returns:
        The path written.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(path)
    return path


def frame_path(filepath: str | Path, frame: int) -> Path:
    """Path of one frame of an animated sequence.

    Args:
        filepath: Base output path, e.g. "RayTraced.jpg".
        frame: Frame index.

    Returns:
        The base path with ".<frame>" inserted before the suffix.
    """
    path = Path(filepath)
    return path.with_name(f"{path.stem}.{frame}{path.suffix}")
