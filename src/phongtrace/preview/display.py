"""Matplotlib-based preview display for rendered images.

Rendered colors are unclamped: several lights, high Kd/Ks values and mirror
bounces easily push channels past 1.0. The helpers here turn such an image
into something displayable.

Features:
    - Saturation (clamping to [0, 1]), the default for preview and export
    - Reinhard tone mapping for a softer roll-off of bright highlights
    - Optional gamma encoding

Example:
    >>> from phongtrace.preview.display import show_preview
    >>> image = tracer.render()
    >>> show_preview(image, title="Frame 0")
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard"]


def saturate(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Clamp every channel to [0, 1].

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        The clamped image.
    """
    return np.clip(image, 0.0, 1.0).astype(np.float32)


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding: out = in ** (1 / gamma).

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value; 1.0 leaves the image unchanged.

    Returns:
        Gamma encoded image, clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    # Clamp first so negative values cannot produce NaN
    image = saturate(image)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Prepare a rendered image for display or 8-bit storage.

    Applies the display pipeline:
    1. Tone mapping (optional)
    2. Gamma encoding (optional)
    3. Saturation to [0, 1]

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none" or "reinhard").
        gamma: Gamma value (default 1.0, colors are stored as computed).

    Returns:
        Processed image in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = image.copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return saturate(result)


def show_preview(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (12, 8),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Linear image array of shape (H, W, 3), row 0 at the top.
        tone_map: Tone mapping method ("none" or "reinhard").
        gamma: Gamma value (default 1.0).
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image, tone_map=tone_map, gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Ray Traced - {width}x{height}"
        if tone_map != "none":
            title += f" ({tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
