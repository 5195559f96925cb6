"""Pixel sampling and image rendering.

Each pixel (i, j) of a width x height image is sampled at the normalized
view-plane coordinates

    u = (i + 0.5) / width,  v = (j + 0.5) / height

with j = 0 the bottom row. A sample casts the camera ray through (u, v),
finds the closest hit and shades it; rays that hit nothing return the
background color.

With anti-aliasing on, the pixel is split into a 3x3 grid of sub-pixels and
the nine sub-pixel centers, offset by -1/3, 0 and +1/3 of a pixel on each
axis, are averaged channel by channel. Otherwise one sample at the pixel
center is taken.

Pixels are independent and are rendered in parallel. The color buffer is
preallocated at MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT; setup_render_target()
selects the active region.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.sampler import setup_render_target, render_image, get_image_numpy
    >>> setup_render_target(120, 80)
    >>> render_image(anti_alias=False)  # after uploading scene, camera and shading
    >>> image = get_image_numpy()  # (80, 120, 3), row 0 at the top
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from phongtrace.camera.render_camera import get_camera_position, get_ray
from phongtrace.core.ray import safe_normalize, vec3
from phongtrace.core.shading import get_background, shade
from phongtrace.scene.intersection import camera_t_min, find_closest_hit

# =============================================================================
# Render Target
# =============================================================================

# Maximum supported image dimensions (for preallocated buffers)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Sub-pixel grid is SUBPIXEL_GRID x SUBPIXEL_GRID when anti-aliasing
SUBPIXEL_GRID = 3

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [column, row] with row 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Sampling
# =============================================================================


@ti.func
def trace_camera_ray(u: ti.f32, v: ti.f32) -> vec3:
    """Color seen along the camera ray through view coordinates (u, v)."""
    ray = get_ray(u, v)
    rec = find_closest_hit(ray.origin, ray.direction, camera_t_min())

    color = get_background()
    if rec.hit == 1:
        to_viewer = safe_normalize(get_camera_position() - rec.point)
        color = shade(rec.point, rec.normal, to_viewer, rec.object_index)

    # NaN/Inf from degenerate geometry must not reach the image
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0

    return color


@ti.func
def sample_pixel(u: ti.f32, v: ti.f32, pixel_w: ti.f32, pixel_h: ti.f32, anti_alias: ti.i32) -> vec3:
    """Color of the pixel centered at (u, v).

    Args:
        u: Horizontal view coordinate of the pixel center.
        v: Vertical view coordinate of the pixel center.
        pixel_w: Pixel width in view coordinates (1 / image width).
        pixel_h: Pixel height in view coordinates (1 / image height).
        anti_alias: 1 to average a 3x3 sub-pixel grid, 0 for one center sample.

    Returns:
        Unclamped RGB color.
    """
    color = vec3(0.0, 0.0, 0.0)

    if anti_alias == 1:
        sub_w = pixel_w / SUBPIXEL_GRID
        sub_h = pixel_h / SUBPIXEL_GRID
        for s in range(SUBPIXEL_GRID * SUBPIXEL_GRID):
            sx = ti.cast(s % SUBPIXEL_GRID - 1, ti.f32)
            sy = ti.cast(s // SUBPIXEL_GRID - 1, ti.f32)
            color += trace_camera_ray(u + sx * sub_w, v + sy * sub_h)
        color /= SUBPIXEL_GRID * SUBPIXEL_GRID
    else:
        color = trace_camera_ray(u, v)

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, anti_alias: ti.i32):
    """Render every pixel of the active region into the color buffer."""
    pixel_w = 1.0 / ti.cast(width, ti.f32)
    pixel_h = 1.0 / ti.cast(height, ti.f32)
    for i, j in ti.ndrange(width, height):
        u = (ti.cast(i, ti.f32) + 0.5) * pixel_w
        v = (ti.cast(j, ti.f32) + 0.5) * pixel_h
        _color_buffer[i, j] = sample_pixel(u, v, pixel_w, pixel_h, anti_alias)


@ti.kernel
def _render_single_pixel(
    u: ti.f32, v: ti.f32, pixel_w: ti.f32, pixel_h: ti.f32, anti_alias: ti.i32
) -> vec3:
    return sample_pixel(u, v, pixel_w, pixel_h, anti_alias)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_pixel(
    u: float,
    v: float,
    pixel_w: float,
    pixel_h: float,
    anti_alias: bool = True,
) -> tuple[float, float, float]:
    """Render one pixel from Python.

    Uses the currently uploaded scene, camera and shading configuration; no
    render target is needed. For whole images use render_image(), which
    processes all pixels in parallel.

    Args:
        u: Horizontal view coordinate of the pixel center.
        v: Vertical view coordinate of the pixel center.
        pixel_w: Pixel width in view coordinates.
        pixel_h: Pixel height in view coordinates.
        anti_alias: Average a 3x3 sub-pixel grid when True.

    Returns:
        Tuple of (R, G, B), unclamped.
    """
    color = _render_single_pixel(
        float(u), float(v), float(pixel_w), float(pixel_h), int(anti_alias)
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(anti_alias: bool = True) -> None:
    """Render the full image into the color buffer.

    Args:
        anti_alias: Average a 3x3 sub-pixel grid per pixel when True.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_frame(width, height, int(anti_alias))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Values are not clamped; shading results may exceed 1.0.

    Returns:
        Array of shape (height, width, 3) and dtype float32 with row 0 at the
        top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (buffer row 0 is the bottom, images start at the top)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
