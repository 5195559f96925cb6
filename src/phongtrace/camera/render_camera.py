"""Render camera with a bounded, axis-aligned view plane.

The render camera is a point (the eye) plus a rectangular view plane. The
view plane is described in its own 2D coordinates by a min and max corner and
sits at a fixed world-space depth ``z`` facing the camera's forward (-z) axis.
Normalized image coordinates map onto it as

    to_world(u, v) = (u * width + min.x, v * height + min.y, z)

and the primary ray for (u, v) runs from the camera position through that
point. The view plane therefore fixes both field of view and aspect ratio.

u and v are not clamped: values outside [0, 1] extrapolate linearly, which
editors use to draw the frustum and pixel grid around the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.render_camera import RenderCamera, setup_camera, get_ray
    >>>
    >>> camera = RenderCamera()  # at (0, 0, 10) looking through z = 5
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from phongtrace.core.ray import Ray, make_ray, safe_normalize, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ViewPlane:
    """A finite view rectangle at a fixed depth.

    Attributes:
        min: Lower-left corner in the plane's local 2D space (x, y).
        max: Upper-right corner in the plane's local 2D space (x, y).
        z: World-space depth of the plane along the camera axis.
    """

    min: tuple[float, float] = (-3.0, -2.0)
    max: tuple[float, float] = (3.0, 2.0)
    z: float = 5.0

    @property
    def width(self) -> float:
        """Width of the view rectangle."""
        return self.max[0] - self.min[0]

    @property
    def height(self) -> float:
        """Height of the view rectangle."""
        return self.max[1] - self.min[1]

    @property
    def aspect(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def set_size(self, min_corner: tuple[float, float], max_corner: tuple[float, float]) -> None:
        """Replace the view rectangle bounds."""
        self.min = (float(min_corner[0]), float(min_corner[1]))
        self.max = (float(max_corner[0]), float(max_corner[1]))

    def to_world(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Map normalized (u, v) to a world-space point on the plane."""
        return np.array(
            [u * self.width + self.min[0], v * self.height + self.min[1], self.z],
            dtype=np.float64,
        )

    def top_left(self) -> tuple[float, float]:
        return (self.min[0], self.max[1])

    def top_right(self) -> tuple[float, float]:
        return self.max

    def bottom_left(self) -> tuple[float, float]:
        return self.min

    def bottom_right(self) -> tuple[float, float]:
        return (self.max[0], self.min[1])


@dataclass
class RenderCamera:
    """The camera images are rendered through.

    Attributes:
        position: Camera (eye) position in world space.
        view: The view plane rays are cast through.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 10.0)
    view: ViewPlane = field(default_factory=ViewPlane)

    def get_ray(
        self, u: float, v: float
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Compute the world-space ray through (u, v) on the host.

        Mirrors the Taichi get_ray() so editors can draw rays without
        launching a kernel.

        Returns:
            Tuple of (origin, unit direction). The direction is the zero
            vector if the camera sits on the view-plane point.
        """
        origin = np.array(self.position, dtype=np.float64)
        offset = self.view.to_world(u, v) - origin
        norm = float(np.linalg.norm(offset))
        direction = offset / norm if norm > 0.0 else np.zeros(3, dtype=np.float64)
        return origin, direction

    def frustum_corners(self) -> list[npt.NDArray[np.float64]]:
        """World-space view-plane corners: bottom-left, top-left, top-right, bottom-right."""
        return [
            self.view.to_world(0.0, 0.0),
            self.view.to_world(0.0, 1.0),
            self.view.to_world(1.0, 1.0),
            self.view.to_world(1.0, 0.0),
        ]

    def horizontal_fov_degrees(self) -> float:
        """Horizontal field of view subtended by the view plane, in degrees."""
        distance = abs(self.position[2] - self.view.z)
        return math.degrees(2.0 * math.atan2(self.view.width / 2.0, distance))

    def to_dict(self) -> dict[str, Any]:
        """Export the camera to a dictionary (for JSON serialization)."""
        return {
            "position": list(self.position),
            "view_min": list(self.view.min),
            "view_max": list(self.view.max),
            "view_z": self.view.z,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderCamera":
        """Create a camera from a dictionary; missing keys keep their defaults."""
        defaults = cls()
        position = data.get("position", list(defaults.position))
        view = ViewPlane(
            min=tuple(float(c) for c in data.get("view_min", defaults.view.min)),
            max=tuple(float(c) for c in data.get("view_max", defaults.view.max)),
            z=float(data.get("view_z", defaults.view.z)),
        )
        if view.width <= 0.0 or view.height <= 0.0:
            raise ValueError(f"View plane must have positive size, got {view.min} {view.max}")
        return cls(
            position=(float(position[0]), float(position[1]), float(position[2])),
            view=view,
        )


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_view_min = ti.Vector.field(2, dtype=ti.f32, shape=())
_view_max = ti.Vector.field(2, dtype=ti.f32, shape=())
_view_z = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: RenderCamera) -> None:
    """Copy camera state into Taichi fields.

    Must be called before rendering and again whenever the camera changes.

    Args:
        camera: The render camera to upload.

    Raises:
        ValueError: If the view plane has zero or negative size.
    """
    if camera.view.width <= 0.0 or camera.view.height <= 0.0:
        raise ValueError(
            f"View plane must have positive size, got min={camera.view.min} max={camera.view.max}"
        )
    _camera_position[None] = [float(c) for c in camera.position]
    _view_min[None] = [float(camera.view.min[0]), float(camera.view.min[1])]
    _view_max[None] = [float(camera.view.max[0]), float(camera.view.max[1])]
    _view_z[None] = float(camera.view.z)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def view_to_world(u: ti.f32, v: ti.f32) -> vec3:
    """Map normalized (u, v) to the world-space point on the view plane."""
    size = _view_max[None] - _view_min[None]
    return vec3(u * size.x + _view_min[None].x, v * size.y + _view_min[None].y, _view_z[None])


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the primary ray through normalized view coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate (extrapolates outside [0, 1]).
        v: Vertical coordinate (extrapolates outside [0, 1]).

    Returns:
        A Ray from the camera position toward the view-plane point.
    """
    origin = _camera_position[None]
    direction = safe_normalize(view_to_world(u, v) - origin)
    return make_ray(origin, direction)


@ti.func
def get_camera_position() -> vec3:
    """Get the camera position in world space."""
    return _camera_position[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with position, view_min, view_max and view_z.
    """
    pos = _camera_position[None]
    vmin = _view_min[None]
    vmax = _view_max[None]
    return {
        "position": (float(pos[0]), float(pos[1]), float(pos[2])),
        "view_min": (float(vmin[0]), float(vmin[1])),
        "view_max": (float(vmax[0]), float(vmax[1])),
        "view_z": float(_view_z[None]),
    }
