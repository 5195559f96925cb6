"""Camera module for view and ray generation.

Components:
    render_camera: Eye point plus bounded view plane; primary ray generation

Camera responsibilities:
    - Map normalized (u, v) image coordinates to world-space points on the
      view plane
    - Build the primary ray from the camera position through that point
    - Expose frustum corners and field of view for editors

Ray generation uses normalized coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .render_camera import (
    RenderCamera,
    ViewPlane,
    get_camera_info,
    get_camera_position,
    get_ray,
    setup_camera,
    view_to_world,
)

__all__ = [
    "RenderCamera",
    "ViewPlane",
    "setup_camera",
    "get_ray",
    "view_to_world",
    "get_camera_position",
    "get_camera_info",
]
