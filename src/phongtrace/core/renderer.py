"""High-level ray tracer for still images and animated sequences.

RayTracer ties together the pieces a render pass needs:

- the SceneManager whose snapshot is uploaded at the start of every pass
- the RenderCamera and ShadingConfig copied into Taichi fields
- RenderSettings choosing the image size, anti-aliasing and animation length

Scene positions change only between passes: render_sequence() steps the
animation, then uploads and renders the next frame.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.renderer import RayTracer
    >>> from phongtrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> tracer = RayTracer(scene, camera)
    >>> tracer.render_to_file("RayTraced.jpg")
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from phongtrace.animation.keyframes import Animator
from phongtrace.camera.render_camera import RenderCamera, setup_camera
from phongtrace.core.config import RenderSettings, ShadingConfig
from phongtrace.core.sampler import (
    get_image_numpy,
    render_image,
    render_pixel,
    setup_render_target,
)
from phongtrace.core.shading import setup_shading
from phongtrace.preview.export import frame_path, save_image
from phongtrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for sequence progress callback
# Callback receives (frame_just_saved, total_frames)
FrameCallback = Callable[[int, int], None]


class RayTracer:
    """Renders a scene through a camera with fixed shading settings.

    Attributes:
        scene: The scene to render. Uploaded at the start of each pass.
        camera: The render camera.
        shading: Shading coefficients.
        settings: Image size, anti-aliasing and animation length.
        animator: Frame stepper used by render_sequence().
    """

    def __init__(
        self,
        scene: SceneManager,
        camera: RenderCamera | None = None,
        shading: ShadingConfig | None = None,
        settings: RenderSettings | None = None,
    ) -> None:
        """Create a ray tracer.

        Raises:
            ValueError: If the shading or render settings are invalid.
        """
        self.scene = scene
        self.camera = camera if camera is not None else RenderCamera()
        self.shading = shading if shading is not None else ShadingConfig()
        self.settings = settings if settings is not None else RenderSettings()
        self.shading.validate()
        self.settings.validate()
        self.animator = Animator(scene, self.settings.total_frames)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    def prepare(self) -> None:
        """Upload render target, camera, shading and scene for one pass.

        Raises:
            ValueError: If the settings, camera or image size are invalid.
        """
        self.settings.validate()
        setup_render_target(self.width, self.height)
        setup_camera(self.camera)
        setup_shading(self.shading)
        self.scene.upload()

    def render(self) -> npt.NDArray[np.float32]:
        """Render one image of the current scene.

        Returns:
            Unclamped float32 array of shape (height, width, 3), row 0 at the top.
        """
        self.prepare()
        logger.info(
            "Rendering %dx%d, anti-aliasing %s",
            self.width,
            self.height,
            "on" if self.settings.anti_aliasing else "off",
        )
        start = time.perf_counter()
        render_image(anti_alias=self.settings.anti_aliasing)
        image = get_image_numpy()
        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return image

    def render_pixel(self, u: float, v: float) -> tuple[float, float, float]:
        """Render the pixel centered at view coordinates (u, v).

        Uses the image size of the current settings for the pixel footprint.
        """
        self.prepare()
        return render_pixel(
            u, v, 1.0 / self.width, 1.0 / self.height, self.settings.anti_aliasing
        )

    def render_to_file(self, filepath: str | Path | None = None) -> Path:
        """Render one image and save it.

        Args:
            filepath: Output path (default: settings.output).

        Returns:
            The path written.
        """
        image = self.render()
        path = save_image(image, filepath if filepath is not None else self.settings.output)
        logger.info("Saved %s", path)
        return path

    def render_sequence(
        self,
        filepath: str | Path | None = None,
        callback: FrameCallback | None = None,
    ) -> Generator[tuple[int, Path], None, None]:
        """Render every frame of the animation, yielding after each one.

        Frames 0 through total_frames (inclusive) are rendered. Frame 0 resets
        every moving object and light to its start keyframe; the animation is
        stepped only between passes. Each frame is saved with its number
        inserted before the suffix (RayTraced.jpg -> RayTraced.0.jpg, ...).

        Args:
            filepath: Base output path (default: settings.output).
            callback: Optional function called after each saved frame with
                (frame, total_frames).

        Yields:
            Tuple of (frame, path written).
        """
        base = filepath if filepath is not None else self.settings.output
        total = self.settings.total_frames

        self.animator.total_frames = total
        self.animator.reset()
        logger.info("Rendering sequence of %d frames", total + 1)

        for frame in range(total + 1):
            if frame > 0:
                self.animator.step()
            path = self.render_to_file(frame_path(base, self.animator.frame))
            if callback is not None:
                callback(self.animator.frame, total)
            yield (self.animator.frame, path)

    def __repr__(self) -> str:
        """Return a string representation of the tracer state."""
        return (
            f"RayTracer(width={self.width}, height={self.height}, "
            f"objects={self.scene.get_object_count()}, lights={self.scene.get_light_count()})"
        )
