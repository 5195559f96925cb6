"""Default demonstration scene.

Three spheres resting above a mirrored floor plane, lit by two point lights
and viewed by the default render camera:

- Yellow sphere (radius 1) behind the others at (1, 1, -5)
- Light blue sphere (radius 1) at the origin
- Small green sphere (radius 0.5) at (1.5, -0.5, 0)
- White mirror floor through (0, -1, 0) facing +y, 40x40 footprint
- Lights at (1, 5, 2) and (-1, 4, -3.5)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.default_scene import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> scene.get_object_count(), scene.get_light_count()
    (4, 2)
"""

from dataclasses import dataclass

from phongtrace.camera.render_camera import RenderCamera
from phongtrace.scene.manager import SceneManager
from phongtrace.scene.objects import GREEN, LIGHT_BLUE, WHITE, YELLOW


@dataclass
class DefaultSceneParams:
    """Tunable parts of the default scene.

    Attributes:
        light_intensity: Intensity of both point lights.
        floor_mirror: Whether the floor plane reflects.
        floor_animatable: Whether keyframe animation may move the floor.
        roll_green_sphere: Give the green sphere keyframes that roll it across
            the front of the scene, so an animated sequence shows motion.
    """

    light_intensity: float = 0.5
    floor_mirror: bool = True
    floor_animatable: bool = True
    roll_green_sphere: bool = False


def create_default_scene(
    params: DefaultSceneParams | None = None,
) -> tuple[SceneManager, RenderCamera]:
    """Create the default scene and camera.

    Args:
        params: Optional scene parameters; defaults are used when None.

    Returns:
        Tuple of (SceneManager, RenderCamera). The scene is not uploaded yet.
    """
    if params is None:
        params = DefaultSceneParams()

    scene = SceneManager()
    scene.add_sphere((1.0, 1.0, -5.0), 1.0, diffuse=YELLOW)
    scene.add_sphere((0.0, 0.0, 0.0), 1.0, diffuse=LIGHT_BLUE)
    green = scene.add_sphere((1.5, -0.5, 0.0), 0.5, diffuse=GREEN)
    if params.roll_green_sphere:
        green.set_start_keyframe()
        green.set_end_keyframe((-1.5, -0.5, 1.0))
    scene.add_plane(
        (0.0, -1.0, 0.0),
        (0.0, 1.0, 0.0),
        diffuse=WHITE,
        mirror=params.floor_mirror,
        animatable=params.floor_animatable,
    )

    scene.add_light((1.0, 5.0, 2.0), intensity=params.light_intensity)
    scene.add_light((-1.0, 4.0, -3.5), intensity=params.light_intensity)

    return scene, RenderCamera()
