"""Host-side scene object model.

Scene objects are built by composition rather than a class hierarchy:

    SceneObject = name + shape (tagged variant) + colors + ObjectBehavior

The shape is either a SphereShape or a PlaneShape; GeometryKind is the tag
written to the GPU-side store. ObjectBehavior collects the optional
capabilities: mirror reflection, keyframe animation, and whether the object
takes part in viewer picking and in light occlusion.

Point lights are a separate record. They are drawn and picked as small
spheres but are never intersected by shadow or reflection rays.

Colors are linear RGB floats; 1.0 is full display intensity but shading
results may exceed it.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

Vec3 = tuple[float, float, float]

# Reference palette (display colors scaled to [0, 1])
LIGHT_GRAY: Vec3 = (211 / 255, 211 / 255, 211 / 255)
LIGHT_BLUE: Vec3 = (173 / 255, 216 / 255, 230 / 255)
WHITE: Vec3 = (1.0, 1.0, 1.0)
GREEN: Vec3 = (0.0, 1.0, 0.0)
YELLOW: Vec3 = (1.0, 1.0, 0.0)

DEFAULT_LIGHT_RADIUS = 0.5


class GeometryKind(IntEnum):
    """Tag identifying which shape a scene object carries."""

    SPHERE = 0
    PLANE = 1


def as_vec3(value: Any) -> Vec3:
    """Convert any 3-element sequence to a tuple of floats.

    Raises:
        ValueError: If value does not have exactly 3 components.
    """
    if len(value) != 3:
        raise ValueError(f"Expected 3 components, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass
class SphereShape:
    """Sphere geometry.

    Attributes:
        center: Center point.
        radius: Radius (positive).
    """

    center: Vec3
    radius: float = 1.0

    kind = GeometryKind.SPHERE

    def __post_init__(self) -> None:
        self.center = as_vec3(self.center)
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")


@dataclass
class PlaneShape:
    """Plane geometry.

    The plane is infinite for intersection purposes; width and height only
    size its drawn footprint.

    Attributes:
        point: A point on the plane (also its position).
        normal: Plane normal.
        width: Drawn footprint width.
        height: Drawn footprint height.
    """

    point: Vec3
    normal: Vec3 = (0.0, 1.0, 0.0)
    width: float = 40.0
    height: float = 40.0

    kind = GeometryKind.PLANE

    def __post_init__(self) -> None:
        self.point = as_vec3(self.point)
        self.normal = as_vec3(self.normal)
        if self.normal == (0.0, 0.0, 0.0):
            raise ValueError("Plane normal must be non-zero")


Shape = Union[SphereShape, PlaneShape]


@dataclass
class ObjectBehavior:
    """Optional capabilities attached to a scene object or light.

    Attributes:
        mirror: Follow a perfect mirror bounce when shading this object.
        animatable: Allow keyframe animation to move this object.
        pickable_by_camera: Whether viewer picking can select this object.
        casts_shadow: Whether this object blocks shadow rays.
        start_keyframe: Position at the first animation frame, if recorded.
        end_keyframe: Position at the last animation frame, if recorded.
    """

    mirror: bool = False
    animatable: bool = True
    pickable_by_camera: bool = True
    casts_shadow: bool = True
    start_keyframe: Vec3 | None = None
    end_keyframe: Vec3 | None = None

    @property
    def has_keyframes(self) -> bool:
        """True when both the start and end keyframes are recorded."""
        return self.start_keyframe is not None and self.end_keyframe is not None

    @property
    def moves(self) -> bool:
        """True when animation will move the owner."""
        return self.animatable and self.has_keyframes


@dataclass
class SceneObject:
    """An intersectable object in the scene.

    Attributes:
        name: Unique display name assigned by the scene manager.
        shape: The object's geometry.
        diffuse: Diffuse color (RGB).
        specular: Specular color (RGB).
        behavior: Capability flags and keyframes.
    """

    name: str
    shape: Shape
    diffuse: Vec3 = LIGHT_GRAY
    specular: Vec3 = LIGHT_GRAY
    behavior: ObjectBehavior = field(default_factory=ObjectBehavior)

    @property
    def kind(self) -> GeometryKind:
        return self.shape.kind

    @property
    def position(self) -> Vec3:
        """Sphere center or plane point."""
        if isinstance(self.shape, SphereShape):
            return self.shape.center
        return self.shape.point

    @position.setter
    def position(self, value: Vec3) -> None:
        if isinstance(self.shape, SphereShape):
            self.shape.center = as_vec3(value)
        else:
            self.shape.point = as_vec3(value)

    def set_start_keyframe(self, position: Vec3 | None = None) -> None:
        """Record the start keyframe (defaults to the current position)."""
        self.behavior.start_keyframe = as_vec3(position if position is not None else self.position)

    def set_end_keyframe(self, position: Vec3 | None = None) -> None:
        """Record the end keyframe (defaults to the current position)."""
        self.behavior.end_keyframe = as_vec3(position if position is not None else self.position)


@dataclass
class Light:
    """A point light.

    Attributes:
        name: Unique display name assigned by the scene manager.
        position: Light position.
        intensity: Scalar intensity, attenuated by the squared distance.
        color: Display color of the light marker.
        radius: Radius of the marker sphere used for picking.
        behavior: Capability flags and keyframes. Lights never cast shadows.
    """

    name: str
    position: Vec3
    intensity: float = 0.5
    color: Vec3 = WHITE
    radius: float = DEFAULT_LIGHT_RADIUS
    behavior: ObjectBehavior = field(
        default_factory=lambda: ObjectBehavior(casts_shadow=False)
    )

    def __post_init__(self) -> None:
        self.position = as_vec3(self.position)
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")
        if self.radius <= 0.0:
            raise ValueError(f"Light radius must be positive, got {self.radius}")
        self.behavior.casts_shadow = False

    def set_start_keyframe(self, position: Vec3 | None = None) -> None:
        """Record the start keyframe (defaults to the current position)."""
        self.behavior.start_keyframe = as_vec3(position if position is not None else self.position)

    def set_end_keyframe(self, position: Vec3 | None = None) -> None:
        """Record the end keyframe (defaults to the current position)."""
        self.behavior.end_keyframe = as_vec3(position if position is not None else self.position)
