"""Scene manager owning the editable object and light lists.

The SceneManager is the host-side source of truth for a scene. It keeps
ordered lists of SceneObject and Light records, hands out unique display
names from its own counter, and copies a snapshot of everything into the
GPU-side store (phongtrace.scene.intersection) before each render pass.

Editors and the animation stepper mutate the Python records between passes;
kernels only ever read the uploaded snapshot.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ball = scene.add_sphere((0, 0, 0), 1.0, diffuse=(0.0, 1.0, 0.0))
    >>> ball.name
    'Sphere_0'
    >>> scene.add_light((1, 5, 2), intensity=0.5).name
    'Light_1'
    >>> scene.upload()
"""

import logging
from typing import Any

from phongtrace.scene.intersection import (
    MAX_LIGHTS,
    MAX_OBJECTS,
    add_light,
    add_plane,
    add_sphere,
    clear_scene,
)
from phongtrace.scene.intersection import pick as _pick_in_store
from phongtrace.scene.objects import (
    DEFAULT_LIGHT_RADIUS,
    LIGHT_GRAY,
    WHITE,
    Light,
    ObjectBehavior,
    PlaneShape,
    SceneObject,
    SphereShape,
    Vec3,
    as_vec3,
)

logger = logging.getLogger(__name__)


def _optional_vec3(value: Any) -> Vec3 | None:
    return None if value is None else as_vec3(value)


class SceneManager:
    """Ordered collection of scene objects and point lights.

    Object and light order is insertion order; it is also the scan order of
    every ray query, so it decides exact ties.

    Attributes:
        objects: Intersectable objects (spheres and planes).
        lights: Point lights.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.objects: list[SceneObject] = []
        self.lights: list[Light] = []
        self._next_id = 0

    def _next_name(self, prefix: str) -> str:
        # One counter for every kind, so names stay unique across types
        name = f"{prefix}_{self._next_id}"
        self._next_id += 1
        return name

    def _check_object_capacity(self) -> None:
        if len(self.objects) >= MAX_OBJECTS:
            raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")

    # =========================================================================
    # Building the Scene
    # =========================================================================

    def add_sphere(
        self,
        center: Vec3,
        radius: float = 1.0,
        diffuse: Vec3 = LIGHT_GRAY,
        specular: Vec3 = LIGHT_GRAY,
        *,
        mirror: bool = False,
        animatable: bool = True,
        pickable_by_camera: bool = True,
        casts_shadow: bool = True,
    ) -> SceneObject:
        """Add a sphere to the scene.

        Args:
            center: Sphere center.
            radius: Sphere radius (positive).
            diffuse: Diffuse color as (R, G, B).
            specular: Specular color as (R, G, B).
            mirror: Follow mirror bounces off this sphere.
            animatable: Let keyframe animation move this sphere.
            pickable_by_camera: Let viewer picking select this sphere.
            casts_shadow: Let this sphere block shadow rays.

        Returns:
            The new SceneObject.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
            ValueError: If the radius is not positive.
        """
        self._check_object_capacity()
        obj = SceneObject(
            name=self._next_name("Sphere"),
            shape=SphereShape(center=center, radius=float(radius)),
            diffuse=as_vec3(diffuse),
            specular=as_vec3(specular),
            behavior=ObjectBehavior(
                mirror=mirror,
                animatable=animatable,
                pickable_by_camera=pickable_by_camera,
                casts_shadow=casts_shadow,
            ),
        )
        self.objects.append(obj)
        return obj

    def add_plane(
        self,
        point: Vec3,
        normal: Vec3 = (0.0, 1.0, 0.0),
        diffuse: Vec3 = WHITE,
        specular: Vec3 = LIGHT_GRAY,
        width: float = 40.0,
        height: float = 40.0,
        *,
        mirror: bool = False,
        animatable: bool = True,
        pickable_by_camera: bool = False,
        casts_shadow: bool = True,
    ) -> SceneObject:
        """Add an infinite plane to the scene.

        width and height only size the drawn footprint; intersection always
        uses the unbounded plane.

        Returns:
            The new SceneObject.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
            ValueError: If the normal is zero.
        """
        self._check_object_capacity()
        obj = SceneObject(
            name=self._next_name("Plane"),
            shape=PlaneShape(point=point, normal=normal, width=float(width), height=float(height)),
            diffuse=as_vec3(diffuse),
            specular=as_vec3(specular),
            behavior=ObjectBehavior(
                mirror=mirror,
                animatable=animatable,
                pickable_by_camera=pickable_by_camera,
                casts_shadow=casts_shadow,
            ),
        )
        self.objects.append(obj)
        return obj

    def add_light(
        self,
        position: Vec3,
        intensity: float = 0.5,
        color: Vec3 = WHITE,
        radius: float = DEFAULT_LIGHT_RADIUS,
        *,
        animatable: bool = True,
    ) -> Light:
        """Add a point light to the scene.

        Returns:
            The new Light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If the intensity is negative or the radius not positive.
        """
        if len(self.lights) >= MAX_LIGHTS:
            raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
        light = Light(
            name=self._next_name("Light"),
            position=position,
            intensity=float(intensity),
            color=as_vec3(color),
            radius=float(radius),
            behavior=ObjectBehavior(animatable=animatable, casts_shadow=False),
        )
        self.lights.append(light)
        return light

    # =========================================================================
    # Lookup and Removal
    # =========================================================================

    def get(self, name: str) -> SceneObject | Light:
        """Find an object or light by name.

        Raises:
            KeyError: If nothing in the scene has that name.
        """
        for item in (*self.objects, *self.lights):
            if item.name == name:
                return item
        raise KeyError(name)

    def remove(self, name: str) -> SceneObject | Light:
        """Remove an object or light by name and return it.

        Raises:
            KeyError: If nothing in the scene has that name.
        """
        item = self.get(name)
        if isinstance(item, Light):
            self.lights.remove(item)
        else:
            self.objects.remove(item)
        logger.debug("Removed %s", name)
        return item

    def clear(self) -> None:
        """Remove every object and light.

        The name counter is not reset, so names are never reused by one
        manager.
        """
        self.objects.clear()
        self.lights.clear()

    def get_object_count(self) -> int:
        """Get the number of intersectable objects."""
        return len(self.objects)

    def get_light_count(self) -> int:
        """Get the number of lights."""
        return len(self.lights)

    def movable(self) -> list[SceneObject | Light]:
        """Objects and lights that keyframe animation will move."""
        return [item for item in (*self.objects, *self.lights) if item.behavior.moves]

    # =========================================================================
    # GPU Snapshot
    # =========================================================================

    def upload(self) -> None:
        """Copy the current scene into the GPU-side store.

        Call once before each render pass. Changes made to the Python records
        afterwards are not seen by kernels until the next upload.
        """
        clear_scene()
        for obj in self.objects:
            behavior = obj.behavior
            flags = {
                "mirror": behavior.mirror,
                "casts_shadow": behavior.casts_shadow,
                "pickable": behavior.pickable_by_camera,
            }
            if isinstance(obj.shape, SphereShape):
                add_sphere(obj.shape.center, obj.shape.radius, obj.diffuse, obj.specular, **flags)
            else:
                add_plane(obj.shape.point, obj.shape.normal, obj.diffuse, obj.specular, **flags)
        for light in self.lights:
            add_light(light.position, light.intensity, light.radius)
        logger.debug(
            "Uploaded scene: %d objects, %d lights", len(self.objects), len(self.lights)
        )

    def pick(self, origin: Vec3, direction: Vec3) -> SceneObject | Light | None:
        """Select the light or object a viewer ray points at.

        Uploads the scene first, so the result reflects the current records.

        Returns:
            The picked Light or SceneObject, or None if the ray selects nothing.
        """
        self.upload()
        result = _pick_in_store(origin, direction)
        if result is None:
            return None
        kind, index = result
        if kind == "light":
            return self.lights[index]
        return self.objects[index]

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            Dictionary with "objects" and "lights" lists.
        """
        objects = []
        for obj in self.objects:
            behavior = obj.behavior
            entry: dict[str, Any] = {"name": obj.name}
            if isinstance(obj.shape, SphereShape):
                entry.update(
                    type="sphere", center=list(obj.shape.center), radius=obj.shape.radius
                )
            else:
                entry.update(
                    type="plane",
                    point=list(obj.shape.point),
                    normal=list(obj.shape.normal),
                    width=obj.shape.width,
                    height=obj.shape.height,
                )
            entry.update(
                diffuse=list(obj.diffuse),
                specular=list(obj.specular),
                mirror=behavior.mirror,
                animatable=behavior.animatable,
                pickable_by_camera=behavior.pickable_by_camera,
                casts_shadow=behavior.casts_shadow,
                start_keyframe=_keyframe_to_list(behavior.start_keyframe),
                end_keyframe=_keyframe_to_list(behavior.end_keyframe),
            )
            objects.append(entry)

        lights = [
            {
                "name": light.name,
                "position": list(light.position),
                "intensity": light.intensity,
                "color": list(light.color),
                "radius": light.radius,
                "animatable": light.behavior.animatable,
                "start_keyframe": _keyframe_to_list(light.behavior.start_keyframe),
                "end_keyframe": _keyframe_to_list(light.behavior.end_keyframe),
            }
            for light in self.lights
        ]
        return {"objects": objects, "lights": lights}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with one loaded from a dictionary.

        Names are assigned afresh from this manager's counter in load order.

        Args:
            data: Dictionary with "objects" and "lights" lists as written by
                to_dict(). Missing per-entry keys take the add_* defaults.

        Raises:
            ValueError: If an object type is unknown or geometry is invalid.
        """
        self.clear()
        for entry in data.get("objects", []):
            kind = entry.get("type", "sphere")
            flags = {
                key: bool(entry[key])
                for key in ("mirror", "animatable", "pickable_by_camera", "casts_shadow")
                if key in entry
            }
            colors = {key: entry[key] for key in ("diffuse", "specular") if key in entry}
            if kind == "sphere":
                obj = self.add_sphere(
                    entry["center"], float(entry.get("radius", 1.0)), **colors, **flags
                )
            elif kind == "plane":
                obj = self.add_plane(
                    entry["point"],
                    entry.get("normal", (0.0, 1.0, 0.0)),
                    width=float(entry.get("width", 40.0)),
                    height=float(entry.get("height", 40.0)),
                    **colors,
                    **flags,
                )
            else:
                raise ValueError(f"Unknown object type: {kind}")
            obj.behavior.start_keyframe = _optional_vec3(entry.get("start_keyframe"))
            obj.behavior.end_keyframe = _optional_vec3(entry.get("end_keyframe"))

        for entry in data.get("lights", []):
            light = self.add_light(
                entry["position"],
                float(entry.get("intensity", 0.5)),
                entry.get("color", WHITE),
                float(entry.get("radius", DEFAULT_LIGHT_RADIUS)),
                animatable=bool(entry.get("animatable", True)),
            )
            light.behavior.start_keyframe = _optional_vec3(entry.get("start_keyframe"))
            light.behavior.end_keyframe = _optional_vec3(entry.get("end_keyframe"))

        logger.info(
            "Loaded scene: %d objects, %d lights", len(self.objects), len(self.lights)
        )

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_objects() -> int:
        """Get the maximum number of objects supported."""
        return MAX_OBJECTS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS


def _keyframe_to_list(keyframe: Vec3 | None) -> list[float] | None:
    return None if keyframe is None else list(keyframe)
