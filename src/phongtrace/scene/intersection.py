"""GPU-side scene store and ray-scene queries.

This module keeps the render-time snapshot of the scene in Taichi fields and
answers the three ray queries the renderer and editors need:

    find_closest_hit: nearest intersection along a ray (camera and mirror rays)
    is_occluded: whether anything blocks a shaded point from a light
    pick: which light or object a viewer ray selects

Objects of every shape share one Structure-of-Arrays store indexed by object
index. object_kinds holds the GeometryKind tag; the geometry columns are read
according to that tag. Lights have their own store.

All queries are linear scans over the store in insertion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.intersection import add_sphere, clear_scene, closest_hit
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -3.0), 1.0, diffuse=(1.0, 0.0, 0.0))
    0
    >>> closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))["object_index"]
    0
"""

from typing import Any

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import vec3
from phongtrace.geometry.plane import Plane, hit_plane
from phongtrace.geometry.sphere import HitRecord, Sphere, hit_sphere
from phongtrace.scene.objects import GeometryKind

# Largest parametric distance considered by any query
T_MAX = 1e10

# Smallest accepted parametric distance when hits behind the origin are culled
T_MIN = 1e-4

# Kind tags as plain ints for use inside kernels
KIND_SPHERE = int(GeometryKind.SPHERE)
KIND_PLANE = int(GeometryKind.PLANE)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any object was hit, 0 otherwise.
        distance: Euclidean distance from the ray origin to the hit point.
        point: The hit point. Only valid if hit == 1.
        normal: The surface normal at the hit point. Only valid if hit == 1.
        object_index: Index of the hit object in the store, -1 on a miss.
    """

    hit: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    object_index: ti.i32


# Maximum number of primitives and lights supported in the scene
MAX_OBJECTS = 256
MAX_LIGHTS = 32

# Object storage: Structure of Arrays layout
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
# Sphere center or plane point
object_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_mirror = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_casts_shadow = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_pickable = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Light storage
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_radii = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_pickable = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Lower bound on accepted t for viewer rays (see set_cull_behind_origin)
_t_min = ti.field(dtype=ti.f32, shape=())
_t_min[None] = T_MIN

# Result slots for host-side queries
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_index = ti.field(dtype=ti.i32, shape=())
_query_distance = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_pick_kind = ti.field(dtype=ti.i32, shape=())
_pick_index = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Store Management (Python scope)
# =============================================================================


def clear_scene() -> None:
    """Remove all objects and lights from the store.

    Resets the counts to zero. The field data is overwritten as new entries
    are added.
    """
    num_objects[None] = 0
    num_lights[None] = 0


def _next_object_slot() -> int:
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    return idx


def _write_surface(
    idx: int,
    diffuse: tuple[float, float, float],
    specular: tuple[float, float, float],
    mirror: bool,
    casts_shadow: bool,
    pickable: bool,
) -> None:
    object_diffuse[idx] = [float(c) for c in diffuse]
    object_specular[idx] = [float(c) for c in specular]
    object_mirror[idx] = int(mirror)
    object_casts_shadow[idx] = int(casts_shadow)
    object_pickable[idx] = int(pickable)
    num_objects[None] = idx + 1


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    diffuse: tuple[float, float, float] = (1.0, 1.0, 1.0),
    specular: tuple[float, float, float] = (1.0, 1.0, 1.0),
    *,
    mirror: bool = False,
    casts_shadow: bool = True,
    pickable: bool = True,
) -> int:
    """Add a sphere to the store.

    Returns:
        The object index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_object_slot()
    object_kinds[idx] = KIND_SPHERE
    object_positions[idx] = [float(c) for c in center]
    object_radii[idx] = float(radius)
    object_normals[idx] = [0.0, 0.0, 0.0]
    _write_surface(idx, diffuse, specular, mirror, casts_shadow, pickable)
    return idx


def add_plane(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    diffuse: tuple[float, float, float] = (1.0, 1.0, 1.0),
    specular: tuple[float, float, float] = (1.0, 1.0, 1.0),
    *,
    mirror: bool = False,
    casts_shadow: bool = True,
    pickable: bool = False,
) -> int:
    """Add an infinite plane to the store.

    Returns:
        The object index of the added plane.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_object_slot()
    object_kinds[idx] = KIND_PLANE
    object_positions[idx] = [float(c) for c in point]
    object_radii[idx] = 0.0
    object_normals[idx] = [float(c) for c in normal]
    _write_surface(idx, diffuse, specular, mirror, casts_shadow, pickable)
    return idx


def add_light(
    position: tuple[float, float, float],
    intensity: float,
    radius: float = 0.5,
    *,
    pickable: bool = True,
) -> int:
    """Add a point light to the store.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [float(c) for c in position]
    light_intensities[idx] = float(intensity)
    light_radii[idx] = float(radius)
    light_pickable[idx] = int(pickable)
    num_lights[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of objects in the store."""
    return int(num_objects[None])


def get_light_count() -> int:
    """Get the number of lights in the store."""
    return int(num_lights[None])


def set_cull_behind_origin(cull: bool) -> None:
    """Choose whether camera and picking rays reject hits behind their origin.

    Shadow and mirror rays always start on a surface and always cull, since
    accepting negative t there would make every surface shadow and reflect
    itself.

    Args:
        cull: True to accept only hits with t > T_MIN; False to accept any
            root of the intersection equation, including negative t.
    """
    _t_min[None] = T_MIN if cull else -T_MAX


def is_culling_behind_origin() -> bool:
    """Whether camera and picking rays currently reject hits behind the origin."""
    return bool(_t_min[None] > 0.0)


# =============================================================================
# Ray Queries (Taichi scope)
# =============================================================================


@ti.func
def camera_t_min() -> ti.f32:
    """Lower bound on t for rays cast from the viewer."""
    return _t_min[None]


@ti.func
def hit_object(i: ti.i32, ray_origin: vec3, ray_direction: vec3, t_min: ti.f32) -> HitRecord:
    """Intersect a ray with store object i, dispatching on its kind tag."""
    rec = HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))
    if object_kinds[i] == KIND_SPHERE:
        sphere = Sphere(center=object_positions[i], radius=object_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, T_MAX)
    else:
        plane = Plane(point=object_positions[i], normal=object_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, T_MAX)
    return rec


@ti.func
def find_closest_hit(ray_origin: vec3, ray_direction: vec3, t_min: ti.f32) -> SceneHitRecord:
    """Find the nearest object hit along a ray.

    Every object is tested; the hit whose point is closest (Euclidean
    distance) to the ray origin wins. Exact ties keep the earlier object.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Exclusive lower bound on accepted t. Camera rays pass
            camera_t_min(); mirror rays pass T_MIN.

    Returns:
        A SceneHitRecord; hit == 0 and object_index == -1 when nothing is hit.
    """
    closest = T_MAX
    did_hit = 0
    best_point = vec3(0.0, 0.0, 0.0)
    best_normal = vec3(0.0, 0.0, 0.0)
    best_index = -1

    for i in range(num_objects[None]):
        rec = hit_object(i, ray_origin, ray_direction, t_min)
        if rec.hit == 1:
            dist = tm.length(rec.point - ray_origin)
            if dist < closest:
                closest = dist
                did_hit = 1
                best_point = rec.point
                best_normal = rec.normal
                best_index = i

    return SceneHitRecord(
        hit=did_hit,
        distance=ti.select(did_hit == 1, closest, 0.0),
        point=best_point,
        normal=best_normal,
        object_index=best_index,
    )


@ti.func
def is_occluded(
    shadow_origin: vec3,
    light_direction: vec3,
    shaded_point: vec3,
    light_distance: ti.f32,
) -> ti.i32:
    """Test whether a light is blocked from a shaded point (shadow ray query).

    The shadow ray starts at a biased origin slightly off the surface, but
    blocker distances are measured from the shaded point itself. A blocker
    counts only if it is strictly closer than the light.

    Args:
        shadow_origin: Biased start of the shadow ray.
        light_direction: Unit direction from the shaded point to the light.
        shaded_point: The point being shaded.
        light_distance: Distance from the shaded point to the light.

    Returns:
        1 if any shadow-casting object blocks the light, 0 otherwise.
    """
    blocked = 0

    for i in range(num_objects[None]):
        if blocked == 0 and object_casts_shadow[i] == 1:
            rec = hit_object(i, shadow_origin, light_direction, T_MIN)
            if rec.hit == 1:
                if tm.length(rec.point - shaded_point) < light_distance:
                    blocked = 1

    return blocked


# =============================================================================
# Host-side Queries
# =============================================================================


@ti.kernel
def _closest_hit_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    rec = find_closest_hit(vec3(ox, oy, oz), vec3(dx, dy, dz), _t_min[None])
    _query_hit[None] = rec.hit
    _query_index[None] = rec.object_index
    _query_distance[None] = rec.distance
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal


def closest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> dict[str, Any] | None:
    """Find the nearest object hit along a ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction (should be unit length).

    Returns:
        None on a miss, otherwise a dictionary with object_index, distance,
        point and normal.
    """
    _closest_hit_kernel(
        float(origin[0]), float(origin[1]), float(origin[2]),
        float(direction[0]), float(direction[1]), float(direction[2]),
    )  # fmt: skip
    if _query_hit[None] == 0:
        return None
    point = _query_point[None]
    normal = _query_normal[None]
    return {
        "object_index": int(_query_index[None]),
        "distance": float(_query_distance[None]),
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
    }


# Pick result kinds
PICK_NONE = 0
PICK_OBJECT = 1
PICK_LIGHT = 2


@ti.func
def pick_target(origin: vec3, direction: vec3) -> tm.ivec2:
    """Resolve a picking ray to (pick kind, index).

    Returns:
        ivec2 of (PICK_NONE, -1), (PICK_OBJECT, object index) or
        (PICK_LIGHT, light index).
    """
    t_min = _t_min[None]

    kind = PICK_NONE
    index = -1

    # Pickable objects: nearest by distance from the viewer to the object position
    closest = T_MAX
    for i in range(num_objects[None]):
        if object_pickable[i] == 1:
            rec = hit_object(i, origin, direction, t_min)
            if rec.hit == 1:
                dist = tm.length(object_positions[i] - origin)
                if dist < closest:
                    closest = dist
                    kind = PICK_OBJECT
                    index = i

    # Any hit light overrides objects, and a later light overrides an earlier one
    for i in range(num_lights[None]):
        if light_pickable[i] == 1:
            marker = Sphere(center=light_positions[i], radius=light_radii[i])
            rec = hit_sphere(origin, direction, marker, t_min, T_MAX)
            if rec.hit == 1:
                kind = PICK_LIGHT
                index = i

    return tm.ivec2(kind, index)


@ti.kernel
def _pick_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    result = pick_target(vec3(ox, oy, oz), vec3(dx, dy, dz))
    _pick_kind[None] = result[0]
    _pick_index[None] = result[1]


def pick(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[str, int] | None:
    """Select the light or object a viewer ray points at.

    Any light marker the ray hits wins over objects. Distances are not
    compared among lights: the last hit light in store order is chosen.
    Among objects only camera-pickable ones are considered, and the one
    whose position is nearest the ray origin is chosen.

    Args:
        origin: Viewer position.
        direction: Unit direction of the picking ray.

    Returns:
        ("light", index) or ("object", index), or None if nothing is hit.
    """
    _pick_kernel(
        float(origin[0]), float(origin[1]), float(origin[2]),
        float(direction[0]), float(direction[1]), float(direction[2]),
    )  # fmt: skip
    kind = int(_pick_kind[None])
    if kind == PICK_LIGHT:
        return ("light", int(_pick_index[None]))
    if kind == PICK_OBJECT:
        return ("object", int(_pick_index[None]))
    return None
