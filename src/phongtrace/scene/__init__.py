"""Scene description, GPU-side store and ray queries.

Components:
    objects: Host-side object model (shapes, behaviors, lights)
    intersection: GPU-side object store and closest-hit / occlusion / pick queries
    manager: SceneManager owning the editable lists and uploading snapshots
    default_scene: The demonstration scene

Importing intersection, manager or default_scene allocates Taichi fields, so
call ti.init() before importing them.
"""

from .objects import (
    GeometryKind,
    Light,
    ObjectBehavior,
    PlaneShape,
    SceneObject,
    SphereShape,
)

__all__ = [
    "GeometryKind",
    "Light",
    "ObjectBehavior",
    "PlaneShape",
    "SceneObject",
    "SphereShape",
]
