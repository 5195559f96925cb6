"""Unit tests for the host-side scene object model."""

import pytest

from phongtrace.scene.objects import (
    GeometryKind,
    Light,
    ObjectBehavior,
    PlaneShape,
    SceneObject,
    SphereShape,
    as_vec3,
)


class TestShapes:
    """Tests for SphereShape and PlaneShape validation."""

    def test_as_vec3(self):
        assert as_vec3([1, 2, 3]) == (1.0, 2.0, 3.0)
        with pytest.raises(ValueError):
            as_vec3((1.0, 2.0))

    def test_sphere_radius_must_be_positive(self):
        with pytest.raises(ValueError, match="radius"):
            SphereShape(center=(0, 0, 0), radius=0.0)

    def test_plane_normal_must_be_non_zero(self):
        with pytest.raises(ValueError, match="normal"):
            PlaneShape(point=(0, 0, 0), normal=(0, 0, 0))

    def test_kind_tags(self):
        sphere = SceneObject(name="s", shape=SphereShape(center=(0, 0, 0)))
        plane = SceneObject(name="p", shape=PlaneShape(point=(0, -1, 0)))
        assert sphere.kind == GeometryKind.SPHERE
        assert plane.kind == GeometryKind.PLANE


class TestSceneObject:
    """Tests for SceneObject position and keyframes."""

    def test_position_follows_shape(self):
        obj = SceneObject(name="s", shape=SphereShape(center=(1, 2, 3)))
        assert obj.position == (1.0, 2.0, 3.0)

        obj.position = (4, 5, 6)
        assert obj.shape.center == (4.0, 5.0, 6.0)

    def test_plane_position_is_point(self):
        obj = SceneObject(name="p", shape=PlaneShape(point=(0, -1, 0)))
        obj.position = (0, -2, 0)
        assert obj.shape.point == (0.0, -2.0, 0.0)

    def test_keyframes_default_to_current_position(self):
        obj = SceneObject(name="s", shape=SphereShape(center=(1, 0, 0)))
        assert not obj.behavior.has_keyframes

        obj.set_start_keyframe()
        obj.set_end_keyframe((2, 0, 0))
        assert obj.behavior.start_keyframe == (1.0, 0.0, 0.0)
        assert obj.behavior.end_keyframe == (2.0, 0.0, 0.0)
        assert obj.behavior.has_keyframes
        assert obj.behavior.moves

    def test_not_animatable_never_moves(self):
        behavior = ObjectBehavior(animatable=False, start_keyframe=(0, 0, 0), end_keyframe=(1, 0, 0))
        assert behavior.has_keyframes
        assert not behavior.moves


class TestLight:
    """Tests for the Light record."""

    def test_lights_never_cast_shadows(self):
        light = Light(name="l", position=(0, 5, 0), behavior=ObjectBehavior(casts_shadow=True))
        assert light.behavior.casts_shadow is False

    def test_invalid_values(self):
        with pytest.raises(ValueError, match="intensity"):
            Light(name="l", position=(0, 0, 0), intensity=-1.0)
        with pytest.raises(ValueError, match="radius"):
            Light(name="l", position=(0, 0, 0), radius=0.0)

    def test_keyframes(self):
        light = Light(name="l", position=(0, 5, 0))
        light.set_start_keyframe()
        light.set_end_keyframe((0, 1, 0))
        assert light.behavior.moves
