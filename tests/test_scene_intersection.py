"""Unit tests for the GPU-side scene store and ray queries.

Tests cover:
- Adding and clearing objects and lights, capacity limits
- Closest-hit selection across mixed spheres and planes
- Culling of hits behind the ray origin
- Shadow-ray occlusion
- Picking priority between lights and objects
"""

import pytest
import taichi as ti


class TestSceneStore:
    """Tests for store management."""

    def test_add_and_clear(self):
        from phongtrace.scene.intersection import (
            add_light,
            add_plane,
            add_sphere,
            clear_scene,
            get_light_count,
            get_object_count,
        )

        assert add_sphere((0, 0, 0), 1.0) == 0
        assert add_plane((0, -1, 0), (0, 1, 0)) == 1
        assert add_light((0, 5, 0), 0.5) == 0
        assert get_object_count() == 2
        assert get_light_count() == 1

        clear_scene()
        assert get_object_count() == 0
        assert get_light_count() == 0

    def test_light_capacity(self):
        from phongtrace.scene.intersection import MAX_LIGHTS, add_light

        for i in range(MAX_LIGHTS):
            add_light((float(i), 0.0, 0.0), 1.0)

        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            add_light((0.0, 0.0, 0.0), 1.0)

    def test_object_capacity(self):
        from phongtrace.scene.intersection import MAX_OBJECTS, add_sphere, get_object_count

        for i in range(MAX_OBJECTS):
            add_sphere((float(i), 0.0, 0.0), 0.1)
        assert get_object_count() == MAX_OBJECTS

        with pytest.raises(RuntimeError, match="Maximum number of objects"):
            add_sphere((0.0, 0.0, 0.0), 1.0)

    def test_cull_flag(self):
        from phongtrace.scene.intersection import is_culling_behind_origin, set_cull_behind_origin

        assert is_culling_behind_origin()
        set_cull_behind_origin(False)
        assert not is_culling_behind_origin()
        set_cull_behind_origin(True)
        assert is_culling_behind_origin()


class TestClosestHit:
    """Tests for find_closest_hit via the host-side wrapper."""

    def test_empty_scene_misses(self):
        from phongtrace.scene.intersection import closest_hit

        assert closest_hit((0, 0, 0), (0, 0, -1)) is None

    def test_nearest_regardless_of_order(self):
        """Test that the nearer sphere wins even when added second."""
        from phongtrace.scene.intersection import add_sphere, closest_hit

        add_sphere((0.0, 0.0, -10.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)

        result = closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert result is not None
        assert result["object_index"] == 1
        assert abs(result["distance"] - 4.0) < 1e-4
        assert abs(result["normal"][2] - 1.0) < 1e-5

    def test_exact_tie_keeps_first(self):
        """Test that identical objects resolve to the earlier index."""
        from phongtrace.scene.intersection import add_sphere, closest_hit

        add_sphere((0.0, 0.0, -5.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)

        result = closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert result["object_index"] == 0

    def test_sphere_in_front_of_plane(self):
        """Test mixed shapes: a sphere resting above a floor."""
        from phongtrace.scene.intersection import add_plane, add_sphere, closest_hit

        add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        add_sphere((0.0, 0.0, 0.0), 1.0)

        down = closest_hit((0.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert down["object_index"] == 1
        assert abs(down["point"][1] - 1.0) < 1e-4

        beside = closest_hit((3.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert beside["object_index"] == 0
        assert abs(beside["point"][1] - (-1.0)) < 1e-4
        assert abs(beside["normal"][1] - 1.0) < 1e-6

    def test_behind_origin_culled_by_default(self):
        from phongtrace.scene.intersection import add_sphere, closest_hit

        add_sphere((0.0, 0.0, 5.0), 1.0)
        assert closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_behind_origin_hit_without_culling(self):
        """Test that negative t counts once culling is disabled."""
        from phongtrace.scene.intersection import add_sphere, closest_hit, set_cull_behind_origin

        add_sphere((0.0, 0.0, 5.0), 1.0)
        set_cull_behind_origin(False)

        result = closest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert result is not None
        assert result["object_index"] == 0
        assert result["point"][2] > 0.0


def _run_occluded(shaded_point, light_position):
    """Run is_occluded for a shaded point and a light (no bias)."""
    from phongtrace.core.ray import vec3
    from phongtrace.scene.intersection import is_occluded

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(px: ti.f32, py: ti.f32, pz: ti.f32, lx: ti.f32, ly: ti.f32, lz: ti.f32):
        point = vec3(px, py, pz)
        to_light = vec3(lx, ly, lz) - point
        distance = to_light.norm()
        result[None] = is_occluded(point, to_light / distance, point, distance)

    test_kernel(*shaded_point, *light_position)
    return result[None]


class TestOcclusion:
    """Tests for the shadow-ray query."""

    def test_blocker_between_point_and_light(self):
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 2.0, 0.0), 0.5)
        assert _run_occluded((0.0, 0.0, 0.0), (0.0, 5.0, 0.0)) == 1

    def test_blocker_beyond_light(self):
        """Test that objects farther than the light do not shadow."""
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 2.0, 0.0), 0.5)
        assert _run_occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 0

    def test_non_shadow_caster_ignored(self):
        from phongtrace.scene.intersection import add_sphere

        add_sphere((0.0, 2.0, 0.0), 0.5, casts_shadow=False)
        assert _run_occluded((0.0, 0.0, 0.0), (0.0, 5.0, 0.0)) == 0

    def test_clear_path(self):
        from phongtrace.scene.intersection import add_sphere

        add_sphere((3.0, 2.0, 0.0), 0.5)
        assert _run_occluded((0.0, 0.0, 0.0), (0.0, 5.0, 0.0)) == 0


class TestPick:
    """Tests for viewer-ray picking."""

    def test_nothing_hit(self):
        from phongtrace.scene.intersection import add_sphere, pick

        add_sphere((5.0, 0.0, -5.0), 1.0)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_object_picked(self):
        from phongtrace.scene.intersection import add_sphere, pick

        add_sphere((0.0, 0.0, -5.0), 1.0)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == ("object", 0)

    def test_light_wins_over_object(self):
        """Test that a hit light marker is picked even behind an object."""
        from phongtrace.scene.intersection import add_light, add_sphere, pick

        add_sphere((0.0, 0.0, -5.0), 1.0)
        add_light((0.0, 0.0, -10.0), 0.5, radius=0.5)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == ("light", 0)

    def test_unpickable_light_skipped(self):
        from phongtrace.scene.intersection import add_light, add_sphere, pick

        add_sphere((0.0, 0.0, -5.0), 1.0)
        add_light((0.0, 0.0, -3.0), 0.5, pickable=False)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == ("object", 0)

    def test_planes_not_pickable_by_default(self):
        from phongtrace.scene.intersection import add_plane, pick

        add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert pick((0.0, 5.0, 0.0), (0.0, -1.0, 0.0)) is None

    def test_nearest_object_position_wins(self):
        """Test that objects are ranked by position distance, not hit distance."""
        from phongtrace.scene.intersection import add_sphere, pick

        # Large sphere is hit first but its center is farther away
        add_sphere((0.0, 0.0, -8.0), 6.0)
        add_sphere((0.0, 0.0, -7.0), 0.5)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == ("object", 1)

    def test_last_hit_light_wins(self):
        """Test that a later light is picked even when it is farther away."""
        from phongtrace.scene.intersection import add_light, pick

        add_light((0.0, 0.0, -4.0), 0.5)
        add_light((0.0, 0.0, -10.0), 0.5)
        assert pick((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == ("light", 1)
