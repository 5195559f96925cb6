"""Unit tests for the view plane and render camera.

Tests cover:
- ViewPlane size, aspect and (u, v) to world mapping, including extrapolation
- Host-side RenderCamera rays, frustum corners and field of view
- Taichi-side ray generation matching the host-side mapping
- Camera validation and serialization
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestViewPlane:
    """Tests for the ViewPlane dataclass."""

    def test_default_size(self):
        """Test the default 6x4 view plane at z = 5."""
        from phongtrace.camera.render_camera import ViewPlane

        view = ViewPlane()
        assert view.width == 6.0
        assert view.height == 4.0
        assert abs(view.aspect - 1.5) < 1e-12
        assert view.z == 5.0

    def test_to_world_corners_and_center(self):
        """Test the mapping (u * width + min.x, v * height + min.y, z)."""
        from phongtrace.camera.render_camera import ViewPlane

        view = ViewPlane()
        np.testing.assert_allclose(view.to_world(0.0, 0.0), [-3.0, -2.0, 5.0])
        np.testing.assert_allclose(view.to_world(1.0, 1.0), [3.0, 2.0, 5.0])
        np.testing.assert_allclose(view.to_world(0.5, 0.5), [0.0, 0.0, 5.0])

    def test_to_world_extrapolates(self):
        """Test that u, v outside [0, 1] are not clamped."""
        from phongtrace.camera.render_camera import ViewPlane

        view = ViewPlane()
        np.testing.assert_allclose(view.to_world(1.5, -0.5), [6.0, -4.0, 5.0])

    def test_corner_helpers(self):
        """Test the corner accessors."""
        from phongtrace.camera.render_camera import ViewPlane

        view = ViewPlane()
        assert view.top_left() == (-3.0, 2.0)
        assert view.top_right() == (3.0, 2.0)
        assert view.bottom_left() == (-3.0, -2.0)
        assert view.bottom_right() == (3.0, -2.0)

    def test_set_size(self):
        """Test replacing the view rectangle."""
        from phongtrace.camera.render_camera import ViewPlane

        view = ViewPlane()
        view.set_size((-1, -1), (1, 1))
        assert view.width == 2.0
        assert view.aspect == 1.0


class TestRenderCameraHost:
    """Tests for host-side RenderCamera helpers."""

    def test_get_ray_center(self):
        """Test the ray through the image center points straight down -z."""
        from phongtrace.camera.render_camera import RenderCamera

        camera = RenderCamera()
        origin, direction = camera.get_ray(0.5, 0.5)
        np.testing.assert_allclose(origin, [0.0, 0.0, 10.0])
        np.testing.assert_allclose(direction, [0.0, 0.0, -1.0], atol=1e-12)

    def test_get_ray_is_unit_length(self):
        """Test that ray directions are normalized."""
        from phongtrace.camera.render_camera import RenderCamera

        camera = RenderCamera()
        _, direction = camera.get_ray(0.1, 0.9)
        assert abs(np.linalg.norm(direction) - 1.0) < 1e-12

    def test_get_ray_degenerate_is_zero(self):
        """Test that a camera sitting on the view-plane point gives a zero direction."""
        from phongtrace.camera.render_camera import RenderCamera, ViewPlane

        camera = RenderCamera(position=(0.0, 0.0, 5.0), view=ViewPlane())
        _, direction = camera.get_ray(0.5, 0.5)
        np.testing.assert_array_equal(direction, [0.0, 0.0, 0.0])

    def test_frustum_corners(self):
        """Test the four world-space view-plane corners."""
        from phongtrace.camera.render_camera import RenderCamera

        corners = RenderCamera().frustum_corners()
        assert len(corners) == 4
        np.testing.assert_allclose(corners[0], [-3.0, -2.0, 5.0])
        np.testing.assert_allclose(corners[2], [3.0, 2.0, 5.0])

    def test_horizontal_fov(self):
        """Test the field of view subtended by the view plane."""
        from phongtrace.camera.render_camera import RenderCamera

        fov = RenderCamera().horizontal_fov_degrees()
        expected = math.degrees(2.0 * math.atan(3.0 / 5.0))
        assert abs(fov - expected) < 1e-9

    def test_dict_roundtrip(self):
        """Test camera serialization."""
        from phongtrace.camera.render_camera import RenderCamera, ViewPlane

        camera = RenderCamera(position=(1.0, 2.0, 3.0), view=ViewPlane((-1, -1), (1, 2), -4.0))
        restored = RenderCamera.from_dict(camera.to_dict())
        assert restored == camera

    def test_from_dict_defaults(self):
        """Test that missing keys keep the defaults."""
        from phongtrace.camera.render_camera import RenderCamera

        assert RenderCamera.from_dict({}) == RenderCamera()

    def test_from_dict_rejects_empty_view(self):
        """Test that a zero-size view plane is rejected."""
        from phongtrace.camera.render_camera import RenderCamera

        with pytest.raises(ValueError):
            RenderCamera.from_dict({"view_min": [1, 1], "view_max": [1, 2]})


class TestRenderCameraKernel:
    """Tests for Taichi-side camera state and ray generation."""

    def test_setup_camera_info(self):
        """Test that setup_camera uploads the camera state."""
        from phongtrace.camera.render_camera import RenderCamera, get_camera_info, setup_camera

        setup_camera(RenderCamera(position=(1.0, 2.0, 3.0)))
        info = get_camera_info()
        assert info["position"] == (1.0, 2.0, 3.0)
        assert info["view_min"] == (-3.0, -2.0)
        assert info["view_max"] == (3.0, 2.0)
        assert info["view_z"] == 5.0

    def test_setup_camera_rejects_empty_view(self):
        """Test that a zero-size view plane is rejected."""
        from phongtrace.camera.render_camera import RenderCamera, ViewPlane, setup_camera

        with pytest.raises(ValueError):
            setup_camera(RenderCamera(view=ViewPlane((0, 0), (0, 1))))

    def test_kernel_ray_matches_host_ray(self):
        """Test that get_ray in a kernel agrees with RenderCamera.get_ray."""
        from phongtrace.camera.render_camera import RenderCamera, get_ray, setup_camera

        camera = RenderCamera()
        setup_camera(camera)

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(u: ti.f32, v: ti.f32):
            ray = get_ray(u, v)
            origin[None] = ray.origin
            direction[None] = ray.direction

        for u, v in [(0.5, 0.5), (0.0, 0.0), (1.0, 0.25), (1.2, -0.1)]:
            test_kernel(u, v)
            host_origin, host_direction = camera.get_ray(u, v)
            np.testing.assert_allclose(origin[None].to_numpy(), host_origin, atol=1e-5)
            np.testing.assert_allclose(direction[None].to_numpy(), host_direction, atol=1e-5)

    def test_kernel_view_to_world(self):
        """Test view_to_world inside a kernel."""
        from phongtrace.camera.render_camera import RenderCamera, setup_camera, view_to_world

        setup_camera(RenderCamera())
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = view_to_world(0.25, 0.75)

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [-1.5, 1.0, 5.0], atol=1e-6)
