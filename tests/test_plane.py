"""Unit tests for infinite plane intersection.

Tests cover:
- Ray hitting the plane from either side
- Normal returned unmodified (no back-face flip)
- Parallel rays never hit
- Hits far outside any drawn footprint still count (infinite plane)
"""

import taichi as ti


def _run_hit(origin, direction, point, normal, t_min=1e-4, t_max=1e10):
    """Intersect one ray with one plane; return (hit, t, point, normal)."""
    from phongtrace.core.ray import vec3
    from phongtrace.geometry.plane import Plane, hit_plane

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    hit_point = ti.field(dtype=ti.math.vec3, shape=())
    hit_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        px: ti.f32, py: ti.f32, pz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        t0: ti.f32, t1: ti.f32,
    ):  # fmt: skip
        plane = Plane(point=vec3(px, py, pz), normal=vec3(nx, ny, nz))
        record = hit_plane(vec3(ox, oy, oz), vec3(dx, dy, dz), plane, t0, t1)
        hit[None] = record.hit
        t_val[None] = record.t
        hit_point[None] = record.point
        hit_normal[None] = record.normal

    test_kernel(*origin, *direction, *point, *normal, t_min, t_max)
    return hit[None], t_val[None], hit_point[None], hit_normal[None]


class TestPlaneBasics:
    """Tests for Plane dataclass."""

    def test_make_plane(self):
        """Test make_plane convenience function."""
        from phongtrace.core.ray import vec3
        from phongtrace.geometry.plane import make_plane

        normal_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            plane = make_plane(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
            normal_result[None] = plane.normal

        test_kernel()
        assert abs(normal_result[None][1] - 1.0) < 1e-6


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_from_above(self):
        """Test a ray pointing down onto a floor plane."""
        hit, t, p, n = _run_hit((0.0, 4.0, 0.0), (0.0, -1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))

        assert hit == 1
        assert abs(t - 5.0) < 1e-5
        assert abs(p[1] - (-1.0)) < 1e-5
        assert abs(n[1] - 1.0) < 1e-6

    def test_hit_from_below_keeps_normal(self):
        """Test that the plane normal is returned unmodified for back-side hits."""
        hit, t, _, n = _run_hit((0.0, -4.0, 0.0), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))

        assert hit == 1
        assert abs(t - 3.0) < 1e-5
        # Not flipped toward the ray
        assert abs(n[1] - 1.0) < 1e-6

    def test_non_unit_normal_returned_as_is(self):
        """Test that a non-normalized plane normal is passed through."""
        hit, _, _, n = _run_hit((0.0, 4.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, 0.0), (0.0, 2.0, 0.0))

        assert hit == 1
        assert abs(n[1] - 2.0) < 1e-6

    def test_parallel_ray_never_hits(self):
        """Test that a ray with dot(direction, normal) = 0 reports no hit."""
        hit, _, _, _ = _run_hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0

    def test_parallel_ray_in_plane_never_hits(self):
        """Test that a ray lying inside the plane reports no hit."""
        hit, _, _, _ = _run_hit((0.0, -1.0, 0.0), (0.0, 0.0, -1.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0

    def test_plane_behind_origin_is_missed(self):
        """Test that a plane behind the ray is not hit with a positive t_min."""
        hit, _, _, _ = _run_hit((0.0, 4.0, 0.0), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0

    def test_plane_behind_origin_hit_when_negative_t_allowed(self):
        """Test that a negative t counts when t_min allows it."""
        hit, t, _, _ = _run_hit(
            (0.0, 4.0, 0.0), (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), t_min=-1e10
        )
        assert hit == 1
        assert abs(t - (-5.0)) < 1e-5

    def test_plane_is_infinite(self):
        """Test a hit far outside a 40x40 footprint."""
        hit, _, p, _ = _run_hit(
            (500.0, 4.0, -300.0), (0.0, -1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert hit == 1
        assert abs(p[0] - 500.0) < 1e-3
