"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset the GPU-side scene store, shading state and camera around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are allocated
    from phongtrace.camera.render_camera import RenderCamera, setup_camera
    from phongtrace.core.config import ShadingConfig
    from phongtrace.core.shading import setup_shading
    from phongtrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        setup_shading(ShadingConfig())
        setup_camera(RenderCamera())

    _clear_all()

    yield

    _clear_all()
