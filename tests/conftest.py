"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Modules declare their fields at import time, so every test imports
    the package inside the test body, after this fixture has run. Double
    precision is required for the over-point offset to be meaningful.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture
def assert_color():
    """Return a helper comparing a color with an expected RGB triple."""

    def _assert_color(actual, expected, tol=1e-4):
        for i in range(3):
            assert abs(float(actual[i]) - expected[i]) < tol, (
                f"component {i}: {float(actual[i])} != {expected[i]}"
            )

    return _assert_color
