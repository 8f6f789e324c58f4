"""Shared pytest fixtures for capfit tests."""

import numpy as np
import pytest

# ---------------------------------------------------------------------------
# Point clouds
# ---------------------------------------------------------------------------


@pytest.fixture
def rng():
    """Seeded random generator so tests are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def elongated_points(rng):
    """500 points spread along X (length 10) with a thin Gaussian cross-section."""
    n = 500
    x = rng.uniform(-5.0, 5.0, n)
    yz = rng.normal(0.0, 0.3, (n, 2))
    return np.column_stack([x, yz])


@pytest.fixture
def unit_sphere_points(rng):
    """100 points uniformly-ish sampled on a unit sphere."""
    pts = rng.standard_normal((100, 3))
    return pts / np.linalg.norm(pts, axis=1, keepdims=True)


@pytest.fixture
def unit_cube_vertices():
    """The 8 corners of the unit cube [0, 1]^3."""
    return np.array(
        [[x, y, z] for x in (0.0, 1.0) for y in (0.0, 1.0) for z in (0.0, 1.0)],
        dtype=np.float64,
    )


@pytest.fixture
def box_points(rng):
    """Corners of the box [-3, 3] x [-1, 1] x [-1, 1] followed by 200 interior points."""
    corners = np.array(
        [[x, y, z] for x in (-3.0, 3.0) for y in (-1.0, 1.0) for z in (-1.0, 1.0)],
        dtype=np.float64,
    )
    interior = rng.uniform([-2.9, -0.9, -0.9], [2.9, 0.9, 0.9], (200, 3))
    return np.vstack([corners, interior])


# ---------------------------------------------------------------------------
# Capsule parameter vectors
# ---------------------------------------------------------------------------


@pytest.fixture
def random_parameter_vectors(rng):
    """25 parameter vectors with axis length > 0.5 and radius > 0.1."""
    vectors = []
    while len(vectors) < 25:
        p0 = rng.uniform(-2.0, 2.0, 3)
        p1 = rng.uniform(-2.0, 2.0, 3)
        if np.linalg.norm(p1 - p0) < 0.5:
            continue
        radius = rng.uniform(0.1, 1.5)
        vectors.append(np.concatenate([p0, p1, [radius]]))
    return vectors
