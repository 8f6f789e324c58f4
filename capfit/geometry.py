"""Point / segment / line distances and projections.

All functions work on float64 numpy arrays. A segment [a, b] whose length is
below ``GEOMETRY_EPS`` is treated as the single point ``a``.
"""

import numpy as np

from .config import GEOMETRY_EPS
from .schemas import validate_points, validate_vector3


def segment_parameter(p, a, b):
    """Clamped projection parameter of `p` on segment [a, b].

    Returns ``t`` in [0, 1] such that ``a + t * (b - a)`` is the point of the
    segment closest to `p`, or ``None`` when the segment is degenerate.
    """
    ab = b - a
    length_sq = np.dot(ab, ab)
    if length_sq <= GEOMETRY_EPS**2:
        return None
    t = np.dot(p - a, ab) / length_sq
    return min(max(t, 0.0), 1.0)


def projection_on_segment(p, a, b):
    """Compute the projection of point `p` on segment [a, b].

    Points whose perpendicular foot falls outside the segment are bound to
    the nearest end point.

    Args:
        p: (3,) point.
        a: (3,) start point of segment.
        b: (3,) end point of segment.

    Returns:
        numpy.ndarray: (3,) closest point of [a, b] to `p`.
    """
    p = np.asarray(p, dtype=np.float64)
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    t = segment_parameter(p, a, b)
    if t is None:
        return a.copy()
    return a + t * (b - a)


def distance_point_to_segment(p, a, b):
    """Compute the distance from point `p` to segment [a, b].

    Args:
        p: (3,) point.
        a: (3,) start point of segment.
        b: (3,) end point of segment.

    Returns:
        float: Euclidean distance from `p` to the closest point of [a, b].
    """
    p = np.asarray(p, dtype=np.float64)
    return float(np.linalg.norm(p - projection_on_segment(p, a, b)))


def distances_points_to_segment(points, a, b):
    """Vectorized `distance_point_to_segment` for an (N, 3) array of points."""
    points = np.asarray(points, dtype=np.float64)
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    ab = b - a
    length_sq = np.dot(ab, ab)
    if length_sq <= GEOMETRY_EPS**2:
        return np.linalg.norm(points - a, axis=1)

    t = np.clip((points - a) @ ab / length_sq, 0.0, 1.0)
    closest = a + t[:, None] * ab
    return np.linalg.norm(points - closest, axis=1)


def distance_point_to_line(point, line_point, direction):
    """Distance from a point to the infinite line through `line_point` along `direction`.

    The direction does not need to be normalized, but it must not be zero.

    Raises:
        ValidationError: If `direction` is the zero vector.
    """
    point = validate_vector3(point, name="point")
    line_point = validate_vector3(line_point, name="line_point")
    direction = validate_vector3(direction, name="direction", nonzero=True)

    unit = direction / np.linalg.norm(direction)
    offset = point - line_point
    perpendicular = offset - np.dot(offset, unit) * unit
    return float(np.linalg.norm(perpendicular))


def max_distance_to_segment(points, a, b):
    """Largest distance from any of `points` to segment [a, b]."""
    points = validate_points(points)
    return float(distances_points_to_segment(points, a, b).max())
