"""Convex hull construction and aggregation of polyhedron collections.

A polyhedron is represented by its vertex set: an (M, 3) float64 array of
unique points. A polyhedron collection is a list of such arrays.
"""

import logging

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from .schemas import ConvexHullError, validate_points, validate_polyhedrons

logger = logging.getLogger(__name__)

# A 3D hull needs at least a tetrahedron
MIN_HULL_POINTS = 4


def convex_hull_from_points(points):
    """
    Create a convex hull polyhedron from a set of points.

    Args:
        points: (N, 3) array of points, N >= 4 and not all coplanar.

    Returns:
        numpy.ndarray: (M, 3) hull vertices, in increasing order of their
        index in `points`.

    Raises:
        ValidationError: If `points` is empty or malformed.
        ConvexHullError: If fewer than 4 points are given or the points are
            coplanar/collinear, so no 3D hull exists.
    """
    points = validate_points(points)

    if len(points) < MIN_HULL_POINTS:
        raise ConvexHullError(
            f"Need at least {MIN_HULL_POINTS} points to build a 3D convex hull, got {len(points)}"
        )

    try:
        hull = ConvexHull(points)
    except QhullError as e:
        raise ConvexHullError(f"Convex hull computation failed for {len(points)} points: {e}") from e

    vertices = points[np.sort(hull.vertices)]
    logger.debug(f"Convex hull of {len(points)} points has {len(vertices)} vertices")
    return vertices


def convert_polyhedron_vector_to_polyhedron(polyhedrons):
    """
    Convert a polyhedron collection to a single polyhedron.

    The result is the union of the vertex sets of all polyhedrons. Duplicate
    vertices are kept once. No hull is recomputed.

    Args:
        polyhedrons: Sequence of (N_i, 3) vertex arrays.

    Returns:
        numpy.ndarray: (M, 3) unique vertices, lexicographically sorted.
    """
    polyhedrons = validate_polyhedrons(polyhedrons)
    return np.unique(np.vstack(polyhedrons), axis=0)


def compute_convex_polyhedron(polyhedrons):
    """
    Compute the convex polyhedron over a polyhedron collection.

    Computes the convex hull of the union of all polyhedrons and returns it
    as a one-element collection.

    Args:
        polyhedrons: Sequence of (N_i, 3) vertex arrays.

    Returns:
        list: One (M, 3) array holding the vertices of the global hull.

    Raises:
        ConvexHullError: If the union cannot form a 3D hull.
    """
    polyhedrons = validate_polyhedrons(polyhedrons)
    union = convert_polyhedron_vector_to_polyhedron(polyhedrons)
    hull = convex_hull_from_points(union)
    logger.info(
        f"Reduced {len(polyhedrons)} polyhedron(s) with {len(union)} unique vertices "
        f"to one hull with {len(hull)} vertices"
    )
    return [hull]
