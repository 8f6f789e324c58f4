"""
Bounding capsule computation from point sets and polyhedron collections.

The axis of the capsule is the direction of largest spread of the points
(principal component of their covariance matrix). The axis end points are
the two points with extreme projections on that direction, and the radius is
the largest distance from any point to the resulting segment.

The capsule is a fast, reproducible bound meant as the initial guess of an
optimizer (see ``capfit.optimization``), not a minimal bounding capsule.
The end caps are not used to shorten the segment, so the capsule can be
longer than necessary.

Example usage:
    capsule = capsule_from_points(points)
    p0, p1, radius = compute_bounding_capsule_polyhedron([hull_a, hull_b])
"""

import logging
import warnings

import numpy as np

from .capsule import Capsule
from .config import CONTAINMENT_TOLERANCE, GEOMETRY_EPS
from .geometry import distances_points_to_segment
from .hull import convert_polyhedron_vector_to_polyhedron
from .schemas import validate_points, validate_polyhedrons, validate_vector3

logger = logging.getLogger(__name__)


def covariance_matrix(points):
    """Compute the covariance matrix of a set of points.

    Uses the population normalization ``1/N``, so a single point gives the
    zero matrix.

    Args:
        points: (N, 3) array of points, N >= 1.

    Returns:
        numpy.ndarray: (3, 3) symmetric covariance matrix.
    """
    points = validate_points(points)
    centered = points - points.mean(axis=0)
    return centered.T @ centered / len(points)


def principal_axis(cov):
    """Unit eigenvector of `cov` associated with its largest eigenvalue.

    ``numpy.linalg.eigh`` returns eigenvalues in ascending order, so the last
    column is taken; equal eigenvalues resolve to the highest index. The sign
    is fixed so that the component of largest magnitude is positive. Both
    rules are deterministic, so identical inputs give identical axes.

    Returns:
        tuple: ((3,) unit axis, largest eigenvalue)
    """
    cov = np.asarray(cov, dtype=np.float64)
    eigenvalues, eigenvectors = np.linalg.eigh(cov)
    axis = eigenvectors[:, -1]

    if axis[np.argmax(np.abs(axis))] < 0:
        axis = -axis

    return axis, float(eigenvalues[-1])


def extreme_points_along_direction(direction, points):
    """Indices of the least and most distant points along `direction`.

    Ties resolve to the first occurrence in `points`.

    Args:
        direction: (3,) non-zero direction (need not be normalized).
        points: (N, 3) array of points, N >= 1.

    Returns:
        tuple: (imin, imax) indices into `points`.
    """
    direction = validate_vector3(direction, name="direction", nonzero=True)
    points = validate_points(points)

    projections = points @ direction
    return int(np.argmin(projections)), int(np.argmax(projections))


def capsule_from_points(points):
    """
    Compute a bounding capsule from a set of points.

    Steps:
        1. Covariance matrix of the points.
        2. Principal axis (largest eigenvalue).
        3. Extreme points along the axis become P0 and P1.
        4. Radius is the maximum point-to-segment distance.

    Args:
        points: (N, 3) array of points, N >= 1.

    Returns:
        Capsule: Capsule containing every input point.
    """
    points = validate_points(points)

    cov = covariance_matrix(points)
    axis, spread = principal_axis(cov)

    if len(points) > 1 and spread <= GEOMETRY_EPS:
        warnings.warn("All points coincide; the capsule degenerates to a sphere")

    imin, imax = extreme_points_along_direction(axis, points)
    p0 = points[imin]
    p1 = points[imax]
    radius = float(distances_points_to_segment(points, p0, p1).max())

    logger.debug(f"Principal axis {axis} (eigenvalue {spread:.6g}) from {len(points)} points")
    logger.debug(f"Capsule end points {p0} / {p1}, radius {radius:.6g}")

    return Capsule(p0, p1, radius)


def compute_bounding_capsule_polyhedron(polyhedrons):
    """
    Compute the bounding capsule of a polyhedron collection.

    The vertex sets are merged into one polyhedron and fitted with the same
    pipeline as `capsule_from_points`. Fitting hull vertices instead of every
    raw point still gives a containing capsule at a lower cost, though its
    axis can differ since the covariance is taken over fewer points.

    Args:
        polyhedrons: Sequence of (N_i, 3) vertex arrays.

    Returns:
        Capsule: Unpacks as (P0, P1, radius).
    """
    polyhedrons = validate_polyhedrons(polyhedrons)
    union = convert_polyhedron_vector_to_polyhedron(polyhedrons)
    logger.info(f"Fitting bounding capsule to {len(union)} vertices from {len(polyhedrons)} polyhedron(s)")
    return capsule_from_points(union)


def capsule_signed_distances(capsule, points):
    """Signed distance of each point to the capsule surface (negative inside)."""
    points = validate_points(points)
    p0, p1, radius = capsule
    return distances_points_to_segment(points, p0, p1) - radius


def check_capsule(capsule, points, tolerance=CONTAINMENT_TOLERANCE):
    """
    Check that a capsule contains a set of points.

    Args:
        capsule: Capsule (or (P0, P1, radius) tuple).
        points: (N, 3) array of points.
        tolerance: Absolute slack allowed outside the surface.

    Returns:
        bool: True if every point lies within radius + tolerance of the axis segment.
    """
    sd = capsule_signed_distances(capsule, points)
    worst = float(sd.max())
    if worst > tolerance:
        logger.debug(f"Capsule misses {int((sd > tolerance).sum())} point(s), worst by {worst:.6g}")
        return False
    return True
