"""
Validation functions and error types for capfit data structures.

Validates point sets, single 3D vectors, polyhedron collections and solver
parameter vectors before they reach the geometry code, so precondition
violations fail loudly instead of producing a garbage capsule.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Number of scalars in a solver parameter vector: P0 (3), P1 (3), radius (1)
PARAMETER_SIZE = 7


class ValidationError(ValueError):
    """Raised when an input fails a precondition check."""

    pass


class ConvexHullError(RuntimeError):
    """Raised when a convex hull cannot be built from the given points."""

    pass


class FittingError(RuntimeError):
    """Raised when an optimizer returns a capsule that does not bound its points."""

    pass


# ── points and vectors ──────────────────────────────────────────────────────


def validate_points(points, name="points", min_points=1):
    """
    Validate a point set and return it as a float64 (N, 3) array.

    Args:
        points: Array-like of shape (N, 3).
        name: Name used in error messages.
        min_points: Minimum number of points required.

    Raises:
        ValidationError: If the array is not (N, 3), has fewer than
            `min_points` rows, or contains NaN/inf.
    """
    arr = np.asarray(points, dtype=np.float64)

    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValidationError(f"{name} must have shape (N, 3), got {arr.shape}")

    if arr.shape[0] < min_points:
        if arr.shape[0] == 0:
            raise ValidationError(f"{name} is empty")
        raise ValidationError(f"{name} needs at least {min_points} points, got {arr.shape[0]}")

    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"{name} contains NaN or infinite values")

    return arr


def validate_vector3(vector, name="vector", nonzero=False):
    """
    Validate a single 3D vector and return it as a float64 (3,) array.

    Args:
        vector: Array-like with 3 components.
        name: Name used in error messages.
        nonzero: If True, reject the zero vector (e.g. a line direction).

    Raises:
        ValidationError: If the shape is wrong, values are not finite, or the
            vector is zero while `nonzero` is requested.
    """
    arr = np.asarray(vector, dtype=np.float64)

    if arr.shape != (3,):
        raise ValidationError(f"{name} must have shape (3,), got {arr.shape}")

    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"{name} contains NaN or infinite values: {arr}")

    if nonzero and not np.any(arr):
        raise ValidationError(f"{name} must not be the zero vector")

    return arr


def validate_polyhedrons(polyhedrons):
    """
    Validate a polyhedron collection and return it as a list of (N, 3) arrays.

    Raises:
        ValidationError: If the collection is empty or any polyhedron is
            empty or malformed.
    """
    if isinstance(polyhedrons, np.ndarray):
        raise ValidationError(
            "polyhedrons must be a sequence of (N, 3) arrays, got a single array; "
            "wrap it in a list"
        )

    polyhedrons = list(polyhedrons)
    if not polyhedrons:
        raise ValidationError("polyhedrons is empty")

    return [validate_points(p, name=f"polyhedrons[{i}]") for i, p in enumerate(polyhedrons)]


# ── solver parameter vectors ────────────────────────────────────────────────


def validate_parameter_vector(x):
    """
    Validate a solver parameter vector and return it as a float64 (7,) array.

    The layout is [P0.x, P0.y, P0.z, P1.x, P1.y, P1.z, radius].

    Raises:
        ValidationError: If the vector does not hold exactly 7 scalars.
    """
    arr = np.asarray(x, dtype=np.float64)

    if arr.ndim != 1 or arr.shape[0] != PARAMETER_SIZE:
        raise ValidationError(
            f"Capsule parameter vector must have exactly {PARAMETER_SIZE} entries, got shape {arr.shape}"
        )

    return arr
