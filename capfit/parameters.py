"""Conversion between capsules and flat solver parameter vectors.

Layout of a parameter vector (7 scalars)::

    [P0.x, P0.y, P0.z, P1.x, P1.y, P1.z, radius]
"""

import numpy as np

from .capsule import Capsule
from .schemas import validate_parameter_vector, validate_vector3


def convert_capsule_to_solver_param(end_point1, end_point2, radius):
    """
    Convert capsule parameters to a solver parameter vector.

    Args:
        end_point1: (3,) capsule axis first end point.
        end_point2: (3,) capsule axis second end point.
        radius: Capsule radius.

    Returns:
        numpy.ndarray: (7,) parameter vector.
    """
    p0 = validate_vector3(end_point1, name="end_point1")
    p1 = validate_vector3(end_point2, name="end_point2")

    dst = np.empty(7, dtype=np.float64)
    dst[0:3] = p0
    dst[3:6] = p1
    dst[6] = radius
    return dst


def convert_solver_param_to_capsule(src):
    """
    Convert a solver parameter vector to capsule parameters.

    The values are returned as-is: an optimizer may probe a negative radius,
    so no range check is applied here. Use `capsule_from_solver_param` to get
    a validated `Capsule`.

    Args:
        src: (7,) parameter vector.

    Returns:
        tuple: ((3,) end_point1, (3,) end_point2, float radius)
    """
    src = validate_parameter_vector(src)
    return src[0:3].copy(), src[3:6].copy(), float(src[6])


def capsule_to_solver_param(capsule):
    """Parameter vector of a `Capsule`."""
    return convert_capsule_to_solver_param(capsule.P0, capsule.P1, capsule.radius)


def capsule_from_solver_param(src):
    """`Capsule` decoded from a parameter vector (radius must be >= 0)."""
    return Capsule(*convert_solver_param_to_capsule(src))
