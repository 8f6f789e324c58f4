"""
Differentiable capsule functions for gradient-based optimizers.

Each function object exposes::

    value(x) -> float
    gradient(x, function_index=0) -> (7,) numpy.ndarray

where ``x`` is the solver parameter vector
``[P0.x, P0.y, P0.z, P1.x, P1.y, P1.z, radius]`` (see ``capfit.parameters``).
The gradients are analytic and follow the same branch decisions as the
values, so they agree with finite differences wherever the function is
differentiable. At the singular points (zero-length axis, point on the axis)
the affected components are set to zero instead of NaN.

``value`` and ``gradient`` plug directly into ``scipy.optimize.minimize`` as
``fun`` / ``jac``.
"""

import numpy as np

from .config import GEOMETRY_EPS
from .geometry import segment_parameter
from .parameters import convert_solver_param_to_capsule
from .schemas import ValidationError, validate_vector3


def _check_function_index(function_index):
    if function_index != 0:
        raise ValidationError(f"Capsule functions have a single output, got function_index={function_index}")


class Volume:
    """Capsule volume function.

    V = pi * r^2 * L + 4/3 * pi * r^3, with L = |P1 - P0|.
    """

    output_size = 1
    input_size = 7

    def __init__(self, name="capsule volume"):
        self.name = name

    def value(self, x):
        p0, p1, r = convert_solver_param_to_capsule(x)
        length = np.linalg.norm(p1 - p0)
        return float(np.pi * r**2 * length + (4.0 / 3.0) * np.pi * r**3)

    def gradient(self, x, function_index=0):
        _check_function_index(function_index)
        p0, p1, r = convert_solver_param_to_capsule(x)

        axis = p1 - p0
        length = np.linalg.norm(axis)

        grad = np.zeros(7)
        # dL/dP1 = axis / L, dL/dP0 = -axis / L; undefined at L = 0
        if length > GEOMETRY_EPS:
            d_length = np.pi * r**2 * axis / length
            grad[0:3] = -d_length
            grad[3:6] = d_length
        grad[6] = 2.0 * np.pi * r * length + 4.0 * np.pi * r**2
        return grad

    def __call__(self, x):
        return self.value(x)

    def __repr__(self):
        return f"Volume(name={self.name!r})"


class DistanceCapsulePoint:
    """Signed distance from a fixed point to the capsule surface.

    The value is ``distance(point, [P0, P1]) - radius``: negative when the
    point is inside the capsule, positive when it is outside.

    Args:
        point: (3,) reference point. Stored as a read-only copy.
        name: Function name, used in logs and reprs.
    """

    output_size = 1
    input_size = 7

    def __init__(self, point, name="distance to point"):
        point = validate_vector3(point, name="point").copy()
        point.flags.writeable = False
        self._point = point
        self.name = name

    @property
    def point(self):
        return self._point

    def _closest(self, p0, p1):
        # Shared by value and gradient so both use the same clamp branch
        t = segment_parameter(self._point, p0, p1)
        if t is None:
            return None, p0
        return t, p0 + t * (p1 - p0)

    def value(self, x):
        p0, p1, r = convert_solver_param_to_capsule(x)
        _, closest = self._closest(p0, p1)
        return float(np.linalg.norm(self._point - closest) - r)

    def gradient(self, x, function_index=0):
        """Gradient with respect to [P0, P1, radius].

        With ``u`` the unit vector from the point to its closest point on the
        segment and ``t`` the clamped segment parameter of that closest point,
        d/dP0 = (1 - t) * u and d/dP1 = t * u. A clamped ``t`` of 0 or 1 moves
        the whole derivative onto the bound end point, and a degenerate axis
        puts it on P0. d/dradius = -1.
        """
        _check_function_index(function_index)
        p0, p1, _ = convert_solver_param_to_capsule(x)

        t, closest = self._closest(p0, p1)
        offset = closest - self._point
        distance = np.linalg.norm(offset)

        grad = np.zeros(7)
        grad[6] = -1.0
        if distance <= GEOMETRY_EPS:
            return grad

        u = offset / distance
        if t is None:
            grad[0:3] = u
        else:
            grad[0:3] = (1.0 - t) * u
            grad[3:6] = t * u
        return grad

    def __call__(self, x):
        return self.value(x)

    def __repr__(self):
        return f"DistanceCapsulePoint(point={self._point.tolist()}, name={self.name!r})"
