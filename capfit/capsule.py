import numpy as np

from .schemas import ValidationError, validate_vector3


class Capsule:
    """
    Represents a capsule: a cylinder around the segment [P0, P1] capped by two
    hemispheres of the same radius.

    Instances are immutable. The endpoint arrays are stored as read-only
    copies, so a capsule can be shared freely between threads and callers.
    P0 and P1 may coincide, in which case the capsule is a sphere.

    Attributes:
        P0 (numpy.ndarray): (3,) first axis end point.
        P1 (numpy.ndarray): (3,) second axis end point.
        radius (float): Radius of the cylinder and of both caps, >= 0.

    Unpacks like a tuple::

        p0, p1, radius = capsule
    """

    __slots__ = ("_P0", "_P1", "_radius")

    def __init__(self, P0, P1, radius):
        p0 = validate_vector3(P0, name="P0").copy()
        p1 = validate_vector3(P1, name="P1").copy()
        radius = float(radius)

        if not np.isfinite(radius):
            raise ValidationError(f"Capsule radius must be finite, got {radius}")
        if radius < 0:
            raise ValidationError(f"Capsule radius must be >= 0, got {radius}")

        p0.flags.writeable = False
        p1.flags.writeable = False
        object.__setattr__(self, "_P0", p0)
        object.__setattr__(self, "_P1", p1)
        object.__setattr__(self, "_radius", radius)

    def __setattr__(self, name, value):
        raise AttributeError("Capsule is immutable")

    @property
    def P0(self):
        return self._P0

    @property
    def P1(self):
        return self._P1

    @property
    def radius(self):
        return self._radius

    @property
    def length(self):
        """Length of the axis segment (not counting the caps)."""
        return float(np.linalg.norm(self._P1 - self._P0))

    @property
    def center(self):
        """Midpoint of the axis segment."""
        return 0.5 * (self._P0 + self._P1)

    @property
    def volume(self):
        """Cylinder volume plus one full sphere for the two caps."""
        r = self._radius
        return np.pi * r**2 * self.length + (4.0 / 3.0) * np.pi * r**3

    def __iter__(self):
        yield self._P0
        yield self._P1
        yield self._radius

    def __eq__(self, other):
        if not isinstance(other, Capsule):
            return NotImplemented
        return (
            np.array_equal(self._P0, other._P0)
            and np.array_equal(self._P1, other._P1)
            and self._radius == other._radius
        )

    def __hash__(self):
        # + 0.0 maps -0.0 to 0.0 so hashing agrees with array_equal
        return hash(((self._P0 + 0.0).tobytes(), (self._P1 + 0.0).tobytes(), self._radius))

    def __reduce__(self):
        return (Capsule, (self._P0, self._P1, self._radius))

    def __repr__(self):
        return f"Capsule(P0={self._P0.tolist()}, P1={self._P1.tolist()}, radius={self._radius!r})"
