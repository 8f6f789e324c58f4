"""Tests for capfit.schemas validation functions."""

import numpy as np
import pytest

from capfit.schemas import (
    ValidationError,
    validate_parameter_vector,
    validate_points,
    validate_polyhedrons,
    validate_vector3,
)


class TestValidatePoints:
    def test_valid_list(self):
        arr = validate_points([[0, 0, 0], [1, 2, 3]])
        assert arr.dtype == np.float64
        assert arr.shape == (2, 3)

    def test_empty(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_points(np.zeros((0, 3)))

    def test_wrong_shape(self):
        with pytest.raises(ValidationError, match="shape"):
            validate_points(np.zeros((4, 2)))

    def test_flat_array(self):
        with pytest.raises(ValidationError):
            validate_points(np.zeros(3))

    def test_min_points(self):
        with pytest.raises(ValidationError, match="at least 4"):
            validate_points(np.zeros((3, 3)), min_points=4)

    def test_non_finite(self):
        with pytest.raises(ValidationError, match="NaN"):
            validate_points([[0, 0, np.inf]])

    def test_name_in_message(self):
        with pytest.raises(ValidationError, match="hull_points"):
            validate_points(np.zeros((0, 3)), name="hull_points")


class TestValidateVector3:
    def test_valid(self):
        assert np.array_equal(validate_vector3([1, 2, 3]), [1.0, 2.0, 3.0])

    def test_zero_allowed_by_default(self):
        validate_vector3([0, 0, 0])

    def test_zero_rejected_when_nonzero(self):
        with pytest.raises(ValidationError, match="zero"):
            validate_vector3([0, 0, 0], nonzero=True)

    def test_wrong_size(self):
        with pytest.raises(ValidationError):
            validate_vector3([1, 2, 3, 4])


class TestValidatePolyhedrons:
    def test_valid(self):
        polys = validate_polyhedrons([np.zeros((4, 3)), [[1, 1, 1]]])
        assert len(polys) == 2

    def test_empty(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_polyhedrons([])

    def test_bad_member_is_named(self):
        with pytest.raises(ValidationError, match=r"polyhedrons\[1\]"):
            validate_polyhedrons([np.zeros((4, 3)), np.zeros((0, 3))])

    def test_accepts_generator(self):
        assert len(validate_polyhedrons(np.eye(3) for _ in range(2))) == 2


class TestValidateParameterVector:
    def test_valid(self):
        assert validate_parameter_vector(range(7)).shape == (7,)

    @pytest.mark.parametrize("x", [np.zeros(6), np.zeros(8), np.zeros((7, 1))])
    def test_invalid(self, x):
        with pytest.raises(ValidationError, match="7"):
            validate_parameter_vector(x)

    def test_is_value_error(self):
        """ValidationError subclasses ValueError for callers catching the builtin."""
        with pytest.raises(ValueError):
            validate_parameter_vector([])
