"""Tests for the capsule <-> solver parameter vector codec."""

import numpy as np
import pytest

from capfit.capsule import Capsule
from capfit.parameters import (
    capsule_from_solver_param,
    capsule_to_solver_param,
    convert_capsule_to_solver_param,
    convert_solver_param_to_capsule,
)
from capfit.schemas import ValidationError


class TestParameterCodec:
    def test_layout(self):
        x = convert_capsule_to_solver_param([1, 2, 3], [4, 5, 6], 7)
        assert x.shape == (7,)
        assert np.array_equal(x, [1, 2, 3, 4, 5, 6, 7])

    def test_decode_encode_is_exact(self, random_parameter_vectors):
        for x in random_parameter_vectors:
            p0, p1, radius = convert_solver_param_to_capsule(x)
            assert np.array_equal(convert_capsule_to_solver_param(p0, p1, radius), x)

    def test_encode_decode_is_exact(self, rng):
        for _ in range(10):
            p0, p1 = rng.normal(size=(2, 3)) * 1e3
            radius = rng.uniform(0, 10)
            q0, q1, r = convert_solver_param_to_capsule(convert_capsule_to_solver_param(p0, p1, radius))
            assert np.array_equal(q0, p0)
            assert np.array_equal(q1, p1)
            assert r == radius

    def test_decode_returns_copies(self):
        x = np.arange(7, dtype=float)
        p0, _, _ = convert_solver_param_to_capsule(x)
        p0[0] = 100.0
        assert x[0] == 0.0

    @pytest.mark.parametrize("size", [0, 6, 8])
    def test_wrong_length(self, size):
        with pytest.raises(ValidationError):
            convert_solver_param_to_capsule(np.zeros(size))

    def test_two_dimensional_rejected(self):
        with pytest.raises(ValidationError):
            convert_solver_param_to_capsule(np.zeros((1, 7)))

    def test_capsule_round_trip(self):
        capsule = Capsule([0.1, 0.2, 0.3], [1.0, -2.0, 3.5], 0.25)
        assert capsule_from_solver_param(capsule_to_solver_param(capsule)) == capsule

    def test_negative_radius_decodes_but_is_not_a_capsule(self):
        x = np.array([0, 0, 0, 1, 0, 0, -0.5])
        assert convert_solver_param_to_capsule(x)[2] == -0.5
        with pytest.raises(ValidationError):
            capsule_from_solver_param(x)
