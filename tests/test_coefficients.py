"""Tests for coefficient resolution and evaluation.

Run with: uv run pytest tests/test_coefficients.py -v
"""

import numpy as np
import pytest

from femeq import (
    Array,
    CoefficientError,
    Constant,
    Evaluator,
    ShapeMismatchError,
    as_coefficient,
    evaluate_boundary,
    evaluate_volume,
)


class TestAsCoefficient:
    """Test resolution of coefficient specifications."""

    def test_number(self):
        assert as_coefficient(2) == Constant(2.0)
        assert as_coefficient(np.float64(0.5)) == Constant(0.5)

    def test_zero_dim_array(self):
        assert as_coefficient(np.array(3.0)) == Constant(3.0)

    def test_callable(self):
        def func(points, tags):
            return np.ones(len(points))

        coef = as_coefficient(func)
        assert isinstance(coef, Evaluator)
        assert coef.func is func

    def test_dotted_name(self):
        coef = as_coefficient("numpy.linalg.norm")
        assert isinstance(coef, Evaluator)
        assert coef.func is np.linalg.norm

    def test_unknown_name(self):
        with pytest.raises(CoefficientError):
            as_coefficient("femeq.no_such_coefficient")

    def test_array(self):
        coef = as_coefficient([1.0, 2.0, 3.0])
        assert isinstance(coef, Array)
        assert np.array_equal(coef.values, [1.0, 2.0, 3.0])

    def test_variant_passthrough(self):
        coef = Constant(1.0)
        assert as_coefficient(coef) is coef


class TestEvaluateVolume:
    """Test per-quadrature-point values of volume coefficients."""

    def test_constant_broadcast(self, square_dirichlet):
        """Every slot holds the constant."""
        values = evaluate_volume(2.5, square_dirichlet)
        assert values.shape == (3, square_dirichlet.noelms)
        assert np.all(values == 2.5)

    def test_evaluator_receives_points_and_tags(self, square_dirichlet):
        mesh = square_dirichlet
        calls = []

        def func(points, tags):
            calls.append((points, tags))
            return points[:, 0] + 10 * tags

        values = evaluate_volume(func, mesh)
        assert len(calls) == 1
        assert calls[0][0] is mesh.GP
        assert calls[0][1] is mesh.GPT
        # Column k holds the points of element k
        assert np.allclose(values, mesh.GP[:, 0].reshape(mesh.noelms, 3).T)

    def test_flat_array_grouped_by_element(self, square_dirichlet):
        n = square_dirichlet.noelms
        values = evaluate_volume(np.arange(3 * n, dtype=float), square_dirichlet)
        for k in range(n):
            assert np.array_equal(values[:, k], [3 * k, 3 * k + 1, 3 * k + 2])

    def test_shaped_array_unchanged(self, square_dirichlet):
        data = np.random.default_rng(0).random((3, square_dirichlet.noelms))
        assert np.array_equal(evaluate_volume(data, square_dirichlet), data)

    def test_wrong_size(self, square_dirichlet):
        with pytest.raises(ShapeMismatchError):
            evaluate_volume(np.ones(7), square_dirichlet)

    def test_evaluator_wrong_size(self, square_dirichlet):
        with pytest.raises(ShapeMismatchError):
            evaluate_volume(lambda p, t: 1.0, square_dirichlet)


class TestEvaluateBoundary:
    """Test boundary data evaluation."""

    points = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 2.0], [0.0, 3.0]])

    def test_constant(self):
        assert np.array_equal(evaluate_boundary(4.0, self.points), [4.0] * 4)

    def test_evaluator_only_at_selected_points(self):
        seen = []

        def func(points):
            seen.append(points)
            return points[:, 1]

        values = evaluate_boundary(func, self.points, np.array([1, 3]))
        assert np.array_equal(values, [0.0, 3.0])
        assert seen[0].shape == (2, 2)

    def test_array_subset(self):
        values = evaluate_boundary([5.0, 6.0, 7.0, 8.0], self.points, np.array([0, 2]))
        assert np.array_equal(values, [5.0, 7.0])

    def test_empty_selection_skips_call(self):
        def func(points):
            raise AssertionError("should not be called")

        values = evaluate_boundary(func, self.points, np.array([], dtype=np.int64))
        assert values.shape == (0,)

    def test_array_wrong_size(self):
        with pytest.raises(ShapeMismatchError):
            evaluate_boundary([1.0, 2.0], self.points)
