"""Test module for avarc.bezier

The tests are run using pytest.
These tests cover the unit-circle control point construction as well as
evaluating, polygonizing and measuring the error of cubic curves.
"""

import math

import numpy as np
import pytest

from avarc.bezier import BezierCurve, BezierSegment
from avarc.geom import AvPoint

###############################################################################
# Kappa and unit arc control points
###############################################################################


class TestUnitArcControlPoints:
    """Control points of single-segment unit-circle arcs."""

    @pytest.mark.parametrize(
        "alpha, expected",
        [
            (math.pi / 2, 0.5522847498307933),
            (math.pi / 4, 0.265216489839544),
            (math.pi / 8, 0.13132187114288565),
        ],
    )
    def test_kappa_regression_constants(self, alpha, expected):
        """Known kappa values."""
        assert BezierCurve.kappa(alpha) == pytest.approx(expected, abs=1e-12)

    def test_kappa_is_odd(self):
        """Clockwise arcs use the negated handle length."""
        assert BezierCurve.kappa(-math.pi / 3) == pytest.approx(-BezierCurve.kappa(math.pi / 3))

    def test_quarter_circle(self):
        """The classic quarter circle approximation."""
        k = BezierCurve.kappa(math.pi / 2)
        segment = BezierCurve.unit_arc_control_points(math.pi / 2)
        assert segment.p1.approx_equal((1.0, 0.0))
        assert segment.q1.approx_equal((1.0, k))
        assert segment.q2.approx_equal((k, 1.0))
        assert segment.p2.approx_equal((0.0, 1.0))

    def test_clockwise_quarter_circle(self):
        """A negative angle mirrors the arc at the x-axis."""
        k = BezierCurve.kappa(math.pi / 2)
        segment = BezierCurve.unit_arc_control_points(-math.pi / 2)
        assert segment.q1.approx_equal((1.0, -k))
        assert segment.q2.approx_equal((k, -1.0))
        assert segment.p2.approx_equal((0.0, -1.0))

    def test_rotated_by_tau(self):
        """The whole quadruple gets rotated to the start offset."""
        segment = BezierCurve.unit_arc_control_points(math.pi / 2, math.pi / 2)
        reference = BezierCurve.unit_arc_control_points(math.pi / 2)
        assert segment.p1.approx_equal((0.0, 1.0))
        assert segment.p2.approx_equal((-1.0, 0.0))
        for point, ref in zip(segment, reference):
            assert point.approx_equal(ref.rotate(math.pi / 2))

    @pytest.mark.parametrize("alpha", [math.pi, math.pi / 2, 0.3, -0.3, -2.0, -math.pi])
    def test_curve_passes_through_arc_midpoint(self, alpha):
        """Start, midpoint and end of the cubic lie on the unit circle."""
        segment = BezierCurve.unit_arc_control_points(alpha, 0.25)
        midpoint = BezierCurve.evaluate_cubic(segment, 0.5)
        assert np.allclose(midpoint, AvPoint.polar(0.25 + alpha / 2), atol=1e-12)
        assert math.hypot(*segment.p1) == pytest.approx(1.0)
        assert math.hypot(*segment.p2) == pytest.approx(1.0)

    @pytest.mark.parametrize("alpha", [0.0, math.pi + 1e-9, -4.0, float("nan"), float("inf")])
    def test_invalid_angle(self, alpha):
        """Zero-length and too wide segments are rejected."""
        with pytest.raises(ValueError):
            BezierCurve.unit_arc_control_points(alpha)


###############################################################################
# BezierSegment
###############################################################################


def test_segment_reversed():
    """Reversing swaps endpoints and control points."""
    segment = BezierCurve.unit_arc_control_points(1.0)
    reverse = segment.reversed()
    assert reverse == BezierSegment(segment.p2, segment.q2, segment.q1, segment.p1)
    assert reverse.reversed() == segment


def test_segment_as_array():
    """A segment is a (4, 2) array of control points."""
    array = BezierCurve.unit_arc_control_points(1.0).as_array()
    assert array.shape == (4, 2)
    assert array.dtype == np.float64


###############################################################################
# Evaluation and polygonization
###############################################################################


class TestCubicPolygonize:
    """Polygonization of cubic curves."""

    control_points = np.array([[30.0, 10.0], [35.0, 15.0], [40.0, 15.0], [45.0, 10.0]], dtype=np.float64)

    def test_evaluate_endpoints(self):
        """B(0) and B(1) are the endpoints."""
        assert np.allclose(BezierCurve.evaluate_cubic(self.control_points, 0.0), [30.0, 10.0])
        assert np.allclose(BezierCurve.evaluate_cubic(self.control_points, 1.0), [45.0, 10.0])

    def test_evaluate_array(self):
        """An array of parameters gives one row per parameter."""
        assert BezierCurve.evaluate_cubic(self.control_points, np.linspace(0, 1, 5)).shape == (5, 2)

    @pytest.mark.parametrize("steps", [1, 2, 5, 10, 100])
    def test_polygonize_shape_and_types(self, steps):
        """steps + 1 rows, endpoints typed 0.0, inner points 3.0."""
        result = BezierCurve.polygonize_cubic_curve(self.control_points, steps)
        assert result.shape == (steps + 1, 3)
        assert np.allclose(result[0, :2], self.control_points[0])
        assert np.allclose(result[-1, :2], self.control_points[3])
        assert result[0, 2] == 0.0
        assert result[-1, 2] == 0.0
        assert all(result[1:-1, 2] == 3.0)

    def test_python_and_numpy_agree(self):
        """Forward differencing and direct evaluation give the same points."""
        steps = 20
        buffer_python = np.empty((steps + 1, 3), dtype=np.float64)
        buffer_numpy = np.empty((steps + 1, 3), dtype=np.float64)
        BezierCurve.polygonize_cubic_curve_python_inplace(self.control_points, steps, buffer_python)
        BezierCurve.polygonize_cubic_curve_numpy_inplace(self.control_points, steps, buffer_numpy)
        assert np.allclose(buffer_python, buffer_numpy, atol=1e-9)

    def test_inplace_skip_first(self):
        """skip_first leaves out the start point."""
        steps = 10
        buffer = np.empty((steps, 3), dtype=np.float64)
        count = BezierCurve.polygonize_cubic_curve_inplace(self.control_points, steps, buffer, skip_first=True)
        assert count == steps
        assert np.allclose(buffer[-1, :2], self.control_points[3])

    def test_polygonize_invalid_steps(self):
        """At least one step is needed."""
        with pytest.raises(ValueError):
            BezierCurve.polygonize_cubic_curve(self.control_points, 0)


###############################################################################
# Error bounds
###############################################################################


class TestRadialError:
    """Approximation error and the step needed for a tolerance."""

    def test_quarter_circle_error(self):
        """The quarter circle deviates by about 0.027 percent."""
        error = BezierCurve.max_radial_error(math.pi / 2)
        assert 2.0e-4 < error < 3.0e-4

    def test_error_grows_with_angle(self):
        """Wider segments are less accurate."""
        errors = [BezierCurve.max_radial_error(alpha) for alpha in (math.pi / 8, math.pi / 4, math.pi / 2, math.pi)]
        assert errors == sorted(errors)
        assert errors[0] < errors[-1]

    def test_error_is_direction_independent(self):
        """Clockwise and counter-clockwise segments are equally accurate."""
        assert BezierCurve.max_radial_error(-1.0) == pytest.approx(BezierCurve.max_radial_error(1.0))

    def test_step_for_tolerance(self):
        """The returned step meets the tolerance, a wider one does not."""
        step = BezierCurve.step_for_tolerance(1e-3)
        assert math.pi / 2 < step < math.pi
        assert BezierCurve.max_radial_error(step) <= 1e-3
        assert BezierCurve.max_radial_error(min(math.pi, step * 1.05)) > 1e-3

    def test_step_for_loose_tolerance(self):
        """A loose tolerance allows half circles."""
        assert BezierCurve.step_for_tolerance(1.0) == math.pi

    @pytest.mark.parametrize("tolerance", [0.0, -1e-3, float("nan")])
    def test_step_for_invalid_tolerance(self, tolerance):
        """Only positive tolerances are accepted."""
        with pytest.raises(ValueError):
            BezierCurve.step_for_tolerance(tolerance)
