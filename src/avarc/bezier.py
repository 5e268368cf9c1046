"""Cubic Bezier utilities for approximating arcs of the unit circle."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avarc.common import MAX_ARC_STEP
from avarc.geom import AvPoint

# Number of bisection rounds used by step_for_tolerance (interval shrinks to pi / 2**60)
_TOLERANCE_BISECTION_ROUNDS: int = 60

# Samples per segment used to measure the radial error of an approximation
_RADIAL_ERROR_SAMPLES: int = 64


class BezierSegment(NamedTuple):
    """
    One cubic Bezier segment (p1, q1, q2, p2).

    p1/p2 are the on-curve endpoints, q1/q2 the control points.
    Being a tuple of tuples it converts to an (4, 2) array via np.array(segment).
    """

    p1: AvPoint
    q1: AvPoint
    q2: AvPoint
    p2: AvPoint

    def reversed(self) -> BezierSegment:
        """The same curve traversed from p2 to p1."""
        return BezierSegment(self.p2, self.q2, self.q1, self.p1)

    def as_array(self) -> NDArray[np.float64]:
        """Control points as (4, 2) array."""
        return np.array(self, dtype=np.float64)


class BezierCurve:
    """Class to handle cubic Bezier curve operations.

    Provides the control point construction for circular arcs and methods for
    evaluating and polygonizing cubic curves, supporting both pure Python and
    NumPy-optimized implementations.
    """

    @staticmethod
    def kappa(alpha: float) -> float:
        """
        Normalized distance from an arc endpoint to its control point.

        For a unit-circle arc with central angle _alpha_ the cubic with
        handles of length 4/3 * tan(alpha/4) passes exactly through the arc's
        start, midpoint and end. The sign follows the sign of _alpha_.
        """
        return 4.0 / 3.0 * math.tan(alpha / 4.0)

    @classmethod
    def unit_arc_control_points(cls, alpha: float, tau: float = 0.0) -> BezierSegment:
        """
        Approximate the unit-circle arc spanning [tau, tau + alpha] by one cubic Bezier curve.

        The arc is first built starting at angle 0, then rotated by _tau_.
        A negative _alpha_ yields a clockwise arc.

        Args:
            alpha (float): central angle in radians, 0 < |alpha| <= pi
            tau (float, optional): start offset in radians. Defaults to 0.0.

        Returns:
            BezierSegment: (p1, q1, q2, p2) of the approximation

        Raises:
            ValueError: if alpha is zero, exceeds pi in magnitude or is not finite
        """
        if not math.isfinite(alpha) or alpha == 0.0 or abs(alpha) > MAX_ARC_STEP:
            raise ValueError(f"Arc segment angle must satisfy 0 < |alpha| <= pi, got {alpha}")

        k = cls.kappa(alpha)
        cos_alpha = math.cos(alpha)
        sin_alpha = math.sin(alpha)

        # endpoints on the unit circle, control points along the tangents (-sin, cos)
        p1 = AvPoint(1.0, 0.0)
        q1 = AvPoint(1.0, k)
        q2 = AvPoint(cos_alpha + k * sin_alpha, sin_alpha - k * cos_alpha)
        p2 = AvPoint(cos_alpha, sin_alpha)

        if tau == 0.0:
            return BezierSegment(p1, q1, q2, p2)
        return BezierSegment(p1.rotate(tau), q1.rotate(tau), q2.rotate(tau), p2.rotate(tau))

    @staticmethod
    def evaluate_cubic(
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        t: Union[float, NDArray[np.float64]],
    ) -> NDArray[np.float64]:
        """
        Evaluate B(t) = (1-t)^3*P0 + 3*(1-t)^2*t*P1 + 3*(1-t)*t^2*P2 + t^3*P3.

        Args:
            points: the 4 control points
            t: a parameter value or an array of parameter values in [0, 1]

        Returns:
            NDArray[np.float64]: shape (2,) for a scalar t, (n, 2) for an array t
        """
        pts = np.asarray(points, dtype=np.float64)[:, :2]
        t_arr = np.asarray(t, dtype=np.float64)
        omt = 1.0 - t_arr
        basis = np.stack([omt**3, 3.0 * omt**2 * t_arr, 3.0 * omt * t_arr**2, t_arr**3], axis=-1)
        return basis @ pts

    @classmethod
    def polygonize_cubic_curve_python_inplace(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        steps: int,
        output_buffer: NDArray[np.float64],
        start_index: int = 0,
        skip_first: bool = False,
    ) -> int:
        """
        Polygonize a cubic Bezier curve directly into pre-allocated buffer using pure Python.
        Optimized using forward differencing for O(1) per point computation.
        """
        pt0, pt1, pt2, pt3 = points
        p0x, p0y = pt0[0], pt0[1]
        p1x, p1y = pt1[0], pt1[1]
        p2x, p2y = pt2[0], pt2[1]
        p3x, p3y = pt3[0], pt3[1]

        h = 1.0 / steps

        # Derive the exact discrete differences from B(0), B(h), B(2h), B(3h)
        samples = []
        for i in range(4):
            t = i * h
            omt = 1.0 - t
            c0 = omt * omt * omt
            c1 = 3.0 * omt * omt * t
            c2 = 3.0 * omt * t * t
            c3 = t * t * t
            samples.append((c0 * p0x + c1 * p1x + c2 * p2x + c3 * p3x, c0 * p0y + c1 * p1y + c2 * p2y + c3 * p3y))
        (b0_x, b0_y), (b1_x, b1_y), (b2_x, b2_y), (b3_x, b3_y) = samples

        dx_first = b1_x - b0_x
        dy_first = b1_y - b0_y
        dx_second = b2_x - 2.0 * b1_x + b0_x
        dy_second = b2_y - 2.0 * b1_y + b0_y
        # constant for cubic
        dx_third = b3_x - 3.0 * b2_x + 3.0 * b1_x - b0_x
        dy_third = b3_y - 3.0 * b2_y + 3.0 * b1_y - b0_y

        x = p0x
        y = p0y
        output_idx = start_index

        if not skip_first:
            output_buffer[output_idx, 0] = x
            output_buffer[output_idx, 1] = y
            output_buffer[output_idx, 2] = 0.0
            output_idx += 1

        for i in range(1, steps + 1):
            x += dx_first
            y += dy_first

            dx_first += dx_second
            dy_first += dy_second
            dx_second += dx_third
            dy_second += dy_third

            if i == steps:
                # snap onto the exact endpoint, it must stay on the arc
                x, y = p3x, p3y

            output_buffer[output_idx, 0] = x
            output_buffer[output_idx, 1] = y
            output_buffer[output_idx, 2] = 3.0 if i < steps else 0.0
            output_idx += 1

        return steps + (1 if not skip_first else 0)

    @classmethod
    def polygonize_cubic_curve_numpy_inplace(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        steps: int,
        output_buffer: NDArray[np.float64],
        start_index: int = 0,
        skip_first: bool = False,
    ) -> int:
        """
        Polygonize a cubic Bezier curve directly into pre-allocated buffer using NumPy.
        Uses direct evaluation with vectorized operations.
        """
        t = np.linspace(0, 1, steps + 1, dtype=np.float64)
        if skip_first:
            t = t[1:]

        curve = cls.evaluate_cubic(points, t)

        types = np.full(len(t), 3.0, dtype=np.float64)
        if len(types) > 0:
            if not skip_first:
                types[0] = 0.0
            types[-1] = 0.0

        end_idx = start_index + len(t)
        output_buffer[start_index:end_idx, 0:2] = curve
        output_buffer[start_index:end_idx, 2] = types

        return len(t)

    @classmethod
    def polygonize_cubic_curve_inplace(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        steps: int,
        output_buffer: NDArray[np.float64],
        start_index: int = 0,
        skip_first: bool = False,
    ) -> int:
        """
        Polygonize a cubic Bezier curve directly into pre-allocated buffer.
        Uses pure Python for small step counts, NumPy for larger ones.

        Args:
            points: Control points as Sequence[Tuple[float, float]] or NDArray[np.float64]
                    Must contain exactly 4 points: start, control1, control2, end
            steps: Number of segments to divide the curve into
            output_buffer: Pre-allocated buffer (n, 3) to write points into
            start_index: Starting index in output_buffer
            skip_first: If True, skip writing the first point (to avoid duplication)

        Returns:
            Number of points written to buffer
        """
        if steps < 70:
            return cls.polygonize_cubic_curve_python_inplace(points, steps, output_buffer, start_index, skip_first)
        return cls.polygonize_cubic_curve_numpy_inplace(points, steps, output_buffer, start_index, skip_first)

    @classmethod
    def polygonize_cubic_curve(
        cls, points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]], steps: int
    ) -> NDArray[np.float64]:
        """
        Polygonize a cubic Bezier curve into line segments.

        Args:
            points: Control points, exactly 4: start, control1, control2, end
            steps: Number of segments to divide the curve into

        Returns:
            NDArray[np.float64] of shape (steps+1, 3) containing the points (x, y, type)
        """
        if steps < 1:
            raise ValueError(f"Number of polygonize steps must be at least 1, got {steps}")
        result = np.empty((steps + 1, 3), dtype=np.float64)
        cls.polygonize_cubic_curve_inplace(points, steps, result, start_index=0, skip_first=False)
        return result

    @classmethod
    def max_radial_error(cls, alpha: float, samples: int = _RADIAL_ERROR_SAMPLES) -> float:
        """
        Largest deviation from radius 1 of the single-segment approximation of a unit arc.

        The error grows monotonically with |alpha|; multiply by the radius to get
        the absolute error for a circle (or by the larger radius for an ellipse).

        Args:
            alpha (float): central angle in radians, 0 < |alpha| <= pi
            samples (int, optional): number of sample intervals along the curve

        Returns:
            float: max |r(t) - 1| over the samples
        """
        curve = cls.polygonize_cubic_curve(cls.unit_arc_control_points(alpha), samples)
        radii = np.hypot(curve[:, 0], curve[:, 1])
        return float(np.max(np.abs(radii - 1.0)))

    @classmethod
    def step_for_tolerance(cls, tolerance: float) -> float:
        """
        Largest maximum segment angle whose radial error stays within _tolerance_.

        The tolerance is relative to a radius of 1.

        Args:
            tolerance (float): accepted radial error, > 0

        Returns:
            float: a step in (0, pi]

        Raises:
            ValueError: if tolerance is not positive or too small to be met
        """
        if not tolerance > 0.0:
            raise ValueError(f"Tolerance must be positive, got {tolerance}")
        if cls.max_radial_error(MAX_ARC_STEP) <= tolerance:
            return MAX_ARC_STEP

        low, high = 0.0, MAX_ARC_STEP
        for _ in range(_TOLERANCE_BISECTION_ROUNDS):
            mid = 0.5 * (low + high)
            if cls.max_radial_error(mid) <= tolerance:
                low = mid
            else:
                high = mid

        if low <= 0.0:
            raise ValueError(f"Tolerance {tolerance} cannot be met by any segment angle")
        return low
