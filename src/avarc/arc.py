"""Approximation of circular and elliptic arcs by sequences of cubic Bezier segments.

An arc is built on the unit circle first (BezierCurve.unit_arc_control_points),
one sub-arc per segment, and then mapped onto the target ellipse by the
fixed scale -> rotate -> translate pipeline of EllipticMapper.
The resulting segments are emitted as moveTo/curveTo calls on a path sink.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from avarc.bezier import BezierCurve, BezierSegment
from avarc.common import ARC_ANGLE_EPS, DEFAULT_ARC_STEP, MAX_ARC_STEP, TWO_PI, ArcDirection
from avarc.geom import AvAffine, AvBox, AvPoint
from avarc.pens import AvPathSink

logger = logging.getLogger(__name__)


###############################################################################
# EllipticMapper
###############################################################################
class EllipticMapper:
    """
    Maps points of the origin-centered unit circle onto an ellipse.

    The transformation is always scale(rx, ry), then rotate(phi), then translate(cx, cy).
    Scaling happens along the ellipse's own axes before they get rotated,
    so the order must not be changed.
    """

    _affine: AvAffine

    def __init__(self, center_x: float, center_y: float, rx: float, ry: float, phi: float = 0.0):
        self._affine = (
            AvAffine.scaling(rx, ry)
            .then(AvAffine.rotation(phi))
            .then(AvAffine.translation(center_x, center_y))
        )

    @property
    def affine(self) -> AvAffine:
        """The composed scale -> rotate -> translate transformation."""
        return self._affine

    def map_point(self, point: Sequence[float]) -> AvPoint:
        """Map a single unit-circle point."""
        return self._affine.apply(point)

    def map_segment(self, segment: BezierSegment) -> BezierSegment:
        """Map all four points of a segment."""
        return BezierSegment(*(self._affine.apply(point) for point in segment))


###############################################################################
# ArcSegmenter
###############################################################################
class ArcSegmenter:
    """
    Partitions an angular sweep into sub-arcs of at most _step_ radians.

    Each sub-arc is returned as (tau, alpha): its start angle and its signed width.
    Counter-clockwise and clockwise sweeps are handled by two separate traversals.
    """

    @staticmethod
    def is_valid_step(step: float) -> bool:
        """True if 0 < step <= pi."""
        return math.isfinite(step) and 0.0 < step <= MAX_ARC_STEP

    @staticmethod
    def segment_count(span: float, step: float) -> int:
        """
        Number of sub-arcs needed to cover the unsigned _span_ with widths <= _step_.

        Bounded by ceil(span / step); a trailing remainder that is only rounding
        noise does not get a segment of its own.
        """
        if span <= 0.0:
            return 0
        count = math.ceil(span / step)
        if count > 1 and span - (count - 1) * step <= ARC_ANGLE_EPS * max(1.0, span):
            count -= 1
        return count

    @classmethod
    def sub_arcs(cls, theta: float, delta: float, step: float) -> List[Tuple[float, float]]:
        """
        Split the sweep [theta, theta + delta] into sub-arcs.

        Args:
            theta (float): start angle in radians
            delta (float): signed sweep in radians (positive = counter-clockwise)
            step (float): maximum sub-arc width, 0 < step <= pi

        Returns:
            List[Tuple[float, float]]: (tau, alpha) per sub-arc in traversal order;
                empty for an invalid step or a zero sweep
        """
        if not cls.is_valid_step(step):
            logger.debug("Rejected arc step %s: must satisfy 0 < step <= pi", step)
            return []
        if not math.isfinite(delta) or not math.isfinite(theta):
            logger.debug("Rejected arc with non-finite angles theta=%s delta=%s", theta, delta)
            return []

        direction = ArcDirection.from_sweep(delta)
        if direction is ArcDirection.CCW:
            return cls._ccw_sub_arcs(theta, delta, step)
        if direction is ArcDirection.CW:
            return cls._cw_sub_arcs(theta, delta, step)
        return []

    @classmethod
    def _ccw_sub_arcs(cls, theta: float, delta: float, step: float) -> List[Tuple[float, float]]:
        sub_arcs: List[Tuple[float, float]] = []
        for i in range(cls.segment_count(delta, step)):
            beta = i * step
            sub_arcs.append((theta + beta, min(step, delta - beta)))
        return sub_arcs

    @classmethod
    def _cw_sub_arcs(cls, theta: float, delta: float, step: float) -> List[Tuple[float, float]]:
        sub_arcs: List[Tuple[float, float]] = []
        for i in range(cls.segment_count(-delta, step)):
            beta = -i * step
            sub_arcs.append((theta + beta, max(-step, delta - beta)))
        return sub_arcs


###############################################################################
# ArcSpec
###############################################################################
@dataclass(frozen=True)
class ArcSpec:
    """
    Center parameterization of an elliptic arc, all angles in radians.

    Attributes:
        center_x (float): x-coordinate of the ellipse center
        center_y (float): y-coordinate of the ellipse center
        rx (float): radius along the ellipse's own x-axis
        ry (float): radius along the ellipse's own y-axis
        phi (float): rotation of the ellipse's axes against the coordinate system
        theta (float): start angle on the unrotated, unscaled unit circle
        delta (float): signed sweep, positive = counter-clockwise, |delta| == 2*pi is a full ellipse
        step (float): maximum angular width of a single Bezier segment, 0 < step <= pi
    """

    center_x: float
    center_y: float
    rx: float
    ry: float
    phi: float = 0.0
    theta: float = 0.0
    delta: float = TWO_PI
    step: float = DEFAULT_ARC_STEP

    @property
    def is_valid(self) -> bool:
        """True if the segmentation bound allows to produce output."""
        return ArcSegmenter.is_valid_step(self.step)

    def validate(self) -> ArcSpec:
        """
        Explicitly reject unusable arcs instead of silently producing no output.

        Returns:
            ArcSpec: self, to allow chaining

        Raises:
            ValueError: for non-finite values, non-positive radii or an invalid step
        """
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if not math.isfinite(value):
                raise ValueError(f"Arc parameter {field.name} must be finite, got {value}")
        if self.rx <= 0.0 or self.ry <= 0.0:
            raise ValueError(f"Arc radii must be positive, got rx={self.rx}, ry={self.ry}")
        if not self.is_valid:
            raise ValueError(f"Arc step must satisfy 0 < step <= pi, got {self.step}")
        return self

    @property
    def direction(self) -> ArcDirection:
        """Traversal direction given by the sign of delta."""
        return ArcDirection.from_sweep(self.delta)

    @property
    def mapper(self) -> EllipticMapper:
        """Mapper from the unit circle onto this arc's ellipse."""
        return EllipticMapper(self.center_x, self.center_y, self.rx, self.ry, self.phi)

    @property
    def segment_count(self) -> int:
        """Number of Bezier segments this arc is drawn with."""
        return len(ArcSegmenter.sub_arcs(self.theta, self.delta, self.step))

    def point_at(self, angle: float) -> AvPoint:
        """The exact point of the ellipse at the unit-circle _angle_."""
        return self.mapper.map_point(AvPoint.polar(angle))

    @property
    def start_point(self) -> AvPoint:
        """Exact ellipse point at theta."""
        return self.point_at(self.theta)

    @property
    def end_point(self) -> AvPoint:
        """Exact ellipse point at theta + delta."""
        return self.point_at(self.theta + self.delta)

    def scaled(self, factor: float) -> ArcSpec:
        """The same arc with both radii multiplied by _factor_."""
        return dataclasses.replace(self, rx=self.rx * factor, ry=self.ry * factor)

    def reversed(self) -> ArcSpec:
        """The same arc traversed from its end back to its start."""
        return dataclasses.replace(self, theta=self.theta + self.delta, delta=-self.delta)


###############################################################################
# Segments and emission
###############################################################################
def arc_segments(spec: ArcSpec) -> List[BezierSegment]:
    """
    Approximate the arc described by _spec_ by cubic Bezier segments.

    Consecutive segments share their endpoint, i.e. segments[i].p2 is segments[i + 1].p1.

    Args:
        spec (ArcSpec): the arc

    Returns:
        List[BezierSegment]: segments in traversal order, empty for an invalid step or zero sweep
    """
    mapper = spec.mapper
    segments: List[BezierSegment] = []
    for tau, alpha in ArcSegmenter.sub_arcs(spec.theta, spec.delta, spec.step):
        segment = mapper.map_segment(BezierCurve.unit_arc_control_points(alpha, tau))
        if segments:
            segment = segment._replace(p1=segments[-1].p2)
        segments.append(segment)
    return segments


def emit_segments(sink: AvPathSink, segments: Iterable[BezierSegment], move_to_start: bool = True) -> int:
    """
    Issue the drawing commands for _segments_ on _sink_.

    One moveTo to the first segment's start (if any segment exists and _move_to_start_ is set),
    then one curveTo per segment. Exceptions raised by the sink are not handled here.

    Returns:
        int: number of curveTo calls
    """
    count = 0
    for segment in segments:
        if count == 0 and move_to_start:
            sink.moveTo(segment.p1)
        sink.curveTo(segment.q1, segment.q2, segment.p2)
        count += 1
    return count


def draw_arc(
    # pylint: disable=too-many-arguments,too-many-positional-arguments
    sink: AvPathSink,
    center_x: float,
    center_y: float,
    rx: float,
    ry: float,
    start_angle: float,
    sweep_angle: float,
    axis_rotation: float = 0.0,
    max_segment_angle: float = DEFAULT_ARC_STEP,
) -> int:
    """
    Draw an elliptic arc on _sink_.

    Args:
        sink (AvPathSink): receives moveTo/curveTo calls
        center_x (float): x-coordinate of the center
        center_y (float): y-coordinate of the center
        rx (float): radius along the ellipse's x-axis
        ry (float): radius along the ellipse's y-axis
        start_angle (float): start angle on the unit circle in radians
        sweep_angle (float): signed sweep in radians
        axis_rotation (float, optional): rotation of the ellipse's axes. Defaults to 0.0.
        max_segment_angle (float, optional): maximum angle per Bezier segment. Defaults to pi/4.

    Returns:
        int: number of Bezier segments drawn (0 for an invalid step or a zero sweep)
    """
    spec = ArcSpec(center_x, center_y, rx, ry, axis_rotation, start_angle, sweep_angle, max_segment_angle)
    return emit_segments(sink, arc_segments(spec))


def draw_ellipse(
    # pylint: disable=too-many-arguments,too-many-positional-arguments
    sink: AvPathSink,
    center_x: float,
    center_y: float,
    rx: float,
    ry: float,
    phi: float = 0.0,
    step: float = DEFAULT_ARC_STEP,
) -> int:
    """Draw a full ellipse, counter-clockwise starting at angle 0."""
    return draw_arc(sink, center_x, center_y, rx, ry, 0.0, TWO_PI, phi, step)


def draw_circle(sink: AvPathSink, center_x: float, center_y: float, r: float, step: float = DEFAULT_ARC_STEP) -> int:
    """Draw a full circle, counter-clockwise starting at (center_x + r, center_y)."""
    return draw_arc(sink, center_x, center_y, r, r, 0.0, TWO_PI, 0.0, step)


def arc_bounding_box(spec: ArcSpec, steps_per_segment: int = 32) -> Optional[AvBox]:
    """
    Bounding box of the Bezier approximation of _spec_.

    Computed from the polygonized segments, so it is exact up to the sampling density.

    Returns:
        Optional[AvBox]: the box or None if the arc produces no segments
    """
    segments = arc_segments(spec)
    if not segments:
        return None
    buffer = np.empty((len(segments) * steps_per_segment + 1, 3), dtype=np.float64)
    index = 0
    for segment in segments:
        index += BezierCurve.polygonize_cubic_curve_inplace(
            segment, steps_per_segment, buffer, start_index=index, skip_first=index > 0
        )
    return AvBox.from_points(buffer[:index])
