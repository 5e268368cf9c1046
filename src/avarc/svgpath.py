"""Handling arcs for SVG paths"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple

import svgwrite.path

from avarc.arc import ArcSpec, arc_segments, emit_segments
from avarc.common import DEFAULT_ARC_STEP, TWO_PI
from avarc.geom import AvAffine, AvPoint
from avarc.pens import AvPathSink

logger = logging.getLogger(__name__)


class AvSvgwritePathSink:
    """
    Path sink writing absolute M and C commands into a svgwrite path element.

    Coordinates are passed on unchanged, i.e. y-flipping into the SVG
    coordinate system is up to the caller (e.g. by a transform on a parent group).
    """

    _path: svgwrite.path.Path

    def __init__(self, path: Optional[svgwrite.path.Path] = None, **extra):
        """
        Args:
            path (svgwrite.path.Path, optional): element to append to. Defaults to a new, empty path.
            **extra: SVG attributes for the new path (ignored if _path_ is given)
        """
        self._path = path if path is not None else svgwrite.path.Path(**extra)

    @property
    def path(self) -> svgwrite.path.Path:
        """The svgwrite path element the commands are pushed to."""
        return self._path

    def moveTo(self, pt: Tuple[float, float]) -> None:  # pylint: disable=invalid-name
        """Push an absolute M command."""
        self._path.push("M", float(pt[0]), float(pt[1]))

    def curveTo(self, *points: Tuple[float, float]) -> None:  # pylint: disable=invalid-name
        """Push an absolute C command (two control points, endpoint)."""
        if len(points) != 3:
            raise ValueError(f"Cubic curveTo needs exactly 3 points, got {len(points)}")
        coords = [float(value) for point in points for value in (point[0], point[1])]
        self._path.push("C", *coords)

    def closePath(self) -> None:  # pylint: disable=invalid-name
        """Push a Z command."""
        self._path.push("Z")


class AvSvgArc:
    """
    Static methods converting SVG elliptical arc commands (A/a) into arcs in center parameterization.

    An SVG arc is given by (rx ry x-axis-rotation large-arc-flag sweep-flag x y)
    and starts at the current point. The conversion follows the SVG implementation
    notes "Conversion from endpoint to center parameterization" including the
    correction of out-of-range radii.
    """

    @staticmethod
    def to_arc_spec(
        # pylint: disable=too-many-arguments,too-many-positional-arguments,too-many-locals
        start: Sequence[float],
        rx: float,
        ry: float,
        x_axis_rotation: float,
        large_arc: bool,
        sweep: bool,
        end: Sequence[float],
        step: float = DEFAULT_ARC_STEP,
    ) -> Optional[ArcSpec]:
        """
        Convert an SVG endpoint-parameterized arc into an ArcSpec.

        Args:
            start (Sequence[float]): current point (x, y) the arc starts at
            rx (float): radius in x-direction (sign is ignored)
            ry (float): radius in y-direction (sign is ignored)
            x_axis_rotation (float): rotation of the ellipse in degrees (as in SVG)
            large_arc (bool): large-arc-flag
            sweep (bool): sweep-flag, True = positive angle direction
            end (Sequence[float]): endpoint (x, y)
            step (float, optional): maximum angle per Bezier segment. Defaults to pi/4.

        Returns:
            Optional[ArcSpec]: the arc, or None if it degenerates to a straight line
                (a radius is zero) or to nothing (start equals end)
        """
        rx = abs(rx)
        ry = abs(ry)
        if rx == 0.0 or ry == 0.0:
            logger.debug("SVG arc with zero radius is a straight line: rx=%s ry=%s", rx, ry)
            return None
        if start[0] == end[0] and start[1] == end[1]:
            logger.debug("SVG arc with identical start and end point is skipped: %s", tuple(start))
            return None

        phi = math.radians(x_axis_rotation)

        # Step 1: half distance between the endpoints in the ellipse's own axes
        mid = AvAffine.rotation(-phi).apply(((start[0] - end[0]) / 2.0, (start[1] - end[1]) / 2.0))

        # Correction of out-of-range radii
        radii_scale = (mid.x * mid.x) / (rx * rx) + (mid.y * mid.y) / (ry * ry)
        if radii_scale > 1.0:
            rx *= math.sqrt(radii_scale)
            ry *= math.sqrt(radii_scale)

        # Step 2: center in the ellipse's own axes
        rx_sq = rx * rx
        ry_sq = ry * ry
        denominator = rx_sq * mid.y * mid.y + ry_sq * mid.x * mid.x
        factor = math.sqrt(max(0.0, (rx_sq * ry_sq - denominator) / denominator))
        if large_arc == sweep:
            factor = -factor
        center_own = AvPoint(factor * rx * mid.y / ry, -factor * ry * mid.x / rx)

        # Step 3: center in user space
        center = AvAffine.rotation(phi).apply(center_own)
        center = center.translate((start[0] + end[0]) / 2.0, (start[1] + end[1]) / 2.0)

        # Step 4: start angle and sweep on the unit circle
        theta = math.atan2((mid.y - center_own.y) / ry, (mid.x - center_own.x) / rx)
        theta_end = math.atan2((-mid.y - center_own.y) / ry, (-mid.x - center_own.x) / rx)
        delta = math.fmod(theta_end - theta, TWO_PI)
        if sweep and delta < 0.0:
            delta += TWO_PI
        elif not sweep and delta > 0.0:
            delta -= TWO_PI

        return ArcSpec(center.x, center.y, rx, ry, phi, theta, delta, step)

    @classmethod
    def draw(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        sink: AvPathSink,
        start: Sequence[float],
        rx: float,
        ry: float,
        x_axis_rotation: float,
        large_arc: bool,
        sweep: bool,
        end: Sequence[float],
        step: float = DEFAULT_ARC_STEP,
    ) -> int:
        """
        Emit an SVG arc as curveTo commands.

        The sink's current point is expected to be _start_ already, so no moveTo is issued.
        Degenerate arcs emit nothing; drawing the straight line for a zero radius is up to the caller.

        Returns:
            int: number of curveTo calls
        """
        spec = cls.to_arc_spec(start, rx, ry, x_axis_rotation, large_arc, sweep, end, step)
        if spec is None:
            return 0
        return emit_segments(sink, arc_segments(spec), move_to_start=False)
