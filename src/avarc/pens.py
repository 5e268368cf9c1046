"""Path sinks: the drawing interface arcs are emitted to, and a recording pen based on FontTools."""

from __future__ import annotations

from typing import List, Protocol, Tuple, cast

import numpy as np
from fontTools.pens.basePen import BasePen
from numpy.typing import NDArray

from avarc.bezier import BezierCurve
from avarc.common import AvPathCmds


class AvPathSink(Protocol):
    """
    Anything that accepts moveTo and curveTo drawing commands.

    The method names follow the FontTools pen protocol, so every FontTools pen
    (RecordingPen, SVGPathPen, BasePen subclasses, ...) is a valid sink.
    """

    def moveTo(self, pt: Tuple[float, float]) -> None:  # pylint: disable=invalid-name
        """Start a new subpath at _pt_."""

    def curveTo(self, *points: Tuple[float, float]) -> None:  # pylint: disable=invalid-name
        """Draw a cubic curve with control points points[0], points[1] to endpoint points[2]."""


###############################################################################
# Pens
###############################################################################
class AvArcPtsCmdsPen(BasePen):
    """
    Records drawing commands and their points in a compact representation.
    The points are recorded in the order the commands supply them.
    Input points are supposed to be Tuple[float, float]
    while the result points are NDArray[np.float64] of shape (n, 3).

    Supports the commands: M, L, C, Z (all absolute).
    Points ".points" dimension is 3: (x, y, type).
    Type is 0.0 for start/end point, 3.0 for cubic curve point.

    Access the results via `.points` and `.commands` after drawing with this pen.
    """

    _points: NDArray[np.float64]  # numpy array of shape (n, 3) = (x, y, type)
    _commands: List[AvPathCmds]
    _polygonize_steps: int

    def __init__(self, polygonize_steps: int = 0, glyphSet=None):  # pylint: disable=invalid-name
        """
        Initialize the AvArcPtsCmdsPen.

        Parameters:
            polygonize_steps (int, optional): The number of steps to use for polygonization.
                Defaults to 0 = no polygonization. Steps = number of segments (lines) the curve will be divided into.
            glyphSet (GlyphSet, optional): passed on to BasePen, not needed for drawing arcs.

        Notes:
            If polygonize_steps is 0 the commands could contain also curves
            If polygonize_steps is greater than 0, then curves will be polygonized
        """
        super().__init__(glyphSet)
        self._polygonize_steps = polygonize_steps
        self._points = np.empty((0, 3), dtype=np.float64)
        self._commands = []

    # BasePen callback methods -------------------------------------------------
    def _moveTo(self, pt: Tuple[float, float]):
        self._commands.append("M")
        self._points = np.vstack([self._points, [float(pt[0]), float(pt[1]), 0.0]])

    def _lineTo(self, pt: Tuple[float, float]):
        self._commands.append("L")
        self._points = np.vstack([self._points, [float(pt[0]), float(pt[1]), 0.0]])

    def _curveToOne(self, pt1: Tuple[float, float], pt2: Tuple[float, float], pt3: Tuple[float, float]):
        # cubic bezier: two control points and an end point
        if self._polygonize_steps > 0:
            self._polygonize_cubic_bezier([self._getCurrentPoint(), pt1, pt2, pt3])
        else:
            self._commands.append("C")
            self._points = np.vstack(
                [
                    self._points,
                    [float(pt1[0]), float(pt1[1]), 3.0],
                    [float(pt2[0]), float(pt2[1]), 3.0],
                    [float(pt3[0]), float(pt3[1]), 0.0],
                ]
            )

    def _closePath(self):
        self._commands.append("Z")

    def _endPath(self):
        # open subpaths end without a command
        pass

    def _getCurrentPoint(self) -> Tuple[float, float]:
        pt = super()._getCurrentPoint()
        # if the point is a tuple of two floats (or ints), return it
        if isinstance(pt, tuple) and len(pt) == 2 and all(isinstance(x, (int, float, np.floating)) for x in pt):
            return pt
        raise ValueError(f"Invalid point {pt} in _getCurrentPoint")

    def _polygonize_cubic_bezier(self, points: List[Tuple[float, float]]):
        steps = self._polygonize_steps
        new_points = np.empty((steps, 3), dtype=np.float64)
        BezierCurve.polygonize_cubic_curve_inplace(points, steps, new_points, start_index=0, skip_first=True)
        # every polygon vertex is recorded as an on-curve point of a line
        new_points[:, 2] = 0.0
        self._points = np.vstack([self._points, new_points])
        self._commands.extend(cast(List[AvPathCmds], ["L"] * steps))

    @property
    def commands(self) -> List[AvPathCmds]:
        """Return the recorded commands as a list (uppercase commands)."""
        return self._commands

    @property
    def points(self) -> NDArray[np.float64]:
        """Return recorded points as an (n_points, 3) ndarray of float64."""
        return self._points

    def reset(self) -> None:
        """Clear recorded commands and points."""
        self._points = np.empty((0, 3), dtype=np.float64)
        self._commands = []
