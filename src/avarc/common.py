"""Central module containing constants and definitions for arc approximation."""

from __future__ import annotations

import math
from enum import Enum, auto
from typing import Literal

###############################################################################
# Types
###############################################################################


AvPathCmds = Literal[  # Type-Definition for path commands recorded by the arc pens
    # MoveTo (2) - start a new subpath and move the current point to (x,y)
    "M",
    # LineTo (2) - draw a straight line from the current point to (x,y)
    "L",
    # Cubic Bezier To (6) - draw a cubic Bezier curve with two control points and an endpoint (x,y)
    "C",
    # ClosePath (0) - close subpath by drawing a line from the current point to start point
    "Z",
]


###############################################################################
# Enums and Consts
###############################################################################


TWO_PI: float = 2.0 * math.pi

# Largest angle a single cubic segment may span
MAX_ARC_STEP: float = math.pi

# Default maximum segment angle: 8 segments per full ellipse
DEFAULT_ARC_STEP: float = math.pi / 4.0

# Remainders below this (relative) angle are treated as rounding noise by the segmenter
ARC_ANGLE_EPS: float = 1.0e-12

# Absolute tolerance used by approx_equal comparisons
DEFAULT_ATOL: float = 1.0e-9


class ArcDirection(Enum):
    """Enum to define the traversal direction of an arc."""

    CCW = auto()
    CW = auto()
    NONE = auto()

    @classmethod
    def from_sweep(cls, delta: float) -> ArcDirection:
        """Direction of the signed sweep _delta_ (positive = counter-clockwise)."""
        if delta > 0.0:
            return cls.CCW
        if delta < 0.0:
            return cls.CW
        return cls.NONE
