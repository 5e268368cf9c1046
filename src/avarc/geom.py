"""Handling geometries"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avarc.common import DEFAULT_ATOL


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def transform_point(
        affine_trafo: Sequence[Union[int, float]], point: Sequence[Union[int, float]]
    ) -> Tuple[float, float]:
        """
        Perform an affine transformation on the given 2D point.

        The given _affine_trafo_ is a list of 6 floats, performing an affine transformation.
        The transformation is defined as:
            | x' | = | a00 a01 b0 |   | x |
            | y' | = | a10 a11 b1 | * | y |
            | 1  | = |  0   0  1  |   | 1 |
        with
            affine_trafo = [a00, a01, a10, a11, b0, b1]
        See also shapely - Affine Transformations

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]
            point (Tuple/List[float]): 2D point - (x, y)

        Returns:
            Tuple[float, float]: the transformed point
        """
        x_new = float(affine_trafo[0] * point[0] + affine_trafo[1] * point[1] + affine_trafo[4])
        y_new = float(affine_trafo[2] * point[0] + affine_trafo[3] * point[1] + affine_trafo[5])
        return (x_new, y_new)


###############################################################################
# AvPoint
###############################################################################
class AvPoint(NamedTuple):
    """
    Immutable 2D point in Cartesian user space (y increases upward).

    Being a tuple, an AvPoint can be handed to any fontTools pen as is.
    All operations return a new point.
    """

    x: float
    y: float

    def scale(self, sx: float, sy: float) -> AvPoint:
        """Scale about the origin by _sx_ in x-direction and _sy_ in y-direction."""
        return AvPoint(self.x * sx, self.y * sy)

    def rotate(self, theta: float) -> AvPoint:
        """Rotate about the origin by _theta_ radians (counter-clockwise positive)."""
        cos_theta = math.cos(theta)
        sin_theta = math.sin(theta)
        return AvPoint(
            self.x * cos_theta - self.y * sin_theta,
            self.x * sin_theta + self.y * cos_theta,
        )

    def translate(self, dx: float, dy: float) -> AvPoint:
        """Move by (_dx_, _dy_)."""
        return AvPoint(self.x + dx, self.y + dy)

    def transform(self, affine_trafo: Sequence[Union[int, float]]) -> AvPoint:
        """Apply the affine transformation [a00, a01, a10, a11, b0, b1]."""
        return AvPoint(*GeomMath.transform_point(affine_trafo, self))

    def distance_to(self, other: Sequence[float]) -> float:
        """Euclidean distance to _other_."""
        return math.hypot(self.x - other[0], self.y - other[1])

    def approx_equal(self, other: Sequence[float], atol: float = DEFAULT_ATOL) -> bool:
        """True if both coordinates differ by no more than _atol_."""
        return abs(self.x - other[0]) <= atol and abs(self.y - other[1]) <= atol

    @classmethod
    def polar(cls, angle: float) -> AvPoint:
        """Point on the unit circle at _angle_ radians."""
        return cls(math.cos(angle), math.sin(angle))


###############################################################################
# AvAffine
###############################################################################
class AvAffine(NamedTuple):
    """
    Immutable affine transformation [a00, a01, a10, a11, b0, b1].

    Same layout as GeomMath.transform_point, so an AvAffine can be passed wherever
    an affine_trafo sequence is expected. Compose with then(): t1.then(t2) applies t1 first.
    """

    a00: float
    a01: float
    a10: float
    a11: float
    b0: float
    b1: float

    @classmethod
    def identity(cls) -> AvAffine:
        """The identity transformation."""
        return cls(1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @classmethod
    def scaling(cls, sx: float, sy: float) -> AvAffine:
        """Scaling about the origin."""
        return cls(sx, 0.0, 0.0, sy, 0.0, 0.0)

    @classmethod
    def rotation(cls, theta: float) -> AvAffine:
        """Rotation about the origin by _theta_ radians (counter-clockwise positive)."""
        cos_theta = math.cos(theta)
        sin_theta = math.sin(theta)
        return cls(cos_theta, -sin_theta, sin_theta, cos_theta, 0.0, 0.0)

    @classmethod
    def translation(cls, dx: float, dy: float) -> AvAffine:
        """Translation by (_dx_, _dy_)."""
        return cls(1.0, 0.0, 0.0, 1.0, dx, dy)

    def then(self, other: AvAffine) -> AvAffine:
        """
        Compose two transformations: the result applies _self_ first, then _other_.

        Args:
            other (AvAffine): transformation applied after this one

        Returns:
            AvAffine: the composed transformation
        """
        return AvAffine(
            other.a00 * self.a00 + other.a01 * self.a10,
            other.a00 * self.a01 + other.a01 * self.a11,
            other.a10 * self.a00 + other.a11 * self.a10,
            other.a10 * self.a01 + other.a11 * self.a11,
            other.a00 * self.b0 + other.a01 * self.b1 + other.b0,
            other.a10 * self.b0 + other.a11 * self.b1 + other.b1,
        )

    def apply(self, point: Sequence[float]) -> AvPoint:
        """Transform a single point."""
        return AvPoint(*GeomMath.transform_point(self, point))

    def apply_array(self, points: Union[Sequence[Sequence[float]], NDArray[np.float64]]) -> NDArray[np.float64]:
        """
        Transform an array of points.

        Args:
            points: (n, 2) array-like of (x, y) points; additional columns are passed through

        Returns:
            NDArray[np.float64]: transformed copy of the points
        """
        result = np.array(points, dtype=np.float64)
        if result.size == 0:
            return result
        matrix = np.array([[self.a00, self.a01], [self.a10, self.a11]], dtype=np.float64)
        result[:, :2] = result[:, :2] @ matrix.T + np.array([self.b0, self.b1], dtype=np.float64)
        return result


###############################################################################
# AvBox
###############################################################################
@dataclass
class AvBox:
    """
    Represents a rectangular box with coordinates and dimensions.

    Attributes:
        xmin (float): The minimum x-coordinate.
        ymin (float): The minimum y-coordinate.
        xmax (float): The maximum x-coordinate.
        ymax (float): The maximum y-coordinate.
    """

    _xmin: float
    _ymin: float
    _xmax: float
    _ymax: float

    def __init__(self, xmin: float, ymin: float, xmax: float, ymax: float):
        """Initialize AvBox with coordinates.

        Args:
            xmin: The minimum x-coordinate
            ymin: The minimum y-coordinate
            xmax: The maximum x-coordinate
            ymax: The maximum y-coordinate
        """
        self._xmin = xmin
        self._ymin = ymin
        self._xmax = xmax
        self._ymax = ymax

        # Normalize coordinates to ensure xmin <= xmax and ymin <= ymax
        if self._xmin > self._xmax:
            self._xmin, self._xmax = self._xmax, self._xmin
        if self._ymin > self._ymax:
            self._ymin, self._ymax = self._ymax, self._ymin

    @property
    def xmin(self) -> float:
        """float: The minimum x-coordinate."""
        return self._xmin

    @property
    def ymin(self) -> float:
        """float: The minimum y-coordinate."""
        return self._ymin

    @property
    def xmax(self) -> float:
        """float: The maximum x-coordinate."""
        return self._xmax

    @property
    def ymax(self) -> float:
        """float: The maximum y-coordinate."""
        return self._ymax

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """The extent of the box as Tuple (xmin, ymin, xmax, ymax)."""
        return self._xmin, self._ymin, self._xmax, self._ymax

    @property
    def width(self) -> float:
        """float: The width of the box (difference between xmax and xmin)."""
        return self._xmax - self._xmin

    @property
    def height(self) -> float:
        """float: The height of the box (difference between ymax and ymin)."""
        return self._ymax - self._ymin

    @property
    def centroid(self) -> Tuple[float, float]:
        """The centroid of the box as (x, y)."""
        return (self._xmin + self._xmax) / 2, (self._ymin + self._ymax) / 2

    @classmethod
    def from_points(cls, points: Union[Sequence[Sequence[float]], NDArray[np.float64]]) -> AvBox:
        """
        Create the smallest AvBox containing all given points.

        Args:
            points: (n, 2) or (n, 3) array-like; only the x and y columns are used

        Returns:
            AvBox: the bounding box

        Raises:
            ValueError: if no points are given
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.size == 0:
            raise ValueError("Cannot compute a bounding box of zero points.")
        xs = pts[:, 0]
        ys = pts[:, 1]
        return cls(float(xs.min()), float(ys.min()), float(xs.max()), float(ys.max()))

    def __str__(self):
        """Returns a string representation of the AvBox instance."""
        return (
            f"AvBox(xmin={self.xmin}, ymin={self.ymin}, "
            f"xmax={self.xmax}, ymax={self.ymax}, "
            f"width={self.width}, height={self.height})"
        )
