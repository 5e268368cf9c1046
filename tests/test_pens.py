"""Test module for avarc.pens

The tests are run using pytest.
"""

import math

import numpy as np
import pytest
from fontTools.pens.svgPathPen import SVGPathPen

from avarc.arc import draw_arc, draw_circle
from avarc.pens import AvArcPtsCmdsPen

###############################################################################
# AvArcPtsCmdsPen
###############################################################################


class TestAvArcPtsCmdsPen:
    """Recording of arcs in (points, commands) form."""

    def test_records_curves(self):
        """A circle is recorded as one M and one C per segment."""
        pen = AvArcPtsCmdsPen()
        draw_circle(pen, 0.0, 0.0, 1.0, step=math.pi / 2)
        assert pen.commands == ["M", "C", "C", "C", "C"]
        assert pen.points.shape == (1 + 4 * 3, 3)
        assert np.allclose(pen.points[0], [1.0, 0.0, 0.0])
        assert np.array_equal(pen.points[1:4, 2], [3.0, 3.0, 0.0])
        assert np.allclose(pen.points[-1, :2], [1.0, 0.0], atol=1e-9)

    def test_polygonized_circle(self):
        """With polygonize_steps the curves become lines close to the circle."""
        steps = 8
        pen = AvArcPtsCmdsPen(polygonize_steps=steps)
        draw_circle(pen, 2.0, -1.0, 3.0, step=math.pi / 2)
        assert pen.commands == ["M"] + ["L"] * (4 * steps)
        assert pen.points.shape == (1 + 4 * steps, 3)
        radii = np.hypot(pen.points[:, 0] - 2.0, pen.points[:, 1] + 1.0)
        assert np.allclose(radii, 3.0, atol=1.5e-3)
        assert np.allclose(pen.points[-1, :2], [5.0, -1.0], atol=1e-9)
        assert all(pen.points[:, 2] == 0.0)

    def test_line_and_close(self):
        """Other drawing commands are recorded as well."""
        pen = AvArcPtsCmdsPen()
        pen.moveTo((0.0, 0.0))
        pen.lineTo((1.0, 0.0))
        draw_arc(pen, 1.0, 1.0, 1.0, 1.0, -math.pi / 2, math.pi / 2)
        pen.closePath()
        assert pen.commands == ["M", "L", "M", "C", "C", "Z"]

    def test_reset(self):
        """reset() clears everything recorded so far."""
        pen = AvArcPtsCmdsPen()
        draw_circle(pen, 0.0, 0.0, 1.0)
        pen.reset()
        assert pen.commands == []
        assert pen.points.shape == (0, 3)

    def test_invalid_step_records_nothing(self):
        """Nothing is recorded for an invalid step."""
        pen = AvArcPtsCmdsPen()
        draw_circle(pen, 0.0, 0.0, 1.0, step=0.0)
        assert pen.commands == []


def test_svg_path_pen_as_sink():
    """The FontTools SVG path pen serializes the emitted arc."""
    pen = SVGPathPen(None)
    draw_circle(pen, 0.0, 0.0, 10.0, step=math.pi / 2)
    commands = pen.getCommands()
    assert commands.startswith("M")
    assert commands.count("C") == 4


@pytest.mark.parametrize("steps", [1, 3, 100])
def test_polygonized_arc_ends_on_arc(steps):
    """The last polygon vertex is the exact arc endpoint."""
    pen = AvArcPtsCmdsPen(polygonize_steps=steps)
    draw_arc(pen, 0.0, 0.0, 2.0, 1.0, 0.0, math.pi / 2)
    assert np.allclose(pen.points[-1, :2], [0.0, 1.0], atol=1e-9)
