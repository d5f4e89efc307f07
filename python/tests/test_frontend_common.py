"""Helpers shared by the frontends."""

from __future__ import annotations

import pytest

from backend.models.geometry import CanvasSize
from frontend.common import REGION_TOP, format_time, region_rects


@pytest.mark.parametrize(
    "seconds, text",
    [(0, "00:00"), (59, "00:59"), (61, "01:01"), (600, "10:00")],
)
def test_format_time(seconds: int, text: str) -> None:
    assert format_time(seconds) == text


@pytest.mark.parametrize("count", [1, 2, 3])
def test_region_rects_sit_below_canvas_without_overlap(count: int) -> None:
    canvas = CanvasSize(350, 400)
    rects = region_rects(canvas, count)
    assert len(rects) == count
    for rect in rects:
        assert rect.top == canvas.height + REGION_TOP
        assert 0 <= rect.left and rect.right <= canvas.width
    for a, b in zip(rects, rects[1:]):
        assert a.right < b.left
