"""LayoutPacker tests — geometry properties over many seeds.

Each layout is checked for pairwise separation, containment inside the
bordered canvas, and (for ``pack_level``) target completeness.
"""

from __future__ import annotations

import itertools
import random

import pytest

from backend.engine.layoutpacker import LayoutPacker
from backend.engine.layoutpacker.packer import CHAR_WIDTH, LINE_HEIGHT
from backend.models.errors import ConfigurationError, PlacementError
from backend.models.geometry import CanvasSize, Rect
from backend.models.items import LabelSpec, PlacedItem
from backend.models.rules import DEFAULT_CANVAS

from support import DISTRACTORS, PHRASE

SEEDS = list(range(25))
MARGIN = 5.0


# -- helpers ------------------------------------------------------------------


def _targets(phrase: str = PHRASE) -> list[LabelSpec]:
    return [LabelSpec(g, is_target=True) for g in phrase]


def _distractors(words: list[str] = DISTRACTORS) -> list[LabelSpec]:
    return [LabelSpec(w) for w in words]


def _assert_separated(items: list[PlacedItem], margin: float) -> None:
    for a, b in itertools.combinations(items, 2):
        assert not a.bounds.overlaps(b.bounds, margin), f"{a.id} overlaps {b.id}"


def _assert_inside(items: list[PlacedItem], canvas: CanvasSize, border: float) -> None:
    interior = Rect(0, 0, canvas.width, canvas.height).inset(border)
    for item in items:
        assert interior.contains_rect(item.bounds), f"{item.id} leaves the canvas"


# -- single pass --------------------------------------------------------------


@pytest.mark.parametrize("seed", SEEDS)
def test_pack_never_overlaps(seed: int) -> None:
    packer = LayoutPacker(random.Random(seed))
    items = packer.pack([*_targets(), *_distractors()], DEFAULT_CANVAS, MARGIN)
    assert items
    _assert_separated(items, MARGIN)


@pytest.mark.parametrize("seed", SEEDS)
def test_pack_stays_inside_border(seed: int) -> None:
    packer = LayoutPacker(random.Random(seed), border=8.0)
    items = packer.pack([*_targets(), *_distractors()], DEFAULT_CANVAS, MARGIN)
    _assert_inside(items, DEFAULT_CANVAS, 8.0)


def test_pack_is_reproducible_with_same_seed() -> None:
    specs = [*_targets(), *_distractors()]
    first = LayoutPacker(random.Random(7)).pack(specs, DEFAULT_CANVAS, MARGIN)
    second = LayoutPacker(random.Random(7)).pack(specs, DEFAULT_CANVAS, MARGIN)
    assert first == second


def test_pack_ids_are_unique() -> None:
    specs = [*_targets("保保保"), *_distractors()]
    items = LayoutPacker(random.Random(3)).pack(specs, DEFAULT_CANVAS, MARGIN)
    ids = [item.id for item in items]
    assert len(ids) == len(set(ids))


def test_pack_of_nothing_is_empty() -> None:
    assert LayoutPacker(random.Random(0)).pack([], DEFAULT_CANVAS, MARGIN) == []


def test_single_pass_can_drop_a_target() -> None:
    """A large distractor placed first leaves no room for the target."""
    canvas = CanvasSize(100, 100)
    specs = [LabelSpec("T", font_size=30, is_target=True), LabelSpec("XX", font_size=30)]
    misses = 0
    for seed in range(20):
        packer = LayoutPacker(random.Random(seed), vertical_probability=0.0)
        items = packer.pack(specs, canvas, MARGIN)
        assert len(items) == 1
        if not items[0].is_target:
            misses += 1
    assert misses > 0


# -- measurement --------------------------------------------------------------


def test_measure_uses_fixed_font_size() -> None:
    packer = LayoutPacker(random.Random(0), vertical_probability=0.0)
    font, width, height, rotation = packer.measure(LabelSpec("ABC", font_size=20))
    assert font == 20
    assert width == pytest.approx(3 * 20 * CHAR_WIDTH)
    assert height == pytest.approx(20 * LINE_HEIGHT)
    assert rotation == 0


def test_measure_vertical_swaps_box() -> None:
    packer = LayoutPacker(random.Random(0), vertical_probability=1.0)
    font, width, height, rotation = packer.measure(LabelSpec("ABC", font_size=20))
    assert rotation == 90
    assert width == pytest.approx(20 * LINE_HEIGHT)
    assert height == pytest.approx(3 * 20 * CHAR_WIDTH)


@pytest.mark.parametrize("seed", SEEDS[:10])
def test_random_font_ranges(seed: int) -> None:
    packer = LayoutPacker(random.Random(seed))
    target_font = packer.measure(LabelSpec("領", is_target=True))[0]
    distractor_font = packer.measure(LabelSpec("旅遊"))[0]
    assert 24 <= target_font <= 32
    assert 16 <= distractor_font <= 28


# -- level packing ------------------------------------------------------------


@pytest.mark.parametrize("seed", SEEDS)
def test_pack_level_places_every_target(seed: int) -> None:
    packer = LayoutPacker(random.Random(seed))
    result = packer.pack_level(_targets(), _distractors(), DEFAULT_CANVAS, MARGIN, level_id=1)
    assert sorted(i.key for i in result.placed_targets) == sorted(PHRASE)
    assert result.omitted_targets == []
    _assert_separated(result.items, MARGIN)
    _assert_inside(result.items, DEFAULT_CANVAS, packer.border / 2 ** (result.attempts - 1))


@pytest.mark.parametrize("seed", range(10))
def test_pack_level_recovers_from_crowding(seed: int) -> None:
    canvas = CanvasSize(100, 100)
    packer = LayoutPacker(random.Random(seed), vertical_probability=0.0)
    result = packer.pack_level(
        [LabelSpec("T", font_size=30, is_target=True)],
        [LabelSpec("XX", font_size=30)],
        canvas,
        MARGIN,
    )
    assert [item.key for item in result.placed_targets] == ["T"]


def test_pack_level_logs_repack(caplog: pytest.LogCaptureFixture) -> None:
    canvas = CanvasSize(100, 100)
    specs = ([LabelSpec("T", font_size=30, is_target=True)], [LabelSpec("XX", font_size=30)])
    for seed in range(20):
        caplog.clear()
        result = LayoutPacker(random.Random(seed), vertical_probability=0.0).pack_level(
            *specs, canvas, MARGIN, level_id="crowded"
        )
        if result.attempts > 1:
            assert "re-packing" in caplog.text
            return
    pytest.fail("no seed needed a re-pack")


def test_pack_level_raises_when_targets_cannot_coexist() -> None:
    canvas = CanvasSize(100, 100)
    targets = [
        LabelSpec("AB", font_size=30, is_target=True),
        LabelSpec("CD", font_size=30, is_target=True),
    ]
    packer = LayoutPacker(random.Random(0), vertical_probability=0.0)
    with pytest.raises(PlacementError) as info:
        packer.pack_level(targets, [], canvas, margin=20.0, level_id=9)
    assert info.value.level_id == 9
    assert len(info.value.missing) == 1


# -- capacity -----------------------------------------------------------------


def test_capacity_rejects_canvas_smaller_than_border() -> None:
    packer = LayoutPacker(random.Random(0), border=8.0)
    with pytest.raises(ConfigurationError):
        packer.check_capacity(_targets(), CanvasSize(10, 10))


def test_capacity_rejects_oversized_target() -> None:
    packer = LayoutPacker(random.Random(0), vertical_probability=0.0)
    with pytest.raises(ConfigurationError):
        packer.check_capacity([LabelSpec("ABCDEFGHIJ", font_size=30, is_target=True)], DEFAULT_CANVAS)


def test_capacity_allows_target_that_fits_rotated() -> None:
    packer = LayoutPacker(random.Random(0), vertical_probability=0.2)
    packer.check_capacity([LabelSpec("ABCDEFGHIJ", font_size=30, is_target=True)], DEFAULT_CANVAS)


def test_capacity_rejects_too_much_total_area() -> None:
    packer = LayoutPacker(random.Random(0))
    targets = [LabelSpec(f"{i:02d}", font_size=30, is_target=True) for i in range(60)]
    with pytest.raises(ConfigurationError):
        packer.check_capacity(targets, DEFAULT_CANVAS)
