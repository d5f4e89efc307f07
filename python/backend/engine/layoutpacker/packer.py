"""Spiral label packer with an axis-aligned no-overlap guarantee."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from backend.models.errors import ConfigurationError, PlacementError
from backend.models.geometry import CanvasSize, Rect
from backend.models.items import LabelSpec, PlacedItem, StyleHint

logger = logging.getLogger(__name__)

# Spiral walk
ANGLE_STEP = 0.5  # radians per step
RADIUS_STEP = 5.0
RADIUS_GROWTH = 0.1
MAX_STEPS = 200

# Text box estimate
CHAR_WIDTH = 1.2  # x font size
LINE_HEIGHT = 1.5  # x font size
TARGET_FONT = (24.0, 32.0)
DISTRACTOR_FONT = (16.0, 28.0)
PALETTE_TONES = 4


@dataclass
class PackResult:
    """Items that made it onto the canvas and the specs that did not."""

    items: list[PlacedItem]
    omitted: list[LabelSpec] = field(default_factory=list)
    attempts: int = 1

    @property
    def placed_targets(self) -> list[PlacedItem]:
        return [item for item in self.items if item.is_target]

    @property
    def omitted_targets(self) -> list[LabelSpec]:
        return [spec for spec in self.omitted if spec.is_target]


class LayoutPacker:
    """Places labels along an outward Archimedean spiral.

    Pass a seeded ``random.Random`` for reproducible layouts; every
    random choice (order, font size, rotation, tone, start angle) goes
    through it.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        max_steps: int = MAX_STEPS,
        border: float = 8.0,
        vertical_probability: float = 0.2,
    ) -> None:
        self._rng = rng or random.Random()
        self.max_steps = max_steps
        self.border = border
        self.vertical_probability = vertical_probability

    # -- single pass ----------------------------------------------------------

    def pack(
        self,
        items: Sequence[LabelSpec],
        canvas: CanvasSize,
        margin: float,
    ) -> list[PlacedItem]:
        """Place *items* in random order; items that do not fit are left out.

        The result never contains two boxes closer than *margin*.  It is
        not guaranteed to contain every requested item.
        """
        return self._pack(items, canvas, margin, self.border).items

    def _pack(
        self,
        items: Sequence[LabelSpec],
        canvas: CanvasSize,
        margin: float,
        border: float,
        *,
        placed: list[PlacedItem] | None = None,
        shuffle: bool = True,
    ) -> PackResult:
        order = list(items)
        if shuffle:
            self._rng.shuffle(order)
        layout = list(placed) if placed else []
        omitted: list[LabelSpec] = []
        first_seq = len(layout)

        for offset, spec in enumerate(order):
            item = self._place(first_seq + offset, spec, canvas, margin, border, layout)
            if item is None:
                omitted.append(spec)
                logger.debug("No room for %r after %d steps", spec.text, self.max_steps)
                continue
            layout.append(item)

        return PackResult(items=layout, omitted=omitted)

    def _place(
        self,
        seq: int,
        spec: LabelSpec,
        canvas: CanvasSize,
        margin: float,
        border: float,
        layout: list[PlacedItem],
    ) -> PlacedItem | None:
        font, width, height, rotation = self.measure(spec)
        tone = self._rng.randrange(PALETTE_TONES)
        interior = Rect(0, 0, canvas.width, canvas.height).inset(border)
        cx, cy = canvas.width / 2, canvas.height / 2

        angle = self._rng.random() * math.tau
        radius = 0.0
        for _ in range(self.max_steps):
            x = cx + radius * math.cos(angle)
            y = cy + radius * math.sin(angle)
            box = Rect.from_center(x, y, width, height)
            if interior.contains_rect(box) and not any(
                box.overlaps(other.bounds, margin) for other in layout
            ):
                return PlacedItem(
                    id=f"item-{seq}-{spec.key}",
                    label=spec.text,
                    key=spec.key,
                    is_target=spec.is_target,
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    rotation=rotation,
                    style_hint=StyleHint(font_size=font, tone=tone),
                )
            angle += ANGLE_STEP
            # Radius grows with the accumulated angle so the spiral widens.
            radius += RADIUS_STEP * (angle / math.tau) * RADIUS_GROWTH
        return None

    # -- sizing ---------------------------------------------------------------

    def measure(self, spec: LabelSpec) -> tuple[float, float, float, int]:
        """Return ``(font_size, width, height, rotation)`` for *spec*."""
        if spec.font_size is not None:
            font = spec.font_size
        else:
            lo, hi = TARGET_FONT if spec.is_target else DISTRACTOR_FONT
            font = lo + self._rng.random() * (hi - lo)
        width = len(spec.text) * font * CHAR_WIDTH
        height = font * LINE_HEIGHT
        if self._rng.random() < self.vertical_probability:
            return font, height, width, 90
        return font, width, height, 0

    def check_capacity(self, targets: Sequence[LabelSpec], canvas: CanvasSize) -> None:
        """Raise ``ConfigurationError`` if *targets* can never fit on *canvas*."""
        interior = Rect(0, 0, canvas.width, canvas.height).inset(self.border)
        if interior.width <= 0 or interior.height <= 0:
            raise ConfigurationError(
                f"Canvas {canvas.width}x{canvas.height} has no room inside a "
                f"{self.border}px border."
            )

        total_area = 0.0
        for spec in targets:
            font = spec.font_size if spec.font_size is not None else TARGET_FONT[0]
            w = len(spec.text) * font * CHAR_WIDTH
            h = font * LINE_HEIGHT
            fits = w <= interior.width and h <= interior.height
            if self.vertical_probability > 0:
                fits = fits or (h <= interior.width and w <= interior.height)
            if not fits:
                raise ConfigurationError(
                    f"Target {spec.text!r} ({w:.0f}x{h:.0f}) cannot fit on a "
                    f"{canvas.width}x{canvas.height} canvas."
                )
            total_area += w * h

        if total_area > interior.width * interior.height:
            raise ConfigurationError(
                f"{len(targets)} targets need {total_area:.0f}px² but the canvas "
                f"interior only has {interior.width * interior.height:.0f}px²."
            )

    # -- level packing --------------------------------------------------------

    def pack_level(
        self,
        targets: Sequence[LabelSpec],
        distractors: Sequence[LabelSpec],
        canvas: CanvasSize,
        margin: float,
        *,
        max_attempts: int = 4,
        level_id: object = None,
    ) -> PackResult:
        """Pack a level and make sure every target ends up on the canvas.

        The first attempt is a plain :meth:`pack` over everything.  On a
        target shortfall the border is halved and as many distractors as
        were omitted are dropped; the last attempt places targets before
        any distractor.  Raises ``PlacementError`` if targets still
        cannot be placed.
        """
        self.check_capacity(targets, canvas)

        pool = list(distractors)
        border = self.border
        missing: list[LabelSpec] = []
        for attempt in range(1, max_attempts + 1):
            if attempt > 1 and attempt == max_attempts:
                first = self._pack(targets, canvas, margin, border)
                rest = self._pack(pool, canvas, margin, border, placed=first.items)
                result = PackResult(rest.items, first.omitted + rest.omitted)
            else:
                result = self._pack([*targets, *pool], canvas, margin, border)
            result.attempts = attempt

            missing = result.omitted_targets
            if not missing:
                if result.omitted:
                    logger.debug(
                        "Level %s: %d distractor(s) left out", level_id, len(result.omitted)
                    )
                return result

            logger.warning(
                "Level %s: attempt %d left target(s) %s unplaced; re-packing",
                level_id,
                attempt,
                ", ".join(spec.text for spec in missing),
            )
            border /= 2
            pool = pool[: max(0, len(pool) - len(result.omitted))]

        raise PlacementError(level_id, [spec.text for spec in missing])
