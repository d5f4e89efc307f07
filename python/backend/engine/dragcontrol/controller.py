"""Input-agnostic pointer drag handling.

Frontends translate their native mouse or touch events into the three
entry points below (in canvas coordinates); the controller does the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from backend.engine.hittest import HitTestRegistry, Region
from backend.engine.matchvalidator import Verdict
from backend.models.geometry import Point
from backend.models.items import PlacedItem
from backend.models.rules import ReturnPolicy

logger = logging.getLogger(__name__)


class Haptics(Protocol):
    def pulse(self, success: bool) -> None: ...


class NullHaptics:
    """For platforms without a vibration motor."""

    def pulse(self, success: bool) -> None:
        return None


@dataclass
class DragSession:
    item_id: str
    origin_x: float
    origin_y: float
    current_x: float
    current_y: float
    pointer_id: Hashable = None

    @property
    def current(self) -> Point:
        return Point(self.current_x, self.current_y)

    @property
    def offset(self) -> tuple[float, float]:
        """How far the pointer has travelled since the drag began."""
        return self.current_x - self.origin_x, self.current_y - self.origin_y


class DropKind(StrEnum):
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    RETURNED = "returned"  # released outside every region
    IGNORED = "ignored"  # no drag in progress, or the item went away


@dataclass(frozen=True)
class DropResult:
    kind: DropKind
    item_id: str | None = None
    region_id: str | None = None
    verdict: Verdict | None = None
    # Where the item should be shown after a RETURNED drop.
    rest: Point | None = None


ItemLookup = Callable[[str], PlacedItem | None]
Judge = Callable[[PlacedItem, Region], Verdict]


class PointerDragController:
    """Owns the single in-progress ``DragSession``.

    Hit-testing happens only on release; moves just update the live
    position for the renderer.
    """

    def __init__(
        self,
        registry: HitTestRegistry,
        lookup: ItemLookup,
        judge: Judge,
        *,
        haptics: Haptics | None = None,
        return_policy: ReturnPolicy = ReturnPolicy.SNAP_BACK,
    ) -> None:
        self._registry = registry
        self._lookup = lookup
        self._judge = judge
        self._haptics = haptics or NullHaptics()
        self.return_policy = return_policy
        self._session: DragSession | None = None

    # -- queries --------------------------------------------------------------

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    # -- entry points ---------------------------------------------------------

    def on_drag_start(
        self, item_id: str, point: Point, pointer_id: Hashable = None
    ) -> bool:
        """Begin dragging *item_id*; returns False if the drag was refused."""
        if self._session is not None:
            logger.debug("Drag of %s refused: %s is already held", item_id, self._session.item_id)
            return False
        item = self._lookup(item_id)
        if item is None or item.resolved:
            logger.debug("Drag of %s refused: missing or already resolved", item_id)
            return False
        self._session = DragSession(
            item_id=item_id,
            origin_x=point.x,
            origin_y=point.y,
            current_x=point.x,
            current_y=point.y,
            pointer_id=pointer_id,
        )
        return True

    def on_drag_move(self, point: Point, pointer_id: Hashable = None) -> bool:
        session = self._session
        if session is None or pointer_id != session.pointer_id:
            return False
        session.current_x = point.x
        session.current_y = point.y
        return True

    def on_drag_end(self, point: Point, pointer_id: Hashable = None) -> DropResult:
        session = self._session
        if session is None or pointer_id != session.pointer_id:
            return DropResult(DropKind.IGNORED)

        try:
            session.current_x = point.x
            session.current_y = point.y
            return self._drop(session)
        finally:
            self._session = None

    def cancel(self) -> None:
        """Drop the session without judging it (navigation away, pointer cancel)."""
        if self._session is not None:
            logger.debug("Drag of %s cancelled", self._session.item_id)
        self._session = None

    # -- helpers --------------------------------------------------------------

    def _drop(self, session: DragSession) -> DropResult:
        item = self._lookup(session.item_id)
        if item is None or item.resolved:
            return DropResult(DropKind.IGNORED, session.item_id)

        region_id = self._registry.resolve(session.current)
        region = self._registry.get(region_id) if region_id is not None else None
        if region is None:
            if self.return_policy is ReturnPolicy.RESUME:
                rest = session.current
            else:
                rest = Point(item.x, item.y)
            return DropResult(DropKind.RETURNED, item.id, rest=rest)

        verdict = self._judge(item, region)
        self._pulse(verdict.correct)
        kind = DropKind.MATCHED if verdict.correct else DropKind.MISMATCHED
        return DropResult(kind, item.id, region.id, verdict)

    def _pulse(self, success: bool) -> None:
        try:
            self._haptics.pulse(success)
        except Exception:  # noqa: BLE001
            logger.debug("Haptic pulse failed", exc_info=True)
