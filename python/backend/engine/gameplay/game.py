"""Core gameplay wiring: packer, regions, drag, validator and progression."""

from __future__ import annotations

import random
from collections.abc import Hashable
from dataclasses import dataclass

from backend.engine.clock import Scheduler
from backend.engine.dragcontrol import (
    DragSession,
    DropKind,
    DropResult,
    Haptics,
    PointerDragController,
)
from backend.engine.hittest import BoundsProvider, HitTestRegistry, Region
from backend.engine.layoutpacker import LayoutPacker
from backend.engine.matchvalidator import MatchValidator, Verdict
from backend.engine.progression import Event, ProgressionStateMachine
from backend.models.geometry import Point
from backend.models.items import PlacedItem
from backend.models.level import GameDefinition, Level
from backend.models.session import GameSession, GameState


@dataclass(frozen=True)
class Snapshot:
    """Everything a renderer needs for one frame."""

    session: GameSession
    level: Level
    items: tuple[PlacedItem, ...]
    drag: DragSession | None
    highlighted_id: str | None
    flashing_id: str | None
    last_drop: DropResult | None


class GamePlay:
    """Orchestrates a single mini-game for one frontend."""

    def __init__(
        self,
        game: GameDefinition,
        *,
        rng: random.Random | None = None,
        scheduler: Scheduler | None = None,
        haptics: Haptics | None = None,
        start_level: int = 0,
    ) -> None:
        game.validate()
        self.game = game
        self.rules = game.rules
        self.scheduler = scheduler or Scheduler()
        packer = LayoutPacker(
            rng,
            border=game.rules.border,
            vertical_probability=game.rules.vertical_probability,
        )
        self.machine = ProgressionStateMachine(
            game.levels,
            game.rules,
            packer=packer,
            scheduler=self.scheduler,
            start_level=start_level,
        )
        self.validator = MatchValidator(
            game.classification,
            score_per_match=game.rules.score_per_match,
            explanations=game.explanations,
        )
        self.registry = HitTestRegistry()
        self.drag = PointerDragController(
            self.registry,
            self.machine.item,
            self._judge,
            haptics=haptics,
            return_policy=game.rules.return_policy,
        )
        self.last_drop: DropResult | None = None
        self.machine.subscribe(self._on_transition)

    # -- queries --------------------------------------------------------------

    @property
    def session(self) -> GameSession:
        return self.machine.session

    @property
    def state(self) -> GameState:
        return self.machine.state

    @property
    def level(self) -> Level:
        return self.machine.level

    @property
    def items(self) -> list[PlacedItem]:
        return self.machine.items

    def item_at(self, point: Point) -> PlacedItem | None:
        """Topmost unresolved item under *point* (later placements draw on top)."""
        for item in reversed(self.machine.items):
            if not item.resolved and item.bounds.contains(point):
                return item
        return None

    def snapshot(self) -> Snapshot:
        return Snapshot(
            session=self.session,
            level=self.level,
            items=tuple(self.machine.items),
            drag=self.drag.session,
            highlighted_id=self.machine.highlighted_id,
            flashing_id=self.machine.flashing_id,
            last_drop=self.last_drop,
        )

    # -- regions --------------------------------------------------------------

    def register_region(
        self,
        region_id: str,
        bounds_provider: BoundsProvider,
        accepts_key: str | None = None,
    ) -> Region:
        return self.registry.register(region_id, bounds_provider, accepts_key)

    def unregister_region(self, region_id: str) -> bool:
        return self.registry.unregister(region_id)

    # -- pointer input --------------------------------------------------------

    def pointer_down(self, point: Point, pointer_id: Hashable = None) -> bool:
        if self.state is not GameState.PLAYING:
            return False
        item = self.item_at(point)
        if item is None:
            return False
        return self.drag.on_drag_start(item.id, point, pointer_id)

    def pointer_move(self, point: Point, pointer_id: Hashable = None) -> bool:
        return self.drag.on_drag_move(point, pointer_id)

    def pointer_up(self, point: Point, pointer_id: Hashable = None) -> DropResult:
        result = self.drag.on_drag_end(point, pointer_id)
        if result.kind is not DropKind.IGNORED:
            self.last_drop = result
        return result

    def pointer_cancel(self) -> None:
        self.drag.cancel()

    def drop_on(self, item_id: str, region_id: str) -> DropResult:
        """Drag *item_id* straight onto *region_id* (keyboard frontends)."""
        item = self.machine.item(item_id)
        region = self.registry.get(region_id)
        bounds = region.bounds() if region is not None else None
        if item is None or bounds is None or self.state is not GameState.PLAYING:
            return DropResult(DropKind.IGNORED, item_id)
        if not self.drag.on_drag_start(item_id, Point(item.x, item.y)):
            return DropResult(DropKind.IGNORED, item_id)
        return self.pointer_up(bounds.center)

    # -- progression ----------------------------------------------------------

    def start(self) -> GameSession:
        return self.machine.start()

    def acknowledge(self) -> GameSession:
        return self.machine.acknowledge()

    def advance(self) -> GameSession:
        return self.machine.advance()

    def retry(self) -> GameSession:
        return self.machine.retry()

    def restart(self, level_index: int = 0) -> GameSession:
        return self.machine.restart(level_index)

    def request_hint(self, near: Point | None = None) -> PlacedItem | None:
        return self.machine.request_hint(near)

    def tick(self, seconds: float) -> int:
        """Advance game time; returns how many callbacks ran."""
        return self.scheduler.advance(seconds)

    def leave(self) -> None:
        """Navigate away: drop the drag unjudged and cancel every timer."""
        self.drag.cancel()
        self.machine.leave()

    # -- helpers --------------------------------------------------------------

    def _judge(self, item: PlacedItem, region: Region) -> Verdict:
        verdict = self.validator.validate(item.key, region.accepts_key)
        self.machine.record_match(item.id, verdict)
        return verdict

    def _on_transition(self, old: GameSession, new: GameSession, event: Event) -> None:
        if new.state is not GameState.PLAYING:
            self.drag.cancel()
        if new.generation != old.generation:
            self.last_drop = None
