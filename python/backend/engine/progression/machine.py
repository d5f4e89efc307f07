"""Level sequencing, scoring, lives, hints and timers.

The transition rules live in :mod:`reducer`; this class owns everything
with side effects around them: the current layout, the deferred
callbacks, and listener notification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from backend.engine.clock import Scheduler, TimerHandle
from backend.engine.layoutpacker import LayoutPacker, PackResult
from backend.engine.matchvalidator import Verdict
from backend.engine.progression.events import (
    Acknowledge,
    Advance,
    Event,
    HintShown,
    ItemResolved,
    Restart,
    Retry,
    Start,
    Tick,
    TimerExpired,
)
from backend.engine.progression.reducer import Course, initial_session, transition
from backend.models.errors import ConfigurationError
from backend.models.geometry import Point
from backend.models.items import PlacedItem
from backend.models.level import Level
from backend.models.rules import GameRules
from backend.models.session import GameSession, GameState

logger = logging.getLogger(__name__)

Listener = Callable[[GameSession, GameSession, Event], None]

TICK_SECONDS = 1


class ProgressionStateMachine:
    """Drives a ``GameSession`` through the levels of one game.

    Every level is validated (and checked against the canvas) on
    construction, so bad content fails here rather than mid-game.
    """

    def __init__(
        self,
        levels: Sequence[Level],
        rules: GameRules,
        *,
        packer: LayoutPacker | None = None,
        scheduler: Scheduler | None = None,
        start_level: int = 0,
    ) -> None:
        if not levels:
            raise ConfigurationError("At least one level is required.")
        rules.validate()
        self.rules = rules
        self.levels: tuple[Level, ...] = tuple(levels)
        self.packer = packer or LayoutPacker(
            border=rules.border, vertical_probability=rules.vertical_probability
        )
        for level in self.levels:
            level.validate()
            self.packer.check_capacity(level.targets(), rules.canvas)

        self.scheduler = scheduler or Scheduler()
        self._course = Course(rules, [level.target_count for level in self.levels])
        if not 0 <= start_level < len(self.levels):
            start_level = 0
        self.session: GameSession = initial_session(self._course, start_level)

        self.layout: PackResult | None = None
        self._items: dict[str, PlacedItem] = {}
        self.highlighted_id: str | None = None
        self.flashing_id: str | None = None

        self._tick: TimerHandle | None = None
        self._hint_timer: TimerHandle | None = None
        self._flash_timer: TimerHandle | None = None
        self._level_timers: list[TimerHandle] = []
        self._listeners: list[Listener] = []

    # -- queries --------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.session.state

    @property
    def level(self) -> Level:
        return self.levels[self.session.level_index]

    @property
    def is_last_level(self) -> bool:
        return self.session.level_index == len(self.levels) - 1

    @property
    def items(self) -> list[PlacedItem]:
        """Items still on the canvas, in placement order."""
        return list(self._items.values())

    def item(self, item_id: str) -> PlacedItem | None:
        return self._items.get(item_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener(old, new, event)* after every applied transition."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # -- transitions ----------------------------------------------------------

    def dispatch(self, event: Event) -> GameSession:
        old = self.session
        new = transition(old, event, self._course)
        if new is old:
            logger.debug("Ignored %s while %s", type(event).__name__, old.state)
            return old

        self.session = new
        if new.generation != old.generation:
            self._leave_level()
            if new.state is GameState.PLAYING:
                self._enter_level()
        elif old.state is GameState.PLAYING and new.state is not GameState.PLAYING:
            self.scheduler.cancel(self._tick)
            self._tick = None

        if new.state is not old.state:
            logger.info(
                "Level %s: %s -> %s (score %d, mistakes %d)",
                self.level.id,
                old.state,
                new.state,
                new.score,
                new.mistakes,
            )
        for listener in list(self._listeners):
            listener(old, new, event)

        if (
            new.state is GameState.PLAYING
            and new.remaining_seconds == 0
            and old.remaining_seconds != 0
        ):
            return self.dispatch(TimerExpired())
        return self.session

    def start(self) -> GameSession:
        return self.dispatch(Start())

    def acknowledge(self) -> GameSession:
        return self.dispatch(Acknowledge())

    def advance(self) -> GameSession:
        return self.dispatch(Advance())

    def retry(self) -> GameSession:
        return self.dispatch(Retry())

    def restart(self, level_index: int = 0) -> GameSession:
        return self.dispatch(Restart(level_index))

    def leave(self) -> GameSession:
        """Cancel everything pending and go back to the intro of this level."""
        return self.dispatch(Restart(self.session.level_index))

    # -- gameplay -------------------------------------------------------------

    def record_match(self, item_id: str, verdict: Verdict) -> GameSession:
        """Apply a judged drop of *item_id*."""
        if self.session.state is not GameState.PLAYING:
            return self.session
        item = self._items.get(item_id)
        if item is None or item.resolved:
            logger.debug("Match for %s ignored: not on the canvas", item_id)
            return self.session

        if verdict.correct:
            item.mark_resolved()
            if self.highlighted_id == item_id:
                self._clear_hint()
            self._later(self.rules.removal_delay, lambda: self._remove(item_id))
        else:
            self._flash(item_id)
        return self.dispatch(ItemResolved(verdict.correct, verdict.score_delta))

    def request_hint(self, near: Point | None = None) -> PlacedItem | None:
        """Highlight the unresolved target closest to *near* for a while."""
        if self.session.state is not GameState.PLAYING:
            return None
        candidates = [i for i in self._items.values() if i.is_target and not i.resolved]
        if not candidates:
            return None

        ref = near or self.rules.canvas.center
        nearest = min(candidates, key=lambda i: i.bounds.distance_sq(ref))
        self.highlighted_id = nearest.id
        self.scheduler.cancel(self._hint_timer)
        self._hint_timer = self._later(self.rules.hint_seconds, self._clear_hint)
        self.dispatch(HintShown())
        return nearest

    # -- level lifecycle ------------------------------------------------------

    def _enter_level(self) -> None:
        level = self.level
        self.layout = self.packer.pack_level(
            level.targets(),
            level.distractor_specs(),
            self.rules.canvas,
            self.rules.margin,
            max_attempts=self.rules.max_pack_attempts,
            level_id=level.id,
        )
        self._items = {item.id: item for item in self.layout.items}
        self._tick = self.scheduler.call_every(
            TICK_SECONDS, self._guarded(lambda: self.dispatch(Tick(TICK_SECONDS)))
        )
        logger.info(
            "Level %s: placed %d items (%d targets) in %d attempt(s)",
            level.id,
            len(self.layout.items),
            len(self.layout.placed_targets),
            self.layout.attempts,
        )

    def _leave_level(self) -> None:
        for handle in (self._tick, *self._level_timers):
            self.scheduler.cancel(handle)
        self._tick = None
        self._hint_timer = None
        self._flash_timer = None
        self._level_timers = []
        self.highlighted_id = None
        self.flashing_id = None
        self._items = {}
        self.layout = None

    # -- deferred callbacks ---------------------------------------------------

    def _guarded(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Wrap *callback* so it does nothing once its level is gone."""
        token = self.session.generation

        def fire() -> None:
            if self.session.generation != token:
                logger.debug("Stale callback for generation %d skipped", token)
                return
            callback()

        return fire

    def _later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = self.scheduler.call_later(delay, self._guarded(callback))
        self._level_timers.append(handle)
        return handle

    def _remove(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def _flash(self, item_id: str) -> None:
        self.flashing_id = item_id
        self.scheduler.cancel(self._flash_timer)
        self._flash_timer = self._later(self.rules.flash_seconds, self._clear_flash)

    def _clear_flash(self) -> None:
        self.flashing_id = None
        self._flash_timer = None

    def _clear_hint(self) -> None:
        self.scheduler.cancel(self._hint_timer)
        self.highlighted_id = None
        self._hint_timer = None
