"""ProgressionStateMachine tests — side effects around the reducer.

All timing runs on the virtual ``Scheduler``: advancing it is how these
tests let removal delays, flashes, hints and countdowns elapse.
"""

from __future__ import annotations

import random

import pytest

from backend.engine.clock import Scheduler
from backend.engine.layoutpacker import LayoutPacker
from backend.engine.matchvalidator import Verdict
from backend.engine.progression import ProgressionStateMachine
from backend.models.errors import ConfigurationError
from backend.models.geometry import CanvasSize, Point
from backend.models.items import LabelSpec
from backend.models.level import Level
from backend.models.rules import GameRules, TimeoutScope
from backend.models.session import GameState

from support import DISTRACTORS, PHRASE, make_levels

HIT = Verdict(True, 10)
MISS = Verdict(False, 0)


# -- helpers ------------------------------------------------------------------


def _machine(
    scheduler: Scheduler, *phrases: str, seed: int = 0, **rules
) -> ProgressionStateMachine:
    return ProgressionStateMachine(
        make_levels(*(phrases or (PHRASE,))),
        GameRules(**rules),
        packer=LayoutPacker(random.Random(seed)),
        scheduler=scheduler,
    )


def _targets(m: ProgressionStateMachine) -> list:
    return [i for i in m.items if i.is_target and not i.resolved]


def _distractor(m: ProgressionStateMachine):
    return next(i for i in m.items if not i.is_target)


def _win_level(m: ProgressionStateMachine) -> None:
    for item in _targets(m):
        m.record_match(item.id, HIT)


# -- construction -------------------------------------------------------------


def test_no_levels_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        ProgressionStateMachine([], GameRules())


def test_target_missing_from_pool_fails_at_load() -> None:
    bad = Level(id="bad", item_pool=(LabelSpec("甲"),), target_sequence=("乙",))
    with pytest.raises(ConfigurationError):
        ProgressionStateMachine([bad], GameRules())


def test_oversized_target_fails_at_load() -> None:
    level = Level.from_phrase("huge", "一二三四五六七八九十", [])
    rules = GameRules(canvas=CanvasSize(60, 60))
    with pytest.raises(ConfigurationError):
        ProgressionStateMachine([level], rules)


def test_bad_rules_fail_at_load() -> None:
    with pytest.raises(ConfigurationError):
        ProgressionStateMachine(make_levels(PHRASE), GameRules(lives=0))


# -- level entry --------------------------------------------------------------


def test_start_packs_every_target(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    assert m.state is GameState.INTRO
    assert m.items == []
    m.start()
    assert m.state is GameState.PLAYING
    assert sorted(i.key for i in _targets(m)) == sorted(PHRASE)
    assert len(m.items) <= len(PHRASE) + len(DISTRACTORS)
    assert m.session.target_count == len(PHRASE)


def test_listeners_see_each_transition(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    seen: list[tuple[GameState, GameState]] = []
    unsubscribe = m.subscribe(lambda old, new, event: seen.append((old.state, new.state)))
    m.start()
    unsubscribe()
    m.restart()
    assert seen == [(GameState.INTRO, GameState.PLAYING)]


# -- matches ------------------------------------------------------------------


def test_correct_match_resolves_then_removes(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    item = _targets(m)[0]
    m.record_match(item.id, HIT)

    assert m.item(item.id).resolved
    assert m.session.found_count == 1
    assert m.session.score == 10
    scheduler.advance(0.4)
    assert m.item(item.id) is not None
    scheduler.advance(0.2)
    assert m.item(item.id) is None


def test_repeat_match_of_resolved_item_is_ignored(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    item = _targets(m)[0]
    m.record_match(item.id, HIT)
    m.record_match(item.id, HIT)
    assert m.session.found_count == 1


def test_all_targets_found_is_victory(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    _win_level(m)
    assert m.state is GameState.VICTORY
    assert m.session.found_count == len(PHRASE)

    elapsed = m.session.elapsed_seconds
    scheduler.advance(10)
    assert m.session.elapsed_seconds == elapsed


def test_wrong_match_flashes_briefly(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    wrong = _distractor(m)
    m.record_match(wrong.id, MISS)
    assert m.session.mistakes == 1
    assert m.flashing_id == wrong.id
    assert m.item(wrong.id) is not None
    scheduler.advance(0.6)
    assert m.flashing_id is None


def test_second_flash_restarts_the_timer(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    first, second = [i for i in m.items if not i.is_target][:2]
    m.record_match(first.id, MISS)
    scheduler.advance(0.4)
    m.record_match(second.id, MISS)
    scheduler.advance(0.2)
    assert m.flashing_id == second.id
    scheduler.advance(0.4)
    assert m.flashing_id is None


def test_lives_run_out(scheduler: Scheduler) -> None:
    m = _machine(scheduler, lives=2)
    m.start()
    wrong = _distractor(m)
    m.record_match(wrong.id, MISS)
    m.record_match(wrong.id, MISS)
    assert m.state is GameState.GAME_OVER
    assert m.record_match(_targets(m)[0].id, HIT).found_count == 0


# -- hints --------------------------------------------------------------------


def test_hint_highlights_nearest_target(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    target = _targets(m)[-1]
    hinted = m.request_hint(Point(target.x, target.y))
    assert hinted == target
    assert m.highlighted_id == target.id
    assert m.session.hints_used == 1
    scheduler.advance(2.1)
    assert m.highlighted_id is None


def test_hint_again_extends_highlight(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    m.request_hint()
    scheduler.advance(1.5)
    m.request_hint()
    scheduler.advance(1.5)
    assert m.highlighted_id is not None
    scheduler.advance(1.0)
    assert m.highlighted_id is None


def test_matching_hinted_item_clears_hint(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    hinted = m.request_hint()
    m.record_match(hinted.id, HIT)
    assert m.highlighted_id is None


def test_hint_outside_playing_does_nothing(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    assert m.request_hint() is None
    assert m.session.hints_used == 0


# -- countdowns ---------------------------------------------------------------


def test_level_countdown_times_out(scheduler: Scheduler) -> None:
    m = _machine(scheduler, countdown_seconds=3, timeout_scope=TimeoutScope.LEVEL)
    m.start()
    scheduler.advance(2)
    assert m.session.remaining_seconds == 1
    scheduler.advance(1)
    assert m.state is GameState.TIMEOUT

    m.retry()
    assert m.state is GameState.PLAYING
    assert m.session.remaining_seconds == 3
    assert len(_targets(m)) == len(PHRASE)


def test_session_countdown_ends_the_run(scheduler: Scheduler) -> None:
    m = _machine(scheduler, countdown_seconds=2, timeout_scope=TimeoutScope.SESSION)
    m.start()
    scheduler.advance(5)
    assert m.state is GameState.GAME_OVER
    assert m.session.elapsed_seconds == 2


# -- navigation and stale timers ----------------------------------------------


def test_advance_moves_to_next_level_then_summary(scheduler: Scheduler) -> None:
    m = _machine(scheduler, PHRASE, "國民待遇")
    m.start()
    _win_level(m)
    m.advance()
    assert m.session.level_index == 1
    assert m.level.title == "國民待遇"
    assert sorted(i.key for i in _targets(m)) == sorted("國民待遇")
    _win_level(m)
    m.advance()
    assert m.state is GameState.SUMMARY


def test_timers_from_a_left_level_never_fire(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    m.record_match(_targets(m)[0].id, HIT)
    m.record_match(_distractor(m).id, MISS)
    m.request_hint()

    m.leave()
    assert m.state is GameState.INTRO
    assert scheduler.pending == 0

    m.start()
    fresh = len(m.items)
    scheduler.advance(0.6)
    assert len(m.items) == fresh
    assert m.flashing_id is None
    assert m.session.found_count == 0


def test_restart_bumps_run_and_generation(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    m.start()
    before = m.session
    m.restart()
    assert m.session.run == before.run + 1
    assert m.session.generation == before.generation + 1
    assert m.items == []


def test_ignored_event_leaves_session_untouched(scheduler: Scheduler) -> None:
    m = _machine(scheduler)
    before = m.session
    assert m.advance() is before
    assert m.acknowledge() is before
