"""Pure transition-table tests for the progression reducer."""

from __future__ import annotations

import pytest

from backend.engine.progression import (
    Acknowledge,
    Advance,
    Course,
    HintShown,
    ItemResolved,
    Restart,
    Retry,
    Start,
    Tick,
    TimerExpired,
    initial_session,
    transition,
)
from backend.models.rules import GameRules, TimeoutScope
from backend.models.session import GameSession, GameState


def _course(**rules) -> Course:
    return Course(GameRules(**rules), [2, 3])


def _playing(course: Course) -> GameSession:
    return transition(initial_session(course), Start(), course)


# -- intro / start ------------------------------------------------------------


def test_start_enters_playing_with_fresh_counters() -> None:
    course = _course(lives=3, countdown_seconds=30)
    s = _playing(course)
    assert s.state is GameState.PLAYING
    assert (s.score, s.mistakes, s.found_count) == (0, 0, 0)
    assert s.target_count == 2
    assert s.lives_remaining == 3
    assert s.remaining_seconds == 30
    assert s.run == 1
    assert s.generation == 1


@pytest.mark.parametrize(
    "event",
    [ItemResolved(True, 10), Tick(), TimerExpired(), HintShown(), Acknowledge(), Advance(), Retry()],
    ids=lambda e: type(e).__name__,
)
def test_intro_ignores_everything_but_start(event) -> None:
    course = _course()
    s = initial_session(course)
    assert transition(s, event, course) is s


# -- playing ------------------------------------------------------------------


def test_correct_matches_reach_victory_exactly_once() -> None:
    course = _course()
    s = _playing(course)
    s = transition(s, ItemResolved(True, 10), course)
    assert s.state is GameState.PLAYING
    s = transition(s, ItemResolved(True, 10), course)
    assert s.state is GameState.VICTORY
    assert (s.found_count, s.score) == (2, 20)
    assert transition(s, ItemResolved(True, 10), course) is s


def test_feedback_card_sits_between_playing_and_victory() -> None:
    course = _course(feedback_card=True)
    s = _playing(course)
    for _ in range(2):
        s = transition(s, ItemResolved(True, 10), course)
    assert s.state is GameState.FEEDBACK
    assert transition(s, Advance(), course) is s
    assert transition(s, Acknowledge(), course).state is GameState.VICTORY


def test_score_never_decreases() -> None:
    course = _course()
    s = _playing(course)
    scores = [s.score]
    for event in (ItemResolved(True, 10), ItemResolved(False), ItemResolved(True, -50)):
        s = transition(s, event, course)
        scores.append(s.score)
    assert scores == sorted(scores)


def test_wrong_match_costs_a_life() -> None:
    course = _course(lives=2)
    s = _playing(course)
    s = transition(s, ItemResolved(False), course)
    assert (s.mistakes, s.lives_remaining, s.state) == (1, 1, GameState.PLAYING)
    s = transition(s, ItemResolved(False), course)
    assert (s.mistakes, s.lives_remaining, s.state) == (2, 0, GameState.GAME_OVER)


def test_unlimited_lives_never_game_over() -> None:
    course = _course()
    s = _playing(course)
    for _ in range(20):
        s = transition(s, ItemResolved(False), course)
    assert s.state is GameState.PLAYING
    assert s.mistakes == 20
    assert s.lives_remaining is None


def test_tick_counts_up_and_down() -> None:
    course = _course(countdown_seconds=2)
    s = _playing(course)
    s = transition(s, Tick(1), course)
    assert (s.elapsed_seconds, s.remaining_seconds) == (1, 1)
    s = transition(s, Tick(5), course)
    assert (s.elapsed_seconds, s.remaining_seconds) == (6, 0)


@pytest.mark.parametrize(
    "scope, expected",
    [(TimeoutScope.LEVEL, GameState.TIMEOUT), (TimeoutScope.SESSION, GameState.GAME_OVER)],
)
def test_timer_expiry_by_scope(scope: TimeoutScope, expected: GameState) -> None:
    course = _course(countdown_seconds=10, timeout_scope=scope)
    s = transition(_playing(course), TimerExpired(), course)
    assert s.state is expected


def test_hint_is_counted() -> None:
    course = _course()
    s = transition(_playing(course), HintShown(), course)
    assert s.hints_used == 1


# -- between levels -----------------------------------------------------------


def test_advance_enters_next_level_then_summary() -> None:
    course = _course()
    s = _playing(course)
    for _ in range(2):
        s = transition(s, ItemResolved(True, 10), course)
    s = transition(s, Advance(), course)
    assert (s.state, s.level_index, s.found_count, s.target_count) == (
        GameState.PLAYING, 1, 0, 3,
    )
    assert s.score == 20
    for _ in range(3):
        s = transition(s, ItemResolved(True, 10), course)
    s = transition(s, Advance(), course)
    assert s.state is GameState.SUMMARY
    assert s.score == 50


def test_retry_replays_the_same_level_with_a_new_generation() -> None:
    course = _course(countdown_seconds=5)
    s = _playing(course)
    s = transition(s, ItemResolved(True, 10), course)
    timed_out = transition(s, TimerExpired(), course)
    retried = transition(timed_out, Retry(), course)
    assert retried.state is GameState.PLAYING
    assert retried.level_index == 0
    assert retried.found_count == 0
    assert retried.remaining_seconds == 5
    assert retried.generation == timed_out.generation + 1


def test_session_countdown_carries_across_levels() -> None:
    course = _course(countdown_seconds=100, timeout_scope=TimeoutScope.SESSION)
    s = _playing(course)
    s = transition(s, Tick(30), course)
    for _ in range(2):
        s = transition(s, ItemResolved(True, 10), course)
    s = transition(s, Advance(), course)
    assert s.remaining_seconds == 70


# -- restart ------------------------------------------------------------------


@pytest.mark.parametrize("state_events", [[], [TimerExpired()], [ItemResolved(True, 1)] * 2])
def test_restart_from_anywhere_returns_to_intro(state_events) -> None:
    course = _course(countdown_seconds=10)
    s = _playing(course)
    for event in state_events:
        s = transition(s, event, course)
    r = transition(s, Restart(1), course)
    assert r.state is GameState.INTRO
    assert r.level_index == 1
    assert r.score == 0
    assert r.run == s.run + 1
    assert r.generation == s.generation + 1


def test_restart_out_of_range_falls_back_to_first_level() -> None:
    course = _course()
    r = transition(_playing(course), Restart(99), course)
    assert r.level_index == 0
