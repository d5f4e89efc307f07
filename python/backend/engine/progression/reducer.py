"""Pure ``(session, event) -> session`` transition function.

Events that do not apply in the current state return the very same
session object, which is how callers tell "ignored" from "applied".
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

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
from backend.models.rules import GameRules, TimeoutScope
from backend.models.session import GameSession, GameState


@dataclass(frozen=True)
class Course:
    """What the reducer needs to know about the levels ahead."""

    rules: GameRules
    target_counts: Sequence[int]

    @property
    def level_count(self) -> int:
        return len(self.target_counts)


def initial_session(
    course: Course, level_index: int = 0, *, run: int = 0, generation: int = 0
) -> GameSession:
    return GameSession(
        level_index=level_index,
        lives_remaining=course.rules.lives,
        target_count=course.target_counts[level_index],
        remaining_seconds=course.rules.countdown_seconds,
        state=GameState.INTRO,
        run=run,
        generation=generation,
    )


def transition(session: GameSession, event: Event, course: Course) -> GameSession:
    if isinstance(event, Restart):
        index = event.level_index if 0 <= event.level_index < course.level_count else 0
        return initial_session(
            course, index, run=session.run + 1, generation=session.generation + 1
        )

    state = session.state
    if state is GameState.INTRO and isinstance(event, Start):
        fresh = initial_session(
            course, session.level_index, run=session.run + 1, generation=session.generation
        )
        return _enter_level(fresh, course, session.level_index)

    if state is GameState.PLAYING:
        if isinstance(event, ItemResolved):
            return _resolve(session, event, course.rules)
        if isinstance(event, Tick):
            return _tick(session, event.seconds)
        if isinstance(event, TimerExpired):
            terminal = (
                GameState.TIMEOUT
                if course.rules.timeout_scope is TimeoutScope.LEVEL
                else GameState.GAME_OVER
            )
            return replace(session, state=terminal, remaining_seconds=0)
        if isinstance(event, HintShown):
            return replace(session, hints_used=session.hints_used + 1)

    if state is GameState.FEEDBACK and isinstance(event, Acknowledge):
        return replace(session, state=GameState.VICTORY)

    if state is GameState.VICTORY and isinstance(event, Advance):
        next_index = session.level_index + 1
        if next_index < course.level_count:
            return _enter_level(session, course, next_index)
        return replace(session, state=GameState.SUMMARY)

    if state is GameState.TIMEOUT and isinstance(event, Retry):
        return _enter_level(session, course, session.level_index)

    return session


# -- helpers ------------------------------------------------------------------


def _enter_level(session: GameSession, course: Course, index: int) -> GameSession:
    remaining = session.remaining_seconds
    if course.rules.timeout_scope is TimeoutScope.LEVEL:
        remaining = course.rules.countdown_seconds
    return replace(
        session,
        level_index=index,
        found_count=0,
        target_count=course.target_counts[index],
        remaining_seconds=remaining,
        state=GameState.PLAYING,
        generation=session.generation + 1,
    )


def _resolve(session: GameSession, event: ItemResolved, rules: GameRules) -> GameSession:
    if event.correct:
        found = session.found_count + 1
        score = session.score + max(0, event.score_delta)
        if found >= session.target_count:
            done = GameState.FEEDBACK if rules.feedback_card else GameState.VICTORY
            return replace(session, found_count=found, score=score, state=done)
        return replace(session, found_count=found, score=score)

    lives = session.lives_remaining
    if lives is not None:
        lives = max(0, lives - 1)
    updated = replace(session, mistakes=session.mistakes + 1, lives_remaining=lives)
    if lives == 0:
        return replace(updated, state=GameState.GAME_OVER)
    return updated


def _tick(session: GameSession, seconds: int) -> GameSession:
    remaining = session.remaining_seconds
    if remaining is not None:
        remaining = max(0, remaining - seconds)
    return replace(
        session,
        elapsed_seconds=session.elapsed_seconds + seconds,
        remaining_seconds=remaining,
    )

