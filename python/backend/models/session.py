"""The per-playthrough aggregate and its lifecycle states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class GameState(StrEnum):
    INTRO = "intro"
    PLAYING = "playing"
    FEEDBACK = "feedback"
    VICTORY = "victory"
    TIMEOUT = "timeout"
    GAME_OVER = "game_over"
    SUMMARY = "summary"

    @property
    def is_terminal(self) -> bool:
        return self in (GameState.GAME_OVER, GameState.SUMMARY)


@dataclass(frozen=True)
class GameSession:
    """Immutable snapshot of a run; the state machine swaps in new copies.

    ``generation`` changes every time a level is (re-)entered and ``run``
    every time a new session starts.  Deferred callbacks capture one of
    them and become no-ops once it moves on.
    """

    level_index: int = 0
    score: int = 0
    mistakes: int = 0
    lives_remaining: int | None = None
    found_count: int = 0
    target_count: int = 0
    elapsed_seconds: int = 0
    remaining_seconds: int | None = None
    hints_used: int = 0
    state: GameState = GameState.INTRO
    generation: int = 0
    run: int = 0

    @property
    def is_level_complete(self) -> bool:
        return self.target_count > 0 and self.found_count >= self.target_count
