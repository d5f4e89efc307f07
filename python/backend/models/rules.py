"""Per-game tunables.

Every mini-game is the same engine run under a different ``GameRules``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from backend.models.errors import ConfigurationError
from backend.models.geometry import CanvasSize


class TimeoutScope(StrEnum):
    LEVEL = "level"  # expiry ends the level -> Timeout
    SESSION = "session"  # expiry ends the run -> GameOver


class ReturnPolicy(StrEnum):
    SNAP_BACK = "snap_back"
    RESUME = "resume"  # falling-item games: keep falling from the release point


DEFAULT_CANVAS = CanvasSize(350, 400)


@dataclass(frozen=True)
class GameRules:
    lives: int | None = None
    countdown_seconds: int | None = None
    timeout_scope: TimeoutScope = TimeoutScope.LEVEL
    feedback_card: bool = False
    return_policy: ReturnPolicy = ReturnPolicy.SNAP_BACK
    score_per_match: int = 10

    # layout
    canvas: CanvasSize = field(default=DEFAULT_CANVAS)
    margin: float = 5.0
    border: float = 8.0
    vertical_probability: float = 0.2
    max_pack_attempts: int = 4

    # feedback timings, seconds
    removal_delay: float = 0.5
    flash_seconds: float = 0.5
    hint_seconds: float = 2.0

    def validate(self) -> None:
        if self.lives is not None and self.lives <= 0:
            raise ConfigurationError(f"lives must be positive, got {self.lives}.")
        if self.countdown_seconds is not None and self.countdown_seconds <= 0:
            raise ConfigurationError(
                f"countdown_seconds must be positive, got {self.countdown_seconds}."
            )
        if self.margin < 0 or self.border < 0:
            raise ConfigurationError("margin and border cannot be negative.")
        if not 0.0 <= self.vertical_probability <= 1.0:
            raise ConfigurationError("vertical_probability must be within [0, 1].")
        if self.max_pack_attempts < 1:
            raise ConfigurationError("max_pack_attempts must be at least 1.")
        if self.score_per_match < 0:
            raise ConfigurationError("score_per_match cannot be negative.")
