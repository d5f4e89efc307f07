"""Events accepted by the progression reducer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class ItemResolved:
    correct: bool
    score_delta: int = 0


@dataclass(frozen=True)
class Tick:
    seconds: int = 1


@dataclass(frozen=True)
class TimerExpired:
    pass


@dataclass(frozen=True)
class HintShown:
    pass


@dataclass(frozen=True)
class Acknowledge:
    pass


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retry:
    pass


@dataclass(frozen=True)
class Restart:
    level_index: int = 0


Event = (
    Start
    | ItemResolved
    | Tick
    | TimerExpired
    | HintShown
    | Acknowledge
    | Advance
    | Retry
    | Restart
)
