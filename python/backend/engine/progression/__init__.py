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
from backend.engine.progression.machine import ProgressionStateMachine
from backend.engine.progression.reducer import Course, initial_session, transition

__all__ = [
    "Acknowledge",
    "Advance",
    "Course",
    "Event",
    "HintShown",
    "ItemResolved",
    "ProgressionStateMachine",
    "Restart",
    "Retry",
    "Start",
    "Tick",
    "TimerExpired",
    "initial_session",
    "transition",
]
