from backend.engine.clock.scheduler import FrameClock, Scheduler, TimerHandle

__all__ = ["FrameClock", "Scheduler", "TimerHandle"]
