from backend.engine.matchvalidator.validator import MatchValidator, Verdict

__all__ = ["MatchValidator", "Verdict"]
