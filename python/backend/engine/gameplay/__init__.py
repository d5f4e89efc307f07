from backend.engine.gameplay.game import GamePlay, Snapshot

__all__ = ["GamePlay", "Snapshot"]
