from backend.content.games import CLOUD, GAMES, MAILROOM, SPRINT

__all__ = ["CLOUD", "GAMES", "MAILROOM", "SPRINT"]
