"""Saved level progress, one integer per game."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ProgressStore:
    """Loads, saves, and clears the next level index per game in a JSON file."""

    def __init__(self, filepath: Path) -> None:
        self.filepath = filepath
        self._levels: dict[str, int] = {}
        self._load()

    # -- persistence ----------------------------------------------------------

    def _load(self) -> None:
        if not self.filepath.exists():
            return
        try:
            data = json.loads(self.filepath.read_text())
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable progress file %s", self.filepath)
            return
        for game, index in data.items():
            if isinstance(index, int) and index >= 0:
                self._levels[game] = index

    def save(self) -> None:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self.filepath.write_text(json.dumps(self._levels, indent=2) + "\n")

    # -- queries --------------------------------------------------------------

    def get_level(self, game: str, level_count: int | None = None) -> int:
        """Return the saved index, or 0 if none is saved or it is out of range."""
        index = self._levels.get(game, 0)
        if level_count is not None and index >= level_count:
            return 0
        return index

    def set_level(self, game: str, index: int) -> None:
        self._levels[game] = index
        self.save()

    def clear(self, game: str | None = None) -> None:
        if game is None:
            self._levels.clear()
        else:
            self._levels.pop(game, None)
        self.save()

    def items(self) -> list[tuple[str, int]]:
        return sorted(self._levels.items())
