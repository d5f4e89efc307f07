"""Helpers shared by every frontend."""

from __future__ import annotations

from collections.abc import Callable

from backend.engine.gameplay import GamePlay
from backend.engine.progression import Event
from backend.models.geometry import CanvasSize, Rect
from backend.models.progress import ProgressStore
from backend.models.session import GameSession, GameState

REGION_GAP = 8
REGION_HEIGHT = 72
REGION_TOP = 16  # below the canvas


def format_time(seconds: int) -> str:
    m, s = divmod(int(seconds), 60)
    return f"{m:02d}:{s:02d}"


def region_rects(canvas: CanvasSize, count: int) -> list[Rect]:
    """Drop regions side by side under the canvas, in canvas coordinates."""
    width = canvas.width / count
    return [
        Rect(
            i * width + REGION_GAP / 2,
            canvas.height + REGION_TOP,
            width - REGION_GAP,
            REGION_HEIGHT,
        )
        for i in range(count)
    ]


def track_progress(game: GamePlay, store: ProgressStore) -> Callable[[], None]:
    """Save the next level index after each victory; forget it once finished."""
    name = game.game.name

    def _on_transition(old: GameSession, new: GameSession, event: Event) -> None:
        if new.state is GameState.VICTORY and not game.machine.is_last_level:
            store.set_level(name, new.level_index + 1)
        elif new.state is GameState.SUMMARY:
            store.clear(name)

    return game.machine.subscribe(_on_transition)
