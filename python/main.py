#!/usr/bin/env python3
"""Cloud Explorer — drag-and-drop word-cloud mini-games.

Usage::

    python main.py                     # interactive menu
    python main.py -f rich -g cloud    # Rich terminal, word cloud
    python main.py -f pygame           # Pygame GUI (has its own menu)
    python main.py --progress          # view saved progress
    python main.py --reset             # forget saved progress
"""

import importlib
import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

ROOT = Path(__file__).resolve().parent  # python/
PROJECT_ROOT = ROOT.parent
DATA_DIR = PROJECT_ROOT / "data"

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


# -- frontend registry -------------------------------------------------------


class Frontend(StrEnum):
    rich = "rich"
    pygame = "pygame"
    pyqt = "pyqt"


class LogLevel(StrEnum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


_RUNNERS = {
    Frontend.rich: "frontend.cli.rich.app",
    Frontend.pygame: "frontend.gui.pygame.app",
    Frontend.pyqt: "frontend.gui.pyqt.app",
}


# -- helpers ------------------------------------------------------------------


def _setup_logging(level: LogLevel) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _print_progress() -> None:
    from backend.content import GAMES
    from backend.models.progress import ProgressStore

    store = ProgressStore(DATA_DIR / "progress.json")

    print("\n  === PROGRESS ===")
    for name, definition in GAMES.items():
        saved = store.get_level(name, len(definition.levels))
        print(f"  {definition.title:<12} level {saved + 1}/{len(definition.levels)}")
    print()


def _reset_progress(game: Optional[str]) -> None:
    from backend.models.progress import ProgressStore

    ProgressStore(DATA_DIR / "progress.json").clear(game)
    print(f"  Progress cleared{f' for {game}' if game else ''}.")


def _ask_game() -> Optional[str]:
    from backend.content import GAMES

    names = list(GAMES)
    for i, name in enumerate(names, 1):
        print(f"    {i}. {GAMES[name].title}")
    raw = input("  Game (default 1): ").strip() or "1"
    try:
        return names[int(raw) - 1]
    except (ValueError, IndexError):
        print("  Invalid choice — using the first game.")
        return names[0]


def _menu_loop(seed: Optional[int]) -> None:
    while True:
        print()
        print("  ====================================")
        print("        C L O U D   E X P L O R E R   ")
        print("  ====================================")
        print()
        print("  1.  Play  (Rich Terminal)")
        print("  2.  Play  (Pygame GUI)")
        print("  3.  Play  (PyQt GUI)")
        print("  4.  View Progress")
        print("  5.  Reset Progress")
        print("  0.  Quit")
        print()

        choice = input("  Select: ").strip()

        if choice == "0":
            print("\n  Goodbye!\n")
            return

        if choice == "1":
            game = _ask_game()
            mod = importlib.import_module(_RUNNERS[Frontend.rich])
            mod.run(game=game, data_dir=DATA_DIR, seed=seed)

        elif choice in ("2", "3"):
            mod = importlib.import_module(
                {"2": _RUNNERS[Frontend.pygame], "3": _RUNNERS[Frontend.pyqt]}[choice]
            )
            mod.run(data_dir=DATA_DIR, seed=seed)

        elif choice == "4":
            _print_progress()

        elif choice == "5":
            _reset_progress(None)

        else:
            print("  Unknown option.")


# -- CLI entry point ----------------------------------------------------------

app = typer.Typer(add_completion=False)


@app.command()
def main(
    frontend: Optional[Frontend] = typer.Option(
        None, "-f", "--frontend",
        help="Frontend to launch. Omit for interactive menu.",
    ),
    game: Optional[str] = typer.Option(
        None, "-g", "--game",
        help="Game to open directly (cloud, sprint, mailroom).",
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed",
        help="Seed the layout randomness for a reproducible cloud.",
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.warning, "--log-level",
        help="Engine log verbosity.",
    ),
    progress: bool = typer.Option(
        False, "--progress",
        help="Show saved progress and exit.",
    ),
    reset: bool = typer.Option(
        False, "--reset",
        help="Clear saved progress (for --game, or all games) and exit.",
    ),
) -> None:
    """Cloud Explorer mini-games."""
    _setup_logging(log_level)

    from backend.content import GAMES

    if game is not None and game not in GAMES:
        raise typer.BadParameter(
            f"unknown game {game!r}; choose from {', '.join(GAMES)}",
            param_hint="--game",
        )

    if reset:
        _reset_progress(game)
        return

    if progress:
        _print_progress()
        return

    if frontend is None:
        _menu_loop(seed)
        return

    mod = importlib.import_module(_RUNNERS[frontend])
    mod.run(game=game, data_dir=DATA_DIR, seed=seed)


if __name__ == "__main__":
    app()
