"""Rich terminal frontend — the word cloud as styled text rows.

There is no pointer in a terminal, so items are numbered: type an item
number, then Enter (single drop region) or a region letter.  The drop
still goes through the engine's drag controller and hit-test registry
via ``GamePlay.drop_on``.
"""

from __future__ import annotations

import random
from pathlib import Path

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from backend.content import GAMES
from backend.engine.clock import FrameClock, Scheduler
from backend.engine.dragcontrol import DropKind
from backend.engine.gameplay import GamePlay
from backend.models.level import GameDefinition
from backend.models.progress import ProgressStore
from backend.models.session import GameSession, GameState
from frontend.cli.input_handler import get_key, get_key_timeout
from frontend.common import format_time, region_rects, track_progress

console = Console()

TONES = ["#94a3b8", "#cbd5e1", "#64748b", "#475569"]
REGION_STYLES = {"amber": "bold yellow", "red": "bold red", "yellow": "bold yellow", "blue": "bold blue"}
REGION_LETTERS = "abcdefgh"
ROW_BAND = 40  # canvas px per text row
COL_SCALE = 5  # canvas px per terminal cell


class _BellHaptics:
    """The closest thing a terminal has to a vibration motor."""

    def pulse(self, success: bool) -> None:
        if not success:
            console.bell()


# -- helpers ------------------------------------------------------------------


def _register_regions(game: GamePlay) -> None:
    specs = game.game.regions
    for spec, rect in zip(specs, region_rects(game.rules.canvas, len(specs))):
        game.register_region(spec.key, lambda rect=rect: rect, spec.key)


def _frame_key(game: GamePlay) -> tuple:
    """Whatever changes what the screen shows without a keypress."""
    m = game.machine
    return game.session, m.flashing_id, m.highlighted_id, len(game.items)


def _numbering(game: GamePlay) -> dict[str, int]:
    layout = game.machine.layout
    if layout is None:
        return {}
    return {item.id: n for n, item in enumerate(layout.items, 1)}


# -- rendering ----------------------------------------------------------------


def _render_cloud(game: GamePlay, numbers: dict[str, int]) -> Text:
    rows: dict[int, list] = {}
    for item in game.items:
        rows.setdefault(int(item.y // ROW_BAND), []).append(item)

    out = Text()
    bands = int(game.rules.canvas.height // ROW_BAND) + 1
    for band in range(bands):
        line = Text()
        for item in sorted(rows.get(band, []), key=lambda i: i.x):
            col = int((item.x - item.width / 2) // COL_SCALE)
            if line.cell_len < col:
                line.append(" " * (col - line.cell_len))
            elif line.cell_len:
                line.append(" ")
            line.append(f"{numbers.get(item.id, 0)}", style="dim")
            line.append(":", style="dim")
            if item.resolved:
                style = "bold green strike"
            elif item.id == game.machine.flashing_id:
                style = "bold white on red"
            elif item.id == game.machine.highlighted_id:
                style = "bold black on yellow"
            else:
                style = TONES[item.style_hint.tone % len(TONES)]
                if item.style_hint.font_size >= 24:
                    style = f"bold {style}"
            label = "↕" + item.label if item.rotation else item.label
            line.append(label, style=style)
        out.append(line)
        out.append("\n")
    return out


def _render_regions(game: GamePlay) -> Text:
    text = Text()
    for letter, spec in zip(REGION_LETTERS, game.game.regions):
        if text:
            text.append("    ")
        text.append(f"[{letter.upper()}] ", style="bold cyan")
        text.append(spec.title, style=REGION_STYLES.get(spec.tone, "bold"))
    return text


def _render_stats(session: GameSession) -> Text:
    stats = Text()
    stats.append("  Found: ", style="dim")
    stats.append(f"{session.found_count}/{session.target_count}", style="bold yellow")
    stats.append("    Score: ", style="dim")
    stats.append(str(session.score), style="bold yellow")
    stats.append("    Mistakes: ", style="dim")
    stats.append(str(session.mistakes), style="bold red")
    if session.lives_remaining is not None:
        stats.append("    Lives: ", style="dim")
        stats.append("♥" * session.lives_remaining, style="bold red")
    if session.remaining_seconds is not None:
        stats.append("    Left: ", style="dim")
        style = "bold red" if session.remaining_seconds < 10 else "bold cyan"
        stats.append(format_time(session.remaining_seconds), style=style)
    else:
        stats.append("    Time: ", style="dim")
        stats.append(format_time(session.elapsed_seconds), style="bold cyan")
    return stats


def _draw_playing(game: GamePlay, buffer: str, status: str) -> None:
    numbers = _numbering(game)
    level = game.level
    controls = Text()
    controls.append("  0-9", style="bold cyan")
    controls.append(" pick   ", style="dim")
    if len(game.game.regions) > 1:
        controls.append("A-C", style="bold cyan")
        controls.append(" drop   ", style="dim")
    else:
        controls.append("Enter", style="bold cyan")
        controls.append(" drop   ", style="dim")
    controls.append("N", style="bold cyan")
    controls.append(" hint   ", style="dim")
    controls.append("Q", style="bold cyan")
    controls.append(" back", style="dim")

    picked = Text("  Item: ", style="dim")
    picked.append(buffer or "_", style="bold magenta")

    body = Group(
        _render_cloud(game, numbers),
        Align.center(_render_regions(game)),
    )
    panel = Panel(
        body,
        title=f"[bold cyan]{game.game.title}  ·  {level.title or level.id}[/bold cyan]",
        border_style="bright_blue",
        padding=(1, 2),
    )
    console.clear()
    console.print()
    console.print(Align.center(panel))
    console.print(Align.center(_render_stats(game.session)))
    console.print(Align.center(picked))
    if status:
        console.print(Align.center(Text.from_markup(f"  {status}")))
    console.print(Align.center(controls))


def _draw_card(
    game: GamePlay, title: str, style: str, lines: list[str], footer: str, *, card: bool = False
) -> None:
    level = game.level
    parts: list = [Text(line) for line in lines]
    if card and level.card is not None:
        parts.append(Text(""))
        parts.append(Text(level.card.tip, style="white"))
        if level.card.source:
            parts.append(Text(f"— {level.card.source}", style="yellow"))
    parts.append(Text(""))
    parts.append(_render_stats(game.session))

    panel = Panel(
        Group(*parts),
        title=f"[{style}]{title}[/{style}]",
        border_style=style,
        padding=(1, 4),
        width=72,
    )
    console.clear()
    console.print()
    console.print(Align.center(panel))
    console.print(Align.center(Text(f"\n  {footer}\n", style="dim")))


def _draw_screen(game: GamePlay, buffer: str, status: str) -> None:
    state = game.state
    level = game.level
    if state is GameState.PLAYING:
        _draw_playing(game, buffer, status)
    elif state is GameState.INTRO:
        _draw_card(
            game,
            game.game.title,
            "bold cyan",
            [f"檔案代號：{level.title or level.id}", level.hint, "", game.game.description],
            "Enter 開始   Q 返回",
        )
    elif state is GameState.FEEDBACK:
        _draw_card(game, "知識卡", "bold yellow", [level.title], "Enter 繼續", card=True)
    elif state is GameState.VICTORY:
        _draw_card(game, "檔案歸檔成功", "bold green", [level.title], "Enter 下一關   Q 返回", card=True)
    elif state is GameState.TIMEOUT:
        _draw_card(game, "時間到", "bold red", [level.title], "R 重試   Q 返回")
    elif state is GameState.GAME_OVER:
        _draw_card(game, "GAME OVER", "bold red", ["機會用完或時間耗盡。"], "R 再玩一次   Q 返回")
    elif state is GameState.SUMMARY:
        _draw_card(game, "全部完成", "bold green", ["所有檔案已歸檔。"], "R 再玩一次   Q 返回")


# -- input --------------------------------------------------------------------


def _drop(game: GamePlay, buffer: str, region_index: int) -> str:
    numbers = {n: item_id for item_id, n in _numbering(game).items()}
    if not buffer.isdigit() or int(buffer) not in numbers:
        return "[yellow]No such item.[/yellow]"
    regions = game.game.regions
    if region_index >= len(regions):
        return "[yellow]No such region.[/yellow]"

    result = game.drop_on(numbers[int(buffer)], regions[region_index].key)
    if result.kind is DropKind.MATCHED:
        return f"[green]+{result.verdict.score_delta}[/green]"
    if result.kind is DropKind.MISMATCHED:
        why = result.verdict.explanation if result.verdict else None
        return f"[red]Wrong![/red] {why or ''}"
    return "[dim]Nothing happened.[/dim]"


def _handle_key(game: GamePlay, key: str, buffer: str) -> tuple[str, str, bool]:
    """Return ``(buffer, status, keep_running)``."""
    state = game.state
    if key == "quit":
        return "", "", False

    if state is GameState.PLAYING:
        if key.isdigit():
            return buffer + key, "", True
        if key == "backspace":
            return buffer[:-1], "", True
        if key == "hint":
            item = game.request_hint()
            return buffer, "[cyan]Look for the highlighted word.[/cyan]" if item else "", True
        if key == "enter" and len(game.game.regions) == 1:
            return "", _drop(game, buffer, 0), True
        if len(key) == 1 and key.lower() in REGION_LETTERS:
            return "", _drop(game, buffer, REGION_LETTERS.index(key.lower())), True
        return buffer, "", True

    if state is GameState.INTRO and key == "enter":
        game.start()
    elif state is GameState.FEEDBACK and key == "enter":
        game.acknowledge()
    elif state is GameState.VICTORY and key == "enter":
        game.advance()
    elif state is GameState.TIMEOUT and key == "restart":
        game.retry()
    elif state in (GameState.GAME_OVER, GameState.SUMMARY) and key == "restart":
        game.restart()
        game.start()
    return "", "", True


# -- game loop ----------------------------------------------------------------


def _play(definition: GameDefinition, store: ProgressStore, seed: int | None) -> None:
    scheduler = Scheduler()
    clock = FrameClock(scheduler)
    game = GamePlay(
        definition,
        rng=random.Random(seed),
        scheduler=scheduler,
        haptics=_BellHaptics(),
        start_level=store.get_level(definition.name, len(definition.levels)),
    )
    _register_regions(game)
    track_progress(game, store)

    buffer, status = "", ""
    try:
        while True:
            _draw_screen(game, buffer, status)
            shown = _frame_key(game)
            while True:
                key = get_key_timeout(0.25)
                clock.pump()
                if key is not None:
                    break
                if _frame_key(game) != shown:
                    break
            if key is None:
                continue
            buffer, status, running = _handle_key(game, key, buffer)
            if not running:
                return
    finally:
        game.leave()


# -- menu screen --------------------------------------------------------------


def _draw_menu(names: list[str], selected: int, store: ProgressStore) -> None:
    console.clear()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(justify="right")
    table.add_column()
    table.add_column(justify="right", style="dim")
    for i, name in enumerate(names):
        definition = GAMES[name]
        saved = store.get_level(name, len(definition.levels))
        marker = "▶" if i == selected else " "
        style = "bold green" if i == selected else "dim"
        table.add_row(
            Text(marker, style="bold green"),
            Text(definition.title, style=style),
            f"level {saved + 1}/{len(definition.levels)}",
        )

    opts = Text()
    opts.append("  ↑↓", style="bold cyan")
    opts.append("  choose   ")
    opts.append("Enter", style="bold cyan")
    opts.append("  play   ")
    opts.append("R", style="bold yellow")
    opts.append("  reset progress   ")
    opts.append("Q", style="dim bold")
    opts.append("  quit", style="dim")

    panel = Panel(
        Group(Text(""), Align.center(table), Text(""), Align.center(opts), Text("")),
        title="[bold]C L O U D   E X P L O R E R[/bold]",
        border_style="bright_blue",
        padding=(1, 4),
    )
    console.print()
    console.print(Align.center(panel))


def _menu_loop(data_dir: Path, selected_name: str | None, seed: int | None) -> None:
    store = ProgressStore(data_dir / "progress.json")
    names = list(GAMES)
    selected = names.index(selected_name) if selected_name in GAMES else 0

    while True:
        _draw_menu(names, selected, store)
        key = get_key()

        if key == "quit":
            console.clear()
            console.print(Align.center(Text("\nGoodbye!\n", style="bold cyan")))
            return
        elif key in ("up", "left"):
            selected = (selected - 1) % len(names)
        elif key in ("down", "right"):
            selected = (selected + 1) % len(names)
        elif key == "restart":
            store.clear(names[selected])
        elif key == "enter":
            _play(GAMES[names[selected]], store, seed)


# -- public entry point -------------------------------------------------------


def run(game: str | None = None, data_dir: Path = Path("data"), seed: int | None = None) -> None:
    """Launch the Rich CLI; opens *game* straight away when given."""
    if game in GAMES:
        _play(GAMES[game], ProgressStore(data_dir / "progress.json"), seed)
    _menu_loop(data_dir, game, seed)
