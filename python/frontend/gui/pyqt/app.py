"""PyQt6 GUI frontend — fully self-contained.

Includes the game menu, a custom-painted word cloud with mouse drag,
state cards between levels and the progress reset.  No terminal
interaction required.
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

from PyQt6.QtCore import QPointF, QRectF, Qt, QTimer
from PyQt6.QtGui import QColor, QFont, QKeyEvent, QMouseEvent, QPainter, QPaintEvent, QPen
from PyQt6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSpacerItem,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from backend.content import GAMES
from backend.engine.clock import FrameClock, Scheduler
from backend.engine.dragcontrol import DropKind
from backend.engine.gameplay import GamePlay
from backend.models.geometry import Point
from backend.models.level import GameDefinition
from backend.models.progress import ProgressStore
from backend.models.session import GameState
from frontend.common import REGION_HEIGHT, REGION_TOP, format_time, region_rects, track_progress

# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------
_BASE = "#0f172a"
_MANTLE = "#1e293b"
_SURFACE0 = "#334155"
_SURFACE1 = "#475569"
_OVERLAY0 = "#64748b"
_TEXT = "#e2e8f0"
_SUBTEXT = "#94a3b8"
_AMBER = "#fbbf24"
_AMBER_H = "#fcd34d"
_GREEN = "#4ade80"
_RED = "#f87171"
_RED_H = "#fca5a5"
_YELLOW = "#facc15"
_BLUE = "#60a5fa"

_TONES = ["#94a3b8", "#cbd5e1", "#64748b", "#475569"]
_REGION_COLOURS = {"amber": _AMBER, "red": _RED, "yellow": _YELLOW, "blue": _BLUE}
_FONT = "Noto Sans CJK TC"

_GLOBAL_CSS = f"""
    QMainWindow, QWidget#page {{ background: {_BASE}; }}
    QLabel {{ color: {_TEXT}; }}
"""

_CARDS = {
    GameState.INTRO: ("開始", _AMBER),
    GameState.FEEDBACK: ("知識卡", _YELLOW),
    GameState.VICTORY: ("檔案歸檔成功", _GREEN),
    GameState.TIMEOUT: ("時間到", _RED),
    GameState.GAME_OVER: ("GAME OVER", _RED),
    GameState.SUMMARY: ("全部完成", _GREEN),
}


def _styled_btn(
    text: str,
    *,
    bg: str = _SURFACE0,
    hover: str = _SURFACE1,
    fg: str = _TEXT,
    font_size: int = 14,
    min_w: int = 0,
    min_h: int = 44,
) -> QPushButton:
    btn = QPushButton(text)
    btn.setFont(QFont(_FONT, font_size, QFont.Weight.Bold))
    btn.setMinimumHeight(min_h)
    if min_w:
        btn.setMinimumWidth(min_w)
    btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(
        f"QPushButton {{ background:{bg}; color:{fg};"
        f" border:none; border-radius:8px; padding:6px 18px; }}"
        f" QPushButton:hover {{ background:{hover}; }}"
    )
    return btn


def _label(text: str, size: int, colour: str = _TEXT, *, bold: bool = False) -> QLabel:
    lbl = QLabel(text)
    lbl.setFont(QFont(_FONT, size, QFont.Weight.Bold if bold else QFont.Weight.Normal))
    lbl.setStyleSheet(f"color:{colour};")
    lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
    lbl.setWordWrap(True)
    return lbl


class _BeepHaptics:
    def pulse(self, success: bool) -> None:
        if not success:
            QApplication.beep()


# ═══════════════════════════════════════════════════════════════════════════
# Pages
# ═══════════════════════════════════════════════════════════════════════════


class _MenuPage(QWidget):
    """Game selection with saved progress and a reset button."""

    def __init__(self, store: ProgressStore, selected: str | None) -> None:
        super().__init__()
        self.setObjectName("page")
        self._store = store
        self.selected = selected if selected in GAMES else next(iter(GAMES))

        root = QVBoxLayout(self)
        root.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.setSpacing(12)
        root.setContentsMargins(30, 30, 30, 30)

        root.addWidget(_label("CLOUD  EXPLORER", 30, bold=True))
        root.addSpacerItem(QSpacerItem(0, 18))

        self._game_btns: dict[str, QPushButton] = {}
        for name, definition in GAMES.items():
            btn = _styled_btn(definition.title, min_w=300, min_h=52, font_size=15)
            btn.clicked.connect(lambda _, n=name: self._pick(n))
            root.addWidget(btn, alignment=Qt.AlignmentFlag.AlignCenter)
            self._game_btns[name] = btn

        root.addSpacerItem(QSpacerItem(0, 18))

        self.play_btn = _styled_btn(
            "開  始", bg=_AMBER, hover=_AMBER_H, fg=_BASE, font_size=16, min_w=240, min_h=52
        )
        root.addWidget(self.play_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.reset_btn = _styled_btn("重置進度", min_w=240, font_size=13)
        self.reset_btn.clicked.connect(self._reset)
        root.addWidget(self.reset_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.quit_btn = _styled_btn("離  開", bg=_RED, hover=_RED_H, fg=_BASE, min_w=240, font_size=13)
        root.addWidget(self.quit_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.refresh()

    def _pick(self, name: str) -> None:
        self.selected = name
        self.refresh()

    def _reset(self) -> None:
        self._store.clear(self.selected)
        self.refresh()

    def refresh(self) -> None:
        for name, btn in self._game_btns.items():
            definition = GAMES[name]
            saved = self._store.get_level(name, len(definition.levels))
            btn.setText(f"{definition.title}    {saved + 1}/{len(definition.levels)}")
            on = name == self.selected
            btn.setStyleSheet(
                f"QPushButton {{ background:{_AMBER if on else _SURFACE0};"
                f" color:{_BASE if on else _TEXT};"
                f" border:none; border-radius:8px; padding:6px 18px; font-weight:bold; }}"
                f" QPushButton:hover {{ background:{_AMBER_H if on else _SURFACE1}; }}"
            )


class _CloudView(QWidget):
    """Paints the canvas and drop regions, and feeds mouse drags to the engine."""

    def __init__(self, game: GamePlay) -> None:
        super().__init__()
        self.game = game
        canvas = game.rules.canvas
        self.setFixedSize(int(canvas.width), int(canvas.height + REGION_TOP + REGION_HEIGHT))
        self.setMouseTracking(True)
        self.status = ""

    @staticmethod
    def _point(event: QMouseEvent) -> Point:
        pos = event.position()
        return Point(pos.x(), pos.y())

    def mousePressEvent(self, event: QMouseEvent | None) -> None:  # noqa: N802
        if event is not None and event.button() == Qt.MouseButton.LeftButton:
            self.game.pointer_down(self._point(event))
            self.update()

    def mouseMoveEvent(self, event: QMouseEvent | None) -> None:  # noqa: N802
        if event is not None and self.game.pointer_move(self._point(event)):
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent | None) -> None:  # noqa: N802
        if event is None or event.button() != Qt.MouseButton.LeftButton:
            return
        result = self.game.pointer_up(self._point(event))
        if result.kind is DropKind.MATCHED:
            self.status = ""
        elif result.kind is DropKind.MISMATCHED:
            self.status = (result.verdict.explanation if result.verdict else None) or "放錯了！"
        self.update()

    def paintEvent(self, event: QPaintEvent | None) -> None:  # noqa: N802
        snap = self.game.snapshot()
        canvas = self.game.rules.canvas
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)

        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(QColor(_MANTLE))
        p.drawRoundedRect(QRectF(0, 0, canvas.width, canvas.height), 12, 12)

        for spec in self.game.game.regions:
            region = self.game.registry.get(spec.key)
            rect = region.bounds() if region else None
            if rect is None:
                continue
            colour = QColor(_REGION_COLOURS.get(spec.tone, _SURFACE1))
            box = QRectF(rect.left, rect.top, rect.width, rect.height)
            p.setBrush(Qt.BrushStyle.NoBrush)
            p.setPen(QPen(colour, 3))
            p.drawRoundedRect(box, 10, 10)
            p.setFont(QFont(_FONT, 13, QFont.Weight.Bold))
            p.drawText(box, Qt.AlignmentFlag.AlignCenter, spec.title)

        dragged = snap.drag.item_id if snap.drag else None
        for item in snap.items:
            if item.resolved:
                colour = _GREEN
            elif item.id == snap.flashing_id:
                colour = _RED
            elif item.id == snap.highlighted_id:
                colour = _AMBER
            else:
                colour = _TONES[item.style_hint.tone % len(_TONES)]
            centre = QPointF(item.x, item.y)
            if item.id == dragged:
                dx, dy = snap.drag.offset
                centre = QPointF(item.x + dx, item.y + dy)
                colour = _TEXT

            p.save()
            p.translate(centre)
            p.rotate(item.rotation)
            # rotated items are drawn in their unrotated frame
            w, h = (item.height, item.width) if item.rotation else (item.width, item.height)
            box = QRectF(-w / 2, -h / 2, w, h)
            if item.id == snap.highlighted_id:
                p.setPen(QPen(QColor(_AMBER), 2))
                p.setBrush(Qt.BrushStyle.NoBrush)
                p.drawRoundedRect(box.adjusted(-4, -4, 4, 4), 6, 6)
            weight = QFont.Weight.Bold if item.is_target else QFont.Weight.Normal
            p.setFont(QFont(_FONT, int(item.style_hint.font_size * 0.75), weight))
            p.setPen(QColor(colour))
            p.drawText(box, Qt.AlignmentFlag.AlignCenter, item.label)
            p.restore()
        p.end()


class _GamePage(QWidget):
    """One mini-game: stats, the cloud and a card for every non-playing state."""

    def __init__(self, definition: GameDefinition, store: ProgressStore, seed: int | None) -> None:
        super().__init__()
        self.setObjectName("page")
        scheduler = Scheduler()
        self._clock = FrameClock(scheduler)
        self.game = GamePlay(
            definition,
            rng=random.Random(seed),
            scheduler=scheduler,
            haptics=_BeepHaptics(),
            start_level=store.get_level(definition.name, len(definition.levels)),
        )
        rects = region_rects(definition.rules.canvas, len(definition.regions))
        for spec, rect in zip(definition.regions, rects):
            self.game.register_region(spec.key, lambda rect=rect: rect, spec.key)
        track_progress(self.game, store)
        self._shown: GameState | None = None

        root = QVBoxLayout(self)
        root.setSpacing(6)
        root.setContentsMargins(16, 10, 16, 10)

        self._title = _label("", 17, bold=True)
        root.addWidget(self._title)
        self._stats = _label("", 13, _AMBER)
        root.addWidget(self._stats)

        self._inner = QStackedWidget()
        root.addWidget(self._inner, alignment=Qt.AlignmentFlag.AlignCenter)

        # playing
        play = QWidget()
        play.setObjectName("page")
        pbox = QVBoxLayout(play)
        self._view = _CloudView(self.game)
        pbox.addWidget(self._view, alignment=Qt.AlignmentFlag.AlignCenter)
        self._status = _label("", 12, _RED)
        pbox.addWidget(self._status)
        row = QHBoxLayout()
        self.hint_btn = _styled_btn("提示 (N)", bg=_AMBER, hover=_AMBER_H, fg=_BASE, min_w=140)
        self.hint_btn.clicked.connect(self.hint)
        row.addWidget(self.hint_btn)
        self.menu_btn = _styled_btn("選單 (M)", min_w=140)
        row.addWidget(self.menu_btn)
        pbox.addLayout(row)
        self._inner.addWidget(play)

        # cards
        card = QWidget()
        card.setObjectName("page")
        cbox = QVBoxLayout(card)
        cbox.setAlignment(Qt.AlignmentFlag.AlignCenter)
        cbox.setSpacing(10)
        self._heading = _label("", 26, bold=True)
        cbox.addWidget(self._heading)
        self._body = _label("", 14, _SUBTEXT)
        self._body.setMinimumWidth(360)
        cbox.addWidget(self._body)
        self._source = _label("", 12, _AMBER)
        cbox.addWidget(self._source)
        cbox.addSpacerItem(QSpacerItem(0, 16))
        self.action_btn = _styled_btn("", bg=_AMBER, hover=_AMBER_H, fg=_BASE, font_size=16, min_w=240, min_h=50)
        self.action_btn.clicked.connect(self.activate)
        cbox.addWidget(self.action_btn, alignment=Qt.AlignmentFlag.AlignCenter)
        self.card_menu_btn = _styled_btn("選  單", min_w=240, font_size=13)
        cbox.addWidget(self.card_menu_btn, alignment=Qt.AlignmentFlag.AlignCenter)
        self._inner.addWidget(card)

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._timer.start(50)

        self._sync()

    # -- helpers --

    def _tick(self) -> None:
        self._clock.pump()
        self._sync()

    def _sync(self) -> None:
        game = self.game
        s = game.session
        level = game.level
        self._title.setText(f"{game.game.title}  ·  {level.title or level.id}")
        parts = [f"找到 {s.found_count}/{s.target_count}", f"分數 {s.score}", f"錯誤 {s.mistakes}"]
        if s.lives_remaining is not None:
            parts.append("♥" * s.lives_remaining)
        if s.remaining_seconds is not None:
            parts.append(f"剩餘 {format_time(s.remaining_seconds)}")
        else:
            parts.append(f"時間 {format_time(s.elapsed_seconds)}")
        self._stats.setText("    ".join(parts))

        if s.state is GameState.PLAYING:
            if self._shown is not GameState.PLAYING:
                self._view.status = ""
            self._inner.setCurrentIndex(0)
            self._status.setText(self._view.status)
            self._view.update()
        elif s.state is not self._shown:
            self._show_card(s.state)
            self._inner.setCurrentIndex(1)
        self._shown = s.state

    def _show_card(self, state: GameState) -> None:
        game = self.game
        level = game.level
        heading, colour = _CARDS[state]
        if state is GameState.INTRO:
            heading = level.title or str(level.id)
        self._heading.setText(heading)
        self._heading.setStyleSheet(f"color:{colour};")

        body, source = "", ""
        if state is GameState.INTRO:
            body = "\n\n".join(t for t in (level.hint, game.game.description) if t)
        elif level.card is not None and state in (GameState.FEEDBACK, GameState.VICTORY):
            body, source = level.card.tip, level.card.source
        s = game.session
        footer = f"分數 {s.score}    錯誤 {s.mistakes}    時間 {format_time(s.elapsed_seconds)}"
        self._body.setText(f"{body}\n\n{footer}" if body else footer)
        self._source.setText(source)

        actions = {
            GameState.INTRO: "開始",
            GameState.FEEDBACK: "繼續",
            GameState.VICTORY: "下一關",
            GameState.TIMEOUT: "重試",
            GameState.GAME_OVER: "再玩一次",
            GameState.SUMMARY: "再玩一次",
        }
        self.action_btn.setText(actions[state])

    # -- actions --

    def hint(self) -> None:
        self.game.request_hint()
        self._sync()

    def activate(self) -> None:
        game = self.game
        state = game.state
        if state is GameState.INTRO:
            game.start()
        elif state is GameState.FEEDBACK:
            game.acknowledge()
        elif state is GameState.VICTORY:
            game.advance()
        elif state is GameState.TIMEOUT:
            game.retry()
        elif state in (GameState.GAME_OVER, GameState.SUMMARY):
            game.restart()
            game.start()
        self._sync()

    def close_game(self) -> None:
        self._timer.stop()
        self.game.leave()


# ═══════════════════════════════════════════════════════════════════════════
# Main window
# ═══════════════════════════════════════════════════════════════════════════

_IDX_MENU = 0
_IDX_GAME = 1


class _MainWindow(QMainWindow):
    def __init__(self, game: str | None, data_dir: Path, seed: int | None) -> None:
        super().__init__()
        self._store = ProgressStore(data_dir / "progress.json")
        self._seed = seed

        self.setWindowTitle("Cloud Explorer")
        self.setStyleSheet(_GLOBAL_CSS)
        self.setMinimumSize(480, 720)

        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)

        self._menu = _MenuPage(self._store, game)
        self._menu.play_btn.clicked.connect(self.open_game)
        self._menu.quit_btn.clicked.connect(self.close)
        self._stack.addWidget(self._menu)  # 0

        self._game_page: _GamePage | None = None
        self._stack.addWidget(QWidget())  # 1

        self._stack.setCurrentIndex(_IDX_MENU)

    # -- navigation ---

    def _show_menu(self) -> None:
        if self._game_page is not None:
            self._game_page.close_game()
        self._menu.refresh()
        self._stack.setCurrentIndex(_IDX_MENU)

    def open_game(self) -> None:
        page = _GamePage(GAMES[self._menu.selected], self._store, self._seed)
        page.menu_btn.clicked.connect(self._show_menu)
        page.card_menu_btn.clicked.connect(self._show_menu)
        self._game_page = page

        old = self._stack.widget(_IDX_GAME)
        self._stack.removeWidget(old)
        old.deleteLater()
        self._stack.insertWidget(_IDX_GAME, page)
        self._stack.setCurrentIndex(_IDX_GAME)

    # -- keyboard ---

    def keyPressEvent(self, event: QKeyEvent | None) -> None:  # noqa: N802
        if event is None:
            return
        key = event.key()
        idx = self._stack.currentIndex()

        if idx == _IDX_MENU:
            if key == Qt.Key.Key_Return:
                self.open_game()
            elif key in (Qt.Key.Key_Q, Qt.Key.Key_Escape):
                self.close()

        elif idx == _IDX_GAME and self._game_page is not None:
            gp = self._game_page
            if key in (Qt.Key.Key_M, Qt.Key.Key_Escape):
                self._show_menu()
            elif gp.game.state is GameState.PLAYING:
                if key == Qt.Key.Key_N:
                    gp.hint()
            elif key in (Qt.Key.Key_Return, Qt.Key.Key_Space, Qt.Key.Key_R):
                gp.activate()

        else:
            super().keyPressEvent(event)

    def closeEvent(self, event) -> None:  # noqa: N802
        if self._game_page is not None:
            self._game_page.close_game()
        super().closeEvent(event)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------
def run(game: str | None = None, data_dir: Path = Path("data"), seed: int | None = None) -> None:
    """Launch the PyQt6 GUI (opens directly to the menu)."""
    qapp = QApplication.instance() or QApplication(sys.argv)
    window = _MainWindow(game, data_dir, seed)
    window.show()
    if game in GAMES:
        window.open_game()
    qapp.exec()
