"""Pygame GUI frontend — fully self-contained.

Includes the game menu, intro cards, the draggable word cloud, knowledge
cards and the end screens.  Mouse and touch both drive the engine's
drag controller; touch-synthesised mouse events are ignored so a finger
is never seen twice.
"""

from __future__ import annotations

import enum
import random
from pathlib import Path

import pygame

from backend.content import GAMES
from backend.engine.clock import Scheduler
from backend.engine.dragcontrol import DropKind
from backend.engine.gameplay import GamePlay
from backend.models.geometry import Point
from backend.models.items import PlacedItem
from backend.models.progress import ProgressStore
from backend.models.rules import ReturnPolicy
from backend.models.session import GameState
from frontend.common import format_time, region_rects, track_progress

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------
COL_BASE = (15, 23, 42)
COL_MANTLE = (30, 41, 59)
COL_SURFACE0 = (51, 65, 85)
COL_SURFACE1 = (71, 85, 105)
COL_TEXT = (226, 232, 240)
COL_SUBTEXT = (148, 163, 184)
COL_AMBER = (251, 191, 36)
COL_GREEN = (74, 222, 128)
COL_RED = (248, 113, 113)
COL_YELLOW = (250, 204, 21)
COL_BLUE = (96, 165, 250)

TONES = [(148, 163, 184), (203, 213, 225), (100, 116, 139), (71, 85, 105)]
REGION_COLOURS = {
    "amber": COL_AMBER,
    "red": COL_RED,
    "yellow": COL_YELLOW,
    "blue": COL_BLUE,
}

# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------
WIN_W, WIN_H = 480, 720
CANVAS_TOP = 72
CJK_FONTS = "notosanscjktc,notosanscjk,notosanscjksc,microsoftjhenghei,pingfangtc,heitic,arialunicodems"

MOUSE = "mouse"


class _Screen(enum.Enum):
    MENU = "menu"
    GAME = "game"


# ---------------------------------------------------------------------------
# Simple clickable button
# ---------------------------------------------------------------------------
class _Btn:
    __slots__ = ("rect", "text", "font", "bg", "hover", "fg", "_hot")

    def __init__(
        self,
        rect: tuple[int, int, int, int],
        text: str,
        font: pygame.font.Font,
        *,
        bg: tuple = COL_SURFACE0,
        hover: tuple = COL_SURFACE1,
        fg: tuple = COL_TEXT,
    ) -> None:
        self.rect = pygame.Rect(rect)
        self.text = text
        self.font = font
        self.bg = bg
        self.hover = hover
        self.fg = fg
        self._hot = False

    def draw(self, surf: pygame.Surface) -> None:
        c = self.hover if self._hot else self.bg
        pygame.draw.rect(surf, c, self.rect, border_radius=8)
        lbl = self.font.render(self.text, True, self.fg)
        surf.blit(
            lbl,
            (
                self.rect.centerx - lbl.get_width() // 2,
                self.rect.centery - lbl.get_height() // 2,
            ),
        )

    def motion(self, pos: tuple[int, int]) -> None:
        self._hot = self.rect.collidepoint(pos)

    def hit(self, pos: tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


class _PadHaptics:
    """Rumbles the first game controller, if one is plugged in."""

    def __init__(self) -> None:
        pygame.joystick.init()
        self._pad = pygame.joystick.Joystick(0) if pygame.joystick.get_count() else None

    def pulse(self, success: bool) -> None:
        if self._pad is None:
            return
        if success:
            self._pad.rumble(0.2, 0.5, 50)
        else:
            self._pad.rumble(0.8, 0.8, 150)


def _wrap(text: str, font: pygame.font.Font, width: int) -> list[str]:
    """Greedy character wrap; CJK text has no spaces to break on."""
    lines: list[str] = []
    line = ""
    for ch in text:
        if font.size(line + ch)[0] > width and line:
            lines.append(line)
            line = ch
        else:
            line += ch
    if line:
        lines.append(line)
    return lines


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------
class PygameApp:
    def __init__(self, game_name: str | None, data_dir: Path, seed: int | None) -> None:
        self._store = ProgressStore(data_dir / "progress.json")
        self._names = list(GAMES)
        self._sel = self._names.index(game_name) if game_name in GAMES else 0
        self._seed = seed

        pygame.init()
        self._surf = pygame.display.set_mode((WIN_W, WIN_H), pygame.RESIZABLE)
        pygame.display.set_caption("Cloud Explorer")
        self._clock = pygame.time.Clock()
        self._fonts: dict[tuple[int, bool], pygame.font.Font] = {}
        self._haptics = _PadHaptics()

        self._screen = _Screen.MENU
        self._game: GamePlay | None = None
        self._status = ""
        # Where RESUME-policy items were let go; the engine layout is fixed.
        self._rest: dict[str, Point] = {}
        self._hint_btn: _Btn | None = None
        self._menu_btn: _Btn | None = None
        self._action_btn: _Btn | None = None
        if game_name in GAMES:
            self._open_game()

    # ── helpers ─────────────────────────────────────────────────────────────

    def _font(self, size: int, bold: bool = False) -> pygame.font.Font:
        key = (size, bold)
        if key not in self._fonts:
            self._fonts[key] = pygame.font.SysFont(CJK_FONTS, size, bold=bold)
        return self._fonts[key]

    def _origin(self) -> tuple[int, int]:
        """Screen position of the canvas top-left; follows window resizes."""
        assert self._game is not None
        w = self._surf.get_width()
        return (w - int(self._game.rules.canvas.width)) // 2, CANVAS_TOP

    def _to_canvas(self, pos: tuple[float, float]) -> Point:
        ox, oy = self._origin()
        return Point(pos[0] - ox, pos[1] - oy)

    def _blit_center(self, rendered: pygame.Surface, y: int) -> None:
        self._surf.blit(rendered, ((self._surf.get_width() - rendered.get_width()) // 2, y))

    def _display_pos(self, item: PlacedItem) -> Point:
        return self._rest.get(item.id, Point(item.x, item.y))

    def _item_under(self, point: Point) -> PlacedItem | None:
        assert self._game is not None
        for item in reversed(self._game.items):
            if item.resolved:
                continue
            pos = self._display_pos(item)
            if abs(point.x - pos.x) <= item.width / 2 and abs(point.y - pos.y) <= item.height / 2:
                return item
        return None

    # ── game lifecycle ──────────────────────────────────────────────────────

    def _open_game(self) -> None:
        definition = GAMES[self._names[self._sel]]
        game = GamePlay(
            definition,
            rng=random.Random(self._seed),
            scheduler=Scheduler(),
            haptics=self._haptics,
            start_level=self._store.get_level(definition.name, len(definition.levels)),
        )
        rects = region_rects(definition.rules.canvas, len(definition.regions))
        for spec, rect in zip(definition.regions, rects):
            game.register_region(spec.key, lambda rect=rect: rect, spec.key)
        track_progress(game, self._store)
        game.machine.subscribe(self._on_transition)
        self._game = game
        self._status = ""
        self._screen = _Screen.GAME

    def _on_transition(self, old, new, event) -> None:
        if new.state is not old.state:
            self._hint_btn = self._menu_btn = self._action_btn = None
        if new.generation != old.generation:
            self._rest.clear()
            self._status = ""

    def _close_game(self) -> None:
        if self._game is not None:
            self._game.leave()
        self._game = None
        self._rest.clear()
        self._screen = _Screen.MENU

    # ── drawing ─────────────────────────────────────────────────────────────

    def _draw_menu(self) -> None:
        self._surf.fill(COL_BASE)
        self._blit_center(self._font(34, True).render("CLOUD  EXPLORER", True, COL_TEXT), 80)
        self._blit_center(self._font(16).render("選擇遊戲  ↑↓  Enter", True, COL_SUBTEXT), 140)

        y = 200
        for i, name in enumerate(self._names):
            definition = GAMES[name]
            saved = self._store.get_level(name, len(definition.levels))
            selected = i == self._sel
            rect = pygame.Rect(60, y, self._surf.get_width() - 120, 64)
            pygame.draw.rect(
                self._surf, COL_AMBER if selected else COL_SURFACE0, rect, border_radius=10
            )
            fg = COL_BASE if selected else COL_TEXT
            self._surf.blit(self._font(18, True).render(definition.title, True, fg), (rect.x + 16, rect.y + 10))
            sub = f"第 {saved + 1}/{len(definition.levels)} 關"
            self._surf.blit(self._font(14).render(sub, True, fg), (rect.x + 16, rect.y + 38))
            y += 80

        hint = "Enter 開始    R 重置進度    Esc 離開"
        self._blit_center(self._font(13).render(hint, True, COL_SUBTEXT), self._surf.get_height() - 40)

    def _draw_hud(self) -> None:
        game = self._game
        assert game is not None
        s = game.session
        title = f"{game.game.title}  ·  {game.level.title or game.level.id}"
        self._blit_center(self._font(18, True).render(title, True, COL_TEXT), 12)

        parts = [f"找到 {s.found_count}/{s.target_count}", f"分數 {s.score}", f"錯誤 {s.mistakes}"]
        if s.lives_remaining is not None:
            parts.append("♥" * s.lives_remaining)
        if s.remaining_seconds is not None:
            parts.append(f"剩餘 {format_time(s.remaining_seconds)}")
        else:
            parts.append(f"時間 {format_time(s.elapsed_seconds)}")
        self._blit_center(self._font(14).render("   ".join(parts), True, COL_AMBER), 42)

    def _draw_item(self, item: PlacedItem, pos: Point, colour: tuple) -> None:
        ox, oy = self._origin()
        font = self._font(int(item.style_hint.font_size), item.is_target)
        lbl = font.render(item.label, True, colour)
        if item.rotation:
            lbl = pygame.transform.rotate(lbl, -item.rotation)
        self._surf.blit(
            lbl,
            (ox + pos.x - lbl.get_width() / 2, oy + pos.y - lbl.get_height() / 2),
        )

    def _draw_playfield(self) -> None:
        game = self._game
        assert game is not None
        snap = game.snapshot()
        ox, oy = self._origin()
        canvas = game.rules.canvas

        pygame.draw.rect(
            self._surf, COL_MANTLE,
            pygame.Rect(ox, oy, int(canvas.width), int(canvas.height)),
            border_radius=12,
        )

        for spec in game.game.regions:
            region = game.registry.get(spec.key)
            rect = region.bounds() if region else None
            if rect is None:
                continue
            colour = REGION_COLOURS.get(spec.tone, COL_SURFACE1)
            screen = pygame.Rect(ox + rect.left, oy + rect.top, rect.width, rect.height)
            pygame.draw.rect(self._surf, colour, screen, width=3, border_radius=10)
            lbl = self._font(15, True).render(spec.title, True, colour)
            self._surf.blit(lbl, (screen.centerx - lbl.get_width() // 2, screen.centery - lbl.get_height() // 2))

        dragged = snap.drag.item_id if snap.drag else None
        for item in snap.items:
            if item.id == dragged:
                continue
            pos = self._display_pos(item)
            if item.resolved:
                colour = COL_GREEN
            elif item.id == snap.flashing_id:
                colour = COL_RED
            elif item.id == snap.highlighted_id:
                box = pygame.Rect(0, 0, item.width + 8, item.height + 8)
                box.center = (int(ox + pos.x), int(oy + pos.y))
                pygame.draw.rect(self._surf, COL_AMBER, box, width=2, border_radius=6)
                colour = COL_AMBER
            else:
                colour = TONES[item.style_hint.tone % len(TONES)]
            self._draw_item(item, pos, colour)

        if snap.drag is not None:
            item = game.machine.item(snap.drag.item_id)
            if item is not None:
                base = self._display_pos(item)
                dx, dy = snap.drag.offset
                self._draw_item(item, Point(base.x + dx, base.y + dy), COL_TEXT)

        if self._status:
            lines = _wrap(self._status, self._font(14), self._surf.get_width() - 40)
            y = oy + int(canvas.height) + 100
            for line in lines[:3]:
                self._blit_center(self._font(14).render(line, True, COL_RED), y)
                y += 20

        self._hint_btn = _Btn(
            (self._surf.get_width() // 2 - 130, self._surf.get_height() - 60, 120, 40),
            "提示 (N)", self._font(15, True), bg=COL_AMBER, hover=(253, 224, 71), fg=COL_BASE,
        )
        self._menu_btn = _Btn(
            (self._surf.get_width() // 2 + 10, self._surf.get_height() - 60, 120, 40),
            "選單 (M)", self._font(15, True),
        )
        self._hint_btn.draw(self._surf)
        self._menu_btn.draw(self._surf)

    def _draw_card(self) -> None:
        game = self._game
        assert game is not None
        level = game.level
        state = game.state
        headings = {
            GameState.INTRO: (game.game.title, COL_AMBER, "開始"),
            GameState.FEEDBACK: ("知識卡", COL_YELLOW, "繼續"),
            GameState.VICTORY: ("檔案歸檔成功", COL_GREEN, "下一關"),
            GameState.TIMEOUT: ("時間到", COL_RED, "重試"),
            GameState.GAME_OVER: ("GAME OVER", COL_RED, "再玩一次"),
            GameState.SUMMARY: ("全部完成", COL_GREEN, "再玩一次"),
        }
        heading, colour, action = headings[state]

        self._surf.fill(COL_BASE)
        self._blit_center(self._font(30, True).render(heading, True, colour), 70)
        self._blit_center(self._font(22, True).render(level.title or str(level.id), True, COL_TEXT), 130)

        body: list[tuple[str, tuple]] = []
        if state is GameState.INTRO:
            body = [(level.hint, COL_SUBTEXT), (game.game.description, COL_TEXT)]
        elif level.card is not None and state in (GameState.FEEDBACK, GameState.VICTORY):
            body = [(level.card.tip, COL_TEXT), (level.card.source, COL_AMBER)]
        s = game.session
        body.append((f"分數 {s.score}    錯誤 {s.mistakes}    時間 {format_time(s.elapsed_seconds)}", COL_SUBTEXT))

        y = 190
        width = self._surf.get_width() - 80
        for text, fg in body:
            for line in _wrap(text, self._font(16), width):
                self._blit_center(self._font(16).render(line, True, fg), y)
                y += 24
            y += 14

        cx = self._surf.get_width() // 2
        self._action_btn = _Btn(
            (cx - 110, self._surf.get_height() - 170, 220, 50), action,
            self._font(18, True), bg=colour, hover=COL_TEXT, fg=COL_BASE,
        )
        self._menu_btn = _Btn(
            (cx - 110, self._surf.get_height() - 106, 220, 44), "選單", self._font(15, True),
        )
        self._action_btn.draw(self._surf)
        self._menu_btn.draw(self._surf)

    def _draw_game(self) -> None:
        game = self._game
        assert game is not None
        if game.state is GameState.PLAYING:
            self._surf.fill(COL_BASE)
            self._draw_hud()
            self._draw_playfield()
        else:
            self._draw_card()

    # ── event handling ──────────────────────────────────────────────────────

    def _ev_menu(self, ev: pygame.event.Event) -> bool:
        if ev.type == pygame.KEYDOWN:
            if ev.key in (pygame.K_UP, pygame.K_w):
                self._sel = (self._sel - 1) % len(self._names)
            elif ev.key in (pygame.K_DOWN, pygame.K_s):
                self._sel = (self._sel + 1) % len(self._names)
            elif ev.key == pygame.K_RETURN:
                self._open_game()
            elif ev.key == pygame.K_r:
                self._store.clear(self._names[self._sel])
            elif ev.key in (pygame.K_q, pygame.K_ESCAPE):
                return False
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            index = (ev.pos[1] - 200) // 80
            if 0 <= index < len(self._names) and (ev.pos[1] - 200) % 80 < 64:
                self._sel = index
                self._open_game()
        return True

    def _pointer(self, ev: pygame.event.Event) -> tuple[str, Point, object] | None:
        """Normalise mouse and finger events to ``(phase, canvas point, pointer id)``."""
        if ev.type in (pygame.FINGERDOWN, pygame.FINGERMOTION, pygame.FINGERUP):
            w, h = self._surf.get_size()
            phase = {pygame.FINGERDOWN: "down", pygame.FINGERMOTION: "move", pygame.FINGERUP: "up"}[ev.type]
            return phase, self._to_canvas((ev.x * w, ev.y * h)), ("finger", ev.finger_id)
        if getattr(ev, "touch", False):
            return None
        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            return "down", self._to_canvas(ev.pos), MOUSE
        if ev.type == pygame.MOUSEMOTION:
            return "move", self._to_canvas(ev.pos), MOUSE
        if ev.type == pygame.MOUSEBUTTONUP and ev.button == 1:
            return "up", self._to_canvas(ev.pos), MOUSE
        return None

    def _ev_playing(self, ev: pygame.event.Event) -> None:
        game = self._game
        assert game is not None

        if ev.type == pygame.KEYDOWN:
            if ev.key == pygame.K_n:
                game.request_hint()
            elif ev.key in (pygame.K_m, pygame.K_ESCAPE):
                self._close_game()
            return

        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1 and not getattr(ev, "touch", False):
            if self._hint_btn and self._hint_btn.hit(ev.pos):
                game.request_hint()
                return
            if self._menu_btn and self._menu_btn.hit(ev.pos):
                self._close_game()
                return

        pointer = self._pointer(ev)
        if pointer is None:
            return
        phase, point, pointer_id = pointer
        if phase == "down":
            item = self._item_under(point)
            if item is not None:
                game.drag.on_drag_start(item.id, point, pointer_id)
        elif phase == "move":
            game.pointer_move(point, pointer_id)
        else:
            session = game.drag.session
            result = game.pointer_up(point, pointer_id)
            self._after_drop(result, session)

    def _after_drop(self, result, session) -> None:
        if result.kind is DropKind.MATCHED:
            self._status = ""
            self._rest.pop(result.item_id, None)
        elif result.kind is DropKind.MISMATCHED:
            self._status = (result.verdict.explanation if result.verdict else None) or "放錯了！"
        elif result.kind is DropKind.RETURNED and session is not None:
            game = self._game
            assert game is not None
            if game.rules.return_policy is ReturnPolicy.RESUME:
                item = game.machine.item(result.item_id)
                if item is not None:
                    base = self._display_pos(item)
                    dx, dy = session.offset
                    self._rest[item.id] = Point(base.x + dx, base.y + dy)

    def _ev_card(self, ev: pygame.event.Event) -> None:
        game = self._game
        assert game is not None
        activate = False
        if ev.type == pygame.KEYDOWN:
            if ev.key in (pygame.K_m, pygame.K_ESCAPE):
                self._close_game()
                return
            activate = ev.key in (pygame.K_RETURN, pygame.K_SPACE, pygame.K_r)
        elif self._action_btn is None or self._menu_btn is None:
            return
        elif ev.type == pygame.MOUSEMOTION:
            self._action_btn.motion(ev.pos)
            self._menu_btn.motion(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self._menu_btn.hit(ev.pos):
                self._close_game()
                return
            activate = self._action_btn.hit(ev.pos)
        if not activate:
            return

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
        self._status = ""

    def _ev_game(self, ev: pygame.event.Event) -> bool:
        game = self._game
        assert game is not None
        if game.state is GameState.PLAYING:
            self._ev_playing(ev)
        else:
            self._ev_card(ev)
        return True

    # ── main loop ───────────────────────────────────────────────────────────

    def run_loop(self) -> None:
        _dispatch = {
            _Screen.MENU: self._ev_menu,
            _Screen.GAME: self._ev_game,
        }
        _draw = {
            _Screen.MENU: self._draw_menu,
            _Screen.GAME: self._draw_game,
        }

        self._draw_menu()
        running = True
        while running:
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT:
                    running = False
                    break
                if ev.type == pygame.WINDOWFOCUSLOST and self._game is not None:
                    self._game.pointer_cancel()
                handler = _dispatch.get(self._screen)
                if handler and not handler(ev):
                    running = False
                    break

            dt = self._clock.tick(30) / 1000.0
            if self._game is not None:
                self._game.tick(dt)

            drawer = _draw.get(self._screen)
            if drawer:
                drawer()
            pygame.display.flip()

        self._close_game()
        pygame.quit()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------
def run(game: str | None = None, data_dir: Path = Path("data"), seed: int | None = None) -> None:
    """Launch the Pygame GUI (opens directly to the menu)."""
    app = PygameApp(game, data_dir, seed)
    app.run_loop()
