"""Pygame UI shell for the Mental Math Trainer.

The setup screen edits the persisted drill configuration; the drill screen
renders ``DrillSequencer`` snapshots and handles pause/resume/restart.
Deterministic timing/RNG/state lives in mental_math_trainer/* (core modules).
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .audio import ToneCuePlayer
from .clock import Clock, RealClock
from .drill_core import (
    LEVEL_NAMES,
    ConfigurationInvalid,
    Cue,
    CueSink,
    DigitSize,
    DrillConfig,
    OperationMode,
)
from .sequencer import CALCULATING_TEXT, DrillPhase, DrillSequencer, build_drill
from .settings import SettingsStore

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

_BG = (3, 9, 78)
_PANEL_BG = (8, 18, 104)
_BORDER = (226, 236, 255)
_TEXT_MAIN = (238, 245, 255)
_TEXT_MUTED = (186, 200, 224)
_TEXT_DIM = (96, 110, 150)
_ACTIVE_BG = (244, 248, 255)
_ACTIVE_TEXT = (14, 26, 74)
_ERROR = (255, 170, 170)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface)
        title = self._title_font.render(self._title, True, _TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 18)))

        y = frame.y + 90
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 40, y, frame.w - 80, 40)
            selected = idx == self._selected
            pygame.draw.rect(surface, _ACTIVE_BG if selected else (9, 20, 106), row)
            pygame.draw.rect(surface, (62, 84, 152), row, 1)
            text = self._item_font.render(item.label, True, _ACTIVE_TEXT if selected else _TEXT_MAIN)
            surface.blit(text, (row.x + 12, row.y + (row.h - text.get_height()) // 2))
            y += 48

        foot = self._hint_font.render("Enter/Space: Select  |  Esc/Backspace: Back", True, _TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class SetupScreen:
    """Keyboard editor for the persisted drill configuration.

    Up/Down selects a row, Left/Right (or Enter on toggles) changes it.
    Every change is saved immediately.
    """

    _ROWS = ("1digit", "2digit", "3digit", "operations", "questions", "numbers", "level", "start", "back")

    def __init__(
        self,
        app: App,
        *,
        store: SettingsStore,
        cues: CueSink,
        start_drill: Callable[[DrillConfig], None],
    ) -> None:
        self._app = app
        self._store = store
        self._cues = cues
        self._start_drill = start_drill
        self._selected = 0
        self._error: str | None = None
        self._title_font = pygame.font.Font(None, 42)
        self._row_font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(self._ROWS)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(self._ROWS)
        elif key in (pygame.K_LEFT, pygame.K_a):
            self._adjust(-1)
        elif key in (pygame.K_RIGHT, pygame.K_d):
            self._adjust(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def _activate(self) -> None:
        row = self._ROWS[self._selected]
        if row == "start":
            self._cues.play(Cue.BUTTON_CLICK)
            try:
                self._start_drill(self._store.config)
            except ConfigurationInvalid as exc:
                self._error = str(exc)
            else:
                self._error = None
        elif row == "back":
            self._app.pop()
        else:
            self._adjust(1)

    def _adjust(self, delta: int) -> None:
        row = self._ROWS[self._selected]
        config = self._store.config
        if row in ("1digit", "2digit", "3digit"):
            self._store.set_config(config.with_size_toggled(DigitSize(row)))
        elif row == "operations":
            mode = OperationMode.ADDITION if config.operation_mode is OperationMode.MIXED else OperationMode.MIXED
            self._store.update(operation_mode=mode)
        elif row == "questions":
            self._store.update(problem_count=config.problem_count + delta)
        elif row == "numbers":
            self._store.update(operands_per_problem=config.operands_per_problem + delta)
        elif row == "level":
            self._store.update(level=config.level + delta)
        else:
            return
        self._cues.play(Cue.SETTING_CHANGE)

    def _row_label(self, row: str, config: DrillConfig) -> str:
        if row in ("1digit", "2digit", "3digit"):
            size = DigitSize(row)
            mark = "[x]" if size in config.digit_sizes else "[ ]"
            return f"{mark} {size.label}"
        if row == "operations":
            return f"Operations: {config.operation_mode.label}"
        if row == "questions":
            return f"Questions: {config.problem_count}"
        if row == "numbers":
            return f"Numbers per Question: {config.operands_per_problem}"
        if row == "level":
            return f"Level: {config.level} ({LEVEL_NAMES[config.level]})"
        if row == "start":
            return "Start Game!"
        return "Back"

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface)
        title = self._title_font.render("Mental Math Game", True, _TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 14)))

        config = self._store.config
        y = frame.y + 64
        for idx, row in enumerate(self._ROWS):
            rect = pygame.Rect(frame.x + 40, y, frame.w - 80, 34)
            selected = idx == self._selected
            pygame.draw.rect(surface, _ACTIVE_BG if selected else (9, 20, 106), rect)
            text = self._row_font.render(self._row_label(row, config), True, _ACTIVE_TEXT if selected else _TEXT_MAIN)
            surface.blit(text, (rect.x + 12, rect.y + (rect.h - text.get_height()) // 2))
            y += 40

        if self._error:
            err = self._hint_font.render(self._error, True, _ERROR)
            surface.blit(err, err.get_rect(midbottom=(frame.centerx, frame.bottom - 32)))

        foot = self._hint_font.render(
            "Up/Down: Select  |  Left/Right: Change  |  Enter: Toggle/Start  |  Esc: Back", True, _TEXT_MUTED
        )
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class DrillScreen:
    def __init__(self, app: App, *, drill: DrillSequencer, cues: CueSink, play_again: Callable[[], None]) -> None:
        self._app = app
        self._drill = drill
        self._cues = cues
        self._play_again = play_again
        self._small_font = pygame.font.Font(None, 28)
        self._mid_font = pygame.font.Font(None, 52)
        self._big_font = pygame.font.Font(None, 160)
        self._op_font = pygame.font.Font(None, 96)

    @property
    def drill(self) -> DrillSequencer:
        return self._drill

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if self._drill.finished:
            if key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._cues.play(Cue.BUTTON_CLICK)
                self._close()
                self._play_again()
            elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_r):
                self._close()
            return

        if key in (pygame.K_p, pygame.K_SPACE):
            if self._drill.paused:
                self._drill.resume()
            else:
                self._drill.pause()
        elif key in (pygame.K_r, pygame.K_ESCAPE):
            self._cues.play(Cue.BUTTON_CLICK)
            self._close()

    def _close(self) -> None:
        self._drill.restart()
        self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        self._drill.update()
        snap = self._drill.snapshot()
        frame = _draw_frame(surface)

        if snap.phase is DrillPhase.COMPLETE:
            self._render_results(surface, frame, snap.problem_count)
            return

        if snap.paused:
            title = self._mid_font.render("Game Paused", True, _TEXT_MAIN)
            surface.blit(title, title.get_rect(center=(frame.centerx, frame.centery - 40)))
            hint = self._small_font.render("P/Space: Resume  |  R: Restart", True, _TEXT_MUTED)
            surface.blit(hint, hint.get_rect(center=(frame.centerx, frame.centery + 20)))
            return

        counter = self._small_font.render(snap.counter, True, _TEXT_MUTED)
        surface.blit(counter, (frame.x + 18, frame.y + 14))
        headline = self._mid_font.render(snap.headline, True, _TEXT_MAIN)
        surface.blit(headline, headline.get_rect(midtop=(frame.centerx, frame.y + 50)))

        value = snap.display_value
        if isinstance(value, int):
            color = _TEXT_DIM if snap.dimmed else _TEXT_MAIN
            number = self._big_font.render(str(value), True, color)
            rect = number.get_rect(center=(frame.centerx, frame.centery + 20))
            surface.blit(number, rect)
            if snap.operator is not None:
                op = self._op_font.render(snap.operator.value, True, color)
                surface.blit(op, op.get_rect(midright=(rect.left - 24, rect.centery)))
        elif value == CALCULATING_TEXT:
            dots = "." * (1 + (pygame.time.get_ticks() // 300) % 3)
            txt = self._mid_font.render(f"Thinking{dots}", True, _TEXT_MUTED)
            surface.blit(txt, txt.get_rect(center=(frame.centerx, frame.centery + 20)))

        bar = pygame.Rect(frame.x + 40, frame.bottom - 70, frame.w - 80, 14)
        pygame.draw.rect(surface, (6, 13, 92), bar)
        fill = bar.copy()
        fill.w = int(round(bar.w * max(0.0, min(1.0, snap.progress))))
        pygame.draw.rect(surface, _ACTIVE_BG, fill)
        pygame.draw.rect(surface, (78, 102, 170), bar, 1)

        hint = self._small_font.render("P/Space: Pause  |  R/Esc: Restart", True, _TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 14)))

    def _render_results(self, surface: pygame.Surface, frame: pygame.Rect, problem_count: int) -> None:
        lines = [
            ("Great Job!", self._mid_font, _TEXT_MAIN),
            (f"You completed {problem_count} question{'s' if problem_count != 1 else ''}.", self._small_font, _TEXT_MAIN),
            ("", self._small_font, _TEXT_MUTED),
            ("Enter: Play Again  |  Esc: Back to Setup", self._small_font, _TEXT_MUTED),
        ]
        y = frame.centery - 70
        for text, font, color in lines:
            surf = font.render(text, True, color)
            surface.blit(surf, surf.get_rect(center=(frame.centerx, y)))
            y += 46


def _draw_frame(surface: pygame.Surface) -> pygame.Rect:
    w, h = surface.get_size()
    surface.fill(_BG)
    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, _PANEL_BG, frame)
    pygame.draw.rect(surface, _BORDER, frame, 2)
    return frame


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    store: SettingsStore | None = None,
    clock: Clock | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Mental Math Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    settings = store if store is not None else SettingsStore(SettingsStore.default_path())
    drill_clock: Clock = clock if clock is not None else RealClock()
    cues = ToneCuePlayer()

    def start_drill(config: DrillConfig) -> None:
        drill = build_drill(clock=drill_clock, config=config, seed=_new_seed(), cues=cues)
        app.push(
            DrillScreen(
                app,
                drill=drill,
                cues=cues,
                play_again=lambda: start_drill(settings.config),
            )
        )

    setup = SetupScreen(app, store=settings, cues=cues, start_drill=start_drill)

    main_items = [
        MenuItem("Drill Setup", lambda: app.push(setup)),
        MenuItem("Quick Start", lambda: start_drill(settings.config)),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        cues.stop()
        pygame.quit()

    return 0
