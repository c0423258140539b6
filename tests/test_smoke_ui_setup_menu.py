from __future__ import annotations

import os
from pathlib import Path


def test_ui_smoke_edit_settings_start_pause_and_restart(tmp_path: Path) -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from mental_math_trainer.app import run
    from mental_math_trainer.drill_core import DigitSize
    from mental_math_trainer.settings import SettingsStore

    path = tmp_path / "settings.json"
    store = SettingsStore(path)

    def key(k: int) -> None:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": k, "unicode": ""}))

    def inject(frame: int) -> None:
        # Main Menu -> Drill Setup -> toggle 1-digit -> Start Game! -> pause/resume -> restart
        if frame == 1:
            key(pygame.K_RETURN)
        elif frame == 2:
            key(pygame.K_RIGHT)
        elif frame == 3:
            key(pygame.K_UP)
        elif frame == 4:
            key(pygame.K_UP)
        elif frame == 5:
            key(pygame.K_RETURN)
        elif frame == 7:
            key(pygame.K_p)
        elif frame == 9:
            key(pygame.K_p)
        elif frame == 11:
            key(pygame.K_r)

    assert run(max_frames=20, event_injector=inject, store=store) == 0
    assert DigitSize.ONE not in SettingsStore(path).config.digit_sizes


def test_ui_smoke_quick_start(tmp_path: Path) -> None:
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from mental_math_trainer.app import run
    from mental_math_trainer.settings import SettingsStore

    def inject(frame: int) -> None:
        if frame == 1:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_DOWN, "unicode": ""}))
        elif frame == 2:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_RETURN, "unicode": ""}))

    assert run(max_frames=10, event_injector=inject, store=SettingsStore(tmp_path / "s.json")) == 0
