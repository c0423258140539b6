from __future__ import annotations

import os

os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from mental_math_trainer.audio import CUE_PATTERNS, NullCuePlayer, ToneCuePlayer  # noqa: E402
from mental_math_trainer.drill_core import Cue  # noqa: E402


def test_every_cue_has_a_pattern() -> None:
    assert set(CUE_PATTERNS) == set(Cue)


def test_rendered_cue_spans_its_pattern() -> None:
    pcm = ToneCuePlayer.render_cue_pcm(Cue.CALCULATING)
    # Five 0.1 s beeps spaced 0.2 s apart end at 0.9 s.
    assert abs(len(pcm) - 22050 * 0.9) <= 1
    assert max(abs(v) for v in pcm) > 0
    assert all(-32767 <= v <= 32767 for v in pcm)


def test_stereo_render_interleaves_each_sample() -> None:
    mono = ToneCuePlayer.render_cue_pcm(Cue.BUTTON_CLICK, sample_rate=44100)
    stereo = ToneCuePlayer.render_cue_pcm(Cue.BUTTON_CLICK, sample_rate=44100, channels=2)
    assert len(stereo) == 2 * len(mono)
    assert list(stereo[0::2]) == list(mono)
    assert list(stereo[1::2]) == list(mono)


def test_player_is_silent_when_mixer_fails(monkeypatch) -> None:
    def broken_init(*args, **kwargs) -> None:
        raise pygame.error("no audio device")

    monkeypatch.setattr(pygame.mixer, "get_init", lambda: None)
    monkeypatch.setattr(pygame.mixer, "init", broken_init)

    player = ToneCuePlayer()
    assert player.available is False
    player.play(Cue.GAME_START)
    player.stop()


def test_null_player_accepts_every_cue() -> None:
    player = NullCuePlayer()
    for cue in Cue:
        player.play(cue)
