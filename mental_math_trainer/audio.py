from __future__ import annotations

import logging
import math
from array import array

import pygame

from .drill_core import Cue

logger = logging.getLogger(__name__)

_NOTE_HZ: dict[str, float] = {
    "C4": 261.63,
    "E4": 329.63,
    "F4": 349.23,
    "G4": 392.00,
    "A4": 440.00,
    "C5": 523.25,
    "E5": 659.25,
    "G5": 783.99,
    "C6": 1046.50,
    "E6": 1318.51,
}

# (start offset s, note, duration s)
CUE_PATTERNS: dict[Cue, tuple[tuple[float, str, float], ...]] = {
    Cue.GET_READY: ((0.0, "C5", 0.3),),
    Cue.CALCULATING: tuple((0.2 * i, "A4", 0.1) for i in range(5)),
    Cue.ANSWER_REVEAL: ((0.0, "C5", 0.2), (0.1, "E5", 0.2), (0.2, "G5", 0.3)),
    Cue.PROBLEM_COMPLETE: ((0.0, "G4", 0.2), (0.15, "C5", 0.3)),
    Cue.GAME_START: ((0.0, "C4", 0.2), (0.1, "E4", 0.2), (0.2, "G4", 0.2), (0.3, "C5", 0.4)),
    Cue.GAME_COMPLETE: (
        (0.0, "C5", 0.2),
        (0.1, "E5", 0.2),
        (0.2, "G5", 0.2),
        (0.3, "C6", 0.2),
        (0.4, "E6", 0.4),
    ),
    Cue.PAUSE: ((0.0, "F4", 0.3),),
    Cue.RESUME: ((0.0, "G4", 0.2), (0.1, "C5", 0.3)),
    Cue.BUTTON_CLICK: ((0.0, "C4", 0.1),),
    Cue.SETTING_CHANGE: ((0.0, "A4", 0.15),),
}


class NullCuePlayer:
    """Cue sink that plays nothing (headless runs, tests)."""

    def play(self, cue: Cue) -> None:
        return None


class ToneCuePlayer:
    """Pygame mixer adapter that renders each cue as a short synthesized phrase.

    This stays outside deterministic core logic. Mixer or playback failures
    leave the player silent; they are never raised to the caller.
    """

    _sample_rate = 22050
    _amp = 32767
    _gain = 0.30

    def __init__(self) -> None:
        self._available = False
        self._cache: dict[Cue, pygame.mixer.Sound] = {}
        self._channel: pygame.mixer.Channel | None = None
        self._mixer_rate = self._sample_rate
        self._mixer_channels = 1

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            # The mixer may already run in another format (pygame.init() starts it).
            rate, _, channels = pygame.mixer.get_init()
            self._mixer_rate = int(rate)
            self._mixer_channels = max(1, int(channels))
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except Exception:
            logger.debug("audio unavailable; cues disabled", exc_info=True)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def play(self, cue: Cue) -> None:
        if not self._available:
            return
        try:
            sound = self._cache.get(cue)
            if sound is None:
                pcm = self.render_cue_pcm(cue, sample_rate=self._mixer_rate, channels=self._mixer_channels)
                sound = pygame.mixer.Sound(buffer=pcm.tobytes())
                self._cache[cue] = sound
            assert self._channel is not None
            self._channel.play(sound)
        except Exception:
            logger.debug("could not play cue %s", cue.value, exc_info=True)

    def stop(self) -> None:
        if self._channel is None:
            return
        try:
            self._channel.stop()
        except Exception:
            logger.debug("could not stop cue channel", exc_info=True)

    @classmethod
    def render_cue_pcm(cls, cue: Cue, *, sample_rate: int | None = None, channels: int = 1) -> array[int]:
        """Mix the notes of a cue pattern into one interleaved 16-bit buffer."""
        rate = cls._sample_rate if sample_rate is None else int(sample_rate)
        pattern = CUE_PATTERNS[cue]
        end_s = max(start + dur for start, _, dur in pattern)
        mix = [0.0] * max(1, int(rate * end_s))
        for start_s, note, duration_s in pattern:
            offset = int(rate * start_s)
            for idx, sample in enumerate(cls._render_tone(_NOTE_HZ[note], duration_s, rate)):
                if offset + idx < len(mix):
                    mix[offset + idx] += sample
        out = array("h")
        for sample in mix:
            value = int(max(-1.0, min(1.0, sample * cls._gain)) * cls._amp)
            out.extend([value] * channels)
        return out

    @staticmethod
    def _render_tone(frequency_hz: float, duration_s: float, sample_rate: int) -> list[float]:
        sample_count = max(1, int(sample_rate * duration_s))
        fade_n = max(1, int(sample_rate * 0.008))
        out: list[float] = []
        for idx in range(sample_count):
            envelope = 1.0
            if idx < fade_n:
                envelope = idx / float(fade_n)
            tail = sample_count - idx - 1
            if tail < fade_n:
                envelope = min(envelope, tail / float(fade_n))
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(sample_rate)
            out.append(math.sin(phase) * max(0.0, envelope))
        return out
