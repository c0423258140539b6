from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Protocol


PROBLEM_COUNT_RANGE = (1, 50)
OPERANDS_PER_PROBLEM_RANGE = (2, 20)
LEVEL_RANGE = (1, 5)

LEVEL_NAMES: dict[int, str] = {
    1: "Beginner",
    2: "Easy",
    3: "Medium",
    4: "Hard",
    5: "Expert",
}


class ConfigurationInvalid(ValueError):
    """A drill configuration that must not start a game.

    The message is user-facing.
    """


class DigitSize(str, Enum):
    ONE = "1digit"
    TWO = "2digit"
    THREE = "3digit"

    @property
    def bounds(self) -> tuple[int, int]:
        return _DIGIT_BOUNDS[self]

    @property
    def label(self) -> str:
        lo, hi = self.bounds
        digits = len(str(lo))
        return f"{digits} Digit{'s' if digits > 1 else ''} ({lo}-{hi})"

    @classmethod
    def of(cls, value: int) -> "DigitSize":
        """Classify a positive integer by its digit count."""
        for size in cls:
            lo, hi = size.bounds
            if lo <= value <= hi:
                return size
        raise ValueError(f"{value} is outside every digit-size class")


_DIGIT_BOUNDS: dict[DigitSize, tuple[int, int]] = {
    DigitSize.ONE: (1, 9),
    DigitSize.TWO: (10, 99),
    DigitSize.THREE: (100, 999),
}


class OperationMode(str, Enum):
    ADDITION = "addition"
    MIXED = "both"

    @property
    def label(self) -> str:
        return "Addition Only" if self is OperationMode.ADDITION else "Addition & Subtraction"


class Operator(str, Enum):
    ADD = "+"
    SUB = "-"

    def apply(self, total: int, value: int) -> int:
        return total + value if self is Operator.ADD else total - value


class Cue(str, Enum):
    """Named audio cue events emitted at phase transitions."""

    GET_READY = "get-ready"
    CALCULATING = "calculating"
    ANSWER_REVEAL = "answer-reveal"
    PROBLEM_COMPLETE = "problem-complete"
    GAME_START = "game-start"
    GAME_COMPLETE = "game-complete"
    PAUSE = "pause"
    RESUME = "resume"
    BUTTON_CLICK = "button-click"
    SETTING_CHANGE = "setting-change"


class CueSink(Protocol):
    def play(self, cue: Cue) -> None: ...


@dataclass(frozen=True, slots=True)
class DrillConfig:
    digit_sizes: frozenset[DigitSize] = field(
        default_factory=lambda: frozenset({DigitSize.ONE, DigitSize.TWO})
    )
    operation_mode: OperationMode = OperationMode.MIXED
    problem_count: int = 10
    operands_per_problem: int = 10
    level: int = 1

    @classmethod
    def default(cls) -> "DrillConfig":
        return cls()

    def enabled_sizes(self) -> tuple[DigitSize, ...]:
        """Enabled classes in declaration order; 1-digit when none are enabled."""
        enabled = tuple(size for size in DigitSize if size in self.digit_sizes)
        return enabled if enabled else (DigitSize.ONE,)

    def clamped(self) -> "DrillConfig":
        return replace(
            self,
            digit_sizes=frozenset(self.digit_sizes),
            problem_count=_clamp_int(self.problem_count, *PROBLEM_COUNT_RANGE),
            operands_per_problem=_clamp_int(self.operands_per_problem, *OPERANDS_PER_PROBLEM_RANGE),
            level=_clamp_int(self.level, *LEVEL_RANGE),
        )

    def with_size_toggled(self, size: DigitSize) -> "DrillConfig":
        sizes = set(self.digit_sizes)
        if size in sizes:
            sizes.remove(size)
        else:
            sizes.add(size)
        return replace(self, digit_sizes=frozenset(sizes))


def validate_config(config: DrillConfig) -> DrillConfig:
    """Check a configuration before a game starts.

    Returns the configuration to run with. An empty digit-size set is not an
    error: it is replaced with 1-digit.
    """

    if config.operands_per_problem < OPERANDS_PER_PROBLEM_RANGE[0]:
        raise ConfigurationInvalid("Numbers per question must be at least 2!")
    if config.problem_count < PROBLEM_COUNT_RANGE[0]:
        raise ConfigurationInvalid("Number of questions must be at least 1!")
    if not config.digit_sizes:
        config = replace(config, digit_sizes=frozenset({DigitSize.ONE}))
    return config


@dataclass(frozen=True, slots=True)
class Problem:
    operands: tuple[int, ...]
    operators: tuple[Operator, ...]
    answer: int

    def __post_init__(self) -> None:
        if len(self.operators) != max(0, len(self.operands) - 1):
            raise ValueError("a problem needs exactly one operator between each pair of operands")

    def running_totals(self) -> Iterator[int]:
        """Yield the left-to-right total after each operand."""
        if not self.operands:
            return
        total = self.operands[0]
        yield total
        for op, value in zip(self.operators, self.operands[1:]):
            total = op.apply(total, value)
            yield total

    @property
    def text(self) -> str:
        parts = [str(self.operands[0])] if self.operands else []
        for op, value in zip(self.operators, self.operands[1:]):
            parts.append(op.value)
            parts.append(str(value))
        return " ".join(parts) + f" = {self.answer}"


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int | None) -> None:
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq):
        return self._rng.choice(seq)

    def random(self) -> float:
        return self._rng.random()


def _clamp_int(value: int, lo: int, hi: int) -> int:
    return lo if value < lo else hi if value > hi else int(value)
