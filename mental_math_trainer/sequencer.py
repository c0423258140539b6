"""Timed presentation of a drill batch.

``DrillSequencer`` walks a pre-generated batch one problem at a time:

* AWAITING_START shows "Get Ready!" before each problem.
* REVEALING_OPERAND shows one operand (with the operator before it).
* FLASH_GAP dims the display briefly between operands.
* CALCULATING gives the user time to finish the sum.
* REVEALING_ANSWER shows the answer, then the next problem begins via
  BETWEEN_PROBLEMS, or the drill ends in COMPLETE.

All timing goes through an injected ``Clock``; the UI calls :meth:`update`
once per frame and renders :meth:`snapshot`. Exactly one deadline is pending
at any time and each ``update`` applies at most one transition.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .clock import Clock, OneShotTimer
from .drill_core import LEVEL_RANGE, Cue, CueSink, DrillConfig, Operator, Problem, validate_config
from .question_generator import generate_batch

logger = logging.getLogger(__name__)

FLASH_GAP_S = 0.2
GET_READY_S = 1.0
ANSWER_HOLD_S = 2.0

GET_READY_TEXT = "Get Ready!"
CALCULATING_TEXT = "Calculating..."


def number_delay_s(level: int) -> float:
    """Seconds each operand stays on screen."""
    return max(0.5, 2.0 - (level - 1) * 0.5)


def answer_delay_s(level: int) -> float:
    """Seconds of "Calculating..." before the answer is revealed."""
    return max(0.8, 5.0 - (level - 1) * 0.6)


class DrillPhase(str, Enum):
    AWAITING_START = "awaiting_start"
    REVEALING_OPERAND = "revealing_operand"
    FLASH_GAP = "flash_gap"
    CALCULATING = "calculating"
    REVEALING_ANSWER = "revealing_answer"
    BETWEEN_PROBLEMS = "between_problems"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class PhaseEvent:
    phase: DrillPhase
    problem_index: int
    operand_index: int
    entered_at_s: float


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    phase: DrillPhase
    problem_index: int
    operand_index: int
    problem_count: int
    operands_per_problem: int
    display_value: int | str | None
    operator: Operator | None
    headline: str
    counter: str
    dimmed: bool
    paused: bool
    running: bool
    progress: float


class DrillSequencer:
    def __init__(
        self,
        *,
        clock: Clock,
        level: int = 1,
        cues: CueSink | None = None,
        flash_gap_s: float = FLASH_GAP_S,
        get_ready_s: float = GET_READY_S,
        answer_hold_s: float = ANSWER_HOLD_S,
    ) -> None:
        if not (LEVEL_RANGE[0] <= level <= LEVEL_RANGE[1]):
            raise ValueError("level must be in [1, 5]")
        if flash_gap_s < 0.0:
            raise ValueError("flash_gap_s must be >= 0")
        if get_ready_s < 0.0:
            raise ValueError("get_ready_s must be >= 0")
        if answer_hold_s < 0.0:
            raise ValueError("answer_hold_s must be >= 0")

        self._clock = clock
        self._timer = OneShotTimer(clock)
        self._cues = cues

        self._level = int(level)
        self._number_delay_s = number_delay_s(self._level)
        self._answer_delay_s = answer_delay_s(self._level)
        self._flash_gap_s = float(flash_gap_s)
        self._get_ready_s = float(get_ready_s)
        self._answer_hold_s = float(answer_hold_s)

        self._batch: tuple[Problem, ...] = ()
        self._operands_per_problem = 0
        self._phase = DrillPhase.AWAITING_START
        self._problem_index = 0
        self._operand_index = 0
        self._paused_remaining_s: float | None = None
        self._events: list[PhaseEvent] = []

    @property
    def level(self) -> int:
        return self._level

    @property
    def phase(self) -> DrillPhase:
        return self._phase

    @property
    def problem_index(self) -> int:
        return self._problem_index

    @property
    def operand_index(self) -> int:
        return self._operand_index

    @property
    def cursor(self) -> tuple[int, int, DrillPhase]:
        return (self._problem_index, self._operand_index, self._phase)

    @property
    def batch(self) -> tuple[Problem, ...]:
        return self._batch

    @property
    def running(self) -> bool:
        return bool(self._batch)

    @property
    def paused(self) -> bool:
        return self._paused_remaining_s is not None

    @property
    def finished(self) -> bool:
        return self._phase is DrillPhase.COMPLETE

    def events(self) -> list[PhaseEvent]:
        return list(self._events)

    def start(self, batch: Sequence[Problem]) -> None:
        problems = tuple(batch)
        if not problems:
            raise ValueError("batch must contain at least one problem")
        sizes = {len(p.operands) for p in problems}
        if len(sizes) != 1 or 0 in sizes:
            raise ValueError("every problem in a batch must have the same, non-zero operand count")

        self.restart()
        self._batch = problems
        self._operands_per_problem = sizes.pop()
        self._emit(Cue.GAME_START)
        self._enter(DrillPhase.AWAITING_START)
        self._timer.arm(self._get_ready_s)

    def pause(self) -> bool:
        if not self.running or self.paused or self.finished:
            return False
        remaining = self._timer.remaining_s()
        self._timer.cancel()
        self._paused_remaining_s = 0.0 if remaining is None else remaining
        self._emit(Cue.PAUSE)
        return True

    def resume(self) -> bool:
        if self._paused_remaining_s is None:
            return False
        self._timer.arm(self._paused_remaining_s)
        self._paused_remaining_s = None
        self._emit(Cue.RESUME)
        return True

    def restart(self) -> None:
        """Drop the batch and return to the pre-game cursor."""
        self._timer.cancel()
        self._batch = ()
        self._operands_per_problem = 0
        self._phase = DrillPhase.AWAITING_START
        self._problem_index = 0
        self._operand_index = 0
        self._paused_remaining_s = None
        self._events = []

    def update(self) -> None:
        if not self.running or self.paused:
            return
        if self._timer.poll():
            self._advance()

    def snapshot(self) -> DrillSnapshot:
        return DrillSnapshot(
            phase=self._phase,
            problem_index=self._problem_index,
            operand_index=self._operand_index,
            problem_count=len(self._batch),
            operands_per_problem=self._operands_per_problem,
            display_value=self._display_value(),
            operator=self._display_operator(),
            headline=self._headline(),
            counter=self._counter(),
            dimmed=self._phase is DrillPhase.FLASH_GAP,
            paused=self.paused,
            running=self.running,
            progress=self.progress(),
        )

    def progress(self) -> float:
        total = len(self._batch) * self._operands_per_problem
        if total == 0:
            return 0.0
        if self._phase is DrillPhase.COMPLETE:
            return 1.0
        shown = self._problem_index * self._operands_per_problem + self._operand_index
        if self._phase is DrillPhase.REVEALING_ANSWER:
            shown += 1
        return shown / total

    def _advance(self) -> None:
        phase = self._phase
        last_operand = self._operands_per_problem - 1

        if phase is DrillPhase.AWAITING_START:
            self._operand_index = 0
            self._emit(Cue.GET_READY)
            self._enter(DrillPhase.REVEALING_OPERAND)
            self._timer.arm(self._number_delay_s)
            return

        if phase is DrillPhase.REVEALING_OPERAND:
            if self._operand_index < last_operand:
                self._enter(DrillPhase.FLASH_GAP)
                self._timer.arm(self._flash_gap_s)
            else:
                self._emit(Cue.CALCULATING)
                self._enter(DrillPhase.CALCULATING)
                self._timer.arm(self._answer_delay_s)
            return

        if phase is DrillPhase.FLASH_GAP:
            self._operand_index += 1
            self._enter(DrillPhase.REVEALING_OPERAND)
            self._timer.arm(self._number_delay_s)
            return

        if phase is DrillPhase.CALCULATING:
            self._emit(Cue.ANSWER_REVEAL)
            self._enter(DrillPhase.REVEALING_ANSWER)
            self._timer.arm(self._answer_hold_s)
            return

        if phase is DrillPhase.REVEALING_ANSWER:
            self._emit(Cue.PROBLEM_COMPLETE)
            if self._problem_index < len(self._batch) - 1:
                self._enter(DrillPhase.BETWEEN_PROBLEMS)
                self._problem_index += 1
                self._operand_index = 0
                self._enter(DrillPhase.AWAITING_START)
                self._timer.arm(self._get_ready_s)
            else:
                self._emit(Cue.GAME_COMPLETE)
                self._enter(DrillPhase.COMPLETE)
            return

        # BETWEEN_PROBLEMS never holds a deadline; COMPLETE is terminal.

    def _enter(self, phase: DrillPhase) -> None:
        self._phase = phase
        self._events.append(
            PhaseEvent(
                phase=phase,
                problem_index=self._problem_index,
                operand_index=self._operand_index,
                entered_at_s=self._clock.now(),
            )
        )

    def _emit(self, cue: Cue) -> None:
        if self._cues is None:
            return
        try:
            self._cues.play(cue)
        except Exception:
            logger.debug("audio cue %s failed", cue.value, exc_info=True)

    def _current(self) -> Problem | None:
        if not self._batch:
            return None
        return self._batch[self._problem_index]

    def _display_value(self) -> int | str | None:
        problem = self._current()
        if problem is None:
            return None
        if self._phase is DrillPhase.AWAITING_START:
            return GET_READY_TEXT
        if self._phase in (DrillPhase.REVEALING_OPERAND, DrillPhase.FLASH_GAP):
            return problem.operands[self._operand_index]
        if self._phase is DrillPhase.CALCULATING:
            return CALCULATING_TEXT
        if self._phase is DrillPhase.REVEALING_ANSWER:
            return problem.answer
        return None

    def _display_operator(self) -> Operator | None:
        if self._phase not in (DrillPhase.REVEALING_OPERAND, DrillPhase.FLASH_GAP):
            return None
        problem = self._current()
        if problem is None or self._operand_index == 0:
            return None
        return problem.operators[self._operand_index - 1]

    def _headline(self) -> str:
        if not self.running:
            return ""
        if self._phase is DrillPhase.AWAITING_START:
            return GET_READY_TEXT
        if self._phase in (DrillPhase.REVEALING_OPERAND, DrillPhase.FLASH_GAP):
            return f"Number {self._operand_index + 1} of {self._operands_per_problem}"
        if self._phase is DrillPhase.CALCULATING:
            return CALCULATING_TEXT
        if self._phase is DrillPhase.REVEALING_ANSWER:
            return "Answer:"
        if self._phase is DrillPhase.COMPLETE:
            return "Great Job!"
        return ""

    def _counter(self) -> str:
        if not self.running:
            return ""
        return f"Question {self._problem_index + 1} of {len(self._batch)}"


def build_drill(
    *,
    clock: Clock,
    config: DrillConfig,
    seed: int | None,
    cues: CueSink | None = None,
) -> DrillSequencer:
    """Validate ``config``, generate its batch and return a started sequencer.

    Raises ConfigurationInvalid before anything is generated.
    """

    config = validate_config(config)
    batch = generate_batch(config, seed=seed)
    drill = DrillSequencer(clock=clock, level=config.clamped().level, cues=cues)
    drill.start(batch)
    return drill
