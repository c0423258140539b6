from __future__ import annotations

from dataclasses import dataclass

from mental_math_trainer.drill_core import DigitSize, DrillConfig, OperationMode
from mental_math_trainer.sequencer import DrillPhase, build_drill


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _run_until_finished(clock: FakeClock, engine, *, dt: float = 0.05, max_ticks: int = 20000) -> list[float]:
    progress = [engine.progress()]
    for _ in range(max_ticks):
        if engine.finished:
            return progress
        clock.advance(dt)
        engine.update()
        progress.append(engine.progress())
    raise AssertionError("drill did not finish")


def test_headless_sim_runs_whole_batch_in_order() -> None:
    clock = FakeClock()
    config = DrillConfig(
        digit_sizes=frozenset({DigitSize.ONE, DigitSize.TWO}),
        operation_mode=OperationMode.MIXED,
        problem_count=3,
        operands_per_problem=4,
        level=3,
    )
    engine = build_drill(clock=clock, config=config, seed=2024)
    progress = _run_until_finished(clock, engine)

    events = engine.events()
    phases = [e.phase for e in events]
    assert phases.count(DrillPhase.AWAITING_START) == 3
    assert phases.count(DrillPhase.COMPLETE) == 1
    assert phases[-1] is DrillPhase.COMPLETE
    assert phases.count(DrillPhase.BETWEEN_PROBLEMS) == 2

    for problem_index in range(3):
        revealed = [
            e.operand_index
            for e in events
            if e.phase is DrillPhase.REVEALING_OPERAND and e.problem_index == problem_index
        ]
        assert revealed == [0, 1, 2, 3]

    assert progress == sorted(progress)
    assert progress[-1] == 1.0

    # get-ready + 4 operands + 3 gaps + calculating + answer hold, per problem
    per_problem = 1.0 + 4 * 1.0 + 3 * 0.2 + 3.8 + 2.0
    assert clock.t >= 3 * per_problem


def test_headless_sim_pause_mid_problem_keeps_batch_and_finishes() -> None:
    clock = FakeClock()
    config = DrillConfig(problem_count=2, operands_per_problem=3, level=5)
    engine = build_drill(clock=clock, config=config, seed=8)
    batch = engine.batch

    while engine.phase is not DrillPhase.CALCULATING:
        clock.advance(0.05)
        engine.update()

    cursor = engine.cursor
    assert engine.pause()
    for _ in range(100):
        clock.advance(0.5)
        engine.update()
    assert engine.cursor == cursor
    assert engine.resume()

    _run_until_finished(clock, engine)
    assert engine.batch == batch
    assert engine.snapshot().display_value is None


def test_headless_sim_restart_then_new_game() -> None:
    clock = FakeClock()
    config = DrillConfig(problem_count=2, operands_per_problem=2, level=4)
    engine = build_drill(clock=clock, config=config, seed=1)
    for _ in range(40):
        clock.advance(0.1)
        engine.update()
    engine.restart()
    assert engine.running is False

    fresh = build_drill(clock=clock, config=config, seed=2)
    _run_until_finished(clock, fresh)
    assert fresh.finished
    assert engine.cursor == (0, 0, DrillPhase.AWAITING_START)
