"""Problem generation for flash mental-arithmetic drills.

A drill problem is a left-to-right chain of operands joined by ``+`` and
``-``. Operands are drawn from the enabled digit-size classes and every
running total along the chain stays non-negative. Generation is pure apart
from the random stream, so a seeded ``SeededRng`` reproduces a batch exactly.
"""

from __future__ import annotations

from typing import Protocol

from .drill_core import DrillConfig, OperationMode, Operator, Problem, SeededRng


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...
    def choice(self, seq): ...
    def random(self) -> float: ...


class QuestionGenerator:
    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def generate_number(self, config: DrillConfig) -> int:
        size = self._rng.choice(config.enabled_sizes())
        lo, hi = size.bounds
        return int(self._rng.randint(lo, hi))

    def generate_problem(self, config: DrillConfig) -> Problem:
        running_total = self.generate_number(config)
        operands = [running_total]
        operators: list[Operator] = []

        for _ in range(1, config.operands_per_problem):
            candidate = self.generate_number(config)
            op = self._choose_operator(config, running_total, candidate)
            op, candidate = self._repair_subtraction(op, running_total, candidate)

            operators.append(op)
            operands.append(candidate)
            running_total = op.apply(running_total, candidate)

        return Problem(operands=tuple(operands), operators=tuple(operators), answer=running_total)

    def generate_batch(self, config: DrillConfig) -> tuple[Problem, ...]:
        return tuple(self.generate_problem(config) for _ in range(config.problem_count))

    def _choose_operator(self, config: DrillConfig, running_total: int, candidate: int) -> Operator:
        if config.operation_mode is OperationMode.ADDITION:
            return Operator.ADD
        if running_total > candidate:
            return Operator.ADD if self._rng.random() < 0.5 else Operator.SUB
        return Operator.ADD

    def _repair_subtraction(self, op: Operator, running_total: int, candidate: int) -> tuple[Operator, int]:
        # A subtraction may never take the running total below zero.
        if op is not Operator.SUB or running_total - candidate >= 0:
            return op, candidate
        if running_total > 1:
            return op, int(self._rng.randint(1, running_total - 1))
        return Operator.ADD, candidate


def generate_batch(config: DrillConfig, *, seed: int | None) -> tuple[Problem, ...]:
    return QuestionGenerator(SeededRng(seed)).generate_batch(config)
