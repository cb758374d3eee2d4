"""Problem generation for the arithmetic quiz.

Problems are built answer-first: operands are drawn, then the expression text
is chosen so that its value is a known integer.  Division problems are written
as ``(a*b) / b`` so they always divide exactly, and the compound
difference-over-divide form uses integer division truncating toward zero.

Difficulty depends only on the current score:

* score < 5   -> operands in [1, 10], simple problems only
* score 5..9  -> operands in [1, 20], compound problems allowed
* score >= 10 -> operands in [1, 50], compound problems allowed

Nothing here touches pygame or the clock; randomness is injected so tests can
replay exact sequences from a seed.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol

COMPOUND_PROBABILITY = 0.3


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...
    def randrange(self, stop: int) -> int: ...
    def random(self) -> float: ...


@dataclass(frozen=True, slots=True)
class Tier:
    min_value: int
    max_value: int
    compound_eligible: bool


EASY = Tier(min_value=1, max_value=10, compound_eligible=False)
MEDIUM = Tier(min_value=1, max_value=20, compound_eligible=True)
HARD = Tier(min_value=1, max_value=50, compound_eligible=True)


@dataclass(frozen=True, slots=True)
class Problem:
    expression: str
    answer: int
    is_compound: bool = False
    operands: tuple[int, int, int] = (0, 0, 0)

    @property
    def points(self) -> int:
        return 2 if self.is_compound else 1


def tier_for_score(score: int) -> Tier:
    if score < 5:
        return EASY
    if score < 10:
        return MEDIUM
    return HARD


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero (``//`` rounds toward -inf)."""

    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def generate_problem(
    score: int,
    rng: RandomSource,
    *,
    compound_probability: float = COMPOUND_PROBABILITY,
) -> Problem:
    tier = tier_for_score(score)
    n1 = rng.randint(tier.min_value, tier.max_value)
    n2 = rng.randint(tier.min_value, tier.max_value)
    n3 = rng.randint(tier.min_value, tier.max_value)
    operands = (n1, n2, n3)

    if tier.compound_eligible and rng.random() < compound_probability:
        if rng.randrange(2) == 0:
            return Problem(
                expression=f"{n1} * ({n2} + {n3})",
                answer=n1 * (n2 + n3),
                is_compound=True,
                operands=operands,
            )
        # n3 is never 0 with the current tiers; the guard keeps the 0 answer anyway.
        answer = trunc_div(n1 + n3 - n2, n3) if n3 != 0 else 0
        return Problem(
            expression=f"({n1 + n3} - {n2}) / {n3}",
            answer=answer,
            is_compound=True,
            operands=operands,
        )

    op = rng.randrange(4)
    if op == 0:
        return Problem(f"{n1} + {n2}", n1 + n2, operands=operands)
    if op == 1:
        return Problem(f"{n1} - {n2}", n1 - n2, operands=operands)
    if op == 2:
        return Problem(f"{n1} * {n2}", n1 * n2, operands=operands)
    if n2 != 0:
        return Problem(f"{n1 * n2} / {n2}", n1, operands=operands)
    return Problem(f"{n1} + 1", n1 + 1, operands=operands)


class ProblemGenerator:
    """Seeded problem stream.

    Two generators built with the same seed yield the same problems for the
    same sequence of scores.
    """

    def __init__(self, seed: int | None = None, *, compound_probability: float = COMPOUND_PROBABILITY) -> None:
        if not (0.0 <= compound_probability <= 1.0):
            raise ValueError("compound_probability must be in [0.0, 1.0]")
        self._seed = seed
        self._rng = random.Random(seed)
        self._compound_probability = float(compound_probability)

    @property
    def seed(self) -> int | None:
        return self._seed

    def next_problem(self, score: int) -> Problem:
        return generate_problem(score, self._rng, compound_probability=self._compound_probability)
