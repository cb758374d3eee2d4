"""Round state machine for the arithmetic quiz.

A round moves through three phases::

    NOT_STARTED -> RUNNING -> GAME_OVER -> (reset) -> NOT_STARTED

The state itself is an immutable ``RoundState`` value.  Transitions are plain
functions that take a state and return the next one, so the whole game can be
driven deterministically from tests with a seeded generator and scripted
elapsed times.  ``QuizSession`` wraps those functions with a ``Clock`` for the
pygame screen, which calls ``update()`` once per frame.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from enum import Enum

from .clock import Clock
from .problems import COMPOUND_PROBABILITY, Problem, ProblemGenerator

logger = logging.getLogger(__name__)

FEEDBACK_READY = "Press Start to begin!"
FEEDBACK_STARTED = "Solve the problems!"
FEEDBACK_CORRECT = "Correct!"
FEEDBACK_INVALID = "Invalid input. Try again!"

_INTEGER = re.compile(r"[+-]?[0-9]+")


def feedback_wrong(answer: int) -> str:
    return f"Wrong! The correct answer was {answer}."


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class QuizConfig:
    start_time_s: float = 30.0
    correct_bonus_s: float = 1.0
    wrong_penalty_s: float = 2.0
    compound_probability: float = COMPOUND_PROBABILITY

    def __post_init__(self) -> None:
        for name in ("start_time_s", "correct_bonus_s", "wrong_penalty_s", "compound_probability"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.start_time_s <= 0:
            raise ValueError("start_time_s must be > 0")
        if self.correct_bonus_s < 0:
            raise ValueError("correct_bonus_s must be >= 0")
        if self.wrong_penalty_s < 0:
            raise ValueError("wrong_penalty_s must be >= 0")
        if not (0.0 <= self.compound_probability <= 1.0):
            raise ValueError("compound_probability must be in [0.0, 1.0]")


@dataclass(frozen=True, slots=True)
class RoundState:
    problem: Problem
    remaining_s: float
    phase: Phase = Phase.NOT_STARTED
    score: int = 0
    correct_count: int = 0
    wrong_count: int = 0
    feedback: str = FEEDBACK_READY

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def remaining_whole_s(self) -> int:
        """Remaining time truncated to whole seconds, as shown on screen."""
        return int(self.remaining_s)


@dataclass(frozen=True, slots=True)
class RoundSummary:
    score: int
    correct: int
    wrong: int
    attempted: int
    accuracy: float


def parse_answer(raw: str) -> int | None:
    # ASCII digits only; int() alone also takes "1_0" and non-Latin digits.
    s = raw.strip()
    if _INTEGER.fullmatch(s) is None:
        return None
    return int(s)


def new_round(generator: ProblemGenerator, config: QuizConfig = QuizConfig()) -> RoundState:
    return RoundState(problem=generator.next_problem(0), remaining_s=float(config.start_time_s))


def reset(generator: ProblemGenerator, config: QuizConfig = QuizConfig()) -> RoundState:
    # A reset discards everything; nothing carries over from the old round.
    return new_round(generator, config)


def start(state: RoundState) -> RoundState:
    if state.phase is not Phase.NOT_STARTED:
        return state
    return replace(state, phase=Phase.RUNNING, feedback=FEEDBACK_STARTED)


def tick(state: RoundState, elapsed_s: float) -> RoundState:
    if elapsed_s < 0:
        raise ValueError("elapsed_s must be non-negative")
    if state.phase is not Phase.RUNNING:
        return state
    if elapsed_s >= state.remaining_s:
        return replace(state, phase=Phase.GAME_OVER, remaining_s=0.0)
    return replace(state, remaining_s=state.remaining_s - float(elapsed_s))


def submit_answer(
    state: RoundState,
    raw: str,
    generator: ProblemGenerator,
    config: QuizConfig = QuizConfig(),
) -> RoundState:
    if state.phase is not Phase.RUNNING:
        return state

    value = parse_answer(raw)
    problem = state.problem
    if value is not None and value == problem.answer:
        state = replace(
            state,
            score=state.score + problem.points,
            correct_count=state.correct_count + 1,
            remaining_s=state.remaining_s + config.correct_bonus_s,
            feedback=FEEDBACK_CORRECT,
        )
    else:
        state = replace(
            state,
            wrong_count=state.wrong_count + 1,
            remaining_s=max(0.0, state.remaining_s - config.wrong_penalty_s),
            feedback=FEEDBACK_INVALID if value is None else feedback_wrong(problem.answer),
        )
    logger.debug("answer %r to %r -> %s", raw, problem.expression, state.feedback)

    return replace(state, problem=generator.next_problem(state.score))


def summarize(state: RoundState) -> RoundSummary:
    attempted = state.correct_count + state.wrong_count
    accuracy = (state.correct_count / attempted) if attempted else 0.0
    return RoundSummary(
        score=state.score,
        correct=state.correct_count,
        wrong=state.wrong_count,
        attempted=attempted,
        accuracy=float(accuracy),
    )


class QuizSession:
    """Clock-driven holder of the current round.

    ``update()`` charges the time elapsed since the previous call (or since
    ``start()``) against the countdown.
    """

    def __init__(self, generator: ProblemGenerator, *, clock: Clock, config: QuizConfig = QuizConfig()) -> None:
        self._generator = generator
        self._clock = clock
        self._config = config
        self._state = new_round(generator, config)
        self._last_tick_at: float | None = None

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def config(self) -> QuizConfig:
        return self._config

    def start(self) -> None:
        if self._state.phase is not Phase.NOT_STARTED:
            return
        self._state = start(self._state)
        self._last_tick_at = self._clock.now()
        logger.info("round started with %.1fs on the clock", self._state.remaining_s)

    def update(self) -> None:
        if self._state.phase is not Phase.RUNNING:
            return
        assert self._last_tick_at is not None
        now = self._clock.now()
        elapsed = now - self._last_tick_at
        if elapsed < 0:
            raise ValueError("clock moved backwards")
        self._last_tick_at = now
        self._state = tick(self._state, elapsed)
        if self._state.game_over:
            self._last_tick_at = None
            s = summarize(self._state)
            logger.info("game over: score=%d correct=%d wrong=%d", s.score, s.correct, s.wrong)

    def submit_answer(self, raw: str) -> str | None:
        """Submit typed text. Returns the feedback, or None if not running."""

        if self._state.phase is not Phase.RUNNING:
            return None
        self._state = submit_answer(self._state, raw, self._generator, self._config)
        return self._state.feedback

    def reset(self) -> None:
        self._state = reset(self._generator, self._config)
        self._last_tick_at = None
        logger.info("round reset")

    def summary(self) -> RoundSummary:
        return summarize(self._state)


def build_quiz_session(*, clock: Clock, seed: int | None = None, config: QuizConfig | None = None) -> QuizSession:
    cfg = config if config is not None else QuizConfig()
    generator = ProblemGenerator(seed, compound_probability=cfg.compound_probability)
    return QuizSession(generator, clock=clock, config=cfg)
