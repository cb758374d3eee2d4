from __future__ import annotations

from dataclasses import replace

import pytest

from math_quiz.problems import Problem, ProblemGenerator
from math_quiz.round_state import (
    FEEDBACK_CORRECT,
    FEEDBACK_INVALID,
    FEEDBACK_READY,
    FEEDBACK_STARTED,
    Phase,
    QuizConfig,
    RoundState,
    new_round,
    parse_answer,
    reset,
    start,
    submit_answer,
    summarize,
    tick,
)

ADDITION = Problem("3 + 4", 7, operands=(3, 4, 1))
COMPOUND = Problem("7 * (3 + 2)", 35, is_compound=True, operands=(7, 3, 2))


def _running(problem: Problem = ADDITION, **kw: object) -> RoundState:
    return replace(RoundState(problem=problem, remaining_s=30.0, phase=Phase.RUNNING), **kw)


def test_new_round_defaults() -> None:
    state = new_round(ProblemGenerator(seed=1))
    assert state.phase is Phase.NOT_STARTED
    assert not state.running
    assert not state.game_over
    assert state.score == 0
    assert state.correct_count == 0
    assert state.wrong_count == 0
    assert state.remaining_s == 30.0
    assert state.feedback == FEEDBACK_READY
    assert all(1 <= n <= 10 for n in state.problem.operands)


def test_start_only_from_not_started() -> None:
    state = new_round(ProblemGenerator(seed=1))
    started = start(state)
    assert started.phase is Phase.RUNNING
    assert started.feedback == FEEDBACK_STARTED
    assert started.remaining_s == 30.0
    assert start(started) is started

    over = replace(started, phase=Phase.GAME_OVER)
    assert start(over) is over


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("7", 7),
        ("  -12 \n", -12),
        ("+3", 3),
        ("", None),
        ("   ", None),
        ("abc", None),
        ("1.5", None),
        ("1_0", None),
        ("\u0667", None),
        ("- 3", None),
    ],
)
def test_parse_answer(raw: str, expected: int | None) -> None:
    assert parse_answer(raw) == expected


def test_correct_simple_answer_scores_one_and_adds_a_second() -> None:
    gen = ProblemGenerator(seed=3)
    state = submit_answer(_running(), " 7 ", gen)
    assert state.score == 1
    assert state.correct_count == 1
    assert state.wrong_count == 0
    assert state.remaining_s == 31.0
    assert state.feedback == FEEDBACK_CORRECT
    assert state.problem is not ADDITION
    assert all(1 <= n <= 10 for n in state.problem.operands)


def test_correct_compound_answer_scores_two() -> None:
    state = submit_answer(_running(COMPOUND, score=6), "35", ProblemGenerator(seed=3))
    assert state.score == 8
    assert state.correct_count == 1
    assert state.remaining_s == 31.0


def test_wrong_answer_penalises_and_reports_answer() -> None:
    state = submit_answer(_running(), "8", ProblemGenerator(seed=3))
    assert state.score == 0
    assert state.wrong_count == 1
    assert state.correct_count == 0
    assert state.remaining_s == 28.0
    assert state.feedback == "Wrong! The correct answer was 7."


def test_invalid_input_counts_as_wrong_and_gets_new_problem() -> None:
    gen = ProblemGenerator(seed=3)
    expected_next = ProblemGenerator(seed=3).next_problem(0)
    state = submit_answer(_running(), "seven", gen)
    assert state.wrong_count == 1
    assert state.remaining_s == 28.0
    assert state.feedback == FEEDBACK_INVALID
    assert state.problem == expected_next


def test_digit_separators_and_non_ascii_digits_are_invalid() -> None:
    gen = ProblemGenerator(seed=3)
    state = submit_answer(_running(Problem("5 * 2", 10, operands=(5, 2, 1))), "1_0", gen)
    assert state.correct_count == 0
    assert state.wrong_count == 1
    assert state.feedback == FEEDBACK_INVALID

    state = submit_answer(_running(ADDITION), "\u0667", gen)
    assert state.correct_count == 0
    assert state.feedback == FEEDBACK_INVALID


def test_penalty_floors_at_zero_then_tick_ends_round() -> None:
    state = submit_answer(_running(remaining_s=1.0), "0", ProblemGenerator(seed=3))
    assert state.remaining_s == 0.0
    assert state.running

    state = tick(state, 0.016)
    assert state.game_over
    assert not state.running
    assert state.remaining_s == 0.0


def test_next_problem_uses_updated_score() -> None:
    # Crossing from 4 to 5 must draw from the [1, 20] tier.
    seed = 17
    state = submit_answer(_running(score=4), "7", ProblemGenerator(seed=seed))
    assert state.score == 5
    assert state.problem == ProblemGenerator(seed=seed).next_problem(5)


def test_tick_counts_down() -> None:
    state = tick(_running(), 0.5)
    assert state.remaining_s == pytest.approx(29.5)
    assert state.running


def test_tick_exhausting_time_ends_round_once() -> None:
    state = tick(_running(remaining_s=2.0), 2.0)
    assert state.phase is Phase.GAME_OVER
    assert state.remaining_s == 0.0

    assert tick(state, 1.0) is state
    gen = ProblemGenerator(seed=1)
    assert submit_answer(state, str(state.problem.answer), gen) is state


def test_tick_and_submit_ignored_before_start() -> None:
    state = new_round(ProblemGenerator(seed=1))
    assert tick(state, 5.0) is state
    assert submit_answer(state, "1", ProblemGenerator(seed=1)) is state


def test_tick_rejects_negative_elapsed() -> None:
    with pytest.raises(ValueError):
        tick(_running(), -0.1)


def test_reset_from_game_over_restores_fresh_round() -> None:
    gen = ProblemGenerator(seed=8)
    played = start(new_round(gen))
    played = submit_answer(played, str(played.problem.answer), gen)
    played = submit_answer(played, "nope", gen)
    over = tick(played, 60.0)
    assert over.game_over
    assert (over.score, over.correct_count, over.wrong_count) != (0, 0, 0)
    assert submit_answer(over, "1", gen) is over

    state = reset(gen)
    assert state.phase is Phase.NOT_STARTED
    assert state.score == 0
    assert state.correct_count == 0
    assert state.wrong_count == 0
    assert state.remaining_s == 30.0
    assert state.feedback == FEEDBACK_READY


def test_config_changes_timing() -> None:
    cfg = QuizConfig(start_time_s=10.0, correct_bonus_s=3.0, wrong_penalty_s=4.0)
    gen = ProblemGenerator(seed=2)
    state = new_round(gen, cfg)
    assert state.remaining_s == 10.0
    state = start(state)
    state = submit_answer(replace(state, problem=ADDITION), "7", gen, cfg)
    assert state.remaining_s == 13.0
    state = submit_answer(replace(state, problem=ADDITION), "x", gen, cfg)
    assert state.remaining_s == 9.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_time_s": 0.0},
        {"correct_bonus_s": -1.0},
        {"wrong_penalty_s": -1.0},
        {"compound_probability": 1.1},
        {"start_time_s": float("nan")},
        {"start_time_s": float("inf")},
        {"correct_bonus_s": float("inf")},
        {"wrong_penalty_s": float("nan")},
        {"compound_probability": float("nan")},
    ],
)
def test_config_validation(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        QuizConfig(**kwargs)


def test_summarize() -> None:
    s = summarize(_running(score=5, correct_count=3, wrong_count=1))
    assert (s.score, s.correct, s.wrong, s.attempted) == (5, 3, 1, 4)
    assert s.accuracy == 0.75
    assert summarize(_running()).accuracy == 0.0


def test_remaining_whole_seconds_truncates() -> None:
    assert _running(remaining_s=12.99).remaining_whole_s == 12
    assert _running(remaining_s=0.4).remaining_whole_s == 0
