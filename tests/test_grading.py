import pytest

from reportcard.domain.grading import clamp_0_100, grade_a_level, grade_o_level, round_half_up
from reportcard.domain.types import Grade


@pytest.mark.parametrize("score", [0, 10, 25.5, 39, 39.99])
def test_o_level_below_forty_is_f(score):
    assert grade_o_level(score) == Grade.F


@pytest.mark.parametrize(
    "below, at, expected_below, expected_at",
    [
        (39.99, 40, "F", "E"),
        (49.99, 50, "E", "D"),
        (59.99, 60, "D", "C"),
        (69.99, 70, "C", "B"),
        (79.99, 80, "B", "A"),
    ],
)
def test_o_level_steps_up_at_each_threshold(below, at, expected_below, expected_at):
    assert grade_o_level(below) == expected_below
    assert grade_o_level(at) == expected_at


def test_o_level_top_of_scale():
    assert grade_o_level(100) == Grade.A


def test_no_score_is_not_examined():
    assert grade_o_level(None) == Grade.NOT_EXAMINED
    assert grade_o_level(None).value == "X"
    assert grade_a_level(None) == "X"


def test_o_level_gap_between_bands_falls_back_to_f():
    assert grade_o_level(79.995) == Grade.F


@pytest.mark.parametrize(
    "score, expected",
    [(100, "A"), (80, "A"), (79, "B"), (70, "B"), (65, "C"), (50, "D"), (49, "E"), (0, "E")],
)
def test_a_level_bands_have_no_f(score, expected):
    assert grade_a_level(score) == expected


def test_round_half_up():
    assert round_half_up(69.5) == 70
    assert round_half_up(70.5) == 71
    assert round_half_up(69.49) == 69
    assert round_half_up(0) == 0


def test_clamp():
    assert clamp_0_100(87.6) == 87.6
    assert clamp_0_100(150) == 100
    assert clamp_0_100(-5) == 0
