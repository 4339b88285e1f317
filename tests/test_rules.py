from __future__ import annotations

import pytest

from falling_block_rl.game import InvariantViolation, ScoringRules


@pytest.mark.parametrize("lines, points", [(0, 0), (1, 40), (2, 100), (3, 300), (4, 1200)])
def test_line_clear_table(lines, points):
    assert ScoringRules().score_for_lines(lines) == points


@pytest.mark.parametrize("lines", [5, 6, -1])
def test_impossible_line_counts_fail_loudly(lines):
    with pytest.raises(InvariantViolation):
        ScoringRules().score_for_lines(lines)


def test_drop_duration_interpolates_between_bounds():
    rules = ScoringRules()
    assert rules.drop_duration(0) == 500
    assert rules.drop_duration(10) == 75
    assert rules.drop_duration(5) == 288
    durations = [rules.drop_duration(level) for level in range(11)]
    assert durations == sorted(durations, reverse=True)


def test_level_advances_only_after_exceeding_goal():
    rules = ScoringRules()
    assert rules.advance(0, 6, 4) == (0, 10)
    assert rules.advance(0, 10, 1) == (1, 0)
    assert rules.advance(3, 8, 4) == (4, 0)


def test_level_is_capped():
    rules = ScoringRules()
    assert rules.advance(10, 10, 2) == (10, 0)
