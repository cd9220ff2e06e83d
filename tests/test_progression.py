"""Unit tests for level derivation and tick-interval scaling."""

from __future__ import annotations

import pytest

from simulation import (
    LEVEL_UP_TONE, Reschedule, level_for_score, speed_for_level, update_progression,
)

pytestmark = pytest.mark.unit


class TestLevelForScore:
    @pytest.mark.parametrize("score,level", [(0, 0), (199, 0), (200, 1), (650, 3), (1999, 9), (10**6, 9)])
    def test_levels(self, score, level):
        assert level_for_score(score) == level


class TestSpeedForLevel:
    @pytest.mark.parametrize("difficulty,level,speed", [
        ("Normal", 0, 120),
        ("Normal", 1, 112),
        ("Normal", 9, 50),
        ("Easy", 1, 132),
        ("Easy", 9, 70),
        ("Hard", 3, 66),
        ("Hard", 9, 35),
    ])
    def test_interval_floored_per_difficulty(self, difficulty, level, speed):
        assert speed_for_level(difficulty, level) == speed


class TestUpdateProgression:
    def test_first_level_up_on_normal(self, state, rng):
        assert state.speed == 120
        state.score = 200
        commands = []
        update_progression(state, rng, commands)
        assert state.level == 1
        assert state.speed == 112
        assert commands == [Reschedule(112), LEVEL_UP_TONE]

    def test_no_change_below_threshold(self, state, rng):
        state.score = 199
        commands = []
        update_progression(state, rng, commands)
        assert state.level == 0
        assert state.speed == 120
        assert commands == []

    def test_jumps_straight_to_derived_level(self, state, rng):
        state.score = 650
        update_progression(state, rng, [])
        assert state.level == 3
        assert state.speed == 96

    def test_level_never_goes_down(self, state, rng):
        state.level = 3
        state.score = 0
        commands = []
        update_progression(state, rng, commands)
        assert state.level == 3
        assert commands == []

    def test_capped_at_level_nine(self, state, rng):
        state.difficulty = "Hard"
        state.score = 50_000
        update_progression(state, rng, [])
        assert state.level == 9
        assert state.speed == 35

    def test_same_level_does_not_reschedule_twice(self, state, rng):
        state.score = 250
        update_progression(state, rng, [])
        commands = []
        state.score = 300
        update_progression(state, rng, commands)
        assert commands == []
