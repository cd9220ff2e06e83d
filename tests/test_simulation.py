"""Whole-tick tests: stage ordering, short-circuiting and long-run invariants."""

from __future__ import annotations

import pytest

from config import INITIAL_LIVES, MAX_COINS, MAX_OBS, MAX_PARTICLES, MAX_POWERUPS, PLAYER_Y
from entities import Mode, ObstacleKind
from simulation import (
    HaltTimer, PersistHighScore, RandomSource, Reschedule, SimulationState, level_for_score,
    speed_for_level, tick,
)

from conftest import ScriptedRandom

pytestmark = pytest.mark.unit


class TestTickGating:
    @pytest.mark.parametrize("mode", [Mode.MENU, Mode.GAME_OVER])
    def test_tick_outside_playing_is_noop(self, mode):
        state = SimulationState(mode=mode)
        assert tick(state, ScriptedRandom()) == []
        assert state.tick_count == 0

    def test_tick_advances_counter(self, state, rng):
        tick(state, rng)
        assert state.tick_count == 1


class TestStageOrder:
    def test_obstacle_moves_before_collision(self, state, rng):
        obs = state.obstacles.allocate()
        obs.lane, obs.y, obs.kind = 1, PLAYER_Y - 15, ObstacleKind.SEDAN  # moves to PLAYER_Y - 12
        tick(state, rng)
        assert state.lives == INITIAL_LIVES

        obs.y = PLAYER_Y - 14  # moves to PLAYER_Y - 11, now overlapping
        tick(state, rng)
        assert state.lives == INITIAL_LIVES - 1

    def test_game_over_skips_progression(self, state, rng):
        state.lives = 1
        state.score = 400
        obs = state.obstacles.allocate()
        obs.lane, obs.y, obs.kind = 1, PLAYER_Y - 3, ObstacleKind.SEDAN
        commands = tick(state, rng)
        assert state.mode is Mode.GAME_OVER
        assert state.level == 0
        assert HaltTimer() in commands
        assert PersistHighScore(400) in commands
        assert not any(isinstance(c, Reschedule) for c in commands)

    def test_queued_ticks_after_game_over_do_nothing(self, state, rng):
        state.lives = 1
        obs = state.obstacles.allocate()
        obs.lane, obs.y = 1, PLAYER_Y - 3
        tick(state, rng)
        frozen = state.tick_count
        assert tick(state, rng) == []
        assert state.tick_count == frozen

    def test_coin_then_level_up_in_same_tick(self, state, rng):
        state.score = 180
        coin = state.coins.allocate()
        coin.lane, coin.y = 1, PLAYER_Y - 3
        commands = tick(state, rng)
        assert state.score == 205
        assert state.level == 1
        assert Reschedule(112) in commands

    def test_survival_bonus_can_level_up(self, state, rng):
        state.score = 195
        obs = state.obstacles.allocate()
        obs.lane, obs.y, obs.kind = 0, 139, ObstacleKind.SEDAN
        tick(state, rng)
        assert state.score == 205
        assert state.level == 1


class TestLongRunInvariants:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    @pytest.mark.parametrize("difficulty", ["Easy", "Normal", "Hard"])
    def test_invariants_hold_every_tick(self, seed, difficulty):
        rng = RandomSource(seed)
        steer = RandomSource(seed + 1000)
        state = SimulationState(difficulty=difficulty)
        state.reset_run(rng)
        last_score, last_level = 0, 0

        for _ in range(3000):
            state.player_lane = steer.randrange(3) if steer.chance(0.2) else state.player_lane
            lives_before = state.lives
            tick(state, rng)

            assert state.obstacles.live_count() <= MAX_OBS
            assert state.coins.live_count() <= MAX_COINS
            assert state.powerups.live_count() <= MAX_POWERUPS
            assert state.particles.live_count() <= MAX_PARTICLES
            assert all(0 <= o.lane < 3 for o in state.obstacles.live())
            assert state.score >= last_score
            assert state.level >= last_level
            if state.mode is not Mode.PLAYING:
                break
            assert state.level == level_for_score(state.score)
            assert state.speed == speed_for_level(difficulty, state.level)
            assert 0 < state.lives <= 5
            if state.lives < lives_before:
                assert state.combo == 0
                assert state.invincible_ticks == 20
            last_score, last_level = state.score, state.level

    def test_shield_blocks_every_hit(self):
        rng = RandomSource(3)
        state = SimulationState()
        state.reset_run(rng)
        for _ in range(2000):
            state.shield_ticks = 10
            lives_before = state.lives
            tick(state, rng)
            assert state.lives >= lives_before  # Fuel pickups may still add lives
            assert state.mode is Mode.PLAYING
        assert state.lives >= INITIAL_LIVES

    def test_shield_without_pickups_keeps_lives_exact(self):
        rng = RandomSource(3)
        state = SimulationState()
        state.reset_run(rng)
        for _ in range(2000):
            state.shield_ticks = 10
            state.powerups.clear()
            tick(state, rng)
            assert state.lives == INITIAL_LIVES
