"""Unit tests for the collision resolver."""

from __future__ import annotations

import pytest

from config import MAX_PARTICLES, PLAYER_Y
from entities import Mode, ObstacleKind
from simulation import (
    CRASH_TONE, CRASH_VIBRATION, GAME_OVER_TONE, GAME_OVER_VIBRATION, INVINCIBLE_TICKS, HaltTimer,
    PersistHighScore, find_collision, resolve_collision,
)

pytestmark = pytest.mark.unit


def _obstacle(state, lane, y, kind=ObstacleKind.SEDAN):
    obs = state.obstacles.allocate()
    obs.lane, obs.y, obs.kind = lane, y, kind
    return obs


class TestOverlap:
    @pytest.mark.parametrize("y", [PLAYER_Y - 11, PLAYER_Y, PLAYER_Y + 12])
    def test_sedan_in_player_lane_hits(self, state, y):
        _obstacle(state, 1, y)
        assert find_collision(state) is not None

    @pytest.mark.parametrize("y", [PLAYER_Y - 12, PLAYER_Y + 13])
    def test_touching_edges_miss(self, state, y):
        _obstacle(state, 1, y)
        assert find_collision(state) is None

    def test_other_lane_misses(self, state):
        _obstacle(state, 0, PLAYER_Y)
        _obstacle(state, 2, PLAYER_Y)
        assert find_collision(state) is None

    def test_narrow_moto_still_hits_in_lane(self, state):
        _obstacle(state, 1, PLAYER_Y, ObstacleKind.MOTO)
        assert find_collision(state) is not None

    def test_truck_reaches_neighbouring_lane(self, state):
        state.player_lane = 0
        _obstacle(state, 1, PLAYER_Y, ObstacleKind.TRUCK)
        assert find_collision(state) is not None

    def test_first_slot_wins(self, state):
        first = _obstacle(state, 1, PLAYER_Y)
        _obstacle(state, 1, PLAYER_Y + 2)
        assert find_collision(state) is first


class TestResolution:
    def test_hit_costs_one_life(self, state, rng):
        state.combo = 4
        _obstacle(state, 1, PLAYER_Y)
        commands = []
        resolve_collision(state, rng, commands)
        assert state.lives == 2
        assert state.combo == 0
        assert state.invincible_ticks == INVINCIBLE_TICKS
        assert commands == [CRASH_VIBRATION, CRASH_TONE]

    def test_two_overlaps_one_life(self, state, rng):
        _obstacle(state, 1, PLAYER_Y)
        _obstacle(state, 1, PLAYER_Y - 4)
        resolve_collision(state, rng, [])
        assert state.lives == 2

    def test_particle_burst_at_player_center(self, state, rng):
        _obstacle(state, 1, PLAYER_Y)
        resolve_collision(state, rng, [])
        assert state.particles.live_count() == MAX_PARTICLES
        p = state.particles.slots[0]
        assert (p.x, p.y) == (31, PLAYER_Y + 6)
        assert (p.dx, p.dy) == (-3, -3)  # scripted draws of 0
        assert p.life == 8

    @pytest.mark.parametrize("field", ["shield_ticks", "invincible_ticks"])
    def test_protected_player_ignores_hits(self, state, rng, field):
        setattr(state, field, 5)
        state.combo = 3
        _obstacle(state, 1, PLAYER_Y)
        commands = []
        resolve_collision(state, rng, commands)
        assert state.lives == 3
        assert state.combo == 3
        assert state.particles.live_count() == 0
        assert commands == []

    def test_no_overlap_no_effect(self, state, rng):
        state.combo = 2
        _obstacle(state, 0, 10)
        resolve_collision(state, rng, [])
        assert state.lives == 3
        assert state.combo == 2


class TestGameOver:
    def test_last_life_ends_the_run(self, state, rng):
        state.lives = 1
        state.score = 340
        _obstacle(state, 1, PLAYER_Y)
        commands = []
        resolve_collision(state, rng, commands)
        assert state.lives == 0
        assert state.mode is Mode.GAME_OVER
        assert state.invincible_ticks == 0
        assert commands == [
            CRASH_VIBRATION, CRASH_TONE,
            HaltTimer(), GAME_OVER_VIBRATION, GAME_OVER_TONE,
            PersistHighScore(340),
        ]
        assert state.high_score == 340

    def test_no_save_when_not_beaten(self, state, rng):
        state.lives = 1
        state.score = 100
        state.high_score = 100
        _obstacle(state, 1, PLAYER_Y)
        commands = []
        resolve_collision(state, rng, commands)
        assert not any(isinstance(c, PersistHighScore) for c in commands)
        assert state.high_score == 100
