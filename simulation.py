# simulation.py - Per-Tick Simulation Core
"""
Simulation state plus the five tick stages:
Mover -> Spawner -> Collection Resolver -> Collision Resolver -> Progression.

Nothing here touches a device. Side effects the outside world must carry out
(sounds, rumble, timer restarts, high-score saves) are returned as commands.
"""

import random
from dataclasses import dataclass, field, replace

from config import (
    CAR_H, CAR_W, DASH_TOTAL, DEFAULT_DIFFICULTY, DIFFICULTIES, INITIAL_LIVES, LANE_COUNT,
    MAX_COINS, MAX_LIVES, MAX_OBS, MAX_PARTICLES, MAX_POWERUPS, MAX_SCENERY, PLAYER_Y,
    SCREEN_H,
)
from entities import (
    OBSTACLE_GEOMETRY, POWERUP_KINDS, Box, Coin, Mode, Obstacle, ObstacleKind, Particle,
    Pool, PowerUp, PowerUpKind, Scenery, car_left,
)

# Spawn cadences (ticks); obstacle cadence comes from DIFFICULTIES
COIN_CADENCE = 18
POWERUP_CADENCE = 60

# Spawn heights, just above the visible top edge
OBSTACLE_SPAWN_Y = -18
PICKUP_SPAWN_Y = -12

# Motion
BASE_SCROLL = 3  # obstacle/pickup speed at level 0
ROAD_SCROLL = 3
SCENERY_SPEED = 2
SCENERY_RECYCLE_MARGIN = 5

# Scoring and progression
SURVIVAL_BONUS = 10
COIN_POINTS = 25
POINTS_PER_LEVEL = 200
MAX_LEVEL = 9
SPEED_STEP = 8  # ms shaved off the tick interval per level

# Status timers (ticks)
INVINCIBLE_TICKS = 20
COMBO_DISPLAY_TICKS = 15
MAGNET_RANGE = 30
MAGNET_PULL = 4

POWERUP_TIMERS = {
    PowerUpKind.SHIELD: ("shield_ticks", 50),
    PowerUpKind.MAGNET: ("magnet_ticks", 60),
}


# ------------------------------------------------------------------ #
# COMMANDS (carried out by the engine)
# ------------------------------------------------------------------ #
@dataclass(frozen=True)
class Tone:
    freq: float
    volume: float
    ms: int


@dataclass(frozen=True)
class Vibrate:
    ms: int


@dataclass(frozen=True)
class Reschedule:
    """Restart the periodic tick source with a new interval."""
    interval: int


@dataclass(frozen=True)
class HaltTimer:
    pass


@dataclass(frozen=True)
class PersistHighScore:
    score: int


LANE_CHANGE_TONE = Tone(440, 1.0, 12)
POWERUP_TONE = Tone(660, 0.8, 40)
CRASH_TONE = Tone(100, 1.0, 80)
GAME_OVER_TONE = Tone(80, 1.0, 200)
LEVEL_UP_TONE = Tone(880, 1.0, 40)
CRASH_VIBRATION = Vibrate(80)
GAME_OVER_VIBRATION = Vibrate(200)


def coin_tone(combo: int) -> Tone:
    """Coin pickup pitch climbs with the combo."""
    return Tone(1200 + combo * 100, 0.8, 25)


# ------------------------------------------------------------------ #
# RANDOMNESS
# ------------------------------------------------------------------ #
class RandomSource:
    """The only place spawn logic draws randomness from."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def randrange(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        return self._rng.randrange(n)

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self._rng.random() < probability


# ------------------------------------------------------------------ #
# STATE
# ------------------------------------------------------------------ #
def base_speed(difficulty: str) -> int:
    return DIFFICULTIES[difficulty]["speed"]


def speed_for_level(difficulty: str, level: int) -> int:
    """Tick interval for a level, floored at the difficulty minimum."""
    settings = DIFFICULTIES[difficulty]
    return max(settings["speed"] - level * SPEED_STEP, settings["min_speed"])


@dataclass(frozen=True)
class Snapshot:
    """Read-only view handed to the renderer once per processed event."""
    mode: Mode
    player_lane: int
    score: int
    high_score: int
    level: int
    lives: int
    speed: int
    tick_count: int
    road_scroll: int
    difficulty: str
    invincible_ticks: int
    shield_ticks: int
    magnet_ticks: int
    combo: int
    combo_display: int
    menu_index: int
    sound_on: bool
    night_mode: bool
    obstacles: tuple
    coins: tuple
    powerups: tuple
    scenery: tuple
    particles: tuple


@dataclass
class SimulationState:
    """Everything a run needs. Exclusively owns the pools."""
    mode: Mode = Mode.MENU
    player_lane: int = 1
    score: int = 0
    high_score: int = 0
    level: int = 0
    lives: int = INITIAL_LIVES
    difficulty: str = DEFAULT_DIFFICULTY
    speed: int = field(default=0)
    tick_count: int = 0
    road_scroll: int = 0
    invincible_ticks: int = 0
    shield_ticks: int = 0
    magnet_ticks: int = 0
    combo: int = 0
    combo_display: int = 0

    # Menu toggles (not simulation logic)
    menu_index: int = 0
    sound_on: bool = True
    night_mode: bool = False

    obstacles: Pool = field(default_factory=lambda: Pool(Obstacle, MAX_OBS))
    coins: Pool = field(default_factory=lambda: Pool(Coin, MAX_COINS))
    powerups: Pool = field(default_factory=lambda: Pool(PowerUp, MAX_POWERUPS))
    particles: Pool = field(default_factory=lambda: Pool(Particle, MAX_PARTICLES))
    scenery: list = field(default_factory=lambda: [Scenery() for _ in range(MAX_SCENERY)])

    def __post_init__(self) -> None:
        if not self.speed:
            self.speed = base_speed(self.difficulty)

    def player_box(self) -> Box:
        return Box(car_left(self.player_lane), PLAYER_Y, CAR_W, CAR_H)

    def reset_run(self, rng: RandomSource) -> None:
        """Fresh run on the selected difficulty (Menu -> Playing)."""
        self.mode = Mode.PLAYING
        self.player_lane = 1
        self.score = 0
        self.level = 0
        self.lives = INITIAL_LIVES
        self.speed = base_speed(self.difficulty)
        self.tick_count = 0
        self.road_scroll = 0
        self.invincible_ticks = 0
        self.shield_ticks = 0
        self.magnet_ticks = 0
        self.combo = 0
        self.combo_display = 0

        self.obstacles.clear()
        self.coins.clear()
        self.powerups.clear()
        self.particles.clear()
        for sc in self.scenery:
            sc.y = rng.randrange(SCREEN_H)
            sc.side = rng.randrange(2)
            sc.kind = rng.randrange(2)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            mode=self.mode,
            player_lane=self.player_lane,
            score=self.score,
            high_score=self.high_score,
            level=self.level,
            lives=self.lives,
            speed=self.speed,
            tick_count=self.tick_count,
            road_scroll=self.road_scroll,
            difficulty=self.difficulty,
            invincible_ticks=self.invincible_ticks,
            shield_ticks=self.shield_ticks,
            magnet_ticks=self.magnet_ticks,
            combo=self.combo,
            combo_display=self.combo_display,
            menu_index=self.menu_index,
            sound_on=self.sound_on,
            night_mode=self.night_mode,
            obstacles=tuple(replace(o) for o in self.obstacles.live()),
            coins=tuple(replace(c) for c in self.coins.live()),
            powerups=tuple(replace(p) for p in self.powerups.live()),
            scenery=tuple(replace(s) for s in self.scenery),
            particles=tuple(replace(p) for p in self.particles.live()),
        )


# ------------------------------------------------------------------ #
# MOVER
# ------------------------------------------------------------------ #
def _countdown(value: int) -> int:
    return value - 1 if value > 0 else 0


def move_entities(state: SimulationState, rng: RandomSource, commands: list) -> None:
    """Advance the clock, status timers and every moving entity by one tick."""
    state.tick_count += 1
    state.road_scroll = (state.road_scroll + ROAD_SCROLL) % DASH_TOTAL

    state.invincible_ticks = _countdown(state.invincible_ticks)
    state.shield_ticks = _countdown(state.shield_ticks)
    state.magnet_ticks = _countdown(state.magnet_ticks)
    state.combo_display = _countdown(state.combo_display)

    for p in state.particles.live():
        p.x += p.dx
        p.y += p.dy
        p.life -= 1

    for sc in state.scenery:
        sc.y += SCENERY_SPEED
        if sc.y > SCREEN_H + SCENERY_RECYCLE_MARGIN:
            sc.y = -rng.randrange(20)
            sc.side = rng.randrange(2)
            sc.kind = rng.randrange(2)

    speed = BASE_SCROLL + state.level // 2
    for obs in state.obstacles.live():
        geo = OBSTACLE_GEOMETRY[obs.kind]
        obs.y += speed + geo.speed_delta
        if obs.y > SCREEN_H + geo.body_height:
            obs.retire()
            state.score += SURVIVAL_BONUS  # dodged it

    for pickup in (*state.coins.live(), *state.powerups.live()):
        pickup.y += speed
        if pickup.y > SCREEN_H:
            pickup.retire()


# ------------------------------------------------------------------ #
# SPAWNER
# ------------------------------------------------------------------ #
def _pick_obstacle(state: SimulationState, rng: RandomSource) -> tuple[int, ObstacleKind]:
    lane = rng.randrange(LANE_COUNT)
    # Boss truck on every fifth level, blocking the centre
    if state.level > 0 and state.level % 5 == 0 and rng.randrange(4) == 0:
        return 1, ObstacleKind.TRUCK
    if rng.randrange(3) == 0:
        return lane, ObstacleKind.MOTO
    return lane, ObstacleKind.SEDAN


def spawn_obstacle(state: SimulationState, rng: RandomSource) -> Obstacle | None:
    obs = state.obstacles.allocate()
    if obs is None:
        return None  # pool full, drop it
    obs.y = OBSTACLE_SPAWN_Y
    obs.lane, obs.kind = _pick_obstacle(state, rng)
    return obs


def spawn_coin(state: SimulationState, rng: RandomSource) -> Coin | None:
    coin = state.coins.allocate()
    if coin is None:
        return None
    coin.y = PICKUP_SPAWN_Y
    coin.lane = rng.randrange(LANE_COUNT)
    return coin


def spawn_powerup(state: SimulationState, rng: RandomSource) -> PowerUp | None:
    pw = state.powerups.allocate()
    if pw is None:
        return None
    pw.y = PICKUP_SPAWN_Y
    pw.lane = rng.randrange(LANE_COUNT)
    pw.kind = POWERUP_KINDS[rng.randrange(len(POWERUP_KINDS))]
    return pw


def spawn_entities(state: SimulationState, rng: RandomSource, commands: list) -> None:
    """Insert new entities on their cadence ticks."""
    if state.tick_count % DIFFICULTIES[state.difficulty]["spawn"] == 0:
        spawn_obstacle(state, rng)
    if state.tick_count % COIN_CADENCE == 0:
        spawn_coin(state, rng)
    if state.tick_count % POWERUP_CADENCE == 0:
        spawn_powerup(state, rng)


# ------------------------------------------------------------------ #
# COLLECTION RESOLVER
# ------------------------------------------------------------------ #
def _apply_powerup(state: SimulationState, kind: PowerUpKind) -> None:
    if kind in POWERUP_TIMERS:
        attr, ticks = POWERUP_TIMERS[kind]
        setattr(state, attr, ticks)
    elif kind is PowerUpKind.FUEL and state.lives < MAX_LIVES:
        state.lives += 1


def resolve_collections(state: SimulationState, rng: RandomSource, commands: list) -> None:
    """Coins (with magnet pull) first, then power-ups."""
    player = state.player_box()

    for coin in state.coins.live():
        touch = player.overlaps(coin.hitbox())
        if not touch:
            if state.magnet_ticks > 0 and abs(coin.y - PLAYER_Y) < MAGNET_RANGE:
                coin.y += MAGNET_PULL if coin.y < PLAYER_Y else -MAGNET_PULL
                if coin.lane < state.player_lane:
                    coin.lane += 1
                elif coin.lane > state.player_lane:
                    coin.lane -= 1
            continue

        coin.retire()
        state.combo += 1
        state.combo_display = COMBO_DISPLAY_TICKS
        state.score += COIN_POINTS * max(state.combo, 1)
        commands.append(coin_tone(state.combo))

    for pw in state.powerups.live():
        if not player.overlaps(pw.hitbox()):
            continue
        pw.retire()
        commands.append(POWERUP_TONE)
        _apply_powerup(state, pw.kind)


# ------------------------------------------------------------------ #
# COLLISION RESOLVER
# ------------------------------------------------------------------ #
def find_collision(state: SimulationState) -> Obstacle | None:
    """First live obstacle (slot order) overlapping the player, if any."""
    player = state.player_box()
    for obs in state.obstacles.live():
        if player.overlaps(obs.hitbox()):
            return obs
    return None


def spawn_particles(state: SimulationState, rng: RandomSource, cx: int, cy: int) -> None:
    """Crash burst: every particle slot restarts from (cx, cy)."""
    for p in state.particles:
        p.x = cx
        p.y = cy
        p.dx = rng.randrange(7) - 3
        p.dy = rng.randrange(7) - 3
        p.life = 8 + rng.randrange(5)


def resolve_collision(state: SimulationState, rng: RandomSource, commands: list) -> None:
    """Lose a life on contact unless shielded or still blinking from the last hit."""
    if state.invincible_ticks > 0 or state.shield_ticks > 0:
        return
    if find_collision(state) is None:
        return

    state.lives -= 1
    state.combo = 0
    box = state.player_box()
    spawn_particles(state, rng, box.x + CAR_W // 2, box.y + CAR_H // 2)
    commands.append(CRASH_VIBRATION)
    commands.append(CRASH_TONE)

    if state.lives == 0:
        state.mode = Mode.GAME_OVER
        commands.append(HaltTimer())
        commands.append(GAME_OVER_VIBRATION)
        commands.append(GAME_OVER_TONE)
        if state.score > state.high_score:
            state.high_score = state.score
            commands.append(PersistHighScore(state.score))
        return
    state.invincible_ticks = INVINCIBLE_TICKS


# ------------------------------------------------------------------ #
# PROGRESSION
# ------------------------------------------------------------------ #
def level_for_score(score: int) -> int:
    return min(score // POINTS_PER_LEVEL, MAX_LEVEL)


def update_progression(state: SimulationState, rng: RandomSource, commands: list) -> None:
    """Level only goes up; each step up speeds the tick source."""
    new_level = level_for_score(state.score)
    if new_level <= state.level:
        return
    state.level = new_level
    state.speed = speed_for_level(state.difficulty, new_level)
    commands.append(Reschedule(state.speed))
    commands.append(LEVEL_UP_TONE)


TICK_STAGES = (
    move_entities,
    spawn_entities,
    resolve_collections,
    resolve_collision,
    update_progression,
)


def tick(state: SimulationState, rng: RandomSource) -> list:
    """Advance one tick. A no-op outside Playing."""
    commands: list = []
    for stage in TICK_STAGES:
        if state.mode is not Mode.PLAYING:
            break  # game over short-circuits the rest of the tick
        stage(state, rng, commands)
    return commands
