# entities.py - Entity Types and Slot Pools
"""
Value-typed entities, fixed-capacity pools and the per-kind geometry tables.
Entities are identified only by their pool slot; a slot changes meaning
whenever its liveness toggles.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterator, NamedTuple, TypeVar

from config import CAR_W, LANE_WIDTH, ROAD_LEFT


class Mode(Enum):
    """Top-level game mode."""
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class ObstacleKind(Enum):
    MOTO = "moto"  # narrow and fast
    SEDAN = "sedan"  # baseline
    TRUCK = "truck"  # boss, spans two lanes


class PowerUpKind(Enum):
    SHIELD = "shield"
    MAGNET = "magnet"
    FUEL = "fuel"


POWERUP_KINDS = [PowerUpKind.SHIELD, PowerUpKind.MAGNET, PowerUpKind.FUEL]


class Box(NamedTuple):
    """Axis-aligned box in playfield units."""
    x: int
    y: int
    w: int
    h: int

    def overlaps(self, other: "Box") -> bool:
        """Strict intersection on both axes (touching edges do not count)."""
        return (self.x < other.x + other.w and self.x + self.w > other.x and
                self.y < other.y + other.h and self.y + self.h > other.y)


class ObstacleGeometry(NamedTuple):
    x_offset: int  # relative to car_left(lane)
    width: int
    height: int  # hitbox height
    body_height: int  # sprite height, used for the off-screen test
    speed_delta: int  # added to the base scroll speed


OBSTACLE_GEOMETRY = {
    ObstacleKind.MOTO: ObstacleGeometry(x_offset=2, width=6, height=10, body_height=12, speed_delta=1),
    ObstacleKind.SEDAN: ObstacleGeometry(x_offset=0, width=CAR_W, height=12, body_height=12, speed_delta=0),
    ObstacleKind.TRUCK: ObstacleGeometry(x_offset=-5, width=20, height=16, body_height=16, speed_delta=-1),
}

PICKUP_SIZE = 8  # coins and power-ups share an 8x8 hitbox


def lane_center(lane: int) -> int:
    """Horizontal centre of a lane."""
    return ROAD_LEFT + LANE_WIDTH // 2 + lane * LANE_WIDTH


def car_left(lane: int) -> int:
    """Left edge of a car-sized sprite drawn in this lane."""
    return lane_center(lane) - CAR_W // 2


# ------------------------------------------------------------------ #
# ENTITIES
# ------------------------------------------------------------------ #
@dataclass
class Obstacle:
    lane: int = 0
    y: int = 0
    alive: bool = False
    kind: ObstacleKind = ObstacleKind.SEDAN

    def hitbox(self) -> Box:
        geo = OBSTACLE_GEOMETRY[self.kind]
        return Box(car_left(self.lane) + geo.x_offset, self.y, geo.width, geo.height)

    def retire(self) -> None:
        self.alive = False


@dataclass
class Coin:
    lane: int = 0
    y: int = 0
    alive: bool = False

    def hitbox(self) -> Box:
        return Box(car_left(self.lane), self.y, PICKUP_SIZE, PICKUP_SIZE)

    def retire(self) -> None:
        self.alive = False


@dataclass
class PowerUp:
    lane: int = 0
    y: int = 0
    alive: bool = False
    kind: PowerUpKind = PowerUpKind.SHIELD

    def hitbox(self) -> Box:
        return Box(car_left(self.lane), self.y, PICKUP_SIZE, PICKUP_SIZE)

    def retire(self) -> None:
        self.alive = False


@dataclass
class Scenery:
    """Roadside decoration. Never dies, only gets recycled above the screen."""
    y: int = 0
    side: int = 0  # 0 = left verge, 1 = right verge
    kind: int = 0  # 0 = tree, 1 = pole


@dataclass
class Particle:
    x: int = 0
    y: int = 0
    dx: int = 0
    dy: int = 0
    life: int = 0

    @property
    def alive(self) -> bool:
        return self.life > 0

    @alive.setter
    def alive(self, value: bool) -> None:
        if not value:
            self.life = 0
        elif self.life <= 0:
            self.life = 1  # shortest visible lifetime

    def retire(self) -> None:
        self.life = 0


# ------------------------------------------------------------------ #
# POOLS
# ------------------------------------------------------------------ #
T = TypeVar("T")


class Pool(Generic[T]):
    """Fixed-capacity slot array (Object Pool pattern).

    Allocation is first-fit: the lowest-index dead slot is handed out.
    A full pool returns None and the caller simply skips the spawn.
    """

    def __init__(self, factory: Callable[[], T], capacity: int) -> None:
        self.slots: list[T] = [factory() for _ in range(capacity)]

    @property
    def capacity(self) -> int:
        return len(self.slots)

    def allocate(self) -> T | None:
        """Mark the first free slot live and return it, or None when full."""
        for slot in self.slots:
            if not slot.alive:
                slot.alive = True
                return slot
        return None

    def live(self) -> Iterator[T]:
        """Live slots in slot order."""
        return (slot for slot in self.slots if slot.alive)

    def live_count(self) -> int:
        return sum(1 for _ in self.live())

    def clear(self) -> None:
        for slot in self.slots:
            slot.retire()

    def __iter__(self) -> Iterator[T]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)
