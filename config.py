# config.py
import os

# Dossiers de base
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
HIGHSCORE_FILE = os.path.join(BASE_DIR, "highscore.dat")
BACKGROUND_IMAGE = "road_bg.png"

# Logging verbosity for the loguru stderr sink
LOG_LEVEL = os.environ.get("RACE_LOG_LEVEL", "WARNING")

# Logical playfield (all simulation coordinates live in this space)
SCREEN_W = 64
SCREEN_H = 128
ROAD_LEFT = 10
ROAD_RIGHT = 53
ROAD_WIDTH = ROAD_RIGHT - ROAD_LEFT
LANE_COUNT = 3
LANE_WIDTH = ROAD_WIDTH // LANE_COUNT

# Player car (also the player hitbox)
CAR_W = 10
CAR_H = 13
PLAYER_Y = 105

# Pool capacities
MAX_OBS = 5
MAX_COINS = 3
MAX_POWERUPS = 2
MAX_SCENERY = 6
MAX_PARTICLES = 12

INITIAL_LIVES = 3
MAX_LIVES = 5

# Lane marking dashes
DASH_LEN = 8
DASH_GAP = 8
DASH_TOTAL = DASH_LEN + DASH_GAP

# Window = logical playfield scaled up
SCALE = 5
WINDOW_WIDTH = SCREEN_W * SCALE
WINDOW_HEIGHT = SCREEN_H * SCALE

# Event loop
EVENT_QUEUE_SIZE = 8
POLL_INTERVAL_MS = 5  # tkinter host drains the queue this often

# Difficulty of the game (tick interval in ms, its floor, obstacle cadence in ticks)
DIFFICULTIES = {
    "Easy": {"speed": 140, "min_speed": 70, "spawn": 15},
    "Normal": {"speed": 120, "min_speed": 50, "spawn": 12},
    "Hard": {"speed": 90, "min_speed": 35, "spawn": 9},
}
DIFFICULTY_ORDER = ["Easy", "Normal", "Hard"]
DEFAULT_DIFFICULTY = "Normal"

# Day / night palettes (foreground, background)
DAY_COLORS = ("#000000", "#ffffff")
NIGHT_COLORS = ("#ffffff", "#000000")


def asset_path(name: str) -> str:
    """path to the image, ex: road_bg.png."""
    return os.path.join(BASE_DIR, name)
