# highscore.py - Score Persistence Module
"""
Handles saving and loading of the high score.
The file holds a single unsigned 32-bit little-endian integer, nothing else.
"""

import struct

from loguru import logger

from config import HIGHSCORE_FILE  # Path to score file: "highscore.dat"

_FORMAT = "<I"
_SIZE = struct.calcsize(_FORMAT)
_MAX_SCORE = 0xFFFFFFFF


def load_high_score(path: str = HIGHSCORE_FILE) -> int:
    """
    Load the high score from file.
    Returns:
        int: The saved high score, or 0 if file doesn't exist/is short/unreadable.
    """
    try:
        with open(path, "rb") as f:
            raw = f.read(_SIZE)
    except OSError as e:
        logger.debug(f"High score not loaded from {path}: {e}")
        return 0  # Default if file missing or unreadable
    if len(raw) < _SIZE:
        return 0  # Truncated file
    return struct.unpack(_FORMAT, raw)[0]


def save_high_score(value: int, path: str = HIGHSCORE_FILE) -> bool:
    """
    Save a new high score to file (create or truncate, no backup).
    Args:
        value (int): The score to save (clamped to the uint32 range)
    Returns:
        bool: False when the write failed. The game carries on either way.
    """
    value = min(max(0, int(value)), _MAX_SCORE)
    try:
        with open(path, "wb") as f:
            f.write(struct.pack(_FORMAT, value))
        return True
    except OSError as e:
        logger.debug(f"High score not saved to {path}: {e}")
        return False  # Silent failure - game continues without saving
