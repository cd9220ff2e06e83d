# main.py - Application Entry Point
"""
Main entry point for Race Game.
Initializes logging, audio and the window, then starts the Tk event loop.
"""

import sys
import tkinter as tk  # GUI framework

from loguru import logger

from audio_manager import AudioManager  # Beeps and rumble
from config import LOG_LEVEL, WINDOW_HEIGHT, WINDOW_WIDTH  # Window size constants
from game import RaceGame  # Window canvas + engine


def main() -> None:
    """Create window, initialize game, and start event loop."""
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)

    # Create main window
    root = tk.Tk()
    root.title("Race Game")
    root.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
    root.resizable(False, False)  # Fixed window size

    audio = AudioManager()
    game = RaceGame(root, audio=audio)

    def on_close():
        """Stop the tick thread and release audio before closing."""
        game.timer.stop()
        audio.close()
        root.destroy()  # Close window

    # Quitting from the menu goes through the same cleanup as the close button
    game.on_quit = on_close
    root.protocol("WM_DELETE_WINDOW", on_close)

    # Start the GUI event loop
    root.mainloop()


if __name__ == "__main__":
    main()  # Run application
