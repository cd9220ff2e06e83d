# audio_manager.py - Audio and Haptic Feedback
"""
Plays the game's beeps using pygame.mixer and rumbles attached controllers.
Every cue is fire-and-forget: nothing here blocks or reports failure upward.
"""

from array import array

import pygame  # Audio library
from loguru import logger

SAMPLE_RATE = 44100
MASTER_GAIN = 0.3  # square waves are harsh at full scale


class AudioManager:
    """Synthesizes square-wave tones and forwards vibration to gamepads."""

    def __init__(self) -> None:
        """Initialize audio and joystick subsystems."""
        self._tones: dict[tuple[int, int, float], pygame.mixer.Sound] = {}  # Synth cache
        self.available = False

        # 44.1kHz, 16-bit, stereo, small buffer for short beeps
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=2, buffer=512)
            self.available = pygame.mixer.get_init() is not None
        except pygame.error as e:
            logger.debug(f"Audio unavailable: {e}")

        try:
            pygame.joystick.init()
        except pygame.error as e:
            logger.debug(f"Joystick support unavailable: {e}")

    def _synth(self, freq: int, ms: int, volume: float):
        """Build (and cache) a square wave Sound for this cue."""
        key = (freq, ms, volume)
        if key in self._tones:
            return self._tones[key]

        rate, _size, channels = pygame.mixer.get_init()
        n_samples = rate * ms // 1000
        half_period = max(1, rate // (2 * max(freq, 1)))  # samples per half wave
        amplitude = int(32767 * MASTER_GAIN * min(max(volume, 0.0), 1.0))

        samples = array("h")
        for i in range(n_samples):
            value = amplitude if (i // half_period) % 2 == 0 else -amplitude
            samples.extend([value] * channels)  # Same signal on every channel

        sound = pygame.mixer.Sound(buffer=samples.tobytes())
        self._tones[key] = sound
        return sound

    # --------- Sound Effects --------- #
    def play_tone(self, freq: float, volume: float, ms: int) -> None:
        """Play a beep without waiting for it to finish."""
        if not self.available:
            return
        try:
            self._synth(int(freq), int(ms), volume).play()  # Non-blocking playback
        except (pygame.error, TypeError) as e:  # TypeError: mixer shut down underneath us
            logger.debug(f"Tone {freq}Hz/{ms}ms dropped: {e}")

    # --------- Haptics --------- #
    def vibrate(self, ms: int) -> None:
        """Rumble every connected controller for ms milliseconds."""
        try:
            for idx in range(pygame.joystick.get_count()):
                pygame.joystick.Joystick(idx).rumble(0.5, 1.0, ms)
        except pygame.error as e:
            logger.debug(f"Rumble dropped: {e}")

    def close(self) -> None:
        """Release audio resources. Later cues are dropped."""
        self.available = False
        self._tones.clear()
        try:
            pygame.mixer.quit()  # Stop pygame audio
            pygame.joystick.quit()
        except pygame.error as e:
            logger.debug(f"Audio shutdown: {e}")
