# engine.py - Game State Machine and Event Consumer
"""
Owns the simulation state and interprets every event taken off the queue.

Menu -> Playing    (OK on START)
Playing -> Menu    (BACK, run discarded)
Playing -> GameOver (last life lost, decided inside the tick)
GameOver -> Menu   (OK)

Anything else is a no-op. Commands returned by a tick are carried out here,
against the timer, audio and persistence collaborators.
"""

from typing import Callable

from loguru import logger

from config import DIFFICULTY_ORDER, HIGHSCORE_FILE, LANE_COUNT
from entities import Mode
from events import EventQueue, EventType, GameEvent, InputKey, InputType
from highscore import load_high_score, save_high_score
from simulation import (
    LANE_CHANGE_TONE, HaltTimer, PersistHighScore, RandomSource, Reschedule, SimulationState,
    Snapshot, Tone, Vibrate, tick,
)

MENU_START, MENU_SOUND, MENU_NIGHT, MENU_DIFFICULTY = range(4)
MENU_ITEMS = 4


class RaceEngine:
    """Single mutator of the simulation state."""

    def __init__(self, timer, audio=None, rng: RandomSource | None = None,
                 highscore_path: str = HIGHSCORE_FILE,
                 on_update: Callable[[Snapshot], None] | None = None) -> None:
        self.timer = timer  # start(interval_ms) / stop()
        self.audio = audio  # play_tone(freq, volume, ms) / vibrate(ms), optional
        self.rng = rng or RandomSource()
        self.highscore_path = highscore_path
        self.on_update = on_update  # render consumer
        self.running = True  # False once the player quits from a menu screen

        self.state = SimulationState(high_score=load_high_score(highscore_path))
        self._key_handlers = {
            InputKey.UP: self._on_up,
            InputKey.DOWN: self._on_down,
            InputKey.LEFT: self._on_left,
            InputKey.RIGHT: self._on_right,
            InputKey.OK: self._on_ok,
            InputKey.BACK: self._on_back,
        }

    # ------------------------------------------------------------------ #
    # EVENT CONSUMER
    # ------------------------------------------------------------------ #
    def run(self, events: EventQueue) -> None:
        """Blocking consumer loop: one event at a time, in arrival order."""
        while self.running:
            event = events.get()
            if event is not None:
                self.handle(event)
        self.timer.stop()

    def process_pending(self, events: EventQueue) -> int:
        """Drain whatever is queued without waiting (for hosts with their own loop)."""
        handled = 0
        while self.running:
            event = events.get_nowait()
            if event is None:
                break
            self.handle(event)
            handled += 1
        return handled

    def handle(self, event: GameEvent) -> None:
        if event.type is EventType.TICK:
            self.on_tick()
        elif event.type is EventType.KEY:
            self.on_key(event.key, event.kind)
        elif event.type is EventType.QUIT:
            self.running = False
        self._publish()

    def snapshot(self) -> Snapshot:
        return self.state.snapshot()

    def _publish(self) -> None:
        if self.on_update is not None:
            self.on_update(self.state.snapshot())

    # ------------------------------------------------------------------ #
    # TICKS
    # ------------------------------------------------------------------ #
    def on_tick(self) -> None:
        """Ticks outside Playing (e.g. queued before a pause) do nothing."""
        if self.state.mode is not Mode.PLAYING:
            return
        self._execute(tick(self.state, self.rng))
        if self.state.mode is Mode.GAME_OVER:
            logger.debug(f"Game over: score={self.state.score} best={self.state.high_score}")

    def _execute(self, commands: list) -> None:
        """Carry out the side effects a tick asked for, in order."""
        for cmd in commands:
            if isinstance(cmd, Tone):
                self._play(cmd)
            elif isinstance(cmd, Vibrate):
                if self.audio is not None:
                    self.audio.vibrate(cmd.ms)
            elif isinstance(cmd, Reschedule):
                logger.debug(f"Level {self.state.level}: tick interval now {cmd.interval} ms")
                self.timer.start(cmd.interval)
            elif isinstance(cmd, HaltTimer):
                self.timer.stop()
            elif isinstance(cmd, PersistHighScore):
                save_high_score(cmd.score, self.highscore_path)

    def _play(self, tone: Tone) -> None:
        if self.audio is None or not self.state.sound_on:
            return
        self.audio.play_tone(tone.freq, tone.volume, tone.ms)

    # ------------------------------------------------------------------ #
    # TRANSITIONS
    # ------------------------------------------------------------------ #
    def start_run(self) -> None:
        """Menu -> Playing on the selected difficulty."""
        self.state.reset_run(self.rng)
        self.timer.start(self.state.speed)
        logger.debug(f"Run started ({self.state.difficulty}, {self.state.speed} ms)")

    def pause(self) -> None:
        """Playing -> Menu. The run is thrown away; ticks already queued become no-ops."""
        self.timer.stop()
        self.state.mode = Mode.MENU
        logger.debug("Run abandoned, back to menu")

    # ------------------------------------------------------------------ #
    # INPUT
    # ------------------------------------------------------------------ #
    def on_key(self, key: InputKey | None, kind: InputType) -> None:
        if kind is InputType.RELEASE:
            return
        handler = self._key_handlers.get(key)
        if handler is not None:
            handler()

    def _on_up(self) -> None:
        if self.state.mode is Mode.MENU:
            self.state.menu_index = (self.state.menu_index - 1) % MENU_ITEMS

    def _on_down(self) -> None:
        if self.state.mode is Mode.MENU:
            self.state.menu_index = (self.state.menu_index + 1) % MENU_ITEMS

    def _on_left(self) -> None:
        if self.state.mode is Mode.PLAYING and self.state.player_lane > 0:
            self.state.player_lane -= 1
            self._play(LANE_CHANGE_TONE)

    def _on_right(self) -> None:
        if self.state.mode is Mode.PLAYING and self.state.player_lane < LANE_COUNT - 1:
            self.state.player_lane += 1
            self._play(LANE_CHANGE_TONE)

    def _on_ok(self) -> None:
        s = self.state
        if s.mode is Mode.GAME_OVER:
            s.mode = Mode.MENU
        elif s.mode is Mode.MENU:
            if s.menu_index == MENU_START:
                self.start_run()
            elif s.menu_index == MENU_SOUND:
                s.sound_on = not s.sound_on
            elif s.menu_index == MENU_NIGHT:
                s.night_mode = not s.night_mode
            elif s.menu_index == MENU_DIFFICULTY:
                idx = DIFFICULTY_ORDER.index(s.difficulty)
                s.difficulty = DIFFICULTY_ORDER[(idx + 1) % len(DIFFICULTY_ORDER)]

    def _on_back(self) -> None:
        if self.state.mode is Mode.PLAYING:
            self.pause()
        else:
            self.running = False  # quit from menu / game over screen
