# events.py - Event Queue and Tick Source
"""
Two producers (the periodic tick timer and the input source) feed one
bounded, ordered queue. A single consumer takes events off it one at a time.
"""

import queue
import threading
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from config import EVENT_QUEUE_SIZE


class EventType(Enum):
    TICK = "tick"
    KEY = "key"
    QUIT = "quit"  # lets a host unblock a waiting consumer


class InputKey(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    OK = "ok"
    BACK = "back"


class InputType(Enum):
    PRESS = "press"
    REPEAT = "repeat"
    RELEASE = "release"


@dataclass(frozen=True)
class GameEvent:
    type: EventType
    key: InputKey | None = None
    kind: InputType = InputType.PRESS


TICK_EVENT = GameEvent(EventType.TICK)


class EventQueue:
    """Thread-safe FIFO shared by every producer and the one consumer."""

    def __init__(self, maxsize: int = EVENT_QUEUE_SIZE) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize)

    def put_tick(self) -> bool:
        """Enqueue a tick without waiting. A full queue drops it."""
        try:
            self._queue.put_nowait(TICK_EVENT)
            return True
        except queue.Full:
            return False

    def put_input(self, key: InputKey, kind: InputType = InputType.PRESS, block: bool = True) -> bool:
        """Enqueue a key event; waits for room unless block is False."""
        try:
            self._queue.put(GameEvent(EventType.KEY, key, kind), block=block)
            return True
        except queue.Full:
            return False

    def put_quit(self) -> None:
        self._queue.put(GameEvent(EventType.QUIT))

    def get(self, timeout: float | None = None) -> GameEvent | None:
        """Blocking dequeue. Returns None only when a timeout expires."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self) -> GameEvent | None:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


class TickTimer:
    """Periodic tick producer running on a daemon thread.

    start() with a new interval restarts the period; the change only affects
    ticks not yet produced. Once stop() returns, no further tick is enqueued.
    """

    def __init__(self, events: EventQueue) -> None:
        self.events = events
        self.interval: int | None = None  # ms, None while stopped
        self._lock = threading.Lock()
        self._stop_flag: threading.Event | None = None

    @property
    def running(self) -> bool:
        return self._stop_flag is not None

    def start(self, interval_ms: int) -> None:
        """Start, or restart with a new period."""
        with self._lock:
            if self._stop_flag is not None:
                self._stop_flag.set()
            stop_flag = threading.Event()
            self._stop_flag = stop_flag
            self.interval = interval_ms
        thread = threading.Thread(target=self._run, args=(interval_ms / 1000.0, stop_flag),
                                  name="tick-timer", daemon=True)
        thread.start()
        logger.debug(f"Tick timer started at {interval_ms} ms")

    def stop(self) -> None:
        with self._lock:
            if self._stop_flag is not None:
                self._stop_flag.set()
            self._stop_flag = None
            self.interval = None

    def _run(self, period: float, stop_flag: threading.Event) -> None:
        while not stop_flag.wait(period):
            with self._lock:
                if stop_flag.is_set():
                    break
                self.events.put_tick()
