# game.py - Desktop Host (tkinter)
"""
Tkinter front end: turns key presses into input events, pumps the event
queue from the Tk main loop and draws the latest simulation snapshot.
The canvas never mutates game state; it only reads snapshots.
"""

import tkinter as tk

from PIL import Image, ImageTk

from config import (
    BACKGROUND_IMAGE, CAR_H, CAR_W, DASH_LEN, DASH_TOTAL, DAY_COLORS, LANE_COUNT, LANE_WIDTH,
    NIGHT_COLORS, PLAYER_Y, POLL_INTERVAL_MS, ROAD_LEFT, ROAD_RIGHT, SCALE, SCREEN_H, SCREEN_W,
    WINDOW_HEIGHT, WINDOW_WIDTH, asset_path,
)
from engine import MENU_DIFFICULTY, MENU_NIGHT, MENU_SOUND, MENU_START, RaceEngine
from entities import Mode, ObstacleKind, PowerUpKind, car_left
from events import EventQueue, InputKey, InputType, TickTimer
from simulation import Snapshot

# Tk keysym -> logical input
KEYMAP = {
    "Up": InputKey.UP,
    "Down": InputKey.DOWN,
    "Left": InputKey.LEFT,
    "Right": InputKey.RIGHT,
    "Return": InputKey.OK,
    "space": InputKey.OK,
    "Escape": InputKey.BACK,
    "BackSpace": InputKey.BACK,
}

# Sprite layouts as (dx, dy, w, h) boxes relative to the sprite origin
MOTO_BOXES = [(4, 0, 2, 10), (3, 1, 4, 2), (3, 7, 4, 2)]
SEDAN_BOXES = [(1, 0, 8, 12), (0, 2, 1, 3), (9, 2, 1, 3), (0, 9, 1, 3), (9, 9, 1, 3)]
TRUCK_BOXES = [(0, 0, 20, 16), (-1, 2, 2, 3), (19, 2, 2, 3), (-1, 11, 2, 3), (19, 11, 2, 3)]
PLAYER_BOXES = [(3, 0, 4, 3), (2, 7, 6, 4), (1, 11, 8, 2), (0, 2, 2, 3), (8, 2, 2, 3),
                (0, 8, 2, 3), (8, 8, 2, 3)]

POWERUP_LABELS = {PowerUpKind.SHIELD: "S", PowerUpKind.MAGNET: "M", PowerUpKind.FUEL: "+"}


class RaceGame(tk.Canvas):
    """Main window canvas - draws snapshots and feeds input to the engine."""

    def __init__(self, master: tk.Tk, audio=None, **kwargs) -> None:
        """Initialize canvas, event plumbing and the engine."""
        super().__init__(master, width=WINDOW_WIDTH, height=WINDOW_HEIGHT,
                         bg="white", highlightthickness=0, **kwargs)
        self.pack(fill="both", expand=True)

        # Event plumbing: timer thread + key handler -> queue -> engine
        self.events = EventQueue()
        self.timer = TickTimer(self.events)
        self.engine = RaceEngine(self.timer, audio=audio, on_update=self._on_snapshot)

        self._latest: Snapshot | None = None  # Newest snapshot not yet drawn
        self._held: set[str] = set()  # Keys currently down (press vs repeat)
        self.on_quit = master.destroy

        self._load_background()

        # Input binding - keyboard
        master.bind("<KeyPress>", self._on_key_down)
        master.bind("<KeyRelease>", self._on_key_up)

        self.render(self.engine.snapshot())
        self.after(POLL_INTERVAL_MS, self._pump)

    # ------------------------------------------------------------------ #
    # BACKGROUND IMAGE
    # ------------------------------------------------------------------ #
    def _load_background(self) -> None:
        """Load the optional road background if the asset is present."""
        try:
            img = Image.open(asset_path(BACKGROUND_IMAGE))
            img = img.resize((WINDOW_WIDTH, WINDOW_HEIGHT), Image.LANCZOS)  # High-quality resize
            self.bg_image = ImageTk.PhotoImage(img)
        except OSError:
            self.bg_image = None  # Plain background instead

    # ------------------------------------------------------------------ #
    # INPUT & EVENT PUMP
    # ------------------------------------------------------------------ #
    def _on_key_down(self, event) -> None:
        key = KEYMAP.get(event.keysym)
        if key is None:
            return
        kind = InputType.REPEAT if event.keysym in self._held else InputType.PRESS
        self._held.add(event.keysym)
        # Producer and consumer share this thread, so never wait for room
        self.events.put_input(key, kind, block=False)

    def _on_key_up(self, event) -> None:
        key = KEYMAP.get(event.keysym)
        if key is None:
            return
        self._held.discard(event.keysym)
        self.events.put_input(key, InputType.RELEASE, block=False)

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        self._latest = snapshot

    def _pump(self) -> None:
        """Consume queued events, then draw once if anything changed."""
        self.engine.process_pending(self.events)
        if self._latest is not None:
            self.render(self._latest)
            self._latest = None
        if not self.engine.running:
            self.timer.stop()
            self.on_quit()
            return
        self.after(POLL_INTERVAL_MS, self._pump)

    # ------------------------------------------------------------------ #
    # DRAWING PRIMITIVES (logical units -> pixels)
    # ------------------------------------------------------------------ #
    def _box(self, x: float, y: float, w: float, h: float, fill: str) -> None:
        self.create_rectangle(x * SCALE, y * SCALE, (x + w) * SCALE, (y + h) * SCALE,
                              fill=fill, outline="", tags="frame")

    def _frame(self, x: float, y: float, w: float, h: float, color: str) -> None:
        self.create_rectangle(x * SCALE, y * SCALE, (x + w) * SCALE, (y + h) * SCALE,
                              fill="", outline=color, width=SCALE // 2 or 1, tags="frame")

    def _text(self, x: float, y: float, text: str, color: str, size: int = 12,
              anchor: str = "center", bold: bool = False) -> None:
        font = ("Courier", size, "bold") if bold else ("Courier", size)
        self.create_text(x * SCALE, y * SCALE, text=text, fill=color, font=font,
                         anchor=anchor, tags="frame")

    def _sprite(self, boxes, x: int, y: int, color: str) -> None:
        for dx, dy, w, h in boxes:
            self._box(x + dx, y + dy, w, h, color)

    # ------------------------------------------------------------------ #
    # RENDERING
    # ------------------------------------------------------------------ #
    def render(self, snap: Snapshot) -> None:
        """Redraw the whole frame from a snapshot."""
        self.delete("frame")
        night = snap.night_mode and snap.mode is not Mode.MENU
        fg, bg = NIGHT_COLORS if night else DAY_COLORS
        self.configure(bg=bg)

        if snap.mode is Mode.MENU:
            self._draw_menu(snap, fg)
            return

        if self.bg_image is not None:
            self.create_image(0, 0, image=self.bg_image, anchor="nw", tags="frame")

        if snap.mode is Mode.PLAYING:
            for sc in snap.scenery:
                if -10 < sc.y < SCREEN_H:
                    self._draw_scenery(sc, fg)
        self._draw_road(snap, fg)

        if snap.mode is Mode.PLAYING:
            for coin in snap.coins:
                self.create_oval((car_left(coin.lane) + 1) * SCALE, (coin.y + 1) * SCALE,
                                 (car_left(coin.lane) + 7) * SCALE, (coin.y + 7) * SCALE,
                                 outline=fg, width=2, tags="frame")
            for pw in snap.powerups:
                x = car_left(pw.lane)
                self._frame(x + 1, pw.y, 7, 8, fg)
                self._text(x + 4.5, pw.y + 4, POWERUP_LABELS[pw.kind], fg, size=10, bold=True)

        for obs in snap.obstacles:
            self._draw_obstacle(obs, fg, bg)

        # Player blinks while invincible
        blink_off = snap.mode is Mode.PLAYING and snap.invincible_ticks > 0 and snap.tick_count % 4 >= 2
        if not blink_off:
            x = car_left(snap.player_lane)
            self._sprite(PLAYER_BOXES, x, PLAYER_Y, fg)
            self._frame(x + 2, PLAYER_Y + 3, 6, 4, fg)
            if snap.mode is Mode.PLAYING and snap.shield_ticks > 0:
                self._frame(x - 2, PLAYER_Y - 2, CAR_W + 4, CAR_H + 4, fg)  # Shield aura

        for p in snap.particles:
            if 0 <= p.x < SCREEN_W and 0 <= p.y < SCREEN_H:
                self._box(p.x, p.y, 2 if p.life > 4 else 1, 1, fg)

        self._draw_hud(snap, fg, bg)
        if snap.mode is Mode.GAME_OVER:
            self._draw_game_over(snap, fg, bg)

    def _draw_road(self, snap: Snapshot, fg: str) -> None:
        self._box(ROAD_LEFT - 1, 0, 2, SCREEN_H, fg)
        self._box(ROAD_RIGHT, 0, 2, SCREEN_H, fg)
        for divider in range(1, LANE_COUNT):
            x = ROAD_LEFT + divider * LANE_WIDTH
            dy = -DASH_TOTAL + snap.road_scroll
            while dy < SCREEN_H:
                top, bottom = max(dy, 0), min(dy + DASH_LEN, SCREEN_H)
                if top < bottom:
                    self._box(x, top, 1, bottom - top, fg)
                dy += DASH_TOTAL

    def _draw_scenery(self, sc, fg: str) -> None:
        x = 1 if sc.side == 0 else ROAD_RIGHT + 3
        if sc.kind == 0:  # Tree
            self._box(x + 2, sc.y, 1, 1, fg)
            self._box(x + 1, sc.y + 1, 3, 1, fg)
            self._box(x, sc.y + 2, 5, 1, fg)
            self._box(x + 2, sc.y + 3, 1, 2, fg)
        else:  # Pole
            self._box(x + 2, sc.y, 1, 5, fg)
            self._box(x, sc.y, 5, 1, fg)

    def _draw_obstacle(self, obs, fg: str, bg: str) -> None:
        x = car_left(obs.lane)
        if obs.kind is ObstacleKind.MOTO:
            self._sprite(MOTO_BOXES, x, obs.y, fg)
        elif obs.kind is ObstacleKind.SEDAN:
            self._sprite(SEDAN_BOXES, x, obs.y, fg)
            self._box(x + 2, obs.y + 2, 6, 3, bg)  # Window
        else:
            # Boss truck centered between two lanes
            self._sprite(TRUCK_BOXES, x - 5, obs.y, fg)
            self._box(x - 2, obs.y + 2, 14, 6, bg)  # Cargo

    def _draw_hud(self, snap: Snapshot, fg: str, bg: str) -> None:
        label = f"S:{snap.score} L:{snap.level + 1}"
        self._box(12, 0, 40, 11, bg)
        self._frame(12, 0, 40, 11, fg)
        self._text(SCREEN_W / 2, 5.5, label, fg, size=10)

        # Lives (hearts)
        for i in range(snap.lives):
            hy = SCREEN_H - 8 - i * 7
            self._text(3, hy + 2, "♥", fg, size=11)

        if snap.combo_display > 0 and snap.combo > 1:
            self._text(SCREEN_W - 2, 14, f"x{snap.combo}", fg, size=10, anchor="se", bold=True)
        if snap.shield_ticks > 0:
            self._text(ROAD_RIGHT + 3, 20, "S", fg, size=10, anchor="sw", bold=True)
        if snap.magnet_ticks > 0:
            self._text(ROAD_RIGHT + 3, 30, "M", fg, size=10, anchor="sw", bold=True)

    def _draw_menu(self, snap: Snapshot, fg: str) -> None:
        self._text(SCREEN_W / 2, 10, "RACE", fg, size=20, bold=True)
        self._text(SCREEN_W / 2, 23, "GAME", fg, size=20, bold=True)
        self._text(SCREEN_W / 2, 36, f"Best: {snap.high_score}", fg, size=11)

        labels = {
            MENU_START: "START",
            MENU_SOUND: f"SOUND:{'ON' if snap.sound_on else 'OFF'}",
            MENU_NIGHT: f"NIGHT:{'ON' if snap.night_mode else 'OFF'}",
            MENU_DIFFICULTY: snap.difficulty.upper(),
        }
        for idx, text in labels.items():
            if idx == snap.menu_index:
                text = f"> {text} <"
            self._text(SCREEN_W / 2, 48 + idx * 11, text, fg, size=11, bold=idx == snap.menu_index)

        self._text(SCREEN_W / 2, 98, "OK:Select", fg, size=10)
        self._sprite(PLAYER_BOXES, SCREEN_W // 2 - 5, 112, fg)

    def _draw_game_over(self, snap: Snapshot, fg: str, bg: str) -> None:
        self._box(4, 28, 56, 70, bg)
        self._frame(4, 28, 56, 70, fg)
        self._frame(5, 29, 54, 68, fg)
        self._text(SCREEN_W / 2, 38, "GAME", fg, size=18, bold=True)
        self._text(SCREEN_W / 2, 51, "OVER", fg, size=18, bold=True)
        self._text(SCREEN_W / 2, 64, f"Score: {snap.score}", fg, size=10)

        if snap.score >= snap.high_score and snap.score > 0:
            self._text(SCREEN_W / 2, 74, "NEW BEST!", fg, size=10, bold=True)
        else:
            self._text(SCREEN_W / 2, 74, f"Best: {snap.high_score}", fg, size=10)

        self._text(SCREEN_W / 2, 84, f"Combo: x{max(snap.combo, 1)}", fg, size=10)
        self._text(SCREEN_W / 2, 92, "OK: Menu", fg, size=10)
