"""Tkinter-based graphical client for classic Tic-Tac-Toe."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

import tkinter as tk
from tkinter import ttk

from .ai import Difficulty
from .config import AppConfig, load_config
from .controller import GameController, Screen
from .game import EMPTY
from .logging_setup import setup_logging
from .storage import GameStorage

logger = logging.getLogger(__name__)

LIGHT_THEME: Dict[str, str] = {
    "bg-menu": "#eef2f7",
    "bg-red": "#fde8e8",
    "bg-blue": "#e6effd",
    "bg-gray": "#ececec",
    "board": "#ffffff",
    "grid": "#444444",
    "text": "#1f2933",
}
DARK_THEME: Dict[str, str] = {
    "bg-menu": "#1b1f27",
    "bg-red": "#3a1f24",
    "bg-blue": "#1c2a40",
    "bg-gray": "#2a2a2a",
    "board": "#262b35",
    "grid": "#9aa5b1",
    "text": "#f5f7fa",
}
RED = "#ef4444"
BLUE = "#3b82f6"
HIGHLIGHT = "#f1a208"

DIFFICULTY_OPTIONS = (
    (Difficulty.EASY, "Random moves"),
    (Difficulty.MEDIUM, "Mixed strategy"),
    (Difficulty.HARD, "Unbeatable"),
)


class TicTacToeApp:
    BOARD_SIZE = 360
    PADDING = 20
    CELL_SIZE = BOARD_SIZE / 3

    def __init__(self, config: AppConfig) -> None:
        self.root = tk.Tk()
        self.root.title("Tic Tac Toe")
        self.root.resizable(False, False)

        storage = GameStorage.open(config.storage.path)
        self.controller = GameController(config, storage, scheduler=self.root)
        self.controller.on_change(self.refresh)

        self.status_var = tk.StringVar()
        self.score_var = tk.StringVar()
        self.sound_var = tk.StringVar()
        self.dark_var = tk.StringVar()
        self._last_board: List[str] = list(self.controller.board)

        self.container = tk.Frame(self.root, padx=16, pady=16)
        self.container.pack(fill=tk.BOTH, expand=True)
        self.frames: Dict[Screen, tk.Frame] = {
            Screen.MENU: self._build_menu(),
            Screen.DIFFICULTY: self._build_difficulty(),
            Screen.SETTINGS: self._build_settings(),
        }
        self.game_frame = self._build_game()
        self.frames[Screen.FRIEND] = self.game_frame
        self.frames[Screen.BOT] = self.game_frame
        self._shown: Optional[tk.Frame] = None

        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.refresh()

    # ------------------------------------------------------------------
    def _build_menu(self) -> tk.Frame:
        frame = tk.Frame(self.container)
        tk.Label(frame, text="Tic Tac Toe", font=("Helvetica", 28, "bold")).pack(pady=(10, 20))
        ttk.Button(frame, text="Play with Friend", command=self.controller.start_friend_game).pack(
            fill=tk.X, pady=4
        )
        ttk.Button(frame, text="Play with Bot", command=self.controller.open_difficulty).pack(
            fill=tk.X, pady=4
        )
        ttk.Button(frame, text="Settings", command=self.controller.open_settings).pack(fill=tk.X, pady=(16, 4))
        return frame

    def _build_difficulty(self) -> tk.Frame:
        frame = tk.Frame(self.container)
        tk.Label(frame, text="Choose Difficulty", font=("Helvetica", 20, "bold")).pack(pady=(10, 16))
        for level, description in DIFFICULTY_OPTIONS:
            ttk.Button(
                frame,
                text=f"{level.label} - {description}",
                command=lambda level=level: self.controller.start_bot_game(level),
            ).pack(fill=tk.X, pady=4)
        ttk.Button(frame, text="Back", command=self.controller.open_menu).pack(fill=tk.X, pady=(16, 4))
        return frame

    def _build_settings(self) -> tk.Frame:
        frame = tk.Frame(self.container)
        tk.Label(frame, text="Settings", font=("Helvetica", 20, "bold")).pack(pady=(10, 16))
        ttk.Button(frame, textvariable=self.sound_var, command=self.controller.toggle_sound).pack(
            fill=tk.X, pady=4
        )
        ttk.Button(frame, textvariable=self.dark_var, command=self.controller.toggle_dark_mode).pack(
            fill=tk.X, pady=4
        )
        ttk.Button(frame, text="Back", command=self.controller.open_menu).pack(fill=tk.X, pady=(16, 4))
        return frame

    def _build_game(self) -> tk.Frame:
        frame = tk.Frame(self.container)
        top = tk.Frame(frame)
        top.pack(side=tk.TOP, fill=tk.X)
        tk.Label(top, textvariable=self.score_var, font=("Helvetica", 14, "bold")).pack(side=tk.LEFT)
        tk.Label(top, textvariable=self.status_var, font=("Helvetica", 12)).pack(side=tk.RIGHT)

        canvas_size = self.BOARD_SIZE + 2 * self.PADDING
        self.canvas = tk.Canvas(frame, width=canvas_size, height=canvas_size, highlightthickness=0)
        self.canvas.pack(pady=10)
        self.canvas.bind("<Button-1>", self.on_click)

        self.bottom = tk.Frame(frame)
        self.bottom.pack(side=tk.BOTTOM, fill=tk.X)

        self.hold_button = ttk.Button(self.bottom, text="Home (hold)")
        self.hold_button.bind("<ButtonPress-1>", lambda _e: self.controller.hold_start())
        self.hold_button.bind("<ButtonRelease-1>", lambda _e: self.controller.hold_end())
        self.hold_button.bind("<Leave>", lambda _e: self._release_hold())
        self.hold_progress = ttk.Progressbar(self.bottom, maximum=100, length=160)

        self.result_frame = tk.Frame(frame)
        ttk.Button(self.result_frame, text="Play Again", command=self.controller.reset_game).pack(
            side=tk.LEFT, padx=6
        )
        ttk.Button(self.result_frame, text="Return to Home", command=self.controller.back_to_menu).pack(
            side=tk.LEFT, padx=6
        )
        return frame

    # ------------------------------------------------------------------
    def _release_hold(self) -> None:
        if self.controller.is_holding:
            self.controller.hold_end()

    def on_click(self, event: tk.Event) -> None:
        index = self._point_to_cell(event.x, event.y)
        if index is None:
            return
        self.controller.handle_click(index)

    def _point_to_cell(self, x: float, y: float) -> Optional[int]:
        rel_x = x - self.PADDING
        rel_y = y - self.PADDING
        if rel_x < 0 or rel_y < 0 or rel_x >= self.BOARD_SIZE or rel_y >= self.BOARD_SIZE:
            return None
        col = int(rel_x // self.CELL_SIZE)
        row = int(rel_y // self.CELL_SIZE)
        return row * 3 + col

    def _cell_bbox(self, index: int) -> tuple[float, float, float, float]:
        row, col = divmod(index, 3)
        x0 = self.PADDING + col * self.CELL_SIZE
        y0 = self.PADDING + row * self.CELL_SIZE
        return x0, y0, x0 + self.CELL_SIZE, y0 + self.CELL_SIZE

    @property
    def theme(self) -> Dict[str, str]:
        return DARK_THEME if self.controller.settings.dark_mode else LIGHT_THEME

    # ------------------------------------------------------------------
    def refresh(self) -> None:
        controller = self.controller
        frame = self.frames[controller.screen]
        if frame is not self._shown:
            if self._shown is not None:
                self._shown.pack_forget()
            frame.pack(fill=tk.BOTH, expand=True)
            self._shown = frame

        background = self.theme[controller.background_class()]
        for widget in (self.root, self.container, *self.frames.values()):
            widget.configure(background=background)

        self.sound_var.set(f"Sound: {'on' if controller.settings.sound else 'off'}")
        self.dark_var.set(f"Dark Mode: {'on' if controller.settings.dark_mode else 'off'}")
        self.score_var.set(f"X {controller.scores.red}  :  {controller.scores.blue} O")
        if controller.show_turn_indicator or controller.bot_thinking or controller.result.terminal:
            self.status_var.set(controller.status_text())
        else:
            self.status_var.set("")

        if controller.board != self._last_board:
            if controller.settings.sound and any(cell != EMPTY for cell in controller.board):
                self.root.bell()
            self._last_board = list(controller.board)

        if controller.screen.in_game:
            self._refresh_game_controls()
            self.draw_board()

    def _refresh_game_controls(self) -> None:
        controller = self.controller
        if controller.winner is not None:
            self.hold_button.pack_forget()
            self.hold_progress.pack_forget()
            self.result_frame.pack(side=tk.BOTTOM, pady=8)
        else:
            self.result_frame.pack_forget()
            self.hold_button.pack(side=tk.LEFT)
            if controller.is_holding:
                self.hold_progress.pack(side=tk.LEFT, padx=8)
                self.hold_progress["value"] = controller.hold_progress
            else:
                self.hold_progress.pack_forget()

    def draw_board(self) -> None:
        controller = self.controller
        theme = self.theme
        self.canvas.delete("all")
        self.canvas.configure(background=theme[controller.background_class()])
        margin = self.PADDING
        size = self.BOARD_SIZE
        cell = self.CELL_SIZE

        self.canvas.create_rectangle(margin, margin, margin + size, margin + size, fill=theme["board"], outline="")

        if controller.ai_move_index is not None:
            x0, y0, x1, y1 = self._cell_bbox(controller.ai_move_index)
            self.canvas.create_rectangle(x0 + 2, y0 + 2, x1 - 2, y1 - 2, outline=HIGHLIGHT, width=3)

        for index, value in enumerate(controller.board):
            x0, y0, x1, y1 = self._cell_bbox(index)
            cx = (x0 + x1) / 2
            cy = (y0 + y1) / 2
            if value == "X":
                offset = cell * 0.28
                self.canvas.create_line(cx - offset, cy - offset, cx + offset, cy + offset, width=6, fill=RED)
                self.canvas.create_line(cx - offset, cy + offset, cx + offset, cy - offset, width=6, fill=RED)
            elif value == "O":
                radius = cell * 0.3
                self.canvas.create_oval(cx - radius, cy - radius, cx + radius, cy + radius, width=6, outline=BLUE)

        for i in range(1, 3):
            start = margin + i * cell
            self.canvas.create_line(margin, start, margin + size, start, width=3, fill=theme["grid"])
            self.canvas.create_line(start, margin, start, margin + size, width=3, fill=theme["grid"])

        line = controller.game.winning_line()
        if line is not None:
            ax0, ay0, ax1, ay1 = self._cell_bbox(line[0])
            bx0, by0, bx1, by1 = self._cell_bbox(line[2])
            color = RED if controller.winner == "X" else BLUE
            self.canvas.create_line(
                (ax0 + ax1) / 2,
                (ay0 + ay1) / 2,
                (bx0 + bx1) / 2,
                (by0 + by1) / 2,
                width=8,
                fill=color,
                capstyle=tk.ROUND,
            )

    # ------------------------------------------------------------------
    def close(self) -> None:
        self.controller.shutdown()
        self.root.destroy()

    def run(self) -> None:
        self.root.mainloop()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play classic Tic-Tac-Toe against a friend or a bot")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML configuration file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config.logging.level, config.logging.file)
    logger.info("Using storage file %s", config.storage.path)
    app = TicTacToeApp(config)
    app.run()


if __name__ == "__main__":
    main()
