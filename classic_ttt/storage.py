"""JSON-file key-value store for scores, settings and the last board.

The keys and value shapes match what the browser build kept in local storage,
so a saved board uses ``null`` for empty squares.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .game import BOARD_CELLS, MARKS, TicTacToe

logger = logging.getLogger(__name__)

LS_SCORES = "ttt_scores"
LS_SETTINGS = "ttt_settings"
LS_BOARD = "ttt_board"
LS_IS_X_NEXT = "ttt_is_x_next"


@dataclass
class Scores:
    red: int = 0
    blue: int = 0

    def record_win(self, mark: str) -> None:
        if mark == "X":
            self.red += 1
        elif mark == "O":
            self.blue += 1
        else:
            raise ValueError("mark must be 'X' or 'O'")

    def to_dict(self) -> Dict[str, int]:
        return {"red": self.red, "blue": self.blue}


@dataclass
class Settings:
    sound: bool = True
    dark_mode: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"sound": self.sound, "darkMode": self.dark_mode}


class KeyValueStore:
    """A tiny persistent mapping backed by a single JSON file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: root is not an object", self.path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def _flush(self) -> None:
        directory = self.path.parent
        if not directory.exists():
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh)
            os.replace(tmp_path, self.path)
        except OSError:
            logger.error("Failed to write storage file %s", self.path, exc_info=True)
            raise


class GameStorage:
    """Typed accessors over :class:`KeyValueStore` with fallback defaults."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @classmethod
    def open(cls, path: Union[str, Path]) -> "GameStorage":
        return cls(KeyValueStore(path))

    def load_scores(self) -> Scores:
        raw = self.store.get(LS_SCORES)
        if raw is None:
            return Scores()
        try:
            return Scores(red=int(raw["red"]), blue=int(raw["blue"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Malformed %s value %r, using defaults", LS_SCORES, raw)
            return Scores()

    def save_scores(self, scores: Scores) -> None:
        self.store.set(LS_SCORES, scores.to_dict())

    def load_settings(self) -> Settings:
        raw = self.store.get(LS_SETTINGS)
        if raw is None:
            return Settings()
        if not isinstance(raw, dict):
            logger.warning("Malformed %s value %r, using defaults", LS_SETTINGS, raw)
            return Settings()
        return Settings(sound=bool(raw.get("sound", True)), dark_mode=bool(raw.get("darkMode", False)))

    def save_settings(self, settings: Settings) -> None:
        self.store.set(LS_SETTINGS, settings.to_dict())

    def load_game(self) -> TicTacToe:
        raw = self.store.get(LS_BOARD)
        if raw is None:
            return TicTacToe()
        if not isinstance(raw, list) or len(raw) != BOARD_CELLS:
            logger.warning("Malformed %s value %r, using an empty board", LS_BOARD, raw)
            return TicTacToe()
        for cell in raw:
            if cell is not None and cell not in MARKS:
                logger.warning("Malformed %s cell %r, using an empty board", LS_BOARD, cell)
                return TicTacToe()
        return TicTacToe.from_cells(raw)

    def save_game(self, game: TicTacToe) -> None:
        self.store.set(LS_BOARD, game.to_cells())

    def load_x_next(self) -> bool:
        raw: Optional[Any] = self.store.get(LS_IS_X_NEXT)
        if isinstance(raw, bool):
            return raw
        if raw is not None:
            logger.warning("Malformed %s value %r, defaulting to X", LS_IS_X_NEXT, raw)
        return True

    def save_x_next(self, x_next: bool) -> None:
        self.store.set(LS_IS_X_NEXT, bool(x_next))


__all__ = [
    "GameStorage",
    "KeyValueStore",
    "LS_BOARD",
    "LS_IS_X_NEXT",
    "LS_SCORES",
    "LS_SETTINGS",
    "Scores",
    "Settings",
]
