"""Classic Tic-Tac-Toe with a minimax bot, local scores and a Tkinter client."""
from .ai import BotEngine, Difficulty, best_move, select_move
from .arena import Arena, ArenaResult, exhaustive_playout
from .config import AppConfig, ConfigError, load_config
from .controller import GameController, Screen
from .game import GameResult, InvalidMoveError, TicTacToe, evaluate
from .storage import GameStorage, KeyValueStore

__all__ = [
    "AppConfig",
    "Arena",
    "ArenaResult",
    "BotEngine",
    "ConfigError",
    "Difficulty",
    "GameController",
    "GameResult",
    "GameStorage",
    "InvalidMoveError",
    "KeyValueStore",
    "Screen",
    "TicTacToe",
    "best_move",
    "evaluate",
    "exhaustive_playout",
    "load_config",
    "select_move",
]
