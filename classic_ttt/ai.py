"""Bot opponents for classic Tic-Tac-Toe.

Three difficulty tiers are exposed through :func:`select_move`:

* ``easy`` picks a uniformly random empty cell.
* ``medium`` plays the optimal move with a fixed probability and a random one
  otherwise.
* ``hard`` runs a full minimax search with alpha-beta pruning and never loses.

The search works on a private copy of the caller's board.  Every hypothetical
placement goes through :func:`_placed`, which restores the cell on every exit
path including pruning cutoffs.
"""
from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from .game import EMPTY, MARKS, GameResult, Player, empty_cells, evaluate, opponent
from .utils import RandomSource, make_rng

logger = logging.getLogger(__name__)

WIN_SCORE = 10
DEFAULT_OPTIMAL_PROBABILITY = 0.7


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(level.value for level in cls)
            raise ValueError(f"unknown difficulty {value!r}; expected one of {names}") from None

    @property
    def label(self) -> str:
        return self.value.capitalize()


@contextmanager
def _placed(board: List[str], index: int, mark: Player) -> Iterator[None]:
    board[index] = mark
    try:
        yield
    finally:
        board[index] = EMPTY


def _terminal_score(result: GameResult, bot_mark: Player, depth: int) -> Optional[int]:
    if result is GameResult.NONE:
        return None
    if result is GameResult.DRAW:
        return 0
    if result.winner == bot_mark:
        return WIN_SCORE - depth
    return depth - WIN_SCORE


def minimax(
    board: List[str],
    depth: int,
    maximizing: bool,
    bot_mark: Player,
    alpha: float = -math.inf,
    beta: float = math.inf,
) -> float:
    """Score ``board`` from the bot's point of view.

    ``depth`` counts the plies placed by the search below the root move, so
    quicker wins score higher and slower losses score less negative.
    """

    score = _terminal_score(evaluate(board), bot_mark, depth)
    if score is not None:
        return score

    mover = bot_mark if maximizing else opponent(bot_mark)
    best = -math.inf if maximizing else math.inf
    for index in empty_cells(board):
        with _placed(board, index, mover):
            value = minimax(board, depth + 1, not maximizing, bot_mark, alpha, beta)
        if maximizing:
            best = max(best, value)
            alpha = max(alpha, value)
        else:
            best = min(best, value)
            beta = min(beta, value)
        if beta <= alpha:
            break
    return best


def best_move(board: Sequence[str], bot_mark: Player = "O") -> Optional[int]:
    """Return the optimal cell for ``bot_mark``; the lowest index wins ties."""

    squares = list(board)
    move: Optional[int] = None
    best_value = -math.inf
    for index in empty_cells(squares):
        with _placed(squares, index, bot_mark):
            value = minimax(squares, 0, False, bot_mark)
        if value > best_value:
            best_value = value
            move = index
    logger.debug("hard move for %s: cell=%s score=%s", bot_mark, move, best_value)
    return move


def random_move(board: Sequence[str], rng: Optional[RandomSource] = None) -> Optional[int]:
    available = empty_cells(board)
    if not available:
        return None
    rng = rng or make_rng()
    return int(rng.choice(available))


def select_move(
    board: Sequence[str],
    difficulty: "Difficulty | str",
    bot_mark: Player = "O",
    rng: Optional[RandomSource] = None,
    optimal_probability: float = DEFAULT_OPTIMAL_PROBABILITY,
) -> Optional[int]:
    """Pick the bot's next cell, or ``None`` when the board is full."""

    if bot_mark not in MARKS:
        raise ValueError("bot_mark must be 'X' or 'O'")
    level = Difficulty.parse(difficulty)
    if not empty_cells(board):
        return None

    rng = rng or make_rng()
    if level is Difficulty.EASY:
        return random_move(board, rng)
    if level is Difficulty.MEDIUM:
        if rng.random() < optimal_probability:
            return best_move(board, bot_mark)
        return random_move(board, rng)
    return best_move(board, bot_mark)


@dataclass
class BotEngine:
    """A configured opponent: difficulty, mark and random source for one match."""

    difficulty: Difficulty = Difficulty.HARD
    mark: Player = "O"
    optimal_probability: float = DEFAULT_OPTIMAL_PROBABILITY
    rng: RandomSource = field(default_factory=make_rng)

    def __post_init__(self) -> None:
        self.difficulty = Difficulty.parse(self.difficulty)
        if self.mark not in MARKS:
            raise ValueError("mark must be 'X' or 'O'")
        if not 0.0 <= self.optimal_probability <= 1.0:
            raise ValueError("optimal_probability must be within [0, 1]")

    def choose(self, board: Sequence[str]) -> Optional[int]:
        return select_move(
            board,
            self.difficulty,
            bot_mark=self.mark,
            rng=self.rng,
            optimal_probability=self.optimal_probability,
        )


__all__ = [
    "BotEngine",
    "DEFAULT_OPTIMAL_PROBABILITY",
    "Difficulty",
    "best_move",
    "minimax",
    "random_move",
    "select_move",
]
