"""Core game logic for classic 3x3 Tic-Tac-Toe.

The representation is independent from the UI and the bot engine.  A board is
a flat sequence of nine cells in row-major order; each cell holds ``"X"``,
``"O"`` or ``" "`` for an empty square.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple


Player = str  # Either "X" or "O"
Line = Tuple[int, int, int]

EMPTY = " "
MARKS: Tuple[Player, Player] = ("X", "O")
BOARD_CELLS = 9

WIN_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class GameResult(Enum):
    NONE = "none"
    X_WIN = "x_win"
    O_WIN = "o_win"
    DRAW = "draw"

    @property
    def terminal(self) -> bool:
        return self is not GameResult.NONE

    @property
    def winner(self) -> Optional[Player]:
        if self is GameResult.X_WIN:
            return "X"
        if self is GameResult.O_WIN:
            return "O"
        return None


class InvalidMoveError(RuntimeError):
    """Raised when a move is attempted that is not legal in the current state."""


def _check_board(board: Sequence[str]) -> None:
    assert len(board) == BOARD_CELLS, f"board must have {BOARD_CELLS} cells, got {len(board)}"
    for value in board:
        assert value in ("X", "O", EMPTY), f"invalid cell value {value!r}"


def winning_line(board: Sequence[str]) -> Optional[Line]:
    """Return the first completed line, if any."""

    _check_board(board)
    for line in WIN_LINES:
        a, b, c = line
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return line
    return None


def winner(board: Sequence[str]) -> Optional[Player]:
    line = winning_line(board)
    if line is None:
        return None
    return board[line[0]]


def empty_cells(board: Sequence[str]) -> List[int]:
    return [index for index, value in enumerate(board) if value == EMPTY]


def evaluate(board: Sequence[str]) -> GameResult:
    """Classify a board as unfinished, won by one side, or drawn.

    The first completed line in ``WIN_LINES`` order decides the winner; callers
    guarantee that only one side can have completed a line.
    """

    mark = winner(board)
    if mark == "X":
        return GameResult.X_WIN
    if mark == "O":
        return GameResult.O_WIN
    if all(cell != EMPTY for cell in board):
        return GameResult.DRAW
    return GameResult.NONE


def opponent(player: Player) -> Player:
    if player not in MARKS:
        raise ValueError("player must be 'X' or 'O'")
    return "O" if player == "X" else "X"


@dataclass
class TicTacToe:
    """A single game session on a 3x3 board."""

    board: List[str] = field(default_factory=lambda: [EMPTY] * BOARD_CELLS)

    def __post_init__(self) -> None:
        self.board = list(self.board)
        _check_board(self.board)

    @classmethod
    def from_cells(cls, cells: Sequence[Optional[str]]) -> "TicTacToe":
        """Build a game from cells that use ``None`` for empty squares."""

        return cls(board=[EMPTY if cell is None else cell for cell in cells])

    def to_cells(self) -> List[Optional[str]]:
        """Return the board using ``None`` for empty squares."""

        return [None if cell == EMPTY else cell for cell in self.board]

    def clone(self) -> "TicTacToe":
        return TicTacToe(board=self.board[:])

    def reset(self) -> None:
        self.board = [EMPTY] * BOARD_CELLS

    @property
    def result(self) -> GameResult:
        return evaluate(self.board)

    @property
    def terminal(self) -> bool:
        return self.result.terminal

    @property
    def is_draw(self) -> bool:
        return self.result is GameResult.DRAW

    @property
    def winner(self) -> Optional[Player]:
        return self.result.winner

    def winning_line(self) -> Optional[Line]:
        return winning_line(self.board)

    def available_moves(self) -> List[int]:
        if self.terminal:
            return []
        return empty_cells(self.board)

    def active_player(self) -> Player:
        x_count = sum(cell == "X" for cell in self.board)
        o_count = sum(cell == "O" for cell in self.board)
        return "X" if x_count == o_count else "O"

    def make_move(self, player: Player, index: int) -> GameResult:
        if player not in MARKS:
            raise ValueError("player must be 'X' or 'O'")
        if self.terminal:
            raise InvalidMoveError("Game has already finished")
        if not 0 <= index < BOARD_CELLS:
            raise InvalidMoveError(f"cell index must be in range 0..8, got {index}")
        if self.board[index] != EMPTY:
            raise InvalidMoveError(f"cell {index} is already occupied")

        self.board[index] = player
        return self.result


__all__ = [
    "BOARD_CELLS",
    "EMPTY",
    "GameResult",
    "InvalidMoveError",
    "Line",
    "MARKS",
    "Player",
    "TicTacToe",
    "WIN_LINES",
    "empty_cells",
    "evaluate",
    "opponent",
    "winner",
    "winning_line",
]
