from __future__ import annotations

from functools import lru_cache

import pytest

from classic_ttt.ai import BotEngine, Difficulty, select_move
from classic_ttt.arena import Arena, ArenaResult, exhaustive_playout, main, play_game
from classic_ttt.game import EMPTY, GameResult, TicTacToe, empty_cells, evaluate, opponent
from classic_ttt.utils import make_rng


@pytest.mark.parametrize("mark", ["X", "O"])
def test_hard_never_loses_against_any_line(mark) -> None:
    engine = BotEngine(difficulty=Difficulty.HARD, mark=mark)
    result = exhaustive_playout(engine)

    assert result.losses == 0
    assert result.total > 0
    assert result.draws > 0


def test_hard_never_loses_from_midgame_position() -> None:
    game = TicTacToe(board=["X", EMPTY, EMPTY, EMPTY, "O", EMPTY, EMPTY, EMPTY, "X"])
    result = exhaustive_playout(BotEngine(difficulty=Difficulty.HARD, mark="O"), game)
    assert result.losses == 0


@lru_cache(maxsize=None)
def _game_value(cells: str, mover: str) -> int:
    """Plain minimax value for ``mover``: 1 win, 0 draw, -1 loss."""

    result = evaluate(list(cells))
    if result.terminal:
        if result.winner is None:
            return 0
        return 1 if result.winner == mover else -1
    other = opponent(mover)
    return max(
        -_game_value(cells[:index] + mover + cells[index + 1 :], other)
        for index in empty_cells(list(cells))
    )


def _reachable_positions() -> list[str]:
    seen = set()
    stack = [EMPTY * 9]
    while stack:
        cells = stack.pop()
        if cells in seen or evaluate(list(cells)).terminal:
            continue
        seen.add(cells)
        mover = TicTacToe(board=list(cells)).active_player()
        for index in empty_cells(list(cells)):
            stack.append(cells[:index] + mover + cells[index + 1 :])
    return sorted(seen)


def test_hard_keeps_the_game_value_of_every_reachable_position() -> None:
    positions = _reachable_positions()
    assert len(positions) == 4520

    for cells in positions:
        mover = TicTacToe(board=list(cells)).active_player()
        move = select_move(list(cells), Difficulty.HARD, bot_mark=mover)
        assert move is not None and cells[move] == EMPTY
        after = cells[:move] + mover + cells[move + 1 :]
        assert -_game_value(after, opponent(mover)) == _game_value(cells, mover), cells


def test_exhaustive_playout_does_not_touch_start_position() -> None:
    game = TicTacToe(board=["X"] + [EMPTY] * 8)
    exhaustive_playout(BotEngine(difficulty=Difficulty.HARD, mark="O"), game)
    assert game.board == ["X"] + [EMPTY] * 8


def test_hard_against_hard_is_a_draw() -> None:
    outcome = play_game(BotEngine(Difficulty.HARD, "X"), BotEngine(Difficulty.HARD, "O"))
    assert outcome is GameResult.DRAW


def test_arena_hard_never_loses_to_easy() -> None:
    arena = Arena(challenger=Difficulty.HARD, baseline=Difficulty.EASY, rng=make_rng(3))
    result = arena.play_matches(6)
    assert result.total == 6
    assert result.losses == 0


def test_arena_result_bookkeeping() -> None:
    result = ArenaResult()
    result.record(GameResult.X_WIN, "X")
    result.record(GameResult.O_WIN, "X")
    result.record(GameResult.DRAW, "X")
    result.record(GameResult.O_WIN, "O")
    assert (result.wins, result.losses, result.draws) == (2, 1, 1)
    assert result.win_rate == pytest.approx(0.5)
    assert ArenaResult().win_rate == 0.0


def test_main_prints_summary(capsys) -> None:
    main(["--challenger", "easy", "--baseline", "easy", "--games", "4", "--seed", "5"])
    out = capsys.readouterr().out
    assert out.startswith("easy vs easy:")
    assert "win_rate=" in out
