from __future__ import annotations

from collections import Counter

import pytest

from classic_ttt.ai import BotEngine, Difficulty, best_move, minimax, random_move, select_move
from classic_ttt.game import EMPTY, empty_cells
from classic_ttt.utils import make_rng


def board_from(cells: str) -> list[str]:
    return [EMPTY if ch == "." else ch for ch in cells]


class FixedRandom:
    """Deterministic stand-in for ``numpy.random.Generator``."""

    def __init__(self, draw: float, pick: int = -1) -> None:
        self.draw = draw
        self.pick = pick
        self.choices: list[list[int]] = []

    def random(self) -> float:
        return self.draw

    def choice(self, options):
        self.choices.append(list(options))
        return options[self.pick]


def test_hard_blocks_immediate_threat() -> None:
    board = board_from("XX.......")
    assert select_move(board, Difficulty.HARD, bot_mark="O") == 2


def test_hard_prefers_winning_over_blocking() -> None:
    board = board_from("OO.XX....")
    assert select_move(board, Difficulty.HARD, bot_mark="O") == 2


def test_hard_blocks_when_playing_x() -> None:
    board = board_from("OXX.O....")
    # O threatens the main diagonal at 8.
    assert select_move(board, "hard", bot_mark="X") == 8


def test_hard_from_empty_board_returns_valid_cell() -> None:
    move = select_move([EMPTY] * 9, Difficulty.HARD, bot_mark="O")
    assert move in range(9)


def test_hard_ties_go_to_lowest_index() -> None:
    # Every opening draws under perfect play, so the first cell is kept.
    assert best_move([EMPTY] * 9, "X") == 0


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_full_board_has_no_move(difficulty) -> None:
    board = board_from("XOXXOOOXX")
    assert select_move(board, difficulty, bot_mark="O", rng=make_rng(0)) is None


def test_select_move_does_not_mutate_board() -> None:
    board = board_from("X...O...X")
    snapshot = list(board)
    select_move(board, Difficulty.HARD, bot_mark="O")
    assert board == snapshot


def test_minimax_terminal_scores_depend_on_depth() -> None:
    o_wins = board_from("OOOXX.X..")
    x_wins = board_from("XXXOO.O..")
    drawn = board_from("XOXXOOOXX")
    assert minimax(list(o_wins), 3, True, "O") == 7
    assert minimax(list(x_wins), 3, True, "O") == -7
    assert minimax(list(drawn), 5, False, "O") == 0


def test_minimax_prefers_faster_win() -> None:
    # O can win now at 2; every other move lets X block or win.
    board = board_from("OO.X.X...")
    assert best_move(board, "O") == 2


def test_easy_only_returns_empty_cells_uniformly() -> None:
    board = board_from("X...O...X")
    free = empty_cells(board)
    rng = make_rng(1234)
    trials = 6000
    counts = Counter(select_move(board, Difficulty.EASY, bot_mark="O", rng=rng) for _ in range(trials))

    assert set(counts) == set(free)
    expected = trials / len(free)
    for cell in free:
        assert abs(counts[cell] - expected) < expected * 0.15


def test_medium_uses_optimal_move_below_probability() -> None:
    board = board_from("XX.......")
    rng = FixedRandom(draw=0.5, pick=-1)
    assert select_move(board, Difficulty.MEDIUM, bot_mark="O", rng=rng) == 2
    assert rng.choices == []


def test_medium_plays_randomly_above_probability() -> None:
    board = board_from("XX.......")
    rng = FixedRandom(draw=0.9, pick=-1)
    assert select_move(board, Difficulty.MEDIUM, bot_mark="O", rng=rng) == 8
    assert rng.choices == [empty_cells(board)]


def test_medium_optimal_rate_is_roughly_seventy_percent() -> None:
    board = board_from("XX.OOXOX.")
    rng = make_rng(7)
    trials = 2000
    hits = sum(select_move(board, Difficulty.MEDIUM, bot_mark="O", rng=rng) == 2 for _ in range(trials))
    # 0.7 optimal plus 0.3 * 1/2 random hits.
    assert 0.80 < hits / trials < 0.90


def test_random_move_on_full_board() -> None:
    assert random_move(board_from("XOXXOOOXX")) is None


def test_difficulty_parse() -> None:
    assert Difficulty.parse("HARD") is Difficulty.HARD
    assert Difficulty.parse(Difficulty.EASY) is Difficulty.EASY
    assert Difficulty.MEDIUM.label == "Medium"
    with pytest.raises(ValueError):
        Difficulty.parse("impossible")


def test_bot_engine_validation_and_choice() -> None:
    with pytest.raises(ValueError):
        BotEngine(mark="Z")
    with pytest.raises(ValueError):
        BotEngine(optimal_probability=1.5)

    engine = BotEngine(difficulty="hard", mark="O", rng=make_rng(0))
    assert engine.difficulty is Difficulty.HARD
    assert engine.choose(board_from("XX.......")) == 2


def test_select_move_rejects_unknown_mark() -> None:
    with pytest.raises(ValueError):
        select_move([EMPTY] * 9, Difficulty.EASY, bot_mark="Z")
