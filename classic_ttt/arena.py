"""Headless bot-vs-bot matches and exhaustive play-outs between difficulty tiers."""
from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .ai import DEFAULT_OPTIMAL_PROBABILITY, BotEngine, Difficulty
from .game import GameResult, TicTacToe, opponent
from .utils import RandomSource, make_rng

__all__ = ["Arena", "ArenaResult", "exhaustive_playout", "main", "play_game"]


@dataclass
class ArenaResult:
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_rate(self) -> float:
        return self.wins / self.total if self.total else 0.0

    def record(self, result: GameResult, perspective: str) -> None:
        if result is GameResult.DRAW:
            self.draws += 1
        elif result.winner == perspective:
            self.wins += 1
        else:
            self.losses += 1


def play_game(x_engine: BotEngine, o_engine: BotEngine) -> GameResult:
    """Play one game to completion; X always moves first."""

    game = TicTacToe()
    engines: Dict[str, BotEngine] = {"X": x_engine, "O": o_engine}
    while not game.terminal:
        player = game.active_player()
        move = engines[player].choose(game.board)
        if move is None:
            break
        game.make_move(player, move)
    return game.result


@dataclass
class Arena:
    challenger: Difficulty
    baseline: Difficulty
    optimal_probability: float = DEFAULT_OPTIMAL_PROBABILITY
    rng: RandomSource = field(default_factory=make_rng)

    def _engine(self, difficulty: Difficulty, mark: str) -> BotEngine:
        return BotEngine(
            difficulty=difficulty,
            mark=mark,
            optimal_probability=self.optimal_probability,
            rng=self.rng,
        )

    def play_matches(self, num_games: int = 100) -> ArenaResult:
        """Play ``num_games`` games, alternating who opens; counts are the challenger's."""

        results = ArenaResult()
        for game_index in range(num_games):
            challenger_mark = "X" if game_index % 2 == 0 else "O"
            baseline_mark = opponent(challenger_mark)
            engines = {
                challenger_mark: self._engine(self.challenger, challenger_mark),
                baseline_mark: self._engine(self.baseline, baseline_mark),
            }
            outcome = play_game(engines["X"], engines["O"])
            results.record(outcome, challenger_mark)
        return results


def exhaustive_playout(engine: BotEngine, game: Optional[TicTacToe] = None) -> ArenaResult:
    """Play ``engine`` against every possible sequence of opponent replies.

    Each finished game is counted once from the engine's point of view, so
    ``losses`` is zero for an engine that cannot be beaten from ``game``.
    """

    results = ArenaResult()
    stack: List[TicTacToe] = [game.clone() if game is not None else TicTacToe()]
    while stack:
        current = stack.pop()
        if current.terminal:
            results.record(current.result, engine.mark)
            continue
        player = current.active_player()
        if player == engine.mark:
            move = engine.choose(current.board)
            if move is None:
                results.record(GameResult.DRAW, engine.mark)
                continue
            current.make_move(player, move)
            stack.append(current)
            continue
        for move in current.available_moves():
            child = current.clone()
            child.make_move(player, move)
            stack.append(child)
    return results


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    levels = [level.value for level in Difficulty]
    parser = argparse.ArgumentParser(description="Pit Tic-Tac-Toe bot difficulties against each other")
    parser.add_argument("--challenger", choices=levels, default="hard", help="Difficulty under test")
    parser.add_argument("--baseline", choices=levels, default="easy", help="Opposing difficulty")
    parser.add_argument("--games", type=int, default=100, help="Number of games to play")
    parser.add_argument(
        "--optimal-probability",
        type=float,
        default=DEFAULT_OPTIMAL_PROBABILITY,
        help="Chance that the medium tier plays the optimal move",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--exhaustive",
        action="store_true",
        help="Also play the challenger against every opponent line, from both sides",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    rng = make_rng(args.seed)
    arena = Arena(
        challenger=Difficulty.parse(args.challenger),
        baseline=Difficulty.parse(args.baseline),
        optimal_probability=args.optimal_probability,
        rng=rng,
    )
    result = arena.play_matches(args.games)
    print(
        f"{args.challenger} vs {args.baseline}: wins={result.wins} losses={result.losses} "
        f"draws={result.draws} win_rate={result.win_rate:.3f}"
    )

    if args.exhaustive:
        for mark in ("X", "O"):
            engine = BotEngine(
                difficulty=arena.challenger,
                mark=mark,
                optimal_probability=args.optimal_probability,
                rng=rng,
            )
            playout = exhaustive_playout(engine)
            print(
                f"{args.challenger} as {mark} vs every line: wins={playout.wins} "
                f"losses={playout.losses} draws={playout.draws}"
            )


if __name__ == "__main__":
    main()
