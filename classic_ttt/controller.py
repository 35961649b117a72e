"""Application state and timed behaviour, independent from the widget toolkit.

:class:`GameController` is the single owner of the board, the turn flag, the
scores and every transient UI flag.  All delays go through a scheduler that
exposes Tkinter's ``after``/``after_cancel`` pair, which keeps the controller
testable with a fake clock.  A delayed bot move is cancelled as soon as the
position it was scheduled for is superseded, and the callback re-checks the
round token before touching the board.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from .ai import BotEngine, Difficulty
from .config import AppConfig
from .game import EMPTY, GameResult, TicTacToe
from .storage import GameStorage, Scores, Settings
from .utils import RandomSource, make_rng

logger = logging.getLogger(__name__)

BOT_MARK = "O"
HOLD_COMPLETE = 100.0


class Scheduler(Protocol):
    def after(self, ms: int, func: Callable[[], None]) -> Any: ...

    def after_cancel(self, job: Any) -> None: ...


class Screen(Enum):
    MENU = "menu"
    FRIEND = "friend"
    BOT = "bot"
    DIFFICULTY = "difficulty"
    SETTINGS = "settings"

    @property
    def in_game(self) -> bool:
        return self in (Screen.FRIEND, Screen.BOT)


class GameController:
    """Owns the game state and schedules bot moves and UI timers."""

    def __init__(
        self,
        config: AppConfig,
        storage: GameStorage,
        scheduler: Scheduler,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.config = config
        self.storage = storage
        self.scheduler = scheduler
        self._rng = rng or make_rng(config.bot.seed)

        self.screen = Screen.MENU
        self.difficulty = Difficulty.EASY
        self.game = storage.load_game()
        self.x_next = storage.load_x_next()
        self.scores: Scores = storage.load_scores()
        self.settings: Settings = storage.load_settings()

        self.bot_thinking = False
        self.ai_move_index: Optional[int] = None
        self.show_turn_indicator = False
        self.is_holding = False
        self.hold_progress = 0.0

        self._round = 0
        self._score_recorded = False
        self._jobs: Dict[str, Any] = {}
        self._listeners: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Listeners and scheduling
    def on_change(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _schedule(self, name: str, ms: int, func: Callable[[], None]) -> None:
        self._cancel(name)
        handle: List[Any] = []

        def run() -> None:
            if handle and self._jobs.get(name) == handle[0]:
                del self._jobs[name]
            func()

        handle.append(self.scheduler.after(ms, run))
        self._jobs[name] = handle[0]

    def _cancel(self, name: str) -> bool:
        job = self._jobs.pop(name, None)
        if job is None:
            return False
        self.scheduler.after_cancel(job)
        return True

    def pending(self, name: str) -> bool:
        return name in self._jobs

    # ------------------------------------------------------------------
    # Derived state
    @property
    def board(self) -> List[str]:
        return self.game.board

    @property
    def result(self) -> GameResult:
        return self.game.result

    @property
    def winner(self) -> Optional[str]:
        return self.result.winner

    @property
    def is_draw(self) -> bool:
        return self.result is GameResult.DRAW

    def background_class(self) -> str:
        if self.winner == "X":
            return "bg-red"
        if self.winner == "O":
            return "bg-blue"
        if self.is_draw:
            return "bg-gray"
        if not self.screen.in_game:
            return "bg-menu"
        return "bg-red" if self.x_next else "bg-blue"

    def status_text(self) -> str:
        if self.winner is not None:
            return f"{'Red' if self.winner == 'X' else 'Blue'} Wins!"
        if self.is_draw:
            return "Draw"
        if self.bot_thinking:
            return "AI is thinking..."
        mark = "X" if self.x_next else "O"
        if self.screen is Screen.BOT:
            return "It's your turn!" if self.x_next else f"Bot ({mark}) to move"
        return f"{mark}: it's your turn!"

    # ------------------------------------------------------------------
    # Navigation
    def open_menu(self) -> None:
        self._set_screen(Screen.MENU)

    def open_settings(self) -> None:
        self._set_screen(Screen.SETTINGS)

    def open_difficulty(self) -> None:
        self._set_screen(Screen.DIFFICULTY)

    def start_friend_game(self) -> None:
        self.screen = Screen.FRIEND
        self.reset_game()

    def start_bot_game(self, difficulty: "Difficulty | str") -> None:
        self.difficulty = Difficulty.parse(difficulty)
        self.screen = Screen.BOT
        logger.info("Starting bot game on %s", self.difficulty.value)
        self.reset_game()

    def _set_screen(self, screen: Screen) -> None:
        self.screen = screen
        self._sync()

    def reset_game(self) -> None:
        if self._cancel("score"):
            self._record_score()
        self._cancel("draw_reset")
        self._cancel("ai_highlight")
        self._round += 1
        self._score_recorded = False
        self.game.reset()
        self.x_next = True
        self.ai_move_index = None
        self.bot_thinking = False
        self._sync()

    def back_to_menu(self) -> None:
        self._cancel("score")
        self._end_hold()
        self.screen = Screen.MENU
        self.scores = Scores()
        self.storage.save_scores(self.scores)
        self.reset_game()

    # ------------------------------------------------------------------
    # Settings
    def toggle_sound(self) -> None:
        self.settings.sound = not self.settings.sound
        self.storage.save_settings(self.settings)
        self._notify()

    def toggle_dark_mode(self) -> None:
        self.settings.dark_mode = not self.settings.dark_mode
        self.storage.save_settings(self.settings)
        self._notify()

    # ------------------------------------------------------------------
    # Play
    def handle_click(self, index: int) -> bool:
        """Place the current mover's mark; returns False when the click is ignored."""

        if not self.screen.in_game or self.bot_thinking:
            return False
        if self.game.terminal or not 0 <= index < len(self.board) or self.board[index] != EMPTY:
            return False
        if self.screen is Screen.BOT and not self.x_next:
            return False

        self.game.make_move("X" if self.x_next else "O", index)
        self.x_next = not self.x_next
        self._round += 1
        self._sync()
        return True

    def _bot_engine(self) -> BotEngine:
        return BotEngine(
            difficulty=self.difficulty,
            mark=BOT_MARK,
            optimal_probability=self.config.bot.optimal_probability,
            rng=self._rng,
        )

    def _schedule_bot_move(self) -> None:
        token = self._round
        delay = self.config.bot.delay_for(self.difficulty)
        self.bot_thinking = True
        self._schedule("bot", delay, lambda: self._play_bot_move(token))

    def _play_bot_move(self, token: int) -> None:
        if (
            token != self._round
            or self.screen is not Screen.BOT
            or self.x_next
            or self.game.terminal
        ):
            logger.debug("Discarding stale bot move for round %s", token)
            return

        move = self._bot_engine().choose(self.board)
        if move is None:
            # Full board: nothing to play, treated as a draw.
            self.bot_thinking = False
            self._notify()
            return

        self.game.make_move(BOT_MARK, move)
        logger.debug("Bot (%s) played cell %s", self.difficulty.value, move)
        self.ai_move_index = move
        self._schedule("ai_highlight", self.config.timing.ai_highlight_ms, self._clear_ai_highlight)
        self.x_next = True
        self.bot_thinking = False
        self._round += 1
        self._sync()

    def _clear_ai_highlight(self) -> None:
        self.ai_move_index = None
        self._notify()

    # ------------------------------------------------------------------
    # Reactions to state changes
    def _sync(self) -> None:
        self.storage.save_game(self.game)
        self.storage.save_x_next(self.x_next)
        result = self.result

        self._cancel("bot")
        if self.screen is Screen.BOT and not self.x_next and not result.terminal:
            self._schedule_bot_move()
        else:
            self.bot_thinking = False

        self._update_turn_indicator(result)
        self._handle_game_end(result)
        self._notify()

    def _update_turn_indicator(self, result: GameResult) -> None:
        if self.screen.in_game and result.winner is None and not self.bot_thinking:
            self.show_turn_indicator = True
            self._schedule("turn_indicator", self.config.timing.turn_indicator_ms, self._hide_turn_indicator)
        else:
            self._cancel("turn_indicator")
            self.show_turn_indicator = False

    def _hide_turn_indicator(self) -> None:
        self.show_turn_indicator = False
        self._notify()

    def _handle_game_end(self, result: GameResult) -> None:
        if not self.screen.in_game:
            return
        if result.winner is not None and not self._score_recorded and not self.pending("score"):
            logger.info("%s wins", result.winner)
            self._schedule("score", self.config.timing.score_delay_ms, self._record_score)
        elif result is GameResult.DRAW and not self.pending("draw_reset"):
            logger.info("Round drawn, restarting")
            self._schedule("draw_reset", self.config.timing.draw_reset_ms, self.reset_game)

    def _record_score(self) -> None:
        mark = self.winner
        if mark is None or self._score_recorded:
            return
        self._score_recorded = True
        self.scores.record_win(mark)
        self.storage.save_scores(self.scores)
        self._notify()

    # ------------------------------------------------------------------
    # Hold-to-return
    def hold_start(self) -> None:
        self.is_holding = True
        self.hold_progress = 0.0
        self._schedule("hold_tick", self.config.timing.hold_tick_ms, self._hold_tick)
        self._schedule("hold", self.config.timing.hold_duration_ms, self.back_to_menu)
        self._notify()

    def _hold_tick(self) -> None:
        if not self.is_holding:
            return
        self.hold_progress = min(HOLD_COMPLETE, self.hold_progress + self.config.timing.hold_step)
        self._schedule("hold_tick", self.config.timing.hold_tick_ms, self._hold_tick)
        self._notify()

    def hold_end(self) -> None:
        self._end_hold()
        self._notify()

    def _end_hold(self) -> None:
        self.is_holding = False
        self.hold_progress = 0.0
        self._cancel("hold")
        self._cancel("hold_tick")

    def shutdown(self) -> None:
        for name in list(self._jobs):
            self._cancel(name)


__all__ = ["BOT_MARK", "GameController", "Scheduler", "Screen"]
