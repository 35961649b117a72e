"""YAML configuration for pacing, bot behaviour, storage and logging."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .ai import DEFAULT_OPTIMAL_PROBABILITY, Difficulty

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"


class ConfigError(ValueError):
    """Raised when the configuration file holds an invalid value."""


@dataclass(frozen=True)
class BotConfig:
    easy_delay_ms: int = 1200
    medium_delay_ms: int = 1500
    hard_delay_ms: int = 1800
    min_delay_ms: int = 1200
    optimal_probability: float = DEFAULT_OPTIMAL_PROBABILITY
    seed: Optional[int] = None

    def delay_for(self, difficulty: Difficulty) -> int:
        delays = {
            Difficulty.EASY: self.easy_delay_ms,
            Difficulty.MEDIUM: self.medium_delay_ms,
            Difficulty.HARD: self.hard_delay_ms,
        }
        return max(self.min_delay_ms, delays[difficulty])


@dataclass(frozen=True)
class TimingConfig:
    hold_duration_ms: int = 2000
    hold_tick_ms: int = 30
    hold_step: float = 1.5
    draw_reset_ms: int = 1400
    score_delay_ms: int = 600
    turn_indicator_ms: int = 2000
    ai_highlight_ms: int = 700


@dataclass(frozen=True)
class StorageConfig:
    path: Path = field(default_factory=lambda: Path.home() / ".classic_ttt" / "storage.json")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    bot: BotConfig = field(default_factory=BotConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"section '{name}' must be a mapping")
    return dict(value)


def _int(section: Mapping[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _float(section: Mapping[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {value!r}") from None


def _optional_path(value: Any) -> Optional[Path]:
    if value in (None, ""):
        return None
    return Path(str(value)).expanduser()


def parse_config(raw: Optional[Mapping[str, Any]]) -> AppConfig:
    """Build an :class:`AppConfig` from a parsed YAML mapping."""

    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise ConfigError("configuration root must be a mapping")

    defaults = AppConfig()
    bot_cfg = _section(raw, "bot")
    timing_cfg = _section(raw, "timing")
    storage_cfg = _section(raw, "storage")
    logging_cfg = _section(raw, "logging")

    probability = _float(bot_cfg, "optimal_probability", defaults.bot.optimal_probability)
    if not 0.0 <= probability <= 1.0:
        raise ConfigError(f"optimal_probability must be within [0, 1], got {probability}")
    hold_step = _float(timing_cfg, "hold_step", defaults.timing.hold_step)
    if hold_step <= 0:
        raise ConfigError(f"hold_step must be > 0, got {hold_step}")
    seed = bot_cfg.get("seed")

    bot = BotConfig(
        easy_delay_ms=_int(bot_cfg, "easy_delay_ms", defaults.bot.easy_delay_ms),
        medium_delay_ms=_int(bot_cfg, "medium_delay_ms", defaults.bot.medium_delay_ms),
        hard_delay_ms=_int(bot_cfg, "hard_delay_ms", defaults.bot.hard_delay_ms),
        min_delay_ms=_int(bot_cfg, "min_delay_ms", defaults.bot.min_delay_ms),
        optimal_probability=probability,
        seed=None if seed is None else _int(bot_cfg, "seed", 0),
    )
    timing = TimingConfig(
        hold_duration_ms=_int(timing_cfg, "hold_duration_ms", defaults.timing.hold_duration_ms, 1),
        hold_tick_ms=_int(timing_cfg, "hold_tick_ms", defaults.timing.hold_tick_ms, 1),
        hold_step=hold_step,
        draw_reset_ms=_int(timing_cfg, "draw_reset_ms", defaults.timing.draw_reset_ms),
        score_delay_ms=_int(timing_cfg, "score_delay_ms", defaults.timing.score_delay_ms),
        turn_indicator_ms=_int(timing_cfg, "turn_indicator_ms", defaults.timing.turn_indicator_ms),
        ai_highlight_ms=_int(timing_cfg, "ai_highlight_ms", defaults.timing.ai_highlight_ms),
    )
    storage_path = _optional_path(storage_cfg.get("path"))
    storage = StorageConfig(path=storage_path or defaults.storage.path)

    level = str(logging_cfg.get("level", defaults.logging.level)).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"unknown logging level {level!r}")
    log = LoggingConfig(level=level, file=_optional_path(logging_cfg.get("file")))

    return AppConfig(bot=bot, timing=timing, storage=storage, logging=log)


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return AppConfig()
    with config_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {config_path}: {exc}") from exc
    return parse_config(raw)


__all__ = [
    "AppConfig",
    "BotConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "LoggingConfig",
    "StorageConfig",
    "TimingConfig",
    "load_config",
    "parse_config",
]
