from __future__ import annotations

from pathlib import Path

import pytest

from classic_ttt.ai import Difficulty
from classic_ttt.config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ConfigError,
    load_config,
    parse_config,
)


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(tmp_path / "absent.yaml") == AppConfig()


def test_shipped_config_matches_defaults() -> None:
    config = load_config(DEFAULT_CONFIG_PATH)
    defaults = AppConfig()
    assert config.bot == defaults.bot
    assert config.timing == defaults.timing
    assert config.logging.level == "INFO"
    assert config.storage.path == Path("~/.classic_ttt/storage.json").expanduser()


def test_yaml_overrides(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "bot:\n"
        "  hard_delay_ms: 2500\n"
        "  optimal_probability: 0.5\n"
        "  seed: 42\n"
        "timing:\n"
        "  draw_reset_ms: 900\n"
        "storage:\n"
        f"  path: {tmp_path / 'kv.json'}\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.bot.hard_delay_ms == 2500
    assert config.bot.optimal_probability == 0.5
    assert config.bot.seed == 42
    assert config.bot.easy_delay_ms == 1200
    assert config.timing.draw_reset_ms == 900
    assert config.storage.path == tmp_path / "kv.json"
    assert config.logging.level == "DEBUG"


def test_delay_never_below_minimum() -> None:
    config = parse_config({"bot": {"easy_delay_ms": 100, "min_delay_ms": 1200}})
    assert config.bot.delay_for(Difficulty.EASY) == 1200
    assert config.bot.delay_for(Difficulty.MEDIUM) == 1500
    assert config.bot.delay_for(Difficulty.HARD) == 1800


@pytest.mark.parametrize(
    "raw",
    [
        {"bot": {"optimal_probability": 1.5}},
        {"bot": {"hard_delay_ms": "soon"}},
        {"bot": {"easy_delay_ms": -1}},
        {"timing": {"hold_tick_ms": 0}},
        {"timing": {"hold_step": 0}},
        {"timing": {"hold_step": -1.5}},
        {"timing": {"hold_step": True}},
        {"bot": {"seed": True}},
        {"bot": {"hard_delay_ms": False}},
        {"logging": {"level": "loud"}},
        {"bot": [1, 2]},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_values_raise(raw) -> None:
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_unparseable_yaml_raises(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("bot: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
