from pathlib import Path

import pytest

from breathe_memorizer.config import (
    BreatheConfig,
    OpenAISettings,
    config_from_dict,
    config_from_yaml,
    load_config,
)


def test_load_config_defaults():
    cfg = load_config(None)

    assert cfg.peek_duration_ms == 600
    assert cfg.tick_interval_ms == 100
    assert cfg.notes_debounce_ms == 1000
    assert cfg.peek_seconds == pytest.approx(0.6)
    assert cfg.openai.enabled is False


def test_config_from_dict_ignores_unknown_keys():
    cfg = config_from_dict(
        {
            "peek_duration_ms": 800,
            "window_size": 500,
            "openai": {"enabled": True, "model": "gpt-4.1", "bogus": 1},
        }
    )

    assert cfg.peek_duration_ms == 800
    assert cfg.openai == OpenAISettings(enabled=True, model="gpt-4.1")


def test_config_from_yaml(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "tick_interval_ms: 250\nopenai:\n  enabled: true\n  max_attempts: 5\n",
        encoding="utf-8",
    )

    cfg = config_from_yaml(path)

    assert cfg.tick_seconds == pytest.approx(0.25)
    assert cfg.openai.enabled is True
    assert cfg.openai.max_attempts == 5


def test_config_yaml_must_be_mapping(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        config_from_yaml(path)


def test_empty_yaml_gives_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert config_from_yaml(path) == BreatheConfig()


def test_non_positive_durations_rejected():
    with pytest.raises(ValueError):
        BreatheConfig(peek_duration_ms=0)
    with pytest.raises(ValueError):
        config_from_dict({"notes_debounce_ms": -5})


def test_to_dict_round_trips():
    cfg = BreatheConfig(peek_duration_ms=700)

    assert config_from_dict(cfg.to_dict()) == cfg


def test_non_mapping_openai_block_uses_defaults():
    cfg = config_from_dict({"openai": "yes please", "tick_interval_ms": 50})

    assert cfg.openai == OpenAISettings()
    assert cfg.tick_interval_ms == 50
