from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml


@dataclass(slots=True)
class OpenAISettings:
    """Configuration block for the OpenAI-backed script writer."""

    enabled: bool = False
    model: str = "gpt-4.1-mini"
    api_key: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str | None = None
    organization: str | None = None
    temperature: float = 0.7
    max_output_tokens: int = 600
    top_p: float = 0.95
    request_timeout: float = 60.0
    max_attempts: int = 3


@dataclass(slots=True)
class BreatheConfig:
    """Timing and helper settings for memorization sessions."""

    peek_duration_ms: int = 600
    tick_interval_ms: int = 100
    notes_debounce_ms: int = 1000
    openai: OpenAISettings = field(default_factory=OpenAISettings)

    def __post_init__(self) -> None:
        for name in ("peek_duration_ms", "tick_interval_ms", "notes_debounce_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be a positive number of milliseconds.")

    @property
    def peek_seconds(self) -> float:
        return self.peek_duration_ms / 1000.0

    @property
    def tick_seconds(self) -> float:
        return self.tick_interval_ms / 1000.0

    @property
    def notes_debounce_seconds(self) -> float:
        return self.notes_debounce_ms / 1000.0

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _known_fields(cls: type, data: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the keys ``cls`` declares; unknown YAML keys are dropped."""
    names = {item.name for item in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def config_from_dict(data: Mapping[str, Any] | None) -> BreatheConfig:
    """Build a BreatheConfig from a dictionary-like input."""
    if data is None:
        return BreatheConfig()
    kwargs = _known_fields(BreatheConfig, data)
    openai_value = kwargs.pop("openai", None)
    if isinstance(openai_value, OpenAISettings):
        kwargs["openai"] = openai_value
    elif isinstance(openai_value, Mapping):
        kwargs["openai"] = OpenAISettings(**_known_fields(OpenAISettings, openai_value))
    return BreatheConfig(**kwargs)


def config_from_yaml(path: str | Path) -> BreatheConfig:
    """Load configuration from a YAML file; an empty file gives the defaults."""
    with Path(path).open(encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle)
    if parsed is None:
        return BreatheConfig()
    if not isinstance(parsed, Mapping):
        raise ValueError(f"{path}: configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> BreatheConfig:
    """Return the YAML configuration at ``path``, or the defaults without one."""
    return BreatheConfig() if path is None else config_from_yaml(path)
