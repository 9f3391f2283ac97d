"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from magic_writer.errors import ConfigError


@dataclass(frozen=True)
class LLMConfig:
    draft_model: str = "claude-sonnet-4-5-20250929"
    suggest_model: str = "claude-sonnet-4-5-20250929"
    grammar_model: str = "claude-haiku-4-5-20251001"
    rewrite_model: str = "claude-haiku-4-5-20251001"
    max_retries: int = 3
    timeout: int = 60

    def __post_init__(self) -> None:
        if not 1 <= self.max_retries <= 10:
            raise ConfigError(f"max_retries must be between 1 and 10, got {self.max_retries}")
        if self.timeout < 1:
            raise ConfigError(f"timeout must be at least 1 second, got {self.timeout}")


@dataclass(frozen=True)
class EditorConfig:
    grammar_debounce_seconds: float = 1.5
    grammar_min_chars: int = 10
    suggest_min_chars: int = 50
    generating_placeholder: str = "Generating your draft..."

    def __post_init__(self) -> None:
        if self.grammar_debounce_seconds < 0:
            raise ConfigError(
                f"grammar_debounce_seconds must not be negative, got {self.grammar_debounce_seconds}"
            )
        if self.grammar_min_chars < 0:
            raise ConfigError(f"grammar_min_chars must not be negative, got {self.grammar_min_chars}")
        if self.suggest_min_chars < 0:
            raise ConfigError(f"suggest_min_chars must not be negative, got {self.suggest_min_chars}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    try:
        return AppConfig(
            llm=LLMConfig(**raw.get("llm", {})),
            editor=EditorConfig(**raw.get("editor", {})),
        )
    except TypeError as exc:
        raise ConfigError(f"Unknown configuration key: {exc}") from exc
