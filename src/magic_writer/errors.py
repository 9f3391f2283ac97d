"""Error hierarchy for the writing assistant."""

from __future__ import annotations

__all__ = [
    "MagicWriterError",
    "ServiceUnavailableError",
    "MalformedResponseError",
    "ConfigError",
]


class MagicWriterError(Exception):
    """Base error for all writing assistant failures."""


class ServiceUnavailableError(MagicWriterError):
    """Raised when the text-generation backend fails or times out."""


class MalformedResponseError(MagicWriterError, ValueError):
    """Raised when structured model output does not have the expected shape."""


class ConfigError(MagicWriterError, ValueError):
    """Raised when configuration values are out of range."""
