"""Configuration for the subsequence discord detector."""
from __future__ import annotations

from dataclasses import dataclass, field


class ConfigurationError(ValueError):
    """Raised when a buffer is built from invalid parameters."""


def require_int(name: str, value: object, minimum: int = 1) -> None:
    # bool is an int subclass; True would silently mean a length of one.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")


@dataclass(slots=True, frozen=True)
class BufferConfig:
    """Fixed parameters of a :class:`SlidingSubsequenceBuffer`."""

    window_size_in_subsequences: int = 32
    subsequence_length: int = 8
    initialization_periods: int = 4

    @property
    def capacity(self) -> int:
        return self.window_size_in_subsequences * self.subsequence_length

    def validate(self) -> "BufferConfig":
        require_int("window_size_in_subsequences", self.window_size_in_subsequences)
        require_int("subsequence_length", self.subsequence_length)
        require_int("initialization_periods", self.initialization_periods)
        return self


@dataclass(slots=True)
class PipelineConfig:
    """Top level configuration for batch scoring and the CLI."""

    buffer: BufferConfig = field(default_factory=BufferConfig)
    value_column: str = "value"
    log_level: str = "INFO"


__all__ = ["BufferConfig", "ConfigurationError", "PipelineConfig"]
