"""Base classes for streaming detectors."""
from __future__ import annotations

from abc import ABC, abstractmethod


class StreamingDetector(ABC):
    """Abstract interface for detectors consuming one scalar at a time."""

    def __init__(self) -> None:
        self._ready = False

    @abstractmethod
    def update(self, value: float) -> None:
        """Consume the latest observation."""

    @abstractmethod
    def score(self) -> float | None:
        """Return an anomaly score for the latest observation, if one is available."""

    def is_ready(self) -> bool:
        return self._ready

    def _mark_ready(self) -> None:
        self._ready = True
