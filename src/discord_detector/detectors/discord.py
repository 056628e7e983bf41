"""Discord-distance detector backed by a sliding subsequence buffer."""
from __future__ import annotations

import logging

from ..buffer import BufferState, SlidingSubsequenceBuffer
from ..config import BufferConfig
from .base import StreamingDetector

LOGGER = logging.getLogger(__name__)


class DiscordDetector(StreamingDetector):
    """Scores each observation by the distance of the latest subsequence to its nearest neighbour.

    The detector reports ready once the buffer has seen more than
    ``initialization_periods * subsequence_length`` values. Scores are
    available earlier, as soon as the distance is well defined, but callers
    should treat them as warm-up output until :meth:`is_ready` is true.
    """

    def __init__(
        self,
        config: BufferConfig | None = None,
        buffer: SlidingSubsequenceBuffer | None = None,
    ) -> None:
        super().__init__()
        if buffer is None:
            buffer = SlidingSubsequenceBuffer.from_config(config or BufferConfig())
        self._buffer = buffer
        if buffer.ready_to_infer():
            self._mark_ready()

    @classmethod
    def from_buffer(cls, buffer: SlidingSubsequenceBuffer) -> "DiscordDetector":
        return cls(buffer=buffer)

    @classmethod
    def from_state(cls, state: BufferState) -> "DiscordDetector":
        return cls.from_buffer(SlidingSubsequenceBuffer.from_state(state))

    @property
    def buffer(self) -> SlidingSubsequenceBuffer:
        return self._buffer

    def update(self, value: float) -> None:
        self._buffer.add(value)
        if not self._ready and self._buffer.ready_to_infer():
            LOGGER.info(
                "Discord detector warm-up complete after %d observations",
                self._buffer.count,
            )
            self._mark_ready()

    def score(self) -> float | None:
        if not self._buffer.ready_to_compute():
            return None
        return self._buffer.compute_nearest_neighbour_distance()

    def can_infer(self) -> bool:
        return self._buffer.ready_to_infer()

    def to_state(self) -> BufferState:
        return self._buffer.to_state()
