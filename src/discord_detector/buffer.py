"""Circular subsequence buffer and nearest-neighbour discord distance."""
from __future__ import annotations

import logging
import sys
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Tuple

import numpy as np

from .config import BufferConfig, ConfigurationError, require_int

LOGGER = logging.getLogger(__name__)

MAX_DISTANCE = sys.float_info.max


@dataclass(slots=True, frozen=True)
class BufferState:
    """Serializable snapshot of a :class:`SlidingSubsequenceBuffer`.

    ``slots`` holds the raw ring contents in storage order, with ``None`` for
    slots that were never written.
    """

    window_size_in_subsequences: int
    subsequence_length: int
    initialization_periods: int
    write_cursor: int
    count: int
    slots: Tuple[float | None, ...]

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["slots"] = list(self.slots)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BufferState":
        try:
            return cls(
                window_size_in_subsequences=payload["window_size_in_subsequences"],
                subsequence_length=payload["subsequence_length"],
                initialization_periods=payload["initialization_periods"],
                write_cursor=payload["write_cursor"],
                count=payload["count"],
                slots=tuple(None if value is None else float(value) for value in payload["slots"]),
            )
        except KeyError as exc:
            raise ConfigurationError(f"Buffer state is missing field {exc.args[0]!r}") from exc


class SlidingSubsequenceBuffer:
    """Fixed-capacity ring of scalar values scored by subsequence discord distance.

    The ring holds ``window_size_in_subsequences * subsequence_length`` slots.
    Once full, every :meth:`add` overwrites the oldest value. Slots that have
    never been written are tracked in a validity mask so that a stored ``0.0``
    is distinguishable from an empty slot.

    Instances are not synchronised; callers sharing one across threads must
    serialise access themselves.
    """

    def __init__(
        self,
        window_size_in_subsequences: int,
        subsequence_length: int,
        initialization_periods: int,
    ) -> None:
        self._config = BufferConfig(
            window_size_in_subsequences=window_size_in_subsequences,
            subsequence_length=subsequence_length,
            initialization_periods=initialization_periods,
        ).validate()
        self._capacity = self._config.capacity
        self._values = np.zeros(self._capacity, dtype=np.float64)
        self._filled = np.zeros(self._capacity, dtype=bool)
        self._cursor = 0
        self._count = 0

    @classmethod
    def from_config(cls, config: BufferConfig) -> "SlidingSubsequenceBuffer":
        return cls(
            window_size_in_subsequences=config.window_size_in_subsequences,
            subsequence_length=config.subsequence_length,
            initialization_periods=config.initialization_periods,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> BufferConfig:
        return self._config

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window_size_in_subsequences(self) -> int:
        return self._config.window_size_in_subsequences

    @property
    def subsequence_length(self) -> int:
        return self._config.subsequence_length

    @property
    def initialization_periods(self) -> int:
        return self._config.initialization_periods

    @property
    def write_cursor(self) -> int:
        return self._cursor

    @property
    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self._capacity}, "
            f"subsequence_length={self.subsequence_length}, "
            f"count={self._count}, write_cursor={self._cursor})"
        )

    # ------------------------------------------------------------------
    # Mutation and readiness
    # ------------------------------------------------------------------

    def _index(self, position, step):
        """Wrap ``position + step`` into ``[0, capacity)``; accepts numpy arrays."""

        return (position + step) % self._capacity

    def add(self, value: float) -> None:
        self._values[self._cursor] = value
        self._filled[self._cursor] = True
        self._cursor = self._index(self._cursor, 1)
        self._count = min(self._count + 1, self._capacity)

    def ready_to_compute(self) -> bool:
        return self._count > 2 * self.subsequence_length

    def ready_to_infer(self) -> bool:
        return self._count > self.initialization_periods * self.subsequence_length

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def values(self) -> np.ndarray:
        """Return the written values, oldest first."""

        order = self._index(self._cursor, np.arange(self._capacity))
        order = order[self._filled[order]]
        return self._values[order].copy()

    def current_subsequence(self) -> np.ndarray:
        """Return the most recent ``subsequence_length`` written values."""

        positions = self._index(self._cursor - self.subsequence_length, np.arange(self.subsequence_length))
        positions = positions[self._filled[positions]]
        return self._values[positions].copy()

    def compute_nearest_neighbour_distance(self) -> float:
        """Squared Euclidean distance from the current subsequence to its nearest neighbour.

        Candidates start ``2 * subsequence_length`` slots behind the write
        cursor and walk backwards around the ring until the cursor is reached,
        so the current subsequence and its immediate predecessor are never
        compared against. Accumulation for a candidate stops at its first
        unwritten slot and the partial sum counts as its distance; a candidate
        whose first slot is unwritten is skipped. Returns ``MAX_DISTANCE``
        when no candidate remains, which is the case until
        :meth:`ready_to_compute` holds.
        """

        length = self.subsequence_length
        n_candidates = self._index(0, -2 * length)
        if n_candidates == 0:
            return MAX_DISTANCE

        offsets = np.arange(length)
        current = self._index(self._index(self._cursor, -length), offsets)
        first_start = self._index(self._cursor, -2 * length)
        starts = self._index(first_start, -np.arange(n_candidates))
        candidates = self._index(starts[:, None], offsets[None, :])

        overlap = self._filled[candidates] & self._filled[current][None, :]
        overlap = np.logical_and.accumulate(overlap, axis=1)
        eligible = overlap[:, 0]
        if not eligible.any():
            return MAX_DISTANCE

        differences = self._values[candidates] - self._values[current][None, :]
        squared = np.where(overlap, differences * differences, 0.0).sum(axis=1)
        distance = float(squared[eligible].min())
        LOGGER.debug(
            "Computed nearest neighbour distance",
            extra={"distance": distance, "candidates": int(eligible.sum()), "count": self._count},
        )
        return distance

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def to_state(self) -> BufferState:
        slots = tuple(
            float(value) if filled else None for value, filled in zip(self._values, self._filled)
        )
        return BufferState(
            window_size_in_subsequences=self.window_size_in_subsequences,
            subsequence_length=self.subsequence_length,
            initialization_periods=self.initialization_periods,
            write_cursor=self._cursor,
            count=self._count,
            slots=slots,
        )

    @classmethod
    def from_state(cls, state: BufferState) -> "SlidingSubsequenceBuffer":
        buffer = cls(
            window_size_in_subsequences=state.window_size_in_subsequences,
            subsequence_length=state.subsequence_length,
            initialization_periods=state.initialization_periods,
        )
        if len(state.slots) != buffer.capacity:
            raise ConfigurationError(
                f"State holds {len(state.slots)} slots but capacity is {buffer.capacity}"
            )
        require_int("write_cursor", state.write_cursor, minimum=0)
        require_int("count", state.count, minimum=0)
        if state.write_cursor >= buffer.capacity:
            raise ConfigurationError(f"write_cursor {state.write_cursor} is outside the buffer")
        if state.count > buffer.capacity:
            raise ConfigurationError(f"count {state.count} is outside [0, {buffer.capacity}]")
        written = sum(value is not None for value in state.slots)
        if written != state.count:
            raise ConfigurationError(f"count {state.count} does not match {written} written slots")

        for position, value in enumerate(state.slots):
            if value is not None:
                buffer._values[position] = value
                buffer._filled[position] = True
        buffer._cursor = state.write_cursor
        buffer._count = state.count
        LOGGER.debug("Restored buffer state", extra={"count": state.count, "write_cursor": state.write_cursor})
        return buffer


__all__ = ["BufferState", "MAX_DISTANCE", "SlidingSubsequenceBuffer"]
