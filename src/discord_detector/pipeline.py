"""Batch scoring of a single series through the discord detector."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

import numpy as np
import pandas as pd

from .config import BufferConfig
from .detectors.discord import DiscordDetector
from .utils import DistanceResult, results_to_frame

LOGGER = logging.getLogger(__name__)


def iter_scores(values: Iterable[float], detector: DiscordDetector) -> Iterator[DistanceResult]:
    """Feed ``values`` into ``detector`` and yield the output after each one."""

    if isinstance(values, pd.Series):
        items = values.items()
    else:
        items = enumerate(values)
    buffer = detector.buffer
    for index, value in items:
        value = float(value)
        detector.update(value)
        yield DistanceResult(
            index=index,
            value=value,
            distance=detector.score(),
            ready_to_compute=buffer.ready_to_compute(),
            ready_to_infer=buffer.ready_to_infer(),
        )


def score_series(
    values: pd.Series | Sequence[float] | np.ndarray,
    config: BufferConfig | None = None,
) -> pd.DataFrame:
    """Score every observation of ``values`` with a fresh :class:`DiscordDetector`.

    The returned frame carries ``value``, ``distance``, ``ready_to_compute``
    and ``ready_to_infer`` columns. ``distance`` is NaN until enough history
    exists for the nearest-neighbour search. A :class:`pandas.Series` input
    keeps its index.
    """

    detector = DiscordDetector(config)
    frame = results_to_frame(iter_scores(values, detector))
    LOGGER.debug(
        "Scored series",
        extra={"observations": len(frame), "capacity": detector.buffer.capacity},
    )
    return frame


__all__ = ["iter_scores", "score_series"]
