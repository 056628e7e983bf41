"""Utility helpers for discord scoring."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, List

import pandas as pd


@dataclass(slots=True)
class DistanceResult:
    """Container for the detector output after a single observation."""

    index: Hashable
    value: float
    distance: float | None
    ready_to_compute: bool
    ready_to_infer: bool


RESULT_COLUMNS = ["value", "distance", "ready_to_compute", "ready_to_infer"]


def results_to_frame(results: Iterable[DistanceResult]) -> pd.DataFrame:
    """Collect results into a frame indexed by the observation index."""

    rows: List[DistanceResult] = list(results)
    if not rows:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    frame = pd.DataFrame(
        {
            "value": [row.value for row in rows],
            "distance": [float("nan") if row.distance is None else row.distance for row in rows],
            "ready_to_compute": [row.ready_to_compute for row in rows],
            "ready_to_infer": [row.ready_to_infer for row in rows],
        },
        index=[row.index for row in rows],
    )
    return frame
