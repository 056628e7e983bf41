"""Command line interface for scoring a CSV column with the discord detector."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from .config import BufferConfig, ConfigurationError, PipelineConfig
from .pipeline import score_series

LOGGER = logging.getLogger(__name__)


def format_results(scores: pd.DataFrame, only_ready: bool = False) -> pd.DataFrame:
    if only_ready:
        scores = scores[scores["ready_to_infer"]]
    if scores.empty:
        return pd.DataFrame(columns=["index", "value", "distance", "ready"])
    return pd.DataFrame(
        {
            "index": scores.index,
            "value": scores["value"].round(4).to_numpy(),
            "distance": scores["distance"].round(4).to_numpy(),
            "ready": ["✅" if ready else "…" for ready in scores["ready_to_infer"]],
        }
    )


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    defaults = PipelineConfig()
    parser = argparse.ArgumentParser(description="Score a time series by subsequence discord distance")
    parser.add_argument("csv", type=Path, help="CSV file holding the series")
    parser.add_argument("--column", default=defaults.value_column, help="Column containing the values")
    parser.add_argument(
        "--window",
        type=int,
        default=defaults.buffer.window_size_in_subsequences,
        help="Window size measured in subsequences",
    )
    parser.add_argument(
        "--subsequence",
        type=int,
        default=defaults.buffer.subsequence_length,
        help="Number of values per subsequence",
    )
    parser.add_argument(
        "--init-periods",
        type=int,
        default=defaults.buffer.initialization_periods,
        help="Subsequences to observe before scores are trusted",
    )
    parser.add_argument("--only-ready", action="store_true", help="Only print rows past the warm-up period")
    parser.add_argument("--log-level", default=defaults.log_level, help="Logging level")
    return parser.parse_args(list(argv) if argv is not None else None)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    buffer = BufferConfig(
        window_size_in_subsequences=args.window,
        subsequence_length=args.subsequence,
        initialization_periods=args.init_periods,
    ).validate()
    return PipelineConfig(buffer=buffer, value_column=args.column, log_level=args.log_level)


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    level = logging.getLevelName(args.log_level.upper())
    if not isinstance(level, int):
        LOGGER.error("Unknown log level %r", args.log_level)
        return 2
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = build_config(args)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2

    try:
        frame = pd.read_csv(args.csv)
    except FileNotFoundError:
        LOGGER.error("CSV file %s does not exist", args.csv)
        return 2
    if config.value_column not in frame.columns:
        LOGGER.error("Column %r not found in %s", config.value_column, args.csv)
        return 2

    try:
        values = frame[config.value_column].astype(float)
    except ValueError as exc:
        LOGGER.error("Column %r is not numeric: %s", config.value_column, exc)
        return 2

    scores = score_series(values, config.buffer)
    table = format_results(scores, only_ready=args.only_ready)
    if table.empty:
        print("Waiting for enough data...")
    else:
        print(table.to_string(index=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
