"""Streaming subsequence discord detection for scalar time series."""
from .buffer import MAX_DISTANCE, BufferState, SlidingSubsequenceBuffer
from .config import BufferConfig, ConfigurationError, PipelineConfig
from .detectors import DiscordDetector, StreamingDetector
from .pipeline import iter_scores, score_series

__all__ = [
    "BufferConfig",
    "BufferState",
    "ConfigurationError",
    "DiscordDetector",
    "MAX_DISTANCE",
    "PipelineConfig",
    "SlidingSubsequenceBuffer",
    "StreamingDetector",
    "iter_scores",
    "score_series",
]
