"""Streaming detectors built on the subsequence buffer."""
from .base import StreamingDetector
from .discord import DiscordDetector

__all__ = ["DiscordDetector", "StreamingDetector"]
