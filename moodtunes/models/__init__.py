"""
Models Module

Data models and configuration for the MoodTunes system.
"""

from .config_models import SystemConfig, parse_origins
from .track_models import KeywordSet, Track

__all__ = [
    "SystemConfig",
    "parse_origins",
    "KeywordSet",
    "Track",
]
