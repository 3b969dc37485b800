"""
Utility functions and helpers for radiotag
Time formatting for the now-playing display
"""

import math
from datetime import datetime
from typing import Optional, Union


Number = Union[int, float]


def format_duration(seconds: Number) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string, "M:SS" or "H:MM:SS"
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def format_position(seconds: Number) -> str:
    """
    Format a playback position as a fixed-width "MM:SS" clock

    Whole hours are dropped, so 3725 seconds reads "02:05". Fractions of a
    second are truncated.

    Args:
        seconds: Position in seconds

    Returns:
        Position string like "03:07"
    """
    if seconds <= 0:
        return "00:00"

    whole = int(seconds) % 3600
    return f"{whole // 60:02d}:{whole % 60:02d}"


def progress_percent(position: Number, duration: Number) -> int:
    """Whole percentage of duration covered by position, floored"""
    if not duration:
        return 0
    return int(math.floor((position / duration) * 100))


def format_clock(timestamp: Optional[Number]) -> str:
    """
    Format an epoch timestamp in seconds as local "HH:MM"

    Args:
        timestamp: Seconds since the epoch

    Returns:
        Clock string, or "--:--" when the timestamp is missing
    """
    if timestamp is None:
        return "--:--"
    return datetime.fromtimestamp(timestamp).strftime('%H:%M')
