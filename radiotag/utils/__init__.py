"""
Utilities package
Logging setup and display formatting helpers
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    parse_size
)
from .helpers import (
    format_duration,
    format_position,
    format_clock,
    progress_percent
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'parse_size',

    # Helper exports
    'format_duration',
    'format_position',
    'format_clock',
    'progress_percent'
]
