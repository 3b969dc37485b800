"""
Synchronization package
Turns in-band stream metadata into timed now-playing updates
"""

from .metadata import MetadataRecord, TimeWindow, build_record
from .scheduler import (
    MetadataScheduler,
    NowPlayingListener,
    CurrentSong,
    PlayerState
)

__all__ = [
    'MetadataRecord',
    'TimeWindow',
    'build_record',
    'MetadataScheduler',
    'NowPlayingListener',
    'CurrentSong',
    'PlayerState'
]
