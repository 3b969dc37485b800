"""
ID3 package
Parser for the timed ID3 metadata embedded in HLS audio segments
"""

from .models import Frame, RawFrame
from .parser import (
    is_header,
    is_footer,
    read_synchsafe_size,
    extract_container,
    decode_frames,
    decode_frame,
    decode_utf8,
    decode_embedded_timestamp,
    is_timestamp_frame,
    get_timestamp,
    TIMESTAMP_OWNER
)

__all__ = [
    'Frame',
    'RawFrame',
    'is_header',
    'is_footer',
    'read_synchsafe_size',
    'extract_container',
    'decode_frames',
    'decode_frame',
    'decode_utf8',
    'decode_embedded_timestamp',
    'is_timestamp_frame',
    'get_timestamp',
    'TIMESTAMP_OWNER'
]
