"""
Data models for decoded ID3 frames

Two levels are kept apart: RawFrame is what the container walk cuts out of
the buffer (identifier, declared size, payload), Frame is the typed record
that survives decoding and is handed to the scheduler.
"""

from dataclasses import dataclass
from typing import Optional, Union


FrameData = Union[str, bytes]


@dataclass(frozen=True)
class RawFrame:
    """
    Undecoded frame as laid out in the container

    Attributes:
        type: Four character frame identifier (TPE1, PRIV, WXXX, ...)
        size: Payload size declared in the frame header
        data: Payload bytes, possibly shorter than size for truncated tags
    """
    type: str
    size: int
    data: bytes


@dataclass(frozen=True)
class Frame:
    """
    Decoded key/value record

    Attributes:
        key: Four character frame identifier
        data: Decoded payload, text for T*/W* frames and bytes for PRIV
        info: Secondary string, the owner of PRIV frames or the description
              of TXXX/WXXX frames
    """
    key: str
    data: Optional[FrameData] = None
    info: Optional[str] = None

    @property
    def is_private(self) -> bool:
        return self.key == 'PRIV'
