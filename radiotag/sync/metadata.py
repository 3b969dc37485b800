"""
Metadata records assembled from decoded tag frames

One tag burst delivered by the transport layer describes the song playing in
one stream segment. The frames of that burst are mapped onto a
MetadataRecord with this table:

    TPE1  artist        TIT2  song         TLEN  duration (float seconds)
    TPE2  artist_url    TIT3  song_url     TOFN  segment id
    TIME  window (JSON {"tsStart", "tsEnd"})
    TXXX  extra  (JSON object holding the song "pointerID")

Frames outside the table are ignored. The transport stream timestamp PRIV
frame, when present, is kept on the record for diagnostics.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from ..exceptions import MetadataError
from ..id3.models import Frame
from ..id3.parser import decode_embedded_timestamp, is_timestamp_frame


TEXT_FIELDS = {
    'TPE1': 'artist',
    'TPE2': 'artist_url',
    'TIT2': 'song',
    'TIT3': 'song_url',
    'TOFN': 'segment',
}

WINDOW_START_KEYS = ('tsStart', 'start')
WINDOW_END_KEYS = ('tsEnd', 'end')


@dataclass(frozen=True)
class TimeWindow:
    """Segment time window in seconds since the stream epoch"""
    start: float
    end: float

    @property
    def length(self) -> float:
        return self.end - self.start

    @classmethod
    def from_json(cls, text: str) -> 'TimeWindow':
        """
        Parse the TIME frame payload

        Raises:
            MetadataError: If the payload is not a JSON object with numeric bounds
        """
        data = _load_json_object(text, 'TIME')
        start = _first_present(data, WINDOW_START_KEYS)
        end = _first_present(data, WINDOW_END_KEYS)

        try:
            return cls(start=float(start), end=float(end))
        except (TypeError, ValueError):
            raise MetadataError("TIME frame has no numeric start/end", details={'payload': text})


@dataclass
class MetadataRecord:
    """
    Song metadata for one stream segment

    Attributes:
        window: Segment time window, drives the activation delay
        extra: Decoded TXXX object, holds the stable pointer id
        segment: Segment identifier used to drop repeated bursts
        artist, artist_url, song, song_url: Display fields
        duration: Song length in seconds
        timestamp: Transport stream timestamp in milliseconds, if tagged
    """
    window: TimeWindow
    extra: Dict[str, Any] = field(default_factory=dict)
    segment: Optional[str] = None
    artist: Optional[str] = None
    artist_url: Optional[str] = None
    song: Optional[str] = None
    song_url: Optional[str] = None
    duration: Optional[float] = None
    timestamp: Optional[int] = None

    @property
    def pointer_id(self) -> str:
        """Stable identifier of the song instance"""
        return str(self.extra['pointerID'])

    @property
    def activation_delay_ms(self) -> float:
        """Milliseconds until the next record is due"""
        return self.window.length * 1000


def _load_json_object(text: Any, key: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise MetadataError(f"{key} frame is not valid JSON", details={'payload': text})

    if not isinstance(data, dict):
        raise MetadataError(f"{key} frame is not a JSON object", details={'payload': text})
    return data


def _first_present(data: Dict[str, Any], keys) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def build_record(frames: Iterable[Frame]) -> MetadataRecord:
    """
    Assemble a metadata record from the frames of one tag burst

    Later frames with the same key overwrite earlier ones.

    Args:
        frames: Decoded frames in container order

    Returns:
        MetadataRecord

    Raises:
        MetadataError: If TIME, TXXX or TLEN cannot be parsed, or if the burst
                       has no time window or no pointer id
    """
    values: Dict[str, Any] = {}
    window = None
    extra = None

    for frame in frames:
        if frame.key in TEXT_FIELDS:
            values[TEXT_FIELDS[frame.key]] = frame.data
        elif frame.key == 'TLEN':
            try:
                values['duration'] = float(frame.data)
            except (TypeError, ValueError):
                raise MetadataError("TLEN frame is not a number", details={'payload': frame.data})
        elif frame.key == 'TIME':
            window = TimeWindow.from_json(frame.data)
        elif frame.key == 'TXXX':
            extra = _load_json_object(frame.data, 'TXXX')
        elif is_timestamp_frame(frame):
            values['timestamp'] = decode_embedded_timestamp(frame)

    if window is None:
        raise MetadataError("Tag burst has no TIME frame", details={'segment': values.get('segment')})

    if extra is None or extra.get('pointerID') is None:
        raise MetadataError("Tag burst has no song pointer id", details={'segment': values.get('segment')})

    return MetadataRecord(window=window, extra=extra, **values)
