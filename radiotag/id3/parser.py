"""
ID3v2 tag parser for timed metadata carried inside HLS audio segments

This module turns the raw ID3 byte buffers that the transport layer lifts out
of demuxed segments into ordered lists of typed frames. Every function is
pure: no state, no I/O, and no exceptions for malformed input. Absence of a
tag and broken frames both degrade to "no data" for that unit.

Container layout (all integers big-endian):

    header  [marker 'ID3':3][version:2][flags:1][size:4 synchsafe]
    frames  [key:4][size:4 synchsafe][flags:2][payload:size] ...
    footer  [marker '3DI':3][version:2][flags:1][size:4 synchsafe]   (optional)

Several containers may follow each other back to back; extract_container()
and decode_frames() both walk all of them.

Frame payload decoding is dispatched on the frame key:

- PRIV: <owner>\\0<binary>
- TXXX / WXXX: <encoding><description>\\0<value>
- T*: <encoding><value>
- W*: <value>

Text is decoded with a permissive UTF-8 reader that stops at the first NUL,
which is what splits owner/description from value.
"""

import math
from typing import List, Optional, Tuple

from .models import Frame, RawFrame


HEADER_MARKER = b'ID3'
FOOTER_MARKER = b'3DI'
HEADER_SIZE = 10
FOOTER_SIZE = 10
FRAME_HEADER_SIZE = 10

TIMESTAMP_OWNER = 'com.apple.streaming.transportStreamTimestamp'

# 2^32 / 90, the 33rd PTS bit expressed in milliseconds
PTS_33RD_BIT_MS = 47721858.84


def _matches_marker(data: bytes, offset: int, marker: bytes) -> bool:
    """
    Check a 10 byte header/footer candidate at offset

    The pattern is $MM MM MM yy yy xx zz zz zz zz where MM is the marker,
    yy is less than $FF, xx is the flags byte and zz is less than $80.
    """
    if offset < 0 or offset + HEADER_SIZE > len(data):
        return False

    for index, value in enumerate(marker):
        if data[offset + index] != value:
            return False

    # version bytes
    if data[offset + 3] >= 0xFF or data[offset + 4] >= 0xFF:
        return False

    # synchsafe size bytes
    for index in range(6, 10):
        if data[offset + index] >= 0x80:
            return False

    return True


def is_header(data: bytes, offset: int) -> bool:
    """
    Detect an ID3v2 header at offset

    Args:
        data: Buffer to inspect
        offset: Position of the candidate header

    Returns:
        True if a well-formed header starts at offset, False otherwise
        (including when fewer than 10 bytes remain)
    """
    return _matches_marker(data, offset, HEADER_MARKER)


def is_footer(data: bytes, offset: int) -> bool:
    """
    Detect an ID3v2 footer at offset

    The footer is a copy of the header with the marker reversed ('3DI').
    """
    return _matches_marker(data, offset, FOOTER_MARKER)


def read_synchsafe_size(data: bytes, offset: int) -> int:
    """
    Decode a 4 byte synchsafe integer

    Only the low 7 bits of every byte carry data, so each byte is masked
    with 0x7F before shifting, even when the high bit is set.

    Args:
        data: Buffer holding the integer
        offset: Position of the first (most significant) byte

    Returns:
        Decoded integer, at most 28 bits wide
    """
    size = (data[offset] & 0x7F) << 21
    size |= (data[offset + 1] & 0x7F) << 14
    size |= (data[offset + 2] & 0x7F) << 7
    size |= data[offset + 3] & 0x7F
    return size


def extract_container(data: bytes, offset: int = 0) -> Optional[bytes]:
    """
    Cut the complete tag container starting at offset out of a buffer

    Consecutive containers are consumed as one unit: after each header the
    declared size is added to the running length, plus 10 when a footer
    follows the frame data, and the walk continues where that container ends.

    Args:
        data: Buffer that may hold one or more tags
        offset: Position where the first header is expected

    Returns:
        Bytes of all consecutive containers, or None if no header is found
        at offset
    """
    front = offset
    length = 0

    while is_header(data, offset):
        length += HEADER_SIZE
        length += read_synchsafe_size(data, offset + 6)

        if is_footer(data, front + length):
            length += FOOTER_SIZE

        offset = front + length

    if length > 0:
        return bytes(data[front:front + length])

    return None


def decode_utf8(data: bytes) -> str:
    """
    Decode text the way tag writers in the wild produce it

    Standard UTF-8 lead-byte classes are honoured for 1, 2 and 3 byte
    sequences. A lead byte whose top nibble is zero (NUL and the other low
    control characters) ends the string. Continuation or 4-byte lead bytes in
    lead position are skipped, and missing continuation bytes at the end of
    the buffer read as zero.
    """
    return _decode_utf8_at(data, 0)[0]


def _decode_utf8_at(data: bytes, start: int) -> Tuple[str, int]:
    """
    Decode text starting at start

    Returns:
        Tuple of (text, index of the terminating byte or len(data))
    """
    chars = []
    length = len(data)
    i = start

    while i < length:
        lead = data[i]
        nibble = lead >> 4

        if nibble == 0:
            return ''.join(chars), i

        i += 1
        if nibble <= 7:
            # 0xxxxxxx
            chars.append(chr(lead))
        elif nibble in (12, 13):
            # 110x xxxx   10xx xxxx
            second = _byte_at(data, i)
            i += 1
            chars.append(chr(((lead & 0x1F) << 6) | (second & 0x3F)))
        elif nibble == 14:
            # 1110 xxxx  10xx xxxx  10xx xxxx
            second = _byte_at(data, i)
            third = _byte_at(data, i + 1)
            i += 2
            chars.append(chr(((lead & 0x0F) << 12) | ((second & 0x3F) << 6) | (third & 0x3F)))

    return ''.join(chars), length


def _byte_at(data: bytes, index: int) -> int:
    if index < len(data):
        return data[index]
    return 0


def _split_described_value(payload: bytes) -> Tuple[str, str]:
    """Split <encoding><description>\\0<value> into description and value"""
    description, terminator = _decode_utf8_at(payload, 1)
    value, _ = _decode_utf8_at(payload, terminator + 1)
    return description, value


def _decode_private_frame(raw: RawFrame) -> Optional[Frame]:
    if raw.size < 2:
        return None

    owner, terminator = _decode_utf8_at(raw.data, 0)
    private_data = bytes(raw.data[terminator + 1:])

    return Frame(key=raw.type, info=owner, data=private_data)


def _decode_text_frame(raw: RawFrame) -> Optional[Frame]:
    if raw.size < 2:
        return None

    if raw.type == 'TXXX':
        description, value = _split_described_value(raw.data)
        return Frame(key=raw.type, info=description, data=value)

    return Frame(key=raw.type, data=_decode_utf8_at(raw.data, 1)[0])


def _decode_url_frame(raw: RawFrame) -> Optional[Frame]:
    if raw.type == 'WXXX':
        if raw.size < 2:
            return None
        description, value = _split_described_value(raw.data)
        return Frame(key=raw.type, info=description, data=value)

    # plain URL frames carry no encoding byte
    return Frame(key=raw.type, data=decode_utf8(raw.data))


def decode_frame(raw: RawFrame) -> Optional[Frame]:
    """
    Decode one raw frame by key prefix

    Args:
        raw: Frame cut out of a container

    Returns:
        Decoded Frame, or None for unknown keys and malformed payloads
    """
    if raw.type == 'PRIV':
        return _decode_private_frame(raw)
    if raw.type.startswith('T'):
        return _decode_text_frame(raw)
    if raw.type.startswith('W'):
        return _decode_url_frame(raw)
    return None


def _read_raw_frame(data: bytes, offset: int) -> RawFrame:
    frame_type = bytes(data[offset:offset + 4]).decode('latin-1')
    size = read_synchsafe_size(data, offset + 4)
    payload_start = offset + FRAME_HEADER_SIZE
    return RawFrame(type=frame_type, size=size, data=bytes(data[payload_start:payload_start + size]))


def decode_frames(tag_data: bytes) -> List[Frame]:
    """
    Decode every frame of the container(s) at the start of tag_data

    Frames are returned in container order. Frames with unknown keys or
    undersized payloads are dropped; a frame header cut off by the end of
    the buffer stops the walk.

    Args:
        tag_data: Buffer starting with an ID3 header, typically the output
                  of extract_container()

    Returns:
        List of decoded frames, empty when no header is present
    """
    offset = 0
    frames: List[Frame] = []

    while is_header(tag_data, offset):
        size = read_synchsafe_size(tag_data, offset + 6)
        offset += HEADER_SIZE
        end = offset + size

        while offset + 8 < end:
            if offset + FRAME_HEADER_SIZE > len(tag_data):
                return frames

            raw = _read_raw_frame(tag_data, offset)
            frame = decode_frame(raw)
            if frame:
                frames.append(frame)

            offset += raw.size + FRAME_HEADER_SIZE

        if is_footer(tag_data, offset):
            offset += FOOTER_SIZE

    return frames


def is_timestamp_frame(frame: Optional[Frame]) -> bool:
    """Check whether a frame is the HLS transport stream timestamp PRIV frame"""
    return bool(frame) and frame.is_private and frame.info == TIMESTAMP_OWNER


def decode_embedded_timestamp(frame: Optional[Frame]) -> Optional[int]:
    """
    Read the MPEG-TS presentation timestamp from a PRIV frame

    The timestamp is a 33 bit value stored as a big-endian eight-octet
    number with the upper 31 bits zero. Bit 0 of byte 3 is the 33rd bit;
    bytes 4-7 are combined and divided by 45 to get milliseconds.

    Args:
        frame: Candidate frame

    Returns:
        Timestamp in milliseconds, or None for any other frame shape
    """
    if not is_timestamp_frame(frame):
        return None

    data = frame.data
    if not isinstance(data, (bytes, bytearray)) or len(data) != 8:
        return None

    pts_33_bit = data[3] & 0x1
    # summed, not OR-ed: bit 7 of byte 6 and byte 7 overlap and carry
    timestamp = (data[4] << 23) + (data[5] << 15) + (data[6] << 7) + data[7]
    timestamp /= 45

    if pts_33_bit:
        timestamp += PTS_33RD_BIT_MS

    # half-way values round up
    return int(math.floor(timestamp + 0.5))


def get_timestamp(tag_data: bytes) -> Optional[int]:
    """
    Find the transport stream timestamp in a tag container

    Returns:
        Timestamp in milliseconds of the first timestamp frame, or None
    """
    for frame in decode_frames(tag_data):
        if is_timestamp_frame(frame):
            return decode_embedded_timestamp(frame)
    return None
