"""
radiotag: in-band metadata decoder and now-playing synchronizer for HLS radio

HLS radio stations carry the song that is on air as ID3 tags inside the
audio segments. radiotag decodes those tags and keeps a now-playing display
in step with the audio, even though tags arrive in bursts and ahead of the
sound they describe.

## Modules

**ID3 parsing (`radiotag/id3/`)**
- Detection of ID3v2 headers/footers and synchsafe sizes
- Frame decoding for text, URL and private frames
- MPEG-TS timestamp extraction from the HLS timestamp PRIV frame

**Synchronization (`radiotag/sync/`)**
- Metadata records assembled from one tag burst
- Scheduler turning queued records into timed song changes, position
  extrapolation and "coming up" list maintenance

**Catalog (`radiotag/catalog/`)**
- Async client for station details and upcoming songs

**Console UI (`radiotag/ui/`)**
- Terminal listener with a progress bar

**Configuration and utilities (`radiotag/config/`, `radiotag/utils/`)**
- YAML/environment settings, logging setup, time formatting

## Quick Start
```bash
pip install -e .

# Inspect a tag dump
radiotag decode segment-42.id3

# Replay dumps through the scheduler
radiotag replay --station my-station dumps/*.id3
```
"""

__version__ = "0.1.0"

__author__ = "radiotag contributors"

__description__ = "In-band ID3 metadata decoder and now-playing synchronizer for HLS radio streams"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
