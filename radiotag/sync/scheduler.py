"""
Now-playing scheduler driven by in-band stream metadata

Tag bursts arrive from the transport layer in bursts and ahead of the audio
they describe. The scheduler turns them into a steady sequence of "song
changed" and "progress" notifications:

1. on_tag_bytes() decodes a burst into a MetadataRecord and queues it,
   dropping it when its segment equals the queue tail's segment.
2. schedule_next() applies the queue head as the current song and arms one
   timer for the head's window length; when it fires the head is popped and
   the next record is applied. Records are activated strictly in arrival
   order.
3. apply_current_song() only reacts when the song pointer id changes, resets
   the position to the window start, extrapolates the position while the
   player is RUNNING and trims the "coming up" list, refilling it from the
   catalog when it runs low.

Everything runs on one asyncio event loop. Timers are loop.call_later()
handles owned by the scheduler: at most one activation handle, one progress
handle and one catalog refill task exist at any time, and stop() cancels
all of them together with clearing the queue and the current song.

The player lifecycle (IDLE, BUFFERING, RUNNING, STOPPED) is owned by the
external player and reported through set_state().
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from ..catalog.models import UpcomingSong
from ..config.settings import get_settings
from ..exceptions import CatalogError, MetadataError
from ..id3.parser import decode_frames
from ..utils.logger import get_logger
from .metadata import MetadataRecord, build_record


class PlayerState(Enum):
    """
    Player lifecycle as reported by the external audio player

    State Transitions:
    IDLE -> BUFFERING -> RUNNING (playback started)
    RUNNING -> BUFFERING (stall)
    any -> STOPPED (pause, error, teardown)
    STOPPED -> BUFFERING (restart)
    """
    IDLE = "idle"
    BUFFERING = "buffering"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class CurrentSong:
    """Song currently on air, as last confirmed by stream metadata"""
    id: str
    artist: Optional[str]
    song: Optional[str]
    position: float
    duration: Optional[float]

    def snapshot(self) -> Dict[str, Any]:
        """Copy handed to the UI; the UI never sees the live object"""
        return {
            'artist': self.artist,
            'song': self.song,
            'position': self.position,
            'duration': self.duration
        }


class NowPlayingListener:
    """
    Receiver of scheduler notifications

    Subclasses override the calls they care about; the defaults ignore them.
    """

    def on_song_changed(self, song: Dict[str, Any]) -> None:
        """A new song is on air: {artist, song, position, duration}"""

    def on_progress(self, position: float, duration: Optional[float]) -> None:
        """Extrapolated playback position of the current song"""

    def on_upcoming_list_changed(self, songs: List[UpcomingSong]) -> None:
        """The "coming up" list was trimmed or refilled"""

    def on_notice(self, message: str) -> None:
        """Recoverable problem worth telling the listener about"""


class MetadataScheduler:
    """
    Converts queued stream metadata into timed now-playing updates

    Args:
        ui: Listener receiving song/progress/upcoming notifications
        catalog: Object with an async fetch_next_songs(station_id, count),
                 usually a CatalogClient; None disables upcoming refills
        station_id: Station whose upcoming list is maintained
        loop: Event loop for timers, defaults to the running loop
        clock: Monotonic clock in seconds used for position extrapolation
        low_water_mark: Refill threshold of the upcoming list
        next_count: Number of songs requested per refill
        progress_interval: Seconds between extrapolation ticks
    """

    def __init__(
        self,
        ui: Optional[NowPlayingListener] = None,
        catalog: Optional[Any] = None,
        station_id: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Optional[Callable[[], float]] = None,
        low_water_mark: Optional[int] = None,
        next_count: Optional[int] = None,
        progress_interval: Optional[float] = None
    ):
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.ui = ui or NowPlayingListener()
        self.catalog = catalog
        self.station_id = station_id or self.settings.catalog.station_id or None

        self.low_water_mark = (
            low_water_mark if low_water_mark is not None else self.settings.scheduler.low_water_mark
        )
        self.next_count = next_count or self.settings.catalog.next_count
        self.progress_interval = float(
            progress_interval if progress_interval is not None else self.settings.scheduler.progress_interval
        )

        self._loop = loop
        self._clock = clock or time.monotonic

        self.state = PlayerState.IDLE
        self.pending: Deque[MetadataRecord] = deque()
        self.current_song: Optional[CurrentSong] = None
        self.upcoming: Optional[List[UpcomingSong]] = None

        self._metadata_handle: Optional[asyncio.TimerHandle] = None
        self._progress_handle: Optional[asyncio.TimerHandle] = None
        self.refill_task: Optional[asyncio.Task] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def has_pending_timer(self) -> bool:
        return self._metadata_handle is not None

    @property
    def is_progress_running(self) -> bool:
        return self._progress_handle is not None

    # -- player lifecycle -------------------------------------------------

    def start(self) -> None:
        """Prepare for a new playback session"""
        if self.state in (PlayerState.IDLE, PlayerState.STOPPED):
            self.set_state(PlayerState.BUFFERING)

    def set_state(self, state: PlayerState) -> None:
        """
        Follow the external player's lifecycle

        Entering RUNNING re-applies the queue head, re-arms its timer and
        resumes position extrapolation; leaving RUNNING pauses extrapolation;
        entering STOPPED tears everything down.
        """
        previous = self.state
        self.state = state
        self.logger.debug(f"Player state {previous.value} -> {state.value}")

        if state == PlayerState.RUNNING:
            self.schedule_next()
            if self.current_song is not None and not self.is_progress_running:
                self.start_progress()
        elif state == PlayerState.STOPPED:
            self.stop()
        else:
            self.stop_progress()

    def stop(self) -> None:
        """
        Drop all scheduling state

        Clears the pending queue, cancels the activation timer, the progress
        timer and any catalog refill, and forgets the current song, so no
        stale callback can bring state back after stop.
        """
        self.pending.clear()
        self._cancel_metadata_timer()
        self.stop_progress()

        if self.refill_task is not None:
            self.refill_task.cancel()
            self.refill_task = None

        self.current_song = None
        self.state = PlayerState.STOPPED
        self.logger.debug("Scheduler stopped")

    # -- metadata intake --------------------------------------------------

    def on_tag_bytes(self, data: bytes) -> None:
        """
        Consume one tag buffer from the transport layer

        Buffers without a tag, and bursts whose frames do not form a valid
        record, are dropped without disturbing already scheduled songs.
        """
        if self.state == PlayerState.STOPPED:
            self.logger.debug("Ignoring tag bytes while stopped")
            return

        frames = decode_frames(data)
        if not frames:
            self.logger.debug("No ID3 frames in tag buffer")
            return

        try:
            record = build_record(frames)
        except MetadataError as e:
            self.logger.warning(f"Discarding stream metadata: {e.message}")
            self.logger.debug(f"Metadata error details: {e.details}")
            return

        self.push_record(record)

    def push_record(self, record: MetadataRecord) -> bool:
        """
        Queue a record unless it repeats the tail's segment

        Returns:
            True if the record was queued
        """
        if self.pending and self.pending[-1].segment == record.segment:
            self.logger.debug(f"Duplicate metadata for segment {record.segment}")
            return False

        was_empty = not self.pending
        self.pending.append(record)
        self.logger.debug(f"Queued metadata for segment {record.segment} ({len(self.pending)} pending)")

        if was_empty:
            self.schedule_next()
        return True

    # -- activation -------------------------------------------------------

    def schedule_next(self) -> None:
        """Apply the queue head and arm the single activation timer"""
        if not self.pending:
            return

        record = self.pending[0]
        delay = max(record.activation_delay_ms, 0) / 1000

        self._cancel_metadata_timer()
        self.apply_current_song(record)
        self._metadata_handle = self.loop.call_later(delay, self._on_metadata_timer)

    def _on_metadata_timer(self) -> None:
        self._metadata_handle = None
        if self.pending:
            self.pending.popleft()
        self.schedule_next()

    def _cancel_metadata_timer(self) -> None:
        if self._metadata_handle is not None:
            self._metadata_handle.cancel()
            self._metadata_handle = None

    def apply_current_song(self, record: MetadataRecord) -> bool:
        """
        Make record the current song if its pointer id is new

        Returns:
            True if the song changed
        """
        pointer_id = record.pointer_id
        if self.current_song is not None and self.current_song.id == pointer_id:
            return False

        self.current_song = CurrentSong(
            id=pointer_id,
            artist=record.artist,
            song=record.song,
            position=record.window.start,
            duration=record.duration
        )
        self.logger.info(f"Now playing: {record.artist} - {record.song}")

        self.ui.on_song_changed(self.current_song.snapshot())
        self.ui.on_progress(self.current_song.position, self.current_song.duration)
        if self.state == PlayerState.RUNNING:
            self.start_progress()
        else:
            self.stop_progress()

        self._reconcile_upcoming()
        return True

    # -- position extrapolation ------------------------------------------

    def start_progress(self) -> None:
        """(Re)arm the extrapolation tick measured from now"""
        self.stop_progress()
        last = self._clock()
        self._progress_handle = self.loop.call_later(self.progress_interval, self._progress_tick, last)

    def stop_progress(self) -> None:
        if self._progress_handle is not None:
            self._progress_handle.cancel()
            self._progress_handle = None

    def _progress_tick(self, last: float) -> None:
        self._progress_handle = None
        song = self.current_song
        if song is None:
            return

        song.position += self._clock() - last

        # extrapolation ends once the song should be over
        if song.duration is not None and song.position <= song.duration:
            self.ui.on_progress(song.position, song.duration)
            self.start_progress()

    # -- upcoming list ----------------------------------------------------

    def _reconcile_upcoming(self) -> None:
        """Drop entries up to the current song and refill below the low-water mark"""
        if self.upcoming is None or self.current_song is None:
            return

        found = -1
        for index, song in enumerate(self.upcoming):
            if song.id == self.current_song.id:
                found = index

        if found != -1:
            self.upcoming = self.upcoming[found + 1:]

        if len(self.upcoming) < self.low_water_mark:
            self._request_refill()
        else:
            self.ui.on_upcoming_list_changed(list(self.upcoming))

    def _request_refill(self) -> None:
        if self.catalog is None or not self.station_id:
            self.logger.debug("Upcoming list is low but no catalog is configured")
            self.ui.on_upcoming_list_changed(list(self.upcoming or []))
            return

        if self.refill_task is not None and not self.refill_task.done():
            return

        self.refill_task = self.loop.create_task(self._refill_upcoming())

    async def _refill_upcoming(self) -> None:
        try:
            songs = await self.catalog.fetch_next_songs(self.station_id, self.next_count)
        except CatalogError as e:
            self.logger.warning(f"Could not refill upcoming songs: {e.message}")
            self.logger.debug(f"Catalog error details: {e.details}")
            self.ui.on_notice(e.message)
            return
        finally:
            # a cancelled task must not clear the handle of a newer refill
            if self.refill_task is asyncio.current_task():
                self.refill_task = None

        # the first entry is the song on air
        self.upcoming = list(songs[1:])
        self.ui.on_upcoming_list_changed(list(self.upcoming))

    async def prime_upcoming(self) -> bool:
        """
        Load the upcoming list before any stream metadata has arrived

        The first catalog entry is the song on air; it is shown as a
        provisional now-playing entry (without position) unless stream
        metadata already set a current song, and the rest becomes the
        upcoming list.

        Returns:
            True if the list was loaded
        """
        if self.catalog is None or not self.station_id:
            return False

        try:
            songs = await self.catalog.fetch_next_songs(self.station_id, self.next_count)
        except CatalogError as e:
            self.logger.warning(f"Could not load upcoming songs: {e.message}")
            self.ui.on_notice(e.message)
            return False

        if songs and self.current_song is None:
            on_air = songs[0]
            self.ui.on_song_changed({
                'artist': on_air.artist,
                'song': on_air.title,
                'position': None,
                'duration': None
            })

        self.upcoming = list(songs[1:])
        self.ui.on_upcoming_list_changed(list(self.upcoming))
        return True
