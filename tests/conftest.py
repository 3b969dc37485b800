"""Test configuration and fixtures"""

import json

import pytest

from radiotag.catalog.models import UpcomingSong
from radiotag.exceptions import CatalogError
from radiotag.sync.scheduler import NowPlayingListener


class TagBuilder:
    """Builds ID3v2.4 byte buffers the way HLS packagers emit them"""

    @staticmethod
    def synchsafe(value):
        return bytes([(value >> 21) & 0x7F, (value >> 14) & 0x7F, (value >> 7) & 0x7F, value & 0x7F])

    def frame(self, key, payload):
        return key.encode('latin-1') + self.synchsafe(len(payload)) + b'\x00\x00' + payload

    def text(self, key, value):
        return self.frame(key, b'\x03' + value.encode('utf-8'))

    def described(self, key, description, value):
        return self.frame(key, b'\x03' + description.encode('utf-8') + b'\x00' + value.encode('utf-8'))

    def url(self, key, value):
        return self.frame(key, value.encode('utf-8'))

    def private(self, owner, data):
        return self.frame('PRIV', owner.encode('latin-1') + b'\x00' + data)

    def tag(self, *frames, footer=False):
        body = b''.join(frames)
        flags = b'\x10' if footer else b'\x00'
        data = b'ID3\x04\x00' + flags + self.synchsafe(len(body)) + body
        if footer:
            data += b'3DI\x04\x00' + flags + self.synchsafe(len(body))
        return data

    def song(self, pointer_id, segment, start=0, end=180, artist="Band", song="Song", duration="180.0"):
        """One complete metadata burst"""
        return self.tag(
            self.text('TPE1', artist),
            self.text('TIT2', song),
            self.text('TLEN', duration),
            self.text('TOFN', segment),
            self.text('TIME', json.dumps({'start': start, 'end': end})),
            self.described('TXXX', '', json.dumps({'pointerID': pointer_id}))
        )


class RecordingListener(NowPlayingListener):
    """Listener keeping every notification for assertions"""

    def __init__(self):
        self.songs = []
        self.progress = []
        self.upcoming = []
        self.notices = []

    def on_song_changed(self, song):
        self.songs.append(song)

    def on_progress(self, position, duration):
        self.progress.append((position, duration))

    def on_upcoming_list_changed(self, songs):
        self.upcoming.append([song.id for song in songs])

    def on_notice(self, message):
        self.notices.append(message)


class FakeCatalog:
    """Catalog double answering fetch_next_songs from a list"""

    def __init__(self, song_ids=None, error=None):
        self.song_ids = song_ids or []
        self.error = error
        self.calls = []

    async def fetch_next_songs(self, station_id, count=None):
        self.calls.append((station_id, count))
        if self.error:
            raise self.error
        return [make_upcoming(song_id) for song_id in self.song_ids]


def make_upcoming(song_id):
    return UpcomingSong(id=str(song_id), title=f"Title {song_id}", artist=f"Artist {song_id}")


class StepClock:
    """Clock advancing one second per reading"""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        value = self.now
        self.now += 1.0
        return value


@pytest.fixture
def tags():
    """ID3 byte buffer builder"""
    return TagBuilder()


@pytest.fixture
def recorder():
    """Recording scheduler listener"""
    return RecordingListener()


@pytest.fixture
def upcoming_songs():
    """Factory for upcoming song lists"""
    def factory(*song_ids):
        return [make_upcoming(song_id) for song_id in song_ids]
    return factory


@pytest.fixture
def catalog_factory():
    """Factory for catalog doubles"""
    def factory(song_ids=None, fail=False):
        error = CatalogError("Could not connect to the server") if fail else None
        return FakeCatalog(song_ids=song_ids, error=error)
    return factory


@pytest.fixture
def step_clock():
    return StepClock()
