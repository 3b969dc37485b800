"""Test the console now-playing display"""

import io

from radiotag.catalog.models import UpcomingSong
from radiotag.ui.console import ConsoleNowPlaying


def make_console(**kwargs):
    stream = io.StringIO()
    return ConsoleNowPlaying(stream=stream, **kwargs), stream


class TestConsoleNowPlaying:
    """Test console rendering of scheduler notifications"""

    def test_song_changed(self):
        console, stream = make_console()
        console.on_song_changed({'artist': 'Band', 'song': 'Song', 'position': 0, 'duration': 180})
        assert "♪ Band - Song" in stream.getvalue()

    def test_song_changed_without_fields(self):
        console, stream = make_console()
        console.on_song_changed({'artist': None, 'song': None, 'position': None, 'duration': None})
        assert "Unknown artist - Unknown song" in stream.getvalue()

    def test_progress_bar(self):
        console, stream = make_console(show_progress_bar=True)

        console.on_progress(0, 180)
        assert console.progress_bar is None

        console.on_progress(90, 180)
        assert console.progress_bar is not None
        assert console.progress_bar.n == 50
        assert "01:30 / 03:00" in stream.getvalue()

        console.close()
        assert console.progress_bar is None

    def test_progress_bar_disabled(self):
        console, _ = make_console(show_progress_bar=False)
        console.on_progress(90, 180)
        assert console.progress_bar is None

    def test_upcoming_list(self):
        console, stream = make_console(upcoming_display_count=2)
        songs = [UpcomingSong(id=str(i), title=f"Title {i}", artist=f"Artist {i}") for i in range(3)]

        console.on_upcoming_list_changed(songs)

        output = stream.getvalue()
        assert "Coming up:" in output
        assert "Artist 1 - Title 1" in output
        assert "Artist 2" not in output

    def test_notice(self):
        console, stream = make_console()
        console.on_notice("Could not connect to the server")
        assert "! Could not connect to the server" in stream.getvalue()

    def test_song_changed_shows_duration(self):
        console, stream = make_console()
        console.on_song_changed({'artist': 'Band', 'song': 'Song', 'position': 0, 'duration': 180})
        assert "(3:00)" in stream.getvalue()
