"""
Console now-playing display

Terminal counterpart of the radio widget: prints song changes and the
"coming up" list, and keeps a tqdm progress bar with the extrapolated
position of the current song.
"""

import sys
from typing import Any, Dict, List, Optional, TextIO

import click
from tqdm import tqdm

from ..catalog.models import UpcomingSong
from ..config.settings import get_settings
from ..sync.scheduler import NowPlayingListener
from ..utils.helpers import format_duration, format_position, progress_percent


class ConsoleNowPlaying(NowPlayingListener):
    """Scheduler listener writing to a terminal"""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        show_progress_bar: Optional[bool] = None,
        upcoming_display_count: Optional[int] = None
    ):
        settings = get_settings()
        self.stream = stream or sys.stdout
        self.show_progress_bar = (
            settings.ui.show_progress_bar if show_progress_bar is None else show_progress_bar
        )
        self.upcoming_display_count = upcoming_display_count or settings.ui.upcoming_display_count
        self.progress_bar: Optional[tqdm] = None

    def _echo(self, message: str, **style) -> None:
        text = click.style(message, **style) if style else message
        if self.progress_bar is not None:
            tqdm.write(text, file=self.stream)
        else:
            click.echo(text, file=self.stream)

    def close(self) -> None:
        """Close the progress bar, leaving the terminal on a fresh line"""
        if self.progress_bar is not None:
            self.progress_bar.close()
            self.progress_bar = None

    def on_song_changed(self, song: Dict[str, Any]) -> None:
        self.close()
        artist = song.get('artist') or 'Unknown artist'
        title = song.get('song') or 'Unknown song'
        line = f"♪ {artist} - {title}"
        if song.get('duration'):
            line += f" ({format_duration(song['duration'])})"
        self._echo(line, fg='green', bold=True)

    def on_progress(self, position: float, duration: Optional[float]) -> None:
        if not self.show_progress_bar or not (position and duration):
            return

        if self.progress_bar is None:
            self.progress_bar = tqdm(
                total=100,
                file=self.stream,
                bar_format="{desc} {bar} {percentage:3.0f}%",
                ncols=80,
                leave=False
            )

        self.progress_bar.n = min(progress_percent(position, duration), 100)
        self.progress_bar.set_description_str(f"{format_position(position)} / {format_position(duration)}")
        self.progress_bar.refresh()

    def on_upcoming_list_changed(self, songs: List[UpcomingSong]) -> None:
        if not songs:
            return
        self._echo("Coming up:", fg='cyan')
        for song in songs[:self.upcoming_display_count]:
            self._echo(f"  {song}")

    def on_notice(self, message: str) -> None:
        self._echo(f"! {message}", fg='yellow')
