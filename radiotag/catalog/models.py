"""
Data models for station catalog responses

The catalog answers two questions: what a station is (name, artwork) and
which songs it will play next. Both models are built with from_api_data()
factories that raise KeyError/TypeError on payloads missing mandatory
fields; the client turns those into skipped entries or CatalogError.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils.helpers import format_clock


DEFAULT_IMAGE_BASE_URL = "https://s2.vagalume.com/"


@dataclass
class Station:
    """
    Radio station description

    Attributes:
        id: Catalog identifier, also used in the stream and "next" URLs
        name: Display name
        slug: URL friendly name
        image_url: Station artwork
        background_url: Low resolution background artwork
    """
    id: str
    name: str
    slug: Optional[str] = None
    image_url: Optional[str] = None
    background_url: Optional[str] = None

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'Station':
        """
        Factory method to construct a Station from a catalog response

        Args:
            data: Decoded JSON object of the station endpoint

        Returns:
            Station instance
        """
        images = data.get('img') or {}
        return cls(
            id=str(data['id']),
            name=data.get('name') or str(data['id']),
            slug=data.get('slug'),
            image_url=images.get('default'),
            background_url=images.get('bg-low')
        )


@dataclass
class UpcomingSong:
    """
    One entry of the "coming up" list

    Attributes:
        id: Song pointer id, compared against the pointer id carried in the
            stream metadata to find what is already playing
        title: Song title
        artist: Artist name
        title_url: Song page
        artist_slug: URL friendly artist name, used to derive artwork
        ts_start: Scheduled start in seconds since the epoch
        image_url: Artist picture
    """
    id: str
    title: str
    artist: str
    title_url: Optional[str] = None
    artist_slug: Optional[str] = None
    ts_start: Optional[float] = None
    image_url: Optional[str] = None

    @classmethod
    def from_api_data(cls, data: Dict[str, Any], image_base_url: str = DEFAULT_IMAGE_BASE_URL) -> 'UpcomingSong':
        """
        Factory method to construct an UpcomingSong from a "next" entry

        The entry nests title and artist objects:
        {"title": {"id", "name", "url"}, "artist": {"name", "slug"}, "tsStart"}

        Args:
            data: One element of the response's content list
            image_base_url: Host serving artist pictures

        Returns:
            UpcomingSong instance
        """
        title = data['title']
        artist = data['artist']
        slug = artist.get('slug')
        ts_start = data.get('tsStart')

        return cls(
            id=str(title['id']),
            title=title['name'],
            artist=artist['name'],
            title_url=title.get('url'),
            artist_slug=slug,
            ts_start=float(ts_start) if ts_start is not None else None,
            image_url=f"{image_base_url}{slug}/images/profile.jpg" if slug else None
        )

    @property
    def plays_at(self) -> str:
        """Local "HH:MM" clock time the song is scheduled to start"""
        return format_clock(self.ts_start)

    def __str__(self) -> str:
        return f"{self.plays_at} {self.artist} - {self.title}"
