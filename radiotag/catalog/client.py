"""
Asynchronous client for the station catalog API

The catalog is the out-of-band source of station details and of the list of
songs a station will play next. The metadata scheduler calls
fetch_next_songs() whenever its "coming up" list runs low; the CLI uses
get_station() to introduce the station it is following.

Endpoints (relative to the configured base URL):

    GET {station_id}                  -> {"id", "name", "slug", "img": {...}}
    GET {station_id}/next?count=N     -> {"content": [ {title, artist, tsStart}, ... ]}

Error handling:
- Transport failures, timeouts and non-200 answers raise CatalogError
- Answers that are not JSON objects of the expected shape raise CatalogError
  with is_response_error set
- Individual list entries that cannot be parsed are skipped and logged

The client owns an aiohttp session unless one is injected, and is meant to
be used as an async context manager so the session is closed with it.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from ..config.settings import get_settings
from ..exceptions import CatalogError
from ..utils.logger import get_logger
from .models import Station, UpcomingSong


REQUEST_ERROR_MESSAGE = "Could not connect to the server"
RESPONSE_ERROR_MESSAGE = "Unexpected response from the server"


class CatalogClient:
    """
    Station catalog client

    Example:
        async with CatalogClient() as catalog:
            station = await catalog.get_station("radio-id")
            songs = await catalog.fetch_next_songs(station.id, 20)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        image_base_url: Optional[str] = None
    ):
        """
        Initialize catalog client from settings, with optional overrides

        Args:
            base_url: Catalog root URL, defaults to catalog.base_url
            session: Existing aiohttp session to use instead of an owned one
            timeout: Total request timeout in seconds, defaults to network.request_timeout
            user_agent: User-Agent header, defaults to network.user_agent
            image_base_url: Host serving artist pictures
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        base_url = base_url or self.settings.catalog.base_url
        self.base_url = base_url.rstrip('/') + '/'
        self.timeout = timeout if timeout is not None else self.settings.network.request_timeout
        self.user_agent = user_agent or self.settings.network.user_agent
        self.image_base_url = image_base_url or self.settings.catalog.image_base_url

        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Lazily created HTTP session, bound to the running event loop"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent}
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the owned HTTP session, leaving injected sessions alone"""
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self) -> 'CatalogClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a catalog path and decode its JSON body

        Raises:
            CatalogError: On transport errors, non-200 status or invalid JSON
        """
        url = f"{self.base_url}{path}"
        self.logger.debug(f"Catalog request: {url} {params or ''}")

        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    raise CatalogError(
                        REQUEST_ERROR_MESSAGE,
                        details={'url': url, 'status': response.status}
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise CatalogError(
                        RESPONSE_ERROR_MESSAGE,
                        details={'url': url, 'original_error': str(e)},
                        is_response_error=True
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CatalogError(
                REQUEST_ERROR_MESSAGE,
                details={'url': url, 'original_error': str(e) or type(e).__name__}
            )

    async def get_station(self, station_id: str) -> Station:
        """
        Fetch station details

        Args:
            station_id: Catalog identifier of the station

        Returns:
            Station instance

        Raises:
            CatalogError: If the request fails or the answer has no station id
        """
        data = await self._get_json(station_id)

        if not isinstance(data, dict) or not data.get('id'):
            raise CatalogError(
                RESPONSE_ERROR_MESSAGE,
                details={'station_id': station_id},
                is_response_error=True
            )

        station = Station.from_api_data(data)
        self.logger.info(f"Loaded station {station.id} ({station.name})")
        return station

    async def fetch_next_songs(self, station_id: str, count: Optional[int] = None) -> List[UpcomingSong]:
        """
        Fetch the songs a station will play next

        The first entry of the answer is the song currently on air.

        Args:
            station_id: Catalog identifier of the station
            count: Number of songs to request, defaults to catalog.next_count

        Returns:
            Upcoming songs in play order

        Raises:
            CatalogError: If the request fails or the answer has no content list
        """
        count = count or self.settings.catalog.next_count
        data = await self._get_json(f"{station_id}/next", params={'count': count})

        content = data.get('content') if isinstance(data, dict) else None
        if not isinstance(content, list):
            raise CatalogError(
                RESPONSE_ERROR_MESSAGE,
                details={'station_id': station_id},
                is_response_error=True
            )

        songs = []
        for entry in content:
            try:
                songs.append(UpcomingSong.from_api_data(entry, self.image_base_url))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                self.logger.debug(f"Skipping malformed upcoming entry {entry!r}: {e}")

        self.logger.debug(f"Fetched {len(songs)} upcoming songs for {station_id}")
        return songs
