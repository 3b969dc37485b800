"""Test the station catalog client"""

import asyncio

import aiohttp
import pytest

from radiotag.catalog.client import CatalogClient
from radiotag.catalog.models import Station, UpcomingSong
from radiotag.exceptions import CatalogError


class FakeResponse:
    def __init__(self, status=200, payload=None, error=None):
        self.status = status
        self.payload = payload
        self.error = error

    async def json(self, content_type='application/json'):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        if self.error:
            raise self.error
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.get()"""

    def __init__(self, response):
        self.response = response
        self.requests = []
        self.closed = False

    def get(self, url, params=None):
        self.requests.append((url, params))
        return self.response

    async def close(self):
        self.closed = True


def next_entry(song_id, name="Song", artist="Band", slug="band", ts_start=1700000000):
    return {
        'title': {'id': song_id, 'name': name, 'url': f"/band/{name.lower()}.html"},
        'artist': {'name': artist, 'slug': slug},
        'tsStart': ts_start
    }


def make_client(response):
    session = FakeSession(response)
    client = CatalogClient(
        base_url="https://catalog.example/v2",
        session=session,
        image_base_url="https://img.example/"
    )
    return client, session


class TestModels:
    """Test catalog model factories"""

    def test_station_from_api_data(self):
        station = Station.from_api_data({
            'id': 'st-1',
            'name': 'Radio One',
            'slug': 'radio-one',
            'img': {'default': 'https://img.example/st.png', 'bg-low': 'https://img.example/bg.jpg'}
        })

        assert station.id == 'st-1'
        assert station.name == 'Radio One'
        assert station.image_url == 'https://img.example/st.png'
        assert station.background_url == 'https://img.example/bg.jpg'

    def test_upcoming_song_from_api_data(self):
        song = UpcomingSong.from_api_data(next_entry(42), "https://img.example/")

        assert song.id == '42'
        assert song.title == 'Song'
        assert song.artist == 'Band'
        assert song.ts_start == 1700000000.0
        assert song.image_url == 'https://img.example/band/images/profile.jpg'
        assert str(song).endswith(" Band - Song")

    def test_upcoming_song_without_slug(self):
        song = UpcomingSong.from_api_data(next_entry(1, slug=None, ts_start=None))
        assert song.image_url is None
        assert song.plays_at == "--:--"


class TestCatalogClient:
    """Test catalog requests"""

    @pytest.mark.asyncio
    async def test_fetch_next_songs(self):
        client, session = make_client(FakeResponse(payload={'content': [next_entry(1), next_entry(2)]}))

        songs = await client.fetch_next_songs('st-1', 20)

        assert [song.id for song in songs] == ['1', '2']
        assert session.requests == [("https://catalog.example/v2/st-1/next", {'count': 20})]

    @pytest.mark.asyncio
    async def test_malformed_entries_skipped(self):
        payload = {'content': [next_entry(1), {'title': 'flat'}, None, next_entry(3)]}
        client, _ = make_client(FakeResponse(payload=payload))

        songs = await client.fetch_next_songs('st-1', 20)
        assert [song.id for song in songs] == ['1', '3']

    @pytest.mark.asyncio
    async def test_missing_content(self):
        client, _ = make_client(FakeResponse(payload={'error': 'unknown station'}))

        with pytest.raises(CatalogError) as exc_info:
            await client.fetch_next_songs('st-1', 20)
        assert exc_info.value.is_response_error

    @pytest.mark.asyncio
    async def test_get_station(self):
        client, session = make_client(FakeResponse(payload={'id': 'st-1', 'name': 'Radio One'}))

        station = await client.get_station('st-1')

        assert station.name == 'Radio One'
        assert session.requests[0][0] == "https://catalog.example/v2/st-1"

    @pytest.mark.asyncio
    async def test_get_station_without_id(self):
        client, _ = make_client(FakeResponse(payload={'name': 'Nameless'}))

        with pytest.raises(CatalogError) as exc_info:
            await client.get_station('st-1')
        assert exc_info.value.is_response_error

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client, _ = make_client(FakeResponse(status=503))

        with pytest.raises(CatalogError) as exc_info:
            await client.fetch_next_songs('st-1', 20)
        assert exc_info.value.message == "Could not connect to the server"
        assert exc_info.value.details['status'] == 503
        assert not exc_info.value.is_response_error

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client, _ = make_client(FakeResponse(payload=ValueError("Expecting value")))

        with pytest.raises(CatalogError) as exc_info:
            await client.fetch_next_songs('st-1', 20)
        assert exc_info.value.is_response_error

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client, _ = make_client(FakeResponse(error=aiohttp.ClientConnectionError("refused")))

        with pytest.raises(CatalogError) as exc_info:
            await client.fetch_next_songs('st-1', 20)
        assert not exc_info.value.is_response_error

    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = make_client(FakeResponse(error=asyncio.TimeoutError()))

        with pytest.raises(CatalogError) as exc_info:
            await client.get_station('st-1')
        assert exc_info.value.details['original_error'] == 'TimeoutError'

    @pytest.mark.asyncio
    async def test_injected_session_left_open(self):
        client, session = make_client(FakeResponse(payload={}))

        async with client:
            pass

        assert not session.closed
