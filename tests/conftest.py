"""
Shared fixtures: in-memory stand-ins for the four track collaborators.

The doubles raise the same error types as the real clients so the service's
classification tables are exercised end to end.
"""

from __future__ import annotations

import asyncio
import uuid

import pytest

from lyrics.client import LyricsNotFoundError
from tracks.background import DetachedTasks
from tracks.cache import TrackNotCached, artist_tracks_key, track_key
from tracks.repository import ArtistTracksNotStored, StoredTrackNotFound, UnknownTrackUUID
from tracks.schemas import Track
from tracks.service import TrackService

# =============================================================================
# Test doubles
# =============================================================================


class FakeProvider:
    def __init__(self, lyrics: dict[tuple[str, str], list[str]] | None = None) -> None:
        self.lyrics = lyrics or {}
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def fetch(self, artist: str, title: str) -> list[str]:
        self.calls.append((artist, title))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        try:
            return list(self.lyrics[(artist.lower(), title.lower())])
        except KeyError:
            raise LyricsNotFoundError(f"{artist} - {title}") from None


class FakeTranslator:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.error: Exception | None = None
        self.drop_last_line = False

    async def translate(self, lines: list[str]) -> list[str]:
        self.calls.append(list(lines))
        if self.error is not None:
            raise self.error
        translated = [f"ru:{line}" for line in lines]
        return translated[:-1] if self.drop_last_line else translated


class FakeStore:
    def __init__(self) -> None:
        self.rows: list[Track] = []
        self.save_calls: list[Track] = []
        self.read_calls = 0
        self.error: Exception | None = None

    def add(self, track: Track) -> Track:
        stored = track.model_copy(update={"uuid": str(uuid.uuid4())})
        self.rows.append(stored)
        return stored

    async def save(self, track: Track) -> Track:
        self.save_calls.append(track)
        if self.error is not None:
            raise self.error
        return self.add(track)

    async def get_track(self, artist: str, title: str) -> Track:
        self.read_calls += 1
        if self.error is not None:
            raise self.error
        for row in self.rows:
            if row.artist.lower() == artist.lower() and row.title.lower() == title.lower():
                return row
        raise StoredTrackNotFound(f"{artist} - {title}")

    async def get_artist_tracks(self, artist: str) -> list[Track]:
        self.read_calls += 1
        if self.error is not None:
            raise self.error
        found = [row for row in self.rows if row.artist.lower() == artist.lower()]
        if not found:
            raise ArtistTracksNotStored(artist)
        return found

    async def delete(self, track_uuid: str) -> Track:
        if self.error is not None:
            raise self.error
        for row in self.rows:
            if row.uuid == track_uuid:
                self.rows.remove(row)
                return row
        raise UnknownTrackUUID(track_uuid)


class FakeCache:
    def __init__(self) -> None:
        self.data: dict[str, object] = {}
        self.writes: list[str] = []
        self.evictions: list[str] = []
        self.read_error: Exception | None = None
        self.write_error: Exception | None = None
        self.write_gate: asyncio.Event | None = None

    async def _write(self, key: str, value: object) -> None:
        self.writes.append(key)
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.write_error is not None:
            raise self.write_error
        self.data[key] = value

    async def get_track(self, artist: str, title: str) -> Track:
        if self.read_error is not None:
            raise self.read_error
        key = track_key(artist, title)
        if key not in self.data:
            raise TrackNotCached(key)
        return self.data[key]  # type: ignore[return-value]

    async def set_track(self, track: Track) -> None:
        await self._write(track_key(track.artist, track.title), track)

    async def evict_track(self, artist: str, title: str) -> None:
        key = track_key(artist, title)
        self.evictions.append(key)
        self.data.pop(key, None)

    async def get_artist_tracks(self, artist: str) -> list[Track]:
        if self.read_error is not None:
            raise self.read_error
        key = artist_tracks_key(artist)
        if key not in self.data:
            raise TrackNotCached(key)
        return self.data[key]  # type: ignore[return-value]

    async def set_artist_tracks(self, artist: str, tracks: list[Track]) -> None:
        await self._write(artist_tracks_key(artist), list(tracks))

    async def evict_artist_tracks(self, artist: str) -> None:
        key = artist_tracks_key(artist)
        self.evictions.append(key)
        self.data.pop(key, None)

    async def ping(self) -> None:
        if self.read_error is not None:
            raise self.read_error


# =============================================================================
# Fixtures
# =============================================================================

HELLO_LYRICS = [
    "Hello, it's me",
    "I was wondering if after all these years you'd like to meet",
    "To go over everything",
]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider({("adele", "hello"): HELLO_LYRICS})


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
async def background() -> DetachedTasks:
    tasks = DetachedTasks(timeout_s=5.0)
    yield tasks
    await tasks.aclose(timeout_s=1.0)


@pytest.fixture
def service(
    provider: FakeProvider,
    translator: FakeTranslator,
    store: FakeStore,
    cache: FakeCache,
    background: DetachedTasks,
) -> TrackService:
    return TrackService(
        provider=provider,
        translator=translator,
        store=store,
        cache=cache,
        background=background,
    )
