"""
Redis-backed track cache.

Keys:
- track:<artist>:<title>   -> one Track as JSON
- artist_tracks:<artist>   -> list of Track as JSON

Both parts are stripped, lower-cased and percent-encoded so lookups match the store's
case-insensitive identity. The cache is advisory: callers treat every error
from here as "not cached".
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from urllib.parse import quote

import redis.asyncio as redis
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from .schemas import Track

_TRACK_LIST = TypeAdapter(list[Track])


class TrackCacheError(RuntimeError):
    pass


class TrackNotCached(TrackCacheError):
    pass


def _norm(value: str) -> str:
    # Percent-encoded so a ":" inside a name cannot shift the key boundary.
    return quote((value or "").strip().lower(), safe="")


def track_key(artist: str, title: str) -> str:
    return f"track:{_norm(artist)}:{_norm(title)}"


def artist_tracks_key(artist: str) -> str:
    return f"artist_tracks:{_norm(artist)}"


@contextmanager
def _backend_errors(op: str) -> Iterator[None]:
    try:
        yield
    except (RedisError, OSError) as exc:
        raise TrackCacheError(f"{op}: {exc}") from exc
    except ValidationError as exc:
        raise TrackCacheError(f"{op}: cached value does not decode: {exc}") from exc


class RedisTrackCache:
    def __init__(self, client: redis.Redis, *, ttl_s: int = 0) -> None:
        self._client = client
        self._ttl_s = ttl_s

    async def _set(self, key: str, value: str) -> None:
        if self._ttl_s > 0:
            await self._client.set(key, value, ex=self._ttl_s)
        else:
            await self._client.set(key, value)

    async def get_track(self, artist: str, title: str) -> Track:
        key = track_key(artist, title)
        with _backend_errors("get_track"):
            raw = await self._client.get(key)
            if raw is None:
                raise TrackNotCached(key)
            return Track.model_validate_json(raw)

    async def set_track(self, track: Track) -> None:
        with _backend_errors("set_track"):
            await self._set(track_key(track.artist, track.title), track.model_dump_json())

    async def evict_track(self, artist: str, title: str) -> None:
        with _backend_errors("evict_track"):
            await self._client.delete(track_key(artist, title))

    async def get_artist_tracks(self, artist: str) -> list[Track]:
        key = artist_tracks_key(artist)
        with _backend_errors("get_artist_tracks"):
            raw = await self._client.get(key)
            if raw is None:
                raise TrackNotCached(key)
            return _TRACK_LIST.validate_json(raw)

    async def set_artist_tracks(self, artist: str, tracks: list[Track]) -> None:
        with _backend_errors("set_artist_tracks"):
            await self._set(artist_tracks_key(artist), _TRACK_LIST.dump_json(tracks).decode("utf-8"))

    async def evict_artist_tracks(self, artist: str) -> None:
        with _backend_errors("evict_artist_tracks"):
            await self._client.delete(artist_tracks_key(artist))

    async def ping(self) -> None:
        with _backend_errors("ping"):
            await self._client.ping()
