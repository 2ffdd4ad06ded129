"""
Track orchestration.

Composes the lyrics provider, the translator, the durable store and the cache
into four workflows:

- save: cache -> provider -> translator -> store -> detached cache write
- get_track / get_artist_tracks: cache -> store -> detached cache write
- delete: store -> detached cache eviction

The cache is cache-aside and advisory: a miss or any cache fault falls back
to the next step, and cache writes run as detached tasks that never block or
fail the caller. Every other collaborator fault is classified into the closed
set of kinds in `errors.py` through the tables below.

The service holds no state of its own beyond its injected collaborators, so
one instance is shared by all requests.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from lyrics.client import LyricsNotFoundError
from translation.client import TranslationFailedError

from . import errors
from .background import DetachedTasks
from .cache import TrackNotCached
from .repository import ArtistTracksNotStored, StoredTrackNotFound, UnknownTrackUUID
from .schemas import Track

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LyricsProvider(Protocol):
    async def fetch(self, artist: str, title: str) -> list[str]: ...


class Translator(Protocol):
    async def translate(self, lines: list[str]) -> list[str]: ...


class TrackStore(Protocol):
    async def save(self, track: Track) -> Track: ...

    async def get_track(self, artist: str, title: str) -> Track: ...

    async def get_artist_tracks(self, artist: str) -> list[Track]: ...

    async def delete(self, track_uuid: str) -> Track: ...


class TrackCache(Protocol):
    async def get_track(self, artist: str, title: str) -> Track: ...

    async def set_track(self, track: Track) -> None: ...

    async def evict_track(self, artist: str, title: str) -> None: ...

    async def get_artist_tracks(self, artist: str) -> list[Track]: ...

    async def set_artist_tracks(self, artist: str, tracks: list[Track]) -> None: ...

    async def evict_artist_tracks(self, artist: str) -> None: ...


ErrorTable = dict[type[Exception], type[errors.TrackServiceError]]

# Recognised collaborator errors -> service error kind. Anything not listed
# falls back to the collaborator's umbrella kind.
PROVIDER_ERRORS: ErrorTable = {
    LyricsNotFoundError: errors.LyricsNotFound,
}

TRANSLATOR_ERRORS: ErrorTable = {
    TranslationFailedError: errors.TranslationFailed,
}

STORE_ERRORS: ErrorTable = {
    StoredTrackNotFound: errors.TrackNotFound,
    ArtistTracksNotStored: errors.ArtistTracksNotFound,
    UnknownTrackUUID: errors.InvalidUUID,
}


def classify(
    exc: Exception,
    table: ErrorTable,
    fallback: type[errors.TrackServiceError],
) -> errors.TrackServiceError:
    for source, kind in table.items():
        if isinstance(exc, source):
            return kind(str(exc))
    return fallback(str(exc) or type(exc).__name__)


class TrackService:
    def __init__(
        self,
        *,
        provider: LyricsProvider,
        translator: Translator,
        store: TrackStore,
        cache: TrackCache,
        background: DetachedTasks,
    ) -> None:
        self._provider = provider
        self._translator = translator
        self._store = store
        self._cache = cache
        self._background = background

    async def save(self, artist: str, title: str, *, timeout: float | None = None) -> Track:
        """
        Fetch, translate and persist a track unless it is already cached.

        A cached pair short-circuits the whole pipeline, so saving the same
        track twice does not hit the provider, the translator or the store.
        """
        async with asyncio.timeout(timeout):
            cached = await self._cache_read("save", lambda: self._cache.get_track(artist, title))
            if cached is not None:
                logger.info("track_save_cached artist=%r title=%r", artist, title)
                return cached

            try:
                lyrics = await self._provider.fetch(artist, title)
            except Exception as exc:
                logger.error("lyrics_fetch_failed artist=%r title=%r error=%s", artist, title, exc)
                raise classify(exc, PROVIDER_ERRORS, errors.ProviderError) from exc
            logger.debug("lyrics_fetched artist=%r title=%r lines=%s", artist, title, len(lyrics))

            try:
                translation = await self._translator.translate(lyrics)
            except Exception as exc:
                logger.error("translate_failed artist=%r title=%r error=%s", artist, title, exc)
                raise classify(exc, TRANSLATOR_ERRORS, errors.TranslatorError) from exc

            if len(translation) != len(lyrics):
                logger.error(
                    "translate_length_mismatch artist=%r title=%r lyrics=%s translation=%s",
                    artist,
                    title,
                    len(lyrics),
                    len(translation),
                )
                raise errors.TranslationFailed(
                    f"Translation has {len(translation)} lines, lyrics has {len(lyrics)}."
                )

            track = Track(artist=artist, title=title, lyrics=lyrics, translation=translation)
            try:
                stored = await self._store.save(track)
            except Exception as exc:
                logger.error("track_persist_failed artist=%r title=%r error=%s", artist, title, exc)
                raise classify(exc, {}, errors.StorageError) from exc

            self._background.spawn(
                f"cache_saved_track:{artist}:{title}",
                self._cache_saved_track(stored),
            )
            logger.info("track_saved artist=%r title=%r uuid=%s", artist, title, stored.uuid)
            return stored

    async def get_track(self, artist: str, title: str, *, timeout: float | None = None) -> Track:
        async with asyncio.timeout(timeout):
            cached = await self._cache_read("get_track", lambda: self._cache.get_track(artist, title))
            if cached is not None:
                logger.info("track_cache_hit artist=%r title=%r", artist, title)
                return cached

            try:
                track = await self._store.get_track(artist, title)
            except Exception as exc:
                logger.error("track_read_failed artist=%r title=%r error=%s", artist, title, exc)
                raise classify(exc, STORE_ERRORS, errors.StorageError) from exc

            self._background.spawn(
                f"cache_track:{artist}:{title}",
                self._cache.set_track(track),
            )
            logger.info("track_read artist=%r title=%r", artist, title)
            return track

    async def get_artist_tracks(self, artist: str, *, timeout: float | None = None) -> list[Track]:
        async with asyncio.timeout(timeout):
            cached = await self._cache_read(
                "get_artist_tracks",
                lambda: self._cache.get_artist_tracks(artist),
            )
            if cached is not None:
                logger.info("artist_tracks_cache_hit artist=%r count=%s", artist, len(cached))
                return cached

            try:
                tracks = await self._store.get_artist_tracks(artist)
            except Exception as exc:
                logger.error("artist_tracks_read_failed artist=%r error=%s", artist, exc)
                raise classify(exc, STORE_ERRORS, errors.StorageError) from exc

            self._background.spawn(
                f"cache_artist_tracks:{artist}",
                self._cache.set_artist_tracks(artist, tracks),
            )
            logger.info("artist_tracks_read artist=%r count=%s", artist, len(tracks))
            return tracks

    async def delete(self, track_uuid: str, *, timeout: float | None = None) -> None:
        async with asyncio.timeout(timeout):
            try:
                deleted = await self._store.delete(track_uuid)
            except Exception as exc:
                logger.error("track_delete_failed uuid=%r error=%s", track_uuid, exc)
                raise classify(exc, STORE_ERRORS, errors.StorageError) from exc

            self._background.spawn(
                f"evict_deleted_track:{track_uuid}",
                self._evict_deleted_track(deleted),
            )
            logger.info("track_deleted uuid=%r", track_uuid)

    async def _cache_read(self, op: str, read: Callable[[], Awaitable[T]]) -> T | None:
        """
        Return the cached value, or None on a miss or any cache fault.
        """
        try:
            return await read()
        except TrackNotCached:
            logger.debug("cache_miss op=%s", op)
        except Exception as exc:
            logger.warning("cache_read_failed op=%s error=%s", op, exc)
        return None

    async def _cache_saved_track(self, track: Track) -> None:
        await self._cache.set_track(track)
        # The artist's cached list no longer includes this track.
        await self._cache.evict_artist_tracks(track.artist)

    async def _evict_deleted_track(self, track: Track) -> None:
        await self._cache.evict_track(track.artist, track.title)
        await self._cache.evict_artist_tracks(track.artist)
