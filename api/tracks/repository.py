"""
Track persistence (raw SQL over asyncpg).

Lookups are case-insensitive on artist and title. The `(lower(artist),
lower(title))` unique index makes `save` an upsert, so repeated or racing
saves for the same pair keep a single row and a stable uuid.
"""

from __future__ import annotations

import logging
import uuid as uuid_lib
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import asyncpg

from core import db

from .schemas import Track

logger = logging.getLogger(__name__)


class TrackStoreError(RuntimeError):
    pass


class StoredTrackNotFound(TrackStoreError):
    pass


class ArtistTracksNotStored(TrackStoreError):
    pass


class UnknownTrackUUID(TrackStoreError):
    pass


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS songs (
    uuid uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    artist text NOT NULL,
    title text NOT NULL,
    lyrics text[] NOT NULL,
    translation text[] NOT NULL,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE UNIQUE INDEX IF NOT EXISTS songs_artist_title_key
    ON songs (lower(artist), lower(title));

CREATE INDEX IF NOT EXISTS songs_artist_idx
    ON songs (lower(artist), created_at);
"""


@contextmanager
def _driver_errors(op: str) -> Iterator[None]:
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        raise TrackStoreError(f"{op}: {exc}") from exc


def _row_to_track(row: dict[str, Any]) -> Track:
    return Track(
        uuid=str(row["uuid"]),
        artist=str(row["artist"]),
        title=str(row["title"]),
        lyrics=list(row["lyrics"] or []),
        translation=list(row["translation"] or []),
    )


class TrackRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def ensure_schema(self) -> None:
        with _driver_errors("ensure_schema"):
            await self._pool.execute(SCHEMA_SQL)

    async def ping(self) -> None:
        with _driver_errors("ping"):
            await self._pool.fetchval("SELECT 1")

    async def save(self, track: Track) -> Track:
        """
        Insert the track, or refresh lyrics/translation of an existing row
        with the same case-insensitive key. Returns the stored row.
        """
        with _driver_errors("save"):
            row = await self._pool.fetchrow(
                """
                INSERT INTO songs (artist, title, lyrics, translation)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (lower(artist), lower(title)) DO UPDATE
                SET lyrics = EXCLUDED.lyrics,
                    translation = EXCLUDED.translation
                RETURNING uuid, artist, title, lyrics, translation
                """,
                track.artist,
                track.title,
                track.lyrics,
                track.translation,
            )
        if row is None:
            raise TrackStoreError("save: insert returned no row.")
        return _row_to_track(db.record_to_dict(row))

    async def get_track(self, artist: str, title: str) -> Track:
        with _driver_errors("get_track"):
            row = await self._pool.fetchrow(
                """
                SELECT uuid, artist, title, lyrics, translation
                FROM songs
                WHERE lower(artist) = lower($1)
                  AND lower(title) = lower($2)
                LIMIT 1
                """,
                artist.strip(),
                title.strip(),
            )
        if row is None:
            raise StoredTrackNotFound(f"No stored track for {artist!r} - {title!r}.")
        return _row_to_track(db.record_to_dict(row))

    async def get_artist_tracks(self, artist: str) -> list[Track]:
        with _driver_errors("get_artist_tracks"):
            rows = await self._pool.fetch(
                """
                SELECT uuid, artist, title, lyrics, translation
                FROM songs
                WHERE lower(artist) = lower($1)
                ORDER BY created_at ASC, uuid ASC
                """,
                artist.strip(),
            )
        if not rows:
            raise ArtistTracksNotStored(f"No stored tracks for {artist!r}.")
        return [_row_to_track(db.record_to_dict(r)) for r in rows]

    async def delete(self, track_uuid: str) -> Track:
        """
        Delete by uuid and return the removed row.
        """
        try:
            parsed = uuid_lib.UUID(str(track_uuid).strip())
        except ValueError as exc:
            raise UnknownTrackUUID(f"Malformed uuid {track_uuid!r}.") from exc

        with _driver_errors("delete"):
            row = await self._pool.fetchrow(
                """
                DELETE FROM songs
                WHERE uuid = $1
                RETURNING uuid, artist, title, lyrics, translation
                """,
                parsed,
            )
        if row is None:
            raise UnknownTrackUUID(f"No track with uuid {track_uuid!r}.")
        logger.info("track_deleted uuid=%s", parsed)
        return _row_to_track(db.record_to_dict(row))
