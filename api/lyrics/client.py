"""
lyrics.ovh HTTP client.

Used endpoint:
- GET /v1/{artist}/{title}  -> {"lyrics": "..."} or 404 {"error": "No lyrics found"}
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from core import settings

logger = logging.getLogger(__name__)


# Provider failures are explicit and separable from other runtime errors.
class LyricsProviderError(RuntimeError):
    pass


class LyricsNotFoundError(LyricsProviderError):
    pass


def format_lyrics(text: str) -> list[str]:
    """
    Split raw lyrics into trimmed, non-empty lines.
    """
    normalized = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return [line.strip() for line in normalized.split("\n") if line.strip()]


class LyricsOvhClient:
    def __init__(self, http: httpx.AsyncClient, *, base_url: str | None = None) -> None:
        self._http = http
        self._base_url = (base_url or settings.lyrics_api_base_url()).rstrip("/")

    def _url(self, artist: str, title: str) -> str:
        return f"{self._base_url}/{quote(artist.strip(), safe='')}/{quote(title.strip(), safe='')}"

    async def fetch(self, artist: str, title: str) -> list[str]:
        url = self._url(artist, title)
        logger.info("lyrics_fetch artist=%r title=%r", artist, title)

        try:
            resp = await self._http.get(url)
        except httpx.HTTPError as exc:
            raise LyricsProviderError(f"lyrics.ovh request failed: {exc}") from exc

        if resp.status_code == 404:
            raise LyricsNotFoundError(f"No lyrics for {artist!r} - {title!r}.")
        if resp.status_code != 200:
            # Avoid dumping huge bodies; include a small snippet.
            raise LyricsProviderError(f"lyrics.ovh request failed: {resp.status_code} {resp.text[:300]}")

        try:
            data: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise LyricsProviderError("lyrics.ovh returned a non-JSON body.") from exc
        if not isinstance(data, dict):
            raise LyricsProviderError("lyrics.ovh returned an unexpected body.")

        error = str(data.get("error") or "").strip()
        lyrics = format_lyrics(str(data.get("lyrics") or ""))
        if not lyrics:
            if error and "not found" not in error.lower() and "no lyrics" not in error.lower():
                raise LyricsProviderError(f"lyrics.ovh error: {error}")
            raise LyricsNotFoundError(f"No lyrics for {artist!r} - {title!r}.")
        if error:
            raise LyricsProviderError(f"lyrics.ovh error: {error}")

        logger.debug("lyrics_fetched artist=%r title=%r lines=%s", artist, title, len(lyrics))
        return lyrics
