"""
Lyrics API endpoints.

Service error kinds are mapped to status codes here and nowhere else.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core import settings

from . import errors
from .dependencies import get_track_service
from .schemas import DeleteTrackResponse, SaveTrackRequest, Track
from .service import TrackService

router = APIRouter()

STATUS_BY_ERROR: dict[type[errors.TrackServiceError], int] = {
    errors.LyricsNotFound: status.HTTP_404_NOT_FOUND,
    errors.TrackNotFound: status.HTTP_404_NOT_FOUND,
    errors.ArtistTracksNotFound: status.HTTP_404_NOT_FOUND,
    errors.InvalidUUID: status.HTTP_400_BAD_REQUEST,
    errors.TranslationFailed: status.HTTP_400_BAD_REQUEST,
    errors.ProviderError: status.HTTP_502_BAD_GATEWAY,
    errors.TranslatorError: status.HTTP_502_BAD_GATEWAY,
    errors.StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

DETAIL_BY_ERROR: dict[type[errors.TrackServiceError], str] = {
    errors.LyricsNotFound: "Lyrics not found.",
    errors.TrackNotFound: "Track not found.",
    errors.ArtistTracksNotFound: "Artist's tracks not found.",
    errors.InvalidUUID: "Invalid uuid.",
    errors.TranslationFailed: "Failed to translate lyrics.",
    errors.ProviderError: "Lyrics provider error.",
    errors.TranslatorError: "Translator error.",
    errors.StorageError: "Internal error.",
}


def _to_http(exc: errors.TrackServiceError | TimeoutError) -> HTTPException:
    if isinstance(exc, TimeoutError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="Request timed out.")
    kind = type(exc)
    return HTTPException(
        status_code=STATUS_BY_ERROR.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=DETAIL_BY_ERROR.get(kind, "Internal error."),
    )


@router.post("/lyrics", status_code=status.HTTP_201_CREATED)
async def save_lyrics(
    request: SaveTrackRequest,
    service: TrackService = Depends(get_track_service),
) -> Track:
    try:
        return await service.save(
            request.artist.strip(),
            request.title.strip(),
            timeout=settings.request_timeout_s(),
        )
    except (errors.TrackServiceError, TimeoutError) as exc:
        raise _to_http(exc) from exc


@router.get("/lyrics")
async def get_lyrics(
    artist: str = Query(..., min_length=1, max_length=300),
    title: str | None = Query(default=None, max_length=300),
    service: TrackService = Depends(get_track_service),
) -> Track | list[Track]:
    """
    One track when `title` is given, otherwise every stored track of the artist.
    """
    artist = artist.strip()
    title = (title or "").strip()
    if not artist:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="artist is required.")

    try:
        if not title:
            return await service.get_artist_tracks(artist, timeout=settings.request_timeout_s())
        return await service.get_track(artist, title, timeout=settings.request_timeout_s())
    except (errors.TrackServiceError, TimeoutError) as exc:
        raise _to_http(exc) from exc


@router.delete("/lyrics/{track_uuid}")
async def delete_lyrics(
    track_uuid: str,
    service: TrackService = Depends(get_track_service),
) -> DeleteTrackResponse:
    try:
        await service.delete(track_uuid, timeout=settings.request_timeout_s())
    except (errors.TrackServiceError, TimeoutError) as exc:
        raise _to_http(exc) from exc
    return DeleteTrackResponse()
