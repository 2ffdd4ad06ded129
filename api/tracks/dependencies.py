"""
FastAPI dependencies for the track endpoints.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from .service import TrackService


def get_track_service(request: Request) -> TrackService:
    service = getattr(request.app.state, "track_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Track service is not initialized.",
        )
    return service
