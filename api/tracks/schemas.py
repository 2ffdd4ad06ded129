"""
Track data model and API request schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Track(BaseModel):
    artist: str
    title: str
    lyrics: list[str]
    translation: list[str]
    # Deletion handle assigned by the store; None until persisted.
    uuid: str | None = None

    @model_validator(mode="after")
    def _translation_matches_lyrics(self) -> Track:
        if len(self.translation) != len(self.lyrics):
            raise ValueError(
                f"translation has {len(self.translation)} lines, lyrics has {len(self.lyrics)}"
            )
        return self


class SaveTrackRequest(BaseModel):
    # Whitespace-only names strip to "" and fail min_length.
    model_config = ConfigDict(str_strip_whitespace=True)

    artist: str = Field(..., min_length=1, max_length=300)
    title: str = Field(..., min_length=1, max_length=300)


class DeleteTrackResponse(BaseModel):
    ok: bool = True
