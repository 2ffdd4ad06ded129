"""
Error kinds surfaced by the track service.

This is a closed set: collaborator failures are classified into one of these
before they leave `service.py`, so callers never see driver or HTTP client
exceptions. Cache faults are not part of it; they are absorbed inside the
service.
"""

from __future__ import annotations


class TrackServiceError(Exception):
    """Base for every failure the track service reports."""


# Known business outcomes.
class LyricsNotFound(TrackServiceError):
    pass


class TranslationFailed(TrackServiceError):
    pass


class TrackNotFound(TrackServiceError):
    pass


class ArtistTracksNotFound(TrackServiceError):
    pass


class InvalidUUID(TrackServiceError):
    pass


# Unexpected backend faults, one umbrella per collaborator.
class ProviderError(TrackServiceError):
    pass


class TranslatorError(TrackServiceError):
    pass


class StorageError(TrackServiceError):
    pass
