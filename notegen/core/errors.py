"""
Error taxonomy for the note generator.

Every failure a run can surface is one of these. Steps raise them, the
pipeline lets them through unchanged, and callers show `str(error)` to the
user.
"""
from typing import Optional


class NoteGenError(Exception):
    """Base class for all note generator errors."""


class ConfigurationError(NoteGenError, ValueError):
    """A required credential is missing or still the placeholder value."""


class ValidationError(NoteGenError, ValueError):
    """Caller-supplied input is invalid. Raised before any network call."""


class AuthError(NoteGenError):
    """A collaborator rejected the credentials."""


class NotAuthenticated(AuthError):
    """No saved session cookie is available."""


class SessionExpired(AuthError):
    """The saved session was redirected to a login page."""


class UpstreamError(NoteGenError):
    """A collaborator answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResearchUnavailable(UpstreamError):
    """The web-search collaborator is unconfigured or failed."""


class MalformedResponse(NoteGenError):
    """A structured reply could not be parsed or failed its schema."""


class NetworkError(NoteGenError):
    """Transport-level failure talking to a collaborator."""
