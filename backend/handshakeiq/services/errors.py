from __future__ import annotations


class HandshakeError(Exception):
    """Base class for recoverable pipeline failures."""


class SearchUnavailable(HandshakeError):
    """The web-search API was unreachable, timed out, or returned an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoCandidatesFound(HandshakeError):
    """Search succeeded but no person candidate could be extracted."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No person candidates found for '{name}'")
        self.name = name


class ModelUnavailable(HandshakeError):
    """The generative-model API was unreachable, timed out, or rejected the call."""


class UnparsableReport(HandshakeError):
    """The model answered, but not with a JSON object matching the report schema."""


class CalendarUnavailable(HandshakeError):
    """The calendar provider could not be reached or refused the token."""
