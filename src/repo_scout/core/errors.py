"""Failure taxonomy shared by the GitHub client and the core operations."""

from __future__ import annotations

from typing import Optional


class RepoScoutError(Exception):
    """Base class for all repo-scout errors."""


class TransportFailure(RepoScoutError):
    """The remote API could not be reached or refused the request.

    Covers network errors, timeouts, rate limiting, authentication problems
    and any non-404 error status.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(RepoScoutError):
    """The requested object does not exist. A valid "absent" outcome."""

    def __init__(self, resource: str):
        super().__init__(f"Not found: {resource}")
        self.resource = resource


class DecodeFailure(RepoScoutError):
    """File content could not be converted to text."""
