"""Exception hierarchy shared by the resolver, the HTTP layer and the client."""

from __future__ import annotations

from typing import Any


class BlastGraphError(Exception):
    """Base exception for all blast-radius graph errors."""


class ValidationError(BlastGraphError):
    """Malformed query parameters (HTTP 400)."""

    def __init__(self, message: str = "Invalid query parameters", details: Any = None) -> None:
        super().__init__(message)
        self.details = details


class NotFoundError(BlastGraphError):
    """The focus entity does not exist in the organization (HTTP 404)."""


class UpstreamDataError(BlastGraphError):
    """Inventory store or upstream API failure (HTTP 500)."""

    def __init__(self, message: str = "Upstream data failure", status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestCancelledError(BlastGraphError):
    """A client request was superseded by a newer one. Never shown to users."""
