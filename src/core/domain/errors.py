"""Taxonomía de errores del cliente.

Los adaptadores traducen fallos de transporte/HTTP a estas excepciones; el
Core nunca ve excepciones de `httpx`.
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base exception for the catalog client."""

    message_key = "books.load_failed"


class AuthError(CatalogError):
    """Bad credentials (or an unusable login response)."""

    message_key = "login.failed"


class AuthorizationError(CatalogError):
    """Authenticated, but the role does not allow the action."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Action '{action}' is not allowed for the current session")

    @property
    def message_key(self) -> str:  # type: ignore[override]
        return f"denied.{self.action}"


class DraftValidationError(CatalogError):
    """The draft (title/author) was rejected locally or by the backend."""

    message_key = "books.invalid"


class BusyError(CatalogError):
    """A mutating operation is already in flight."""

    message_key = "busy"


class NetworkError(CatalogError):
    """Transport failure or non-success response from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(NetworkError):
    """Update/delete target does not exist on the backend."""

    message_key = "books.not_found"


class SessionExpiredError(NetworkError):
    """The backend rejected the bearer token (HTTP 401)."""

    message_key = "session.expired"


class RefreshError(NetworkError):
    """The write succeeded but the follow-up `list()` failed."""

    message_key = "books.saved_refresh_failed"

    def __init__(self, cause: NetworkError, written: object = None) -> None:
        self.cause = cause
        self.written = written
        super().__init__(f"Refresh after write failed: {cause}", status_code=cause.status_code)
