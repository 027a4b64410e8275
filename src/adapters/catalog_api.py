"""Adaptador REST del catálogo (`/login`, `/books`).

Responsabilidad:
- Hablar HTTP con el backend mediante `httpx`.
- Traducir status codes y fallos de transporte a `core.domain.errors`.
- Normalizar las respuestas como modelos del dominio.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from adapters.http_client import bearer, build_async_client
from core.config import AppSettings
from core.domain.errors import (
    AuthError,
    DraftValidationError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
)
from core.domain.models import BookId, BookPayload, BookRecord, Session
from core.interfaces.backend import CatalogBackend
from core.logging_setup import get_logger

logger = get_logger(__name__)

_VALIDATION_STATUSES = (400, 422)


class HttpCatalogBackend(CatalogBackend):
    """Implementación de `CatalogBackend` sobre un `httpx.AsyncClient`.

    Usar como async context manager (o llamar a `aclose()`) para liberar
    el pool de conexiones.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_async_client(self._settings)

    async def __aenter__(self) -> "HttpCatalogBackend":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        json: Any = None,
    ) -> httpx.Response:
        headers = bearer(token) if token else None
        try:
            return await self._client.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc.__class__.__name__)
            raise NetworkError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON from {response.request.method} {response.request.url}",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, *, payload_sent: bool = False) -> None:
        status = response.status_code
        if response.is_success:
            return
        where = f"{response.request.method} {response.request.url.path}"
        if status == 401:
            raise SessionExpiredError(f"{where}: unauthenticated", status_code=status)
        if status == 404:
            raise NotFoundError(f"{where}: not found", status_code=status)
        if payload_sent and status in _VALIDATION_STATUSES:
            raise DraftValidationError(f"{where}: rejected with HTTP {status}")
        raise NetworkError(f"{where}: HTTP {status}", status_code=status)

    def _record_or_none(self, response: httpx.Response) -> BookRecord | None:
        # 204 / cuerpo vacío: la escritura es válida aunque no devuelva el registro.
        if not response.content:
            return None
        data = self._json(response)
        if not isinstance(data, dict):
            return None
        try:
            return BookRecord.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed book record in write response")
            return None

    async def login(self, username: str, password: str) -> Session:
        # Fallos de transporte salen como NetworkError; cualquier respuesta no-2xx es AuthError.
        response = await self._request(
            "POST", "/login", json={"username": username, "password": password}
        )
        if not response.is_success:
            raise AuthError(f"Login rejected with HTTP {response.status_code}")

        try:
            data = response.json()
            return Session.model_validate(
                {"token": data.get("token"), "role": data.get("role")}
            )
        except (ValueError, AttributeError, ValidationError) as exc:
            raise AuthError("Login response without a usable token/role") from exc

    async def list_books(self, token: str) -> list[BookRecord]:
        response = await self._request("GET", "/books", token=token)
        self._raise_for_status(response)
        data = self._json(response)

        if not isinstance(data, list):
            logger.warning("GET /books returned %s instead of a list", type(data).__name__)
            return []

        books: list[BookRecord] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                books.append(BookRecord.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed book record id=%r", item.get("id"))
                continue
        return books

    async def create_book(self, token: str, payload: BookPayload) -> BookRecord | None:
        response = await self._request(
            "POST", "/books", token=token, json=payload.model_dump(mode="json")
        )
        self._raise_for_status(response, payload_sent=True)
        return self._record_or_none(response)

    async def update_book(
        self, token: str, book_id: BookId, payload: BookPayload
    ) -> BookRecord | None:
        response = await self._request(
            "PUT", f"/books/{book_id}", token=token, json=payload.model_dump(mode="json")
        )
        self._raise_for_status(response, payload_sent=True)
        return self._record_or_none(response)

    async def delete_book(self, token: str, book_id: BookId) -> None:
        response = await self._request("DELETE", f"/books/{book_id}", token=token)
        self._raise_for_status(response)
