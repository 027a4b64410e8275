from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
import pytest

from adapters.catalog_api import HttpCatalogBackend
from adapters.http_client import build_async_client
from adapters.local_storage import JsonFileStorage
from core.config import AppSettings
from core.services import InteractionController, open_context

API_URL = "http://testserver/api"


class FakeCatalogServer:
    """In-memory stand-in for the REST backend (/login, /books)."""

    USERS = {"admin": ("admin123", "admin"), "user": ("user123", "user")}

    def __init__(self) -> None:
        self.books: list[dict[str, Any]] = [
            {"id": 1, "title": "1984", "author": "George Orwell", "created_at": "2024-05-01T10:00:00Z"},
            {"id": 2, "title": "Rayuela", "author": "Julio Cortázar", "created_at": None},
        ]
        self.next_id = 3
        self.tokens: dict[str, str] = {}
        self.requests: list[tuple[str, str]] = []
        self._failures: dict[tuple[str, str], int | None] = {}
        self._holds: dict[str, tuple[asyncio.Event, asyncio.Event]] = {}
        self.in_flight_writes = 0
        self.max_in_flight_writes = 0

    # -- test controls --------------------------------------------------

    def fail_next(self, method: str, path: str, status: int | None) -> None:
        """Next `method path` answers `status`; `None` means a transport error."""

        self._failures[(method, path)] = status

    def hold(self, method: str) -> tuple[asyncio.Event, asyncio.Event]:
        """Block requests of `method` until the returned release event is set."""

        started, release = asyncio.Event(), asyncio.Event()
        self._holds[method] = (started, release)
        return started, release

    def calls(self, method: str, path: str | None = None) -> int:
        return sum(1 for m, p in self.requests if m == method and (path is None or p == path))

    def titles(self) -> list[str]:
        return [b["title"] for b in self.books]

    # -- transport handler ----------------------------------------------

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.requests.append((method, path))

        if (method, path) in self._failures:
            status = self._failures.pop((method, path))
            if status is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status, json={"error": "forced"})

        if method == "POST" and path == "/login":
            return self._login(request)

        role = self._role_for(request)
        if role is None:
            return httpx.Response(401, json={"error": "unauthenticated"})

        is_write = method in ("POST", "PUT", "DELETE")
        if is_write and role != "admin":
            return httpx.Response(403, json={"error": "forbidden"})

        if is_write:
            self.in_flight_writes += 1
            self.max_in_flight_writes = max(self.max_in_flight_writes, self.in_flight_writes)
        try:
            if method in self._holds:
                started, release = self._holds[method]
                started.set()
                await release.wait()
            return self._books(method, path, request)
        finally:
            if is_write:
                self.in_flight_writes -= 1

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        user = self.USERS.get(body.get("username"))
        if user is None or user[0] != body.get("password"):
            return httpx.Response(401, json={"error": "bad credentials"})
        token = f"tok-{body['username']}-{len(self.tokens)}"
        self.tokens[token] = user[1]
        return httpx.Response(200, json={"token": token, "role": user[1]})

    def _role_for(self, request: httpx.Request) -> str | None:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.tokens.get(header.removeprefix("Bearer "))

    def _find(self, book_id: int) -> dict[str, Any] | None:
        for book in self.books:
            if book["id"] == book_id:
                return book
        return None

    def _books(self, method: str, path: str, request: httpx.Request) -> httpx.Response:
        if path == "/books":
            if method == "GET":
                return httpx.Response(200, json=self.books)
            if method == "POST":
                body = json.loads(request.content or b"{}")
                if not body.get("title") or not body.get("author"):
                    return httpx.Response(422, json={"error": "title and author required"})
                book = {
                    "id": self.next_id,
                    "title": body["title"],
                    "author": body["author"],
                    "created_at": "2025-01-15T09:30:00Z",
                }
                self.next_id += 1
                self.books.append(book)
                return httpx.Response(201, json=book)

        if path.startswith("/books/"):
            book = self._find(int(path.rsplit("/", 1)[1]))
            if book is None:
                return httpx.Response(404, json={"error": "not found"})
            if method == "PUT":
                body = json.loads(request.content or b"{}")
                book.update(title=body["title"], author=body["author"])
                return httpx.Response(200, json=book)
            if method == "DELETE":
                self.books.remove(book)
                return httpx.Response(204)

        return httpx.Response(405)


class Harness:
    """Runs an async scenario against a controller wired to the fake server."""

    def __init__(self, server: FakeCatalogServer, settings: AppSettings, storage: JsonFileStorage) -> None:
        self.server = server
        self.settings = settings
        self.storage = storage

    def backend(self) -> HttpCatalogBackend:
        transport = httpx.MockTransport(self.server.handle)
        client = build_async_client(self.settings, transport=transport)
        return HttpCatalogBackend(self.settings, client=client)

    def run(self, scenario: Callable[[InteractionController], Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            async with self.backend() as backend:
                async with open_context(self.settings, backend=backend, storage=self.storage) as ctx:
                    return await scenario(InteractionController(ctx))

        return asyncio.run(_main())


@pytest.fixture
def server() -> FakeCatalogServer:
    return FakeCatalogServer()


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        _env_file=None,
        api_url=API_URL,
        storage_path=tmp_path / "session.json",
        notification_seconds=0.2,
    )


@pytest.fixture
def storage(settings: AppSettings) -> JsonFileStorage:
    return JsonFileStorage(settings.storage_path)


@pytest.fixture
def harness(server: FakeCatalogServer, settings: AppSettings, storage: JsonFileStorage) -> Harness:
    return Harness(server, settings, storage)
