from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.catalog_api import HttpCatalogBackend
from adapters.http_client import build_async_client
from core.domain.errors import (
    AuthError,
    DraftValidationError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
)
from core.domain.models import BookPayload, Role


def _call(settings, handler, method_name, *args):
    async def _main():
        client = build_async_client(settings, transport=httpx.MockTransport(handler))
        async with HttpCatalogBackend(settings, client=client) as backend:
            return await getattr(backend, method_name)(*args)

    return asyncio.run(_main())


def _status(code, body=None):
    def handler(request):
        return httpx.Response(code, json=body)

    return handler


def test_login_returns_session(settings):
    def handler(request):
        assert request.url == "http://testserver/api/login"
        return httpx.Response(200, json={"token": "T", "role": "admin"})

    session = _call(settings, handler, "login", "admin", "admin123")

    assert session.token == "T"
    assert session.role is Role.ADMIN


@pytest.mark.parametrize(
    "code, body",
    [
        (401, {"error": "bad credentials"}),
        (500, None),
        (200, {"token": "T"}),
        (200, {"token": "T", "role": "owner"}),
        (200, ["not", "an", "object"]),
    ],
)
def test_login_failures_are_auth_errors(settings, code, body):
    with pytest.raises(AuthError):
        _call(settings, _status(code, body), "login", "admin", "nope")


def test_list_sends_bearer_token(settings):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[{"id": 1, "title": "Dune", "author": "Herbert"}])

    books = _call(settings, handler, "list_books", "T")

    assert seen["auth"] == "Bearer T"
    assert [b.title for b in books] == ["Dune"]


def test_list_non_array_body_is_empty(settings):
    assert _call(settings, _status(200, {"books": []}), "list_books", "T") == []


def test_list_skips_malformed_records(settings):
    body = [
        {"id": 1, "title": "Dune", "author": "Herbert"},
        {"id": 2, "title": "", "author": "Nobody"},
        "garbage",
    ]

    books = _call(settings, _status(200, body), "list_books", "T")

    assert [b.id for b in books] == [1]


@pytest.mark.parametrize(
    "code, error",
    [(401, SessionExpiredError), (403, NetworkError), (500, NetworkError)],
)
def test_list_status_mapping(settings, code, error):
    with pytest.raises(error) as excinfo:
        _call(settings, _status(code), "list_books", "T")
    assert excinfo.value.status_code == code


def test_transport_failure_is_network_error(settings):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError):
        _call(settings, handler, "list_books", "T")


def test_invalid_json_is_network_error(settings):
    def handler(request):
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(NetworkError):
        _call(settings, handler, "list_books", "T")


def test_create_maps_validation_rejection(settings):
    with pytest.raises(DraftValidationError):
        _call(settings, _status(422), "create_book", "T", BookPayload(title="x", author="y"))


def test_update_missing_target_is_not_found(settings):
    with pytest.raises(NotFoundError):
        _call(settings, _status(404), "update_book", "T", 9, BookPayload(title="x", author="y"))


def test_update_sends_payload_to_record_url(settings):
    def handler(request):
        assert request.method == "PUT"
        assert request.url.path == "/api/books/9"
        assert json.loads(request.read()) == {"title": "Dune", "author": "Herbert"}
        return httpx.Response(200, json={"id": 9, "title": "Dune", "author": "Herbert"})

    record = _call(settings, handler, "update_book", "T", 9, BookPayload(title="Dune", author="Herbert"))

    assert record.id == 9


def test_write_without_body_returns_none(settings):
    assert _call(settings, _status(201), "create_book", "T", BookPayload(title="x", author="y")) is None


def test_delete_accepts_204(settings):
    def handler(request):
        assert request.method == "DELETE"
        return httpx.Response(204)

    assert _call(settings, handler, "delete_book", "T", 3) is None
