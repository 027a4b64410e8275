"""Contrato del backend REST del catálogo.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Los servicios del Core reciben cualquier implementación (HTTP real,
  fakes de test) sin acoplarse a `httpx`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import BookId, BookPayload, BookRecord, Session


@runtime_checkable
class CatalogBackend(Protocol):
    """Operaciones remotas del catálogo.

    Reglas de diseño:
    - Todo es asíncrono porque es I/O.
    - Los fallos se expresan con `core.domain.errors`, nunca con excepciones
      del transporte.
    """

    async def login(self, username: str, password: str) -> Session:
        ...

    async def list_books(self, token: str) -> list[BookRecord]:
        ...

    async def create_book(self, token: str, payload: BookPayload) -> BookRecord | None:
        ...

    async def update_book(self, token: str, book_id: BookId, payload: BookPayload) -> BookRecord | None:
        ...

    async def delete_book(self, token: str, book_id: BookId) -> None:
        ...
