"""Remote Collection Cache: espejo local de la colección `/books`.

Política de consistencia (refresh-after-write):
- La vista local solo se reemplaza entera con el resultado de `list()`.
- Toda mutación es una transacción en dos pasos: escritura y, después,
  `list()` incondicional. Cada paso falla con su propio tipo de error.
- Como mucho una mutación en vuelo por instancia; la segunda se rechaza
  con `BusyError` antes de tocar la red.
- Un `clear()` (logout) mientras una escritura espera al servidor anula el
  refresco posterior.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, TypeVar

from core.domain.errors import AuthorizationError, BusyError, NetworkError, RefreshError
from core.domain.models import Action, BookId, BookPayload, BookRecord, Session
from core.interfaces.backend import CatalogBackend
from core.logging_setup import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def filter_books(books: tuple[BookRecord, ...], query: str) -> tuple[BookRecord, ...]:
    """Coincidencia por subcadena, sin distinguir mayúsculas, en título O autor."""

    if not query:
        return books
    needle = query.casefold()
    return tuple(
        book
        for book in books
        if needle in book.title.casefold() or needle in book.author.casefold()
    )


class RemoteCollectionCache:
    def __init__(self, *, backend: CatalogBackend) -> None:
        self._backend = backend
        self._books: tuple[BookRecord, ...] = ()
        self._mutation: Action | None = None
        # Se incrementa en clear(); un list() lanzado antes no puede repoblar la vista.
        self._epoch = 0

    @property
    def books(self) -> tuple[BookRecord, ...]:
        return self._books

    @property
    def mutation_in_flight(self) -> Action | None:
        return self._mutation

    def clear(self) -> None:
        self._books = ()
        self._epoch += 1

    def filter(self, query: str) -> tuple[BookRecord, ...]:
        return filter_books(self._books, query)

    async def list(self, session: Session) -> tuple[BookRecord, ...]:
        """Descarga la colección completa y reemplaza la vista.

        Si falla, la vista anterior se conserva y el error se propaga.
        """

        epoch = self._epoch
        books = tuple(await self._backend.list_books(session.token))
        if epoch != self._epoch:
            logger.debug("Discarding list() result fetched before clear()")
            return self._books
        self._books = books
        logger.debug("Collection refreshed: %d books", len(books))
        return books

    @contextmanager
    def _exclusive(self, action: Action) -> Iterator[None]:
        # Sin await entre la comprobación y la asignación: atómico en asyncio.
        if self._mutation is not None:
            raise BusyError(f"Cannot {action.value} while {self._mutation.value} is in flight")
        self._mutation = action
        try:
            yield
        finally:
            self._mutation = None

    async def _write_then_refresh(
        self,
        action: Action,
        session: Session,
        write: Callable[[], Awaitable[T]],
    ) -> T:
        if not action.is_mutation:
            raise ValueError(f"{action.value} is not a mutation")
        if session is None:
            raise AuthorizationError(action.value)

        with self._exclusive(action):
            epoch = self._epoch
            written = await write()
            if epoch != self._epoch:
                # clear() durante la escritura: la vista debe seguir vacía.
                logger.info("%s succeeded after clear(), skipping refresh", action.value)
                return written
            logger.info("%s succeeded, refreshing collection", action.value)
            try:
                await self.list(session)
            except NetworkError as exc:
                raise RefreshError(exc, written=written) from exc
        return written

    async def create(self, session: Session, payload: BookPayload) -> BookRecord | None:
        return await self._write_then_refresh(
            Action.CREATE,
            session,
            lambda: self._backend.create_book(session.token, payload),
        )

    async def update(
        self, session: Session, book_id: BookId, payload: BookPayload
    ) -> BookRecord | None:
        return await self._write_then_refresh(
            Action.UPDATE,
            session,
            lambda: self._backend.update_book(session.token, book_id, payload),
        )

    async def delete(self, session: Session, book_id: BookId) -> None:
        await self._write_then_refresh(
            Action.DELETE,
            session,
            lambda: self._backend.delete_book(session.token, book_id),
        )
