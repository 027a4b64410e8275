"""Interaction Controller.

Orquesta las acciones del usuario (login, logout, formulario, edición,
borrado, búsqueda) sobre el Session Store y la Remote Collection Cache:

- comprueba la autorización antes de cualquier mutación (sin red si se deniega);
- mantiene el indicador de carga durante cada operación de red;
- captura todos los `CatalogError` y los convierte en notificaciones; nada
  sale del controlador como error de transporte.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from typing import Any, AsyncIterator, Callable

from pydantic import ValidationError

from core.domain.errors import (
    AuthError,
    AuthorizationError,
    BusyError,
    CatalogError,
    DraftValidationError,
    NotFoundError,
    RefreshError,
    SessionExpiredError,
)
from core.domain.language import translate
from core.domain.models import Action, BookId, BookRecord, FormDraft, Session
from core.logging_setup import get_logger
from core.services.app_context import AppContext
from core.services.session_store import is_authorized

logger = get_logger(__name__)

# Errores con mensaje propio; el resto usa el mensaje genérico de la operación.
_SPECIFIC_ERRORS = (
    AuthorizationError,
    BusyError,
    DraftValidationError,
    NotFoundError,
    RefreshError,
    SessionExpiredError,
)


@dataclass
class ActionResult:
    ok: bool
    error: CatalogError | None = None
    value: Any = None
    cancelled: bool = False


def _is_session_expiry(error: CatalogError) -> bool:
    if isinstance(error, SessionExpiredError):
        return True
    return isinstance(error, RefreshError) and isinstance(error.cause, SessionExpiredError)


class InteractionController:
    def __init__(self, context: AppContext) -> None:
        self._ctx = context
        self._pending = 0
        self.login_error: str | None = None
        self.query = ""

    # -- estado visible -------------------------------------------------

    @property
    def context(self) -> AppContext:
        return self._ctx

    @property
    def session(self) -> Session | None:
        return self._ctx.session_store.current

    @property
    def draft(self) -> FormDraft:
        return self._ctx.draft

    @property
    def books(self) -> tuple[BookRecord, ...]:
        return self._ctx.cache.books

    @property
    def visible_books(self) -> tuple[BookRecord, ...]:
        return self._ctx.cache.filter(self.query)

    @property
    def loading(self) -> bool:
        return self._pending > 0

    # -- utilidades -----------------------------------------------------

    @asynccontextmanager
    async def _loading(self) -> AsyncIterator[None]:
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    def _t(self, key: str, **params: object) -> str:
        return translate(key, self._ctx.language, **params)

    def _notify(self, key: str, *, error: bool = False, **params: object) -> None:
        self._ctx.notifier.show(self._t(key, **params), "error" if error else "success")

    def _deny(self, action: Action) -> ActionResult:
        error = AuthorizationError(action.value)
        logger.info("Denied %s for %s", action.value, self.session or "anonymous")
        self._notify(error.message_key, error=True)
        return ActionResult(ok=False, error=error)

    def _fail(self, error: CatalogError, fallback_key: str) -> ActionResult:
        logger.warning("%s: %s", error.__class__.__name__, error)
        if _is_session_expiry(error) and self._ctx.settings.logout_on_expired_session:
            self._clear_local_state()
            self._notify("session.expired", error=True)
            return ActionResult(ok=False, error=error)

        key = error.message_key if isinstance(error, _SPECIFIC_ERRORS) else fallback_key
        self._notify(key, error=True)
        return ActionResult(ok=False, error=error)

    def _clear_local_state(self) -> None:
        self._ctx.session_store.logout()
        self._ctx.cache.clear()
        self._ctx.draft.clear()
        self.query = ""

    async def _refresh(self, session: Session) -> ActionResult:
        async with self._loading():
            try:
                books = await self._ctx.cache.list(session)
            except CatalogError as exc:
                return self._fail(exc, "books.load_failed")
        return ActionResult(ok=True, value=books)

    # -- operaciones ----------------------------------------------------

    async def startup(self) -> ActionResult:
        """Restaura la sesión persistida y, si existe, carga la colección."""

        session = self._ctx.session_store.restore()
        if session is None:
            return ActionResult(ok=True)
        result = await self._refresh(session)
        if result.ok:
            result.value = session
        return result

    async def submit_login(self, username: str, password: str) -> ActionResult:
        self.login_error = None
        async with self._loading():
            try:
                session = await self._ctx.session_store.login(username, password)
            except AuthError as exc:
                self.login_error = self._t("login.failed")
                return ActionResult(ok=False, error=exc)
            except CatalogError as exc:
                self.login_error = self._t("login.unreachable")
                return ActionResult(ok=False, error=exc)

            # La vista anterior pertenece a otra sesión.
            self._ctx.cache.clear()
            self._ctx.draft.clear()
            self._notify("login.welcome", role=session.role.value)
            loaded = await self._refresh(session)
        if self._superseded(session):
            # El primer list() devolvió 401 y forzó el logout.
            return ActionResult(ok=False, error=loaded.error)
        return ActionResult(ok=True, value=session)

    def logout(self) -> ActionResult:
        self._clear_local_state()
        self._notify("logout.done")
        return ActionResult(ok=True)

    async def refresh(self) -> ActionResult:
        session = self.session
        if not is_authorized(session, Action.LIST):
            return self._deny(Action.LIST)
        assert session is not None
        return await self._refresh(session)

    def search(self, query: str) -> ActionResult:
        if not is_authorized(self.session, Action.SEARCH):
            return self._deny(Action.SEARCH)
        self.query = query
        return ActionResult(ok=True, value=self.visible_books)

    def request_edit(self, record: BookRecord) -> ActionResult:
        if not is_authorized(self.session, Action.UPDATE):
            return self._deny(Action.UPDATE)
        self._ctx.draft.load(record)
        return ActionResult(ok=True, value=record)

    def cancel_edit(self) -> ActionResult:
        self._ctx.draft.clear()
        return ActionResult(ok=True)

    async def submit_form(self) -> ActionResult:
        draft = self._ctx.draft
        action = Action.UPDATE if draft.is_editing else Action.CREATE
        session = self.session
        if not is_authorized(session, action):
            return self._deny(action)
        assert session is not None

        try:
            payload = draft.to_payload()
        except ValidationError as exc:
            return self._fail(DraftValidationError(str(exc)), "books.invalid")

        submitted = replace(draft)
        async with self._loading():
            try:
                if action is Action.UPDATE:
                    assert submitted.editing_target_id is not None
                    record = await self._ctx.cache.update(
                        session, submitted.editing_target_id, payload
                    )
                else:
                    record = await self._ctx.cache.create(session, payload)
            except RefreshError as exc:
                if self._superseded(session):
                    return ActionResult(ok=False, error=exc, cancelled=True)
                # La escritura sí se hizo: el borrador enviado ya no tiene nada pendiente.
                self._clear_draft_if_unchanged(submitted)
                return self._fail(exc, "books.load_failed")
            except CatalogError as exc:
                if self._superseded(session):
                    return ActionResult(ok=False, error=exc, cancelled=True)
                return self._fail(exc, "books.save_failed")

        if self._superseded(session):
            return ActionResult(ok=False, value=record, cancelled=True)
        self._clear_draft_if_unchanged(submitted)
        self._notify("books.updated" if action is Action.UPDATE else "books.created")
        return ActionResult(ok=True, value=record)

    async def request_delete(
        self,
        book_id: BookId,
        confirm: Callable[[BookId], bool],
    ) -> ActionResult:
        """Borra `book_id` si el usuario lo confirma.

        `confirm` solo se consulta cuando la sesión está autorizada.
        """

        session = self.session
        if not is_authorized(session, Action.DELETE):
            return self._deny(Action.DELETE)
        assert session is not None

        if not confirm(book_id):
            return ActionResult(ok=False, cancelled=True)

        async with self._loading():
            try:
                await self._ctx.cache.delete(session, book_id)
            except RefreshError as exc:
                if self._superseded(session):
                    return ActionResult(ok=False, error=exc, cancelled=True)
                self._drop_draft_for(book_id)
                return self._fail(exc, "books.load_failed")
            except CatalogError as exc:
                if self._superseded(session):
                    return ActionResult(ok=False, error=exc, cancelled=True)
                return self._fail(exc, "books.delete_failed")

        if self._superseded(session):
            return ActionResult(ok=False, value=book_id, cancelled=True)
        self._drop_draft_for(book_id)
        self._notify("books.deleted")
        return ActionResult(ok=True, value=book_id)

    def _superseded(self, session: Session) -> bool:
        """True si hubo logout (o login de otro usuario) mientras la operación esperaba."""

        return self.session != session

    def _clear_draft_if_unchanged(self, submitted: FormDraft) -> None:
        # Un request_edit/cancel_edit hecho mientras la escritura estaba en vuelo se respeta.
        if self._ctx.draft == submitted:
            self._ctx.draft.clear()

    def _drop_draft_for(self, book_id: BookId) -> None:
        if self._ctx.draft.editing_target_id == book_id:
            self._ctx.draft.clear()
