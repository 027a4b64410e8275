"""Composition root: el estado del cliente en un único objeto explícito.

Sesión, vista de la colección, borrador y notificaciones viven aquí y se
inyectan en el `InteractionController`; no hay estado global.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from adapters.catalog_api import HttpCatalogBackend
from adapters.local_storage import JsonFileStorage
from core.config import AppSettings
from core.domain.language import Language
from core.domain.models import FormDraft
from core.interfaces.backend import CatalogBackend
from core.interfaces.storage import KeyValueStorage
from core.services.collection_cache import RemoteCollectionCache
from core.services.notifications import Notifier
from core.services.session_store import SessionStore


@dataclass
class AppContext:
    settings: AppSettings
    backend: CatalogBackend
    storage: KeyValueStorage
    session_store: SessionStore
    cache: RemoteCollectionCache
    notifier: Notifier
    draft: FormDraft = field(default_factory=FormDraft)

    @property
    def language(self) -> Language:
        return self.settings.default_language

    @classmethod
    def build(
        cls,
        settings: AppSettings,
        *,
        backend: CatalogBackend,
        storage: KeyValueStorage | None = None,
    ) -> "AppContext":
        storage = storage or JsonFileStorage(settings.storage_path)
        return cls(
            settings=settings,
            backend=backend,
            storage=storage,
            session_store=SessionStore(backend=backend, storage=storage),
            cache=RemoteCollectionCache(backend=backend),
            notifier=Notifier(dismiss_after=settings.notification_seconds),
        )


@asynccontextmanager
async def open_context(
    settings: AppSettings | None = None,
    *,
    backend: CatalogBackend | None = None,
    storage: KeyValueStorage | None = None,
) -> AsyncIterator[AppContext]:
    """Crea el contexto y cierra el cliente HTTP propio al salir.

    Un `backend` inyectado pertenece a quien lo pasa y no se cierra aquí.
    """

    settings = settings or AppSettings()
    owned: HttpCatalogBackend | None = None
    if backend is None:
        owned = HttpCatalogBackend(settings)
        backend = owned
    try:
        yield AppContext.build(settings, backend=backend, storage=storage)
    finally:
        if owned is not None:
            await owned.aclose()
