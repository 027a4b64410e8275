"""Session Store: token + rol del usuario, persistidos entre ejecuciones.

Es la única fuente de verdad de "¿hay sesión?" y "¿qué puede hacer?".
"""

from __future__ import annotations

from pydantic import ValidationError

from core.domain.models import Action, Role, Session
from core.interfaces.backend import CatalogBackend
from core.interfaces.storage import KeyValueStorage
from core.logging_setup import get_logger

logger = get_logger(__name__)

TOKEN_KEY = "token"
ROLE_KEY = "role"


def is_authorized(session: Session | None, action: Action) -> bool:
    """Predicado único de autorización.

    - Lecturas (list/search): basta con tener sesión.
    - Mutaciones (create/update/delete): rol `admin`.
    """

    if session is None:
        return False
    if action.is_mutation:
        return session.role is Role.ADMIN
    return True


class SessionStore:
    def __init__(self, *, backend: CatalogBackend, storage: KeyValueStorage) -> None:
        self._backend = backend
        self._storage = storage
        self._session: Session | None = None

    @property
    def current(self) -> Session | None:
        return self._session

    async def login(self, username: str, password: str) -> Session:
        """Autentica contra el backend y persiste `{token, role}`.

        Raises:
            AuthError: credenciales rechazadas o respuesta sin token/rol.
            NetworkError: fallo de transporte.

        En ambos casos la sesión previa (memoria y disco) queda intacta.
        """

        session = await self._backend.login(username, password)
        self._storage.set_items({TOKEN_KEY: session.token, ROLE_KEY: session.role.value})
        self._session = session
        logger.info("Signed in as %s", session.role.value)
        return session

    def logout(self) -> None:
        had_session = self._session is not None
        self._session = None
        self._storage.remove_items((TOKEN_KEY, ROLE_KEY))
        if had_session:
            logger.info("Signed out")

    def restore(self) -> Session | None:
        """Carga la sesión persistida sin validarla contra el backend.

        Si solo una de las dos claves existe, o el rol no es válido, se
        borran ambas: nunca hay token sin rol ni rol sin token.
        """

        token = self._storage.get(TOKEN_KEY)
        role = self._storage.get(ROLE_KEY)
        if token is None and role is None:
            self._session = None
            return None

        try:
            session = Session(token=token, role=role)  # type: ignore[arg-type]
        except ValidationError:
            logger.warning("Discarding incomplete persisted session")
            self._session = None
            self._storage.remove_items((TOKEN_KEY, ROLE_KEY))
            return None

        self._session = session
        logger.debug("Restored session for role %s", session.role.value)
        return session
