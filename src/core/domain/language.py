"""Language utilities and user-facing messages.

The catalog keeps every notification/inline text in one place so the
controller only deals with message keys. Spanish is the primary language
of the catalog; English is the secondary one.
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Supported natural-language choices for user-facing output."""

    ENGLISH = "en"
    SPANISH = "es"

    @classmethod
    def default(cls) -> "Language":
        return cls.SPANISH

    def label(self) -> str:
        """Human readable label for prompts and logging."""

        return "Spanish" if self is Language.SPANISH else "English"


_MESSAGES: dict[str, dict[Language, str]] = {
    "login.welcome": {
        Language.SPANISH: "Bienvenido! Sesión iniciada como {role}",
        Language.ENGLISH: "Welcome! Signed in as {role}",
    },
    "login.failed": {
        Language.SPANISH: "Usuario o contraseña incorrectos",
        Language.ENGLISH: "Wrong username or password",
    },
    "login.unreachable": {
        Language.SPANISH: "No se pudo conectar con el servidor",
        Language.ENGLISH: "Could not reach the server",
    },
    "logout.done": {
        Language.SPANISH: "Sesión cerrada correctamente",
        Language.ENGLISH: "Signed out",
    },
    "session.expired": {
        Language.SPANISH: "La sesión ha expirado, vuelve a iniciar sesión",
        Language.ENGLISH: "Your session expired, please sign in again",
    },
    "books.load_failed": {
        Language.SPANISH: "Error al cargar los libros",
        Language.ENGLISH: "Could not load the books",
    },
    "books.created": {
        Language.SPANISH: "Libro agregado exitosamente",
        Language.ENGLISH: "Book added",
    },
    "books.updated": {
        Language.SPANISH: "Libro actualizado exitosamente",
        Language.ENGLISH: "Book updated",
    },
    "books.deleted": {
        Language.SPANISH: "Libro eliminado exitosamente",
        Language.ENGLISH: "Book deleted",
    },
    "books.save_failed": {
        Language.SPANISH: "Error al guardar el libro",
        Language.ENGLISH: "Could not save the book",
    },
    "books.delete_failed": {
        Language.SPANISH: "Error al eliminar el libro",
        Language.ENGLISH: "Could not delete the book",
    },
    "books.not_found": {
        Language.SPANISH: "El libro ya no existe",
        Language.ENGLISH: "The book no longer exists",
    },
    "books.invalid": {
        Language.SPANISH: "Título y autor son obligatorios",
        Language.ENGLISH: "Title and author are required",
    },
    "books.saved_refresh_failed": {
        Language.SPANISH: "Cambios guardados, pero no se pudo recargar la lista",
        Language.ENGLISH: "Changes saved, but the list could not be reloaded",
    },
    "denied.create": {
        Language.SPANISH: "No tienes permiso para realizar esta acción",
        Language.ENGLISH: "You are not allowed to do that",
    },
    "denied.update": {
        Language.SPANISH: "No tienes permiso para editar",
        Language.ENGLISH: "You are not allowed to edit",
    },
    "denied.delete": {
        Language.SPANISH: "No tienes permiso para eliminar",
        Language.ENGLISH: "You are not allowed to delete",
    },
    "denied.list": {
        Language.SPANISH: "Inicia sesión para ver los libros",
        Language.ENGLISH: "Sign in to see the books",
    },
    "denied.search": {
        Language.SPANISH: "Inicia sesión para buscar libros",
        Language.ENGLISH: "Sign in to search the books",
    },
    "busy": {
        Language.SPANISH: "Ya hay una operación en curso",
        Language.ENGLISH: "Another operation is still running",
    },
}


def translate(key: str, language: Language, **params: object) -> str:
    """Return the message for `key` in `language`, formatted with `params`.

    Unknown keys come back verbatim so a missing entry never hides an error.
    """

    entry = _MESSAGES.get(key)
    if entry is None:
        return key
    template = entry.get(language) or entry[Language.default()]
    return template.format(**params) if params else template
