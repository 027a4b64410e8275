"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta en el borde (respuestas del backend, borradores del usuario).
- Serialización consistente hacia el backend y el almacenamiento local.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.config import ConfigDict

BookId = Union[int, str]


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Action(str, Enum):
    """Acciones que el controlador puede pedir al Core."""

    LIST = "list"
    SEARCH = "search"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_mutation(self) -> bool:
        return self in (Action.CREATE, Action.UPDATE, Action.DELETE)


class Session(BaseModel):
    """Identidad autenticada del cliente.

    Un `Session` solo existe con token y rol a la vez; "sin sesión" se
    representa con `None`, nunca con un objeto a medias.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(
        ...,
        min_length=1,
        description="Credencial bearer opaca devuelta por /login.",
    )
    role: Role = Field(
        ...,
        description="Rol del usuario autenticado (admin/user).",
    )

    def __repr__(self) -> str:
        # El token no debe acabar en logs ni trazas.
        return f"Session(role={self.role.value!r})"

    __str__ = __repr__


class BookRecord(BaseModel):
    """Entrada del catálogo tal como la devuelve el backend."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: BookId = Field(
        ...,
        description="Identificador asignado por el servidor (inmutable).",
    )
    title: str = Field(
        ...,
        min_length=1,
        description="Título del libro.",
    )
    author: str = Field(
        ...,
        min_length=1,
        description="Autor del libro.",
    )
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="Momento de alta (asignado por el servidor); ausente en registros antiguos.",
    )


class BookPayload(BaseModel):
    """Cuerpo `{title, author}` de POST/PUT /books."""

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)

    @field_validator("title", "author", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value


class Notification(BaseModel):
    message: str
    kind: Literal["success", "error"] = "success"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class FormDraft:
    """Borrador del formulario de alta/edición.

    `editing_target_id is None` significa modo alta; cualquier otro valor es
    modo edición de ese registro.
    """

    title: str = ""
    author: str = ""
    editing_target_id: BookId | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_target_id is not None

    def load(self, record: BookRecord) -> None:
        self.title = record.title
        self.author = record.author
        self.editing_target_id = record.id

    def clear(self) -> None:
        self.title = ""
        self.author = ""
        self.editing_target_id = None

    def to_payload(self) -> BookPayload:
        return BookPayload(title=self.title, author=self.author)
