"""Contrato de almacenamiento local duradero (equivalente a `localStorage`)."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorage(Protocol):
    """Almacén clave/valor de strings.

    `set_items` y `remove_items` operan sobre varias claves en una sola
    escritura, de modo que token y rol nunca quedan persistidos por separado.
    """

    def get(self, key: str) -> str | None:
        ...

    def set_items(self, values: Mapping[str, str]) -> None:
        ...

    def remove_items(self, keys: Iterable[str]) -> None:
        ...
