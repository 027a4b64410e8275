"""Almacenamiento local duradero (equivalente a `localStorage` del navegador).

Persiste un objeto JSON plano `{clave: valor}` en disco. Las escrituras son
atómicas (fichero temporal + replace) para que token y rol nunca queden a
medio escribir.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping

from core.interfaces.storage import KeyValueStorage
from core.logging_setup import get_logger

logger = get_logger(__name__)


def _atomic_write(path: Path, payload: dict[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=str(path.parent), delete=False, encoding="utf-8", suffix=".tmp"
    ) as tf:
        json.dump(payload, tf, indent=2, ensure_ascii=False, sort_keys=True)
        temp_path = Path(tf.name)
    try:
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class JsonFileStorage(KeyValueStorage):
    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Unreadable storage file %s, treating it as empty", self.path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set_items(self, values: Mapping[str, str]) -> None:
        data = self._load()
        data.update(values)
        _atomic_write(self.path, data)

    def remove_items(self, keys: Iterable[str]) -> None:
        data = self._load()
        removed = False
        for key in keys:
            if key in data:
                del data[key]
                removed = True
        if not removed:
            return
        if data:
            _atomic_write(self.path, data)
        else:
            self.path.unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return sorted(self._load())


class MemoryStorage(KeyValueStorage):
    """Variante en memoria (sesiones efímeras, `--no-persist`)."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set_items(self, values: Mapping[str, str]) -> None:
        self._data.update(values)

    def remove_items(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
