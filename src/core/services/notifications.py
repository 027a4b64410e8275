"""Notificaciones transitorias con auto-descarte.

Solo existe una notificación visible. Mostrar otra reemplaza la actual y
reinicia el temporizador (`loop.call_later`); nunca se acumulan descartes.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

from core.domain.models import Notification

Listener = Callable[[Notification], None]


class Notifier:
    def __init__(self, *, dismiss_after: float = 4.0) -> None:
        self.dismiss_after = dismiss_after
        self._current: Notification | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[Listener] = []

    @property
    def current(self) -> Notification | None:
        return self._current

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def show(self, message: str, kind: Literal["success", "error"] = "success") -> Notification:
        self._cancel_timer()
        notification = Notification(message=message, kind=kind)
        self._current = notification

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._timer = loop.call_later(self.dismiss_after, self._expire)

        for listener in self._listeners:
            listener(notification)
        return notification

    def dismiss(self) -> None:
        self._cancel_timer()
        self._current = None

    def _expire(self) -> None:
        self._timer = None
        self._current = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
