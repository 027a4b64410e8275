"""Servicios del Core: sesión, caché de la colección, notificaciones y controlador.

La CLI (u otro front-end) solo habla con `InteractionController` a través de
un `AppContext` creado con `open_context()`.
"""

from core.services.app_context import AppContext, open_context
from core.services.controller import ActionResult, InteractionController

__all__ = ["ActionResult", "AppContext", "InteractionController", "open_context"]
