"""Logging helpers.

Un único logger `biblioteca` configurado una vez (handler a stderr para no
mezclarse con la salida de la CLI); los módulos piden hijos con
`get_logger(__name__)`. El nivel sale de `AppSettings.log_level`.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

ROOT_LOGGER_NAME = "biblioteca"

_LOCK = threading.Lock()
_ROOT: Optional[logging.Logger] = None


def configure_logging(level_name: str = "WARNING") -> logging.Logger:
    """(Re)configura el logger raíz de la aplicación."""

    global _ROOT
    with _LOCK:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        level = getattr(logging, level_name.upper(), logging.WARNING)
        logger.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("[biblioteca] %(asctime)s %(levelname)s %(name)s %(message)s")
            )
            logger.addHandler(handler)
        logger.propagate = False
        _ROOT = logger
        return logger


def get_logger(name: str | None = None) -> logging.Logger:
    if _ROOT is None:
        configure_logging()
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    # `core.services.x` -> `biblioteca.core.services.x`
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = ["configure_logging", "get_logger"]
