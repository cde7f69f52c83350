"""
Logging-Konfiguration der Anwendung.

Zweck:
    Alle Module loggen über `logging.getLogger(__name__)` unterhalb des Namensraums
    `planner_pioneer`. Diese Datei richtet Level und Ausgabe genau einmal ein
    (Aufruf aus `main.py`).

Hinweise:
    Das Level kommt aus dem Parameter oder aus `$PLANNER_PIONEER_LOG_LEVEL`
    (Default: WARNING). Die Kernberechnung loggt nur auf DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from typing import Any, Optional, Union

__all__ = [
    "LOG_LEVEL_ENV",
    "configure_logging",
    "reset_logging",
]

LOG_LEVEL_ENV = "PLANNER_PIONEER_LOG_LEVEL"
_LOGGER_PREFIX = "planner_pioneer"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured = False
_lock = threading.Lock()


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unbekanntes Log-Level: {level}")
    return resolved


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    stream: Any = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Richtet den Logger `planner_pioneer` ein (idempotent).

    Parameter:
        level (int | str | None): Level als Zahl oder Name ("DEBUG", "info", ...).
        stream (Any): Optionaler Ausgabestrom (Default: stderr).
        handler (logging.Handler | None): Optionaler eigener Handler (z. B. für Tests).

    Rückgabe:
        logging.Logger: Der konfigurierte Paket-Logger.

    Ausnahmen:
        ValueError: Bei unbekanntem Level-Namen.
    """

    global _configured
    logger = logging.getLogger(_LOGGER_PREFIX)
    resolved = _resolve_level(level)
    with _lock:
        if _configured:
            logger.setLevel(resolved)
            return logger
        _configured = True

    logger.setLevel(resolved)
    logger.propagate = False
    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(h)
    return logger


def reset_logging() -> None:
    """Setzt die Konfiguration zurück. Nur für Tests."""

    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
