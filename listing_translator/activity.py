"""Journal d'activité consultable depuis la console web."""
from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List

MAX_ENTRIES = 100


class ActivityLog(logging.Handler):
    """Handler qui conserve les derniers enregistrements en mémoire."""

    def __init__(self, max_entries: int = MAX_ENTRIES, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self._entries: Deque[Dict[str, str]] = deque(maxlen=max_entries)
        self._entries_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except Exception:  # pragma: no cover - message mal formé
            self.handleError(record)
            return

        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        with self._entries_lock:
            self._entries.append(entry)

    def entries(self) -> List[Dict[str, str]]:
        """Copie des entrées, de la plus ancienne à la plus récente."""
        with self._entries_lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()


def install(
    logger_name: str = "listing_translator",
    level: str = "INFO",
    max_entries: int = MAX_ENTRIES,
) -> ActivityLog:
    """Attache un ``ActivityLog`` au logger du paquet et le retourne."""
    target = logging.getLogger(logger_name)
    target.setLevel(getattr(logging, level))
    for handler in target.handlers:
        if isinstance(handler, ActivityLog):
            return handler

    handler = ActivityLog(max_entries=max_entries)
    target.addHandler(handler)
    return handler
