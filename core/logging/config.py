from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler, QueueHandler, QueueListener
from queue import Queue
from pathlib import Path
from typing import Optional

from .levels import register_levels, to_level
from .formatter import ConsoleFormatter, JSONFormatter

_listener: QueueListener | None = None


class _ServiceFilter(logging.Filter):
    """Default ``record.service`` for stdlib loggers that don't set it."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "service", None):
            record.service = self._service
        return True


def bootstrap_logging(
    *,
    service: str = "nexus",
    level: str | int | None = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "nexus.jsonl",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    global _listener
    try:
        register_levels()
        root = logging.getLogger()
        root.handlers.clear()
        lvl = to_level(level or os.getenv("LOG_LEVEL", "INFO"))
        root.setLevel(lvl)
        service_filter = _ServiceFilter(service)

        if os.getenv("LOG_CONSOLE", "false").strip().lower() == "true":
            console = logging.StreamHandler()
            console_level_str = os.getenv("LOG_CONSOLE_LEVEL", "")
            console.setLevel(to_level(console_level_str) if console_level_str else lvl)
            console.setFormatter(ConsoleFormatter())
            console.addFilter(service_filter)
            root.addHandler(console)

        if log_dir:
            log_dir.mkdir(parents=True, exist_ok=True)
            json_handler = RotatingFileHandler(
                str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count
            )
            json_handler.setLevel(lvl)
            json_handler.setFormatter(JSONFormatter())
            q: Queue[logging.LogRecord] = Queue(-1)
            qh = QueueHandler(q)
            qh.addFilter(service_filter)
            root.addHandler(qh)
            _listener = QueueListener(q, json_handler, respect_handler_level=True)
            _listener.start()

        # httpx logs every request at INFO; keep that out of the sync log.
        logging.getLogger("httpx").setLevel(logging.WARNING)
    except Exception:
        logging.basicConfig(level=logging.INFO)


def shutdown_logging() -> None:
    global _listener
    if _listener:
        _listener.stop()
        _listener = None
