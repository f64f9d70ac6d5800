from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from .context import get_context

_LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[37m",
    "INFO": "\033[36m",
    "SUCCESS": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

# Context keys promoted to top-level JSON fields so log files can be
# grepped by player or match without parsing the nested context.
_PROMOTED = ("puuid", "match_id", "phase")


def _record_metadata(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created)),
        "level": record.levelname,
        "service": getattr(record, "service", None),
        "logger": record.name,
        "function": record.funcName,
        "line_number": record.lineno,
    }


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        try:
            md = _record_metadata(record)
            ctx = get_context()
            lvl = record.levelname
            color = _LEVEL_COLORS.get(lvl, "")
            parts = [
                md["timestamp"],
                lvl,
                md["service"] or "-",
                f"{md['logger']}:{md['line_number']}",
                record.getMessage(),
            ]
            if "match_id" in ctx:
                parts.append(f"match={ctx['match_id']}")
            exec_ms = getattr(record, "execution_time_ms", None)
            if exec_ms is not None:
                parts.append(f"t={exec_ms}ms")
            if record.exc_info:
                parts.append(self.formatException(record.exc_info))
            return f"{color}{' | '.join(parts)}{_RESET}"
        except Exception:
            return record.getMessage()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        try:
            payload: Dict[str, Any] = _record_metadata(record)
            payload["message"] = record.getMessage()
            ctx = get_context()
            for key in _PROMOTED:
                if key in ctx:
                    payload[key] = ctx.pop(key)
            extra_ctx = getattr(record, "context", None)
            if isinstance(extra_ctx, dict):
                ctx.update(extra_ctx)
            if ctx:
                payload["context"] = ctx
            exec_ms = getattr(record, "execution_time_ms", None)
            if exec_ms is not None:
                payload["execution_time_ms"] = exec_ms
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str, separators=(",", ":"))
        except Exception:
            return json.dumps({"message": "log format error"}, separators=(",", ":"))
