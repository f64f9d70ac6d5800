from __future__ import annotations

import functools
import inspect
import logging
import os
import time
from typing import Any, Callable, Optional, Protocol

from .context import bind as bind_ctx
from .levels import LogLevel


class SupportsStr(Protocol):
    def __str__(self) -> str: ...


LazyMessage = SupportsStr | Callable[[], SupportsStr]


class StructuredLogger:
    """Thin wrapper over a stdlib logger.

    Messages may be passed as callables so expensive f-strings are only
    built when the level is enabled. Logging never raises into callers.
    """

    def __init__(self, logger: logging.Logger, service: Optional[str] = None) -> None:
        self._logger = logger
        self._service = service

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **values: Any) -> "StructuredLogger":
        bind_ctx(**values)
        return self

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        try:
            message = msg() if callable(msg) else msg
        except Exception:
            message = "<lazy message failed>"
        extra = kwargs.pop("extra", {})
        if self._service and "service" not in extra:
            extra["service"] = self._service
        try:
            self._logger.log(level, str(message), *args, extra=extra, stacklevel=3, **kwargs)
        except Exception:
            try:
                self._logger.log(level, "log failed")
            except Exception:
                pass

    def trace(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(int(LogLevel.TRACE), msg, *args, **kwargs)

    def debug(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def success(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(int(LogLevel.SUCCESS), msg, *args, **kwargs)

    def warning(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: LazyMessage, *args: Any, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str, *, service: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name), service=service)


def traceable(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Log enter/exit with wall time at TRACE when ``DEBUG_TRACE=true``.

    Works for both plain and ``async def`` functions.
    """
    if os.getenv("DEBUG_TRACE", "").lower() != "true":
        return fn

    logger = get_logger(fn.__module__, service="trace")

    def _exit(start: float) -> None:
        dur_ms = (time.perf_counter() - start) * 1000.0
        logger.trace(lambda: f"exit {fn.__qualname__}", extra={"execution_time_ms": round(dur_ms, 2)})

    if inspect.iscoroutinefunction(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            logger.trace(lambda: f"enter {fn.__qualname__}")
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                logger.error(lambda: f"exception in {fn.__qualname__}: {e}")
                raise
            finally:
                _exit(start)

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start = time.perf_counter()
        logger.trace(lambda: f"enter {fn.__qualname__}")
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.error(lambda: f"exception in {fn.__qualname__}: {e}")
            raise
        finally:
            _exit(start)

    return wrapper
