from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from config import settings
from core.logging.logger import StructuredLogger
from domain.exceptions import PermanentExternalError, TransientExternalError


TransientPredicate = Callable[[BaseException | None, Optional[int]], bool]
Supplier = Callable[[], Awaitable[Any]]


def is_transient_error(exc: BaseException | None, status_code: Optional[int] = None) -> bool:
    """Retry everything except errors a retry cannot fix."""
    if isinstance(exc, PermanentExternalError):
        return False
    if isinstance(exc, (TransientExternalError, httpx.HTTPError, asyncio.TimeoutError)):
        return True
    if status_code is not None:
        return status_code == 429 or status_code >= 500
    return exc is not None


@dataclass(slots=True)
class RetryPolicy:
    """Bounded retry with exponential backoff, local to one call site.

    ``max_attempts`` counts the first try: 3 attempts with a 1000 ms base and
    factor 2 sleep 1 s then 2 s.
    """

    max_attempts: int
    backoff_base_ms: int
    backoff_factor: float
    jitter_ms: int = 0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.SPECIAL_QUEUE_RETRIES + 1,
            backoff_base_ms=settings.SPECIAL_QUEUE_BACKOFF_MS,
            backoff_factor=2.0,
        )

    def backoff_ms(self, attempt: int) -> int:
        return int(self.backoff_base_ms * math.pow(self.backoff_factor, attempt - 1)) + self.jitter_ms

    async def run(
        self,
        supplier: Supplier,
        *,
        is_transient: TransientPredicate = is_transient_error,
        logger: StructuredLogger,
        context: dict[str, Any] | None = None,
    ) -> Any:
        """Execute an async supplier, retrying transient errors; the last error is re-raised."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                if attempt == 1:
                    logger.debug(lambda: "retry-start", extra={"context": context or {}})
                return await supplier()
            except Exception as e:
                transient = is_transient(e, getattr(e, "status_code", None))
                logger.warning(
                    lambda: f"retry-attempt {attempt} {'transient' if transient else 'terminal'}",
                    extra={"context": {**(context or {}), "error": str(e)}},
                )
                if attempt >= self.max_attempts or not transient:
                    raise
                await asyncio.sleep(self.backoff_ms(attempt) / 1000.0)
