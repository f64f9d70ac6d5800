"""Error taxonomy for external calls and sync orchestration.

Only conditions that must reach a caller are exceptions. Incomplete data
(no timeline, no lane opponent, zero gold) is expressed as ``None`` fields,
and a failing badge rule is simply not earned.
"""
from typing import Optional


class RiotAPIError(Exception):
    """Base class for failures at the Riot API boundary."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class TransientExternalError(RiotAPIError):
    """Rate limit, 5xx, timeout or network failure that outlived the client's retries."""

    def __init__(self, message: str, *, status_code: Optional[int] = None,
                 url: Optional[str] = None, retry_after_ms: Optional[int] = None):
        super().__init__(message, status_code=status_code, url=url)
        self.retry_after_ms = retry_after_ms


class PermanentExternalError(RiotAPIError):
    """Not found, forbidden or invalid key. Retrying will not help."""

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class IdentityResolutionError(Exception):
    """Riot ID could not be resolved to a puuid; aborts the whole sync."""


def describe_api_error(exc: BaseException) -> str:
    """Human-readable message for a failed top-level call."""
    status = getattr(exc, "status_code", None)
    if status in (401, 403):
        return "Invalid or expired API key"
    if status == 404:
        return "Player not found. Check your Riot ID"
    if status == 429:
        return "Rate limited. Please wait a moment"
    return str(exc) or exc.__class__.__name__
