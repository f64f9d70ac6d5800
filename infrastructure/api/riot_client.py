"""Riot Games API client."""
import asyncio
import logging
import time
from typing import Optional, Dict, Any, List
from urllib.parse import quote
import httpx

from config import settings
from domain.enums import Region
from domain.exceptions import PermanentExternalError, TransientExternalError
from .rate_limiter import EndpointRateLimiter

logger = logging.getLogger(__name__)


class RiotAPIClient:
    """Asynchronous Riot API client with per-endpoint rate limiting.

    Non-2xx answers are raised: 429/5xx/timeouts as ``TransientExternalError``
    once the client's own retries are exhausted, everything else as
    ``PermanentExternalError``.
    """

    def __init__(
        self,
        api_key: str,
        region: Region = None,
        *,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.region = region or Region.from_platform(settings.RIOT_PLATFORM)
        self.session: Optional[httpx.AsyncClient] = None
        self.timeout = settings.REQUEST_TIMEOUT
        self.max_retries = settings.MAX_RETRIES if max_retries is None else max_retries
        self.last_status_code: Optional[int] = None
        self._transport = transport
        self._endpoint_cooldown: dict[str, float] = {}

        self.rate_limiter = EndpointRateLimiter()
        self.rate_limiter.set_default_limiter(
            requests_per_1_sec=settings.RATE_LIMIT_PER_1_SEC,
            requests_per_2_min=settings.RATE_LIMIT_PER_2_MIN,
        )
        self._setup_endpoint_limiters()

    def _setup_endpoint_limiters(self) -> None:
        self.rate_limiter.add_endpoint_limiter(
            "match",
            requests_per_1_sec=settings.MATCH_RATE_LIMIT_PER_1_SEC,
            requests_per_2_min=settings.MATCH_RATE_LIMIT_PER_2_MIN,
        )
        self.rate_limiter.add_endpoint_limiter(
            "account",
            requests_per_1_sec=settings.ACCOUNT_RATE_LIMIT_PER_1_SEC,
            requests_per_2_min=settings.ACCOUNT_RATE_LIMIT_PER_2_MIN,
        )
        self.rate_limiter.add_endpoint_limiter(
            "league",
            requests_per_1_sec=settings.LEAGUE_RATE_LIMIT_PER_1_SEC,
            requests_per_2_min=settings.LEAGUE_RATE_LIMIT_PER_2_MIN,
        )

    async def __aenter__(self):
        self.session = httpx.AsyncClient(
            timeout=self.timeout,
            headers={"X-Riot-Token": self.api_key},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_):
        if self.session:
            await self.session.aclose()
            self.session = None

    def _get_platform_url(self) -> str:
        return f"https://{self.region.platform_route}.api.riotgames.com"

    def _get_regional_url(self) -> str:
        return f"https://{self.region.regional_route}.api.riotgames.com"

    @staticmethod
    def _retry_after_s(response: httpx.Response) -> float:
        try:
            return max(0.0, float(response.headers.get("Retry-After", "5")))
        except ValueError:
            return 5.0

    async def _make_request(
        self,
        url: str,
        endpoint_type: str = "default",
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if self.session is None:
            raise RuntimeError("RiotAPIClient used outside 'async with'")

        last_error: Optional[TransientExternalError] = None
        for attempt in range(self.max_retries + 1):
            # honour per-endpoint cooldown after 429
            cd = self._endpoint_cooldown.get(endpoint_type, 0.0)
            now = time.monotonic()
            if cd > now:
                await asyncio.sleep(cd - now)

            await self.rate_limiter.acquire(endpoint_type)

            try:
                response = await self.session.get(url, params=params)
            except httpx.TimeoutException as exc:
                last_error = TransientExternalError(f"Timeout: {exc}", url=url)
            except httpx.HTTPError as exc:
                logger.error(f"Network error: {exc}")
                last_error = TransientExternalError(f"Network error: {exc}", url=url)
            else:
                self.last_status_code = response.status_code

                if response.status_code == 200:
                    return response.json()

                if response.status_code == 429:
                    retry_after = self._retry_after_s(response)
                    logger.warning(f"429 rate-limited - waiting {retry_after:g}s")
                    last_error = TransientExternalError(
                        "Rate limited",
                        status_code=429,
                        url=url,
                        retry_after_ms=int(retry_after * 1000),
                    )
                    if attempt < self.max_retries:
                        self._endpoint_cooldown[endpoint_type] = time.monotonic() + retry_after
                        await self.rate_limiter.reset_endpoint(endpoint_type)
                        await asyncio.sleep(retry_after)
                    continue

                if response.status_code >= 500:
                    last_error = TransientExternalError(
                        f"HTTP {response.status_code}", status_code=response.status_code, url=url
                    )
                else:
                    error = PermanentExternalError(
                        f"HTTP {response.status_code}", status_code=response.status_code, url=url
                    )
                    if error.is_auth_failure:
                        logger.error(f"{response.status_code} - check RIOT_API_KEY")
                    elif not error.is_not_found:
                        logger.warning(f"HTTP {response.status_code} for {url}")
                    raise error

            if attempt < self.max_retries:
                await asyncio.sleep(settings.RETRY_BACKOFF ** attempt)

        raise last_error or TransientExternalError("Request failed", url=url)

    # ── Match API ──────────────────────────────────────────────────────

    async def get_match_ids_by_puuid(
        self,
        puuid: str,
        start_time: Optional[int] = None,
        queue: Optional[int] = None,
        start: int = 0,
        count: int = 100,
    ) -> List[str]:
        url = f"{self._get_regional_url()}/lol/match/v5/matches/by-puuid/{puuid}/ids"
        params: Dict[str, Any] = {"start": start, "count": min(count, 100)}
        if start_time is not None:
            params["startTime"] = start_time
        if queue is not None:
            params["queue"] = queue
        result = await self._make_request(url, "match", params)
        return result if isinstance(result, list) else []

    async def get_match_by_id(self, match_id: str) -> Dict[str, Any]:
        return await self._make_request(
            f"{self._get_regional_url()}/lol/match/v5/matches/{match_id}", "match"
        )

    async def get_match_timeline(self, match_id: str) -> Dict[str, Any]:
        return await self._make_request(
            f"{self._get_regional_url()}/lol/match/v5/matches/{match_id}/timeline", "match"
        )

    # ── Account API ────────────────────────────────────────────────────

    async def get_account_by_riot_id(self, game_name: str, tag_line: str) -> Dict[str, Any]:
        path = f"{quote(game_name, safe='')}/{quote(tag_line, safe='')}"
        return await self._make_request(
            f"{self._get_regional_url()}/riot/account/v1/accounts/by-riot-id/{path}", "account"
        )

    # ── League API ─────────────────────────────────────────────────────

    async def get_league_entries_by_puuid(self, puuid: str) -> List[Dict[str, Any]]:
        result = await self._make_request(
            f"{self._get_platform_url()}/lol/league/v4/entries/by-puuid/{puuid}", "league"
        )
        return result if isinstance(result, list) else []
