"""TTL-bounded player rank cache backed by the rank store."""
from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, Iterable, List, Optional

from config import settings
from core.logging import get_logger, log_context
from domain.entities import PlayerRankEntry
from domain.interfaces import IMatchStore, IRankStore, IRiotGateway
from .retry_policy import RetryPolicy
from .sync_engine import ProgressCallback, notify_progress

logger = get_logger(__name__, service="ranks")

# Real puuids are 78 characters; anything this short is a placeholder.
MIN_PUUID_LENGTH = 40


def _now_ms() -> int:
    return int(time.time() * 1000)


class RankCache:
    """Player ranks keyed by puuid, refreshed from league entries when stale.

    One instance is created per process and handed to whoever needs ranks.
    The store holds the data, this object holds the policy. Read-only
    consumers such as the match detail view pass ``gateway=None``.
    """

    def __init__(
        self,
        gateway: IRiotGateway | None,
        rank_store: IRankStore,
        match_store: IMatchStore,
        *,
        ttl_ms: int = None,
        retry_policy: RetryPolicy | None = None,
        request_delay_s: float = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.gateway = gateway
        self.rank_store = rank_store
        self.match_store = match_store
        self.ttl_ms = settings.RANK_CACHE_TTL_MS if ttl_ms is None else ttl_ms
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.request_delay_s = settings.REQUEST_DELAY_S if request_delay_s is None else request_delay_s
        self._clock = clock

    async def refresh(self, puuid: str) -> PlayerRankEntry:
        """Fetch, store and return a fresh entry. Remote failures propagate."""
        entries = await self.gateway.get_league_entries(puuid)
        entry = PlayerRankEntry.from_league_entries(puuid, entries, fetched_at=self._clock())
        self.rank_store.upsert_rank(entry)
        return entry

    async def get_player_rank(self, puuid: str, max_age_ms: int = None) -> Optional[PlayerRankEntry]:
        """Cached entry younger than ``max_age_ms``, else a fresh one.

        When the refresh fails the newest cached entry is returned whatever
        its age, or ``None`` if there is none.
        """
        max_age_ms = self.ttl_ms if max_age_ms is None else max_age_ms
        cached = self.rank_store.get_rank(puuid, min_fetched_at=self._clock() - max_age_ms)
        if cached is not None:
            return cached
        try:
            return await self.refresh(puuid)
        except Exception as exc:
            logger.warning(lambda: f"Failed to fetch rank for {puuid[:8]}...: {exc}")
            return self.rank_store.get_rank(puuid)

    def _puuids_in(self, match_ids: Iterable[str]) -> List[str]:
        seen: Dict[str, None] = {}
        for match_id in match_ids:
            for p in self.match_store.get_raw_participants(match_id):
                puuid = p.get("puuid") if isinstance(p, dict) else None
                if isinstance(puuid, str) and len(puuid) >= MIN_PUUID_LENGTH:
                    seen.setdefault(puuid)
        return list(seen)

    async def fetch_ranks_for_new_matches(
        self, match_ids: Iterable[str], on_progress: Optional[ProgressCallback] = None
    ) -> Dict[str, int]:
        """Refresh ranks of every participant of ``match_ids`` not fresh in cache."""
        with log_context(phase="ranks"):
            cutoff = self._clock() - self.ttl_ms
            to_fetch = [
                puuid for puuid in self._puuids_in(match_ids or [])
                if self.rank_store.get_rank(puuid, min_fetched_at=cutoff) is None
            ]
            total = len(to_fetch)
            if not total:
                logger.debug("All player ranks for these matches are already cached")
                return {"fetched": 0, "failed": 0, "total": 0}

            logger.info(lambda: f"Fetching ranks for {total} players")
            fetched = failed = 0
            for idx, puuid in enumerate(to_fetch, start=1):
                try:
                    await self.retry_policy.run(
                        lambda puuid=puuid: self.refresh(puuid),
                        logger=logger,
                        context={"puuid": puuid, "phase": "ranks"},
                    )
                    fetched += 1
                except Exception as exc:
                    failed += 1
                    logger.warning(lambda: f"Failed rank for player {idx}/{total}: {exc}")
                notify_progress(on_progress, idx, total)
                if idx < total and self.request_delay_s > 0:
                    await asyncio.sleep(self.request_delay_s)

            logger.info(lambda: f"Rank fetch complete: {fetched} fetched, {failed} failed")
            return {"fetched": fetched, "failed": failed, "total": total}

    def get_match_participant_ranks(self, match_id: str) -> Dict[str, Optional[PlayerRankEntry]]:
        """Cached rank of every participant of a stored match, whatever its age. No API calls."""
        ranks: Dict[str, Optional[PlayerRankEntry]] = {}
        for p in self.match_store.get_raw_participants(match_id):
            puuid = p.get("puuid")
            if puuid:
                ranks[puuid] = self.rank_store.get_rank(puuid)
        return ranks
