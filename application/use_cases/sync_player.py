"""Use case: sync everything for one Riot ID."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from core.logging import get_logger, log_context
from domain.entities import PlayerRankEntry
from domain.exceptions import IdentityResolutionError, RiotAPIError, describe_api_error
from domain.interfaces import IRiotGateway
from infrastructure.persistence import SQLiteStore
from application.services.rank_cache import RankCache
from application.services.sync_engine import ProgressCallback, SyncEngine, SyncResult

logger = get_logger(__name__, service="sync")

StatusCallback = Callable[[str, str], None]


@dataclass
class SyncReport:
    puuid: str
    own_rank: Optional[PlayerRankEntry]
    sync: SyncResult
    timelines: Dict[str, int] = field(default_factory=dict)
    stats: Dict[str, int] = field(default_factory=dict)
    ranks: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> str:
        parts = [f"{self.sync.new_matches} new matches added"]
        if self.timelines.get("total"):
            parts.append(f"{self.timelines['updated']} timelines added")
        if self.stats.get("total"):
            parts.append(f"{self.stats['updated']} stats computed")
        if self.ranks.get("total"):
            parts.append(f"{self.ranks['fetched']} player ranks fetched")
        return ", ".join(parts)


class SyncPlayerUseCase:
    """
    Full sync for one player, in order:

    1. resolve the Riot ID to a puuid (failure aborts with a readable message)
    2. refresh the player's own rank before the heavy listing traffic
    3. incremental match sync
    4. timeline backfill, then derived-stats backfill
    5. ranks of everyone met in newly added matches
    """

    def __init__(
        self,
        gateway: IRiotGateway,
        store: SQLiteStore,
        *,
        engine: SyncEngine | None = None,
        rank_cache: RankCache | None = None,
    ):
        self.gateway = gateway
        self.store = store
        self.engine = engine or SyncEngine(gateway, store)
        self.rank_cache = rank_cache or RankCache(gateway, store, store)

    async def resolve(self, game_name: str, tag_line: str) -> str:
        try:
            return await self.gateway.resolve_puuid(game_name.strip(), tag_line.strip().lstrip("#"))
        except IdentityResolutionError:
            raise
        except RiotAPIError as exc:
            raise IdentityResolutionError(describe_api_error(exc)) from exc

    async def execute(
        self,
        game_name: str,
        tag_line: str,
        on_status: Optional[StatusCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncReport:
        def status(stage: str, message: str) -> None:
            logger.info(lambda: f"{stage}: {message}")
            if on_status:
                on_status(stage, message)

        if not game_name or not tag_line:
            raise IdentityResolutionError("Please enter both your game name and tag")

        status("Finding Account", f"Looking up {game_name}#{tag_line}...")
        puuid = await self.resolve(game_name, tag_line)

        with log_context(puuid=puuid):
            own_rank = await self.rank_cache.get_player_rank(puuid)

            status("Syncing Matches", "Fetching your recent match history...")
            result = await self.engine.sync_matches(puuid, on_progress)

            status("Fetching Timelines", "Backfilling missing match timelines...")
            timelines = await self.engine.backfill_timelines(on_progress)

            status("Computing Advanced Stats", "Recomputing derived stats...")
            stats = self.engine.backfill_advanced_stats(on_progress)

            ranks: Dict[str, int] = {"fetched": 0, "failed": 0, "total": 0}
            if result.new_match_ids:
                status("Fetching Player Ranks", f"Ranks for {len(result.new_match_ids)} new matches...")
                ranks = await self.rank_cache.fetch_ranks_for_new_matches(result.new_match_ids, on_progress)

        report = SyncReport(puuid, own_rank, result, timelines, stats, ranks)
        status("Sync Complete", report.summary())
        return report
