"""Incremental match synchronisation for one player."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from config import settings
from core.logging import get_logger, log_context, traceable
from domain.entities import MatchRecord
from domain.interfaces import IMatchStore, IRiotGateway
from application.analysis import compute_advanced_stats
from .retry_policy import RetryPolicy

logger = get_logger(__name__, service="sync")

ProgressCallback = Callable[..., None]

# Stored matches older than this past season start trigger a backward gap-fill.
BACKFILL_GAP_S = 86_400


class UnitOutcome(Enum):
    NEW = "new"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class SyncTimings:
    """Pacing of external calls. Tests run with ``SyncTimings.immediate()``."""

    request_delay_s: float = settings.REQUEST_DELAY_S
    inter_batch_delay_s: float = settings.INTER_BATCH_DELAY_S
    batch_size: int = settings.SYNC_BATCH_SIZE

    @classmethod
    def immediate(cls, batch_size: int = None) -> "SyncTimings":
        return cls(0.0, 0.0, batch_size or settings.SYNC_BATCH_SIZE)


@dataclass
class SyncResult:
    new_matches: int = 0
    skipped: int = 0
    total: int = 0
    new_match_ids: List[str] = field(default_factory=list)
    updated: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "new_matches": self.new_matches,
            "skipped": self.skipped,
            "total": self.total,
            "new_match_ids": list(self.new_match_ids),
            "updated": self.updated,
            "errors": self.errors,
        }


def dedupe(ids: Iterable[str]) -> List[str]:
    """Drop repeats, keeping the first occurrence's position."""
    return list(dict.fromkeys(ids))


def notify_progress(on_progress: Optional[ProgressCallback], *args: Any) -> None:
    if on_progress is None:
        return
    try:
        on_progress(*args)
    except Exception as exc:
        logger.debug(lambda: f"progress callback failed: {exc!r}")


class SyncEngine:
    """
    Keeps the local store in step with a player's match history.

    Discovery:
    - forward: everything after the newest stored match
    - backward: season start up to the oldest stored match, when that gap
      exceeds a day; ids already stored are filtered out
    - special queues: listed separately with an explicit queue filter,
      retried, and put first in processing order

    Every id needing work is fetched in small concurrent batches and
    resolves to exactly one ``UnitOutcome``.
    """

    def __init__(
        self,
        gateway: IRiotGateway,
        store: IMatchStore,
        *,
        timings: SyncTimings | None = None,
        retry_policy: RetryPolicy | None = None,
        season_start: int = None,
        special_queues: Sequence[int] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.timings = timings or SyncTimings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.season_start = settings.SEASON_START if season_start is None else season_start
        self.special_queues = tuple(settings.SPECIAL_QUEUES if special_queues is None else special_queues)

    async def _sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    # ------------------------------------------------------------------ #
    # Id discovery
    # ------------------------------------------------------------------ #

    async def _discover_regular_ids(self, puuid: str) -> List[str]:
        oldest, latest = self.store.get_creation_bounds()
        if latest is None:
            logger.info("First sync: listing all matches since season start")
            return await self.gateway.list_match_ids(puuid, start_time=self.season_start)

        forward_start = latest // 1000 + 1
        ids = list(await self.gateway.list_match_ids(puuid, start_time=forward_start))
        logger.info(lambda: f"Found {len(ids)} new matches (forward)")

        if oldest is not None and oldest // 1000 > self.season_start + BACKFILL_GAP_S:
            known = self.store.get_known_match_ids()
            backward = await self.gateway.list_match_ids(puuid, start_time=self.season_start)
            missing = [m for m in backward if m not in known]
            logger.info(lambda: f"Found {len(missing)} missing older matches (backward)")
            ids.extend(missing)
        return ids

    async def _discover_special_queue_ids(
        self, puuid: str, on_progress: Optional[ProgressCallback]
    ) -> List[str]:
        ids: List[str] = []
        for queue_id in self.special_queues:

            async def _list(queue_id: int = queue_id) -> List[str]:
                return await self.gateway.list_match_ids(
                    puuid, start_time=self.season_start, queue=queue_id
                )

            try:
                found = await self.retry_policy.run(
                    _list, logger=logger, context={"queue": queue_id, "phase": "special-queue"}
                )
            except Exception as exc:
                message = f"Failed to fetch queue {queue_id} matches - will retry next sync"
                logger.warning(lambda: f"{message} ({exc})")
                notify_progress(on_progress, 0, 0, "warn", message)
                continue
            logger.debug(lambda: f"Found {len(found)} matches for queue {queue_id}")
            ids.extend(found)
            await self._sleep(self.timings.request_delay_s)
        return ids

    # ------------------------------------------------------------------ #
    # Per-match unit
    # ------------------------------------------------------------------ #

    def _needs_fetch(self, match_id: str) -> tuple[bool, bool]:
        """(needs_fetch, already_stored)."""
        missing = self.store.get_missing_columns(match_id)
        if missing is None:
            return True, False
        return bool(missing), True

    async def _fetch_timeline(self, match_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.gateway.get_timeline(match_id)
        except Exception as exc:
            logger.warning(lambda: f"Could not fetch timeline for {match_id}: {exc}")
            return None

    async def _process_unit(self, match_id: str, puuid: str) -> UnitOutcome:
        with log_context(match_id=match_id):
            try:
                needs_fetch, stored = self._needs_fetch(match_id)
                if not needs_fetch:
                    logger.trace("already complete, skipping")
                    return UnitOutcome.SKIPPED

                detail = await self.gateway.get_match(match_id)
                await self._sleep(self.timings.request_delay_s)
                timeline = await self._fetch_timeline(match_id)
                if timeline is None and stored:
                    existing = self.store.get_match(match_id)
                    timeline = existing.timeline_json if existing else None

                record = MatchRecord.from_payload(match_id, detail, timeline, puuid)
                if record is None:
                    logger.error("player not among participants")
                    return UnitOutcome.ERROR
                record.advanced = compute_advanced_stats(detail, timeline, puuid)
                self.store.upsert_match(record)
            except Exception as exc:
                logger.error(lambda: f"Error processing match: {exc}")
                return UnitOutcome.ERROR

            s = record.subject
            logger.debug(
                lambda: f"{'Updated' if stored else 'Saved'} {s.champion_name} "
                        f"({s.team_position or s.lane}) {s.kills}/{s.deaths}/{s.assists}"
            )
            return UnitOutcome.UPDATED if stored else UnitOutcome.NEW

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    @traceable
    async def sync_matches(
        self, puuid: str, on_progress: Optional[ProgressCallback] = None
    ) -> SyncResult:
        """Discover, fetch and store every match of ``puuid`` not yet complete locally.

        Listing failures of the regular history propagate; special-queue
        failures and per-match failures do not.
        """
        with log_context(puuid=puuid, phase="sync"):
            regular = await self._discover_regular_ids(puuid)
            special = await self._discover_special_queue_ids(puuid, on_progress)
            match_ids = dedupe(list(special) + list(regular))
            logger.info(lambda: f"Total unique matches to process: {len(match_ids)}")

            result = SyncResult(total=len(match_ids))
            if not match_ids:
                notify_progress(on_progress, 0, 0, "complete")
                return result

            total = len(match_ids)
            size = max(1, self.timings.batch_size)
            processed = 0
            notify_progress(on_progress, 0, total)

            for i in range(0, total, size):
                batch = match_ids[i:i + size]
                outcomes = await asyncio.gather(*(self._process_unit(mid, puuid) for mid in batch))
                for mid, outcome in zip(batch, outcomes):
                    if outcome is UnitOutcome.NEW:
                        result.new_matches += 1
                        result.new_match_ids.append(mid)
                    elif outcome is UnitOutcome.UPDATED:
                        result.updated += 1
                    elif outcome is UnitOutcome.SKIPPED:
                        result.skipped += 1
                    else:
                        result.errors += 1

                processed += len(batch)
                notify_progress(on_progress, processed, total)
                if i + size < total:
                    await self._sleep(self.timings.inter_batch_delay_s)

            logger.success(
                lambda: f"Sync complete: {result.new_matches} new, {result.updated} updated, "
                        f"{result.skipped} skipped, {result.errors} errors"
            )
            return result

    async def backfill_timelines(self, on_progress: Optional[ProgressCallback] = None) -> Dict[str, int]:
        """Fetch timelines for stored matches lacking one, newest first, one at a time."""
        with log_context(phase="backfill-timelines"):
            ids = self.store.get_ids_missing_timeline()
            total = len(ids)
            updated = failed = 0
            for idx, match_id in enumerate(ids, start=1):
                try:
                    timeline = await self.gateway.get_timeline(match_id)
                    self.store.set_timeline(match_id, timeline)
                    updated += 1
                except Exception as exc:
                    logger.warning(lambda: f"Timeline backfill failed for {match_id}: {exc}")
                    failed += 1
                notify_progress(on_progress, idx, total)
                if idx < total:
                    await self._sleep(self.timings.request_delay_s)

            if total:
                logger.info(lambda: f"Timeline backfill: {updated} updated, {failed} failed of {total}")
            return {"updated": updated, "failed": failed, "total": total}

    def backfill_advanced_stats(self, on_progress: Optional[ProgressCallback] = None) -> Dict[str, int]:
        """Recompute derived stats from stored payloads. No external calls."""
        with log_context(phase="backfill-stats"):
            rows = self.store.get_rows_missing_stats()
            total = len(rows)
            updated = 0
            for idx, row in enumerate(rows, start=1):
                stats = compute_advanced_stats(
                    row.get("raw_json"),
                    row.get("timeline_json"),
                    row.get("puuid"),
                    champion_name=row.get("champion_name"),
                    team_id=row.get("team_id"),
                )
                self.store.set_advanced_stats(row["match_id"], stats)
                updated += 1
                notify_progress(on_progress, idx, total)

            if total:
                logger.info(lambda: f"Advanced stats backfill: {updated} of {total}")
            return {"updated": updated, "total": total}
