from unittest.mock import AsyncMock, MagicMock

import pytest

from application.services import RankCache
from domain.entities import MatchRecord, PlayerRankEntry
from domain.exceptions import TransientExternalError
from domain.interfaces import IRiotGateway
from tests.factories import SUBJECT_PUUID, make_detail, make_timeline, puuid_for

NOW = 1_800_000_000_000
DAY_MS = 24 * 60 * 60 * 1000

SOLO_GOLD = [
    {"queueType": "RANKED_SOLO_5x5", "tier": "GOLD", "rank": "II", "leaguePoints": 45},
    {"queueType": "RANKED_FLEX_SR", "tier": "MASTER", "rank": "I", "leaguePoints": 120},
]


@pytest.fixture
def gateway():
    gw = MagicMock(spec=IRiotGateway)
    gw.get_league_entries = AsyncMock(return_value=SOLO_GOLD)
    return gw


@pytest.fixture
def cache(gateway, store, no_wait_retry):
    return RankCache(
        gateway, store, store,
        ttl_ms=DAY_MS,
        retry_policy=no_wait_retry,
        request_delay_s=0,
        clock=lambda: NOW,
    )


def _cached(store, puuid, age_ms, tier="SILVER"):
    store.upsert_rank(PlayerRankEntry(puuid=puuid, fetched_at=NOW - age_ms, solo_tier=tier, solo_rank="I", solo_lp=10))


class TestPlayerRank:
    @pytest.mark.asyncio
    async def test_fresh_entry_skips_the_api(self, cache, gateway, store):
        _cached(store, SUBJECT_PUUID, age_ms=1000)

        entry = await cache.get_player_rank(SUBJECT_PUUID)

        assert entry.solo_tier == "SILVER"
        gateway.get_league_entries.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_entry_is_refreshed(self, cache, gateway, store):
        _cached(store, SUBJECT_PUUID, age_ms=DAY_MS + 1)

        entry = await cache.get_player_rank(SUBJECT_PUUID)

        assert entry.solo_label == "Gold II 45 LP"
        assert entry.flex_label == "Master 120 LP"
        assert entry.fetched_at == NOW
        assert store.get_rank(SUBJECT_PUUID).solo_tier == "GOLD"

    @pytest.mark.asyncio
    async def test_max_age_overrides_ttl(self, cache, gateway, store):
        _cached(store, SUBJECT_PUUID, age_ms=5000)

        await cache.get_player_rank(SUBJECT_PUUID, max_age_ms=1000)

        gateway.get_league_entries.assert_awaited_once_with(SUBJECT_PUUID)

    @pytest.mark.asyncio
    async def test_failed_refresh_falls_back_to_stale_entry(self, cache, gateway, store):
        _cached(store, SUBJECT_PUUID, age_ms=3 * DAY_MS)
        gateway.get_league_entries.side_effect = TransientExternalError("HTTP 503", status_code=503)

        entry = await cache.get_player_rank(SUBJECT_PUUID)

        assert entry.solo_tier == "SILVER"

    @pytest.mark.asyncio
    async def test_failed_refresh_without_cache_is_none(self, cache, gateway):
        gateway.get_league_entries.side_effect = TransientExternalError("HTTP 503", status_code=503)
        assert await cache.get_player_rank(SUBJECT_PUUID) is None

    @pytest.mark.asyncio
    async def test_unranked_player(self, cache, gateway):
        gateway.get_league_entries.return_value = []
        entry = await cache.get_player_rank(SUBJECT_PUUID)
        assert entry.solo_label == "Unranked"


class TestNewMatchRanks:
    def _store_match(self, store, **detail_kwargs):
        detail = make_detail(**detail_kwargs)
        store.upsert_match(MatchRecord.from_payload("EUW1_1000", detail, make_timeline(20), SUBJECT_PUUID))

    @pytest.mark.asyncio
    async def test_fetches_every_participant_not_cached(self, cache, gateway, store):
        self._store_match(store)
        _cached(store, puuid_for(1), age_ms=1000)
        on_progress = MagicMock()

        summary = await cache.fetch_ranks_for_new_matches(["EUW1_1000"], on_progress)

        assert summary == {"fetched": 9, "failed": 0, "total": 9}
        assert gateway.get_league_entries.await_count == 9
        on_progress.assert_called_with(9, 9)

    @pytest.mark.asyncio
    async def test_short_puuids_are_ignored(self, cache, gateway, store):
        self._store_match(store, overrides={10: {"puuid": "BOT"}, 9: {"puuid": ""}})

        summary = await cache.fetch_ranks_for_new_matches(["EUW1_1000"])

        assert summary["total"] == 8

    @pytest.mark.asyncio
    async def test_failing_player_is_retried_then_counted(self, cache, gateway, store):
        self._store_match(store)
        bad = puuid_for(7)

        async def entries(puuid):
            if puuid == bad:
                raise TransientExternalError("HTTP 503", status_code=503)
            return SOLO_GOLD

        gateway.get_league_entries.side_effect = entries

        summary = await cache.fetch_ranks_for_new_matches(["EUW1_1000"])

        assert summary == {"fetched": 9, "failed": 1, "total": 10}
        assert [c.args[0] for c in gateway.get_league_entries.await_args_list].count(bad) == 3

    @pytest.mark.asyncio
    async def test_everything_cached(self, cache, gateway, store):
        self._store_match(store)
        for pid in range(1, 11):
            _cached(store, puuid_for(pid), age_ms=1000)

        assert await cache.fetch_ranks_for_new_matches(["EUW1_1000"]) == {"fetched": 0, "failed": 0, "total": 0}
        gateway.get_league_entries.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_match_ids(self, cache):
        assert await cache.fetch_ranks_for_new_matches(["EUW1_404"]) == {"fetched": 0, "failed": 0, "total": 0}


def test_participant_ranks_are_read_only(store):
    store.upsert_match(MatchRecord.from_payload("EUW1_1000", make_detail(), None, SUBJECT_PUUID))
    _cached(store, puuid_for(2), age_ms=10 * DAY_MS)

    ranks = RankCache(None, store, store).get_match_participant_ranks("EUW1_1000")

    assert len(ranks) == 10
    assert ranks[puuid_for(2)].solo_tier == "SILVER"
    assert ranks[puuid_for(5)] is None
