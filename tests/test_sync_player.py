from unittest.mock import MagicMock

import pytest

from application.services import RankCache
from application.use_cases import SyncPlayerUseCase
from domain.exceptions import IdentityResolutionError, PermanentExternalError
from tests.fakes import FakeGateway, detail_at
from tests.factories import SUBJECT_PUUID


class ResolvingGateway(FakeGateway):
    def __init__(self, *args, resolve_error=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.resolve_error = resolve_error
        self.resolved = []

    async def resolve_puuid(self, game_name, tag_line):
        self.resolved.append((game_name, tag_line))
        if self.resolve_error:
            raise self.resolve_error
        return SUBJECT_PUUID


@pytest.fixture
def build(store, make_engine, no_wait_retry):
    def _build(gateway):
        cache = RankCache(gateway, store, store, retry_policy=no_wait_retry, request_delay_s=0)
        return SyncPlayerUseCase(gateway, store, engine=make_engine(gateway), rank_cache=cache)
    return _build


@pytest.mark.asyncio
async def test_full_sync(build, store):
    gateway = ResolvingGateway({f"EUW1_{1000 + i}": detail_at(i) for i in range(2)})
    gateway.league[SUBJECT_PUUID] = [
        {"queueType": "RANKED_SOLO_5x5", "tier": "EMERALD", "rank": "IV", "leaguePoints": 3},
    ]
    stages = []

    report = await build(gateway).execute(" Faker ", "#KR1", on_status=lambda s, m: stages.append(s))

    assert gateway.resolved == [("Faker", "KR1")]
    assert report.puuid == SUBJECT_PUUID
    assert report.own_rank.solo_label == "Emerald IV 3 LP"
    assert report.sync.new_matches == 2
    assert report.ranks == {"fetched": 9, "failed": 0, "total": 9}
    assert report.summary() == "2 new matches added, 9 player ranks fetched"
    assert stages == [
        "Finding Account", "Syncing Matches", "Fetching Timelines",
        "Computing Advanced Stats", "Fetching Player Ranks", "Sync Complete",
    ]
    assert store.count_matches() == 2


@pytest.mark.asyncio
async def test_nothing_new_skips_rank_fetch(build):
    gateway = ResolvingGateway({})
    on_status = MagicMock()

    report = await build(gateway).execute("Name", "TAG", on_status=on_status)

    assert report.ranks == {"fetched": 0, "failed": 0, "total": 0}
    assert "Fetching Player Ranks" not in [c.args[0] for c in on_status.call_args_list]


@pytest.mark.asyncio
@pytest.mark.parametrize("status, message", [
    (404, "Player not found. Check your Riot ID"),
    (403, "Invalid or expired API key"),
])
async def test_resolution_failure_aborts(build, status, message):
    gateway = ResolvingGateway({}, resolve_error=PermanentExternalError(f"HTTP {status}", status_code=status))

    with pytest.raises(IdentityResolutionError, match=message):
        await build(gateway).execute("Name", "TAG")
    assert gateway.list_calls == []


@pytest.mark.asyncio
async def test_blank_riot_id_is_rejected(build):
    gateway = ResolvingGateway({})
    with pytest.raises(IdentityResolutionError):
        await build(gateway).execute("", "TAG")
    assert gateway.resolved == []
