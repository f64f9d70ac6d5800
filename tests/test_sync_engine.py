import asyncio
from unittest.mock import ANY, MagicMock, call

import pytest

from application.services import UnitOutcome
from application.services.sync_engine import dedupe
from domain.entities import MatchRecord
from domain.exceptions import PermanentExternalError
from tests.fakes import SEASON_START, FakeGateway, detail_at
from tests.factories import SUBJECT_PID, SUBJECT_PUUID, make_detail, make_timeline


def _regular(n: int) -> dict:
    return {f"EUW1_{1000 + i}": detail_at(i) for i in range(n)}


class _InFlightGateway(FakeGateway):
    """Records the most detail fetches ever pending at once."""

    def __init__(self, details):
        super().__init__(details)
        self.in_flight = 0
        self.peak = 0

    async def get_match(self, match_id):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0)
            return await super().get_match(match_id)
        finally:
            self.in_flight -= 1


class _GhostIdGateway(FakeGateway):
    """Regular listings also return an id whose detail is gone."""

    def __init__(self, details, ghost):
        super().__init__(details)
        self.ghost = ghost

    async def list_match_ids(self, puuid, start_time=None, queue=None):
        ids = await super().list_match_ids(puuid, start_time, queue)
        return ids if queue is not None else ids + [self.ghost]


class TestDiscovery:
    def test_dedupe_keeps_first_occurrence(self):
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_first_sync_lists_from_season_start(self, make_engine):
        gateway = FakeGateway(_regular(3))
        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert (SEASON_START, None) in gateway.list_calls
        assert result.new_matches == 3
        assert result.total == 3
        assert sorted(result.new_match_ids) == sorted(gateway.details)

    @pytest.mark.asyncio
    async def test_second_sync_uses_forward_cursor(self, make_engine, store):
        gateway = FakeGateway(_regular(2))
        engine = make_engine(gateway)
        await engine.sync_matches(SUBJECT_PUUID)
        _, latest = store.get_creation_bounds()

        gateway.details["EUW1_1005"] = detail_at(5)
        gateway.list_calls.clear()
        result = await engine.sync_matches(SUBJECT_PUUID)

        assert (latest // 1000 + 1, None) in gateway.list_calls
        assert result.new_match_ids == ["EUW1_1005"]

    @pytest.mark.asyncio
    async def test_backward_gap_fill_skips_known_ids(self, make_engine, store):
        gateway = FakeGateway({"EUW1_1010": detail_at(10)})
        engine = make_engine(gateway)
        await engine.sync_matches(SUBJECT_PUUID)

        # An older match the first listing never returned.
        gateway.details["EUW1_1001"] = detail_at(1)
        gateway.detail_calls.clear()
        result = await engine.sync_matches(SUBJECT_PUUID)

        assert result.new_match_ids == ["EUW1_1001"]
        assert gateway.detail_calls == ["EUW1_1001"]

    @pytest.mark.asyncio
    async def test_overlapping_sources_process_each_id_once(self, make_engine):
        details = _regular(3)
        details["EUW1_2000"] = make_detail("EUW1_2000", queue_id=1700)
        details["EUW1_2001"] = make_detail("EUW1_2001", queue_id=2400)
        gateway = FakeGateway(details, overlap_special=True)

        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert len(gateway.detail_calls) == len(set(gateway.detail_calls)) == 5
        assert result.total == 5
        assert result.new_matches == 5

    @pytest.mark.asyncio
    async def test_special_queue_ids_are_processed_first(self, make_engine):
        details = _regular(2)
        details["EUW1_2000"] = make_detail("EUW1_2000", queue_id=1700)
        gateway = FakeGateway(details)

        await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert gateway.detail_calls[0] == "EUW1_2000"

    @pytest.mark.asyncio
    async def test_failing_special_queue_warns_and_continues(self, make_engine):
        details = _regular(2)
        details["EUW1_2000"] = make_detail("EUW1_2000", queue_id=2400)
        gateway = FakeGateway(details, failing_queues={1700})
        on_progress = MagicMock()

        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID, on_progress)

        assert [c for c in gateway.list_calls if c[1] == 1700] == [(SEASON_START, 1700)] * 3
        assert call(0, 0, "warn", ANY) in on_progress.call_args_list
        assert result.new_matches == 3

    @pytest.mark.asyncio
    async def test_regular_listing_failure_propagates(self, make_engine):
        gateway = FakeGateway({})

        async def broken(*args, **kwargs):
            raise PermanentExternalError("HTTP 403", status_code=403)

        gateway.list_match_ids = broken
        with pytest.raises(PermanentExternalError):
            await make_engine(gateway).sync_matches(SUBJECT_PUUID)


class TestProcessing:
    @pytest.mark.asyncio
    async def test_resync_is_idempotent(self, make_engine, store):
        gateway = FakeGateway(_regular(3))
        engine = make_engine(gateway)

        first = await engine.sync_matches(SUBJECT_PUUID)
        second = await engine.sync_matches(SUBJECT_PUUID)

        assert first.new_matches == 3
        assert second.new_matches == 0
        assert second.errors == 0
        assert store.count_matches() == 3

    @pytest.mark.asyncio
    async def test_empty_history_reports_complete(self, make_engine):
        on_progress = MagicMock()
        result = await make_engine(FakeGateway({})).sync_matches(SUBJECT_PUUID, on_progress)

        assert result.to_dict() == {
            "new_matches": 0, "skipped": 0, "total": 0,
            "new_match_ids": [], "updated": 0, "errors": 0,
        }
        on_progress.assert_called_once_with(0, 0, "complete")

    @pytest.mark.asyncio
    async def test_progress_reports_each_batch(self, make_engine):
        on_progress = MagicMock()
        await make_engine(FakeGateway(_regular(3))).sync_matches(SUBJECT_PUUID, on_progress)

        assert on_progress.call_args_list == [call(0, 3), call(2, 3), call(3, 3)]

    @pytest.mark.asyncio
    async def test_timeline_failure_still_persists_match(self, make_engine, store):
        gateway = FakeGateway(_regular(2), failing_timelines={"EUW1_1001"})
        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert result.new_matches == 2
        record = store.get_match("EUW1_1001")
        assert record is not None
        assert not record.has_timeline
        assert store.get_ids_missing_timeline() == ["EUW1_1001"]

    @pytest.mark.asyncio
    async def test_incomplete_row_is_refetched_as_updated(self, make_engine, store):
        gateway = FakeGateway(_regular(1), failing_timelines={"EUW1_1000"})
        engine = make_engine(gateway)
        await engine.sync_matches(SUBJECT_PUUID)

        gateway.failing_timelines.clear()
        assert await engine._process_unit("EUW1_1000", SUBJECT_PUUID) is UnitOutcome.UPDATED
        assert store.get_missing_columns("EUW1_1000") == []

    @pytest.mark.asyncio
    async def test_subject_not_in_match_is_an_error(self, make_engine, store):
        details = _regular(1)
        details["EUW1_1001"] = detail_at(1, pids=range(4, 11))
        gateway = FakeGateway(details)

        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert result.errors == 1
        assert result.new_matches == 1
        assert store.get_match("EUW1_1001") is None

    @pytest.mark.asyncio
    async def test_stored_match_carries_derived_stats(self, make_engine, store):
        await make_engine(FakeGateway(_regular(1))).sync_matches(SUBJECT_PUUID)

        record = store.get_match("EUW1_1000")
        assert record.subject.champion_name == "Champ3"
        assert record.advanced.cs_diff_15 == 0
        assert record.advanced.first_blood == 0

    @pytest.mark.asyncio
    async def test_refetch_keeps_stored_timeline_when_timeline_fails(self, make_engine, store):
        detail = detail_at(0, overrides={SUBJECT_PID: {"perks": {}}})
        store.upsert_match(MatchRecord.from_payload("EUW1_1000", detail, make_timeline(20), SUBJECT_PUUID))
        assert store.get_missing_columns("EUW1_1000") == ["primary_rune"]
        assert store.get_match("EUW1_1000").has_timeline

        gateway = FakeGateway({"EUW1_1000": detail}, failing_timelines={"EUW1_1000"})
        outcome = await make_engine(gateway)._process_unit("EUW1_1000", SUBJECT_PUUID)

        assert outcome is UnitOutcome.UPDATED
        record = store.get_match("EUW1_1000")
        assert record.has_timeline
        assert record.advanced.cs_diff_15 == 0
        assert record.advanced.isolated_deaths == 0

    @pytest.mark.asyncio
    async def test_at_most_one_batch_of_details_in_flight(self, make_engine):
        gateway = _InFlightGateway(_regular(5))
        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert result.new_matches == 5
        assert gateway.peak == 2

    @pytest.mark.asyncio
    async def test_failing_detail_does_not_sink_its_batch(self, make_engine, store):
        gateway = _GhostIdGateway(_regular(1), ghost="EUW1_0999")
        result = await make_engine(gateway).sync_matches(SUBJECT_PUUID)

        assert gateway.detail_calls == ["EUW1_1000", "EUW1_0999"]
        assert result.errors == 1
        assert result.new_match_ids == ["EUW1_1000"]
        assert store.get_match("EUW1_1000") is not None
        assert store.get_match("EUW1_0999") is None


class TestBackfills:
    @pytest.mark.asyncio
    async def test_backfill_timelines(self, make_engine, store):
        gateway = FakeGateway(_regular(3), failing_timelines={"EUW1_1000", "EUW1_1002"})
        engine = make_engine(gateway)
        await engine.sync_matches(SUBJECT_PUUID)

        gateway.failing_timelines = {"EUW1_1000"}
        on_progress = MagicMock()
        summary = await engine.backfill_timelines(on_progress)

        assert summary == {"updated": 1, "failed": 1, "total": 2}
        assert store.get_ids_missing_timeline() == ["EUW1_1000"]
        assert on_progress.call_args_list == [call(1, 2), call(2, 2)]

    def test_backfill_advanced_stats_makes_no_calls(self, make_engine, store):
        record = MatchRecord.from_payload("EUW1_1000", detail_at(0), make_timeline(20), SUBJECT_PUUID)
        store.upsert_match(record)
        gateway = FakeGateway({})

        summary = make_engine(gateway).backfill_advanced_stats()

        assert summary == {"updated": 1, "total": 1}
        assert gateway.list_calls == gateway.detail_calls == gateway.timeline_calls == []
        assert store.get_match("EUW1_1000").has_timeline
        assert store.get_rows_missing_stats() == []
