"""Test doubles for the Riot gateway."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from domain.exceptions import PermanentExternalError, TransientExternalError
from domain.interfaces import IRiotGateway
from tests.factories import BASE_CREATION_MS, make_detail, make_timeline

SEASON_START = BASE_CREATION_MS // 1000 - 30 * 86_400


class FakeGateway(IRiotGateway):
    """In-memory Riot API.

    ``details`` maps match id to detail payload. Regular listings return
    every non-special match created at or after ``start_time``; queue
    listings return that queue's matches.
    """

    def __init__(
        self,
        details: Dict[str, Dict[str, Any]],
        *,
        special_queues: Iterable[int] = (2400, 1700, 1710),
        failing_queues: Iterable[int] = (),
        failing_timelines: Iterable[str] = (),
        overlap_special: bool = False,
    ):
        self.details = dict(details)
        self.special_queues = set(special_queues)
        self.failing_queues = set(failing_queues)
        self.failing_timelines = set(failing_timelines)
        self.overlap_special = overlap_special
        self.list_calls: List[tuple] = []
        self.detail_calls: List[str] = []
        self.timeline_calls: List[str] = []
        self.league: Dict[str, List[Dict[str, Any]]] = {}

    def _ids(self, start_time: Optional[int], predicate) -> List[str]:
        ids = [
            mid for mid, d in self.details.items()
            if predicate(d["info"]["queueId"])
            and (start_time is None or d["info"]["gameCreation"] // 1000 >= start_time)
        ]
        return sorted(ids, key=lambda m: self.details[m]["info"]["gameCreation"], reverse=True)

    async def list_match_ids(self, puuid, start_time=None, queue=None):
        self.list_calls.append((start_time, queue))
        if queue is not None:
            if queue in self.failing_queues:
                raise TransientExternalError("HTTP 503", status_code=503)
            return self._ids(start_time, lambda q: q == queue)
        if self.overlap_special:
            return self._ids(start_time, lambda q: True)
        return self._ids(start_time, lambda q: q not in self.special_queues)

    async def get_match(self, match_id):
        self.detail_calls.append(match_id)
        if match_id not in self.details:
            raise PermanentExternalError("HTTP 404", status_code=404)
        return self.details[match_id]

    async def get_timeline(self, match_id):
        self.timeline_calls.append(match_id)
        if match_id in self.failing_timelines:
            raise TransientExternalError("HTTP 503", status_code=503)
        return make_timeline(20)

    async def resolve_puuid(self, game_name, tag_line):
        raise PermanentExternalError("HTTP 404", status_code=404)

    async def get_league_entries(self, puuid):
        return self.league.get(puuid, [])


def detail_at(index: int, queue_id: int = 420, **kwargs) -> Dict[str, Any]:
    """Detail of match ``EUW1_<1000+index>`` created ``index`` hours after the base time."""
    return make_detail(
        f"EUW1_{1000 + index}",
        game_creation=BASE_CREATION_MS + index * 3_600_000,
        queue_id=queue_id,
        **kwargs,
    )
