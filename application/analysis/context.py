"""Per-match analysis context shared by the stats computer and badge rules."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.entities import MatchRecord
from domain.enums import TimelineEventType
from .geometry import Frame, enemy_team_of

Event = Dict[str, Any]
Participant = Dict[str, Any]


def _payload(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _find_subject(
    participants: List[Participant],
    puuid: Optional[str],
    champion_name: Optional[str],
    team_id: Optional[int],
) -> Optional[Participant]:
    if puuid:
        me = next((p for p in participants if p.get("puuid") == puuid), None)
        if me is not None:
            return me
    if champion_name and team_id is not None:
        return next(
            (p for p in participants
             if p.get("championName") == champion_name and p.get("teamId") == team_id),
            None,
        )
    return None


@dataclass
class AnalysisContext:
    """Subject, team split and indexed timeline of one match.

    Built once per evaluation and never persisted. Participant ids in
    ``my_pid``/``my_team_ids``/``enemy_team_ids`` are timeline actor ids,
    so event ``killerId``/``victimId`` values compare directly.
    """

    info: Dict[str, Any]
    participants: List[Participant]
    me: Participant
    my_team: List[Participant]
    enemy_team: List[Participant]
    team_kills: int
    game_duration: int
    win: bool
    my_team_id: int
    enemy_team_id: int

    has_timeline: bool = False
    frames: List[Frame] = field(default_factory=list)
    my_pid: Optional[int] = None
    my_team_ids: List[int] = field(default_factory=list)
    enemy_team_ids: List[int] = field(default_factory=list)
    events: Dict[TimelineEventType, List[Event]] = field(default_factory=dict)
    _pid_by_puuid: Dict[str, int] = field(default_factory=dict, repr=False)

    @classmethod
    def build(
        cls,
        detail: Any,
        timeline: Any = None,
        *,
        puuid: Optional[str] = None,
        champion_name: Optional[str] = None,
        team_id: Optional[int] = None,
    ) -> Optional['AnalysisContext']:
        """``None`` when the detail payload is missing or the subject is absent."""
        detail = _payload(detail)
        if not detail:
            return None
        info = detail.get("info") or detail
        participants: List[Participant] = info.get("participants") or []
        me = _find_subject(participants, puuid, champion_name, team_id)
        if me is None:
            return None

        my_team_id = me.get("teamId")
        my_team = [p for p in participants if p.get("teamId") == my_team_id]
        ctx = cls(
            info=info,
            participants=participants,
            me=me,
            my_team=my_team,
            enemy_team=[p for p in participants if p.get("teamId") != my_team_id],
            team_kills=sum(int(p.get("kills") or 0) for p in my_team),
            game_duration=int(info.get("gameDuration") or 0),
            win=bool(me.get("win")),
            my_team_id=my_team_id,
            enemy_team_id=enemy_team_of(my_team_id),
            events={kind: [] for kind in TimelineEventType},
        )

        timeline = _payload(timeline)
        if timeline:
            ctx._index_timeline(timeline)
        return ctx

    @classmethod
    def from_record(cls, record: MatchRecord) -> Optional['AnalysisContext']:
        return cls.build(
            record.raw_json,
            record.timeline_json,
            puuid=record.subject.puuid,
            champion_name=record.subject.champion_name,
            team_id=record.subject.team_id,
        )

    def _index_timeline(self, timeline: Dict[str, Any]) -> None:
        tl_info = timeline.get("info") or {}
        self.has_timeline = True
        self.frames = tl_info.get("frames") or []

        for tp in tl_info.get("participants") or []:
            if tp.get("puuid") and tp.get("participantId") is not None:
                self._pid_by_puuid[tp["puuid"]] = tp["participantId"]
        if not self._pid_by_puuid:
            # Older timelines only list puuids in metadata, in participant order.
            for idx, tp_puuid in enumerate((timeline.get("metadata") or {}).get("participants") or []):
                self._pid_by_puuid[tp_puuid] = idx + 1

        self.my_pid = self.pid_of(self.me)
        for p in self.participants:
            pid = self.pid_of(p)
            if pid is None:
                continue
            if p.get("teamId") == self.my_team_id:
                self.my_team_ids.append(pid)
            else:
                self.enemy_team_ids.append(pid)

        for frame in self.frames:
            for event in frame.get("events") or []:
                self.events[TimelineEventType.from_raw(event.get("type"))].append(event)
        for bucket in self.events.values():
            bucket.sort(key=lambda e: e.get("timestamp") or 0)

    def pid_of(self, participant: Participant) -> Optional[int]:
        """Timeline actor id of a detail participant.

        Prefers the timeline's puuid mapping, then the detail's own
        ``participantId``, then list position.
        """
        mapped = self._pid_by_puuid.get(participant.get("puuid"))
        if mapped is not None:
            return mapped
        if participant.get("participantId"):
            return participant["participantId"]
        try:
            return self.participants.index(participant) + 1
        except ValueError:
            return None

    # ── Event views ────────────────────────────────────────────────────

    @property
    def kill_events(self) -> List[Event]:
        return self.events.get(TimelineEventType.CHAMPION_KILL, [])

    @property
    def elite_monster_events(self) -> List[Event]:
        return self.events.get(TimelineEventType.ELITE_MONSTER_KILL, [])

    @property
    def building_events(self) -> List[Event]:
        return self.events.get(TimelineEventType.BUILDING_KILL, [])

    def _events_where(self, kind_filter) -> List[Event]:
        merged = [e for kind, bucket in self.events.items() if kind_filter(kind) for e in bucket]
        return sorted(merged, key=lambda e: e.get("timestamp") or 0)

    @property
    def level_events(self) -> List[Event]:
        return self.events.get(TimelineEventType.LEVEL_UP, [])

    @property
    def objective_events(self) -> List[Event]:
        """Elite monster and building kills, by time."""
        return self._events_where(lambda kind: kind.is_objective)

    @property
    def allies(self) -> List[int]:
        """Teammates' actor ids, excluding the subject."""
        return [pid for pid in self.my_team_ids if pid != self.my_pid]

    def participated(self, event: Event, pid: Optional[int] = None) -> bool:
        pid = self.my_pid if pid is None else pid
        return event.get("killerId") == pid or pid in (event.get("assistingParticipantIds") or [])

    def credited_to_team(self, event: Event) -> bool:
        """Killer or any assister is on the subject's team."""
        team = set(self.my_team_ids)
        if event.get("killerId") in team:
            return True
        return any(pid in team for pid in event.get("assistingParticipantIds") or [])
