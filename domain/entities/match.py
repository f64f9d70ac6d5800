"""Match record: one stored match from the tracked player's point of view."""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .advanced_stats import AdvancedStats
from .participant import ParticipantSnapshot
from .team import TeamObjectives

# A stored row with any of these NULL is re-fetched by the next sync.
REQUIRED_COLUMNS = (
    'game_duration',
    'total_minions_killed',
    'team_dragons',
    'team_barons',
    'team_rift_heralds',
    'primary_rune',
    'team_kills',
    'timeline_json',
)


def _load_json(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if isinstance(value, (bytes, str)):
        return json.loads(value)
    return value


@dataclass
class MatchRecord:
    """A persisted match keyed by ``match_id``."""

    # Identity
    match_id: str

    # Match metadata
    queue_id: int
    game_creation: int  # Unix timestamp milliseconds
    game_duration: int  # Seconds

    # Subject + team snapshot
    subject: ParticipantSnapshot
    team: TeamObjectives

    # Raw payloads
    raw_json: Dict[str, Any]
    timeline_json: Optional[Dict[str, Any]] = None

    # Derived
    advanced: AdvancedStats = field(default_factory=AdvancedStats)

    @property
    def game_date(self) -> datetime:
        return datetime.fromtimestamp(self.game_creation / 1000, tz=timezone.utc)

    @property
    def has_timeline(self) -> bool:
        return self.timeline_json is not None

    @property
    def participants(self) -> list:
        return (self.raw_json.get('info') or {}).get('participants') or []

    @classmethod
    def from_payload(
        cls,
        match_id: str,
        detail: Dict[str, Any],
        timeline: Optional[Dict[str, Any]],
        puuid: str,
    ) -> Optional['MatchRecord']:
        """Build a record from raw payloads, or ``None`` if ``puuid`` did not play."""
        info = detail.get('info') or {}
        me = next((p for p in info.get('participants') or [] if p.get('puuid') == puuid), None)
        if me is None:
            return None
        subject = ParticipantSnapshot.from_payload(me)
        return cls(
            match_id=match_id,
            queue_id=int(info.get('queueId') or 0),
            game_creation=int(info.get('gameCreation') or 0),
            game_duration=int(info.get('gameDuration') or 0),
            subject=subject,
            team=TeamObjectives.from_payload(info, subject.team_id),
            raw_json=detail,
            timeline_json=timeline,
        )

    def to_row(self) -> Dict[str, Any]:
        """Flatten into ``matches`` table columns (payloads JSON-encoded)."""
        row: Dict[str, Any] = {
            'match_id': self.match_id,
            'queue_id': self.queue_id,
            'game_creation': self.game_creation,
            'game_duration': self.game_duration,
        }
        row.update(self.subject.to_row())
        row.update(self.team.to_row())
        row['raw_json'] = json.dumps(self.raw_json, separators=(',', ':'))
        row['timeline_json'] = (
            json.dumps(self.timeline_json, separators=(',', ':'))
            if self.timeline_json is not None else None
        )
        row.update(self.advanced.to_row())
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'MatchRecord':
        return cls(
            match_id=row['match_id'],
            queue_id=int(row.get('queue_id') or 0),
            game_creation=int(row.get('game_creation') or 0),
            game_duration=int(row.get('game_duration') or 0),
            subject=ParticipantSnapshot.from_row(row),
            team=TeamObjectives.from_row(row),
            raw_json=_load_json(row.get('raw_json')) or {},
            timeline_json=_load_json(row.get('timeline_json')),
            advanced=AdvancedStats.from_row(row),
        )
