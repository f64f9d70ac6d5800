"""Cached rank lookup for one player."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from ..enums import QueueType, Tier


@dataclass
class PlayerRankEntry:
    """Solo/Duo and Flex standings of a player, stamped with fetch time."""

    puuid: str
    fetched_at: int  # Unix timestamp milliseconds

    solo_tier: Optional[str] = None
    solo_rank: Optional[str] = None
    solo_lp: Optional[int] = None

    flex_tier: Optional[str] = None
    flex_rank: Optional[str] = None
    flex_lp: Optional[int] = None

    def is_fresh(self, now_ms: int, max_age_ms: int) -> bool:
        return self.fetched_at > now_ms - max_age_ms

    @property
    def solo_label(self) -> str:
        return self._label(self.solo_tier, self.solo_rank, self.solo_lp)

    @property
    def flex_label(self) -> str:
        return self._label(self.flex_tier, self.flex_rank, self.flex_lp)

    @staticmethod
    def _label(tier: Optional[str], rank: Optional[str], lp: Optional[int]) -> str:
        t = Tier.from_string(tier)
        if t is None:
            return "Unranked"
        name = t.value.title() if t.is_apex else f"{t.value.title()} {rank or ''}".strip()
        return f"{name} {lp or 0} LP"

    @classmethod
    def from_league_entries(
        cls, puuid: str, entries: List[Dict[str, Any]], fetched_at: int
    ) -> 'PlayerRankEntry':
        row = cls(puuid=puuid, fetched_at=fetched_at)
        for entry in entries or []:
            queue = QueueType.from_api_name(entry.get('queueType', ''))
            if queue is QueueType.RANKED_SOLO_5x5:
                row.solo_tier = entry.get('tier')
                row.solo_rank = entry.get('rank')
                row.solo_lp = entry.get('leaguePoints')
            elif queue is QueueType.RANKED_FLEX_SR:
                row.flex_tier = entry.get('tier')
                row.flex_rank = entry.get('rank')
                row.flex_lp = entry.get('leaguePoints')
        return row

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'PlayerRankEntry':
        return cls(**{k: row.get(k) for k in cls.__dataclass_fields__})
