"""Capability interfaces for the Riot API and the local store."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..entities import AdvancedStats, MatchRecord, PlayerRankEntry


class IRiotGateway(ABC):
    """Remote listing/detail/timeline/account/league data."""

    @abstractmethod
    async def list_match_ids(
        self,
        puuid: str,
        start_time: Optional[int] = None,
        queue: Optional[int] = None,
    ) -> List[str]:
        """All match ids since ``start_time`` (epoch seconds), paginated to the end."""

    @abstractmethod
    async def get_match(self, match_id: str) -> Dict[str, Any]:
        """Match-v5 detail payload."""

    @abstractmethod
    async def get_timeline(self, match_id: str) -> Dict[str, Any]:
        """Match-v5 timeline payload. May be unavailable for old matches."""

    @abstractmethod
    async def resolve_puuid(self, game_name: str, tag_line: str) -> str:
        """Account puuid for a Riot ID."""

    @abstractmethod
    async def get_league_entries(self, puuid: str) -> List[Dict[str, Any]]:
        """League-v4 entries for an account."""


class IMatchStore(ABC):
    """Persisted match records keyed by match id."""

    @abstractmethod
    def upsert_match(self, record: MatchRecord) -> None:
        """Insert or replace the record with ``record.match_id``."""

    @abstractmethod
    def get_match(self, match_id: str) -> Optional[MatchRecord]:
        pass

    @abstractmethod
    def get_missing_columns(self, match_id: str) -> Optional[List[str]]:
        """``None`` if absent, else the required columns that are NULL."""

    @abstractmethod
    def get_creation_bounds(self) -> tuple[Optional[int], Optional[int]]:
        """(oldest, latest) ``game_creation`` in ms, ``(None, None)`` when empty."""

    @abstractmethod
    def get_known_match_ids(self) -> set[str]:
        pass

    @abstractmethod
    def get_ids_missing_timeline(self) -> List[str]:
        """Newest first."""

    @abstractmethod
    def set_timeline(self, match_id: str, timeline: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def get_rows_missing_stats(self) -> List[Dict[str, Any]]:
        """Rows with raw detail but no derived stats, newest first."""

    @abstractmethod
    def set_advanced_stats(self, match_id: str, stats: AdvancedStats) -> None:
        pass

    @abstractmethod
    def get_raw_participants(self, match_id: str) -> List[Dict[str, Any]]:
        """Participant entries of the stored raw detail, empty if none."""


class IRankStore(ABC):
    """Persisted player rank cache keyed by puuid."""

    @abstractmethod
    def get_rank(self, puuid: str, min_fetched_at: int = 0) -> Optional[PlayerRankEntry]:
        """Entry fetched strictly after ``min_fetched_at`` (ms), if any."""

    @abstractmethod
    def upsert_rank(self, entry: PlayerRankEntry) -> None:
        pass
