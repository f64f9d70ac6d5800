"""Riot gateway: one object the application layer talks to."""
from typing import Any, Dict, List, Optional

from domain.interfaces import IRiotGateway
from infrastructure.api import RiotAPIClient
from .account_repository import AccountRepository
from .match_repository import MatchRepository


class RiotGateway(IRiotGateway):
    """Combines the match and account repositories behind ``IRiotGateway``."""

    def __init__(self, api_client: RiotAPIClient, **match_options: Any):
        self.api_client = api_client
        self.matches = MatchRepository(api_client, **match_options)
        self.accounts = AccountRepository(api_client)

    async def list_match_ids(
        self,
        puuid: str,
        start_time: Optional[int] = None,
        queue: Optional[int] = None,
    ) -> List[str]:
        return await self.matches.list_match_ids(puuid, start_time=start_time, queue=queue)

    async def get_match(self, match_id: str) -> Dict[str, Any]:
        return await self.matches.get_match(match_id)

    async def get_timeline(self, match_id: str) -> Dict[str, Any]:
        return await self.matches.get_timeline(match_id)

    async def resolve_puuid(self, game_name: str, tag_line: str) -> str:
        return await self.accounts.resolve_puuid(game_name, tag_line)

    async def get_league_entries(self, puuid: str) -> List[Dict[str, Any]]:
        return await self.accounts.get_league_entries(puuid)
