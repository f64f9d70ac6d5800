"""Account and league repository implementation."""
import logging
from typing import Any, Dict, List

from domain.exceptions import IdentityResolutionError, PermanentExternalError
from infrastructure.api import RiotAPIClient

logger = logging.getLogger(__name__)


class AccountRepository:
    """Riot ID resolution and league entries."""

    def __init__(self, api_client: RiotAPIClient):
        self.api_client = api_client

    async def resolve_puuid(self, game_name: str, tag_line: str) -> str:
        """
        Resolve a Riot ID to its puuid.

        Raises:
            IdentityResolutionError: the account payload carries no puuid
            PermanentExternalError: unknown Riot ID (404) or bad key
        """
        data = await self.api_client.get_account_by_riot_id(game_name, tag_line)
        puuid = (data or {}).get('puuid')
        if not puuid:
            raise IdentityResolutionError(f"No puuid returned for {game_name}#{tag_line}")
        return puuid

    async def get_league_entries(self, puuid: str) -> List[Dict[str, Any]]:
        """League entries for a player; unranked players yield an empty list."""
        try:
            return await self.api_client.get_league_entries_by_puuid(puuid)
        except PermanentExternalError as exc:
            if exc.is_not_found:
                logger.debug(f"No league entries for {puuid[:8]}...")
                return []
            raise
