"""Match repository implementation."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from config import settings
from infrastructure.api import RiotAPIClient

logger = logging.getLogger(__name__)


class MatchRepository:
    """Match-v5 listing, detail and timeline access."""

    def __init__(
        self,
        api_client: RiotAPIClient,
        page_size: int = None,
        page_delay_s: float = None,
    ):
        """
        Initialize match repository.

        Args:
            api_client: Riot API client instance
            page_size: Ids requested per listing page (API maximum is 100)
            page_delay_s: Pause between listing pages
        """
        self.api_client = api_client
        self.page_size = min(page_size or settings.IDS_PAGE_SIZE, 100)
        self.page_delay_s = settings.REQUEST_DELAY_S if page_delay_s is None else page_delay_s

    async def list_match_ids(
        self,
        puuid: str,
        start_time: Optional[int] = None,
        queue: Optional[int] = None,
    ) -> List[str]:
        """Page through the listing until a short page comes back.

        Args:
            puuid: Player UUID
            start_time: Epoch seconds, inclusive lower bound
            queue: Restrict to one queue id

        Returns:
            Match ids, newest first as the API orders them
        """
        ids: List[str] = []
        start = 0
        while True:
            page = await self.api_client.get_match_ids_by_puuid(
                puuid,
                start_time=start_time,
                queue=queue,
                start=start,
                count=self.page_size,
            )
            ids.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size
            if self.page_delay_s:
                await asyncio.sleep(self.page_delay_s)

        logger.debug(f"Listed {len(ids)} match ids (start_time={start_time}, queue={queue})")
        return ids

    async def get_match(self, match_id: str) -> Dict[str, Any]:
        return await self.api_client.get_match_by_id(match_id)

    async def get_timeline(self, match_id: str) -> Dict[str, Any]:
        return await self.api_client.get_match_timeline(match_id)
