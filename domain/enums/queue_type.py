"""Queue enumerations: ranked ladders and listing-hidden game modes."""
from enum import Enum
from typing import Optional


class QueueType(Enum):
    """Ranked ladders reported by the league endpoints.

    Provides:
    - queue_id: numeric queue id used in match payloads
    - queue_name: human-readable name
    - api_queue_name: string used by league entries (``queueType``)
    """

    RANKED_SOLO_5x5 = 420  # Solo/Duo Queue
    RANKED_FLEX_SR = 440   # Flex 5v5 Queue

    @property
    def queue_id(self) -> int:
        return self.value

    @property
    def queue_name(self) -> str:
        names = {
            420: "Ranked Solo/Duo",
            440: "Ranked Flex 5v5"
        }
        return names[self.value]

    @property
    def api_queue_name(self) -> str:
        return "RANKED_SOLO_5x5" if self == QueueType.RANKED_SOLO_5x5 else "RANKED_FLEX_SR"

    @classmethod
    def from_api_name(cls, name: str) -> Optional['QueueType']:
        for q in cls:
            if q.api_queue_name == name:
                return q
        return None


class SpecialQueue(Enum):
    """Queues the by-puuid listing leaves out unless ``queue=`` is given."""

    ARAM_MAYHEM = 2400
    ARENA = 1700
    ARENA_SIXTEEN = 1710

    @property
    def queue_id(self) -> int:
        return self.value

    @classmethod
    def from_id(cls, queue_id: int) -> Optional['SpecialQueue']:
        try:
            return cls(queue_id)
        except ValueError:
            return None


def queue_label(queue_id: int) -> str:
    """Display name for a match's queue id."""
    for q in QueueType:
        if q.queue_id == queue_id:
            return q.queue_name
    special = SpecialQueue.from_id(queue_id)
    if special is not None:
        return special.name.replace("_", " ").title()
    return f"Queue {queue_id}"
