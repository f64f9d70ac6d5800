"""Timeline event kinds consumed by the analysis layer."""
from enum import Enum


class TimelineEventType(Enum):
    """Tagged variant over ``frames[].events[].type``.

    Anything the analysis layer does not consume maps to ``OTHER`` so the
    indexers can match exhaustively.
    """

    CHAMPION_KILL = "CHAMPION_KILL"
    ELITE_MONSTER_KILL = "ELITE_MONSTER_KILL"
    BUILDING_KILL = "BUILDING_KILL"
    WARD_PLACED = "WARD_PLACED"
    WARD_KILL = "WARD_KILL"
    LEVEL_UP = "LEVEL_UP"
    OTHER = "OTHER"

    @classmethod
    def from_raw(cls, raw: object) -> 'TimelineEventType':
        if isinstance(raw, str) and raw in cls.__members__:
            return cls[raw]
        return cls.OTHER

    @property
    def is_objective(self) -> bool:
        """Elite monster or structure takedown."""
        return self in (TimelineEventType.ELITE_MONSTER_KILL, TimelineEventType.BUILDING_KILL)
