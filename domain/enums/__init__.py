"""Domain enumerations."""
from .region import Region
from .queue_type import QueueType, SpecialQueue, queue_label
from .rank import Tier
from .role import Role
from .event_type import TimelineEventType

__all__ = [
    'Region',
    'QueueType',
    'SpecialQueue',
    'queue_label',
    'Tier',
    'Role',
    'TimelineEventType',
]
