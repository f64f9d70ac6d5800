"""Domain layer - entities, enums, interfaces and the error taxonomy."""
from .entities import (
    AdvancedStats, MatchRecord, ParticipantSnapshot, PlayerRankEntry, TeamObjectives,
)
from .enums import Region, QueueType, SpecialQueue, Tier, Role, TimelineEventType
from .interfaces import IRiotGateway, IMatchStore, IRankStore
from .exceptions import (
    RiotAPIError, TransientExternalError, PermanentExternalError, IdentityResolutionError,
)

__all__ = [
    # Entities
    'AdvancedStats',
    'MatchRecord',
    'ParticipantSnapshot',
    'PlayerRankEntry',
    'TeamObjectives',
    # Enums
    'Region',
    'QueueType',
    'SpecialQueue',
    'Tier',
    'Role',
    'TimelineEventType',
    # Interfaces
    'IRiotGateway',
    'IMatchStore',
    'IRankStore',
    # Errors
    'RiotAPIError',
    'TransientExternalError',
    'PermanentExternalError',
    'IdentityResolutionError',
]
