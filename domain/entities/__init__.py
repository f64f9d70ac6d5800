"""Domain entities."""
from .participant import ParticipantSnapshot
from .team import TeamObjectives
from .advanced_stats import AdvancedStats
from .match import MatchRecord, REQUIRED_COLUMNS
from .player_rank import PlayerRankEntry

__all__ = [
    'ParticipantSnapshot',
    'TeamObjectives',
    'AdvancedStats',
    'MatchRecord',
    'REQUIRED_COLUMNS',
    'PlayerRankEntry',
]
