"""Presentation CLI exports."""
from .sync_command import SyncCommand
from .badges_command import BadgesCommand
from .stats_command import StatsCommand
from .db_check_command import DBCheckCommand

__all__ = [
    "SyncCommand",
    "BadgesCommand",
    "StatsCommand",
    "DBCheckCommand",
]
