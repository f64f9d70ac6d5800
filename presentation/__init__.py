"""Presentation layer - User interfaces."""
from .cli import SyncCommand, BadgesCommand, StatsCommand, DBCheckCommand

__all__ = [
    "SyncCommand",
    "BadgesCommand",
    "StatsCommand",
    "DBCheckCommand",
]
