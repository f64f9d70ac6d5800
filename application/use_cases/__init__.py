"""Application use cases."""
from .sync_player import SyncPlayerUseCase, SyncReport

__all__ = [
    'SyncPlayerUseCase',
    'SyncReport',
]
