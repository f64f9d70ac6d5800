"""Application layer - analysis, services and use cases."""
from .services import SyncEngine, RankCache
from .use_cases import SyncPlayerUseCase

__all__ = [
    'SyncEngine',
    'RankCache',
    'SyncPlayerUseCase',
]
