"""Application services root exports."""
from .retry_policy import RetryPolicy, is_transient_error
from .sync_engine import SyncEngine, SyncResult, SyncTimings, UnitOutcome
from .rank_cache import RankCache

__all__ = [
    "RetryPolicy",
    "is_transient_error",
    "SyncEngine",
    "SyncResult",
    "SyncTimings",
    "UnitOutcome",
    "RankCache",
]
