"""Infrastructure layer - API client, repositories and persistence."""
from .api import RiotAPIClient, RateLimiter, EndpointRateLimiter
from .repositories import MatchRepository, AccountRepository, RiotGateway
from .persistence import SQLiteStore

__all__ = [
    'RiotAPIClient',
    'RateLimiter',
    'EndpointRateLimiter',
    'MatchRepository',
    'AccountRepository',
    'RiotGateway',
    'SQLiteStore',
]
