"""Infrastructure repositories module."""
from .match_repository import MatchRepository
from .account_repository import AccountRepository
from .riot_gateway import RiotGateway

__all__ = [
    'MatchRepository',
    'AccountRepository',
    'RiotGateway',
]
