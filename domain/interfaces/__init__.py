"""Domain interfaces."""
from .repository import IRiotGateway, IMatchStore, IRankStore

__all__ = [
    'IRiotGateway',
    'IMatchStore',
    'IRankStore',
]
