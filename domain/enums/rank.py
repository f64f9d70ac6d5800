"""Rank tier enumeration."""
from enum import Enum
from typing import Optional


class Tier(Enum):
    """League of Legends rank tiers, lowest first."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"

    @property
    def is_apex(self) -> bool:
        """Apex tiers have no divisions."""
        return self in (Tier.MASTER, Tier.GRANDMASTER, Tier.CHALLENGER)

    @classmethod
    def from_string(cls, tier: Optional[str]) -> Optional['Tier']:
        if not tier:
            return None
        try:
            return cls[tier.upper()]
        except KeyError:
            return None
