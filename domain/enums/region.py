"""Platform enumeration and its routing hosts."""
from enum import Enum

_REGIONAL_ROUTES = {
    # Americas
    "na1": "americas",
    "br1": "americas",
    "la1": "americas",
    "la2": "americas",
    # Europe
    "euw1": "europe",
    "eun1": "europe",
    "tr1": "europe",
    "ru": "europe",
    "me1": "europe",
    # Asia
    "kr": "asia",
    "jp1": "asia",
    # SEA
    "oc1": "sea",
    "ph2": "sea",
    "sg2": "sea",
    "th2": "sea",
    "tw2": "sea",
    "vn2": "sea",
}


class Region(Enum):
    """League of Legends platforms.

    Provides:
    - platform_route: platform host for league endpoints (e.g. euw1)
    - regional_route: routing host for match and account endpoints (e.g. europe)
    """

    EUW1 = "euw1"
    EUN1 = "eun1"
    NA1 = "na1"
    BR1 = "br1"
    LA1 = "la1"
    LA2 = "la2"
    KR = "kr"
    JP1 = "jp1"
    OC1 = "oc1"
    PH2 = "ph2"
    SG2 = "sg2"
    TH2 = "th2"
    TW2 = "tw2"
    VN2 = "vn2"
    TR1 = "tr1"
    RU = "ru"
    ME1 = "me1"

    @property
    def platform_route(self) -> str:
        return self.value

    @property
    def regional_route(self) -> str:
        return _REGIONAL_ROUTES.get(self.value, "americas")

    @classmethod
    def from_platform(cls, code: str) -> 'Region':
        """Resolve a platform code such as ``EUW1`` or ``euw1``."""
        try:
            return cls(code.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown platform '{code}'. Expected one of: "
                             f"{', '.join(r.value for r in cls)}") from None
