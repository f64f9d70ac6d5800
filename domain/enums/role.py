"""Role/Position enumeration."""
from enum import Enum
from typing import Optional


class Role(Enum):
    """League of Legends lane roles/positions."""

    TOP = "TOP"
    JUNGLE = "JUNGLE"
    MIDDLE = "MIDDLE"
    BOTTOM = "BOTTOM"
    UTILITY = "UTILITY"  # Support

    @property
    def short_name(self) -> str:
        short_names = {
            "TOP": "top",
            "JUNGLE": "jg",
            "MIDDLE": "mid",
            "BOTTOM": "adc",
            "UTILITY": "sup"
        }
        return short_names[self.value]

    @classmethod
    def from_string(cls, role_str: Optional[str]) -> Optional['Role']:
        """Parse a position label. Empty or unknown labels give ``None``."""
        if not role_str:
            return None
        key = role_str.strip().upper()
        if key in cls.__members__:
            return cls[key]
        mappings = {
            "SUPPORT": cls.UTILITY,
            "SUP": cls.UTILITY,
            "ADC": cls.BOTTOM,
            "BOT": cls.BOTTOM,
            "MID": cls.MIDDLE,
            "JG": cls.JUNGLE,
            "JGL": cls.JUNGLE
        }
        return mappings.get(key)
