"""Derived per-match metrics."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AdvancedStats:
    """Derived fields of a match. ``None`` means the input could not support it."""

    cs_diff_15: Optional[int] = None
    gold_diff_15: Optional[int] = None
    xp_diff_15: Optional[int] = None
    first_blood: Optional[int] = None
    dmg_gold_ratio: Optional[float] = None
    isolated_deaths: Optional[int] = None
    objective_rate: Optional[float] = None

    COLUMNS = (
        'cs_diff_15', 'gold_diff_15', 'xp_diff_15', 'first_blood',
        'dmg_gold_ratio', 'isolated_deaths', 'objective_rate',
    )

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'AdvancedStats':
        return cls(**{k: row.get(k) for k in cls.COLUMNS})
