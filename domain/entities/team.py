"""Team objective snapshot from the subject's point of view."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List


def _objective_kills(team: Dict[str, Any], name: str) -> int:
    return int(((team.get('objectives') or {}).get(name) or {}).get('kills') or 0)


@dataclass
class TeamObjectives:
    """Objective counts for the subject's team and the enemy team."""

    team_dragons: int = 0
    enemy_dragons: int = 0
    team_barons: int = 0
    enemy_barons: int = 0
    team_rift_heralds: int = 0
    enemy_rift_heralds: int = 0
    team_towers: int = 0
    enemy_towers: int = 0
    team_inhibitors: int = 0
    enemy_inhibitors: int = 0
    team_kills: int = 0

    @classmethod
    def from_payload(cls, info: Dict[str, Any], team_id: int) -> 'TeamObjectives':
        teams: List[Dict[str, Any]] = info.get('teams') or []
        mine = next((t for t in teams if t.get('teamId') == team_id), {})
        theirs = next((t for t in teams if t.get('teamId') != team_id), {})
        team_kills = sum(
            int(p.get('kills') or 0)
            for p in info.get('participants') or []
            if p.get('teamId') == team_id
        )
        return cls(
            team_dragons=_objective_kills(mine, 'dragon'),
            enemy_dragons=_objective_kills(theirs, 'dragon'),
            team_barons=_objective_kills(mine, 'baron'),
            enemy_barons=_objective_kills(theirs, 'baron'),
            team_rift_heralds=_objective_kills(mine, 'riftHerald'),
            enemy_rift_heralds=_objective_kills(theirs, 'riftHerald'),
            team_towers=_objective_kills(mine, 'tower'),
            enemy_towers=_objective_kills(theirs, 'tower'),
            team_inhibitors=_objective_kills(mine, 'inhibitor'),
            enemy_inhibitors=_objective_kills(theirs, 'inhibitor'),
            team_kills=team_kills,
        )

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'TeamObjectives':
        return cls(**{k: int(row.get(k) or 0) for k in cls.__dataclass_fields__})
