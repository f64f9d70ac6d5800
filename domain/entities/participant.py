"""Subject stat snapshot taken from one match-v5 participant entry."""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


def _int(p: Dict[str, Any], key: str) -> int:
    return int(p.get(key) or 0)


@dataclass
class ParticipantSnapshot:
    """The tracked player's end-of-game numbers for one match."""

    # Identity
    puuid: str
    champion_name: str
    team_id: int
    champ_level: int = 0
    win: bool = False

    # Combat
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    double_kills: int = 0
    triple_kills: int = 0
    quadra_kills: int = 0
    penta_kills: int = 0

    # Economy
    gold_earned: int = 0
    total_minions_killed: int = 0  # lane + jungle minions
    total_damage_dealt_to_champions: int = 0

    # Vision
    vision_score: int = 0
    wards_placed: int = 0
    wards_killed: int = 0
    detector_wards_placed: int = 0

    # Objectives
    turret_kills: int = 0
    inhibitor_kills: int = 0
    dragon_kills: int = 0
    baron_kills: int = 0
    objectives_stolen: int = 0

    # Position
    team_position: str = ""
    lane: str = ""

    # Items (slots 0-6, slot 6 is the trinket)
    items: List[int] = field(default_factory=lambda: [0] * 7)

    # Runes
    primary_rune: Optional[int] = None
    secondary_rune_style: Optional[int] = None

    @property
    def kda(self) -> float:
        if self.deaths == 0:
            return float(self.kills + self.assists)
        return (self.kills + self.assists) / self.deaths

    @classmethod
    def from_payload(cls, p: Dict[str, Any]) -> 'ParticipantSnapshot':
        styles = (p.get('perks') or {}).get('styles') or []
        primary_rune = None
        secondary_style = None
        if styles:
            selections = styles[0].get('selections') or []
            if selections:
                primary_rune = selections[0].get('perk')
        if len(styles) > 1:
            secondary_style = styles[1].get('style')

        return cls(
            puuid=p.get('puuid', ''),
            champion_name=p.get('championName', ''),
            team_id=_int(p, 'teamId'),
            champ_level=_int(p, 'champLevel'),
            win=bool(p.get('win', False)),
            kills=_int(p, 'kills'),
            deaths=_int(p, 'deaths'),
            assists=_int(p, 'assists'),
            double_kills=_int(p, 'doubleKills'),
            triple_kills=_int(p, 'tripleKills'),
            quadra_kills=_int(p, 'quadraKills'),
            penta_kills=_int(p, 'pentaKills'),
            gold_earned=_int(p, 'goldEarned'),
            total_minions_killed=_int(p, 'totalMinionsKilled') + _int(p, 'neutralMinionsKilled'),
            total_damage_dealt_to_champions=_int(p, 'totalDamageDealtToChampions'),
            vision_score=_int(p, 'visionScore'),
            wards_placed=_int(p, 'wardsPlaced'),
            wards_killed=_int(p, 'wardsKilled'),
            detector_wards_placed=_int(p, 'detectorWardsPlaced'),
            turret_kills=_int(p, 'turretKills'),
            inhibitor_kills=_int(p, 'inhibitorKills'),
            dragon_kills=_int(p, 'dragonKills'),
            baron_kills=_int(p, 'baronKills'),
            objectives_stolen=_int(p, 'objectivesStolen'),
            team_position=p.get('teamPosition') or '',
            lane=p.get('lane') or '',
            items=[_int(p, f'item{i}') for i in range(7)],
            primary_rune=primary_rune,
            secondary_rune_style=secondary_style,
        )

    def to_row(self) -> Dict[str, Any]:
        """Flatten into ``matches`` table columns."""
        row = asdict(self)
        row['win'] = 1 if self.win else 0
        for i, item in enumerate(row.pop('items')):
            row[f'item{i}'] = item
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ParticipantSnapshot':
        return cls(
            puuid=row.get('puuid') or '',
            champion_name=row.get('champion_name') or '',
            team_id=int(row.get('team_id') or 0),
            champ_level=int(row.get('champ_level') or 0),
            win=bool(row.get('win')),
            kills=int(row.get('kills') or 0),
            deaths=int(row.get('deaths') or 0),
            assists=int(row.get('assists') or 0),
            double_kills=int(row.get('double_kills') or 0),
            triple_kills=int(row.get('triple_kills') or 0),
            quadra_kills=int(row.get('quadra_kills') or 0),
            penta_kills=int(row.get('penta_kills') or 0),
            gold_earned=int(row.get('gold_earned') or 0),
            total_minions_killed=int(row.get('total_minions_killed') or 0),
            total_damage_dealt_to_champions=int(row.get('total_damage_dealt_to_champions') or 0),
            vision_score=int(row.get('vision_score') or 0),
            wards_placed=int(row.get('wards_placed') or 0),
            wards_killed=int(row.get('wards_killed') or 0),
            detector_wards_placed=int(row.get('detector_wards_placed') or 0),
            turret_kills=int(row.get('turret_kills') or 0),
            inhibitor_kills=int(row.get('inhibitor_kills') or 0),
            dragon_kills=int(row.get('dragon_kills') or 0),
            baron_kills=int(row.get('baron_kills') or 0),
            objectives_stolen=int(row.get('objectives_stolen') or 0),
            team_position=row.get('team_position') or '',
            lane=row.get('lane') or '',
            items=[int(row.get(f'item{i}') or 0) for i in range(7)],
            primary_rune=row.get('primary_rune'),
            secondary_rune_style=row.get('secondary_rune_style'),
        )
