"""Badge catalogue and evaluator.

Each badge is a row of a fixed, ordered table: a stable id, the text shown
to the player, and a pure predicate over ``AnalysisContext``. Rows whose
signal the match-v5 payloads do not carry (per-ability attribution, health
at kill time, brush and visibility state) use ``_undetectable`` and are
never earned.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from core.logging.logger import get_logger
from domain.entities import MatchRecord
from domain.enums import Role
from .context import AnalysisContext
from .geometry import (
    count_nearby,
    dist,
    gold_of,
    is_in_base,
    is_in_fountain,
    is_in_jungle_side,
    nearest_frame,
    participant_frame,
    position_of,
    team_gold,
)

logger = get_logger(__name__, service="badges")

Predicate = Callable[[AnalysisContext], bool]

# Thresholds
OUTNUMBERED_RADIUS = 1000
OUTNUMBERED_KILLS = 3
MITIGATED_DAMAGE = 50_000
BARON_STEAL_WINDOW_MS = 40_000
EARLY_GOLD_AT_10 = 4000
TEN_MINUTES_MS = 600_000
COMEBACK_GOLD_DEFICIT = 10_000
CC_SCORE = 100
CC_ASSISTS = 15
HEXTECH_CS_PER_MIN = 10.0
SNIPER_RANGE = 2000
TRUE_DAMAGE_TOTAL = 10_000
TRUE_DAMAGE_SHARE = 0.30
PUSH_WINDOW_MS = 60_000
GRAY_SCREEN_WINDOW_MS = 30_000
GRAY_SCREEN_KILLS = 3
ENEMY_BASE_TAKEDOWNS = 10
JUNGLE_STALKER_KILLS = 4
SHUTDOWN_GOLD_LEAD = 2000


@dataclass(frozen=True)
class EarnedBadge:
    name: str
    description: str


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    predicate: Predicate
    needs_timeline: bool = False

    @property
    def detectable(self) -> bool:
        return self.predicate is not _undetectable

    def evaluate(self, ctx: AnalysisContext) -> bool:
        if self.needs_timeline and (not ctx.has_timeline or not ctx.my_pid):
            return False
        return bool(self.predicate(ctx))


def _undetectable(ctx: AnalysisContext) -> bool:
    return False


def _stat(p: dict, key: str) -> float:
    return p.get(key) or 0


def _is_max(ctx: AnalysisContext, key: str, among: Iterable[dict]) -> bool:
    """Subject's stat is at least everyone else's; ties pass."""
    mine = _stat(ctx.me, key)
    return all(_stat(p, key) <= mine for p in among)


def _my_kills(ctx: AnalysisContext) -> List[dict]:
    return [e for e in ctx.kill_events if e.get("killerId") == ctx.my_pid]


# ── Bandle City ────────────────────────────────────────────────────────

def small_but_mighty(ctx: AnalysisContext) -> bool:
    if not ctx.frames or not _is_max(ctx, "totalDamageDealtToChampions", ctx.my_team):
        return False
    last = ctx.frames[-1]

    def health_max(pid) -> int:
        return int((participant_frame(last, pid).get("championStats") or {}).get("healthMax") or 0)

    mine = health_max(ctx.my_pid)
    return mine > 0 and all(health_max(pid) >= mine for pid in ctx.my_team_ids)


def mayors_decree(ctx: AnalysisContext) -> bool:
    return _is_max(ctx, "visionScore", ctx.my_team) and _is_max(ctx, "assists", ctx.my_team)


# ── Noxus ──────────────────────────────────────────────────────────────

def blood_crowned(ctx: AnalysisContext) -> bool:
    return _stat(ctx.me, "pentaKills") >= 2


def iron_will(ctx: AnalysisContext) -> bool:
    outnumbered = 0
    for e in _my_kills(ctx):
        pos = e.get("position")
        if not pos:
            continue
        frame = nearest_frame(ctx.frames, e.get("timestamp") or 0)
        allies = count_nearby(frame, ctx.allies, pos, OUTNUMBERED_RADIUS)
        enemies = count_nearby(frame, ctx.enemy_team_ids, pos, OUTNUMBERED_RADIUS)
        if enemies > allies + 1:
            outnumbered += 1
    return outnumbered >= OUTNUMBERED_KILLS


def total_annexation(ctx: AnalysisContext) -> bool:
    team = set(ctx.my_team_ids)
    turrets = [
        e for e in ctx.building_events
        if e.get("buildingType") == "TOWER_BUILDING" and e.get("killerId") in team
    ]
    return bool(turrets) and all(ctx.participated(e) for e in turrets)


# ── Demacia ────────────────────────────────────────────────────────────

def unyielding_aegis(ctx: AnalysisContext) -> bool:
    team = set(ctx.my_team_ids)
    monsters = [e for e in ctx.elite_monster_events if e.get("killerId") in team]
    return bool(monsters) and all(ctx.participated(e) for e in monsters)


def hittin_a_wall(ctx: AnalysisContext) -> bool:
    return _stat(ctx.me, "damageSelfMitigated") + _stat(ctx.me, "totalDamageTaken") >= MITIGATED_DAMAGE


# ── Bilgewater ─────────────────────────────────────────────────────────

def king_of_the_docks(ctx: AnalysisContext) -> bool:
    return _is_max(ctx, "goldEarned", ctx.participants)


def sea_monsters_tithe(ctx: AnalysisContext) -> bool:
    team = set(ctx.my_team_ids)
    allies = set(ctx.allies)
    for baron in ctx.elite_monster_events:
        if baron.get("monsterType") != "BARON_NASHOR" or baron.get("killerId") != ctx.my_pid:
            continue
        if any(pid in team for pid in baron.get("assistingParticipantIds") or []):
            continue
        ts = baron.get("timestamp") or 0
        dead = {
            e.get("victimId") for e in ctx.kill_events
            if e.get("victimId") in allies and ts - BARON_STEAL_WINDOW_MS < (e.get("timestamp") or 0) < ts
        }
        if allies and dead >= allies:
            return True
    return False


def treasure_map_locator(ctx: AnalysisContext) -> bool:
    frame = next((f for f in ctx.frames if (f.get("timestamp") or 0) >= TEN_MINUTES_MS), None)
    return frame is not None and gold_of(frame, ctx.my_pid) >= EARLY_GOLD_AT_10


# ── Freljord ───────────────────────────────────────────────────────────

def unbroken_will(ctx: AnalysisContext) -> bool:
    if not ctx.win:
        return False
    return any(
        team_gold(f, ctx.enemy_team_ids) - team_gold(f, ctx.my_team_ids) >= COMEBACK_GOLD_DEFICIT
        for f in ctx.frames
    )


def where_are_you_going(ctx: AnalysisContext) -> bool:
    return _stat(ctx.me, "timeCCingOthers") >= CC_SCORE and _stat(ctx.me, "assists") >= CC_ASSISTS


# ── Ionia ──────────────────────────────────────────────────────────────

def spirits_balance(ctx: AnalysisContext) -> bool:
    if ctx.team_kills == 0:
        return False
    return _stat(ctx.me, "kills") + _stat(ctx.me, "assists") >= ctx.team_kills


# ── Piltover ───────────────────────────────────────────────────────────

def hextech_perfection(ctx: AnalysisContext) -> bool:
    if _stat(ctx.me, "deaths") != 0 or ctx.game_duration <= 0:
        return False
    cs = _stat(ctx.me, "totalMinionsKilled") + _stat(ctx.me, "neutralMinionsKilled")
    return cs / (ctx.game_duration / 60) >= HEXTECH_CS_PER_MIN


def piltovan_sniper(ctx: AnalysisContext) -> bool:
    for e in _my_kills(ctx):
        if not e.get("position"):
            continue
        my_pos = position_of(nearest_frame(ctx.frames, e.get("timestamp") or 0), ctx.my_pid)
        if my_pos and dist(my_pos, e["position"]) >= SNIPER_RANGE:
            return True
    return False


# ── Zaun ───────────────────────────────────────────────────────────────

def toxic_work_culture(ctx: AnalysisContext) -> bool:
    # Damage-over-time is not broken out separately; true damage only.
    return _stat(ctx.me, "trueDamageDealtToChampions") >= TRUE_DAMAGE_TOTAL


# ── Targon ─────────────────────────────────────────────────────────────

def peak_performance(ctx: AnalysisContext) -> bool:
    level_18 = [e for e in ctx.level_events if e.get("level") == 18]
    return bool(level_18) and level_18[0].get("participantId") == ctx.my_pid


# ── Shurima ────────────────────────────────────────────────────────────

def ascended_emperor(ctx: AnalysisContext) -> bool:
    return (
        _is_max(ctx, "goldEarned", ctx.participants)
        and _is_max(ctx, "totalDamageDealtToChampions", ctx.participants)
        and _is_max(ctx, "champLevel", ctx.participants)
    )


def architect_of_ruin(ctx: AnalysisContext) -> bool:
    mine = [e for e in ctx.building_events if e.get("killerId") == ctx.my_pid]
    towers = [e for e in mine if e.get("buildingType") == "TOWER_BUILDING"]
    inhibitors = [e for e in mine if e.get("buildingType") == "INHIBITOR_BUILDING"]
    for inhib in inhibitors:
        ts = inhib.get("timestamp") or 0
        near = [t for t in towers if abs((t.get("timestamp") or 0) - ts) <= PUSH_WINDOW_MS]
        # The outer tower plus the nexus turret behind the inhibitor.
        if len(near) >= 2:
            return True
    return False


# ── Shadow Isles ───────────────────────────────────────────────────────

def death_is_only_the_start(ctx: AnalysisContext) -> bool:
    kills = _my_kills(ctx)
    for death in ctx.kill_events:
        if death.get("victimId") != ctx.my_pid:
            continue
        ts = death.get("timestamp") or 0
        after = [k for k in kills if ts < (k.get("timestamp") or 0) <= ts + GRAY_SCREEN_WINDOW_MS]
        if len(after) >= GRAY_SCREEN_KILLS:
            return True
    return False


def harrowing_mist(ctx: AnalysisContext) -> bool:
    takedowns = sum(
        1 for e in ctx.kill_events
        if ctx.participated(e) and is_in_base(e.get("position"), ctx.enemy_team_id)
    )
    return takedowns >= ENEMY_BASE_TAKEDOWNS


# ── Ixtal ──────────────────────────────────────────────────────────────

def jungle_stalker(ctx: AnalysisContext) -> bool:
    jungler = next(
        (p for p in ctx.enemy_team
         if Role.from_string(p.get("teamPosition")) is Role.JUNGLE
         or Role.from_string(p.get("individualPosition")) is Role.JUNGLE),
        None,
    )
    if jungler is None:
        return False
    jungler_pid = ctx.pid_of(jungler)
    kills = sum(
        1 for e in _my_kills(ctx)
        if e.get("victimId") == jungler_pid and is_in_jungle_side(e.get("position"), ctx.enemy_team_id)
    )
    return kills >= JUNGLE_STALKER_KILLS


# ── The Void ───────────────────────────────────────────────────────────

def evolve_and_consume(ctx: AnalysisContext) -> bool:
    for e in _my_kills(ctx):
        frame = nearest_frame(ctx.frames, e.get("timestamp") or 0)
        if gold_of(frame, e.get("victimId")) > gold_of(frame, ctx.my_pid) + SHUTDOWN_GOLD_LEAD:
            return True
    return False


def oblivions_call(ctx: AnalysisContext) -> bool:
    total = _stat(ctx.me, "totalDamageDealtToChampions")
    return total > 0 and _stat(ctx.me, "trueDamageDealtToChampions") / total >= TRUE_DAMAGE_SHARE


def voids_reach(ctx: AnalysisContext) -> bool:
    for e in _my_kills(ctx):
        if not is_in_base(e.get("position"), ctx.enemy_team_id):
            continue
        my_pos = position_of(nearest_frame(ctx.frames, e.get("timestamp") or 0), ctx.my_pid)
        if is_in_fountain(my_pos, ctx.my_team_id):
            return True
    return False


BADGES: Tuple[Badge, ...] = (
    # Bandle City
    Badge("david_vs_goliath", "David vs Goliath",
          "You survived on a prayer and 5% health while taking down 3 enemies. Peak yordle energy.",
          _undetectable),
    Badge("small_but_mighty", "Small But Mighty",
          "You dealt the most damage on your team despite having the lowest total health pool.",
          small_but_mighty, needs_timeline=True),
    Badge("mayors_decree", "The Mayor's Decree",
          "You had the highest Vision Score and most Assists on your team. You run this town.",
          mayors_decree),
    # Noxus
    Badge("blood_crowned", "The Blood-Crowned",
          "One Pentakill is a fluke; two in one game is a war crime. Welcome to the high command.",
          blood_crowned),
    Badge("iron_will", "Iron Will",
          "You secured 3+ kills while being outnumbered (1v2 or 1v3) in the immediate area.",
          iron_will, needs_timeline=True),
    Badge("total_annexation", "Total Annexation",
          "You participated in every single turret destruction on the map. "
          "The empire's borders only move forward.",
          total_annexation, needs_timeline=True),
    # Demacia
    Badge("unyielding_aegis", "The Unyielding Aegis",
          "You were present for every single Epic Monster kill. A true vanguard never misses an objective.",
          unyielding_aegis, needs_timeline=True),
    Badge("hittin_a_wall", "Hittin' a Wall",
          "You mitigated 50,000+ damage during the match. They broke their swords against your resolve.",
          hittin_a_wall),
    Badge("for_the_king", "For the King",
          "You were the first person to deal damage in 5 separate teamfight kills. You lead the charge.",
          _undetectable),
    # Bilgewater
    Badge("king_of_the_docks", "King of the Docks",
          "You finished with the highest gold count in the lobby. Everyone else is just a stowaway.",
          king_of_the_docks),
    Badge("sea_monsters_tithe", "Sea Monster's Tithe",
          "You stole Baron while your entire team was dead. High stakes, higher reward.",
          sea_monsters_tithe, needs_timeline=True),
    Badge("treasure_map_locator", "Treasure Map Locator",
          "You reached 4,000 gold by the 10:00 mark. You've got a nose for the \"shiny\" stuff.",
          treasure_map_locator, needs_timeline=True),
    # Freljord
    Badge("unbroken_will", "The Unbroken Will",
          "You won after being down 10,000 gold. The ice doesn't break, and neither do you.",
          unbroken_will, needs_timeline=True),
    Badge("where_are_you_going", "Where Are You Going?",
          "100+ CC score and 15+ assists. You turned the enemy team into living statues.",
          where_are_you_going),
    Badge("heart_of_the_ram", "Heart of the Ram",
          "You mitigated 10,000 damage in a single 20-second fight. You are the mountain.",
          _undetectable),
    # Ionia
    Badge("spirits_balance", "The Spirit's Balance",
          "100% Kill Participation. You were the heartbeat of every single fight on the map.",
          spirits_balance),
    Badge("dance_of_the_first_lands", "Dance of the First Lands",
          "You hit all 5 enemies with a single Ultimate. A perfect symphony of destruction.",
          _undetectable),
    Badge("death_by_a_thousand_petals", "Death by a Thousand Petals",
          "You secured 3 kills in a row where each kill was dealt by a different ability.",
          _undetectable),
    # Piltover
    Badge("hextech_perfection", "Hextech Perfection",
          "0 deaths and 10+ CS per minute. Efficiency that would make Camille blush.",
          hextech_perfection),
    Badge("clockwork_multiplier", "Clockwork Multiplier",
          "You secured a Triple Kill or higher using only your auto-attacks. No mana wasted.",
          _undetectable),
    Badge("piltovan_sniper", "Piltovan Sniper",
          "You secured a kill from over 2,000 units away. Distance is just another variable.",
          piltovan_sniper, needs_timeline=True),
    # Zaun
    Badge("chem_tech_overdrive", "Chem-Tech Overdrive",
          "You pumped out 2,000 damage while below 10% health. High-octane desperation.",
          _undetectable),
    Badge("unstable_mutation", "Unstable Mutation",
          "You used 4 different abilities or items to secure 4 kills. Versatility is your only constant.",
          _undetectable),
    Badge("toxic_work_culture", "Toxic Work Culture",
          "You dealt 10,000+ total True Damage or Damage-over-time (Burn/Poison) in one match.",
          toxic_work_culture),
    # Targon
    Badge("star_crossed_hero", "The Star-Crossed Hero",
          "You denied 10 killing blows on allies. You didn't just support them; you saved their souls.",
          _undetectable),
    Badge("peak_performance", "Peak Performance",
          "You reached Level 18 before anyone else in the match. The view is better from the top.",
          peak_performance, needs_timeline=True),
    Badge("celestial_impact", "Celestial Impact",
          "You CC'd all 5 enemies simultaneously using a single ability. A cosmic alignment.",
          _undetectable),
    # Shurima
    Badge("ascended_emperor", "The Ascended Emperor",
          "Highest gold, damage, and level. Tell the people what you have seen today.",
          ascended_emperor),
    Badge("architect_of_ruin", "Architect of Ruin",
          "You destroyed a tower, an inhibitor, and a nexus turret in one continuous push.",
          architect_of_ruin, needs_timeline=True),
    Badge("emperors_tax", "The Emperor's Tax",
          "You took every single jungle camp (including the enemy's) in one rotation. "
          "All belongs to Shurima.",
          _undetectable),
    # Shadow Isles
    Badge("death_is_only_the_start", "Death is Only the Start",
          "You got a Triple Kill while gray-screened. Death is just a change in management.",
          death_is_only_the_start, needs_timeline=True),
    Badge("harrowing_mist", "The Harrowing Mist",
          "10+ takedowns inside the enemy base. The mist has finally claimed their home.",
          harrowing_mist, needs_timeline=True),
    Badge("soul_siphon_surge", "Soul-Siphon Surge",
          "You healed for 100% of your maximum HP during a single continuous fight.",
          _undetectable),
    # Ixtal
    Badge("elemental_ambush", "Elemental Ambush",
          "You secured a kill within 3 seconds of leaving a bush. They never saw the leaves move.",
          _undetectable),
    Badge("jungle_stalker", "Jungle Stalker",
          "You killed the enemy Jungler in their own jungle multiple times. Their camps are your camps now.",
          jungle_stalker, needs_timeline=True),
    Badge("unseen_gardener", "The Unseen Gardener",
          "You cleared 15+ wards and secured 2 kills while remaining undetected by the enemy.",
          _undetectable),
    # The Void
    Badge("evolve_and_consume", "Evolve and Consume",
          "You shut down an enemy who had a significant gold lead. Adaptation is the key to survival.",
          evolve_and_consume, needs_timeline=True),
    Badge("oblivions_call", "Oblivion's Call",
          "Over 30% of your damage was True Damage. Resistances are an illusion you've deleted.",
          oblivions_call),
    Badge("voids_reach", "The Void's Reach",
          "You secured a kill from your own fountain while the victim was in their base.",
          voids_reach, needs_timeline=True),
)


class BadgeEvaluator:
    """Evaluates a badge catalogue against one match at a time."""

    def __init__(self, catalogue: Iterable[Badge] = BADGES):
        self.catalogue: Tuple[Badge, ...] = tuple(catalogue)

    def evaluate_context(self, ctx: AnalysisContext) -> List[EarnedBadge]:
        earned: List[EarnedBadge] = []
        for badge in self.catalogue:
            try:
                if badge.evaluate(ctx):
                    earned.append(EarnedBadge(badge.name, badge.description))
            except Exception as exc:
                logger.debug(lambda: f"Badge {badge.id} failed: {exc!r}")
        return earned

    def evaluate(self, record: MatchRecord) -> List[EarnedBadge]:
        """Earned badges in catalogue order; empty when the subject cannot be resolved."""
        try:
            ctx = AnalysisContext.from_record(record)
        except Exception as exc:
            logger.warning(lambda: f"Unreadable payload for {record.match_id}: {exc}")
            return []
        if ctx is None:
            return []
        return self.evaluate_context(ctx)


def evaluate_badges(record: MatchRecord, evaluator: Optional[BadgeEvaluator] = None) -> List[EarnedBadge]:
    return (evaluator or BadgeEvaluator()).evaluate(record)
