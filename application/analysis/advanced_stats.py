"""Derived per-match metrics: lane deltas at 15, isolated deaths, objective rate."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.logging.logger import get_logger
from domain.entities import AdvancedStats
from .context import AnalysisContext, Event
from .geometry import (
    ALLY_SUPPORT_RADIUS,
    FOUNTAIN_RATE_BOUND,
    LANE_FRAME_INDEX,
    OBJECTIVE_TRADE_WINDOW_MS,
    RESPAWN_ASSUMPTION_MS,
    dist,
    frame_at_minute,
    is_in_fountain,
    participant_frame,
    position_of,
)

logger = get_logger(__name__, service="analysis")


def _position_label(p: Dict[str, Any]) -> str:
    return (p.get("teamPosition") or p.get("lane") or "").strip().upper()


def lane_opponent(ctx: AnalysisContext) -> Optional[Dict[str, Any]]:
    """Enemy sharing the subject's position label; none for an empty label."""
    label = _position_label(ctx.me)
    if not label:
        return None
    return next((p for p in ctx.enemy_team if _position_label(p) == label), None)


def _lane_diffs(ctx: AnalysisContext) -> Dict[str, Optional[int]]:
    empty = {"cs_diff_15": None, "gold_diff_15": None, "xp_diff_15": None}
    if not ctx.frames:
        return empty
    opponent = lane_opponent(ctx)
    if opponent is None:
        return empty

    frame = ctx.frames[min(LANE_FRAME_INDEX, len(ctx.frames) - 1)]
    mine = participant_frame(frame, ctx.my_pid)
    theirs = participant_frame(frame, ctx.pid_of(opponent))
    if not mine or not theirs:
        return empty

    def cs(pf: Dict[str, Any]) -> int:
        return int(pf.get("minionsKilled") or 0) + int(pf.get("jungleMinionsKilled") or 0)

    return {
        "cs_diff_15": cs(mine) - cs(theirs),
        "gold_diff_15": int(mine.get("totalGold") or 0) - int(theirs.get("totalGold") or 0),
        "xp_diff_15": int(mine.get("xp") or 0) - int(theirs.get("xp") or 0),
    }


def _subject_deaths(ctx: AnalysisContext) -> List[Event]:
    return [e for e in ctx.kill_events if e.get("victimId") == ctx.my_pid]


def _recently_dead(ctx: AnalysisContext, pid: int, ts: int) -> bool:
    """Killed within the respawn assumption before ``ts``."""
    return any(
        e.get("victimId") == pid and 0 <= ts - (e.get("timestamp") or 0) < RESPAWN_ASSUMPTION_MS
        for e in ctx.kill_events
    )


def is_isolated_death(ctx: AnalysisContext, death: Event) -> bool:
    """No living ally within support radius at the minute frame and no objective trade nearby.

    A death without a recorded position, or without a frame to check
    against, counts as isolated. Allies killed shortly before are not
    counted as support.
    """
    position = death.get("position")
    if not position:
        return True
    ts = death.get("timestamp") or 0
    frame = frame_at_minute(ctx.frames, ts)
    if not frame or not frame.get("participantFrames"):
        return True

    for ally in ctx.allies:
        if _recently_dead(ctx, ally, ts):
            continue
        ally_pos = position_of(frame, ally)
        if ally_pos and dist(position, ally_pos) <= ALLY_SUPPORT_RADIUS:
            return False

    return not any(
        abs((obj.get("timestamp") or 0) - ts) <= OBJECTIVE_TRADE_WINDOW_MS
        for obj in ctx.objective_events
    )


def _alive_at(ctx: AnalysisContext, death_times: List[int], ts: int) -> bool:
    prior = [t for t in death_times if t < ts]
    if not prior:
        return True
    if ts - prior[-1] >= RESPAWN_ASSUMPTION_MS:
        return True
    pos = position_of(frame_at_minute(ctx.frames, ts), ctx.my_pid)
    if pos is None:
        return False
    return not is_in_fountain(pos, ctx.my_team_id, FOUNTAIN_RATE_BOUND)


def _objective_rate(ctx: AnalysisContext, deaths: List[Event]) -> Optional[float]:
    secured = [e for e in ctx.elite_monster_events if ctx.credited_to_team(e)]
    if not secured:
        return None
    death_times = sorted(int(d.get("timestamp") or 0) for d in deaths)
    alive = sum(1 for e in secured if _alive_at(ctx, death_times, int(e.get("timestamp") or 0)))
    return round(alive / len(secured) * 100, 1)


def compute_advanced_stats(
    detail: Any,
    timeline: Any = None,
    puuid: Optional[str] = None,
    *,
    champion_name: Optional[str] = None,
    team_id: Optional[int] = None,
) -> AdvancedStats:
    """Derive ``AdvancedStats`` for the subject of one match.

    Never raises. Fields the inputs cannot support stay ``None``; if a
    step fails unexpectedly the fields computed so far are kept.
    """
    fields: Dict[str, Any] = {}
    try:
        ctx = AnalysisContext.build(
            detail, timeline, puuid=puuid, champion_name=champion_name, team_id=team_id
        )
        if ctx is None:
            return AdvancedStats()

        me = ctx.me
        fields["first_blood"] = 1 if (me.get("firstBloodKill") or me.get("firstBloodAssist")) else 0
        gold = int(me.get("goldEarned") or 0)
        if gold > 0:
            fields["dmg_gold_ratio"] = round(int(me.get("totalDamageDealtToChampions") or 0) / gold, 3)

        if not ctx.has_timeline or not ctx.frames:
            return AdvancedStats(**fields)

        fields.update(_lane_diffs(ctx))

        deaths = _subject_deaths(ctx)
        fields["isolated_deaths"] = sum(1 for d in deaths if is_isolated_death(ctx, d))
        fields["objective_rate"] = _objective_rate(ctx, deaths)
    except Exception as exc:
        logger.warning(lambda: f"Advanced stats failed: {exc}", extra={"context": {"puuid": puuid}})
    return AdvancedStats(**fields)
