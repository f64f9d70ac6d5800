"""Map geometry, zone checks and frame lookups on Summoner's Rift coordinates.

Team 100 (blue) owns the bottom-left corner, team 200 (red) the top-right.
All thresholds below are heuristics tuned on real matches, not values
published by Riot.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

BLUE_TEAM = 100
RED_TEAM = 200

FRAME_INTERVAL_MS = 60_000
LANE_FRAME_INDEX = 15

# Isolated deaths
ALLY_SUPPORT_RADIUS = 1500
OBJECTIVE_TRADE_WINDOW_MS = 15_000

# Objective rate
RESPAWN_ASSUMPTION_MS = 30_000
FOUNTAIN_RATE_BOUND = (1500, 13500)

# Badge zones (blue bound, red bound)
BASE_BOUND = (2500, 12500)
FOUNTAIN_BOUND = (1200, 13800)
JUNGLE_SIDE_BOUND = (9000, 6000)

Position = Mapping[str, float]
Frame = Dict[str, Any]


def enemy_team_of(team_id: int) -> int:
    return RED_TEAM if team_id == BLUE_TEAM else BLUE_TEAM


def dist(a: Position, b: Position) -> float:
    return math.hypot(a["x"] - b["x"], a["y"] - b["y"])


def _in_corner(pos: Optional[Position], team_id: int, bounds: tuple) -> bool:
    if not pos:
        return False
    blue, red = bounds
    if team_id == BLUE_TEAM:
        return pos["x"] < blue and pos["y"] < blue
    return pos["x"] > red and pos["y"] > red


def is_in_base(pos: Optional[Position], team_id: int) -> bool:
    return _in_corner(pos, team_id, BASE_BOUND)


def is_in_fountain(pos: Optional[Position], team_id: int, bounds: tuple = FOUNTAIN_BOUND) -> bool:
    return _in_corner(pos, team_id, bounds)


def is_in_jungle_side(pos: Optional[Position], team_id: int) -> bool:
    """Rough jungle half of ``team_id``; the river runs along the diagonal."""
    return _in_corner(pos, team_id, JUNGLE_SIDE_BOUND) and not is_in_base(pos, team_id)


# ── Frames ─────────────────────────────────────────────────────────────

def frame_at_minute(frames: List[Frame], timestamp: int) -> Optional[Frame]:
    """Minute frame covering ``timestamp``, clamped to the last frame."""
    if not frames:
        return None
    return frames[min(int(timestamp) // FRAME_INTERVAL_MS, len(frames) - 1)]


def nearest_frame(frames: List[Frame], timestamp: int) -> Optional[Frame]:
    """Frame whose own timestamp is closest to ``timestamp`` (first wins on ties)."""
    if not frames:
        return None
    return min(frames, key=lambda f: abs((f.get("timestamp") or 0) - timestamp))


def participant_frame(frame: Optional[Frame], participant_id: Any) -> Dict[str, Any]:
    if not frame:
        return {}
    return (frame.get("participantFrames") or {}).get(str(participant_id)) or {}


def position_of(frame: Optional[Frame], participant_id: Any) -> Optional[Position]:
    return participant_frame(frame, participant_id).get("position")


def gold_of(frame: Optional[Frame], participant_id: Any) -> int:
    return int(participant_frame(frame, participant_id).get("totalGold") or 0)


def team_gold(frame: Optional[Frame], participant_ids: Iterable[Any]) -> int:
    return sum(gold_of(frame, pid) for pid in participant_ids)


def count_nearby(frame: Optional[Frame], participant_ids: Iterable[Any], position: Position, radius: float) -> int:
    count = 0
    for pid in participant_ids:
        pos = position_of(frame, pid)
        if pos and dist(pos, position) <= radius:
            count += 1
    return count
