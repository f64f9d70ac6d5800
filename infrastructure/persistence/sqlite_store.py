"""SQLite persistence for match records and the player rank cache."""
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from domain.entities import AdvancedStats, MatchRecord, PlayerRankEntry, REQUIRED_COLUMNS
from domain.interfaces import IMatchStore, IRankStore

logger = logging.getLogger(__name__)

MATCH_COLUMNS: List[Tuple[str, str]] = [
    ("match_id", "TEXT PRIMARY KEY"),
    ("queue_id", "INTEGER"),
    ("game_creation", "INTEGER"),
    ("game_duration", "INTEGER"),
    # subject
    ("puuid", "TEXT"),
    ("champion_name", "TEXT"),
    ("team_id", "INTEGER"),
    ("champ_level", "INTEGER"),
    ("win", "INTEGER"),
    ("kills", "INTEGER"),
    ("deaths", "INTEGER"),
    ("assists", "INTEGER"),
    ("double_kills", "INTEGER"),
    ("triple_kills", "INTEGER"),
    ("quadra_kills", "INTEGER"),
    ("penta_kills", "INTEGER"),
    ("gold_earned", "INTEGER"),
    ("total_minions_killed", "INTEGER"),
    ("total_damage_dealt_to_champions", "INTEGER"),
    ("vision_score", "INTEGER"),
    ("wards_placed", "INTEGER"),
    ("wards_killed", "INTEGER"),
    ("detector_wards_placed", "INTEGER"),
    ("turret_kills", "INTEGER"),
    ("inhibitor_kills", "INTEGER"),
    ("dragon_kills", "INTEGER"),
    ("baron_kills", "INTEGER"),
    ("objectives_stolen", "INTEGER"),
    ("team_position", "TEXT"),
    ("lane", "TEXT"),
    ("item0", "INTEGER"), ("item1", "INTEGER"), ("item2", "INTEGER"),
    ("item3", "INTEGER"), ("item4", "INTEGER"), ("item5", "INTEGER"),
    ("item6", "INTEGER"),
    ("primary_rune", "INTEGER"),
    ("secondary_rune_style", "INTEGER"),
    # teams
    ("team_dragons", "INTEGER"),
    ("enemy_dragons", "INTEGER"),
    ("team_barons", "INTEGER"),
    ("enemy_barons", "INTEGER"),
    ("team_rift_heralds", "INTEGER"),
    ("enemy_rift_heralds", "INTEGER"),
    ("team_towers", "INTEGER"),
    ("enemy_towers", "INTEGER"),
    ("team_inhibitors", "INTEGER"),
    ("enemy_inhibitors", "INTEGER"),
    ("team_kills", "INTEGER"),
    # payloads
    ("raw_json", "TEXT"),
    ("timeline_json", "TEXT"),
    # derived
    ("cs_diff_15", "INTEGER"),
    ("gold_diff_15", "INTEGER"),
    ("xp_diff_15", "INTEGER"),
    ("first_blood", "INTEGER"),
    ("dmg_gold_ratio", "REAL"),
    ("isolated_deaths", "INTEGER"),
    ("objective_rate", "REAL"),
]

RANK_COLUMNS: List[Tuple[str, str]] = [
    ("puuid", "TEXT PRIMARY KEY"),
    ("fetched_at", "INTEGER"),
    ("solo_tier", "TEXT"),
    ("solo_rank", "TEXT"),
    ("solo_lp", "INTEGER"),
    ("flex_tier", "TEXT"),
    ("flex_rank", "TEXT"),
    ("flex_lp", "INTEGER"),
]


def _upsert_sql(table: str, columns: List[str], key: str) -> str:
    placeholders = ",".join("?" for _ in columns)
    updates = ",".join(f"{c}=excluded.{c}" for c in columns if c != key)
    return (
        f"INSERT INTO {table}({','.join(columns)}) VALUES({placeholders}) "
        f"ON CONFLICT({key}) DO UPDATE SET {updates}"
    )


class SQLiteStore(IMatchStore, IRankStore):
    """Match store and rank store over one SQLite file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._create_tables()
        self._match_upsert = _upsert_sql("matches", [c for c, _ in MATCH_COLUMNS], "match_id")
        self._rank_upsert = _upsert_sql("player_ranks", [c for c, _ in RANK_COLUMNS], "puuid")

    def _create_tables(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            f"CREATE TABLE IF NOT EXISTS matches ({', '.join(f'{c} {t}' for c, t in MATCH_COLUMNS)})"
        )
        cur.execute(
            f"CREATE TABLE IF NOT EXISTS player_ranks ({', '.join(f'{c} {t}' for c, t in RANK_COLUMNS)})"
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_matches_creation ON matches(game_creation)")
        self._conn.commit()
        # Databases written by older builds may lack newer columns.
        for table, columns in (("matches", MATCH_COLUMNS), ("player_ranks", RANK_COLUMNS)):
            existing = {r[1] for r in cur.execute(f"PRAGMA table_info({table})").fetchall()}
            for name, typ in columns:
                if name not in existing:
                    logger.info(f"Adding column {table}.{name}")
                    cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {typ.replace(' PRIMARY KEY', '')}")
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> 'SQLiteStore':
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ── Matches ────────────────────────────────────────────────────────

    def upsert_match(self, record: MatchRecord) -> None:
        row = record.to_row()
        self._conn.execute(self._match_upsert, [row.get(c) for c, _ in MATCH_COLUMNS])
        self._conn.commit()

    def get_match(self, match_id: str) -> Optional[MatchRecord]:
        row = self._conn.execute("SELECT * FROM matches WHERE match_id = ?", (match_id,)).fetchone()
        return MatchRecord.from_row(dict(row)) if row else None

    def get_missing_columns(self, match_id: str) -> Optional[List[str]]:
        row = self._conn.execute(
            f"SELECT {', '.join(REQUIRED_COLUMNS)} FROM matches WHERE match_id = ?", (match_id,)
        ).fetchone()
        if row is None:
            return None
        return [c for c in REQUIRED_COLUMNS if row[c] is None]

    def get_creation_bounds(self) -> tuple[Optional[int], Optional[int]]:
        row = self._conn.execute("SELECT MIN(game_creation), MAX(game_creation) FROM matches").fetchone()
        return row[0], row[1]

    def get_known_match_ids(self) -> set[str]:
        return {r[0] for r in self._conn.execute("SELECT match_id FROM matches").fetchall()}

    def count_matches(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM matches").fetchone()[0]

    def count_missing(self) -> Dict[str, int]:
        """NULL count per required column."""
        row = self._conn.execute(
            "SELECT " + ", ".join(f"SUM(CASE WHEN {c} IS NULL THEN 1 ELSE 0 END) AS {c}" for c in REQUIRED_COLUMNS)
            + " FROM matches"
        ).fetchone()
        return {c: row[c] or 0 for c in REQUIRED_COLUMNS}

    def integrity_check(self) -> str:
        row = self._conn.execute("PRAGMA integrity_check").fetchone()
        return row[0] if row else "unknown"

    def get_ids_missing_timeline(self) -> List[str]:
        rows = self._conn.execute(
            "SELECT match_id FROM matches WHERE timeline_json IS NULL ORDER BY game_creation DESC"
        ).fetchall()
        return [r[0] for r in rows]

    def set_timeline(self, match_id: str, timeline: Dict[str, Any]) -> None:
        self._conn.execute(
            "UPDATE matches SET timeline_json = ? WHERE match_id = ?",
            (json.dumps(timeline, separators=(",", ":")), match_id),
        )
        self._conn.commit()

    def get_rows_missing_stats(self) -> List[Dict[str, Any]]:
        rows = self._conn.execute(
            "SELECT * FROM matches WHERE raw_json IS NOT NULL AND cs_diff_15 IS NULL "
            "ORDER BY game_creation DESC"
        ).fetchall()
        return [dict(r) for r in rows]

    def set_advanced_stats(self, match_id: str, stats: AdvancedStats) -> None:
        values = stats.to_row()
        sets = ", ".join(f"{c} = ?" for c in AdvancedStats.COLUMNS)
        self._conn.execute(
            f"UPDATE matches SET {sets} WHERE match_id = ?",
            [values[c] for c in AdvancedStats.COLUMNS] + [match_id],
        )
        self._conn.commit()

    def get_raw_participants(self, match_id: str) -> List[Dict[str, Any]]:
        row = self._conn.execute("SELECT raw_json FROM matches WHERE match_id = ?", (match_id,)).fetchone()
        if row is None or row[0] is None:
            return []
        try:
            return (json.loads(row[0]).get("info") or {}).get("participants") or []
        except (ValueError, AttributeError):
            logger.warning(f"Unreadable raw_json for {match_id}")
            return []

    # ── Queries ────────────────────────────────────────────────────────

    def list_matches(self, limit: Optional[int] = None) -> List[MatchRecord]:
        """Newest first; all rows when ``limit`` is falsy."""
        sql = "SELECT * FROM matches ORDER BY game_creation DESC"
        params: tuple = ()
        if limit:
            sql += " LIMIT ?"
            params = (limit,)
        return [MatchRecord.from_row(dict(r)) for r in self._conn.execute(sql, params).fetchall()]

    def get_summary_stats(self) -> Dict[str, Any]:
        row = self._conn.execute(
            """SELECT COUNT(*) AS total_matches,
                      SUM(CASE WHEN win = 1 THEN 1 ELSE 0 END) AS wins,
                      AVG(kills) AS avg_kills,
                      AVG(deaths) AS avg_deaths,
                      AVG(assists) AS avg_assists,
                      AVG(total_damage_dealt_to_champions) AS avg_damage,
                      AVG(vision_score) AS avg_vision,
                      AVG(total_minions_killed) AS avg_cs,
                      SUM(penta_kills) AS total_pentas,
                      SUM(quadra_kills) AS total_quadras,
                      SUM(dragon_kills) AS total_dragons,
                      SUM(baron_kills) AS total_barons,
                      SUM(turret_kills) AS total_turrets,
                      AVG(wards_placed) AS avg_wards_placed,
                      AVG(cs_diff_15) AS avg_cs_diff_15,
                      AVG(objective_rate) AS avg_objective_rate,
                      SUM(isolated_deaths) AS total_isolated_deaths
               FROM matches"""
        ).fetchone()
        stats = dict(row)
        total = stats["total_matches"] or 0
        stats["wins"] = stats["wins"] or 0
        stats["losses"] = total - stats["wins"]
        stats["win_rate"] = round(stats["wins"] / total * 100, 1) if total else None
        for key, value in stats.items():
            if key.startswith("avg_") and value is not None:
                stats[key] = round(value, 1)
            elif key.startswith("total_") and value is None:
                stats[key] = 0
        return stats

    # ── Ranks ──────────────────────────────────────────────────────────

    def get_rank(self, puuid: str, min_fetched_at: int = 0) -> Optional[PlayerRankEntry]:
        row = self._conn.execute(
            "SELECT * FROM player_ranks WHERE puuid = ? AND fetched_at > ?", (puuid, min_fetched_at)
        ).fetchone()
        return PlayerRankEntry.from_row(dict(row)) if row else None

    def upsert_rank(self, entry: PlayerRankEntry) -> None:
        row = entry.to_row()
        self._conn.execute(self._rank_upsert, [row.get(c) for c, _ in RANK_COLUMNS])
        self._conn.commit()

    def count_ranks(self, min_fetched_at: int = 0) -> tuple[int, int]:
        """(all cached entries, entries fetched after ``min_fetched_at``)."""
        total, fresh = self._conn.execute(
            "SELECT COUNT(*), SUM(CASE WHEN fetched_at > ? THEN 1 ELSE 0 END) FROM player_ranks",
            (min_fetched_at,),
        ).fetchone()
        return total, fresh or 0
