from __future__ import annotations

from typing import Any

from config import settings
from domain.enums import Role, queue_label
from core.logging.logger import get_logger
from infrastructure import SQLiteStore
from application.services import RankCache


def _fmt(value: Any, suffix: str = "") -> str:
    if value is None:
        return "-"
    if isinstance(value, int) and not isinstance(value, bool) and suffix == "":
        return f"{value:+d}"
    return f"{value}{suffix}"


class StatsCommand:
    """Summary statistics and the recent match table."""

    def __init__(self, limit: int = 20) -> None:
        self.log = get_logger(__name__, service="stats-cli")
        self.limit = limit

    def run(self) -> None:
        with SQLiteStore(settings.DB_PATH) as store:
            stats = store.get_summary_stats()
            matches = store.list_matches(self.limit)

        if not stats["total_matches"]:
            print("No matches stored yet. Run a sync first.", flush=True)
            return

        print("\n=== Summary ===", flush=True)
        print(f"Matches: {stats['total_matches']}  W/L: {stats['wins']}/{stats['losses']}  "
              f"Win rate: {stats['win_rate']}%")
        print(f"Avg K/D/A: {stats['avg_kills']}/{stats['avg_deaths']}/{stats['avg_assists']}  "
              f"Avg damage: {stats['avg_damage']}  Avg CS: {stats['avg_cs']}  Avg vision: {stats['avg_vision']}")
        print(f"Pentas: {stats['total_pentas']}  Quadras: {stats['total_quadras']}  "
              f"Dragons: {stats['total_dragons']}  Barons: {stats['total_barons']}  "
              f"Turrets: {stats['total_turrets']}  Avg wards: {stats['avg_wards_placed']}")
        print(f"Avg CS@15 diff: {_fmt(stats['avg_cs_diff_15'])}  "
              f"Avg objective rate: {_fmt(stats['avg_objective_rate'], '%')}  "
              f"Isolated deaths: {stats['total_isolated_deaths']}")

        print("\n=== Recent matches ===", flush=True)
        print(f"{'date':<11}{'champion':<14}{'kda':<10}{'cs@15':>7}{'gd@15':>8}{'xp@15':>7}"
              f"{'fb':>4}{'dmg/g':>7}{'iso':>5}{'obj%':>7}")
        for m in matches:
            s, a = m.subject, m.advanced
            kda = f"{s.kills}/{s.deaths}/{s.assists}"
            print(f"{m.game_date:%Y-%m-%d} {s.champion_name[:13]:<14}{kda:<10}"
                  f"{_fmt(a.cs_diff_15):>7}{_fmt(a.gold_diff_15):>8}{_fmt(a.xp_diff_15):>7}"
                  f"{'Y' if a.first_blood else '-':>4}{_fmt(a.dmg_gold_ratio):>7}"
                  f"{'-' if a.isolated_deaths is None else a.isolated_deaths:>5}{_fmt(a.objective_rate, '%'):>7}")
        self.log.info(lambda: f"stats-shown {stats['total_matches']}")

        choice = input("\nMatch id for details (Enter to skip): ").strip()
        if choice:
            self.show_match(choice)

    def show_match(self, match_id: str) -> None:
        """Participants of one stored match with their cached ranks. No API calls."""
        with SQLiteStore(settings.DB_PATH) as store:
            record = store.get_match(match_id)
            if record is None:
                print(f"Match {match_id} not found.", flush=True)
                return
            ranks = RankCache(None, store, store).get_match_participant_ranks(match_id)

        print(f"\n{record.match_id}  {queue_label(record.queue_id)}  "
              f"{record.game_duration // 60}:{record.game_duration % 60:02d}", flush=True)
        for team_id in (100, 200):
            print(f"\nTeam {team_id}{' (you)' if team_id == record.subject.team_id else ''}")
            for p in record.participants:
                if p.get("teamId") != team_id:
                    continue
                rank = ranks.get(p.get("puuid"))
                label = rank.solo_label if rank else "-"
                name = p.get("riotIdGameName") or p.get("summonerName") or "?"
                role = Role.from_string(p.get("teamPosition"))
                print(f"  {role.short_name if role else '-':<4}{p.get('championName', '?'):<14}{name[:16]:<17}"
                      f"{p.get('kills', 0)}/{p.get('deaths', 0)}/{p.get('assists', 0):<6}{label}")
