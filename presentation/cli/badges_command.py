from __future__ import annotations

from config import settings
from domain.enums import Role, queue_label
from core.logging.logger import get_logger
from infrastructure import SQLiteStore
from application.analysis import BadgeEvaluator


class BadgesCommand:
    """Badges earned in the most recent stored matches."""

    def __init__(self, limit: int = 10) -> None:
        self.log = get_logger(__name__, service="badges-cli")
        self.limit = limit
        self.evaluator = BadgeEvaluator()

    def run(self) -> None:
        with SQLiteStore(settings.DB_PATH) as store:
            matches = store.list_matches(self.limit)
        if not matches:
            print("No matches stored yet. Run a sync first.", flush=True)
            return

        for record in matches:
            s = record.subject
            outcome = "Victory" if s.win else "Defeat"
            role = Role.from_string(s.team_position or s.lane)
            print(f"\n{record.game_date:%Y-%m-%d %H:%M}  {record.match_id}  {queue_label(record.queue_id)}  "
                  f"{s.champion_name} ({role.short_name if role else '-'}) "
                  f"{s.kills}/{s.deaths}/{s.assists}  {outcome}", flush=True)
            earned = self.evaluator.evaluate(record)
            if not earned:
                print("   (no badges)", flush=True)
            for badge in earned:
                print(f"   * {badge.name}: {badge.description}", flush=True)
            if not record.has_timeline:
                print("   (no timeline: timeline badges unavailable)", flush=True)
        self.log.info(lambda: f"badges-listed {len(matches)}")
