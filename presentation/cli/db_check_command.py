from __future__ import annotations

import sqlite3
import time

from config import settings
from core.logging.logger import get_logger
from infrastructure import SQLiteStore


class DBCheckCommand:
    """Local cache inspection: completeness of stored matches and the rank cache."""

    def __init__(self) -> None:
        self.log = get_logger(__name__, service="db-cli")
        self.db_path = settings.DB_PATH

    def run(self) -> None:
        actions = {
            "1": self._overview,
            "2": self._incomplete,
            "3": self._integrity,
        }
        while True:
            print("\n=== DB Check ===", flush=True)
            print(f"Database: {self.db_path}", flush=True)
            print("1) Overview", flush=True)
            print("2) Incomplete matches", flush=True)
            print("3) PRAGMA integrity_check", flush=True)
            print("4) Back", flush=True)
            choice = input("Choose: ").strip()
            if choice == "4":
                return
            action = actions.get(choice)
            if action is None:
                print("Invalid option.", flush=True)
                continue
            try:
                # Opening the store also migrates older schemas.
                with SQLiteStore(self.db_path) as store:
                    action(store)
            except sqlite3.Error as e:
                self.log.error(lambda: f"db-check-failed {e}")
                print(f"Error: {e}", flush=True)
            input("Press Enter to return to DB menu...")

    def _overview(self, store: SQLiteStore) -> None:
        oldest, latest = store.get_creation_bounds()
        print(f"\nMatches stored:        {store.count_matches()}", flush=True)
        if latest is not None:
            print(f"Oldest / newest:       {time.strftime('%Y-%m-%d', time.gmtime(oldest / 1000))}"
                  f" / {time.strftime('%Y-%m-%d', time.gmtime(latest / 1000))}", flush=True)
        print(f"Missing timelines:     {len(store.get_ids_missing_timeline())}", flush=True)
        print(f"Derived stats pending: {len(store.get_rows_missing_stats())}", flush=True)

        cutoff = int(time.time() * 1000) - settings.RANK_CACHE_TTL_MS
        total, fresh = store.count_ranks(cutoff)
        print(f"Ranks cached:          {total} ({fresh} fresh)", flush=True)

    def _incomplete(self, store: SQLiteStore) -> None:
        """Rows the next sync re-fetches, per missing column."""
        print("\nNULL required columns:", flush=True)
        for col, cnt in store.count_missing().items():
            print(f"- {col}: {cnt}", flush=True)

    def _integrity(self, store: SQLiteStore) -> None:
        print(f"integrity_check: {store.integrity_check()}", flush=True)
