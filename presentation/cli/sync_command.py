from __future__ import annotations

from config import settings
from core.logging.logger import get_logger
from domain.exceptions import IdentityResolutionError, RiotAPIError, describe_api_error
from infrastructure import RiotAPIClient, RiotGateway, SQLiteStore
from application.use_cases import SyncPlayerUseCase


class SyncCommand:
    """Sync command with a progress bar per stage."""

    def __init__(self) -> None:
        self._log = get_logger(__name__, service="sync-cli")
        self._stage = "Sync"

    def _print_banner(self, game_name: str, tag_line: str) -> None:
        print("\n" + "=" * 57)
        print("MATCH SYNC")
        print("=" * 57)
        print(f"Riot ID: {game_name}#{tag_line}")
        print(f"Platform: {settings.RIOT_PLATFORM}")
        print(f"Database: {settings.DB_PATH}")
        print("=" * 57 + "\n")

    def _ask_riot_id(self) -> tuple[str, str]:
        default = f"{settings.GAME_NAME}#{settings.TAG_LINE}" if settings.has_riot_id() else ""
        prompt = f"Riot ID (name#tag){f' [{default}]' if default else ''}: "
        raw = input(prompt).strip() or default
        name, _, tag = raw.partition("#")
        return name.strip(), tag.strip()

    def _on_status(self, stage: str, message: str) -> None:
        self._stage = stage
        print(f"\n{stage}: {message}", flush=True)

    def _on_progress(self, current: int, total: int, kind: str | None = None, message: str | None = None) -> None:
        if kind == "warn":
            print(f"\nWarning: {message}", flush=True)
            return
        if not total:
            return
        width = 30
        cur = min(max(0, int(current or 0)), total)
        filled = int(width * cur / total)
        bar = "█" * filled + "-" * (width - filled)
        print(f"\r{self._stage} | {bar} | {cur}/{total}", end="", flush=True)

    async def run(self, game_name: str | None = None, tag_line: str | None = None) -> int:
        settings.validate()
        settings.create_directories()
        if not game_name or not tag_line:
            game_name, tag_line = self._ask_riot_id()
        self._print_banner(game_name, tag_line)
        self._log.info("start")

        with SQLiteStore(settings.DB_PATH) as store:
            async with RiotAPIClient(settings.RIOT_API_KEY) as api:
                use_case = SyncPlayerUseCase(RiotGateway(api), store)
                try:
                    report = await use_case.execute(
                        game_name, tag_line, on_status=self._on_status, on_progress=self._on_progress
                    )
                except IdentityResolutionError as exc:
                    self._log.error(lambda: f"identity-failed {exc}")
                    print(f"\nSync Failed: {exc}", flush=True)
                    return 1
                except RiotAPIError as exc:
                    self._log.error(lambda: f"sync-failed {exc}")
                    print(f"\nSync Failed: {describe_api_error(exc)}", flush=True)
                    return 1

        if report.own_rank is not None:
            print(f"\nSolo/Duo: {report.own_rank.solo_label}   Flex: {report.own_rank.flex_label}")
        print(f"\nSync Complete: {report.summary()}", flush=True)
        self._log.success(lambda: f"sync-complete {report.sync.to_dict()}")
        return 0
