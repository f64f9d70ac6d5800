"""Main CLI entry-point."""
from __future__ import annotations

import asyncio
import shutil
import sys

from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings

_BRIGHT_GREEN = "\033[1;92m"
_CYAN = "\033[96m"
_YELLOW = "\033[93m"
_RESET = "\033[0m"
_BOLD = "\033[1m"


def _g(s: str) -> str:
    return f"{_BRIGHT_GREEN}{s}{_RESET}"


def _c(s: str) -> str:
    return f"{_CYAN}{s}{_RESET}"


_LOGO = r"""
  ███╗   ██╗███████╗██╗  ██╗██╗   ██╗███████╗
  ████╗  ██║██╔════╝╚██╗██╔╝██║   ██║██╔════╝
  ██╔██╗ ██║█████╗   ╚███╔╝ ██║   ██║███████╗
  ██║╚██╗██║██╔══╝   ██╔██╗ ██║   ██║╚════██║
  ██║ ╚████║███████╗██╔╝ ██╗╚██████╔╝███████║
  ╚═╝  ╚═══╝╚══════╝╚═╝  ╚═╝ ╚═════╝ ╚══════╝
"""


def _print_logo() -> None:
    cols = shutil.get_terminal_size(fallback=(100, 20)).columns
    div = "═" * min(cols, 64)
    print(_g(div))
    for line in _LOGO.splitlines():
        print(_g(line))
    print(_c("  Personal League of Legends match history, stats and badges"))
    print(_g(div))


def _menu() -> None:
    _print_logo()
    from presentation.cli import SyncCommand, BadgesCommand, StatsCommand, DBCheckCommand

    entries = [
        ("Sync matches", lambda: asyncio.run(SyncCommand().run())),
        ("Badges", lambda: BadgesCommand().run()),
        ("Stats", lambda: StatsCommand().run()),
        ("DB check", lambda: DBCheckCommand().run()),
    ]
    exit_key = str(len(entries) + 1)

    while True:
        width = min(shutil.get_terminal_size(fallback=(96, 20)).columns, 48)
        print(f"\n{_g('═' * width)}")
        print(f"  {_BOLD}MAIN MENU{_RESET}")
        print(_g("═" * width))
        for key, (label, _) in enumerate(entries, start=1):
            print(f"  {_c(str(key))}  {label}")
        print(f"  {_c(exit_key)}  Exit")
        print(_g("─" * width))
        choice = input("  Choose: ").strip()

        if choice == exit_key:
            print(f"\n  {_g('Goodbye!')}\n")
            break
        if choice.isdigit() and 1 <= int(choice) <= len(entries):
            try:
                entries[int(choice) - 1][1]()
            except ValueError as exc:
                # Settings.validate() failures, e.g. no RIOT_API_KEY
                print(f"  {_YELLOW}{exc}{_RESET}")
        else:
            print(f"  {_YELLOW}Invalid option.{_RESET}")


def main(argv: list[str]) -> int:
    bootstrap_logging(
        service="nexus",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="nexus.jsonl",
    )
    try:
        _menu()
        return 0
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
