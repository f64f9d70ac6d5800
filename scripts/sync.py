from __future__ import annotations

import asyncio

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from presentation.cli import SyncCommand


def main(argv: list[str]) -> int:
    bootstrap_logging(service="sync", level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_file_name="sync.jsonl")
    game_name = argv[0] if len(argv) > 0 else None
    tag_line = argv[1] if len(argv) > 1 else None
    try:
        return asyncio.run(SyncCommand().run(game_name, tag_line))
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
