"""Application settings and configuration."""
import os
from datetime import datetime, timezone
from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


def _season_start(raw: str) -> int:
    d = datetime.strptime(raw, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    return int(d.timestamp())


class Settings:
    """
    ─── SYNC BUDGET ──────────────────────────────────────────────────────
    Personal keys allow 20 req/s and 100 req / 120 s. The sync engine
    stays around 6-7 req/s: detail fetches go out 2 at a time, every
    other call is sequential with REQUEST_DELAY_S between calls.
    ──────────────────────────────────────────────────────────────────────
    """

    RIOT_API_KEY: str = os.getenv('RIOT_API_KEY', '')

    # ── Identity ──────────────────────────────────────────────────────────
    RIOT_PLATFORM: str = os.getenv('RIOT_PLATFORM', 'euw1')
    GAME_NAME:     str = os.getenv('GAME_NAME', '')
    TAG_LINE:      str = os.getenv('TAG_LINE', '')

    # ── Rate limits (per 1 second / per 2 minutes = Riot's actual windows) ──
    RATE_LIMIT_PER_1_SEC:          int = 18
    RATE_LIMIT_PER_2_MIN:          int = 90

    MATCH_RATE_LIMIT_PER_1_SEC:    int = 18
    MATCH_RATE_LIMIT_PER_2_MIN:    int = 90

    ACCOUNT_RATE_LIMIT_PER_1_SEC:  int = 15
    ACCOUNT_RATE_LIMIT_PER_2_MIN:  int = 80

    LEAGUE_RATE_LIMIT_PER_1_SEC:   int = 15
    LEAGUE_RATE_LIMIT_PER_2_MIN:   int = 75

    # ── Sync pacing ───────────────────────────────────────────────────────
    REQUEST_DELAY_S:     float = float(os.getenv('REQUEST_DELAY_S', '0.15'))
    INTER_BATCH_DELAY_S: float = float(os.getenv('INTER_BATCH_DELAY_S', '0.1'))
    SYNC_BATCH_SIZE:     int   = int(os.getenv('SYNC_BATCH_SIZE', '2'))
    IDS_PAGE_SIZE:       int   = 100

    # Queues the by-puuid listing omits unless asked for explicitly
    # (ARAM: Mayhem, Arena, Arena 16-player).
    SPECIAL_QUEUES: tuple = tuple(
        int(q) for q in os.getenv('SPECIAL_QUEUES', '2400,1700,1710').split(',') if q.strip()
    )
    SPECIAL_QUEUE_RETRIES:  int = 2
    SPECIAL_QUEUE_BACKOFF_MS: int = 1000

    # Ranked season start (UTC). Backward gap-fill never looks earlier.
    SEASON_START_DATE: str = os.getenv('SEASON_START_DATE', '2026-01-01')
    SEASON_START:      int = _season_start(SEASON_START_DATE)

    RANK_CACHE_TTL_MS: int = 24 * 60 * 60 * 1000

    # ── Paths ──────────────────────────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    DATA_DIR: Path = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
    DB_DIR:   Path = DATA_DIR / 'db'
    DB_PATH:  Path = Path(os.getenv('DB_PATH', str(DB_DIR / 'nexus_data.sqlite')))
    LOG_DIR:  Path = DATA_DIR / 'logs'

    # ── HTTP ───────────────────────────────────────────────────────────────
    REQUEST_TIMEOUT: int   = 10
    MAX_RETRIES:     int   = 3
    RETRY_BACKOFF:   float = 2.0

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> None:
        if not cls.RIOT_API_KEY:
            raise ValueError("RIOT_API_KEY must be set in config/.env")

    @classmethod
    def has_riot_id(cls) -> bool:
        return bool(cls.GAME_NAME.strip() and cls.TAG_LINE.strip())

    @classmethod
    def create_directories(cls) -> None:
        cls.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
