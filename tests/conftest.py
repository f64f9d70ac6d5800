import pytest

from application.services import RetryPolicy, SyncEngine, SyncTimings
from domain.interfaces import IRiotGateway
from infrastructure.persistence import SQLiteStore
from tests.fakes import SEASON_START


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(tmp_path / "db" / "test.sqlite")
    yield s
    s.close()


@pytest.fixture
def no_wait_retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff_base_ms=0, backoff_factor=2.0)


@pytest.fixture
def make_engine(store, no_wait_retry):
    def _make(gateway: IRiotGateway) -> SyncEngine:
        return SyncEngine(
            gateway,
            store,
            timings=SyncTimings.immediate(),
            retry_policy=no_wait_retry,
            season_start=SEASON_START,
            special_queues=(2400, 1700, 1710),
        )
    return _make
