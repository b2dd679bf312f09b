import logging
from pathlib import Path

import pytest  # noqa

from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.persistence import metrics
from viewcounter.store.adapters.in_memory_adapter import InMemoryStoreFactory
from viewcounter.store.adapters.sqlite_adapter import SQLiteStoreFactory


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def counter():
    return PageCounter()


@pytest.fixture
def visitors():
    return VisitorSet()


@pytest.fixture
def memory_factory():
    return InMemoryStoreFactory()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "viewCounter.db")


@pytest.fixture
def sqlite_factory(db_path):
    return SQLiteStoreFactory(db_path)


@pytest.fixture
def monitor_logs(caplog):
    """Capture MONITOR_EVENT lines emitted by platform_monitoring."""
    caplog.set_level(logging.DEBUG, logger="platform_monitoring")
    return caplog
