# tests/conftest.py
import pytest
from unittest.mock import MagicMock, AsyncMock
from ..sqlstring import SqlString


def make_transaction_handle(isolation_level="READ COMMITTED"):
    """A transaction handle double with awaitable commit/rollback."""
    handle = MagicMock()
    handle.isolation_level = isolation_level
    handle.finished = None
    handle.commit = AsyncMock()
    handle.rollback = AsyncMock()
    return handle


@pytest.fixture
def mock_driver():
    """A connection handle double: query returns (results, metadata)."""
    driver = MagicMock()
    driver.sqlstring = SqlString()
    driver.query = AsyncMock(return_value=([], None))
    driver.transaction = AsyncMock(side_effect=lambda *args, **kwargs: make_transaction_handle(*args, **kwargs))
    driver.close = AsyncMock()
    return driver


@pytest.fixture
def sqlite_options(tmp_path):
    """Configuration for a throwaway SQLite database file."""
    return {"dialect": "sqlite", "storage": str(tmp_path / "test.db"), "timezone": "+00:00"}
