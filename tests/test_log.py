# tests/test_log.py
from unittest.mock import MagicMock
from ..log import INJECTED_STATEMENT, QueryLog, strip_injected_statement, wrap_logging


def test_strip_first_occurrence_only():
    assert strip_injected_statement("SELECT 1;UPDATE t SET a = 'SELECT 1;'") == "UPDATE t SET a = 'SELECT 1;'"


def test_strip_without_injected_statement():
    assert strip_injected_statement("SELECT * FROM t") == "SELECT * FROM t"


def test_wrap_logging_forwards_extra_arguments():
    callback = MagicMock()
    log = wrap_logging(callback)
    log(INJECTED_STATEMENT + "DELETE FROM t", 12.5)
    callback.assert_called_once_with("DELETE FROM t", 12.5)
    assert log.__wrapped__ is callback


class TestQueryLog:
    """Tests for per-query log lines."""

    def test_before_execution(self):
        assert QueryLog("default", "SELECT 1").message() == "Executing (default): SELECT 1"

    def test_after_execution(self):
        assert QueryLog("abc123", "SELECT 1", elapsed=1.2).message() == "Executed (abc123): SELECT 1"

    def test_inlined_values_are_logged_once(self):
        entry = QueryLog("default", "SELECT 'a', 1")
        assert entry.message() == "Executing (default): SELECT 'a', 1"

    def test_emit_with_elapsed(self):
        callback = MagicMock()
        QueryLog("default", "SELECT 1", elapsed=3.0).emit(callback)
        callback.assert_called_once_with("Executed (default): SELECT 1", 3.0)

    def test_emit_disabled(self):
        # nothing to assert beyond not raising
        QueryLog("default", "SELECT 1").emit(False)
        QueryLog("default", "SELECT 1").emit(None)
