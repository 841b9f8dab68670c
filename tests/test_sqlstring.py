# tests/test_sqlstring.py
import sqlite3
import pytest
from datetime import date, datetime
from decimal import Decimal
from ..sqlstring import Raw, SqlString, SqliteString, escape, escape_id, format, raw


class TestEscapeId:
    """Tests for identifier quoting."""

    def test_plain(self):
        assert escape_id("users") == "`users`"

    def test_qualified(self):
        assert escape_id("users.id") == "`users`.`id`"

    def test_forbid_qualified(self):
        assert escape_id("users.id", forbid_qualified=True) == "`users.id`"

    def test_backticks_doubled(self):
        assert escape_id("we`ird") == "`we``ird`"

    def test_list(self):
        assert escape_id(["a", "b.c"]) == "`a`, `b`.`c`"

    def test_raw(self):
        assert escape_id(raw("COUNT(*)")) == "COUNT(*)"


class TestEscape:
    """Tests for value literals."""

    @pytest.mark.parametrize("value, expected", [
        (None, "NULL"),
        (True, "true"),
        (False, "false"),
        (5, "5"),
        (1.5, "1.5"),
        (Decimal("10.25"), "10.25"),
        ("abc", "'abc'"),
        (b"\x01\xff", "X'01ff'"),
        (raw("NOW()"), "NOW()"),
        (date(2024, 1, 2), "'2024-01-02'"),
        (datetime(2024, 1, 2, 3, 4, 5), "'2024-01-02 03:04:05'"),
    ])
    def test_scalars(self, value, expected):
        assert escape(value) == expected

    def test_quotes_and_backslashes(self):
        assert escape("it's a \\ test") == "'it\\'s a \\\\ test'"

    def test_list(self):
        assert escape([1, "a", None]) == "1, 'a', NULL"

    def test_nested_list(self):
        assert escape([[1, 2], [3, 4]]) == "(1, 2), (3, 4)"

    def test_dict(self):
        assert escape({"name": "Ann", "age": None}) == "`name` = 'Ann', `age` = NULL"

    def test_dict_skips_callables(self):
        assert escape({"a": 1, "f": len}) == "`a` = 1"

    def test_to_sql_string_object(self):
        class Point:
            def to_sql_string(self):
                return "POINT(1, 2)"

        assert escape(Point()) == "POINT(1, 2)"


class TestFormat:
    """Tests for positional placeholder substitution."""

    def test_values_and_identifiers(self):
        assert format("SELECT * FROM ?? WHERE id = ?", ["users", 42]) == "SELECT * FROM `users` WHERE id = 42"

    def test_single_value(self):
        assert format("SELECT ?", "a") == "SELECT 'a'"

    def test_no_values(self):
        assert format("SELECT ?") == "SELECT ?"
        assert format("SELECT ?", []) == "SELECT ?"

    def test_stops_when_values_run_out(self):
        assert format("? ? ?", [1, 2]) == "1 2 ?"

    def test_long_runs_untouched(self):
        assert format("SELECT ??? , ?", [1]) == "SELECT ??? , 1"

    def test_list_value_for_in(self):
        assert format("id IN (?)", [[1, 2, 3]]) == "id IN (1, 2, 3)"

    def test_dict_value_for_set(self):
        assert format("UPDATE t SET ?", [{"a": 1}]) == "UPDATE t SET `a` = 1"


class TestRaw:
    """Tests for raw fragments."""

    def test_requires_string(self):
        with pytest.raises(TypeError):
            Raw(1)

    def test_equality(self):
        assert raw("NOW()") == Raw("NOW()")
        assert len({raw("NOW()"), Raw("NOW()")}) == 1


class TestSqliteString:
    """Tests for the SQLite flavour."""

    def setup_method(self):
        self.sql = SqliteString()

    def test_quotes_doubled_backslash_literal(self):
        assert self.sql.escape("it's a \\ test") == "'it''s a \\ test'"

    def test_dates(self):
        assert self.sql.escape(date(2024, 1, 2)) == "'2024-01-02'"

    @pytest.mark.parametrize("text", ["plain", "it's", "back\\slash", "''", "\\'", "semi;colon", "new\nline"])
    def test_literal_round_trip(self, text):
        conn = sqlite3.connect(":memory:")
        try:
            (value,) = conn.execute(f"SELECT {self.sql.escape(text)}").fetchone()
        finally:
            conn.close()
        assert value == text


def test_mysql_flavour_uses_backslash_escapes():
    assert SqlString().escape("'") == "'\\''"
