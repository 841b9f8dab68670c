"""
SQL escaping and positional formatting.

Values are inlined into the statement text on the client side, so a whole
semicolon-separated batch can be shipped to the server in one call.

    from async_sql_dispatcher.sqlstring import format, escape_id

    format("SELECT * FROM ?? WHERE id = ?", ["users", 42])
    # "SELECT * FROM `users` WHERE id = 42"

Scalars (strings, dates, decimals) go through PyMySQL's converters for the
MySQL flavour. `SqliteString` swaps string quoting for SQLite's, which does
not treat backslash as an escape character.
"""
from __future__ import annotations
import re
from decimal import Decimal
from typing import Any, Optional

from pymysql.converters import encoders, escape_item, escape_string

from .utils import as_value_list, is_iterable

_PLACEHOLDERS = re.compile(r"\?+")


class Raw:
    """A fragment inserted into formatted SQL without escaping."""
    __slots__ = ("sql",)

    def __init__(self, sql: str):
        if not isinstance(sql, str):
            raise TypeError("argument sql must be a string")
        self.sql = sql

    def to_sql_string(self) -> str:
        return self.sql

    def __repr__(self):
        return f"Raw({self.sql!r})"

    def __eq__(self, other):
        return isinstance(other, Raw) and self.sql == other.sql

    def __hash__(self):
        return hash(self.sql)


class SqlString:
    """MySQL escaping rules."""

    charset = "utf8mb4"

    def escape_id(self, value: Any, forbid_qualified: bool = False) -> str:
        """
        Quote an identifier with backticks.

        Embedded backticks are doubled and, unless `forbid_qualified` is set,
        dots split the identifier into qualified parts. Lists produce a
        comma separated list of identifiers.
        """
        if is_iterable(value):
            return ", ".join(self.escape_id(v, forbid_qualified) for v in value)
        if isinstance(value, Raw):
            return value.sql
        quoted = str(value).replace("`", "``")
        if not forbid_qualified:
            quoted = quoted.replace(".", "`.`")
        return f"`{quoted}`"

    def escape(self, value: Any, stringify_objects: bool = False) -> str:
        """Render a Python value as a SQL literal."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if hasattr(value, "to_sql_string"):
            return str(value.to_sql_string())
        if isinstance(value, (bytes, bytearray)):
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, str):
            return self.escape_string(value)
        if isinstance(value, dict):
            if stringify_objects:
                return self.escape_string(str(value))
            return self._object_to_values(value)
        if is_iterable(value):
            return self._array_to_list(value)
        return self.escape_scalar(value)

    def escape_string(self, value: str) -> str:
        return "'" + escape_string(value) + "'"

    def escape_scalar(self, value: Any) -> str:
        return escape_item(value, self.charset)

    def format(self, sql: str, values: Any = None, stringify_objects: bool = False) -> str:
        """
        Substitute `?` with escaped values and `??` with escaped identifiers.

        Runs of three or more `?` are left untouched. Substitution stops once
        the values are exhausted.
        """
        values = as_value_list(values)
        if not values:
            return sql

        parts = []
        chunk_index = 0
        value_index = 0
        for match in _PLACEHOLDERS.finditer(sql):
            if value_index >= len(values):
                break
            length = len(match.group(0))
            if length > 2:
                continue
            value = values[value_index]
            if length == 2:
                replacement = self.escape_id(value)
            else:
                replacement = self.escape(value, stringify_objects)
            parts.append(sql[chunk_index:match.start()])
            parts.append(replacement)
            chunk_index = match.end()
            value_index += 1

        if chunk_index == 0:
            return sql
        parts.append(sql[chunk_index:])
        return "".join(parts)

    def raw(self, sql: str) -> Raw:
        return Raw(sql)

    def _array_to_list(self, values) -> str:
        rendered = []
        for value in values:
            if is_iterable(value) and not hasattr(value, "to_sql_string"):
                rendered.append("(" + self._array_to_list(value) + ")")
            else:
                rendered.append(self.escape(value, True))
        return ", ".join(rendered)

    def _object_to_values(self, obj: dict) -> str:
        return ", ".join(
            f"{self.escape_id(key)} = {self.escape(value, True)}"
            for key, value in obj.items()
            if not callable(value)
        )


class SqliteString(SqlString):
    """SQLite escaping rules: quotes are doubled, backslashes are literal."""

    def escape_string(self, value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    def escape_scalar(self, value: Any) -> str:
        # PyMySQL renders dates and times without quotes or backslashes inside
        if type(value) in encoders and not isinstance(value, str):
            return escape_item(value, self.charset)
        return self.escape_string(str(value))


_default = SqlString()


def escape_id(value: Any, forbid_qualified: bool = False) -> str:
    return _default.escape_id(value, forbid_qualified)


def escape(value: Any, stringify_objects: bool = False) -> str:
    return _default.escape(value, stringify_objects)


def format(sql: str, values: Optional[Any] = None, stringify_objects: bool = False) -> str:
    return _default.format(sql, values, stringify_objects)


def raw(sql: str) -> Raw:
    return _default.raw(sql)
