from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import DriverError
from ..log import INJECTED_STATEMENT
from ..utils import params_to_values
from .types import ExecuteResult

READ_PREFIX = "SELECT"

_BLANK = " \t\r\n;"

Statement = Union[str, Mapping[str, Any]]

_DESCRIPTOR_KEYS = {
    "sql": "sql",
    "values": "values",
    "nestTables": "nest_tables",
    "nest_tables": "nest_tables",
    "transaction": "transaction",
}


def is_read_statement(sql: Optional[str]) -> bool:
    """
    Classify SQL text by its leading token.

    Only the first statement counts and the check is case sensitive, so
    ``select 1`` is a mutating statement. Text with no statement in it
    (empty, blank or only semicolons) counts as a read.
    """
    if not sql or not sql.strip(_BLANK):
        return True
    return sql.strip()[:len(READ_PREFIX)] == READ_PREFIX


class StatementDescriptor:
    """
    One statement as submitted to `execute`, normalized.

    Attributes:
        sql (Optional[str]): The caller's SQL text.
        values (Optional[list]): Bound values, None when the caller gave none.
        nest_tables (bool): Whether dotted columns become nested dicts.
        transaction: Transaction handle carried by the descriptor itself.
        is_select (bool): Read statement classification.
        extra (dict): Unrecognized descriptor fields, untouched.
    """
    __slots__ = ("sql", "values", "nest_tables", "transaction", "is_select", "extra")

    def __init__(self, sql: Optional[str], values: Any = None, nest_tables: bool = False,
                 transaction: Any = None, extra: Optional[Dict[str, Any]] = None):
        self.sql = sql
        self.values = values
        self.nest_tables = bool(nest_tables)
        self.transaction = transaction
        self.is_select = is_read_statement(sql)
        self.extra = extra or {}

    @classmethod
    def build(cls, statement: Statement) -> StatementDescriptor:
        """
        Accept raw SQL text or a mapping with `sql` and optional `values`,
        `nestTables` and `transaction`.
        """
        if isinstance(statement, str):
            return cls(statement)
        if isinstance(statement, Mapping):
            known: Dict[str, Any] = {}
            extra: Dict[str, Any] = {}
            for key, value in statement.items():
                if key in _DESCRIPTOR_KEYS:
                    known[_DESCRIPTOR_KEYS[key]] = value
                else:
                    extra[key] = value
            return cls(extra=extra, **known)
        raise TypeError(f"Statement must be a string or a mapping, not {type(statement).__name__}")

    @property
    def composed_sql(self) -> str:
        """SQL sent to the driver, with the no-op read prepended to mutating statements."""
        sql = self.sql or ""
        if self.is_select:
            return sql
        return f"{INJECTED_STATEMENT}{sql}"

    def bound_values(self, params: tuple) -> List[Any]:
        if self.values is not None:
            return params_to_values((self.values,))
        return params_to_values(params)

    def __repr__(self):
        return (f"StatementDescriptor(sql={self.sql!r}, values={self.values!r}, nest_tables={self.nest_tables!r}, "
                f"is_select={self.is_select!r})")


def reshape(results: Any, is_select: bool) -> ExecuteResult:
    """
    Give driver results one predictable shape.

    Read statements return the driver's result untouched. For mutating
    statements the injected statement's result is dropped; a single
    remaining result is returned bare, several are returned in statement
    order.

    Raises:
        DriverError: If a mutating statement did not come back as a list
            with one result per statement.
    """
    if is_select:
        return results
    if not isinstance(results, list) or len(results) < 2 or isinstance(results[0], Mapping):
        raise DriverError(f"Expected one result per statement from the driver, got {results!r}")
    _, *remaining = results
    if len(remaining) == 1:
        return remaining[0]
    return remaining
