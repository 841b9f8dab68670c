"""
Row shaping shared by the driver adapters.

Rows always come back as plain dictionaries keyed by column name. When a
caller asks for nested results, dotted column names are expanded into
nested dictionaries:

    >>> nest_row({"id": 1, "author.id": 7, "author.name": "Ann"})
    {'id': 1, 'author': {'id': 7, 'name': 'Ann'}}
"""
from typing import Any, Dict, List, Tuple
import sqlite3


def dict_row_factory(cursor: sqlite3.Cursor, row: Tuple) -> dict:
    """
    Row factory that returns rows as dictionaries.

    Args:
        cursor: The SQLite cursor object.
        row: The raw row tuple from SQLite.

    Returns:
        A dictionary mapping column names to values.

    Examples:
        >>> conn.row_factory = dict_row_factory
        >>> cursor = conn.execute("SELECT 0 as id, 'hello' as name")
        >>> cursor.fetchone()
        {'id': 0, 'name': 'hello'}
    """
    fields = [column[0] for column in cursor.description]
    return dict(zip(fields, row))


def nest_row(row: Dict[str, Any], separator: str = ".") -> Dict[str, Any]:
    """
    Expand dotted keys of a row into nested dictionaries.

    When a plain key and a dotted prefix collide, the later column wins.
    """
    nested: Dict[str, Any] = {}
    for key, value in row.items():
        if separator not in key:
            nested[key] = value
            continue
        *parents, leaf = key.split(separator)
        target = nested
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child
        target[leaf] = value
    return nested


def shape_rows(rows: List[Dict[str, Any]], nest: bool) -> List[Dict[str, Any]]:
    rows = [dict(row) for row in rows]
    if nest:
        return [nest_row(row) for row in rows]
    return rows
