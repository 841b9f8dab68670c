from datetime import datetime
from typing import Any, Iterable, List, Optional


def is_iterable(obj) -> bool:
    """
    Check if the object is iterable (excluding strings, bytes and mappings).

    Args:
        obj: The object to check.

    Returns:
        bool: True if the object is iterable, False otherwise.
    """
    return isinstance(obj, Iterable) and not isinstance(obj, (str, bytes, bytearray, dict))


def as_value_list(values: Any) -> List[Any]:
    """
    Normalize bound values to a list.

    None becomes an empty list, lists and tuples are copied, and any other
    single value is wrapped.
    """
    if values is None:
        return []
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


def params_to_values(params: tuple) -> Any:
    """
    Turn the positional parameters of an execute call into bound values.

    A single list or tuple parameter is the whole value list; otherwise the
    parameters themselves are the values.
    """
    if len(params) == 1 and isinstance(params[0], (list, tuple)):
        return list(params[0])
    return list(params)


def camel_to_snake(name: str) -> str:
    """
    Convert a camelCase option name to snake_case.

    Examples:
        >>> camel_to_snake("logQueryParameters")
        'log_query_parameters'
        >>> camel_to_snake("host")
        'host'
    """
    return "".join("_" + c.lower() if c.isupper() else c for c in name).lstrip("_")


def system_timezone(now: Optional[datetime] = None) -> str:
    """
    The process's local UTC offset as a signed ``HH:MM`` string.

    Args:
        now: Moment to evaluate the offset at; defaults to the current time.
            A naive value is interpreted in local time, an aware one keeps
            its own offset.

    Returns:
        str: e.g. "+05:30" east of UTC, "-08:00" west of it, "+00:00" at UTC.
    """
    moment = now or datetime.now()
    if moment.tzinfo is None:
        moment = moment.astimezone()
    minutes = int(moment.utcoffset().total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"
