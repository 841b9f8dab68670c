from __future__ import annotations
from typing import Any, Dict, Optional, Type, Union, Mapping
from logging import Logger, getLogger as logging_getLogger

from ..config import ConnectionOptions
from ..driver.base import Driver
from ..driver.mysql import MySQLDriver
from ..driver.sqlite import SQLiteDriver

DRIVERS: Dict[str, Type[Any]] = {
    "mysql": MySQLDriver,
    "sqlite": SQLiteDriver,
}

ConnectionConfig = Union[ConnectionOptions, Mapping[str, Any], str]


def create_connection(options: Any, logger: Optional[Logger] = None) -> Optional[Driver]:
    """
    Build a connection handle from configuration.

    Args:
        options: A `ConnectionOptions`, a configuration mapping, or a
            connection URI.
        logger: Logger handed to the driver.

    Returns:
        Optional[Driver]: The driver-backed handle, or None when the input is
        neither a mapping nor a string or names an unknown dialect. Nothing
        is connected yet; configuration problems surface on first use.
    """
    logger = logger or logging_getLogger(__name__)
    if isinstance(options, ConnectionOptions):
        config = options
    elif isinstance(options, Mapping):
        config = ConnectionOptions.from_mapping(options)
    elif isinstance(options, str):
        config = ConnectionOptions.from_uri(options)
    else:
        logger.warning(f"Cannot build a connection from {type(options).__name__}")
        return None

    driver_cls = DRIVERS.get(config.dialect)
    if driver_cls is None:
        logger.warning(f"Unsupported dialect: {config.dialect}")
        return None
    return driver_cls(config, logger)
