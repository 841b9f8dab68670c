from .connection import DatabaseConnection
from .factory import DRIVERS, ConnectionConfig, create_connection

__all__ = ["DatabaseConnection", "DRIVERS", "ConnectionConfig", "create_connection"]
