class SqlDispatcherError(Exception):
    """Base exception for the statement dispatcher."""
    pass

class ConnectionError(SqlDispatcherError):
    """Raised when an operation needs a connection and none is bound."""
    pass

class TransactionStateError(SqlDispatcherError):
    """Raised when commit/rollback is requested without an open transaction."""
    pass

class DriverError(SqlDispatcherError):
    """Raised by the driver adapters for failures they detect themselves."""
    pass
