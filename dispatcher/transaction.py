from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Type
from logging import Logger, getLogger as logging_getLogger

from ..exceptions import TransactionStateError

if TYPE_CHECKING:
    from .dispatcher import StatementDispatcher


class Transaction:
    """
    A context manager for handling transactions.

    Entering begins a transaction on the given dispatcher and yields the
    transaction-bound dispatcher. Leaving commits (or, with
    ``autocommit=False``, rolls back); an exception inside the block always
    rolls back. A transaction already ended inside the block is left alone.
    """

    def __init__(
        self,
        dispatcher: Optional[StatementDispatcher],
        autocommit: bool = True,
        logger: Optional[Logger] = None
    ):
        if dispatcher is None:
            raise TransactionStateError("Transaction requires an existing StatementDispatcher instance.")
        self.dispatcher = dispatcher
        self.autocommit = autocommit
        self.logger = logger or logging_getLogger(__name__)
        self._scoped: Optional[StatementDispatcher] = None

    async def __aenter__(self) -> StatementDispatcher:
        """Enter the transaction context."""
        self._scoped = await self.dispatcher.begin_transaction()
        return self._scoped

    async def __aexit__(self, exc_type: Optional[Type[BaseException]],
                        exc_val: Optional[BaseException], exc_tb) -> None:
        """Exit the transaction context."""
        scoped, self._scoped = self._scoped, None
        if scoped is None:
            self.logger.warning("No transaction to end.")
            return
        if getattr(scoped.transaction, "finished", None):
            return

        try:
            if exc_type is not None:
                await scoped.rollback()
                self.logger.error(f"ROLLBACK transaction after {exc_type.__name__}: {exc_val}")
            elif self.autocommit:
                await scoped.commit()
            else:
                await scoped.rollback()
        except Exception as e:
            self.logger.error(f"Failed to commit/rollback transaction: {e}")
            raise
