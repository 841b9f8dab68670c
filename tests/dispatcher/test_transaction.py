# tests/dispatcher/test_transaction.py
import pytest
from unittest.mock import MagicMock, AsyncMock
from ...dispatcher.dispatcher import StatementDispatcher
from ...dispatcher.transaction import Transaction
from ...driver.base import ResultHeader
from ...exceptions import TransactionStateError


class TestTransaction:
    """Tests for the Transaction context manager."""

    def test_init_without_dispatcher_raises(self):
        with pytest.raises(TransactionStateError) as exc_info:
            Transaction(None)
        assert "requires an existing StatementDispatcher instance" in str(exc_info.value)

    def test_init_with_custom_options(self, mock_driver):
        mock_logger = MagicMock()
        root = StatementDispatcher(mock_driver)
        txn = Transaction(root, autocommit=False, logger=mock_logger)
        assert txn.dispatcher is root
        assert txn.autocommit is False
        assert txn.logger is mock_logger

    @pytest.mark.asyncio
    async def test_commits_on_success(self, mock_driver):
        mock_driver.query.return_value = ([[{"1": 1}], ResultHeader(1)], None)
        root = StatementDispatcher(mock_driver)
        async with root.transaction_scope() as scoped:
            assert scoped.in_transaction
            assert await scoped.execute("UPDATE t SET x=1") == ResultHeader(1)
        scoped.transaction.commit.assert_awaited_once()
        scoped.transaction.rollback.assert_not_awaited()
        assert mock_driver.query.await_args.args[1].transaction is scoped.transaction

    @pytest.mark.asyncio
    async def test_rolls_back_on_exception(self, mock_driver):
        root = StatementDispatcher(mock_driver)
        with pytest.raises(ValueError):
            async with root.transaction_scope() as scoped:
                raise ValueError("abort")
        scoped.transaction.rollback.assert_awaited_once()
        scoped.transaction.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_without_autocommit(self, mock_driver):
        root = StatementDispatcher(mock_driver)
        async with root.transaction_scope(autocommit=False) as scoped:
            pass
        scoped.transaction.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_already_finished_transaction_is_left_alone(self, mock_driver):
        root = StatementDispatcher(mock_driver)
        async with root.transaction_scope() as scoped:
            await scoped.commit()
            scoped.transaction.finished = "commit"
        scoped.transaction.commit.assert_awaited_once()
        scoped.transaction.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_is_raised(self, mock_driver):
        root = StatementDispatcher(mock_driver)
        mock_logger = MagicMock()
        with pytest.raises(RuntimeError):
            async with Transaction(root, logger=mock_logger) as scoped:
                scoped.transaction.commit = AsyncMock(side_effect=RuntimeError("lost connection"))
        mock_logger.error.assert_called_once()
