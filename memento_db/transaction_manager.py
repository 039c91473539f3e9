"""Transaction management: begin/commit/rollback, savepoints and batches."""

import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence
from .exceptions import (
    BatchCancelledError,
    BatchOperationFailedError,
    HistoryIndexOutOfRangeError,
    InvalidTransactionStateError,
    MementoDBError,
    SavepointNotFoundError,
)
from .models.result import BatchResult, OperationResult
from .models.snapshot import Snapshot
from .models.transaction import Transaction, TransactionState
from .store import VersionedStore

DEFAULT_MAX_HISTORY = 100

Operation = Callable[[], Any]


class TransactionManager:
    """
    Drives a single flat transaction scope over one VersionedStore.

    State-machine violations are returned as failed OperationResult values
    and leave the store untouched. Only ``execute_batch`` with
    ``raise_on_failure=True`` raises, and only after rollback.
    """

    def __init__(self, store: VersionedStore, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError(f"max_history must be at least 1, got {max_history}")

        self.store = store
        self.max_history = max_history
        self.history: List[Snapshot] = []
        self.current: Optional[Transaction] = None
        # Store mutations and manager transitions serialize on one lock.
        self.lock = store.lock

    @property
    def state(self) -> TransactionState:
        return TransactionState.ACTIVE if self.current else TransactionState.IDLE

    def is_in_transaction(self) -> bool:
        return self.current is not None

    @property
    def current_transaction_name(self) -> Optional[str]:
        return self.current.name if self.current else None

    @property
    def history_size(self) -> int:
        return len(self.history)

    def savepoint_names(self) -> List[str]:
        return sorted(self.current.savepoints) if self.current else []

    def get_history(self) -> List[Snapshot]:
        return list(self.history)

    def _fail(self, error: MementoDBError) -> OperationResult:
        print(error.message)
        return OperationResult.fail(error)

    # Transaction control

    def begin(self, name: Optional[str] = None) -> OperationResult:
        """Open a transaction, capturing the baseline snapshot."""
        with self.lock:
            if self.current is not None:
                return self._fail(
                    InvalidTransactionStateError(
                        f"Warning: Already in transaction '{self.current.name}'"
                    )
                )

            if name is None:
                name = f"Transaction_{int(time.time() * 1000)}"

            self.current = Transaction(
                name=name,
                baseline=self.store.snapshot(),
                started_at=time.time(),
            )
            self.store.set_auto_commit(False)

            print(f"Transaction started: {name}")
            return OperationResult.ok(name)

    def commit(self) -> OperationResult:
        """Close the transaction, appending its end state to history."""
        with self.lock:
            if self.current is None:
                return self._fail(
                    InvalidTransactionStateError("No active transaction to commit")
                )

            self.history.append(self.store.snapshot())

            # Maintain maximum history size
            if len(self.history) > self.max_history:
                self.history.pop(0)

            name = self.current.name
            self.current = None
            self.store.set_auto_commit(True)

            print(f"Transaction committed: {name}")
            return OperationResult.ok(name)

    def rollback(self) -> OperationResult:
        """Restore the baseline snapshot and close the transaction."""
        with self.lock:
            if self.current is None:
                return self._fail(
                    InvalidTransactionStateError("No active transaction to rollback")
                )

            self.store.restore(self.current.baseline)

            name = self.current.name
            self.current = None
            self.store.set_auto_commit(True)

            print(f"Transaction rolled back: {name}")
            return OperationResult.ok(name)

    @contextmanager
    def transaction(self, name: Optional[str] = None) -> Iterator["TransactionManager"]:
        """
        Context manager for a transaction.

        Commits on normal exit, rolls back and re-raises on exception.

        Example:
            >>> with manager.transaction("orders"):
            ...     store.insert("orders", {"product": "Laptop"}, "admin")
        """
        result = self.begin(name)
        if not result:
            raise result.error
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()

    # Savepoint management

    def create_savepoint(self, name: str) -> OperationResult:
        """Capture the in-transaction state under ``name``, replacing any prior one."""
        with self.lock:
            if self.current is None:
                return self._fail(
                    InvalidTransactionStateError(
                        "Cannot create savepoint: No active transaction"
                    )
                )

            self.current.savepoints[name] = self.store.snapshot()
            print(f"Savepoint created: {name}")
            return OperationResult.ok(name)

    def rollback_to_savepoint(self, name: str) -> OperationResult:
        """
        Restore a savepoint. The transaction stays open, and savepoints
        created after ``name`` stay registered.
        """
        with self.lock:
            if self.current is None:
                return self._fail(
                    InvalidTransactionStateError(
                        "Cannot rollback to savepoint: No active transaction"
                    )
                )

            savepoint = self.current.savepoints.get(name)
            if savepoint is None:
                return self._fail(SavepointNotFoundError(name))

            self.store.restore(savepoint)
            print(f"Rolled back to savepoint: {name}")
            return OperationResult.ok(name)

    def release_savepoint(self, name: str) -> OperationResult:
        with self.lock:
            if self.current is None or self.current.savepoints.pop(name, None) is None:
                return self._fail(SavepointNotFoundError(name))

            print(f"Savepoint released: {name}")
            return OperationResult.ok(name)

    # Historical rollback (outside transactions)

    def rollback_to_transaction(self, index: int) -> OperationResult:
        """Restore the committed snapshot at ``index`` of the history."""
        with self.lock:
            if index < 0 or index >= len(self.history):
                return self._fail(HistoryIndexOutOfRangeError(index, len(self.history)))

            if self.current is not None:
                return self._fail(
                    InvalidTransactionStateError(
                        "Cannot rollback: Active transaction in progress"
                    )
                )

            self.store.restore(self.history[index])
            # Commit snapshots are captured before auto-commit is re-enabled.
            self.store.set_auto_commit(True)

            print(f"Rolled back to transaction {index}")
            return OperationResult.ok(index)

    def rollback_to_latest_transaction(self) -> OperationResult:
        with self.lock:
            if not self.history:
                return self._fail(HistoryIndexOutOfRangeError(-1, 0))
            return self.rollback_to_transaction(len(self.history) - 1)

    def clear_history(self) -> OperationResult:
        with self.lock:
            if self.current is not None:
                return self._fail(
                    InvalidTransactionStateError(
                        "Cannot clear history: Active transaction in progress"
                    )
                )

            self.history.clear()
            print("Transaction history and savepoints cleared")
            return OperationResult.ok()

    # Batch operations with automatic rollback on failure

    def execute_batch(
        self,
        operations: Sequence[Operation],
        name: str,
        cancel_event: Optional[threading.Event] = None,
        raise_on_failure: bool = False,
    ) -> BatchResult:
        """
        Run ``operations`` in order inside one transaction.

        An operation fails by raising an Exception, by returning a falsy
        OperationResult, or by ending the batch's transaction itself. The
        first failure (or a set ``cancel_event``) restores the store and the
        commit history to their state before the batch and stops the batch.
        Each operation runs at most once.
        """
        with self.lock:
            history_before = list(self.history)
            started = self.begin(name)
            if not started:
                return self._batch_failed(
                    name, len(operations), 0, None, started.error, raise_on_failure
                )
            transaction = self.current

            print(f"Executing batch: {name} ({len(operations)} operations)")

            def abort(index: int, cause: Optional[BaseException]) -> BatchResult:
                self._abort_batch(transaction, history_before)
                return self._batch_failed(
                    name, len(operations), index, index, cause, raise_on_failure
                )

            for index, operation in enumerate(operations):
                if cancel_event is not None and cancel_event.is_set():
                    return abort(index, BatchCancelledError(f"Batch '{name}' cancelled"))

                print(f"Executing operation {index + 1}/{len(operations)}")
                try:
                    outcome = operation()
                except Exception as e:
                    return abort(index, e)

                if self.current is not transaction:
                    return abort(
                        index,
                        InvalidTransactionStateError(
                            f"Operation {index + 1} ended the batch transaction '{name}'"
                        ),
                    )

                if isinstance(outcome, OperationResult) and not outcome:
                    return abort(index, outcome.error)

            committed = self.commit()
            if not committed:
                return abort(len(operations), committed.error)

            print(f"Batch completed successfully: {name}")
            return BatchResult(
                name=name,
                success=True,
                operations_total=len(operations),
                operations_completed=len(operations),
            )

    def _abort_batch(self, transaction: Transaction, history_before: List[Snapshot]) -> None:
        """Undo a failed batch, even if an operation closed its transaction."""
        if self.current is transaction:
            self.rollback()
            return

        self.store.restore(transaction.baseline)
        self.history[:] = history_before
        if self.current is not None:
            print(f"Discarding transaction opened inside batch: {self.current.name}")
            self.current = None
        self.store.set_auto_commit(True)
        print(f"Batch transaction restored to baseline: {transaction.name}")

    def _batch_failed(
        self,
        name: str,
        total: int,
        completed: int,
        index: Optional[int],
        cause: Optional[BaseException],
        raise_on_failure: bool,
    ) -> BatchResult:
        reason = str(cause) if cause is not None else "operation reported failure"
        error = BatchOperationFailedError(name, index, reason)
        error.__cause__ = cause

        print(f"Batch failed: {error.message}")
        if raise_on_failure:
            raise error
        return BatchResult(
            name=name,
            success=False,
            operations_total=total,
            operations_completed=completed,
            error=error,
        )

    # Status reporting

    def get_status(self) -> dict:
        with self.lock:
            return {
                "state": self.state.value,
                "transaction_name": self.current_transaction_name,
                "started_at": self.current.started_at if self.current else None,
                "savepoints": self.savepoint_names(),
                "history_size": len(self.history),
                "max_history": self.max_history,
            }

    def print_status(self) -> None:
        status = self.get_status()
        print("\n=== TRANSACTION STATUS ===")
        print(f"In transaction: {status['state'] == TransactionState.ACTIVE.value}")
        if status["transaction_name"]:
            print(f"Transaction name: {status['transaction_name']}")
            started = time.strftime("%H:%M:%S", time.localtime(status["started_at"]))
            print(f"Started at: {started}")
            print(f"Active savepoints: {status['savepoints']}")
        print(f"Transaction history: {status['history_size']}/{status['max_history']}")
        print("==========================\n")

    def print_history(self) -> None:
        print("\n=== TRANSACTION HISTORY ===")
        if not self.history:
            print("No transaction history")
        for index, snapshot in enumerate(self.history):
            print(f"  {index}: {snapshot}")
        print("===========================\n")

    def print_savepoints(self) -> None:
        print("\n=== ACTIVE SAVEPOINTS ===")
        savepoints = self.current.savepoints if self.current else {}
        if not savepoints:
            print("No savepoints")
        for name, snapshot in savepoints.items():
            print(f"  {name}: {snapshot}")
        print("=========================\n")
