"""Exceptions raised or reported by the store and transaction manager."""

from typing import Optional


class MementoDBError(Exception):
    """Base class for all store and transaction errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class CollectionNotFoundError(MementoDBError):
    """A referenced collection does not exist."""

    def __init__(self, collection_name: str):
        super().__init__(f"Collection not found: {collection_name}")
        self.collection_name = collection_name


class RecordNotFoundError(MementoDBError):
    """A referenced record id does not exist in an existing collection."""

    def __init__(self, collection_name: str, record_id: str):
        super().__init__(f"Record not found: {record_id} in {collection_name}")
        self.collection_name = collection_name
        self.record_id = record_id


class InvalidTransactionStateError(MementoDBError):
    """An operation was attempted in the wrong transaction state."""


class SavepointNotFoundError(MementoDBError):
    def __init__(self, savepoint_name: str):
        super().__init__(f"Savepoint not found: {savepoint_name}")
        self.savepoint_name = savepoint_name


class HistoryIndexOutOfRangeError(MementoDBError):
    def __init__(self, index: int, history_size: int):
        super().__init__(
            f"Invalid transaction index: {index} (history size {history_size})"
        )
        self.index = index
        self.history_size = history_size


class BatchOperationFailedError(MementoDBError):
    """
    A batch operation failed and the batch was rolled back.

    The triggering error is available as ``__cause__``.
    """

    def __init__(
        self, batch_name: str, operation_index: Optional[int], reason: str
    ):
        if operation_index is None:
            message = f"Batch '{batch_name}' failed: {reason}"
        else:
            message = (
                f"Batch '{batch_name}' failed at operation {operation_index + 1}: "
                f"{reason}"
            )
        super().__init__(message)
        self.batch_name = batch_name
        self.operation_index = operation_index


class BatchCancelledError(MementoDBError):
    """A batch was cancelled through its cancel event before completing."""
