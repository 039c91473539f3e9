"""Result values returned by transaction manager operations."""

from dataclasses import dataclass
from typing import Any, Optional
from ..exceptions import MementoDBError


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a state-machine operation.

    Truthy on success. On failure ``error`` holds the reason and the
    operation made no state change.
    """

    success: bool
    error: Optional[MementoDBError] = None
    value: Any = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, value: Any = None) -> "OperationResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: MementoDBError) -> "OperationResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of ``TransactionManager.execute_batch``."""

    name: str
    success: bool
    operations_total: int
    operations_completed: int
    error: Optional[MementoDBError] = None

    def __bool__(self) -> bool:
        return self.success
