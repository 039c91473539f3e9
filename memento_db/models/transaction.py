"""Transaction-related data models and enums."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict
from .snapshot import Snapshot


class TransactionState(Enum):
    """Enumeration of transaction manager states."""

    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class Transaction:
    """The single open transaction: its baseline snapshot and savepoints."""

    name: str
    baseline: Snapshot
    started_at: float
    savepoints: Dict[str, Snapshot] = field(default_factory=dict)
