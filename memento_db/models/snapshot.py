"""Snapshot data model for full-state capture and restore."""

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional
from .collection import Collection
from .record import Record


def copy_collections(collections: Mapping[str, Collection]) -> Dict[str, Collection]:
    """Deep-copy a name -> Collection mapping."""
    return {name: collection.clone() for name, collection in collections.items()}


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable capture of the entire store state at a point in time.

    The captured collections are never handed out directly: ``collections``
    and the select accessors always return fresh copies.
    """

    _collections: Mapping[str, Collection] = field(repr=False)
    active_users: FrozenSet[str]
    properties: Mapping[str, str]
    timestamp: float
    transaction_id: int
    auto_commit: bool

    @classmethod
    def capture(
        cls,
        collections: Mapping[str, Collection],
        active_users: Iterable[str],
        properties: Mapping[str, str],
        transaction_id: int,
        auto_commit: bool,
    ) -> "Snapshot":
        return cls(
            _collections=MappingProxyType(copy_collections(collections)),
            active_users=frozenset(active_users),
            properties=MappingProxyType(dict(properties)),
            timestamp=time.time(),
            transaction_id=transaction_id,
            auto_commit=auto_commit,
        )

    @property
    def collections(self) -> Dict[str, Collection]:
        """Independent copy of the captured collections."""
        return copy_collections(self._collections)

    def collection_names(self) -> List[str]:
        return sorted(self._collections)

    def record_count(self, collection_name: str) -> int:
        collection = self._collections.get(collection_name)
        return collection.record_count() if collection else 0

    def select(self, collection_name: str, record_id: str) -> Optional[Record]:
        collection = self._collections.get(collection_name)
        return collection.select(record_id) if collection else None

    def select_all(self, collection_name: str) -> List[Record]:
        collection = self._collections.get(collection_name)
        return collection.select_all() if collection else []

    def __str__(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
        return (
            f"Snapshot[{stamp}, TxnID:{self.transaction_id}, "
            f"Collections:{len(self._collections)}, Users:{len(self.active_users)}]"
        )
