"""In-memory collection store with full-state snapshot and restore."""

import threading
import time
from typing import Dict, Any, List, Optional, Set
from .exceptions import CollectionNotFoundError, RecordNotFoundError
from .models.collection import Collection
from .models.record import Record
from .models.snapshot import Snapshot

DEFAULT_PROPERTIES = {
    "version": "1.0",
    "charset": "UTF-8",
    "timezone": "UTC",
}


class VersionedStore:
    """
    Key-value store of named collections that can capture and restore
    its whole state as Snapshot objects.

    Every mutation runs under ``lock``; the TransactionManager bound to
    this store shares the same lock.
    """

    def __init__(self, default_properties: Optional[Dict[str, str]] = None):
        self.lock = threading.RLock()

        self.collections: Dict[str, Collection] = {}
        self._active_users: Set[str] = set()
        self._properties: Dict[str, str] = dict(
            DEFAULT_PROPERTIES if default_properties is None else default_properties
        )
        self._transaction_counter = 0
        self._auto_commit = True
        self.last_backup = time.time()

        print("Store initialized")

    # Collection management

    def create_collection(self, name: str) -> bool:
        """Register an empty collection. Returns False if the name is taken."""
        with self.lock:
            if name in self.collections:
                print(f"Collection already exists: {name}")
                return False

            self.collections[name] = Collection(name)
            print(f"Collection created: {name}")
            return True

    def drop_collection(self, name: str) -> bool:
        with self.lock:
            if self.collections.pop(name, None) is None:
                print(f"Collection not found: {name}")
                return False

            print(f"Collection dropped: {name}")
            return True

    def collection_exists(self, name: str) -> bool:
        with self.lock:
            return name in self.collections

    def _get_collection(self, name: str) -> Collection:
        collection = self.collections.get(name)
        if collection is None:
            raise CollectionNotFoundError(name)
        return collection

    # Record operations

    def insert(self, collection_name: str, fields: Dict[str, Any], user: str) -> str:
        """Insert a new record and return its generated id."""
        with self.lock:
            collection = self._get_collection(collection_name)
            record_id = collection.insert(fields, user)
            self._active_users.add(user)

            print(f"Record inserted: {record_id} by {user}")
            return record_id

    def update(
        self, collection_name: str, record_id: str, fields: Dict[str, Any], user: str
    ) -> None:
        """Merge ``fields`` into an existing record."""
        with self.lock:
            collection = self._get_collection(collection_name)
            if not collection.update(record_id, fields, user):
                raise RecordNotFoundError(collection_name, record_id)
            self._active_users.add(user)

            print(f"Record updated: {record_id} by {user}")

    def delete(
        self, collection_name: str, record_id: str, user: Optional[str] = None
    ) -> bool:
        """Delete a record. Returns whether it existed."""
        with self.lock:
            collection = self._get_collection(collection_name)
            if not collection.delete(record_id):
                print(f"Record not found: {record_id}")
                return False

            if user is not None:
                self._active_users.add(user)
            print(f"Record deleted: {record_id}" + (f" by {user}" if user else ""))
            return True

    def select(self, collection_name: str, record_id: str) -> Optional[Record]:
        with self.lock:
            collection = self.collections.get(collection_name)
            return collection.select(record_id) if collection else None

    def select_all(self, collection_name: str) -> List[Record]:
        with self.lock:
            collection = self.collections.get(collection_name)
            return collection.select_all() if collection else []

    def select_where(self, collection_name: str, field_name: str, value: Any) -> List[Record]:
        with self.lock:
            collection = self.collections.get(collection_name)
            return collection.select_where(field_name, value) if collection else []

    def record_count(self, collection_name: str) -> int:
        with self.lock:
            collection = self.collections.get(collection_name)
            return collection.record_count() if collection else 0

    # Session and system state

    def set_property(self, key: str, value: str) -> None:
        with self.lock:
            self._properties[key] = value
            print(f"Property set: {key} = {value}")

    def get_property(self, key: str) -> Optional[str]:
        with self.lock:
            return self._properties.get(key)

    def register_user(self, user: str) -> None:
        with self.lock:
            self._active_users.add(user)
            print(f"User registered: {user}")

    def unregister_user(self, user: str) -> None:
        with self.lock:
            self._active_users.discard(user)
            print(f"User unregistered: {user}")

    def set_auto_commit(self, auto_commit: bool) -> None:
        with self.lock:
            self._auto_commit = auto_commit
            print(f"Auto-commit {'enabled' if auto_commit else 'disabled'}")

    @property
    def auto_commit(self) -> bool:
        return self._auto_commit

    @property
    def transaction_counter(self) -> int:
        return self._transaction_counter

    @property
    def active_users(self) -> Set[str]:
        with self.lock:
            return set(self._active_users)

    @property
    def properties(self) -> Dict[str, str]:
        with self.lock:
            return dict(self._properties)

    @property
    def collection_names(self) -> Set[str]:
        with self.lock:
            return set(self.collections)

    # Snapshot and restore

    def snapshot(self) -> Snapshot:
        """Capture the full store state. Advances the transaction counter."""
        with self.lock:
            self._transaction_counter += 1
            return Snapshot.capture(
                collections=self.collections,
                active_users=self._active_users,
                properties=self._properties,
                transaction_id=self._transaction_counter,
                auto_commit=self._auto_commit,
            )

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the entire live state with a copy of ``snapshot``."""
        with self.lock:
            # Snapshot.collections hands out a fresh copy.
            self.collections = snapshot.collections
            self._active_users = set(snapshot.active_users)
            self._properties = dict(snapshot.properties)
            self._transaction_counter = snapshot.transaction_id
            self._auto_commit = snapshot.auto_commit
            self.last_backup = snapshot.timestamp

            stamp = time.strftime("%H:%M:%S", time.localtime(snapshot.timestamp))
            print(
                f"Store restored to snapshot from {stamp} "
                f"(Transaction ID: {snapshot.transaction_id})"
            )

    # Status reporting

    def get_system_status(self) -> Dict[str, Any]:
        """Get current store status."""
        with self.lock:
            return {
                "collections": {
                    name: collection.record_count()
                    for name, collection in self.collections.items()
                },
                "active_users": sorted(self._active_users),
                "properties": dict(self._properties),
                "last_backup": self.last_backup,
                "transaction_counter": self._transaction_counter,
                "auto_commit": self._auto_commit,
            }

    def print_status(self) -> None:
        """Print current store status."""
        status = self.get_system_status()
        print("\n=== STORE STATUS ===")
        print(f"Collections: {len(status['collections'])}")
        for name, count in status["collections"].items():
            print(f"  {name}: {count} records")
        print(f"Active users: {status['active_users']}")
        print(f"Properties: {status['properties']}")
        print(f"Transaction counter: {status['transaction_counter']}")
        print(f"Auto-commit: {status['auto_commit']}")
        print("====================\n")

    def print_collection(self, name: str) -> None:
        """Print every record of a collection."""
        if name not in self.collections:
            print(f"Collection not found: {name}")
            return

        records = self.select_all(name)
        print(f"\n=== Collection: {name} ===")
        if not records:
            print("No records found")
        for record in records:
            print(f"  {record}")
        print(f"Total records: {len(records)}")
        print("====================\n")
