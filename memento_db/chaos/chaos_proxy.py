from typing import Any, Callable, Dict, List, Optional
from .chaos_config import ChaosConfig
from ..models.record import Record
from ..store import VersionedStore


class ChaosProxy:

    """
    Wraps a VersionedStore and injects random failures and delays into
    its record operations. Failures are raised before the wrapped call
    runs, so an injected failure never leaves a half-applied mutation.
    """

    def __init__(self, store: VersionedStore, config: ChaosConfig):
        self.store = store
        self.chaos = config

    def _with_chaos(self, operation: Callable, *args, context: str, **kwargs) -> Any:
        self.chaos.maybe_fail(context)
        self.chaos.maybe_delay(context)
        return operation(*args, **kwargs)

    def insert(self, collection_name: str, fields: Dict[str, Any], user: str) -> str:
        return self._with_chaos(
            self.store.insert, collection_name, fields, user, context="insert"
        )

    def update(
        self, collection_name: str, record_id: str, fields: Dict[str, Any], user: str
    ) -> None:
        return self._with_chaos(
            self.store.update, collection_name, record_id, fields, user, context="update"
        )

    def delete(
        self, collection_name: str, record_id: str, user: Optional[str] = None
    ) -> bool:
        return self._with_chaos(
            self.store.delete, collection_name, record_id, user, context="delete"
        )

    def select(self, collection_name: str, record_id: str) -> Optional[Record]:
        return self._with_chaos(
            self.store.select, collection_name, record_id, context="select"
        )

    def select_all(self, collection_name: str) -> List[Record]:
        return self._with_chaos(self.store.select_all, collection_name, context="select_all")

    def print_status(self):
        return self.store.print_status()

    def print_chaos_metrics(self):
        return self.chaos.print_metrics()
