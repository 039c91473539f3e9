import time
from typing import Any, Dict, Optional

from ..store import VersionedStore
from ..transaction_manager import TransactionManager
from .chaos_config import ChaosConfig
from .chaos_proxy import ChaosProxy


def _collection_state(store: VersionedStore, collection_name: str) -> Dict[str, Dict[str, Any]]:
    return {record.id: record.fields for record in store.select_all(collection_name)}


def run_chaos(
    config: ChaosConfig,
    duration: float = 10.0,
    max_batches: Optional[int] = None,
    pause: float = 1.0,
) -> Dict[str, Any]:
    """
    Run random batches through a chaos-wrapped store and check each one
    is all-or-nothing: a failed batch must leave the collection exactly
    as it was before the batch started.
    """
    store = VersionedStore()
    store.create_collection("items")
    manager = TransactionManager(store, max_history=20)
    db = ChaosProxy(store, config)

    batches = committed = rolled_back = violations = 0
    start_time = time.time()

    while time.time() - start_time < duration:
        if max_batches is not None and batches >= max_batches:
            break
        batches += 1

        before = _collection_state(store, "items")
        existing = sorted(before)
        operations = []
        for _ in range(config.random.randint(1, 3)):
            action = config.random.choice(["insert", "update", "delete"])
            if action == "insert" or not existing:
                value = {"value": config.random.randint(1, 100)}
                operations.append(lambda v=value: db.insert("items", v, "chaos"))
            elif action == "update":
                key = config.random.choice(existing)
                value = {"value": config.random.randint(1, 100)}
                operations.append(lambda k=key, v=value: db.update("items", k, v, "chaos"))
            else:
                key = config.random.choice(existing)
                operations.append(lambda k=key: db.delete("items", k, "chaos"))

        result = manager.execute_batch(operations, f"chaos_batch_{batches}")
        if result:
            committed += 1
            print(f"[CHAOS TEST] Committed batch {result.name}")
        else:
            rolled_back += 1
            if _collection_state(store, "items") != before:
                violations += 1
                print(f"[CHAOS TEST] Atomicity violated by {result.name}")
            print(f"[CHAOS TEST] Rolled back batch {result.name}: {result.error}")

        if pause:
            time.sleep(pause)

    return {
        "batches": batches,
        "committed": committed,
        "rolled_back": rolled_back,
        "atomicity_violations": violations,
        "final_record_count": store.record_count("items"),
        "history_size": manager.history_size,
        "chaos": config.get_metrics(),
    }


if __name__ == "__main__":
    chaos = ChaosConfig(enabled=True, failure_rate=0.3, delay_chance=0.4, max_delay=1.5)
    summary = run_chaos(chaos, duration=10)

    print("[CHAOS TEST] Chaos runner completed.")
    print(f"[CHAOS TEST] Batches: {summary['batches']}, "
          f"committed: {summary['committed']}, "
          f"rolled back: {summary['rolled_back']}, "
          f"atomicity violations: {summary['atomicity_violations']}")
    chaos.print_metrics()
