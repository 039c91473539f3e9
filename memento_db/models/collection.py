"""Collection (table) data model."""

import copy
from typing import Dict, Any, List, Optional
from .record import Record


class Collection:
    """Named mapping of record id to Record with a per-collection id counter."""

    def __init__(self, name: str):
        self.name = name
        self.records: Dict[str, Record] = {}
        self.record_counter = 1

    def _generate_record_id(self) -> str:
        """Generate the next record id scoped to this collection."""
        record_id = f"{self.name}_{self.record_counter}"
        self.record_counter += 1
        return record_id

    def insert(self, fields: Dict[str, Any], user: str) -> str:
        record = Record(id=self._generate_record_id(), modified_by=user)
        for field_name, value in fields.items():
            record.set_field(field_name, copy.deepcopy(value), user)
        self.records[record.id] = record
        return record.id

    def update(self, record_id: str, fields: Dict[str, Any], user: str) -> bool:
        """Merge fields into an existing record. Returns False if it is absent."""
        record = self.records.get(record_id)
        if record is None:
            return False
        for field_name, value in fields.items():
            record.set_field(field_name, copy.deepcopy(value), user)
        return True

    def delete(self, record_id: str) -> bool:
        return self.records.pop(record_id, None) is not None

    def select(self, record_id: str) -> Optional[Record]:
        record = self.records.get(record_id)
        return record.clone() if record is not None else None

    def select_all(self) -> List[Record]:
        return [record.clone() for record in self.records.values()]

    def select_where(self, field_name: str, value: Any) -> List[Record]:
        return [
            record.clone()
            for record in self.records.values()
            if field_name in record.fields and record.fields[field_name] == value
        ]

    def record_count(self) -> int:
        return len(self.records)

    def clone(self) -> "Collection":
        """Return an independent copy, records and counter included."""
        copied = Collection(self.name)
        copied.records = {
            record_id: record.clone() for record_id, record in self.records.items()
        }
        copied.record_counter = self.record_counter
        return copied

    def __str__(self) -> str:
        return f"Collection[{self.name}: {len(self.records)} records]"
