"""Record data model for collection storage."""

import copy
import time
from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass
class Record:
    """A single row of a collection: a field map plus modification metadata."""

    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    last_modified: float = field(default_factory=time.time)
    modified_by: str = "system"

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Record id is immutable")
        super().__setattr__(name, value)

    def set_field(self, field_name: str, value: Any, user: str) -> None:
        self.fields[field_name] = value
        self._touch(user)

    def get_field(self, field_name: str) -> Any:
        return self.fields.get(field_name)

    def remove_field(self, field_name: str, user: str) -> None:
        self.fields.pop(field_name, None)
        self._touch(user)

    def clone(self) -> "Record":
        """Return an independent deep copy of this record."""
        return Record(
            id=self.id,
            fields=copy.deepcopy(self.fields),
            last_modified=self.last_modified,
            modified_by=self.modified_by,
        )

    def _touch(self, user: str) -> None:
        self.last_modified = time.time()
        self.modified_by = user

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.id == other.id and self.fields == other.fields

    def __str__(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.last_modified))
        return f"Record[{self.id}: {self.fields}, modified by {self.modified_by} at {stamp}]"
