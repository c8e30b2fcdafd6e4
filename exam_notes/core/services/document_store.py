"""In-process document collections keyed by generated ids."""

from __future__ import annotations

from typing import Any
from uuid import uuid4


class RecordNotFoundError(LookupError):
    """Raised when a record id does not exist in its collection."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"No {collection} record with id '{record_id}'.")
        self.collection = collection
        self.record_id = record_id


class DocumentStore:
    """Holds records by collection name, preserving insertion order."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Any]] = {}

    @staticmethod
    def new_id() -> str:
        return uuid4().hex

    def insert(self, collection: str, record: Any) -> Any:
        records = self._collections.setdefault(collection, {})
        if record.id in records:
            raise ValueError(f"Duplicate {collection} id '{record.id}'.")
        records[record.id] = record
        return record

    def get(self, collection: str, record_id: str) -> Any:
        try:
            return self._collections[collection][record_id]
        except KeyError:
            raise RecordNotFoundError(collection, record_id) from None

    def exists(self, collection: str, record_id: str) -> bool:
        return record_id in self._collections.get(collection, {})

    def list(self, collection: str) -> list[Any]:
        return list(self._collections.get(collection, {}).values())

    def replace(self, collection: str, record: Any) -> Any:
        self.get(collection, record.id)
        self._collections[collection][record.id] = record
        return record

    def delete(self, collection: str, record_id: str) -> Any:
        self.get(collection, record_id)
        return self._collections[collection].pop(record_id)

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))

    def clear(self) -> None:
        self._collections.clear()
