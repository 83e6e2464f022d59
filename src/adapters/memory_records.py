"""
Flat in-memory record store, one id sequence per content type.
"""

from __future__ import annotations

import copy
import logging
from collections import defaultdict

from src.ports.records import Record, RecordId

logger = logging.getLogger(__name__)


class RecordNotFoundError(KeyError):
    pass


class MemoryRecordStore:
    def __init__(self) -> None:
        self._records: dict[str, dict[RecordId, Record]] = defaultdict(dict)
        self._next_id: dict[str, int] = defaultdict(lambda: 1)

    @staticmethod
    def _key(record_id: RecordId) -> RecordId:
        if isinstance(record_id, str) and record_id.isascii() and record_id.isdigit():
            return int(record_id)
        return record_id

    def seed(self, type_tag: str, record: Record) -> Record:
        """Insert a record as-is, keeping its id when it has one."""
        if "id" not in record:
            return self.create(type_tag, record)
        key = self._key(record["id"])
        self._records[type_tag][key] = copy.deepcopy(record)
        if isinstance(key, int):
            self._next_id[type_tag] = max(self._next_id[type_tag], key + 1)
        return copy.deepcopy(record)

    def create(self, type_tag: str, data: Record) -> Record:
        record_id = self._next_id[type_tag]
        self._next_id[type_tag] += 1
        record = {**copy.deepcopy(data), "id": record_id}
        self._records[type_tag][record_id] = record
        logger.info("Created %s %s", type_tag, record_id)
        return copy.deepcopy(record)

    def update(self, type_tag: str, record_id: RecordId, data: Record) -> Record:
        key = self._key(record_id)
        existing = self._records[type_tag].get(key)
        if existing is None:
            raise RecordNotFoundError(f"{type_tag} {record_id} not found")
        existing.update(copy.deepcopy(data))
        existing["id"] = key
        logger.info("Updated %s %s", type_tag, key)
        return copy.deepcopy(existing)

    def get_by_id(self, type_tag: str, record_id: RecordId) -> Record | None:
        record = self._records[type_tag].get(self._key(record_id))
        return copy.deepcopy(record) if record is not None else None

    def all(self, type_tag: str) -> list[Record]:
        return [copy.deepcopy(r) for r in self._records[type_tag].values()]
