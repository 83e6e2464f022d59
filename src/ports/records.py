from typing import Any, Protocol

RecordId = int | str
Record = dict[str, Any]


class RecordStorePort(Protocol):
    """Flat create/read/update store for admin content records.

    Any exception raised by create/update aborts the save that called it.
    """

    def create(self, type_tag: str, data: Record) -> Record:
        ...

    def update(self, type_tag: str, record_id: RecordId, data: Record) -> Record:
        ...

    def get_by_id(self, type_tag: str, record_id: RecordId) -> Record | None:
        ...

    def all(self, type_tag: str) -> list[Record]:
        """Every record of one type, used to fill reference dropdowns."""
        ...
