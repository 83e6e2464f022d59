from typing import Protocol

from src.domain.form import FileBlob


class ObjectUrlPort(Protocol):
    """Revocable in-memory URLs for previewing selected files."""

    def create(self, file: FileBlob) -> str:
        ...

    def revoke(self, url: str) -> None:
        ...


class ImageStorePort(Protocol):
    """Destination for image bytes accepted at save time."""

    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store data under key and return the reference saved on the record."""
        ...
