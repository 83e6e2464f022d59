from __future__ import annotations

import os
from pathlib import Path


class MemoryImageStore:
    def __init__(self, url_prefix: str = "/uploads") -> None:
        self.url_prefix = url_prefix.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    def put(self, key: str, data: bytes, content_type: str) -> str:
        self.objects[key] = (data, content_type)
        return f"{self.url_prefix}/{key}"

    def get(self, key: str) -> bytes:
        return self.objects[key][0]


class FileSystemImageStore:
    def __init__(self, base_path: str, url_prefix: str = "/uploads"):
        self.base_path = Path(base_path).resolve()
        self.url_prefix = url_prefix.rstrip("/")
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, key: str) -> Path:
        # Prevent traversal
        target = (self.base_path / key).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {key}")
        return target

    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Write bytes under key and return the URL saved on the record."""
        target = self._safe_path(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return f"{self.url_prefix}/{target.relative_to(self.base_path).as_posix()}"

    def get(self, key: str) -> bytes:
        """Raises FileNotFoundError."""
        target = self._safe_path(key)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {key}")
        with open(target, "rb") as f:
            return f.read()
