from __future__ import annotations

import logging
from collections import Counter
from uuid import uuid4

from src.domain.form import FileBlob

logger = logging.getLogger(__name__)


class MemoryObjectUrls:
    """Object URL registry that counts revocations per URL."""

    def __init__(self) -> None:
        self.live: dict[str, FileBlob] = {}
        self.revocations: Counter[str] = Counter()

    def create(self, file: FileBlob) -> str:
        url = f"blob:memory/{uuid4()}"
        self.live[url] = file
        return url

    def revoke(self, url: str) -> None:
        self.revocations[url] += 1
        if self.live.pop(url, None) is None:
            logger.warning("Revoked unknown or already revoked URL %s", url)
