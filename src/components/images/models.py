"""
Images component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from src.domain.form import FileBlob
from src.rules.models import ImageRules

RejectionCode = Literal["no_file", "invalid_type", "too_large", "too_small"]


class CompressionError(Exception):
    """The image codec could not re-encode a file."""


@dataclass(frozen=True)
class ImageRejection:
    """Why a selected file was refused."""

    code: RejectionCode
    message: str
    field: str = "file"


@dataclass(frozen=True)
class ImageLimits:
    allowed_mime_types: frozenset[str] = frozenset(
        ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
    )
    max_bytes: int = 5 * 1024 * 1024
    min_bytes: int = 100

    @classmethod
    def from_rules(cls, rules: ImageRules) -> ImageLimits:
        return cls(
            allowed_mime_types=frozenset(m.lower() for m in rules.allowed_mime_types),
            max_bytes=rules.max_bytes,
            min_bytes=rules.min_bytes,
        )


@dataclass(frozen=True)
class ImagePreviewEntry:
    preview_id: str
    source_file: FileBlob
    object_url: str
    owner_field: str
    dialog_id: str


@dataclass(frozen=True)
class CompressionTier:
    """Encoder settings picked from the input size.

    A tier applies when size > min_ratio * target ceiling.
    """

    name: str
    quality: float
    max_dimension: int
    min_ratio: float = 0.0

    @property
    def skip(self) -> bool:
        return self.name == "skip"


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class CompressionResult:
    file: FileBlob
    compressed: bool
    tier: CompressionTier
    original_size: int
    final_size: int

    @property
    def reduction(self) -> float:
        """Fraction of the original size saved, 0.0 when nothing changed."""
        if not self.original_size:
            return 0.0
        return (self.original_size - self.final_size) / self.original_size
