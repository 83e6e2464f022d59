"""
Pure image intake rules: file validation, compression tiers, storage keys.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.domain.form import FileBlob
from src.rules.models import CompressionRules

from .models import CompressionTier, ImageLimits, ImageRejection

DEFAULT_LIMITS = ImageLimits()

SKIP_TIER = CompressionTier(name="skip", quality=1.0, max_dimension=0)

DEFAULT_TIERS: tuple[CompressionTier, ...] = (
    CompressionTier(name="very_large", min_ratio=5, quality=0.4, max_dimension=1600),
    CompressionTier(name="large", min_ratio=3, quality=0.5, max_dimension=1800),
    CompressionTier(name="medium", min_ratio=2, quality=0.6, max_dimension=1920),
    CompressionTier(name="oversized", min_ratio=1, quality=0.7, max_dimension=1920),
)

LIGHT_TIER = CompressionTier(name="light", quality=0.8, max_dimension=1920)


# --- Validation ---


def validate_image(
    file: FileBlob | None, limits: ImageLimits = DEFAULT_LIMITS
) -> ImageRejection | None:
    """Check one selected file. Returns None when it is acceptable."""
    if file is None:
        return ImageRejection(code="no_file", message="No file selected")

    mime_type = (file.mime_type or "").lower()
    if mime_type not in limits.allowed_mime_types:
        return ImageRejection(
            code="invalid_type",
            message=(
                f'Invalid file type "{file.mime_type}". '
                "Please upload one of: JPG, PNG, GIF, or WebP"
            ),
        )

    size = file.byte_size
    if size > limits.max_bytes:
        size_mb = size / (1024 * 1024)
        max_mb = limits.max_bytes / (1024 * 1024)
        return ImageRejection(
            code="too_large",
            message=(
                f"File size ({size_mb:.2f}MB) exceeds the maximum limit of {max_mb:g}MB. "
                "Please compress or choose a smaller image."
            ),
        )

    if size < limits.min_bytes:
        return ImageRejection(
            code="too_small",
            message="File is too small or may be corrupted. Please select a valid image.",
        )

    return None


# --- Compression tiers ---


@dataclass(frozen=True)
class CompressionConfig:
    target_max_bytes: int = 1024 * 1024
    skip_ratio: float = 0.8
    success_reduction: float = 0.1
    tiers: tuple[CompressionTier, ...] = DEFAULT_TIERS
    fallback: CompressionTier = field(default=LIGHT_TIER)

    @classmethod
    def from_rules(cls, rules: CompressionRules) -> CompressionConfig:
        tiers = tuple(
            CompressionTier(
                name=t.name,
                min_ratio=t.min_ratio,
                quality=t.quality,
                max_dimension=t.max_dimension,
            )
            for t in rules.tiers
        )
        return cls(
            target_max_bytes=rules.target_max_bytes,
            skip_ratio=rules.skip_ratio,
            success_reduction=rules.success_reduction,
            tiers=tiers or DEFAULT_TIERS,
            fallback=CompressionTier(
                name="light",
                quality=rules.default_quality,
                max_dimension=rules.default_max_dimension,
            ),
        )


DEFAULT_COMPRESSION = CompressionConfig()


def select_compression_tier(
    size: int,
    max_size: int = DEFAULT_COMPRESSION.target_max_bytes,
    tiers: Sequence[CompressionTier] = DEFAULT_TIERS,
    skip_ratio: float = DEFAULT_COMPRESSION.skip_ratio,
    fallback: CompressionTier = LIGHT_TIER,
) -> CompressionTier:
    """
    Pick encoder settings for a file of the given size.

    Files at or under skip_ratio * max_size are left alone. Otherwise the
    strictest tier whose threshold the size exceeds wins.
    """
    if size <= max_size * skip_ratio:
        return SKIP_TIER
    for tier in sorted(tiers, key=lambda t: t.min_ratio, reverse=True):
        if size > max_size * tier.min_ratio:
            return tier
    return fallback


# --- Storage keys ---

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def mime_to_extension(mime_type: str) -> str:
    return _EXTENSIONS.get(mime_type.lower(), "bin")


def rename_for_type(filename: str, mime_type: str) -> str:
    """Swap the extension when re-encoding changed the file type."""
    stem, dot, ext = filename.rpartition(".")
    wanted = mime_to_extension(mime_type)
    if not dot:
        return f"{filename}.{wanted}"
    if ext.lower() in ("jpg", "jpeg") and wanted == "jpg":
        return filename
    if ext.lower() == wanted:
        return filename
    return f"{stem}.{wanted}"


def compute_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def generate_storage_key(file: FileBlob) -> str:
    """
    Content-addressed key for an accepted image.

    Format: images/{sha256 prefix}/{filename}
    """
    return f"images/{compute_sha256(file.data)[:12]}/{file.name}"
