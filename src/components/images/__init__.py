"""
Images component - validation, previews and adaptive compression of image uploads.
"""

from ._impl import (
    DEFAULT_COMPRESSION,
    DEFAULT_LIMITS,
    DEFAULT_TIERS,
    LIGHT_TIER,
    SKIP_TIER,
    CompressionConfig,
    compute_sha256,
    generate_storage_key,
    mime_to_extension,
    rename_for_type,
    select_compression_tier,
    validate_image,
)
from .component import CODEC_MISSING, ImageIntake, PreviewRegistry, compress_image
from .models import (
    CompressionError,
    CompressionResult,
    CompressionTier,
    EncodedImage,
    ImageLimits,
    ImagePreviewEntry,
    ImageRejection,
)
from .ports import ImageCodecPort

__all__ = [
    # Validation
    "DEFAULT_LIMITS",
    "ImageLimits",
    "ImageRejection",
    "validate_image",
    # Previews
    "ImageIntake",
    "ImagePreviewEntry",
    "PreviewRegistry",
    # Compression
    "CODEC_MISSING",
    "DEFAULT_COMPRESSION",
    "DEFAULT_TIERS",
    "LIGHT_TIER",
    "SKIP_TIER",
    "CompressionConfig",
    "CompressionError",
    "CompressionResult",
    "CompressionTier",
    "EncodedImage",
    "ImageCodecPort",
    "compress_image",
    "select_compression_tier",
    # Storage
    "compute_sha256",
    "generate_storage_key",
    "mime_to_extension",
    "rename_for_type",
]
