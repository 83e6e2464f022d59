"""
Images component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import EncodedImage


class ImageCodecPort(Protocol):
    def compress(
        self,
        data: bytes,
        mime_type: str,
        quality: float,
        max_width: int,
        max_height: int,
    ) -> EncodedImage:
        """
        Re-encode an image within the given bounds, keeping its aspect ratio.

        Raises CompressionError (or anything else) on failure.
        """
        ...
