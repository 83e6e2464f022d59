"""
Pillow-backed image codec.

Re-encodes an image inside a bounding box, honouring EXIF orientation and
keeping the aspect ratio. Large PNGs are converted to JPEG, which is where
most of the savings on photos saved as PNG come from.
"""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from src.components.images import CompressionError, EncodedImage

logger = logging.getLogger(__name__)

_FORMATS = {
    "image/jpeg": ("JPEG", "image/jpeg"),
    "image/jpg": ("JPEG", "image/jpeg"),
    "image/png": ("PNG", "image/png"),
    "image/webp": ("WEBP", "image/webp"),
    "image/gif": ("GIF", "image/gif"),
}


class PillowImageCodec:
    def __init__(self, convert_png_over_bytes: int = 5_000_000) -> None:
        self.convert_png_over_bytes = convert_png_over_bytes

    def compress(
        self,
        data: bytes,
        mime_type: str,
        quality: float,
        max_width: int,
        max_height: int,
    ) -> EncodedImage:
        save_format, out_type = _FORMATS.get(mime_type.lower(), ("JPEG", "image/jpeg"))
        if save_format == "PNG" and len(data) > self.convert_png_over_bytes:
            save_format, out_type = "JPEG", "image/jpeg"

        try:
            with Image.open(io.BytesIO(data)) as img:
                working = ImageOps.exif_transpose(img)
                working.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
                if save_format == "JPEG" and working.mode not in ("RGB", "L"):
                    working = working.convert("RGB")

                save_kwargs: dict[str, object] = {"optimize": True}
                if save_format in ("JPEG", "WEBP"):
                    save_kwargs["quality"] = max(1, min(95, round(quality * 100)))
                out = io.BytesIO()
                working.save(out, format=save_format, **save_kwargs)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise CompressionError(f"Cannot re-encode image: {exc}") from exc

        logger.debug(
            "Re-encoded %s as %s (%d -> %d bytes)", mime_type, out_type, len(data), out.tell()
        )
        return EncodedImage(data=out.getvalue(), mime_type=out_type)
