"""
Images component - preview bookkeeping, file intake and adaptive compression.

Every preview owns one object URL. The registry revokes it exactly once,
either when the preview is removed or when its dialog closes.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Iterable
from functools import partial
from uuid import uuid4

from src.components.element_cache import ElementCache
from src.components.notifications import NotificationService
from src.domain.form import FileBlob, FormElement
from src.ports.files import ObjectUrlPort
from src.ports.surface import DialogSurfacePort

from ._impl import (
    DEFAULT_COMPRESSION,
    DEFAULT_LIMITS,
    CompressionConfig,
    rename_for_type,
    select_compression_tier,
    validate_image,
)
from .models import CompressionResult, ImageLimits, ImagePreviewEntry
from .ports import ImageCodecPort

logger = logging.getLogger(__name__)

CODEC_MISSING = "Image compression library not available. Using original file."


class PreviewRegistry:
    def __init__(self, object_urls: ObjectUrlPort) -> None:
        self._urls = object_urls
        self._entries: dict[str, ImagePreviewEntry] = {}
        self._seq = itertools.count(1)

    def add(self, dialog_id: str, owner_field: str, file: FileBlob) -> ImagePreviewEntry:
        url = self._urls.create(file)
        if any(e.object_url == url for e in self._entries.values()):
            raise ValueError(f"Object URL already in use: {url}")
        preview_id = f"preview-{next(self._seq)}-{uuid4().hex[:9]}"
        entry = ImagePreviewEntry(
            preview_id=preview_id,
            source_file=file,
            object_url=url,
            owner_field=owner_field,
            dialog_id=dialog_id,
        )
        self._entries[preview_id] = entry
        logger.debug("Preview %s created for %s", preview_id, file.name)
        return entry

    def get(self, preview_id: str) -> ImagePreviewEntry | None:
        return self._entries.get(preview_id)

    def remove(self, preview_id: str) -> ImagePreviewEntry | None:
        entry = self._entries.pop(preview_id, None)
        if entry is not None:
            self._urls.revoke(entry.object_url)
        return entry

    def for_field(self, dialog_id: str, field_name: str) -> list[ImagePreviewEntry]:
        return [
            e
            for e in self._entries.values()
            if e.dialog_id == dialog_id and e.owner_field == field_name
        ]

    def for_dialog(self, dialog_id: str) -> list[ImagePreviewEntry]:
        return [e for e in self._entries.values() if e.dialog_id == dialog_id]

    def revoke_dialog(self, dialog_id: str) -> int:
        entries = self.for_dialog(dialog_id)
        for entry in entries:
            self.remove(entry.preview_id)
        return len(entries)

    def __len__(self) -> int:
        return len(self._entries)


class ImageIntake:
    """Validates selected files and keeps previews and inputs in step."""

    def __init__(
        self,
        previews: PreviewRegistry,
        surface: DialogSurfacePort,
        cache: ElementCache,
        notifications: NotificationService,
        limits: ImageLimits = DEFAULT_LIMITS,
    ) -> None:
        self.previews = previews
        self._surface = surface
        self._cache = cache
        self._notifications = notifications
        self.limits = limits

    def intake_files(
        self, dialog_id: str, field_name: str, files: Iterable[FileBlob | None]
    ) -> list[ImagePreviewEntry]:
        """Accept valid files into the field and preview them.

        Invalid files are reported one by one and never reach the input.
        A single-file input keeps only the last valid file and replaces its
        previous selection.
        """
        element = self._cache.field(dialog_id, field_name)
        if element is None:
            logger.warning("Image field %s not found in %s", field_name, dialog_id)
            return []

        valid: list[FileBlob] = []
        for file in files:
            rejection = validate_image(file, self.limits)
            if rejection is not None:
                logger.warning("Image rejected (%s): %s", rejection.code, rejection.message)
                self._notifications.error(rejection.message)
                continue
            assert file is not None
            valid.append(file)

        if not element.multiple and valid:
            if len(valid) > 1:
                logger.debug("%s takes one file, keeping %s", field_name, valid[-1].name)
            valid = valid[-1:]
            self._drop_field_previews(dialog_id, element)

        accepted = [self._preview(dialog_id, element, file) for file in valid]

        if not accepted and not element.files:
            self._surface.clear_file_input(element)
        self._surface.refresh(dialog_id)
        return accepted

    def _preview(self, dialog_id: str, element: FormElement, file: FileBlob) -> ImagePreviewEntry:
        entry = self.previews.add(dialog_id, element.name, file)
        element.files.append(file)
        self._surface.show_preview(
            dialog_id, element.name, entry.preview_id, entry.object_url, file.name
        )
        return entry

    def _drop_field_previews(self, dialog_id: str, element: FormElement) -> None:
        for entry in self.previews.for_field(dialog_id, element.name):
            self.previews.remove(entry.preview_id)
            self._surface.remove_preview(dialog_id, entry.preview_id)
        element.files.clear()

    def remove_preview(self, dialog_id: str, preview_id: str) -> ImagePreviewEntry | None:
        entry = self.previews.get(preview_id)
        if entry is None or entry.dialog_id != dialog_id:
            return None
        self.previews.remove(preview_id)
        self._surface.remove_preview(dialog_id, preview_id)

        element = self._cache.field(dialog_id, entry.owner_field)
        if element is not None:
            element.files = [f for f in element.files if f is not entry.source_file]
            if not self.previews.for_field(dialog_id, entry.owner_field):
                element.files = []
                self._surface.clear_file_input(element)
        self._surface.refresh(dialog_id)
        return entry

    def release_dialog(self, dialog_id: str) -> int:
        count = self.previews.revoke_dialog(dialog_id)
        self._surface.clear_previews(dialog_id)
        if count:
            logger.debug("Revoked %d preview URLs for %s", count, dialog_id)
        return count


async def compress_image(
    file: FileBlob,
    codec: ImageCodecPort | None,
    notifications: NotificationService,
    config: CompressionConfig = DEFAULT_COMPRESSION,
) -> CompressionResult:
    """
    Shrink an image toward the configured ceiling.

    Never raises: whenever the codec is missing, fails or does not help, the
    original file comes back uncompressed.
    """
    size = file.byte_size
    tier = select_compression_tier(
        size, config.target_max_bytes, config.tiers, config.skip_ratio, config.fallback
    )
    original = CompressionResult(
        file=file, compressed=False, tier=tier, original_size=size, final_size=size
    )

    if tier.skip:
        logger.debug("Image %s already optimized (%.2fKB)", file.name, size / 1024)
        return original

    if codec is None:
        logger.warning("No image codec configured, keeping %s", file.name)
        notifications.warning(CODEC_MISSING)
        return original

    loop = asyncio.get_running_loop()
    try:
        encoded = await loop.run_in_executor(
            None,
            partial(
                codec.compress,
                file.data,
                file.mime_type,
                tier.quality,
                tier.max_dimension,
                tier.max_dimension,
            ),
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Compression of %s failed: %s", file.name, exc, exc_info=True)
        notifications.warning(
            f"Image compression failed: {exc or 'Unknown compression error'}. Using original file."
        )
        return original

    final_size = len(encoded.data)
    if final_size >= size:
        logger.info("Compression did not shrink %s, keeping original", file.name)
        return original

    result = CompressionResult(
        file=FileBlob(
            name=rename_for_type(file.name, encoded.mime_type),
            mime_type=encoded.mime_type,
            data=encoded.data,
        ),
        compressed=True,
        tier=tier,
        original_size=size,
        final_size=final_size,
    )
    logger.info(
        "Image compressed: %.2fMB -> %.2fMB (%.1f%% reduction, tier %s)",
        size / (1024 * 1024),
        final_size / (1024 * 1024),
        result.reduction * 100,
        tier.name,
    )
    if result.reduction >= config.success_reduction:
        notifications.success(
            f"Image compressed successfully ({result.reduction * 100:.1f}% smaller)"
        )
    return result
