import asyncio

from src.components.images import CompressionError, EncodedImage, select_compression_tier

PROJECT = "projectModal"
MB = 1024 * 1024


class ShrinkingCodec:
    def __init__(self, fail=False):
        self.fail = fail
        self.qualities = []

    def compress(self, data, mime_type, quality, max_width, max_height):
        self.qualities.append(quality)
        if self.fail:
            raise CompressionError("decoder exploded")
        return EncodedImage(data=data[: len(data) // 4], mime_type="image/jpeg")


def fill_valid_project(harness, long_text):
    harness.fill(
        PROJECT,
        title="Harbour Tower",
        status="completed",
        category=["residential"],
        location="York",
        completionDate="2024-05-01",
        size="120",
    )
    harness.editor(PROJECT, "description").type_text(long_text)


def test_every_preview_url_revoked_once_on_close(harness, image_blob):
    harness.orchestrator.open(PROJECT)
    gallery = harness.orchestrator.select_files(
        PROJECT, "galleryImages", [image_blob("a.jpg"), image_blob("b.jpg")]
    )
    featured = harness.orchestrator.drop_files(PROJECT, "featuredImage", [image_blob("c.jpg")])
    harness.orchestrator.remove_preview(PROJECT, gallery[0].preview_id)

    harness.orchestrator.close(PROJECT)

    urls = [e.object_url for e in gallery + featured]
    assert all(harness.urls.revocations[url] == 1 for url in urls)
    assert harness.urls.live == {}
    assert len(harness.registry.previews) == 0
    assert harness.surface.dialog(PROJECT).previews == {}


def test_reopen_does_not_revoke_again(harness, image_blob):
    harness.orchestrator.open(PROJECT)
    (entry,) = harness.orchestrator.select_files(PROJECT, "featuredImage", [image_blob()])
    harness.orchestrator.close(PROJECT)
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.close(PROJECT)

    assert harness.urls.revocations[entry.object_url] == 1


def test_selecting_files_marks_dirty(harness, image_blob):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.select_files(PROJECT, "featuredImage", [image_blob()])

    assert harness.orchestrator.has_unsaved_changes()


def test_rejected_files_leave_dialog_clean(harness, image_blob):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.select_files(
        PROJECT, "featuredImage", [image_blob("notes.txt", mime_type="text/plain")]
    )

    assert not harness.orchestrator.has_unsaved_changes()
    assert harness.notifier.of_level("error") == [
        'Invalid file type "text/plain". Please upload one of: JPG, PNG, GIF, or WebP'
    ]


def test_files_for_closed_dialog_are_ignored(harness, image_blob):
    assert harness.orchestrator.select_files(PROJECT, "featuredImage", [image_blob()]) == []
    assert len(harness.urls.live) == 0


def test_bigger_upload_gets_stricter_tier():
    assert select_compression_tier(6 * MB).quality < select_compression_tier(2 * MB).quality


def test_save_compresses_and_stores_images(make, image_blob, long_text):
    codec = ShrinkingCodec()
    harness = make(codec=codec)
    harness.orchestrator.open(PROJECT)
    fill_valid_project(harness, long_text)
    harness.orchestrator.select_files(
        PROJECT, "featuredImage", [image_blob("hero.png", size=3 * MB, mime_type="image/png")]
    )
    harness.orchestrator.select_files(
        PROJECT, "galleryImages", [image_blob("a.jpg", size=2048), image_blob("b.jpg", size=4096)]
    )

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.success
    assert codec.qualities == [0.6]
    record = harness.records.get_by_id("project", 1)
    assert record["featuredImage"].startswith("/uploads/images/")
    assert record["featuredImage"].endswith("/hero.jpg")
    assert [url.rsplit("/", 1)[1] for url in record["galleryImages"]] == ["a.jpg", "b.jpg"]
    stored = {key: len(data) for key, (data, _) in harness.images.objects.items()}
    assert sorted(stored.values()) == [2048, 4096, 3 * MB // 4]
    assert "Image compressed successfully (75.0% smaller)" in harness.notifier.of_level("success")


def test_codec_failure_saves_original(make, image_blob, long_text):
    harness = make(codec=ShrinkingCodec(fail=True))
    harness.orchestrator.open(PROJECT)
    fill_valid_project(harness, long_text)
    original = image_blob("hero.jpg", size=2 * MB)
    harness.orchestrator.select_files(PROJECT, "featuredImage", [original])

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.success
    [(data, mime_type)] = list(harness.images.objects.values())
    assert data == original.data
    assert mime_type == "image/jpeg"
    assert harness.notifier.of_level("warning") == [
        "Image compression failed: decoder exploded. Using original file."
    ]


def test_dialog_closed_during_image_processing_is_not_saved(make, image_blob, long_text):
    harness = make(codec=ShrinkingCodec())

    async def scenario():
        harness.orchestrator.open(PROJECT)
        fill_valid_project(harness, long_text)
        harness.orchestrator.select_files(
            PROJECT, "featuredImage", [image_blob(size=2 * MB)]
        )
        task = asyncio.create_task(harness.orchestrator.save(PROJECT))
        await asyncio.sleep(0)
        harness.orchestrator.close(PROJECT, force=True)
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.success is False
    assert outcome.error == "Dialog closed before save completed"
    assert harness.records.creates == []


def test_testimonial_photo_reaches_legacy_photo_key(harness, image_blob):
    dialog = "testimonialModal"
    harness.orchestrator.open(dialog)
    harness.fill(dialog, clientName="Ada Lovelace", company="Analytical Engines")
    harness.editor(dialog, "testimonialText").type_text("They built exactly what we asked for.")
    harness.orchestrator.select_files(dialog, "clientPhoto", [image_blob("ada.jpg")])

    outcome = asyncio.run(harness.orchestrator.save(dialog))

    assert outcome.success
    record = harness.records.get_by_id("testimonial", outcome.record_id)
    assert record["clientPhoto"].startswith("/uploads/images/")
    assert record["clientPhoto"].endswith("/ada.jpg")
    assert record["photo"] == record["clientPhoto"]


def test_several_files_on_single_input_keep_one_live_preview(harness, image_blob):
    dialog = "testimonialModal"
    harness.orchestrator.open(dialog)

    accepted = harness.orchestrator.drop_files(
        dialog, "clientPhoto", [image_blob("a.jpg"), image_blob("b.jpg")]
    )

    assert [e.source_file.name for e in accepted] == ["b.jpg"]
    assert list(harness.urls.live) == [accepted[0].object_url]
    assert list(harness.surface.dialog(dialog).previews) == [accepted[0].preview_id]
