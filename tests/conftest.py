from dataclasses import dataclass

import pytest

from src.adapters.image_store import MemoryImageStore
from src.adapters.memory_editor import MemoryEditor, MemoryEditorFactory
from src.adapters.memory_notifier import RecordingNotifier
from src.adapters.memory_records import MemoryRecordStore
from src.adapters.memory_surface import MemoryDialogSurface
from src.adapters.object_urls import MemoryObjectUrls
from src.adapters.timers import ManualTimers
from src.components.modals import FormCatalog
from src.components.richtext import editor_key
from src.domain.form import FileBlob
from src.rules.loader import load_rules
from src.ui.context import ModalContext


class CountingRecordStore(MemoryRecordStore):
    """MemoryRecordStore that remembers every write it was asked to do."""

    def __init__(self):
        super().__init__()
        self.creates = []
        self.updates = []
        self.fail_with = None

    def create(self, type_tag, data):
        self.creates.append((type_tag, data))
        if self.fail_with is not None:
            raise self.fail_with
        return super().create(type_tag, data)

    def update(self, type_tag, record_id, data):
        self.updates.append((type_tag, record_id, data))
        if self.fail_with is not None:
            raise self.fail_with
        return super().update(type_tag, record_id, data)


@dataclass
class Harness:
    ctx: ModalContext
    surface: MemoryDialogSurface
    timers: ManualTimers
    notifier: RecordingNotifier
    urls: MemoryObjectUrls
    editor_factory: MemoryEditorFactory
    records: CountingRecordStore
    images: MemoryImageStore

    @property
    def orchestrator(self):
        return self.ctx.orchestrator

    @property
    def registry(self):
        return self.ctx.registry

    def element(self, dialog_id, field_name):
        return self.surface.query(dialog_id, f'[name="{field_name}"]')

    def fill(self, dialog_id, **values):
        """Type values into plain fields, as a user would, without blurring."""
        for name, value in values.items():
            element = self.element(dialog_id, name)
            if isinstance(value, list):
                element.selected = value
            elif isinstance(value, bool):
                element.checked = value
            else:
                element.value = value
            self.orchestrator.handle_input(dialog_id, name)

    def editor(self, dialog_id, field_name) -> MemoryEditor:
        entry = self.registry.editors.entry(editor_key(dialog_id, field_name))
        assert entry is not None, f"no editor for {dialog_id}.{field_name}"
        return entry.handle


@pytest.fixture(scope="session")
def rules():
    # Load REAL rules from project root
    return load_rules()


def make_harness(rules, *, confirm_answer=True, editors_available=True, codec=None):
    catalog = FormCatalog()
    surface = MemoryDialogSurface.from_catalog(catalog, confirm_answer=confirm_answer)
    timers = ManualTimers()
    notifier = RecordingNotifier()
    urls = MemoryObjectUrls()
    factory = MemoryEditorFactory(available=editors_available)
    records = CountingRecordStore()
    images = MemoryImageStore()

    ctx = ModalContext.create(
        rules,
        surface=surface,
        notifier=notifier,
        timers=timers,
        records=records,
        object_urls=urls,
        editor_factory=factory,
        catalog=catalog,
        image_store=images,
        codec=codec,
    )
    return Harness(
        ctx=ctx,
        surface=surface,
        timers=timers,
        notifier=notifier,
        urls=urls,
        editor_factory=factory,
        records=records,
        images=images,
    )


@pytest.fixture
def harness(rules):
    return make_harness(rules)


@pytest.fixture
def make(rules):
    """Factory for harnesses with non-default collaborators."""

    def _make(**kwargs):
        return make_harness(rules, **kwargs)

    return _make


@pytest.fixture
def image_blob():
    def _blob(name="photo.jpg", size=2048, mime_type="image/jpeg"):
        return FileBlob(name=name, mime_type=mime_type, data=b"\xff" * size)

    return _blob


@pytest.fixture
def long_text():
    return (
        "A four storey mixed use building with retail on the ground floor and "
        "apartments above, delivered on time."
    )
