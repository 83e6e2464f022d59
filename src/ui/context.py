from __future__ import annotations

from dataclasses import dataclass

from src.adapters.image_store import MemoryImageStore
from src.adapters.memory_editor import MemoryEditorFactory
from src.adapters.memory_notifier import RecordingNotifier
from src.adapters.memory_records import MemoryRecordStore
from src.adapters.memory_surface import MemoryDialogSurface
from src.adapters.object_urls import MemoryObjectUrls
from src.adapters.timers import ManualTimers
from src.components.debounce import DebounceScheduler
from src.components.element_cache import ElementCache
from src.components.images import (
    CompressionConfig,
    ImageCodecPort,
    ImageIntake,
    ImageLimits,
    PreviewRegistry,
)
from src.components.modals import DialogRegistry, FormCatalog, ModalOrchestrator
from src.components.notifications import NotificationConfig, NotificationService
from src.components.richtext import EditorFactoryPort, EditorLifecycleManager, RichTextConfig
from src.components.validation import FormValidator, RuleRegistry
from src.ports.files import ImageStorePort, ObjectUrlPort
from src.ports.notify import NotifierPort
from src.ports.records import RecordStorePort
from src.ports.surface import DialogSurfacePort
from src.ports.timers import TimerPort
from src.rules.loader import load_rules
from src.rules.models import ModalRules


@dataclass
class ModalContext:
    orchestrator: ModalOrchestrator
    registry: DialogRegistry
    validator: FormValidator
    notifications: NotificationService
    surface: DialogSurfacePort
    records: RecordStorePort
    catalog: FormCatalog
    rules: ModalRules

    @classmethod
    def create(
        cls,
        rules: ModalRules,
        *,
        surface: DialogSurfacePort,
        notifier: NotifierPort,
        timers: TimerPort,
        records: RecordStorePort,
        object_urls: ObjectUrlPort,
        editor_factory: EditorFactoryPort | None,
        catalog: FormCatalog | None = None,
        image_store: ImageStorePort | None = None,
        codec: ImageCodecPort | None = None,
    ) -> ModalContext:
        catalog = catalog or FormCatalog()

        notifications = NotificationService(
            notifier, NotificationConfig.from_rules(rules.notifications)
        )
        cache = ElementCache(surface)
        editors = EditorLifecycleManager(
            editor_factory, surface, notifications, RichTextConfig.from_rules(rules.richtext)
        )
        intake = ImageIntake(
            PreviewRegistry(object_urls),
            surface,
            cache,
            notifications,
            ImageLimits.from_rules(rules.images),
        )
        registry = DialogRegistry(
            cache=cache,
            editors=editors,
            intake=intake,
            debounce=DebounceScheduler(timers),
        )
        validator = FormValidator(
            RuleRegistry.from_rules(rules.validation), surface, cache, editors
        )
        orchestrator = ModalOrchestrator(
            registry,
            surface,
            validator,
            notifications,
            records,
            catalog,
            image_store=image_store,
            codec=codec,
            compression=CompressionConfig.from_rules(rules.compression),
            debounce_ms=rules.validation.debounce_ms,
        )
        return cls(
            orchestrator=orchestrator,
            registry=registry,
            validator=validator,
            notifications=notifications,
            surface=surface,
            records=records,
            catalog=catalog,
            rules=rules,
        )

    @classmethod
    def create_headless(
        cls,
        rules: ModalRules | None = None,
        *,
        confirm_answer: bool = True,
        editors_available: bool = True,
        codec: ImageCodecPort | None = None,
    ) -> ModalContext:
        """Fully in-memory wiring: manual timers, recording notifier, memory stores."""
        if rules is None:
            rules = load_rules()
        catalog = FormCatalog()
        return cls.create(
            rules,
            surface=MemoryDialogSurface.from_catalog(catalog, confirm_answer=confirm_answer),
            notifier=RecordingNotifier(),
            timers=ManualTimers(),
            records=MemoryRecordStore(),
            object_urls=MemoryObjectUrls(),
            editor_factory=MemoryEditorFactory(available=editors_available),
            catalog=catalog,
            image_store=MemoryImageStore(),
            codec=codec,
        )
