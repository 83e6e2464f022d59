"""
The process-wide stores shared by every dialog, owned in one place.

Every key held by these stores embeds a dialog id, so one dialog's
lifecycle never touches another's entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.components.debounce import DebounceScheduler
from src.components.dialog_state import DialogStateStore
from src.components.element_cache import ElementCache
from src.components.images import ImageIntake, PreviewRegistry
from src.components.richtext import EditorLifecycleManager
from src.components.validation import FieldTriggers


@dataclass
class DialogRegistry:
    cache: ElementCache
    editors: EditorLifecycleManager
    intake: ImageIntake
    debounce: DebounceScheduler
    states: DialogStateStore = field(default_factory=DialogStateStore)
    triggers: FieldTriggers = field(default_factory=FieldTriggers)

    @property
    def previews(self) -> PreviewRegistry:
        return self.intake.previews
