import logging
import os

import flet as ft

from src.adapters.flet_ui import FletDialogSurface, FletNotifier, NullEditorFactory, on_loop
from src.adapters.image_store import FileSystemImageStore
from src.adapters.memory_records import MemoryRecordStore
from src.adapters.object_urls import MemoryObjectUrls
from src.adapters.pillow_codec import PillowImageCodec
from src.adapters.timers import AsyncioTimers
from src.components.modals import FormCatalog
from src.rules.loader import load_rules
from src.ui.context import ModalContext

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

UPLOADS_PATH = os.environ.get("MODAL_UPLOADS_PATH", "uploads")


def main(page: ft.Page) -> None:
    page.title = "Admin Content"

    rules = load_rules()
    catalog = FormCatalog()
    surface = FletDialogSurface(page, catalog)
    ctx = ModalContext.create(
        rules,
        surface=surface,
        notifier=FletNotifier(page),
        timers=AsyncioTimers(page.loop),
        records=MemoryRecordStore(),
        object_urls=MemoryObjectUrls(),
        editor_factory=NullEditorFactory(),
        catalog=catalog,
        image_store=FileSystemImageStore(UPLOADS_PATH),
        codec=PillowImageCodec(rules.compression.convert_png_over_bytes),
    )
    surface.bind(ctx.orchestrator)
    logger.info("Rules loaded; %d content types", len(catalog))

    @on_loop
    def on_keyboard(e: ft.KeyboardEvent) -> None:
        if e.key == "Escape":
            ctx.orchestrator.close_top()

    page.on_keyboard_event = on_keyboard
    page.add(
        ft.Column(
            [ft.Text("Content", size=24)]
            + [
                ft.ElevatedButton(
                    f"Add {form.label.lower()}",
                    on_click=on_loop(lambda _, tag=form.type_tag: ctx.orchestrator.open_add(tag)),
                )
                for form in catalog
            ]
        )
    )


if __name__ == "__main__":
    ft.app(target=main)
