"""Application shell wiring the page store, the editor and the event loop."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import WikiConfig
from .editor.binding import EditorBinding, WarningCallback
from .editor.images import FileInput, ImageLoader
from .editor.surface import EditingSurface
from .events import EventLoop
from .pages.models import ROOT_PAGE_ID, Page, TitleUpdate
from .pages.store import PageStore
from .pages.tree import Forest, build_forest


class WikiWorkspace:
    """Coordinate page selection, title editing and the bound editor.

    Change events from the surface and image-read completions share one
    :class:`EventLoop`, so they are handled in arrival order when
    :meth:`run_pending` drains it.
    """

    def __init__(
        self,
        store: Optional[PageStore] = None,
        *,
        config: Optional[WikiConfig] = None,
        on_warning: Optional[WarningCallback] = None,
    ) -> None:
        self.config = config or WikiConfig()
        self.store = store or PageStore(
            root_title=self.config.root.title,
            root_content=self.config.root.content,
        )
        self.loop = EventLoop()
        self.surface = EditingSurface(dispatch=self.loop.post)
        self.file_input = FileInput()
        self.binding = EditorBinding(
            self.store,
            self.surface,
            image_loader=ImageLoader(
                self.loop,
                max_bytes=self.config.editor.max_image_bytes,
                mime_prefix=self.config.editor.image_mime_prefix,
            ),
            on_warning=on_warning,
        )
        self.selected_page_id: str = ROOT_PAGE_ID
        self.binding.bind(self.selected_page_id)

    @property
    def current_page(self) -> Optional[Page]:
        return self.store.get_page(self.selected_page_id)

    def select_page(self, page_id: str) -> None:
        self.selected_page_id = page_id
        self.binding.bind(page_id)

    def set_title(self, title: str) -> None:
        self.store.update_page(self.selected_page_id, TitleUpdate(title))

    # ------------------------------------------------------------------
    # Tree view actions
    # ------------------------------------------------------------------
    def create_page(self, title: str, parent_id: Optional[str] = None, *, select: bool = True) -> str:
        page_id = self.store.add_page(title, parent_id)
        if select:
            self.select_page(page_id)
        return page_id

    def delete_page(self, page_id: str) -> None:
        self.store.delete_page(page_id)

    def move_page(self, page_id: str, new_parent_id: Optional[str]) -> None:
        self.store.move_page(page_id, new_parent_id)

    def forest(self) -> Forest:
        return build_forest(self.store.pages)

    # ------------------------------------------------------------------
    # Toolbar actions
    # ------------------------------------------------------------------
    def insert_table(self, rows: int, cols: int) -> None:
        self.binding.insert_table(rows, cols)

    def insert_image(self, source: str) -> None:
        self.binding.insert_image(source)

    def upload_image(self, path: Path) -> None:
        self.file_input.select(path)
        self.binding.handle_image_upload(self.file_input)

    def run_pending(self) -> int:
        return self.loop.run_pending()

    def close(self) -> None:
        self.binding.close()
