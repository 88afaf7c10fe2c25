"""Bridge between one editing surface and the content of one page."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup

from wiki_editor.errors import ImageReadError
from wiki_editor.pages.models import ContentUpdate, Page
from wiki_editor.pages.store import PageStore

from .images import FileInput, ImageLoader
from .surface import PARSER, ContentChange, EditingSurface


logger = logging.getLogger(__name__)

WarningCallback = Callable[[str], None]


def table_html(rows: int, cols: int) -> str:
    """Return a ``rows`` x ``cols`` table of empty paragraph cells."""

    if rows < 1 or cols < 1:
        raise ValueError(f"Table dimensions must be positive, got {rows}x{cols}")
    soup = BeautifulSoup("", PARSER)
    table = soup.new_tag("table")
    body = soup.new_tag("tbody")
    table.append(body)
    for _ in range(rows):
        row = soup.new_tag("tr")
        for _ in range(cols):
            cell = soup.new_tag("td")
            paragraph = soup.new_tag("p")
            paragraph.append(soup.new_tag("br"))
            cell.append(paragraph)
            row.append(cell)
        body.append(row)
    return str(table)


class EditorBinding:
    """Keep a surface and a page's ``content`` field in sync.

    Edits flow one way: the surface reports a :class:`ContentChange` and the
    binding writes it through :meth:`PageStore.update_page` only when it differs
    from the page's committed content. Each change is applied to the page it
    was issued on, so a change that arrives after a page switch still lands on
    the previous page.
    """

    def __init__(
        self,
        store: PageStore,
        surface: EditingSurface,
        *,
        image_loader: Optional[ImageLoader] = None,
        on_warning: Optional[WarningCallback] = None,
    ) -> None:
        self.store = store
        self.surface = surface
        self.image_loader = image_loader
        self.on_warning = on_warning
        self._page_id: Optional[str] = None
        self._remove_listener = surface.on_change(self._handle_change)
        self._unsubscribe = store.subscribe(self._handle_store_change)

    @property
    def page_id(self) -> Optional[str]:
        return self._page_id

    def close(self) -> None:
        self._remove_listener()
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def bind(self, page_id: Optional[str]) -> None:
        """Show ``page_id`` in the surface, replacing the previous page."""

        self._page_id = page_id
        content = self.load(page_id) if page_id is not None else ""
        self.surface.set_contents(page_id, content)
        logger.debug("Editor bound to page %s", page_id)

    def load(self, page_id: str) -> str:
        page = self.store.get_page(page_id)
        return page.content if page else ""

    def _handle_store_change(self, pages: tuple[Page, ...]) -> None:
        # Queued changes still have to reach the store; refreshing now would
        # replace them in the surface with older content.
        if not self.surface.has_pending_changes:
            self._sync_surface(pages)

    def _sync_surface(self, pages: tuple[Page, ...]) -> None:
        if self._page_id is None:
            return
        content = next((page.content for page in pages if page.id == self._page_id), "")
        if content != self.surface.contents:
            self.surface.refresh(content)

    # ------------------------------------------------------------------
    # Write-through
    # ------------------------------------------------------------------
    def _handle_change(self, change: ContentChange) -> None:
        self.on_content_changed(change.content, page_id=change.page_id)
        if not self.surface.has_pending_changes:
            self._sync_surface(self.store.pages)

    def on_content_changed(self, new_content: str, page_id: Optional[str] = None) -> None:
        """Commit ``new_content`` to ``page_id`` (default: the bound page) if it changed."""

        target = page_id if page_id is not None else self._page_id
        if target is None:
            return
        page = self.store.get_page(target)
        if page is None:
            logger.debug("Dropping change for missing page %s", target)
            return
        if page.content == new_content:
            return
        self.store.update_page(target, ContentUpdate(new_content))

    # ------------------------------------------------------------------
    # Insertions
    # ------------------------------------------------------------------
    def insert_image(self, source: str) -> None:
        selection = self.surface.get_selection(focus=True)
        if selection is None:
            logger.debug("No selection, skipping image insert")
            return
        self.surface.insert_embed(selection.index, "image", source)
        self.surface.set_selection(selection.index + 1, 0)

    def insert_table(self, rows: int, cols: int) -> None:
        try:
            html = table_html(rows, cols)
        except ValueError as exc:
            self._warn(str(exc))
            return
        selection = self.surface.get_selection(focus=True)
        if selection is None:
            logger.debug("No selection, skipping table insert")
            return
        self.surface.paste_html(selection.index, html)
        self.surface.set_selection(selection.index + 1, 0)

    def handle_image_upload(self, file_input: FileInput) -> None:
        """Read the file chosen in ``file_input`` and insert it once loaded.

        The image lands on the page that was bound when the upload started,
        even if another page is selected by the time the read completes. The
        input is cleared in every case so the same file can be picked again.
        """

        try:
            path = file_input.value
            page_id = self._page_id
            if path is None or self.image_loader is None or page_id is None:
                return
            self.image_loader.read_as_data_uri(
                path,
                on_load=lambda source: self._insert_uploaded(page_id, source),
                on_error=self._image_failed,
            )
        finally:
            file_input.clear()

    def _insert_uploaded(self, page_id: str, source: str) -> None:
        if page_id == self._page_id:
            self.insert_image(source)
            return
        scratch = EditingSurface()
        scratch.set_contents(page_id, self.load(page_id))
        scratch.insert_embed(scratch.length, "image", source)
        self.on_content_changed(scratch.contents, page_id=page_id)

    def _image_failed(self, error: ImageReadError) -> None:
        self._warn(str(error))

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        if self.on_warning is not None:
            self.on_warning(message)
