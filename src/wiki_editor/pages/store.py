"""In-memory store owning the wiki page collection."""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, Optional

from wiki_editor.errors import DuplicatePageError

from .models import ROOT_PAGE_ID, Page, PageUpdate, ParentUpdate


logger = logging.getLogger(__name__)

DEFAULT_ROOT_TITLE = "Welcome"
DEFAULT_ROOT_CONTENT = "Welcome to your Wiki!"

Listener = Callable[[tuple[Page, ...]], None]


def _new_page_id() -> str:
    return str(uuid.uuid4())


class PageStore:
    """Own the flat page collection and notify subscribers of every change.

    The tree is a convention over ``parent_id``: the store keeps no
    parent-to-children index and performs no referential or cycle checks.
    Operations that target an unknown id are silent no-ops.
    """

    def __init__(
        self,
        pages: Optional[Iterable[Page]] = None,
        *,
        root_title: str = DEFAULT_ROOT_TITLE,
        root_content: str = DEFAULT_ROOT_CONTENT,
        id_factory: Callable[[], str] = _new_page_id,
    ) -> None:
        self._id_factory = id_factory
        self._listeners: list[Listener] = []
        if pages is None:
            self._pages: list[Page] = [
                Page(id=ROOT_PAGE_ID, title=root_title, content=root_content, parent_id=None)
            ]
        else:
            self._pages = list(pages)
            seen: set[str] = set()
            for page in self._pages:
                if page.id in seen:
                    raise DuplicatePageError(page.id)
                seen.add(page.id)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def pages(self) -> tuple[Page, ...]:
        """Return all pages in creation order."""

        return tuple(self._pages)

    def get_page(self, page_id: str) -> Optional[Page]:
        for page in self._pages:
            if page.id == page_id:
                return page
        return None

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, page_id: object) -> bool:
        return any(page.id == page_id for page in self._pages)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it again."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.pages
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_page(self, title: str = "", parent_id: Optional[str] = None) -> str:
        """Append a new empty page and return its generated id."""

        page_id = self._id_factory()
        while page_id in self:
            page_id = self._id_factory()
        self._pages.append(Page(id=page_id, title=title, content="", parent_id=parent_id))
        logger.debug("Added page %s under %s", page_id, parent_id)
        self._notify()
        return page_id

    def update_page(self, page_id: str, *updates: PageUpdate) -> None:
        """Apply ``updates`` in order to the page with ``page_id``."""

        for index, page in enumerate(self._pages):
            if page.id != page_id:
                continue
            updated = page
            for update in updates:
                updated = update.apply(updated)
            self._pages[index] = updated
            logger.debug("Updated page %s with %d change(s)", page_id, len(updates))
            self._notify()
            return
        logger.debug("Ignoring update for unknown page %s", page_id)

    def delete_page(self, page_id: str) -> None:
        """Remove the page with ``page_id``; its children keep their parent reference."""

        remaining = [page for page in self._pages if page.id != page_id]
        if len(remaining) == len(self._pages):
            logger.debug("Ignoring delete for unknown page %s", page_id)
            return
        self._pages = remaining
        logger.debug("Deleted page %s", page_id)
        self._notify()

    def move_page(self, page_id: str, new_parent_id: Optional[str]) -> None:
        self.update_page(page_id, ParentUpdate(new_parent_id))
