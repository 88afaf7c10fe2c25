"""Headless model of the rich-text editing surface.

The surface is a view over an HTML fragment plus a selection. It never talks
to the page store: every user-visible change is reported to listeners as a
:class:`ContentChange` that records which page the change was made on.

Positions index the top-level nodes of the fragment. Whitespace-only text
between blocks is not counted, so ``<p>a</p><p>b</p>`` has length 2 and
index 2 is the end of the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from bs4 import BeautifulSoup, NavigableString
from bs4.element import PageElement


logger = logging.getLogger(__name__)

PARSER = "html.parser"


@dataclass(frozen=True, slots=True)
class Selection:
    index: int
    length: int = 0


@dataclass(frozen=True, slots=True)
class ContentChange:
    """A change emitted by the surface, bound to the page it was issued on."""

    page_id: str
    content: str


ChangeListener = Callable[[ContentChange], None]
Dispatcher = Callable[..., None]


def _dispatch_now(callback: Callable[..., Any], *args: Any) -> None:
    callback(*args)


def _significant_nodes(soup: BeautifulSoup) -> list[PageElement]:
    return [
        node
        for node in soup.contents
        if not (isinstance(node, NavigableString) and not node.strip())
    ]


class EditingSurface:
    """Editable HTML fragment with a cursor, reporting changes to listeners.

    ``dispatch`` decides when listeners run. The default runs them
    immediately; passing ``EventLoop.post`` queues them behind other events.
    """

    def __init__(self, *, dispatch: Optional[Dispatcher] = None) -> None:
        self._page_id: Optional[str] = None
        self._contents = ""
        self._selection: Optional[Selection] = None
        self._listeners: list[ChangeListener] = []
        self._dispatch = dispatch or _dispatch_now
        self._pending = 0

    @property
    def page_id(self) -> Optional[str]:
        return self._page_id

    @property
    def contents(self) -> str:
        return self._contents

    @property
    def length(self) -> int:
        return len(_significant_nodes(BeautifulSoup(self._contents, PARSER)))

    @property
    def has_pending_changes(self) -> bool:
        """True while emitted changes are waiting for their listeners to run."""

        return self._pending > 0

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Programmatic loading (no change events)
    # ------------------------------------------------------------------
    def set_contents(self, page_id: Optional[str], html: str) -> None:
        """Show ``html`` for ``page_id`` and drop the selection."""

        self._page_id = page_id
        self._contents = html
        self._selection = None

    def refresh(self, html: str) -> None:
        """Replace the displayed fragment for the current page, keeping the cursor."""

        self._contents = html
        if self._selection is not None:
            self.set_selection(self._selection.index, self._selection.length)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def get_selection(self, focus: bool = False) -> Optional[Selection]:
        """Return the current selection.

        With ``focus`` set, a missing selection is placed at the end of the
        document. Without a bound page there is never a selection.
        """

        if self._page_id is None:
            return None
        if self._selection is None and focus:
            self._selection = Selection(index=self.length)
        return self._selection

    def set_selection(self, index: int, length: int = 0) -> None:
        if self._page_id is None:
            return
        size = self.length
        index = max(0, min(index, size))
        length = max(0, min(length, size - index))
        self._selection = Selection(index=index, length=length)

    # ------------------------------------------------------------------
    # Edits (emit change events)
    # ------------------------------------------------------------------
    def apply_user_edit(self, html: str) -> None:
        """Replace the fragment as if the user had typed the difference."""

        if self._page_id is None:
            logger.debug("Ignoring edit on an unbound surface")
            return
        self._contents = html
        if self._selection is not None:
            self.set_selection(self._selection.index, self._selection.length)
        self._emit()

    def insert_embed(self, index: int, kind: str, value: str) -> None:
        if kind != "image":
            raise ValueError(f"Unsupported embed type {kind!r}")
        soup = BeautifulSoup("", PARSER)
        paragraph = soup.new_tag("p")
        paragraph.append(soup.new_tag("img", src=value))
        self._insert_nodes(index, [paragraph])

    def paste_html(self, index: int, html: str) -> int:
        """Insert the nodes of ``html`` at ``index`` as a single change.

        Returns the number of top-level nodes inserted.
        """

        fragment = BeautifulSoup(html, PARSER)
        nodes = _significant_nodes(fragment)
        self._insert_nodes(index, nodes)
        return len(nodes)

    def _insert_nodes(self, index: int, new_nodes: list[PageElement]) -> None:
        if self._page_id is None or not new_nodes:
            return
        soup = BeautifulSoup(self._contents, PARSER)
        existing = _significant_nodes(soup)
        index = max(0, min(index, len(existing)))
        if index < len(existing):
            anchor = existing[index]
            for node in new_nodes:
                anchor.insert_before(node.extract())
        else:
            for node in new_nodes:
                soup.append(node.extract())
        self._contents = str(soup)
        self._emit()

    def _emit(self) -> None:
        change = ContentChange(page_id=self._page_id, content=self._contents)
        for listener in list(self._listeners):
            self._pending += 1
            self._dispatch(self._deliver, listener, change)

    def _deliver(self, listener: ChangeListener, change: ContentChange) -> None:
        self._pending -= 1
        listener(change)
