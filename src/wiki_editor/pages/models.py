"""Dataclasses representing wiki pages and the updates that can be applied to them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union


ROOT_PAGE_ID = "root"


@dataclass(frozen=True, slots=True)
class Page:
    """A single wiki page.

    ``content`` is an HTML fragment that the store never inspects. A page with
    ``parent_id`` set to ``None`` is a root page.
    """

    id: str
    title: str = ""
    content: str = ""
    parent_id: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True, slots=True)
class TitleUpdate:
    title: str

    def apply(self, page: Page) -> Page:
        return replace(page, title=self.title)


@dataclass(frozen=True, slots=True)
class ContentUpdate:
    content: str

    def apply(self, page: Page) -> Page:
        return replace(page, content=self.content)


@dataclass(frozen=True, slots=True)
class ParentUpdate:
    parent_id: Optional[str]

    def apply(self, page: Page) -> Page:
        return replace(page, parent_id=self.parent_id)


PageUpdate = Union[TitleUpdate, ContentUpdate, ParentUpdate]
