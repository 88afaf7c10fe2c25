"""Record layout used to exchange the full page collection.

A snapshot is an order-preserving JSON array of
``{"id", "title", "content", "parentId"}`` objects.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import SnapshotError
from .pages.models import Page
from .pages.store import PageStore


class PageRecord(BaseModel):
    """Serialized form of a single page."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str = Field(..., min_length=1)
    title: str = ""
    content: str = ""
    parent_id: Optional[str] = Field(None, alias="parentId")

    @classmethod
    def from_page(cls, page: Page) -> "PageRecord":
        return cls(id=page.id, title=page.title, content=page.content, parent_id=page.parent_id)

    def to_page(self) -> Page:
        return Page(id=self.id, title=self.title, content=self.content, parent_id=self.parent_id)


_RECORDS = TypeAdapter(list[PageRecord])


def dump_records(pages: Iterable[Page]) -> list[dict[str, Any]]:
    return [PageRecord.from_page(page).model_dump(by_alias=True) for page in pages]


def load_records(data: Any) -> list[Page]:
    """Validate raw record data and return pages in their original order."""

    try:
        records = _RECORDS.validate_python(data)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid page records: {exc}") from exc
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise SnapshotError(f"Duplicate page id {record.id!r}")
        seen.add(record.id)
    return [record.to_page() for record in records]


def dumps(pages: Iterable[Page], *, indent: Optional[int] = 2) -> str:
    return json.dumps(dump_records(pages), ensure_ascii=False, indent=indent)


def loads(text: str) -> list[Page]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot is not valid JSON: {exc}") from exc
    return load_records(data)


def store_from_text(text: str) -> PageStore:
    return PageStore(loads(text))
