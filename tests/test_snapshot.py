"""Unit tests for the page record layout."""

import json

import pytest

from wiki_editor import snapshot
from wiki_editor.errors import SnapshotError
from wiki_editor.pages.models import Page


PAGES = [
    Page(id="root", title="Welcome", content="<p>Hi</p>", parent_id=None),
    Page(id="child", title="Child", content="", parent_id="root"),
]


def test_records_use_camel_case_parent():
    assert snapshot.dump_records(PAGES) == [
        {"id": "root", "title": "Welcome", "content": "<p>Hi</p>", "parentId": None},
        {"id": "child", "title": "Child", "content": "", "parentId": "root"},
    ]


def test_loads_preserves_order():
    text = snapshot.dumps(list(reversed(PAGES)))
    assert snapshot.loads(text) == list(reversed(PAGES))


def test_missing_optional_fields_take_defaults():
    assert snapshot.load_records([{"id": "x"}]) == [Page(id="x", title="", content="", parent_id=None)]


@pytest.mark.parametrize(
    "data",
    [
        {"id": "not-a-list"},
        [{"title": "no id"}],
        [{"id": ""}],
        [{"id": "x", "unexpected": 1}],
        [{"id": "x", "parentId": 5}],
    ],
)
def test_invalid_records_raise(data):
    with pytest.raises(SnapshotError):
        snapshot.load_records(data)


def test_duplicate_ids_raise():
    with pytest.raises(SnapshotError, match="Duplicate page id 'x'"):
        snapshot.load_records([{"id": "x"}, {"id": "x"}])


def test_invalid_json_raises():
    with pytest.raises(SnapshotError, match="not valid JSON"):
        snapshot.loads("{")


def test_store_from_text():
    store = snapshot.store_from_text(json.dumps(snapshot.dump_records(PAGES)))
    assert store.pages == tuple(PAGES)
