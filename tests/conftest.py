"""Shared pytest fixtures for wiki editor tests."""

import itertools

import pytest

from wiki_editor.editor.binding import EditorBinding
from wiki_editor.editor.surface import EditingSurface
from wiki_editor.pages.store import PageStore


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"page-{next(counter)}"


@pytest.fixture
def store(id_factory):
    return PageStore(id_factory=id_factory)


@pytest.fixture
def notifications(store):
    """Record every collection the store broadcasts."""
    received = []
    store.subscribe(received.append)
    return received


@pytest.fixture
def surface():
    return EditingSurface()


@pytest.fixture
def binding(store, surface):
    binding = EditorBinding(store, surface)
    binding.bind("root")
    yield binding
    binding.close()
