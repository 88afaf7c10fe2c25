"""Unit tests for the editor binding."""

from unittest.mock import Mock

import pytest
from bs4 import BeautifulSoup

from wiki_editor.editor.binding import EditorBinding, table_html
from wiki_editor.editor.images import FileInput, ImageLoader
from wiki_editor.editor.surface import EditingSurface
from wiki_editor.events import EventLoop
from wiki_editor.pages.models import ROOT_PAGE_ID, ContentUpdate, TitleUpdate


def _cells(html):
    soup = BeautifulSoup(html, "html.parser")
    return [[cell for cell in row.find_all("td")] for row in soup.find_all("tr")]


class TestLoad:
    def test_bind_shows_page_content(self, binding, surface):
        assert binding.page_id == ROOT_PAGE_ID
        assert surface.contents == "Welcome to your Wiki!"

    def test_load_missing_page_is_empty(self, binding):
        assert binding.load("missing") == ""

    def test_bind_missing_page_shows_empty_document(self, binding, surface):
        binding.bind("missing")
        assert surface.contents == ""
        assert surface.page_id == "missing"

    def test_external_content_change_refreshes_surface(self, binding, store, surface):
        store.update_page(ROOT_PAGE_ID, ContentUpdate("<p>new</p>"))
        assert surface.contents == "<p>new</p>"

    def test_other_pages_do_not_refresh_surface(self, binding, store, surface):
        child = store.add_page("Child", ROOT_PAGE_ID)
        store.update_page(child, ContentUpdate("<p>child</p>"))
        assert surface.contents == "Welcome to your Wiki!"


class TestWriteThrough:
    def test_user_edit_is_committed(self, binding, store, surface):
        surface.apply_user_edit("<p>edited</p>")
        assert store.get_page(ROOT_PAGE_ID).content == "<p>edited</p>"

    def test_identical_content_is_written_once(self, binding, store, notifications):
        binding.on_content_changed("<p>same</p>")
        binding.on_content_changed("<p>same</p>")
        assert len(notifications) == 1

    def test_unchanged_content_is_not_written(self, binding, notifications):
        binding.on_content_changed("Welcome to your Wiki!")
        assert notifications == []

    def test_only_content_changes(self, binding, store):
        store.update_page(ROOT_PAGE_ID, TitleUpdate("Home"))
        binding.on_content_changed("<p>x</p>")
        root = store.get_page(ROOT_PAGE_ID)
        assert (root.title, root.content, root.parent_id) == ("Home", "<p>x</p>", None)

    def test_change_for_deleted_page_is_dropped(self, binding, store, notifications):
        child = store.add_page("Child", ROOT_PAGE_ID)
        store.delete_page(child)
        notifications.clear()
        binding.on_content_changed("<p>late</p>", page_id=child)
        assert notifications == []

    def test_unbound_binding_ignores_changes(self, store, surface, notifications):
        binding = EditorBinding(store, surface)
        binding.on_content_changed("<p>x</p>")
        assert notifications == []
        binding.close()


class TestStaleWrites:
    def test_trailing_change_lands_on_previous_page(self, store):
        loop = EventLoop()
        surface = EditingSurface(dispatch=loop.post)
        binding = EditorBinding(store, surface)
        other = store.add_page("Other", ROOT_PAGE_ID)
        binding.bind(ROOT_PAGE_ID)

        surface.apply_user_edit("<p>root edit</p>")
        binding.bind(other)
        loop.run_pending()

        assert store.get_page(ROOT_PAGE_ID).content == "<p>root edit</p>"
        assert store.get_page(other).content == ""
        assert surface.page_id == other
        assert surface.contents == ""

    def test_trailing_change_for_deleted_page_is_dropped(self, store):
        loop = EventLoop()
        surface = EditingSurface(dispatch=loop.post)
        binding = EditorBinding(store, surface)
        doomed = store.add_page("Doomed", ROOT_PAGE_ID)
        binding.bind(doomed)

        surface.apply_user_edit("<p>lost</p>")
        binding.bind(ROOT_PAGE_ID)
        store.delete_page(doomed)
        loop.run_pending()

        assert doomed not in store
        assert store.get_page(ROOT_PAGE_ID).content == "Welcome to your Wiki!"

    def test_store_change_waits_for_queued_edits(self, store):
        loop = EventLoop()
        surface = EditingSurface(dispatch=loop.post)
        binding = EditorBinding(store, surface)
        binding.bind(ROOT_PAGE_ID)

        surface.apply_user_edit("<p>typed</p>")
        store.update_page(ROOT_PAGE_ID, TitleUpdate("Home"))
        assert surface.contents == "<p>typed</p>"

        loop.run_pending()
        assert store.get_page(ROOT_PAGE_ID).content == "<p>typed</p>"
        assert surface.contents == "<p>typed</p>"

    def test_skipped_refresh_catches_up_after_queue_drains(self, store):
        loop = EventLoop()
        surface = EditingSurface(dispatch=loop.post)
        binding = EditorBinding(store, surface)
        other = store.add_page("Other", ROOT_PAGE_ID)
        binding.bind(other)

        surface.apply_user_edit("<p>mine</p>")
        binding.bind(ROOT_PAGE_ID)
        store.update_page(ROOT_PAGE_ID, ContentUpdate("<p>external</p>"))
        assert surface.contents == "Welcome to your Wiki!"

        loop.run_pending()
        assert store.get_page(other).content == "<p>mine</p>"
        assert surface.contents == "<p>external</p>"


class TestInsertTable:
    def test_table_html_shape(self):
        rows = _cells(table_html(2, 3))
        assert [len(row) for row in rows] == [3, 3]
        for row in rows:
            for cell in row:
                assert cell.get_text(strip=True) == ""
                assert cell.p.br is not None

    @pytest.mark.parametrize("rows,cols", [(0, 3), (2, 0), (-1, -1)])
    def test_table_html_rejects_non_positive(self, rows, cols):
        with pytest.raises(ValueError):
            table_html(rows, cols)

    def test_insert_into_empty_page(self, binding, store, surface):
        page_id = store.add_page("Empty", ROOT_PAGE_ID)
        binding.bind(page_id)

        binding.insert_table(2, 3)

        content = store.get_page(page_id).content
        soup = BeautifulSoup(content, "html.parser")
        assert len(soup.find_all("table")) == 1
        assert [len(row) for row in _cells(content)] == [3, 3]
        assert len(soup.find_all("td")) == 6
        assert surface.get_selection().index == 1

    def test_insert_at_cursor(self, binding, store, surface):
        store.update_page(ROOT_PAGE_ID, ContentUpdate("<p>a</p><p>b</p>"))
        surface.set_selection(1)

        binding.insert_table(1, 1)

        soup = BeautifulSoup(store.get_page(ROOT_PAGE_ID).content, "html.parser")
        assert [tag.name for tag in soup.find_all(recursive=False)] == ["p", "table", "p"]
        assert surface.get_selection().index == 2

    def test_defaults_to_end_of_document(self, binding, store):
        binding.insert_table(1, 2)
        content = store.get_page(ROOT_PAGE_ID).content
        assert content.startswith("Welcome to your Wiki!<table>")

    def test_invalid_size_warns_without_mutation(self, store, surface, notifications):
        warn = Mock()
        binding = EditorBinding(store, surface, on_warning=warn)
        binding.bind(ROOT_PAGE_ID)
        binding.insert_table(0, 2)
        assert notifications == []
        warn.assert_called_once()

    def test_skipped_without_bound_page(self, store, surface, notifications):
        binding = EditorBinding(store, surface)
        binding.insert_table(2, 2)
        assert notifications == []


class TestInsertImage:
    def test_insert_image_advances_cursor(self, binding, store, surface):
        store.update_page(ROOT_PAGE_ID, ContentUpdate("<p>a</p>"))
        surface.set_selection(0)

        binding.insert_image("data:image/png;base64,AAAA")

        soup = BeautifulSoup(store.get_page(ROOT_PAGE_ID).content, "html.parser")
        assert soup.find("img")["src"] == "data:image/png;base64,AAAA"
        assert soup.find_all("p")[1].get_text() == "a"
        assert surface.get_selection().index == 1

    def test_skipped_without_bound_page(self, store, surface, notifications):
        binding = EditorBinding(store, surface)
        binding.insert_image("https://example.com/a.png")
        assert notifications == []
        assert surface.contents == ""


class TestImageUpload:
    @pytest.fixture
    def loop(self):
        return EventLoop()

    @pytest.fixture
    def upload_binding(self, store, surface, loop):
        warn = Mock()
        binding = EditorBinding(store, surface, image_loader=ImageLoader(loop), on_warning=warn)
        binding.bind(ROOT_PAGE_ID)
        return binding

    def test_image_inserted_after_read_completes(self, upload_binding, store, loop, tmp_path):
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG")
        file_input = FileInput()
        file_input.select(image)

        upload_binding.handle_image_upload(file_input)

        assert file_input.value is None
        assert "<img" not in store.get_page(ROOT_PAGE_ID).content
        loop.run_pending()
        assert 'src="data:image/png;base64,iVBORw=="' in store.get_page(ROOT_PAGE_ID).content

    def test_read_failure_warns_and_clears_input(self, upload_binding, store, loop, tmp_path):
        file_input = FileInput()
        file_input.select(tmp_path / "missing.png")

        upload_binding.handle_image_upload(file_input)
        loop.run_pending()

        assert file_input.value is None
        assert store.get_page(ROOT_PAGE_ID).content == "Welcome to your Wiki!"
        upload_binding.on_warning.assert_called_once()
        assert "missing.png" in upload_binding.on_warning.call_args.args[0]

    def test_upload_lands_on_page_bound_at_start(self, upload_binding, store, surface, loop, tmp_path):
        other = store.add_page("Other", ROOT_PAGE_ID)
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG")
        file_input = FileInput()
        file_input.select(image)

        upload_binding.handle_image_upload(file_input)
        upload_binding.bind(other)
        loop.run_pending()

        assert 'src="data:image/png;base64,iVBORw=="' in store.get_page(ROOT_PAGE_ID).content
        assert store.get_page(ROOT_PAGE_ID).content.startswith("Welcome to your Wiki!")
        assert store.get_page(other).content == ""
        assert surface.page_id == other
        assert surface.contents == ""

    def test_empty_input_is_cleared(self, upload_binding, loop):
        file_input = FileInput()
        upload_binding.handle_image_upload(file_input)
        assert file_input.value is None
        assert len(loop) == 0
