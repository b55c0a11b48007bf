"""Tests for JsonDataSource — JSON-backed pages and layouts."""

import json
from pathlib import Path

import pytest
from folio.compilation.filters import Layout
from folio.content.loading import loaded
from folio.content.page import Page
from folio.data_sources.json_store import STORE_FILENAME, JsonDataSource
from folio.errors import DataSourceError


def _store(tmp_path: Path) -> JsonDataSource:
    return JsonDataSource(tmp_path / STORE_FILENAME)


class TestOpenClose:
    def test_requires_open(self, tmp_path: Path):
        store = _store(tmp_path)
        with pytest.raises(DataSourceError, match="not open"):
            store.pages()

    def test_missing_file_is_empty(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store):
            assert store.pages() == []
            assert store.layouts() == []

    def test_corrupt_file_starts_fresh(self, tmp_path: Path, caplog):
        (tmp_path / STORE_FILENAME).write_text("{not json", encoding="utf-8")
        store = _store(tmp_path)
        with loaded(store):
            assert store.pages() == []
        assert "Corrupt content store" in caplog.text

    def test_close_releases_data(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store):
            pass
        with pytest.raises(DataSourceError):
            store.layouts()


class TestSavePage:
    def test_persists_to_disk(self, tmp_path: Path):
        store = _store(tmp_path)
        page = Page("Hello", {"title": "Home"}, "/")
        with loaded(store):
            store.save_page(page)

        data = json.loads((tmp_path / STORE_FILENAME).read_text(encoding="utf-8"))
        assert len(data["pages"]) == 1
        assert data["pages"][0]["path"] == "/"
        assert data["pages"][0]["attributes"] == {"title": "Home"}
        assert page.mtime is not None

    def test_round_trips_into_pages(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store):
            store.save_page(Page("About", {"layout": "default"}, "/about/"))

        reopened = _store(tmp_path)
        with loaded(reopened):
            pages = reopened.pages()
            assert reopened.mtime_for(pages[0]) is not None
        assert [p.path for p in pages] == ["/about/"]
        assert pages[0].content_raw == "About"
        assert pages[0].attribute_named("layout") == "default"
        assert pages[0].mtime is not None

    def test_overwrites_existing(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store):
            store.save_page(Page("v1", {}, "/a/"))
            store.save_page(Page("v2", {}, "/a/"))
            pages = store.pages()
        assert len(pages) == 1
        assert pages[0].content_raw == "v2"


class TestMoveDelete:
    def test_move(self, tmp_path: Path):
        store = _store(tmp_path)
        page = Page("x", {}, "/a/")
        with loaded(store):
            store.save_page(page)
            store.move_page(page, "/b/")
            assert [p.path for p in store.pages()] == ["/b/"]

    def test_move_missing(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store), pytest.raises(DataSourceError, match="No page"):
            store.move_page(Page("x", {}, "/a/"), "/b/")

    def test_move_onto_existing(self, tmp_path: Path):
        store = _store(tmp_path)
        a, b = Page("a", {}, "/a/"), Page("b", {}, "/b/")
        with loaded(store):
            store.save_page(a)
            store.save_page(b)
            with pytest.raises(DataSourceError, match="already exists"):
                store.move_page(a, "/b/")

    def test_delete(self, tmp_path: Path):
        store = _store(tmp_path)
        page = Page("x", {}, "/a/")
        with loaded(store):
            store.save_page(page)
            store.delete_page(page)
            assert store.pages() == []
            with pytest.raises(DataSourceError):
                store.delete_page(page)


class TestLayouts:
    def test_save_layout(self, tmp_path: Path):
        store = _store(tmp_path)
        with loaded(store):
            store.save_layout(Layout(name="default", content="<main>{{ content }}</main>"))
            layouts = store.layouts()
        assert len(layouts) == 1
        assert layouts[0].name == "default"
        assert layouts[0].processor == "template"
        assert layouts[0].mtime is not None


class TestPageDelegation:
    def test_page_save_through_site(self, tmp_path: Path):
        from folio.config import FolioConfig
        from folio.site import Site

        config = FolioConfig.model_validate({"output": {"directory": str(tmp_path / "out")}})
        site = Site(config, data_source=_store(tmp_path))
        page = site.add_page(Page("hello", {}, "/hello/"))

        page.save()
        page.move_to("/greeting/")

        reopened = _store(tmp_path)
        with loaded(reopened):
            assert [p.path for p in reopened.pages()] == ["/greeting/"]
        page.delete()
        with loaded(reopened):
            assert reopened.pages() == []
