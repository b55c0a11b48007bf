"""Tests for Site — loading and the build driver."""

import os
import time
from pathlib import Path

import pytest
from folio.compilation.filters import Layout
from folio.config import FolioConfig
from folio.content.attributes import DefaultsLookup
from folio.content.models import CompileState
from folio.content.page import Page
from folio.data_sources.json_store import JsonDataSource
from folio.data_sources.memory import MemoryDataSource
from folio.errors import FolioError
from folio.routers import NoDirsRouter
from folio.site import Site, create_data_source

FOOTER_LAYOUT = "{{ content }}{{ pages['/footer/'].content }}"


def _config(tmp_path: Path, **sections) -> FolioConfig:
    data = {"output": {"directory": str(tmp_path / "out")}}
    data.update(sections)
    return FolioConfig.model_validate(data)


def _site(tmp_path: Path, pages=(), layouts=(), **sections) -> Site:
    return Site(_config(tmp_path, **sections), data_source=MemoryDataSource(pages, layouts))


class TestConstruction:
    def test_defaults_from_config(self, tmp_path: Path):
        site = _site(
            tmp_path,
            defaults={
                "lookup": "path",
                "attributes": {"layout": "default"},
                "by_path": {"/blog/": {"layout": "post"}},
            },
        )
        assert site.page_defaults.lookup_strategy is DefaultsLookup.PATH
        assert site.page_defaults.lookup("/blog/x/", "layout") == "post"
        assert site.page_defaults.lookup("/x/", "layout") == "default"

    def test_router_from_config(self, tmp_path: Path):
        site = _site(tmp_path, site={"router": "no_dirs"})
        assert isinstance(site.router, NoDirsRouter)

    def test_default_extension_from_config(self, tmp_path: Path):
        site = _site(tmp_path, output={"directory": "o", "default_extension": "xhtml"})
        page = site.add_page(Page("x", {}, "/a/"))
        assert page.disk_path == "o/a/index.xhtml"

    def test_json_data_source_by_default(self, tmp_path: Path):
        config = _config(tmp_path)
        source = create_data_source(config, tmp_path)
        assert isinstance(source, JsonDataSource)
        assert source.path == tmp_path / ".folio-content.json"

    def test_unknown_data_source(self, tmp_path: Path):
        config = _config(tmp_path, site={"data_source": "sql"})
        with pytest.raises(ValueError, match="Unknown data source"):
            create_data_source(config)


class TestLoad:
    def test_load_attaches_pages_and_layouts(self, tmp_path: Path):
        page = Page("x", {}, "/a/")
        site = _site(tmp_path, [page], [Layout(name="default", content="{{ content }}")])
        site.load()
        assert site.pages == [page]
        assert page.site is site
        assert "default" in site.layouts
        assert site.data_source.open_count == 1
        assert site.data_source.close_count == 1

    def test_load_once(self, tmp_path: Path):
        site = _site(tmp_path, [Page("x", {}, "/a/")])
        site.load()
        site.load()
        assert site.data_source.open_count == 1

    def test_page_at(self, tmp_path: Path):
        site = _site(tmp_path, [Page("x", {}, "/a/")])
        site.load()
        assert site.page_at("a").path == "/a/"
        assert site.page_at("/b/") is None

    def test_duplicate_page(self, tmp_path: Path):
        site = _site(tmp_path)
        site.add_page(Page("x", {}, "/a/"))
        with pytest.raises(FolioError, match="Duplicate"):
            site.add_page(Page("y", {}, "a"))


class TestCompile:
    def test_classifies_pages(self, tmp_path: Path):
        pages = [Page("a", {}, "/a/"), Page("b", {}, "/b/")]
        site = _site(tmp_path, pages)

        first = site.compile()
        assert sorted(first.created) == ["/a/", "/b/"]
        assert first.ok

        pages[0].content_raw = "changed"
        second = site.compile(force=True)
        assert second.modified == ["/a/"]
        assert second.unchanged == ["/b/"]
        assert second.created == []

    def test_single_open_close_per_build(self, tmp_path: Path):
        site = _site(tmp_path, [Page("a", {}, "/a/"), Page("b", {}, "/b/")])
        site.load()
        site.compile()
        assert site.data_source.open_count == 2
        assert site.data_source.close_count == 2

    def test_failure_does_not_stop_siblings(self, tmp_path: Path):
        pages = [
            Page("bad", {"filters": ["strip"]}, "/bad/"),
            Page("good", {}, "/good/"),
        ]
        site = _site(tmp_path, pages)
        report = site.compile()
        assert not report.ok
        assert report.failed[0].path == "/bad/"
        assert report.failed[0].error_type == "NoLongerSupportedError"
        assert report.created == ["/good/"]
        assert site.engine.stack == []

    def test_skips_up_to_date_pages(self, tmp_path: Path):
        page = Page("a", {}, "/a/")
        site = _site(tmp_path, [page])
        site.data_source.save_page(page)
        # Output must be strictly newer than the page
        past = time.time() - 60
        page.mtime = page.mtime.fromtimestamp(past, tz=page.mtime.tzinfo)

        assert site.compile().created == ["/a/"]
        assert site.compile().skipped == ["/a/"]
        assert site.compile(force=True).unchanged == ["/a/"]

    def test_newer_layout_makes_page_outdated(self, tmp_path: Path):
        page = Page("a", {"layout": "default"}, "/a/")
        layout = Layout(name="default", content="[{{ content }}]")
        site = _site(tmp_path, [page], [layout])
        site.data_source.save_page(page)
        page.mtime = page.mtime.fromtimestamp(time.time() - 60, tz=page.mtime.tzinfo)
        site.compile()

        layout.mtime = page.mtime.fromtimestamp(time.time() + 60, tz=page.mtime.tzinfo)
        assert page.outdated is True

    def test_included_page_compiled_once_per_build(self, tmp_path: Path):
        compiled: list[str] = []

        def record(content, proxy):
            compiled.append(proxy.path)
            return content

        page = Page("main", {"layout": "inc"}, "/a/")
        footer = Page("foot", {"filters_pre": ["record"]}, "/footer/")
        site = _site(tmp_path, [page, footer], [Layout(name="inc", content=FOOTER_LAYOUT)])
        site.engine.filters.register("record", record)

        report = site.compile()
        assert page.content == "mainfoot"
        assert compiled == ["/footer/"]
        assert sorted(report.created) == ["/a/", "/footer/"]

    def test_writes_with_no_dirs_router(self, tmp_path: Path):
        site = _site(tmp_path, [Page("hi", {}, "/about/")], site={"router": "no_dirs"})
        site.compile()
        assert (tmp_path / "out" / "about.html").read_text(encoding="utf-8") == "hi"

    def test_skip_output_page(self, tmp_path: Path):
        site = _site(tmp_path, [Page("hi", {"skip_output": True}, "/about/")])
        report = site.compile()
        assert report.created == ["/about/"]
        assert not os.path.exists(tmp_path / "out" / "about" / "index.html")

    def test_subset_build_recompiles_included_page(self, tmp_path: Path):
        page = Page("main", {"layout": "inc"}, "/a/")
        footer = Page("foot", {}, "/footer/")
        site = _site(tmp_path, [page, footer], [Layout(name="inc", content=FOOTER_LAYOUT)])
        site.compile()

        footer.content_raw = "new foot"
        site.compile([page], force=True)
        assert page.content == "mainnew foot"


class TestBuildFailures:
    def test_path_error_does_not_stop_siblings(self, tmp_path: Path):
        pages = [Page("bad", {"custom_path": ""}, "/bad/"), Page("ok", {}, "/ok/")]
        site = _site(tmp_path, pages)

        report = site.compile()
        assert [failure.path for failure in report.failed] == ["/bad/"]
        assert report.failed[0].error_type == "PathResolutionError"
        assert report.created == ["/ok/"]

    def test_write_error_does_not_stop_siblings(self, tmp_path: Path):
        pages = [
            Page("a", {}, "/a/"),
            Page("b", {"custom_path": "/a/index.html/x"}, "/b/"),
            Page("c", {}, "/c/"),
        ]
        site = _site(tmp_path, pages)

        report = site.compile(force=True)
        assert [failure.path for failure in report.failed] == ["/b/"]
        assert report.failed[0].error_type == "OutputWriteError"
        assert sorted(report.created) == ["/a/", "/c/"]
        assert pages[1].state is CompileState.FAILED
        assert pages[1].compiled_content == {}
        assert site.engine.stack == []
