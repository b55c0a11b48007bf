"""The site: aggregation root for pages, layouts and the build driver."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from folio.compilation.engine import CompilationEngine
from folio.compilation.filters import FilterRegistry, Layout, LayoutRegistry, default_filters
from folio.compilation.output import OutputWriter
from folio.config import FolioConfig
from folio.content.attributes import AttributeResolver, PageDefaults
from folio.content.loading import loaded
from folio.content.models import CompileState, normalize_path
from folio.content.page import Page
from folio.data_sources.base import DataSource
from folio.data_sources.json_store import JsonDataSource
from folio.data_sources.memory import MemoryDataSource
from folio.errors import FolioError
from folio.routers import Router, create_router
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SiteLike(Protocol):
    """What pages need from the site they belong to."""

    @property
    def config(self) -> Any: ...

    @property
    def router(self) -> Router: ...

    @property
    def data_source(self) -> Any: ...

    @property
    def page_defaults(self) -> PageDefaults: ...


class BuildFailure(BaseModel):
    """A page whose compilation failed."""

    path: str
    error: str
    error_type: str


class BuildReport(BaseModel):
    """Classification of every page considered by one build."""

    created: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[BuildFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def compiled_count(self) -> int:
        return len(self.created) + len(self.modified) + len(self.unchanged)


def create_data_source(config: FolioConfig, root: Path | str = ".") -> DataSource:
    """Create the data source named by ``config.site.data_source``.

    Raises:
        ValueError: If the name is unknown.
    """
    name = config.site.data_source
    if name == "json":
        return JsonDataSource(Path(root) / config.site.content_file)
    if name == "memory":
        return MemoryDataSource()
    raise ValueError(f"Unknown data source: {name!r}")


class Site:
    """Owns the pages of one site and everything needed to build them."""

    def __init__(
        self,
        config: FolioConfig | None = None,
        *,
        data_source: DataSource | None = None,
        router: Router | None = None,
        filters: FilterRegistry | None = None,
        layouts: LayoutRegistry | None = None,
        page_defaults: PageDefaults | None = None,
    ) -> None:
        self.config = config or FolioConfig()
        self.data_source = data_source or create_data_source(self.config)
        self.router = router or create_router(self.config.site.router)
        self.page_defaults = page_defaults or self._defaults_from_config()
        self.attribute_resolver = AttributeResolver(self.config.output.default_extension)
        self.layouts = layouts if layouts is not None else LayoutRegistry()
        self.engine = CompilationEngine(
            filters=filters if filters is not None else default_filters(),
            layouts=self.layouts,
            writer=OutputWriter() if self.config.build.write_output else None,
        )
        self.pages: list[Page] = []
        self.is_loaded = False

    def _defaults_from_config(self) -> PageDefaults:
        section = self.config.defaults
        return PageDefaults(section.attributes, by_path=section.by_path, lookup=section.lookup)

    # ── Loading ──────────────────────────────────────────────────

    def load(self, *, force: bool = False) -> None:
        """Load pages and layouts from the data source."""
        if self.is_loaded and not force:
            return
        with loaded(self.data_source):
            pages = self.data_source.pages()
            layouts = self.data_source.layouts()
        if force:
            self.pages = []
        for page in pages:
            if self.page_at(page.path) is None:
                self.add_page(page)
        for layout in layouts:
            self.layouts.add(layout)
        self.is_loaded = True
        logger.info("Loaded %d pages and %d layouts", len(self.pages), len(layouts))

    def add_page(self, page: Page) -> Page:
        if self.page_at(page.path) is not None:
            raise FolioError(f"Duplicate page path: {page.path}")
        page.site = self
        self.pages.append(page)
        return page

    def page_at(self, path: str) -> Page | None:
        target = normalize_path(path)
        for page in self.pages:
            if page.path == target:
                return page
        return None

    def layout_for(self, page: Page) -> Layout | None:
        name = self.engine.layout_name(page)
        if name is None or name not in self.layouts:
            return None
        return self.layouts.resolve(name)

    # ── Building ─────────────────────────────────────────────────

    def compile(self, pages: list[Page] | None = None, *, force: bool = False) -> BuildReport:
        """Compile ``pages`` (default: all), recording each outcome.

        A failing page is recorded and does not stop its siblings.
        Without ``force``, pages whose output is up to date are skipped.
        Every page of the site starts the build uncompiled, so a page
        included by a layout is recompiled even when it is not a target.
        """
        self.load()
        report = BuildReport()
        targets = self.pages if pages is None else pages

        for page in (*self.pages, *targets):
            page.state = CompileState.UNCOMPILED

        with loaded(self.data_source):
            for page in targets:
                try:
                    if not force and not page.outdated:
                        report.skipped.append(page.path)
                        continue
                    # Already compiled while layouting an earlier page
                    if page.state is not CompileState.COMPILED:
                        self.engine.compile(page)
                except FolioError as exc:
                    logger.error("Failed to compile %s: %s", page.path, exc)
                    report.failed.append(
                        BuildFailure(path=page.path, error=str(exc), error_type=type(exc).__name__)
                    )
                    continue
                if page.created:
                    report.created.append(page.path)
                elif page.modified:
                    report.modified.append(page.path)
                else:
                    report.unchanged.append(page.path)

        logger.info(
            "Build finished: %d created, %d modified, %d unchanged, %d skipped, %d failed",
            len(report.created),
            len(report.modified),
            len(report.unchanged),
            len(report.skipped),
            len(report.failed),
        )
        return report
