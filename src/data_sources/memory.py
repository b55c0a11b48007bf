"""In-memory data source."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from folio.compilation.filters import Layout
from folio.content.page import Page
from folio.data_sources.base import DataSource
from folio.errors import DataSourceError


class MemoryDataSource(DataSource):
    """Keeps pages and layouts in dictionaries.

    Counts ``open``/``close`` calls so callers can check that access is
    balanced.
    """

    def __init__(
        self,
        pages: Iterable[Page] = (),
        layouts: Iterable[Layout] = (),
    ) -> None:
        self._pages: dict[str, Page] = {page.path: page for page in pages}
        self._layouts: dict[str, Layout] = {layout.name: layout for layout in layouts}
        self.open_count = 0
        self.close_count = 0

    @property
    def is_open(self) -> bool:
        return self.open_count > self.close_count

    def open(self) -> None:
        self.open_count += 1

    def close(self) -> None:
        self.close_count += 1

    def pages(self) -> list[Page]:
        return list(self._pages.values())

    def layouts(self) -> list[Layout]:
        return list(self._layouts.values())

    def save_page(self, page: Page) -> None:
        page.mtime = datetime.now(tz=UTC)
        self._pages[page.path] = page

    def move_page(self, page: Page, new_path: str) -> None:
        if page.path not in self._pages:
            raise DataSourceError(f"No page stored at {page.path}")
        if new_path in self._pages and new_path != page.path:
            raise DataSourceError(f"A page already exists at {new_path}")
        self._pages[new_path] = self._pages.pop(page.path)

    def delete_page(self, page: Page) -> None:
        if self._pages.pop(page.path, None) is None:
            raise DataSourceError(f"No page stored at {page.path}")
