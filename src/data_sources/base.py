"""Base class for backing stores of pages and layouts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from folio.content.loading import loaded

if TYPE_CHECKING:
    from folio.compilation.filters import Layout
    from folio.content.page import Page


class DataSource(ABC):
    """Loads and persists the pages and layouts of one site.

    ``open`` and ``close`` are only ever called by the loading guard,
    which balances them; everything else assumes the source is open.
    """

    def open(self) -> None:
        """Acquire whatever the store needs (files, connections)."""

    def close(self) -> None:
        """Release what :meth:`open` acquired."""

    def loading(self):
        """Context manager holding this data source open."""
        return loaded(self)

    @abstractmethod
    def pages(self) -> list[Page]:
        """Return every stored page."""

    @abstractmethod
    def layouts(self) -> list[Layout]:
        """Return every stored layout."""

    @abstractmethod
    def save_page(self, page: Page) -> None:
        """Insert or replace ``page``."""

    @abstractmethod
    def move_page(self, page: Page, new_path: str) -> None:
        """Store ``page`` under ``new_path`` instead of its current path."""

    @abstractmethod
    def delete_page(self, page: Page) -> None:
        """Remove ``page``."""

    def mtime_for(self, page: Page) -> datetime | None:
        """Last modification time of ``page``, if the store tracks one."""
        return page.mtime
