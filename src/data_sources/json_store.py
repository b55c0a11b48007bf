"""JSON-backed data source.

Persists every page and layout of a site in a single JSON file, read
when the data source is opened and written after every mutation.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from folio.compilation.filters import Layout
from folio.content.page import Page
from folio.data_sources.base import DataSource
from folio.errors import DataSourceError
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

STORE_FILENAME = ".folio-content.json"


class StoredPage(BaseModel):
    """Serialized form of a page."""

    path: str
    content: str = ""
    attributes: dict[str, Any] = Field(default_factory=dict)
    mtime: datetime | None = None


class StoredLayout(BaseModel):
    """Serialized form of a layout."""

    name: str
    content: str = ""
    processor: str = "template"
    mtime: datetime | None = None


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    pages: list[StoredPage] = Field(default_factory=list)
    layouts: list[StoredLayout] = Field(default_factory=list)


class JsonDataSource(DataSource):
    """Pages and layouts kept in one JSON document on disk."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: _StoreData | None = None

    @property
    def path(self) -> Path:
        return self._path

    # ── Open / close ─────────────────────────────────────────────

    def open(self) -> None:
        self._data = self._load()
        logger.debug(
            "Loaded %d pages and %d layouts from %s",
            len(self._data.pages),
            len(self._data.layouts),
            self._path,
        )

    def close(self) -> None:
        self._data = None

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt content store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        data = self._require_open()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(data.model_dump_json(indent=2), encoding="utf-8")

    def _require_open(self) -> _StoreData:
        if self._data is None:
            raise DataSourceError(f"Data source {self._path} is not open")
        return self._data

    def _find(self, path: str) -> StoredPage | None:
        for stored in self._require_open().pages:
            if stored.path == path:
                return stored
        return None

    # ── Read operations ──────────────────────────────────────────

    def pages(self) -> list[Page]:
        return [
            Page(stored.content, stored.attributes, stored.path, mtime=stored.mtime)
            for stored in self._require_open().pages
        ]

    def layouts(self) -> list[Layout]:
        return [
            Layout(
                name=stored.name,
                content=stored.content,
                processor=stored.processor,
                mtime=stored.mtime,
            )
            for stored in self._require_open().layouts
        ]

    # ── Write operations ─────────────────────────────────────────

    def save_page(self, page: Page) -> None:
        data = self._require_open()
        now = datetime.now(tz=UTC)
        data.pages = [p for p in data.pages if p.path != page.path]
        data.pages.append(
            StoredPage(
                path=page.path,
                content=page.content_raw,
                attributes=dict(page.attributes),
                mtime=now,
            )
        )
        page.mtime = now
        self._save()

    def save_layout(self, layout: Layout) -> None:
        data = self._require_open()
        data.layouts = [lay for lay in data.layouts if lay.name != layout.name]
        data.layouts.append(
            StoredLayout(
                name=layout.name,
                content=layout.content,
                processor=layout.processor,
                mtime=datetime.now(tz=UTC),
            )
        )
        self._save()

    def move_page(self, page: Page, new_path: str) -> None:
        stored = self._find(page.path)
        if stored is None:
            raise DataSourceError(f"No page stored at {page.path}")
        if new_path != page.path and self._find(new_path) is not None:
            raise DataSourceError(f"A page already exists at {new_path}")
        stored.path = new_path
        stored.mtime = datetime.now(tz=UTC)
        self._save()

    def delete_page(self, page: Page) -> None:
        data = self._require_open()
        remaining = [p for p in data.pages if p.path != page.path]
        if len(remaining) == len(data.pages):
            raise DataSourceError(f"No page stored at {page.path}")
        data.pages = remaining
        self._save()

    def mtime_for(self, page: Page) -> datetime | None:
        stored = self._find(page.path)
        return stored.mtime if stored is not None else None
