"""The page: one unit of content loaded from a data source and compiled.

A page owns its raw content, its attributes and its compiled output.
It keeps only a weak reference to the site that loaded it and reaches
the site's router, data source, defaults and compilation engine through
that reference.
"""

from __future__ import annotations

import logging
import os
import weakref
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from folio.content.attributes import AttributeResolver
from folio.content.loading import loaded
from folio.content.models import (
    AttributeKey,
    CompilationStage,
    CompileState,
    normalize_attributes,
    normalize_path,
)
from folio.content.paths import PathResolver
from folio.errors import FolioError

if TYPE_CHECKING:
    from folio.content.proxy import PageProxy
    from folio.site import SiteLike

logger = logging.getLogger(__name__)

_DEFAULT_RESOLVER = AttributeResolver()
_PATH_RESOLVER = PathResolver()


class Page:
    """A content item with attributes, a logical path and compiled output."""

    def __init__(
        self,
        content: str,
        attributes: Mapping[Any, Any] | None,
        path: str,
        *,
        mtime: datetime | None = None,
    ) -> None:
        self.content_raw = content
        self.attributes = normalize_attributes(attributes)
        self.path = normalize_path(path)
        self.mtime = mtime

        self.compiled_content: dict[CompilationStage, str] = {}
        self.state = CompileState.UNCOMPILED
        self.modified = False
        self.created = False

        self._site_ref: weakref.ReferenceType[Any] | None = None

    def __repr__(self) -> str:
        return f"<Page path={self.path!r} state={self.state.value}>"

    # ── Site attachment ──────────────────────────────────────────

    @property
    def site(self) -> SiteLike | None:
        if self._site_ref is None:
            return None
        return self._site_ref()

    @site.setter
    def site(self, site: SiteLike | None) -> None:
        self._site_ref = weakref.ref(site) if site is not None else None

    def _require_site(self) -> SiteLike:
        site = self.site
        if site is None:
            raise FolioError(f"Page {self.path} is not attached to a site")
        return site

    # ── Attributes and paths ─────────────────────────────────────

    def attribute_named(self, key: object) -> Any:
        """Resolve ``key`` through this page, the site defaults and built-ins.

        Returns :data:`~folio.content.models.ABSENT` when nothing defines it.
        """
        site = self.site
        resolver = getattr(site, "attribute_resolver", None) or _DEFAULT_RESOLVER
        return resolver.attribute_named(self, site, key)

    @property
    def disk_path(self) -> str:
        return _PATH_RESOLVER.disk_path(self, self._require_site())

    @property
    def web_path(self) -> str:
        return _PATH_RESOLVER.web_path(self, self._require_site())

    # ── Content ──────────────────────────────────────────────────

    @property
    def content(self) -> str:
        """Fully compiled content, or the raw content if never compiled."""
        for stage in (CompilationStage.POST, CompilationStage.LAYOUT, CompilationStage.PRE):
            if stage in self.compiled_content:
                return self.compiled_content[stage]
        return self.content_raw

    def content_at(self, stage: CompilationStage | str) -> str | None:
        """Return the memoized output of one compilation stage, if any."""
        return self.compiled_content.get(CompilationStage(stage))

    @property
    def skip_output(self) -> bool:
        return bool(self.attribute_named(AttributeKey.SKIP_OUTPUT))

    @property
    def outdated(self) -> bool:
        """Whether the compiled output on disk is missing or older than its sources.

        Data sources that cannot report modification times make every
        page outdated.
        """
        site = self._require_site()
        try:
            output_mtime = os.stat(self.disk_path).st_mtime
        except OSError:
            return True

        page_mtime = self.mtime
        data_source = getattr(site, "data_source", None)
        mtime_for = getattr(data_source, "mtime_for", None)
        if mtime_for is not None:
            with loaded(data_source):
                page_mtime = mtime_for(self)
        if page_mtime is None:
            return True
        if page_mtime.timestamp() > output_mtime:
            return True

        layout = site.layout_for(self) if hasattr(site, "layout_for") else None
        if layout is not None:
            if layout.mtime is None or layout.mtime.timestamp() > output_mtime:
                return True
        return False

    # ── Persistence ──────────────────────────────────────────────

    def save(self) -> None:
        """Persist this page through the site's data source."""
        data_source = self._require_site().data_source
        with loaded(data_source):
            data_source.save_page(self)
        logger.debug("Saved page %s", self.path)

    def move_to(self, new_path: str) -> None:
        """Move this page to ``new_path`` in the site's data source."""
        target = normalize_path(new_path)
        data_source = self._require_site().data_source
        with loaded(data_source):
            data_source.move_page(self, target)
        logger.debug("Moved page %s to %s", self.path, target)
        self.path = target

    def delete(self) -> None:
        """Remove this page from the site's data source."""
        data_source = self._require_site().data_source
        with loaded(data_source):
            data_source.delete_page(self)
        logger.debug("Deleted page %s", self.path)

    # ── Compilation ──────────────────────────────────────────────

    def compile(self) -> None:
        """Compile this page with its site's compilation engine."""
        self._require_site().engine.compile(self)

    def to_proxy(self) -> PageProxy:
        from folio.content.proxy import PageProxy

        return PageProxy(self)
