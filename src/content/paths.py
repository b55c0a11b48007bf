"""Output path resolution for pages.

A page's ``custom_path`` attribute, when set, is used verbatim as its web
path and joined onto the output directory as its disk path.  Otherwise
the site's router decides both.  Nothing is memoized here: router output
may depend on attributes that change between calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from folio.content.models import ABSENT, AttributeKey
from folio.errors import PathResolutionError

if TYPE_CHECKING:
    from folio.content.page import Page
    from folio.site import SiteLike


def join_output_path(output_dir: str, relative: str) -> str:
    """Join a router-produced path onto the output directory.

    Router paths are absolute in web terms (they start with ``/``), so
    this is a plain textual join rather than :func:`os.path.join`.
    """
    if not relative:
        raise PathResolutionError("cannot join an empty path onto the output directory")
    return str(output_dir).rstrip("/") + "/" + relative.lstrip("/")


class PathResolver:
    """Resolves disk and web output paths for pages of a site."""

    def _custom_path(self, page: Page) -> str | None:
        custom = page.attribute_named(AttributeKey.CUSTOM_PATH)
        if custom is ABSENT or custom is None:
            return None
        return str(custom)

    def disk_path(self, page: Page, site: SiteLike) -> str:
        custom = self._custom_path(page)
        if custom is not None:
            return join_output_path(site.config.output_dir, custom)
        return join_output_path(site.config.output_dir, site.router.disk_path_for(page))

    def web_path(self, page: Page, site: SiteLike) -> str:
        custom = self._custom_path(page)
        if custom is not None:
            return custom
        return site.router.web_path_for(page)
