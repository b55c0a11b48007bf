"""Read-only views of pages handed to filters and layouts."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from folio.content.models import ABSENT, CompileState, normalize_key, normalize_path

if TYPE_CHECKING:
    from folio.content.page import Page


class PageProxy:
    """Attribute access to a page without exposing the page itself.

    ``proxy.title`` and ``proxy["title"]`` resolve through the page's
    attribute layers and return ``None`` for unresolved attributes.
    ``content`` is the fully compiled content; reading it on a page that
    has not been compiled yet compiles it first.
    """

    __slots__ = ("_page",)

    def __init__(self, page: Page) -> None:
        object.__setattr__(self, "_page", page)

    def __repr__(self) -> str:
        return f"<PageProxy path={self._page.path!r}>"

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("PageProxy is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("PageProxy is read-only")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, key: object) -> Any:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return self._page.attribute_named(key) is not ABSENT

    def get(self, key: object, default: Any = None) -> Any:
        value = self._page.attribute_named(normalize_key(key))
        return default if value is ABSENT else value

    @property
    def path(self) -> str:
        """Web path when attached to a site, logical path otherwise."""
        if self._page.site is None:
            return self._page.path
        return self._page.web_path

    @property
    def content(self) -> str:
        page = self._page
        site = page.site
        if page.state is not CompileState.COMPILED and site is not None:
            site.engine.compile(page)
        return page.content


class PagesView(Mapping[str, PageProxy]):
    """Proxies for every page of a site, keyed by logical path."""

    def __init__(self, pages: list[Page]) -> None:
        self._pages = {page.path: page for page in pages}

    def __getitem__(self, path: str) -> PageProxy:
        return self._pages[normalize_path(path)].to_proxy()

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)
