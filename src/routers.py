"""Routers map a page's logical path to its web and disk paths."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING

from folio.content.models import AttributeKey

if TYPE_CHECKING:
    from folio.content.page import Page


class RouterName(StrEnum):
    """Available routing strategies."""

    DEFAULT = "default"
    NO_DIRS = "no_dirs"


class Router(ABC):
    """Base class for routing strategies.

    Both methods return paths that begin with ``/``; the disk path is
    relative to the site's output directory.
    """

    @abstractmethod
    def disk_path_for(self, page: Page) -> str:
        """Compute the output file path for ``page``."""

    @abstractmethod
    def web_path_for(self, page: Page) -> str:
        """Compute the URL path under which ``page`` is served."""

    def _extension(self, page: Page) -> str:
        return str(page.attribute_named(AttributeKey.EXTENSION)).lstrip(".")


class DefaultRouter(Router):
    """``/about/`` is served at ``/about/`` from ``/about/index.html``."""

    def disk_path_for(self, page: Page) -> str:
        return page.path + "index." + self._extension(page)

    def web_path_for(self, page: Page) -> str:
        return page.path


class NoDirsRouter(Router):
    """``/about/`` is served and written as ``/about.html``."""

    def disk_path_for(self, page: Page) -> str:
        if page.path == "/":
            return "/index." + self._extension(page)
        return page.path.rstrip("/") + "." + self._extension(page)

    def web_path_for(self, page: Page) -> str:
        if page.path == "/":
            return "/"
        return self.disk_path_for(page)


def create_router(name: RouterName | str) -> Router:
    """Create a router for the given strategy name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        name = RouterName(name)
    except ValueError:
        raise ValueError(f"Unknown router: {name!r}") from None

    routers: dict[RouterName, type[Router]] = {
        RouterName.DEFAULT: DefaultRouter,
        RouterName.NO_DIRS: NoDirsRouter,
    }
    return routers[name]()
