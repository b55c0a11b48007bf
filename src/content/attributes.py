"""Layered attribute lookup: page attributes, site defaults, built-ins.

The first layer holding a key wins.  An attribute that resolves nowhere
yields :data:`~folio.content.models.ABSENT`, which is distinct from an
attribute explicitly set to a falsy value such as ``""`` or ``False``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from folio.content.models import (
    ABSENT,
    AttributeKey,
    normalize_attributes,
    normalize_key,
    normalize_path,
)

if TYPE_CHECKING:
    from folio.content.page import Page
    from folio.site import SiteLike

DEFAULT_EXTENSION = "html"


class DefaultsLookup(StrEnum):
    """How a defaults provider indexes its attributes."""

    KEY = "key"  # one flat mapping shared by every page
    PATH = "path"  # per-path mappings, falling back to a global mapping


class PageDefaults:
    """Fallback attributes shared read-only by all pages of a site.

    With :attr:`DefaultsLookup.KEY`, ``attributes`` is a flat mapping.
    With :attr:`DefaultsLookup.PATH`, ``by_path`` maps page paths (or path
    prefixes ending in ``/``) to mappings; the longest matching prefix is
    consulted first, then the flat ``attributes`` mapping as a global
    default.
    """

    def __init__(
        self,
        attributes: Mapping[Any, Any] | None = None,
        *,
        by_path: Mapping[str, Mapping[Any, Any]] | None = None,
        lookup: DefaultsLookup | str = DefaultsLookup.KEY,
    ) -> None:
        self._attributes = normalize_attributes(attributes)
        self._by_path = {
            normalize_path(path): normalize_attributes(attrs)
            for path, attrs in (by_path or {}).items()
        }
        self.lookup_strategy = DefaultsLookup(lookup)

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def _path_layers(self, identity: str) -> list[dict[str, Any]]:
        matches = [p for p in self._by_path if identity == p or identity.startswith(p)]
        matches.sort(key=len, reverse=True)
        return [self._by_path[p] for p in matches]

    def lookup(self, identity: str, key: object) -> Any:
        """Return the default for ``key`` as seen by the page at ``identity``."""
        name = normalize_key(key)
        if self.lookup_strategy is DefaultsLookup.PATH:
            for layer in self._path_layers(identity):
                if name in layer:
                    return layer[name]
        return self._attributes.get(name, ABSENT)


class AttributeResolver:
    """Resolves a page attribute through the page, defaults and built-ins."""

    def __init__(self, default_extension: str = DEFAULT_EXTENSION) -> None:
        self.builtins: dict[str, Any] = {
            AttributeKey.EXTENSION.value: default_extension,
            AttributeKey.FILTERS_PRE.value: [],
            AttributeKey.FILTERS_POST.value: [],
            AttributeKey.SKIP_OUTPUT.value: False,
        }

    def attribute_named(self, page: Page, site: SiteLike | None, key: object) -> Any:
        name = normalize_key(key)

        if name in page.attributes:
            return page.attributes[name]

        if site is not None:
            defaults = getattr(site, "page_defaults", None)
            if defaults is not None:
                value = defaults.lookup(page.path, name)
                if value is not ABSENT:
                    return value

        if name in self.builtins:
            value = self.builtins[name]
            # Hand out copies of mutable built-ins
            return list(value) if isinstance(value, list) else value

        return ABSENT
