"""Filter and layout registries.

Filters are pure ``(content, page) -> content`` transforms looked up by
name.  Layouts are named templates stored by the data source; each names
the layout processor that renders it, Jinja2 unless stated otherwise.
Processors receive the layout body and a :class:`LayoutContext` and return
the rendered page.
"""

from __future__ import annotations

import difflib
import html
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from folio.errors import UnknownFilterError, UnknownLayoutError
from jinja2 import Environment, TemplateError, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel

if TYPE_CHECKING:
    from folio.content.proxy import PageProxy

logger = logging.getLogger(__name__)

FilterFunc = Callable[[str, "PageProxy"], str]

_ENV = Environment(autoescape=select_autoescape(), keep_trailing_newline=True)


def _suggest(name: str, candidates: Iterable[str], *, limit: int = 3) -> tuple[str, ...]:
    return tuple(difflib.get_close_matches(name, list(candidates), n=limit, cutoff=0.6))


# ── Filters ──────────────────────────────────────────────────────


class FilterRegistry:
    """Named content filters."""

    def __init__(self, filters: Mapping[str, FilterFunc] | None = None) -> None:
        self._filters: dict[str, FilterFunc] = dict(filters or {})

    def register(self, name: str, func: FilterFunc | None = None):
        """Register ``func`` under ``name``; usable as a decorator."""
        if not isinstance(name, str) or not name.strip():
            raise ValueError("filter name must be a non-empty string")
        key = name.strip()

        def _register(f: FilterFunc) -> FilterFunc:
            if key in self._filters:
                raise ValueError(f"Duplicate filter name: {key}")
            self._filters[key] = f
            return f

        if func is not None:
            return _register(func)
        return _register

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self._filters))

    def get(self, name: str) -> FilterFunc:
        func = self._filters.get(name)
        if func is None:
            raise UnknownFilterError(
                name,
                available=self.available(),
                suggestions=_suggest(name, self._filters),
            )
        return func

    def apply(self, name: str, content: str, page: PageProxy) -> str:
        return self.get(name)(content, page)

    def __contains__(self, name: object) -> bool:
        return name in self._filters


def _strip(content: str, page: PageProxy) -> str:
    return content.strip()


def _escape_html(content: str, page: PageProxy) -> str:
    return html.escape(content, quote=False)


def _normalize_newlines(content: str, page: PageProxy) -> str:
    return content.replace("\r\n", "\n").replace("\r", "\n")


def default_filters() -> FilterRegistry:
    """Return a registry holding the builtin filters."""
    return FilterRegistry(
        {
            "strip": _strip,
            "escape_html": _escape_html,
            "normalize_newlines": _normalize_newlines,
        }
    )


# ── Layouts ──────────────────────────────────────────────────────


class Layout(BaseModel):
    """A named layout body and the processor that renders it."""

    name: str
    content: str
    processor: str = "template"
    mtime: datetime | None = None


@dataclass(frozen=True)
class LayoutContext:
    """What a layout processor may read while rendering a page."""

    page: PageProxy
    content: str
    layout: Layout
    pages: Mapping[str, PageProxy]


LayoutProcessor = Callable[[str, LayoutContext], str]


def render_template(body: str, context: LayoutContext) -> str:
    """Render ``body`` as a Jinja2 template.

    The template sees ``content`` (the page's filtered content, not
    escaped), ``page`` (the page being laid out), ``pages`` (every page of
    the site by path) and ``layout``.  ``{{ pages["/x/"].content | safe }}``
    inlines another page, compiling it first if needed.
    """
    try:
        template = _ENV.from_string(body)
        return template.render(
            content=Markup(context.content),
            page=context.page,
            pages=context.pages,
            layout=context.layout,
        )
    except TemplateError as exc:
        logger.warning("Layout %s failed to render: %s", context.layout.name, exc)
        raise


def render_passthrough(body: str, context: LayoutContext) -> str:
    """Ignore the layout body and emit the page content unchanged."""
    return context.content


class LayoutRegistry:
    """Layouts by name plus the processors that render them."""

    def __init__(
        self,
        layouts: Iterable[Layout] = (),
        processors: Mapping[str, LayoutProcessor] | None = None,
    ) -> None:
        self._layouts: dict[str, Layout] = {}
        self._processors: dict[str, LayoutProcessor] = {
            "template": render_template,
            "passthrough": render_passthrough,
        }
        self._processors.update(processors or {})
        for layout in layouts:
            self.add(layout)

    def add(self, layout: Layout) -> None:
        self._layouts[layout.name] = layout

    def register_processor(self, name: str, processor: LayoutProcessor) -> None:
        self._processors[name] = processor

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._layouts))

    def resolve(self, name: str) -> Layout:
        layout = self._layouts.get(name)
        if layout is None:
            raise UnknownLayoutError(
                name,
                available=self.names(),
                suggestions=_suggest(name, self._layouts),
            )
        return layout

    def processor_for(self, layout: Layout) -> LayoutProcessor:
        processor = self._processors.get(layout.processor)
        if processor is None:
            raise UnknownFilterError(
                layout.processor,
                available=tuple(sorted(self._processors)),
                suggestions=_suggest(layout.processor, self._processors),
            )
        return processor

    def __contains__(self, name: object) -> bool:
        return name in self._layouts

    def __len__(self) -> int:
        return len(self._layouts)
