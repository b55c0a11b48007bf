"""Per-page compilation: pre filters, layout, post filters.

One engine serves one build.  It owns the compilation stack used to
detect pages that (through layouts including other pages) depend on
their own unfinished compilation.  A page moves from ``uncompiled`` to
``compiling`` when pushed, then to ``compiled`` or ``failed``; it is
always popped again, and its previously compiled content is only
replaced once every stage has succeeded and its output was written.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from folio.compilation.filters import (
    FilterRegistry,
    LayoutContext,
    LayoutRegistry,
    default_filters,
)
from folio.compilation.output import OutputWriter
from folio.content.models import ABSENT, AttributeKey, CompilationStage, CompileState
from folio.content.proxy import PagesView
from folio.errors import (
    CyclicCompilationError,
    FolioError,
    NoLongerSupportedError,
    StageExecutionError,
)

if TYPE_CHECKING:
    from folio.content.page import Page

logger = logging.getLogger(__name__)

_STAGE_KEYS = {
    CompilationStage.PRE: AttributeKey.FILTERS_PRE,
    CompilationStage.POST: AttributeKey.FILTERS_POST,
}

_NO_LAYOUT = (None, "", "none")


class CompilationEngine:
    """Applies filters and layouts to pages and classifies the results."""

    def __init__(
        self,
        filters: FilterRegistry | None = None,
        layouts: LayoutRegistry | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self.filters = filters if filters is not None else default_filters()
        self.layouts = layouts if layouts is not None else LayoutRegistry()
        self.writer = writer
        self.stack: list[Page] = []

    @property
    def stack_paths(self) -> list[str]:
        return [page.path for page in self.stack]

    # ── Entry point ──────────────────────────────────────────────

    def compile(self, page: Page) -> None:
        """Compile ``page`` and, unless it skips output, write it."""
        if any(entry is page for entry in self.stack):
            raise CyclicCompilationError(self.stack_paths + [page.path])

        previous = self._previous_output(page)

        self.stack.append(page)
        page.state = CompileState.COMPILING
        logger.debug("Compiling %s (stack depth %d)", page.path, len(self.stack))
        try:
            pre = self.filter(page, CompilationStage.PRE, page.content_raw)
            laid_out = self.layout(page, pre)
            post = self.filter(page, CompilationStage.POST, laid_out)
        except BaseException:
            page.state = CompileState.FAILED
            raise
        finally:
            self.stack.pop()

        if self.writer is not None and page.site is not None:
            try:
                self.writer.write(page, post)
            except FolioError:
                page.state = CompileState.FAILED
                raise

        page.compiled_content = {
            CompilationStage.PRE: pre,
            CompilationStage.LAYOUT: laid_out,
            CompilationStage.POST: post,
        }
        page.created = previous is None
        page.modified = post != previous
        page.state = CompileState.COMPILED
        logger.info(
            "Compiled %s (created=%s, modified=%s)", page.path, page.created, page.modified
        )

    def _previous_output(self, page: Page) -> str | None:
        if CompilationStage.POST in page.compiled_content:
            return page.compiled_content[CompilationStage.POST]
        if self.writer is None or page.site is None or page.skip_output:
            return None
        return self.writer.read_existing(page)

    # ── Filter stages ────────────────────────────────────────────

    def filters_for(self, page: Page, stage: CompilationStage) -> list[str]:
        """Return the ordered filter names ``page`` declares for ``stage``."""
        if page.attribute_named(AttributeKey.FILTERS) is not ABSENT:
            raise NoLongerSupportedError(
                AttributeKey.FILTERS.value,
                "use 'filters_pre' and 'filters_post' instead",
            )
        names = page.attribute_named(_STAGE_KEYS[stage])
        if names is ABSENT or names is None:
            return []
        if isinstance(names, str):
            return [names]
        return [str(name) for name in names]

    def filter(self, page: Page, stage: CompilationStage | str, content: str) -> str:
        """Run ``content`` through the page's filters for ``stage``, in order."""
        stage = CompilationStage(stage)
        names = self.filters_for(page, stage)
        proxy = page.to_proxy()
        for name in names:
            func = self.filters.get(name)
            logger.debug("Applying filter %s to %s (%s)", name, page.path, stage.value)
            content = self._run(stage, name, page, func, content, proxy)
        return content

    # ── Layout stage ─────────────────────────────────────────────

    def layout_name(self, page: Page) -> str | None:
        name = page.attribute_named(AttributeKey.LAYOUT)
        if name is ABSENT or name in _NO_LAYOUT:
            return None
        return str(name)

    def layout(self, page: Page, content: str) -> str:
        """Render ``content`` into the page's layout, if it has one."""
        name = self.layout_name(page)
        if name is None:
            return content
        layout = self.layouts.resolve(name)
        processor = self.layouts.processor_for(layout)
        site = page.site
        context = LayoutContext(
            page=page.to_proxy(),
            content=content,
            layout=layout,
            pages=PagesView(list(getattr(site, "pages", []))),
        )
        logger.debug("Applying layout %s to %s", name, page.path)
        return self._run(
            CompilationStage.LAYOUT, name, page, processor, layout.content, context
        )

    # ── Helpers ──────────────────────────────────────────────────

    def _run(
        self,
        stage: CompilationStage,
        name: str,
        page: Page,
        func: Any,
        content: str,
        argument: Any,
    ) -> str:
        try:
            result = func(content, argument)
        except FolioError:
            raise
        except Exception as exc:
            raise StageExecutionError(stage.value, name, page.path, exc) from exc
        if not isinstance(result, str):
            raise StageExecutionError(
                stage.value,
                name,
                page.path,
                TypeError(f"expected str, got {type(result).__name__}"),
            )
        return result
