"""Compilation — filter and layout registries and the per-page engine."""

from folio.compilation.engine import CompilationEngine
from folio.compilation.filters import (
    FilterRegistry,
    Layout,
    LayoutContext,
    LayoutRegistry,
    default_filters,
)
from folio.compilation.output import OutputWriter

__all__ = [
    "CompilationEngine",
    "FilterRegistry",
    "Layout",
    "LayoutContext",
    "LayoutRegistry",
    "OutputWriter",
    "default_filters",
]
