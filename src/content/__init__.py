"""Content domain — pages, their attributes, paths and access guard."""

from folio.content.attributes import AttributeResolver, DefaultsLookup, PageDefaults
from folio.content.loading import LoadingGuard, loaded, with_loaded
from folio.content.models import (
    ABSENT,
    AttributeKey,
    CompilationStage,
    CompileState,
    normalize_attributes,
    normalize_path,
)
from folio.content.page import Page
from folio.content.paths import PathResolver
from folio.content.proxy import PageProxy

__all__ = [
    "ABSENT",
    "AttributeKey",
    "AttributeResolver",
    "CompilationStage",
    "CompileState",
    "DefaultsLookup",
    "LoadingGuard",
    "Page",
    "PageDefaults",
    "PageProxy",
    "PathResolver",
    "loaded",
    "normalize_attributes",
    "normalize_path",
    "with_loaded",
]
