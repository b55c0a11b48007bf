"""Content domain types: attribute keys, compilation stages and states.

Attribute mappings accept arbitrary string keys on input.  They are
normalized once, at page construction, to plain ``str`` keys; the
well-known keys are :class:`AttributeKey` members, which compare equal
to their string values, so ``attributes["layout"]`` and
``attributes[AttributeKey.LAYOUT]`` address the same entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from folio.errors import PathResolutionError


class AttributeKey(StrEnum):
    """Attribute keys with built-in meaning."""

    EXTENSION = "extension"
    FILTERS_PRE = "filters_pre"
    FILTERS_POST = "filters_post"
    LAYOUT = "layout"
    CUSTOM_PATH = "custom_path"
    SKIP_OUTPUT = "skip_output"
    # Legacy single-list filter declaration, rejected at compile time.
    FILTERS = "filters"


class CompilationStage(StrEnum):
    """Ordered transformation stages of a page compilation."""

    PRE = "pre"
    LAYOUT = "layout"
    POST = "post"


class CompileState(StrEnum):
    """Per-page compilation state."""

    UNCOMPILED = "uncompiled"
    COMPILING = "compiling"
    COMPILED = "compiled"
    FAILED = "failed"


class _Absent:
    """Sentinel for an attribute that resolved nowhere."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


def normalize_key(key: object) -> str:
    """Return the canonical form of an attribute key."""
    if isinstance(key, AttributeKey):
        return key.value
    if isinstance(key, str):
        text = key.strip()
        if text.startswith(":"):
            text = text[1:]
        if not text:
            raise ValueError("attribute keys must be non-empty")
        return text
    raise TypeError(f"attribute keys must be strings, got {type(key).__name__}")


def normalize_attributes(attributes: Mapping[Any, Any] | None) -> dict[str, Any]:
    """Return a copy of ``attributes`` with every key normalized."""
    if not attributes:
        return {}
    return {normalize_key(key): value for key, value in attributes.items()}


def normalize_path(path: str) -> str:
    """Ensure a logical page path begins and ends with ``/``.

    >>> normalize_path("foo")
    '/foo/'
    >>> normalize_path("/")
    '/'
    """
    if not isinstance(path, str):
        raise PathResolutionError(f"page path must be a string, got {type(path).__name__}")
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path = path + "/"
    if "//" in path:
        raise PathResolutionError(f"page path contains an empty segment: {path!r}")
    return path
