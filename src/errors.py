"""Error taxonomy for page loading, routing and compilation.

Every error derives from :class:`FolioError`.  Compilation errors abort
the compilation of the single affected page and are surfaced to the
build driver; nothing in the core retries.
"""

from __future__ import annotations


class FolioError(Exception):
    """Base error for folio."""


class PathResolutionError(FolioError, ValueError):
    """A page path could not be normalized or resolved."""


class DataSourceError(FolioError):
    """The backing store rejected an operation."""


class OutputWriteError(FolioError):
    """Compiled output could not be written to disk."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        super().__init__(f"Could not write {path}: {type(cause).__name__}: {cause}")


class NoLongerSupportedError(FolioError):
    """A page uses an attribute shape that is no longer supported."""

    def __init__(self, attribute: str, hint: str = "") -> None:
        self.attribute = attribute
        self.hint = hint
        message = f"The '{attribute}' attribute is no longer supported"
        if hint:
            message = f"{message}; {hint}"
        super().__init__(message)


class _UnknownNameError(FolioError):
    kind = "name"

    def __init__(
        self,
        name: str,
        available: tuple[str, ...] = (),
        suggestions: tuple[str, ...] = (),
    ) -> None:
        self.name = name
        self.available = available
        self.suggestions = suggestions
        message = f"Unknown {self.kind}: {name!r}"
        if suggestions:
            message += f" (did you mean: {', '.join(suggestions)}?)"
        elif available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)


class UnknownFilterError(_UnknownNameError):
    """A referenced filter is not registered."""

    kind = "filter"


class UnknownLayoutError(_UnknownNameError):
    """A referenced layout does not exist."""

    kind = "layout"


class CyclicCompilationError(FolioError):
    """A page depends, directly or transitively, on its own compilation.

    ``stack`` holds the paths of every page on the compilation stack,
    outermost first, followed by the page that closed the cycle.
    """

    def __init__(self, stack: list[str]) -> None:
        self.stack = list(stack)
        super().__init__("Cyclic compilation: " + " -> ".join(self.stack))


class StageExecutionError(FolioError):
    """A filter or layout raised while being applied to a page."""

    def __init__(self, stage: str, name: str, path: str, cause: BaseException) -> None:
        self.stage = stage
        self.name = name
        self.path = path
        super().__init__(
            f"{stage} stage failed for {path} in {name!r}: "
            f"{type(cause).__name__}: {cause}"
        )
