"""Writes compiled pages to their disk paths."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from folio.errors import OutputWriteError

if TYPE_CHECKING:
    from folio.content.page import Page

logger = logging.getLogger(__name__)


class OutputWriter:
    """Reads and writes compiled output under the site's output directory."""

    def read_existing(self, page: Page) -> str | None:
        """Return the output previously written for ``page``, if any."""
        path = Path(page.disk_path)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read previous output %s: %s", path, exc)
            return None

    def write(self, page: Page, content: str | None = None) -> Path | None:
        """Write ``content`` (default: ``page.content``) to the page's disk path.

        Pages that skip output are left alone.  Filesystem failures are
        raised as :class:`OutputWriteError`.
        """
        if page.skip_output:
            logger.debug("Skipping output for %s", page.path)
            return None
        path = Path(page.disk_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(page.content if content is None else content, encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(str(path), exc) from exc
        logger.debug("Wrote %s", path)
        return path
