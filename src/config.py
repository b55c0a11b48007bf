"""Site configuration loaded from .folio.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from folio.content.attributes import DEFAULT_EXTENSION, DefaultsLookup
from folio.routers import RouterName
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".folio.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "folio" / "config.toml"


class OutputConfig(BaseModel):
    """[output] section."""

    directory: str = "output"
    default_extension: str = DEFAULT_EXTENSION


class SiteSection(BaseModel):
    """[site] section."""

    router: RouterName = RouterName.DEFAULT
    data_source: str = "json"
    content_file: str = ".folio-content.json"


class DefaultsSection(BaseModel):
    """[defaults] section — attributes every page falls back to.

    With ``lookup = "path"``, ``[defaults.by_path."/blog/"]`` tables give
    per-subtree defaults::

        [defaults]
        lookup = "path"

        [defaults.attributes]
        layout = "default"

        [defaults.by_path."/blog/"]
        layout = "post"
    """

    lookup: DefaultsLookup = DefaultsLookup.KEY
    attributes: dict[str, Any] = Field(default_factory=dict)
    by_path: dict[str, dict[str, Any]] = Field(default_factory=dict)


class BuildSection(BaseModel):
    """[build] section."""

    write_output: bool = True


class FolioConfig(BaseModel):
    """Top-level configuration model for a site."""

    output: OutputConfig = Field(default_factory=OutputConfig)
    site: SiteSection = Field(default_factory=SiteSection)
    defaults: DefaultsSection = Field(default_factory=DefaultsSection)
    build: BuildSection = Field(default_factory=BuildSection)

    @property
    def output_dir(self) -> str:
        return self.output.directory


def _config_file(path: str | Path | None) -> Path | None:
    """Return the TOML file a site should be configured from, if any.

    An explicit ``path`` wins even when it is missing (that is logged and
    yields built-in defaults); otherwise the site's ``.folio.toml`` is
    preferred over the per-user file.
    """
    if path is not None:
        explicit = Path(path)
        if not explicit.exists():
            logger.warning("Config file not found: %s", explicit)
            return None
        return explicit
    candidates = [directory / CONFIG_FILENAME for directory in CONFIG_SEARCH_PATHS]
    candidates.append(GLOBAL_CONFIG)
    return next((candidate for candidate in candidates if candidate.exists()), None)


def load_config(path: str | Path | None = None) -> FolioConfig:
    """Build the site configuration.

    ``[output]``, ``[site]``, ``[defaults]`` and ``[build]`` come from the
    first config file found (see :func:`_config_file`); ``FOLIO_*``
    environment variables are applied on top.
    """
    source = _config_file(path)
    data = _load_toml(source) if source is not None else {}
    if data:
        logger.info("Loaded config from %s", source)
    return _apply_env_vars(FolioConfig.model_validate(data))


def merge_cli_overrides(config: FolioConfig, **cli_kwargs: object) -> FolioConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, keyed as ``output_directory``,
            ``router`` or ``default_extension``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "output_directory": ("output", "directory"),
        "default_extension": ("output", "default_extension"),
        "router": ("site", "router"),
        "content_file": ("site", "content_file"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return FolioConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Parse ``path``; an unreadable or malformed file counts as empty."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: FolioConfig) -> FolioConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FOLIO_OUTPUT_DIR": ("output", "directory"),
        "FOLIO_DEFAULT_EXTENSION": ("output", "default_extension"),
        "FOLIO_ROUTER": ("site", "router"),
        "FOLIO_CONTENT_FILE": ("site", "content_file"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    write_raw = os.environ.get("FOLIO_WRITE_OUTPUT")
    if write_raw is not None:
        data["build"]["write_output"] = write_raw.lower() in ("true", "1", "yes")

    return FolioConfig.model_validate(data)
