"""Backing stores for pages and layouts."""

from folio.data_sources.base import DataSource
from folio.data_sources.json_store import JsonDataSource
from folio.data_sources.memory import MemoryDataSource

__all__ = ["DataSource", "JsonDataSource", "MemoryDataSource"]
