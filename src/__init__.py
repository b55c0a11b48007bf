"""Folio — incremental static-content compiler.

Pages are loaded from a data source, routed to output paths, run through
filter and layout stages, and classified as created, modified or
unchanged so that rebuilds only touch what changed.
"""

__version__ = "0.4.0"
