"""Source catalogs that can bulk-seed the relay queue."""

from .source_catalog import JsonSourceCatalog, SourceCatalog

__all__ = ["JsonSourceCatalog", "SourceCatalog"]
