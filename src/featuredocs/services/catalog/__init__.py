"""
Catalog loading: bundled datasets, payload parsing and remote refresh.
"""

from .source import CatalogSource

__all__ = ["CatalogSource"]
