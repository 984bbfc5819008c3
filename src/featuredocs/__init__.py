"""
featuredocs - Liberty feature documentation for editor tooling.

This package provides:
- Feature catalogs per product version and runtime type
- Enablement graphs resolved per (version, runtime) and cached
- Workspace-aware resolution of feature descriptions and completions
"""

__version__ = "0.1.0"
