"""
Core infrastructure for featuredocs.

This package contains the service interfaces and the dependency injection container.
"""

from .container import ServiceContainer
from .interfaces import (
    ICatalogSource,
    IFeatureCache,
    IResolutionService,
    IWorkspaceRegistry,
)

__all__ = [
    "ICatalogSource",
    "IFeatureCache",
    "IResolutionService",
    "IWorkspaceRegistry",
    "ServiceContainer"
]
