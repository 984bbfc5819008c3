"""
Service interfaces for dependency injection and modularity.

This module defines abstract base classes for the major services in the system,
enabling loose coupling and easier testing.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from featuredocs.models.feature import CacheKey, CompletionEntry, Feature, FeatureDescription


class ICatalogSource(ABC):
    """Abstract interface for feature catalog loading."""

    @abstractmethod
    def load(self, version: str, runtime_type: str) -> list[Feature]:
        """Load the feature records for a version/runtime pair."""
        pass

    @abstractmethod
    def lookup_feature(self, name: str, version: str | None = None, runtime_type: str | None = None) -> Feature | None:
        """Look up a single feature record without building a graph."""
        pass

    @abstractmethod
    def default_key(self) -> CacheKey:
        """Get the key of the default feature list."""
        pass

    @abstractmethod
    def refresh(self, version: str, runtime_type: str) -> bool:
        """Request a remote refresh for a version/runtime pair."""
        pass

    def add_refresh_listener(self, listener: Callable[[CacheKey], None]) -> None:
        """Register a callback for refreshed keys."""
        pass

    def shutdown(self) -> None:
        """Release background resources."""
        pass


class IFeatureCache(ABC):
    """Abstract interface for the feature graph cache."""

    @abstractmethod
    def get_or_build(self, key: CacheKey, timeout: float | None = None):
        """Get the graph for a key, building it at most once concurrently."""
        pass

    @abstractmethod
    def invalidate(self, key: CacheKey) -> bool:
        """Force a rebuild of a key on next access."""
        pass

    @abstractmethod
    def get_stats(self) -> dict:
        """Get cache statistics."""
        pass


class IWorkspaceRegistry(ABC):
    """Abstract interface for tracking open project roots."""

    @abstractmethod
    def resolve(self, document_uri: str):
        """Map a document to the workspace that owns it, or None."""
        pass

    @abstractmethod
    def context_for(self, workspace) -> CacheKey:
        """Get the cache key for a workspace."""
        pass

    def add_listener(self, listener: Callable[[str, CacheKey, CacheKey], None]) -> None:
        """Register a callback for recomputed workspace keys."""
        pass


class IResolutionService(ABC):
    """Abstract interface for the feature documentation facade."""

    @abstractmethod
    def resolve_feature(
        self,
        name: str,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None,
        document_uri: str | None = None
    ) -> FeatureDescription | None:
        """Resolve documentation for a feature name."""
        pass

    @abstractmethod
    def list_completions(
        self,
        document_uri: str | None = None,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None
    ) -> list[CompletionEntry]:
        """List every feature resolvable under a context."""
        pass
