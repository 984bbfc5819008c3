"""
Custom exception classes for featuredocs.
"""

from typing import Any


class FeatureDocsError(Exception):
    """Base exception for all featuredocs errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None
    ):
        """Initialize the error with enhanced information.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            suggestions: List of suggested remediation steps
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code or self.__class__.__name__.upper()
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigurationError(FeatureDocsError):
    """Raised when there is an issue with the application configuration."""
    pass


class ServiceError(FeatureDocsError):
    """Base exception for errors occurring in service layers."""
    pass


# Catalog errors
class CatalogError(ServiceError):
    """Base exception for feature catalog errors."""
    pass


class CatalogUnavailable(CatalogError):
    """Raised when no usable catalog data exists for a version/runtime pair."""
    pass


class CatalogParseError(CatalogError):
    """Raised when catalog data cannot be parsed into feature records."""
    pass


class NetworkFetchFailed(CatalogError):
    """Raised when a remote catalog fetch fails."""
    pass


# Graph errors
class GraphBuildError(ServiceError):
    """Base exception for feature graph construction errors."""
    pass


class DuplicateFeatureName(GraphBuildError):
    """Raised when two catalog records share a symbolic name within one graph."""

    def __init__(self, name: str, version: str | None = None, runtime_type: str | None = None):
        super().__init__(
            f"Duplicate feature name in catalog: {name}",
            suggestions=["Remove or rename the duplicated record in the catalog dataset"],
            context={"name": name, "version": version, "runtime_type": runtime_type},
        )
        self.name = name
