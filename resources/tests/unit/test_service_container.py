"""
Unit tests for the ServiceContainer dependency injection system.
"""

import pytest
from unittest.mock import Mock

from featuredocs.core.container import ServiceContainer
from featuredocs.core.interfaces import ICatalogSource, IFeatureCache, IResolutionService, IWorkspaceRegistry
from featuredocs.models.feature import CacheKey
from featuredocs.services.catalog.source import CatalogSource
from featuredocs.services.resolution import ResolutionService
from featuredocs.utils.config import FeatureDocsSettings
from featuredocs.utils.errors import ConfigurationError


class MockCache:
    """Mock cache that records invalidations."""

    def __init__(self, cache_max_entries: int):
        self.cache_max_entries = cache_max_entries
        self.invalidated = []

    def invalidate(self, key):
        self.invalidated.append(key)


class MockDependentService:
    """Mock service that depends on a registered interface and a setting."""

    def __init__(self, catalog: ICatalogSource, default_runtime: str, retries: int = 3):
        self.catalog = catalog
        self.default_runtime = default_runtime
        self.retries = retries


@pytest.fixture
def test_settings(catalog_dir):
    """Create test settings."""
    return FeatureDocsSettings(catalog_directory=str(catalog_dir), cache_max_entries=2)


@pytest.fixture
def container(test_settings):
    """Create a service container for testing."""
    return ServiceContainer(test_settings)


class TestServiceContainer:
    """Test the ServiceContainer class."""

    def test_container_initialization(self, test_settings):
        container = ServiceContainer(test_settings)

        assert container.settings == test_settings
        assert len(container._registrations) == 0
        assert len(container._singletons) == 0

    def test_singleton_behavior(self, container):
        container.register(IFeatureCache, MockCache, singleton=True)

        assert container.get(IFeatureCache) is container.get(IFeatureCache)

    def test_non_singleton_behavior(self, container):
        container.register(IFeatureCache, MockCache, singleton=False)

        assert container.get(IFeatureCache) is not container.get(IFeatureCache)

    def test_settings_injected_by_parameter_name(self, container):
        container.register(IFeatureCache, MockCache)

        assert container.get(IFeatureCache).cache_max_entries == 2

    def test_dependency_injection(self, container):
        catalog = Mock(spec=ICatalogSource)
        container.register(ICatalogSource, Mock, factory=lambda: catalog)
        container.register(MockDependentService, MockDependentService)

        service = container.get(MockDependentService)

        assert service.catalog is catalog
        assert service.default_runtime == "ol"
        assert service.retries == 3

    def test_unregistered_service_error(self, container):
        with pytest.raises(ConfigurationError, match="Service .* is not registered"):
            container.get(ICatalogSource)

    def test_circular_dependency_detection(self, container):
        container.register(ICatalogSource, Mock, factory=lambda: container.get(ICatalogSource))

        with pytest.raises(ConfigurationError, match="Circular dependency detected"):
            container.get(ICatalogSource)


class TestDefaultServices:
    """Test the default wiring of the feature documentation services."""

    def test_resolution_service_wired_from_settings(self, container):
        container.configure_default_services()

        service = container.get(IResolutionService)

        assert isinstance(service, ResolutionService)
        assert service.catalog is container.get(ICatalogSource)
        assert service.cache is container.get(IFeatureCache)
        assert service.registry is container.get(IWorkspaceRegistry)
        assert isinstance(service.catalog, CatalogSource)
        assert container.get(IFeatureCache).get_stats()["max_size"] == 2
        assert service.catalog.max_remote_entries == 2

    def test_end_to_end_lookup(self, container):
        container.configure_default_services()

        description = container.get(IResolutionService).resolve_feature("ssl-1.0", "21.0.0.3", "ol")

        assert description.enabled_by == ("servlet-4.0",)
        assert container.get(ICatalogSource).default_key() == CacheKey("23.0.0.3", "ol")

    def test_containers_do_not_share_caches(self, test_settings):
        with ServiceContainer(test_settings) as first, ServiceContainer(test_settings) as second:
            first.configure_default_services()
            second.configure_default_services()

            assert first.get(IFeatureCache) is not second.get(IFeatureCache)

    def test_dispose_shuts_down_singletons(self, container):
        catalog = Mock(spec=ICatalogSource)
        container.register(ICatalogSource, Mock, factory=lambda: catalog)
        container.get(ICatalogSource)

        container.dispose()

        catalog.shutdown.assert_called_once()
        with pytest.raises(ConfigurationError):
            container.get(ICatalogSource)
