"""
Dependency injection container for featuredocs.

This module provides a service container that manages dependencies and service lifecycle,
so that each container owns a fresh set of caches instead of process-wide singletons.
"""

import inspect
from typing import Any, Dict, Type, TypeVar, Callable, Optional

from featuredocs.utils.config import FeatureDocsSettings
from featuredocs.utils.logging import setup_logging
from featuredocs.utils.errors import ConfigurationError

logger = setup_logging(__name__)

T = TypeVar('T')


class ServiceContainer:
    """Dependency injection container for managing services and their dependencies."""

    def __init__(self, settings: FeatureDocsSettings):
        """Initialize the service container.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self._singletons: Dict[Type, Any] = {}
        self._registrations: Dict[Type, 'ServiceRegistration'] = {}
        self._building: set = set()  # Track services being built to prevent cycles

    def register(
        self,
        interface: Type[T],
        implementation: Type[T],
        singleton: bool = True,
        factory: Optional[Callable[[], T]] = None
    ) -> None:
        """Register a service with the container.

        Args:
            interface: The interface/abstract class
            implementation: The concrete implementation
            singleton: Whether to treat as singleton
            factory: Optional factory function for custom instantiation
        """
        logger.debug(f"Registering {interface.__name__} -> {implementation.__name__}")

        self._registrations[interface] = ServiceRegistration(
            interface=interface,
            implementation=implementation,
            singleton=singleton,
            factory=factory
        )

    def get(self, interface: Type[T]) -> T:
        """Get a service instance.

        Args:
            interface: The interface/abstract class to get

        Returns:
            Service instance

        Raises:
            ConfigurationError: If service is not registered or circular dependency detected
        """
        if interface in self._building:
            raise ConfigurationError(f"Circular dependency detected for {interface.__name__}")

        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._registrations:
            raise ConfigurationError(f"Service {interface.__name__} is not registered")

        registration = self._registrations[interface]
        self._building.add(interface)
        try:
            if registration.factory:
                instance = registration.factory()
            else:
                instance = self._create_instance(registration.implementation)

            if registration.singleton:
                self._singletons[interface] = instance

            logger.debug(f"Created instance of {interface.__name__}")
            return instance
        except Exception as e:
            logger.error(f"Failed to create instance of {interface.__name__}: {e}")
            raise
        finally:
            self._building.discard(interface)

    def _create_instance(self, implementation: Type[T]) -> T:
        """Create an instance with dependency injection.

        Constructor parameters annotated with a registered interface are
        resolved from the container; parameters named after a setting are
        taken from the settings.
        """
        signature = inspect.signature(implementation.__init__)

        args = {}
        for param_name, param in signature.parameters.items():
            if param_name == 'self':
                continue

            if param.annotation in self._registrations or param.annotation in self._singletons:
                args[param_name] = self.get(param.annotation)
            elif param_name == 'settings':
                args[param_name] = self.settings
            elif param_name in FeatureDocsSettings.model_fields:
                args[param_name] = getattr(self.settings, param_name)
            elif param.default is not inspect.Parameter.empty:
                continue
            else:
                logger.warning(f"Unknown dependency: {param_name} ({param.annotation})")

        return implementation(**args)

    def configure_default_services(self) -> None:
        """Configure default service registrations."""
        from featuredocs.core.interfaces import (
            ICatalogSource, IFeatureCache, IWorkspaceRegistry, IResolutionService
        )
        from featuredocs.services.cache import FeatureCache
        from featuredocs.services.catalog.source import CatalogSource
        from featuredocs.services.resolution import ResolutionService, make_graph_loader
        from featuredocs.services.workspace.registry import WorkspaceRegistry
        from featuredocs.services.workspace.runtime_info import detect_runtime

        self.register(
            ICatalogSource, CatalogSource,
            factory=lambda: CatalogSource.from_settings(self.settings)
        )
        self.register(
            IFeatureCache, FeatureCache,
            factory=lambda: FeatureCache(
                make_graph_loader(self.get(ICatalogSource)),
                max_size=self.settings.cache_max_entries,
            )
        )
        self.register(
            IWorkspaceRegistry, WorkspaceRegistry,
            factory=lambda: WorkspaceRegistry(self.get(ICatalogSource).default_key, detect_runtime)
        )
        self.register(IResolutionService, ResolutionService)

        logger.info(f"Service configuration completed. Total services: {len(self._registrations)}")

    def dispose(self) -> None:
        """Dispose of all services and clean up resources."""
        logger.info("Disposing service container")

        for interface, instance in self._singletons.items():
            if hasattr(instance, 'shutdown'):
                try:
                    instance.shutdown()
                    logger.debug(f"Shut down service {interface.__name__}")
                except Exception as e:
                    logger.error(f"Error shutting down service {interface.__name__}: {e}")

        self._singletons.clear()
        self._registrations.clear()
        self._building.clear()

        logger.info("Service container disposed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.dispose()


class ServiceRegistration:
    """Represents a service registration in the container."""

    def __init__(
        self,
        interface: Type,
        implementation: Type,
        singleton: bool = True,
        factory: Optional[Callable] = None
    ):
        self.interface = interface
        self.implementation = implementation
        self.singleton = singleton
        self.factory = factory
