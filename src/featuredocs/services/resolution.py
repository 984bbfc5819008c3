"""
Feature resolution service.

The public facade used by editor tooling. A request is mapped to a cache key by
trying, in order, the workspace owning the document, the explicitly requested
version/runtime and finally the default feature list. The key's graph supplies
the description and relationships; when the graph has no entry for the name a
direct catalog lookup supplies the description alone.
"""

import asyncio
from collections.abc import Callable

from featuredocs.core.interfaces import ICatalogSource, IFeatureCache, IResolutionService, IWorkspaceRegistry
from featuredocs.models.feature import CacheKey, CompletionEntry, Feature, FeatureDescription
from featuredocs.services.graph.builder import FeatureGraphBuilder
from featuredocs.services.graph.feature_graph import FeatureListGraph
from featuredocs.utils.errors import FeatureDocsError
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)

KeyStrategy = Callable[[str | None, str | None, str | None], CacheKey | None]


def make_graph_loader(catalog: ICatalogSource, builder: FeatureGraphBuilder | None = None) -> Callable[[CacheKey], FeatureListGraph]:
    """Build function for FeatureCache: load the key's catalog and build its graph."""
    builder = builder or FeatureGraphBuilder()

    def load_graph(key: CacheKey) -> FeatureListGraph:
        return builder.build(catalog.load(key.version, key.runtime_type), key)

    return load_graph


class ResolutionService(IResolutionService):
    """Resolves feature documentation with workspace, explicit and default fallbacks."""

    def __init__(
        self,
        catalog: ICatalogSource,
        cache: IFeatureCache,
        registry: IWorkspaceRegistry,
        invalidate_on_config_change: bool = False,
        build_timeout: float | None = None
    ):
        """Initialize the resolution service.

        Args:
            catalog: Catalog source for direct lookups and the default key
            cache: Graph cache, built from the same catalog
            registry: Registry of open project roots
            invalidate_on_config_change: Drop a workspace's previous graph when its key is recomputed
            build_timeout: Seconds a lookup waits for a graph build before degrading
        """
        self.catalog = catalog
        self.cache = cache
        self.registry = registry
        self.build_timeout = build_timeout
        self._key_strategies: list[KeyStrategy] = [
            self._key_from_workspace,
            self._key_from_explicit,
            self._key_from_default,
        ]

        catalog.add_refresh_listener(cache.invalidate)
        if invalidate_on_config_change:
            registry.add_listener(self._on_workspace_key_change)

    def _on_workspace_key_change(self, uri: str, old_key: CacheKey, new_key: CacheKey) -> None:
        self.cache.invalidate(old_key)

    def _key_from_workspace(self, version: str | None, runtime_type: str | None, document_uri: str | None) -> CacheKey | None:
        if not document_uri:
            return None
        workspace = self.registry.resolve(document_uri)
        if workspace is None:
            logger.warning(f"Could not get workspace for: {document_uri}")
            return None
        return self.registry.context_for(workspace)

    def _key_from_explicit(self, version: str | None, runtime_type: str | None, document_uri: str | None) -> CacheKey | None:
        if not (version or runtime_type):
            return None
        default = self.catalog.default_key()
        return CacheKey(version or default.version, runtime_type or default.runtime_type)

    def _key_from_default(self, version: str | None, runtime_type: str | None, document_uri: str | None) -> CacheKey | None:
        logger.debug("Using the default feature list")
        return self.catalog.default_key()

    def resolve_key(
        self,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None,
        document_uri: str | None = None
    ) -> CacheKey:
        """Pick the cache key for a request from the first strategy that yields one."""
        for strategy in self._key_strategies:
            key = strategy(explicit_version, explicit_runtime, document_uri)
            if key is not None:
                return key
        return self.catalog.default_key()

    def _graph(self, key: CacheKey) -> FeatureListGraph | None:
        try:
            return self.cache.get_or_build(key, timeout=self.build_timeout)
        except (FeatureDocsError, TimeoutError) as e:
            logger.warning(f"Feature list for {key} unavailable: {e}")
            return None

    def resolve_feature(
        self,
        name: str,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None,
        document_uri: str | None = None
    ) -> FeatureDescription | None:
        """Resolve documentation for a feature name.

        Returns:
            The description with sorted relationship lists, a description without
            relationships when only the catalog knows the name, or None when the
            name is unknown everywhere
        """
        name = (name or "").strip()
        if not name:
            return None

        try:
            key = self.resolve_key(explicit_version, explicit_runtime, document_uri)
            graph = self._graph(key)
            node = graph.get(name) if graph is not None else None
            if node is not None:
                return FeatureDescription(
                    name=node.name,
                    short_description=node.description,
                    enabled_by=tuple(sorted(node.enabled_by)),
                    enables_features=tuple(sorted(node.enables_features)),
                )

            logger.warning(f"Could not get full description for feature: {name} from the {key} feature list")
            feature = self.catalog.lookup_feature(name, key.version, key.runtime_type)
            if feature is None:
                logger.debug(f"No documentation available for feature: {name}")
                return None
            return FeatureDescription(name=feature.name, short_description=feature.short_description)
        except Exception as e:
            logger.error(f"Resolving feature '{name}' failed: {e}")
            return None

    def list_completions(
        self,
        document_uri: str | None = None,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None
    ) -> list[CompletionEntry]:
        """List every feature resolvable under a context, ordered by label."""
        try:
            key = self.resolve_key(explicit_version, explicit_runtime, document_uri)
            graph = self._graph(key)
            if graph is not None:
                features: list[Feature] = [node.feature for node in graph.values()]
            else:
                try:
                    records = self.catalog.load(key.version, key.runtime_type)
                except FeatureDocsError as e:
                    logger.warning(f"No features to list for {key}: {e}")
                    return []
                # first record wins when the catalog repeats a name
                features = list({f.name: f for f in reversed(records)}.values())
            return sorted(
                (CompletionEntry(label=f.name, documentation=f.short_description) for f in features),
                key=lambda entry: entry.label,
            )
        except Exception as e:
            logger.error(f"Listing features failed: {e}")
            return []

    async def resolve_feature_async(
        self,
        name: str,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None,
        document_uri: str | None = None
    ) -> FeatureDescription | None:
        """Run resolve_feature in a worker thread; cancelling the await leaves shared builds running."""
        return await asyncio.to_thread(self.resolve_feature, name, explicit_version, explicit_runtime, document_uri)

    async def list_completions_async(
        self,
        document_uri: str | None = None,
        explicit_version: str | None = None,
        explicit_runtime: str | None = None
    ) -> list[CompletionEntry]:
        return await asyncio.to_thread(self.list_completions, document_uri, explicit_version, explicit_runtime)

    def shutdown(self) -> None:
        self.catalog.shutdown()
