"""
Feature graph construction.

Builds a FeatureListGraph from catalog records in two passes: the first
inserts one node per feature keyed by symbolic name, the second resolves
every declared enablement against that index and records the edge on both
ends.
"""

from collections.abc import Iterable

import networkx as nx

from featuredocs.models.feature import CacheKey, Feature, FeatureListNode
from featuredocs.services.graph.feature_graph import FeatureListGraph
from featuredocs.utils.errors import DuplicateFeatureName
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)


class FeatureGraphBuilder:
    """Turns catalog records into an immutable enablement graph."""

    def build(self, features: Iterable[Feature], key: CacheKey | None = None) -> FeatureListGraph:
        """Build the graph for one version/runtime pair.

        Args:
            features: Catalog records for the pair
            key: Cache key the graph belongs to

        Returns:
            The resolved graph

        Raises:
            DuplicateFeatureName: If two records share a symbolic name
        """
        digraph = nx.DiGraph()
        records: dict[str, Feature] = {}

        for feature in features:
            if feature.name in records:
                raise DuplicateFeatureName(
                    feature.name,
                    version=key.version if key else None,
                    runtime_type=key.runtime_type if key else None,
                )
            records[feature.name] = feature
            digraph.add_node(feature.name)

        dropped = 0
        for feature in records.values():
            for target in feature.enables:
                if target in records:
                    digraph.add_edge(feature.name, target)
                else:
                    dropped += 1
                    logger.debug(f"{feature.name} enables unknown feature {target}, dropping")

        nodes = {
            name: FeatureListNode(
                feature=feature,
                enabled_by=frozenset(digraph.predecessors(name)),
                enables_features=frozenset(digraph.successors(name)),
            )
            for name, feature in records.items()
        }

        graph = FeatureListGraph(key, nodes, digraph)
        logger.debug(
            f"Built feature graph for {key}: {len(graph)} features, "
            f"{graph.edge_count()} edges, {dropped} unresolved references"
        )
        return graph
