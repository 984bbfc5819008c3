"""
Resolved feature graph for one version/runtime pair.
"""

from collections.abc import Iterator, Mapping

import networkx as nx

from featuredocs.models.feature import CacheKey, FeatureListNode


class FeatureListGraph(Mapping[str, FeatureListNode]):
    """Read-only mapping from symbolic feature name to its graph node.

    Edges point from a feature to the features it enables.
    """

    def __init__(self, key: CacheKey | None, nodes: dict[str, FeatureListNode], digraph: nx.DiGraph):
        self.key = key
        self._nodes = dict(nodes)
        self._digraph = nx.freeze(digraph)

    def __getitem__(self, name: str) -> FeatureListNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"FeatureListGraph(key={self.key}, features={len(self._nodes)})"

    def enabled_by(self, name: str) -> frozenset[str]:
        node = self._nodes.get(name)
        return node.enabled_by if node else frozenset()

    def enables(self, name: str) -> frozenset[str]:
        node = self._nodes.get(name)
        return node.enables_features if node else frozenset()

    def all_enabled_by(self, name: str) -> frozenset[str]:
        """Every feature that enables this one directly or transitively."""
        if name not in self._nodes:
            return frozenset()
        return frozenset(nx.ancestors(self._digraph, name)) - {name}

    def all_enables(self, name: str) -> frozenset[str]:
        """Every feature this one enables directly or transitively."""
        if name not in self._nodes:
            return frozenset()
        return frozenset(nx.descendants(self._digraph, name)) - {name}

    def edge_count(self) -> int:
        return self._digraph.number_of_edges()
