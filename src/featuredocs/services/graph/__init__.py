"""
Feature enablement graph.
"""

from .builder import FeatureGraphBuilder
from .feature_graph import FeatureListGraph

__all__ = ["FeatureGraphBuilder", "FeatureListGraph"]
