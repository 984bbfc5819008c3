"""
Feature catalog, graph, cache, workspace and resolution services.
"""
