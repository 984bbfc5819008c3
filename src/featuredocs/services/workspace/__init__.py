"""
Project root tracking.
"""

from .registry import WorkspaceContext, WorkspaceRegistry

__all__ = ["WorkspaceContext", "WorkspaceRegistry"]
