"""
Workspace registry.

Tracks the project roots open in the editor and the feature graph key each one
resolves to. Contexts are immutable snapshots; every mutation swaps in a new
root table so readers never observe a partial update.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from urllib.parse import unquote

from featuredocs.core.interfaces import IWorkspaceRegistry
from featuredocs.models.feature import CacheKey
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)

KeyChangeListener = Callable[[str, CacheKey, CacheKey], None]
RuntimeDetector = Callable[[str], tuple[str | None, str | None]]


@dataclass(frozen=True)
class WorkspaceContext:
    """One project root and the graph key it resolved to."""

    uri: str
    version: str | None
    runtime_type: str | None
    cache_key: CacheKey


def normalize_uri(uri: str) -> str:
    normalized = unquote(uri.strip())
    return normalized.rstrip("/") or normalized


class WorkspaceRegistry(IWorkspaceRegistry):
    """Maps documents to project roots and project roots to cache keys."""

    def __init__(self, default_key: Callable[[], CacheKey], detect_runtime: RuntimeDetector | None = None):
        """Initialize the registry.

        Args:
            default_key: Provides the key whose parts fill in unknown versions/runtimes
            detect_runtime: Optional (root_uri) -> (version, runtime_type) detector
        """
        self._default_key = default_key
        self._detect_runtime = detect_runtime
        self._roots: dict[str, WorkspaceContext] = {}
        self._stale: set[str] = set()
        self._listeners: list[KeyChangeListener] = []
        self._lock = threading.Lock()

    def _key_for(self, version: str | None, runtime_type: str | None) -> CacheKey:
        default = self._default_key()
        return CacheKey(version or default.version, runtime_type or default.runtime_type)

    def _detect(self, uri: str, version: str | None, runtime_type: str | None) -> tuple[str | None, str | None]:
        if (version and runtime_type) or self._detect_runtime is None:
            return version, runtime_type
        detected_version, detected_runtime = self._detect_runtime(uri)
        return version or detected_version, runtime_type or detected_runtime

    def add_listener(self, listener: KeyChangeListener) -> None:
        """Register a callback invoked with (uri, old_key, new_key) after a root's key is recomputed."""
        with self._lock:
            self._listeners.append(listener)

    def add_root(self, uri: str, version: str | None = None, runtime_type: str | None = None) -> WorkspaceContext:
        """Register a project root (or replace an existing registration)."""
        root = normalize_uri(uri)
        version, runtime_type = self._detect(root, version, runtime_type)
        context = WorkspaceContext(root, version, runtime_type, self._key_for(version, runtime_type))
        with self._lock:
            self._roots = {**self._roots, root: context}
            self._stale.discard(root)
        logger.info(f"Workspace added: {root} -> {context.cache_key}")
        return context

    def remove_root(self, uri: str) -> bool:
        root = normalize_uri(uri)
        with self._lock:
            if root not in self._roots:
                return False
            self._roots = {k: v for k, v in self._roots.items() if k != root}
            self._stale.discard(root)
        logger.info(f"Workspace removed: {root}")
        return True

    def configuration_changed(self, uri: str, version: str | None = None, runtime_type: str | None = None) -> bool:
        """Record a project configuration change; the key is recomputed on next use.

        Returns:
            False if the root is unknown
        """
        root = normalize_uri(uri)
        version, runtime_type = self._detect(root, version, runtime_type)
        with self._lock:
            current = self._roots.get(root)
            if current is None:
                logger.debug(f"Configuration change for unknown workspace {root} ignored")
                return False
            updated = replace(current, version=version, runtime_type=runtime_type)
            self._roots = {**self._roots, root: updated}
            self._stale.add(root)
        logger.debug(f"Workspace configuration changed: {root} ({version}/{runtime_type})")
        return True

    def resolve(self, document_uri: str) -> WorkspaceContext | None:
        """Find the workspace owning a document by longest root prefix."""
        if not document_uri:
            return None
        uri = normalize_uri(document_uri)
        roots = self._roots
        best: WorkspaceContext | None = None
        for root, context in roots.items():
            if uri == root or uri.startswith(root + "/"):
                if best is None or len(root) > len(best.uri):
                    best = context
        return best

    def context_for(self, workspace: WorkspaceContext) -> CacheKey:
        """Get the cache key for a workspace, recomputing it after a configuration change."""
        with self._lock:
            current = self._roots.get(workspace.uri)
            if current is None:
                return workspace.cache_key
            if workspace.uri not in self._stale:
                return current.cache_key

            self._stale.discard(workspace.uri)
            old_key = current.cache_key
            new_key = self._key_for(current.version, current.runtime_type)
            if new_key == old_key:
                return new_key
            self._roots = {**self._roots, workspace.uri: replace(current, cache_key=new_key)}
            listeners = list(self._listeners)

        logger.info(f"Workspace {workspace.uri} recomputed key {new_key} (was {old_key})")
        for listener in listeners:
            try:
                listener(workspace.uri, old_key, new_key)
            except Exception as e:
                logger.error(f"Workspace key listener failed for {workspace.uri}: {e}")
        return new_key

    def roots(self) -> list[WorkspaceContext]:
        return sorted(self._roots.values(), key=lambda c: c.uri)
