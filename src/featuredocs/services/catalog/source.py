"""
Catalog source service.

This module loads feature catalogs for a version/runtime pair from the bundled
datasets and, when enabled, refreshes them from a remote endpoint in the
background. Callers always get the most recent known-good data immediately.
"""

import re
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from featuredocs.core.interfaces import ICatalogSource
from featuredocs.models.feature import CacheKey, Feature
from featuredocs.services.catalog.fetcher import RemoteCatalogFetcher
from featuredocs.services.catalog.parser import parse_catalog_text
from featuredocs.utils.config import FeatureDocsSettings
from featuredocs.utils.errors import CatalogParseError, CatalogUnavailable, NetworkFetchFailed
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)

_DATASET_NAME = re.compile(r"^features-(?P<version>.+)\.json$")


def version_sort_key(version: str) -> tuple[int, ...]:
    """Order versions by their dotted integer components."""
    return tuple(int(part) for part in re.findall(r"\d+", version))


class CatalogSource(ICatalogSource):
    """Loads feature records from bundled datasets with optional remote refresh."""

    def __init__(
        self,
        catalog_directory: Path,
        default_runtime: str = "ol",
        default_version: str | None = None,
        fetcher: RemoteCatalogFetcher | None = None,
        refresh_enabled: bool = False,
        request_delay_ms: int = 0,
        max_remote_entries: int = 16,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the catalog source.

        Args:
            catalog_directory: Directory holding <runtime>/features-<version>.json files
            default_runtime: Runtime type used when none is known
            default_version: Version of the default dataset (latest bundled if None)
            fetcher: Remote fetcher used for refreshes
            refresh_enabled: Whether remote refresh is permitted at all
            request_delay_ms: Minimum time between fetch attempts for one key
            max_remote_entries: Number of keys whose fetched catalogs are kept
            clock: Monotonic clock, seconds
        """
        if request_delay_ms < 0:
            raise ValueError("request_delay_ms must be non-negative")
        if max_remote_entries < 1:
            raise ValueError("max_remote_entries must be at least 1")

        self.catalog_directory = Path(catalog_directory)
        self.default_runtime = default_runtime
        self.default_version = default_version or None
        self.fetcher = fetcher
        self.refresh_enabled = refresh_enabled
        self.request_delay_seconds = request_delay_ms / 1000.0
        self.max_remote_entries = max_remote_entries
        self._clock = clock

        self._lock = threading.RLock()
        # one parse per dataset file, shared by every key that resolves to it
        self._parsed: dict[Path, list[Feature]] = {}
        # fetched catalogs, least recently used first
        self._remote: OrderedDict[CacheKey, list[Feature]] = OrderedDict()
        self._inflight: dict[CacheKey, Future] = {}
        self._last_attempt: dict[CacheKey, float] = {}
        self._listeners: list[Callable[[CacheKey], None]] = []
        self._executor: ThreadPoolExecutor | None = None

        self._datasets = self._scan_datasets()
        logger.info(
            f"Catalog source initialized: {sum(len(v) for v in self._datasets.values())} datasets "
            f"in {self.catalog_directory}, refresh_enabled={refresh_enabled}"
        )

    @classmethod
    def from_settings(cls, settings: FeatureDocsSettings) -> "CatalogSource":
        fetcher = None
        if settings.remote_refresh_enabled:
            fetcher = RemoteCatalogFetcher(settings.remote_catalog_urls, settings.remote_timeout_seconds)
        return cls(
            catalog_directory=settings.get_catalog_directory(),
            default_runtime=settings.default_runtime,
            default_version=settings.default_version or None,
            fetcher=fetcher,
            refresh_enabled=settings.remote_refresh_enabled,
            request_delay_ms=settings.request_delay_ms,
            max_remote_entries=settings.cache_max_entries,
        )

    def _scan_datasets(self) -> dict[str, dict[str, Path]]:
        datasets: dict[str, dict[str, Path]] = {}
        if not self.catalog_directory.is_dir():
            logger.warning(f"Catalog directory not found: {self.catalog_directory}")
            return datasets

        for runtime_dir in sorted(p for p in self.catalog_directory.iterdir() if p.is_dir()):
            for path in sorted(runtime_dir.glob("features-*.json")):
                match = _DATASET_NAME.match(path.name)
                if match:
                    datasets.setdefault(runtime_dir.name, {})[match.group("version")] = path
        return datasets

    def available_keys(self) -> list[CacheKey]:
        """List the bundled datasets, ordered by runtime then version."""
        return [
            CacheKey(version, runtime_type)
            for runtime_type in sorted(self._datasets)
            for version in sorted(self._datasets[runtime_type], key=version_sort_key)
        ]

    def latest_key(self, runtime_type: str | None = None) -> CacheKey | None:
        runtime_type = runtime_type or self.default_runtime
        versions = self._datasets.get(runtime_type)
        if not versions:
            return None
        return CacheKey(max(versions, key=version_sort_key), runtime_type)

    def default_key(self) -> CacheKey:
        """The key of the default feature list."""
        if self.default_version:
            return CacheKey(self.default_version, self.default_runtime)
        latest = self.latest_key(self.default_runtime)
        if latest is None:
            return CacheKey("", self.default_runtime)
        return latest

    def add_refresh_listener(self, listener: Callable[[CacheKey], None]) -> None:
        """Register a callback invoked with a key whose data was refreshed."""
        with self._lock:
            self._listeners.append(listener)

    def load(self, version: str, runtime_type: str) -> list[Feature]:
        """Load the feature records for a version/runtime pair.

        Returns fetched data for the key when there is some, else the nearest
        bundled dataset. A key with no fetched data yet gets a background
        refresh, if enabled.

        Raises:
            CatalogUnavailable: If no local dataset or cached data can serve the key
        """
        key = CacheKey(version, runtime_type)
        with self._lock:
            features = self._remote.get(key)
            if features is not None:
                self._remote.move_to_end(key)
        fetched = features is not None
        try:
            if features is None:
                features = self._load_local(key)
        finally:
            if self.refresh_enabled and not fetched:
                self.refresh(version, runtime_type)
        return list(features)

    def lookup_feature(self, name: str, version: str | None = None, runtime_type: str | None = None) -> Feature | None:
        """Find a single feature record for the best-effort key, then the default dataset."""
        default = self.default_key()
        keys = [CacheKey(version or default.version, runtime_type or default.runtime_type), default]
        for key in dict.fromkeys(keys):
            try:
                features = self.load(*key)
            except CatalogUnavailable as e:
                logger.debug(f"No catalog for direct lookup of '{name}' under {key}: {e}")
                continue
            for feature in features:
                if feature.name == name:
                    return feature
        return None

    def _candidate_datasets(self, key: CacheKey) -> list[tuple[CacheKey, Path]]:
        """Datasets to try for a key, nearest first."""
        candidates: list[tuple[CacheKey, Path]] = []
        runtimes = [key.runtime_type]
        if key.runtime_type != self.default_runtime:
            runtimes.append(self.default_runtime)

        for runtime_type in runtimes:
            versions = self._datasets.get(runtime_type, {})
            others = sorted((v for v in versions if v != key.version), key=version_sort_key)
            exact = [key.version] if key.version in versions else []
            wanted = version_sort_key(key.version)
            if wanted:
                lower = [v for v in reversed(others) if version_sort_key(v) < wanted]
                higher = [v for v in others if version_sort_key(v) >= wanted]
            else:
                # unparseable version: newest first
                lower, higher = list(reversed(others)), []
            for version in exact + lower + higher:
                candidates.append((CacheKey(version, runtime_type), versions[version]))
        return candidates

    def _parse_dataset(self, path: Path) -> list[Feature]:
        with self._lock:
            features = self._parsed.get(path)
        if features is None:
            features = parse_catalog_text(path.read_bytes(), source=str(path))
            with self._lock:
                features = self._parsed.setdefault(path, features)
        return features

    def _load_local(self, key: CacheKey) -> list[Feature]:
        for dataset_key, path in self._candidate_datasets(key):
            try:
                features = self._parse_dataset(path)
            except (OSError, CatalogParseError) as e:
                logger.warning(f"Skipping unusable catalog {path}: {e}")
                continue

            features = [
                f for f in features
                if f.applies_to(
                    version=key.version if dataset_key == key else None,
                    runtime_type=key.runtime_type if dataset_key.runtime_type == key.runtime_type else None,
                )
            ]
            if dataset_key != key:
                logger.debug(f"No exact catalog for {key}, using nearest dataset {dataset_key}")
            return features

        raise CatalogUnavailable(
            f"No catalog data available for {key}",
            suggestions=["Check the catalog directory setting", "Enable remote refresh"],
            context={"version": key.version, "runtime_type": key.runtime_type},
        )

    def refresh(self, version: str, runtime_type: str) -> bool:
        """Schedule a background fetch for a key.

        Returns:
            True if a fetch was started, False if refresh is disabled, a fetch
            is already in flight, or the request delay has not yet elapsed
        """
        key = CacheKey(version, runtime_type)
        if not (self.refresh_enabled and self.fetcher and self.fetcher.supports(key)):
            return False

        with self._lock:
            if key in self._inflight:
                logger.debug(f"Catalog fetch for {key} already in flight")
                return False
            now = self._clock()
            # attempts older than the delay no longer throttle anything
            self._last_attempt = {
                k: t for k, t in self._last_attempt.items() if now - t < self.request_delay_seconds
            }
            if key in self._last_attempt:
                logger.debug(f"Catalog fetch for {key} throttled")
                return False
            self._last_attempt[key] = now
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="catalog-refresh")
            self._inflight[key] = self._executor.submit(self._fetch, key)
        return True

    def _current(self, key: CacheKey) -> list[Feature] | None:
        with self._lock:
            features = self._remote.get(key)
        if features is not None:
            return features
        try:
            return self._load_local(key)
        except CatalogUnavailable:
            return None

    def _store_remote(self, key: CacheKey, features: list[Feature]) -> bool:
        """Keep fetched data for a key; True if it differs from what was served before."""
        current = self._current(key)
        changed = current is None or {f.name: f for f in current} != {f.name: f for f in features}
        with self._lock:
            self._remote[key] = features
            self._remote.move_to_end(key)
            while len(self._remote) > self.max_remote_entries:
                evicted, _ = self._remote.popitem(last=False)
                logger.debug(f"Dropped fetched catalog for {evicted}")
        return changed

    def _fetch(self, key: CacheKey) -> list[Feature] | None:
        try:
            try:
                features = self.fetcher.fetch(key)
                if not features:
                    raise NetworkFetchFailed(f"Remote catalog for {key} has no features")
            except NetworkFetchFailed as e:
                logger.warning(f"Catalog refresh for {key} failed, keeping local data: {e}")
                return None
            except Exception as e:
                logger.error(f"Unexpected error refreshing catalog for {key}: {e}")
                return None

            if not self._store_remote(key, features):
                logger.debug(f"Remote catalog for {key} unchanged")
                return features

            logger.info(f"Refreshed catalog for {key}: {len(features)} features")
            with self._lock:
                listeners = list(self._listeners)
            for listener in listeners:
                try:
                    listener(key)
                except Exception as e:
                    logger.error(f"Catalog refresh listener failed for {key}: {e}")
            return features
        finally:
            with self._lock:
                self._inflight.pop(key, None)

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)
        if self.fetcher is not None:
            self.fetcher.close()
