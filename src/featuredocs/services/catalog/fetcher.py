"""
Remote catalog fetcher.

Downloads a feature catalog for one version/runtime pair over HTTP.
"""

import requests

from featuredocs.models.feature import CacheKey, Feature
from featuredocs.services.catalog.parser import parse_catalog_text
from featuredocs.utils.errors import CatalogParseError, NetworkFetchFailed
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)


class RemoteCatalogFetcher:
    """Fetch feature catalogs from URL templates keyed by runtime type."""

    def __init__(
        self,
        url_templates: dict[str, str],
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None
    ):
        self.url_templates = dict(url_templates)
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def supports(self, key: CacheKey) -> bool:
        return key.runtime_type in self.url_templates

    def url_for(self, key: CacheKey) -> str:
        return self.url_templates[key.runtime_type].format(version=key.version, runtime=key.runtime_type)

    def fetch(self, key: CacheKey) -> list[Feature]:
        """Fetch and parse the catalog for a key.

        Raises:
            NetworkFetchFailed: If the request or the payload fails
        """
        if not self.supports(key):
            raise NetworkFetchFailed(f"No remote catalog configured for runtime '{key.runtime_type}'")

        try:
            url = self.url_for(key)
        except (KeyError, IndexError, ValueError) as e:
            raise NetworkFetchFailed(
                f"Remote catalog URL template for '{key.runtime_type}' is invalid: {e!r}",
                context={"template": self.url_templates[key.runtime_type]},
            ) from e
        logger.debug(f"Fetching remote catalog {url}")
        try:
            response = self._session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
            return parse_catalog_text(response.content, source=url)
        except requests.RequestException as e:
            raise NetworkFetchFailed(f"Fetching {url} failed: {e}", context={"url": url}) from e
        except CatalogParseError as e:
            raise NetworkFetchFailed(f"Remote catalog at {url} is unusable: {e}", context={"url": url}) from e

    def close(self) -> None:
        self._session.close()
