"""Pytest configuration for resources/tests.

Ensures the repository root is on sys.path so tests can import
helpers via absolute package path like `resources.tests.helpers`.
"""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from resources.tests.helpers.catalogs import record, write_catalog  # noqa: E402

from featuredocs.services.cache import FeatureCache  # noqa: E402
from featuredocs.services.catalog.source import CatalogSource  # noqa: E402
from featuredocs.services.resolution import ResolutionService, make_graph_loader  # noqa: E402
from featuredocs.services.workspace.registry import WorkspaceRegistry  # noqa: E402


@pytest.fixture
def catalog_dir(tmp_path):
    """A catalog directory with two ol versions and one wlp version."""
    directory = tmp_path / "catalogs"
    write_catalog(directory, "ol", "21.0.0.3", [
        record("servlet-4.0", enables=["ssl-1.0"], description="Java Servlets 4.0"),
        record("ssl-1.0", description="Secure Socket Layer"),
        record("jaxrs-2.1", enables=["servlet-4.0", "jaxrsClient-2.1"], description="Java RESTful Services 2.1"),
        record("jaxrsClient-2.1", description="Java RESTful Services Client 2.1"),
        record("webProfile-8.0", enables=["servlet-4.0", "jaxrs-2.1", "wasJmsServer-1.0"], description="Java EE Web Profile 8.0"),
    ])
    write_catalog(directory, "ol", "23.0.0.3", [
        record("servlet-6.0", enables=["ssl-1.0"], description="Jakarta Servlet 6.0"),
        record("ssl-1.0", description="Secure Socket Layer"),
        record("legacyOnly-1.0", description="Only in the default dataset"),
    ])
    write_catalog(directory, "wlp", "21.0.0.3", [
        record("servlet-4.0", enables=["ssl-1.0"], description="Java Servlets 4.0"),
        record("ssl-1.0", description="Secure Socket Layer"),
        record("wasJmsServer-1.0", description="Message Server"),
    ])
    return directory


@pytest.fixture
def catalog_source(catalog_dir):
    source = CatalogSource(catalog_dir, default_runtime="ol")
    yield source
    source.shutdown()


@pytest.fixture
def feature_cache(catalog_source):
    return FeatureCache(make_graph_loader(catalog_source), max_size=4)


@pytest.fixture
def workspace_registry(catalog_source):
    return WorkspaceRegistry(catalog_source.default_key)


@pytest.fixture
def resolution_service(catalog_source, feature_cache, workspace_registry):
    return ResolutionService(catalog_source, feature_cache, workspace_registry)
