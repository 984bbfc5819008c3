"""
Detection of the runtime installed under a project root.

An Open Liberty install carries ``lib/versions/openliberty.properties``; a
WebSphere Liberty install carries ``lib/versions/WebSphereApplicationServer.properties``.
Both hold the product version and id.
"""

from pathlib import Path
from urllib.parse import unquote, urlparse

from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)

PROPERTY_FILES = {
    "openliberty.properties": "ol",
    "WebSphereApplicationServer.properties": "wlp",
}
PRODUCT_IDS = {
    "io.openliberty": "ol",
    "com.ibm.websphere.appserver": "wlp",
}
# Where an installed runtime usually sits relative to a project root
INSTALL_LOCATIONS = (
    "wlp",
    "target/liberty/wlp",
    "build/wlp",
)


def uri_to_path(uri: str) -> Path | None:
    parsed = urlparse(uri)
    if parsed.scheme not in ("", "file"):
        return None
    return Path(unquote(parsed.path))


def read_properties(path: Path) -> dict[str, str]:
    """Read a Java-style .properties file (key=value, '#'/'!' comments)."""
    properties: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = line.strip()
        if not line or line[0] in "#!":
            continue
        sep = min((i for i in (line.find("="), line.find(":")) if i >= 0), default=-1)
        if sep < 0:
            continue
        properties[line[:sep].strip()] = line[sep + 1:].strip()
    return properties


def detect_runtime(root_uri: str) -> tuple[str | None, str | None]:
    """Find the (version, runtime_type) of a runtime installed under a project root.

    Returns (None, None) when nothing is installed or the files are unreadable.
    """
    root = uri_to_path(root_uri)
    if root is None or not root.is_dir():
        return None, None

    for location in INSTALL_LOCATIONS:
        versions_dir = root / location / "lib" / "versions"
        for filename, runtime_type in PROPERTY_FILES.items():
            path = versions_dir / filename
            if not path.is_file():
                continue
            try:
                properties = read_properties(path)
            except OSError as e:
                logger.warning(f"Could not read runtime properties {path}: {e}")
                continue
            version = properties.get("com.ibm.websphere.productVersion")
            runtime_type = PRODUCT_IDS.get(properties.get("com.ibm.websphere.productId", ""), runtime_type)
            logger.debug(f"Detected runtime {version}/{runtime_type} under {root}")
            return version, runtime_type
    return None, None
