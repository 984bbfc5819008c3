"""
Catalog payload parsing.

Two payload shapes are accepted:

- the bundled dataset shape, an object with a ``features`` list whose records
  use ``name``/``displayName``/``shortDescription``/``appliesTo``/
  ``runtimeTypes``/``enables``;
- the native Liberty ``features.json`` shape, a list of records whose
  symbolic name and relationships live under ``wlpInformation``.
"""

import json
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from featuredocs.models.feature import Feature
from featuredocs.utils.errors import CatalogParseError
from featuredocs.utils.logging import setup_logging

logger = setup_logging(__name__)

_PRODUCT_VERSION = re.compile(r"productVersion=([\w.+\-]+)")


def parse_catalog_text(text: str | bytes, source: str = "<memory>") -> list[Feature]:
    """Parse raw JSON catalog text."""
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogParseError(f"Invalid catalog JSON in {source}: {e}", context={"source": source}) from e
    return parse_catalog_payload(payload, source)


def parse_catalog_payload(payload: Any, source: str = "<memory>") -> list[Feature]:
    """Convert a decoded catalog payload into feature records.

    Records without a symbolic name and non-public native records are skipped.

    Raises:
        CatalogParseError: If the payload has neither supported shape
    """
    if isinstance(payload, dict) and isinstance(payload.get("features"), list):
        records = [r for r in payload["features"] if isinstance(r, dict)]
    elif isinstance(payload, list):
        records = [_native_record(r) for r in payload]
    else:
        raise CatalogParseError(f"Unsupported catalog payload in {source}", context={"source": source})

    features: list[Feature] = []
    for record in records:
        if not record or not record.get("name"):
            continue
        try:
            features.append(Feature.model_validate(record))
        except PydanticValidationError as e:
            raise CatalogParseError(
                f"Invalid feature record '{record.get('name')}' in {source}: {e}",
                context={"source": source},
            ) from e

    logger.debug(f"Parsed {len(features)} features from {source}")
    return features


def _native_record(record: Any) -> dict[str, Any] | None:
    if not isinstance(record, dict):
        return None
    info = record.get("wlpInformation") or {}
    if info.get("visibility", "PUBLIC") != "PUBLIC":
        return None

    applies_to = info.get("appliesTo", [])
    if isinstance(applies_to, str):
        applies_to = _PRODUCT_VERSION.findall(applies_to)

    return {
        "name": info.get("shortName") or "",
        "displayName": record.get("name", ""),
        "shortDescription": record.get("shortDescription", ""),
        "appliesTo": applies_to,
        "runtimeTypes": info.get("runtimeTypes", []),
        "enables": info.get("enables", []),
    }
