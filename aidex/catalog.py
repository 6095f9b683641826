from __future__ import annotations

from typing import Any

from aidex.config import Settings
from aidex.connectors.fixture import FixtureConnector
from aidex.connectors.models_dev import CatalogFetchError, ModelsDevConnector
from aidex.logging import get_logger
from aidex.schema import NormalizedModel, normalize_catalog

log = get_logger("aidex.catalog")


def choose_source(settings: Settings) -> tuple[str, FixtureConnector | ModelsDevConnector]:
    if settings.catalog_file is not None:
        return "file", FixtureConnector(settings.catalog_file)
    return "models.dev", ModelsDevConnector(endpoint=settings.catalog_url, timeout=settings.fetch_timeout)


def fetch_payload(settings: Settings) -> tuple[str, dict[str, Any]]:
    source, connector = choose_source(settings)
    try:
        return source, connector.fetch()
    except CatalogFetchError as exc:
        log.warning("catalog_unavailable", source=source, error=str(exc))
        return source, {}


def load_catalog(settings: Settings, *, verbose: int = 0) -> dict[str, NormalizedModel]:
    """Fetch and normalize the catalog; a failed fetch degrades to ``{}``."""
    source, payload = fetch_payload(settings)
    catalog = normalize_catalog(payload)
    if verbose >= 1:
        log.info("catalog_loaded", source=source, models=len(catalog))
    return catalog
