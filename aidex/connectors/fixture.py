from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from aidex.connectors.models_dev import CatalogFetchError


class FixtureConnector:
    def __init__(self, fixture_path: str | Path) -> None:
        self.fixture_path = Path(fixture_path)

    def fetch(self) -> dict[str, Any]:
        try:
            payload = json.loads(self.fixture_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CatalogFetchError(f"cannot read catalog file {self.fixture_path}: {exc.strerror}") from exc
        except json.JSONDecodeError as exc:
            raise CatalogFetchError(f"catalog file {self.fixture_path} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise CatalogFetchError(f"catalog file {self.fixture_path} does not hold a JSON object")
        return payload
