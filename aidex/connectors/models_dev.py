from __future__ import annotations

import http.client
import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from aidex.config import DEFAULT_CATALOG_URL, DEFAULT_FETCH_TIMEOUT


class CatalogFetchError(RuntimeError):
    """Raised when the catalog cannot be fetched or decoded."""


@dataclass(slots=True)
class ModelsDevConnector:
    endpoint: str = DEFAULT_CATALOG_URL
    timeout: float = DEFAULT_FETCH_TIMEOUT

    def fetch(self) -> dict[str, Any]:
        request = Request(self.endpoint, headers={"accept": "application/json"}, method="GET")
        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    raise CatalogFetchError(f"catalog HTTP error: {status}")
                payload = json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            raise CatalogFetchError(f"catalog HTTP error: {exc.code}") from exc
        except URLError as exc:
            raise CatalogFetchError(f"catalog connection error: {exc.reason}") from exc
        except TimeoutError as exc:
            raise CatalogFetchError(f"catalog fetch timed out after {self.timeout}s") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CatalogFetchError("catalog returned invalid JSON") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise CatalogFetchError(f"catalog connection error: {exc}") from exc

        if not isinstance(payload, dict):
            raise CatalogFetchError("catalog payload is not a JSON object")
        return payload
