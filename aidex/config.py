from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CATALOG_URL = "https://models.dev/api.json"
DEFAULT_FETCH_TIMEOUT = 10.0


def _setting_from_env_file(name: str, env_path: str | Path = ".env") -> str | None:
    path = Path(env_path)
    if not path.exists():
        return None
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        if key.strip() == name:
            return value.strip().strip('"').strip("'")
    return None


def _setting(name: str, env_path: str | Path) -> str | None:
    return os.getenv(name) or _setting_from_env_file(name, env_path)


def _to_timeout(value: str | None) -> float:
    if not value:
        return DEFAULT_FETCH_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        return DEFAULT_FETCH_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_FETCH_TIMEOUT


@dataclass(frozen=True, slots=True)
class Settings:
    catalog_url: str = DEFAULT_CATALOG_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    catalog_file: Path | None = None


def load_settings(env_path: str | Path = ".env", catalog_file: str | Path | None = None) -> Settings:
    """Build settings from the environment, then `.env`, then defaults.

    An explicit ``catalog_file`` (the ``--catalog-file`` option) wins over
    ``AIDEX_CATALOG_FILE``.
    """
    file_setting = catalog_file or _setting("AIDEX_CATALOG_FILE", env_path)
    return Settings(
        catalog_url=_setting("AIDEX_CATALOG_URL", env_path) or DEFAULT_CATALOG_URL,
        fetch_timeout=_to_timeout(_setting("AIDEX_FETCH_TIMEOUT", env_path)),
        catalog_file=Path(file_setting) if file_setting else None,
    )
