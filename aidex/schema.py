from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

import pandas as pd

CANONICAL_COLUMNS = [
    "key",
    "name",
    "display_name",
    "provider",
    "mode",
    "knowledge_cutoff",
    "input_modalities",
    "output_modalities",
    "reasoning",
    "tool_call",
    "max_input_tokens",
    "max_output_tokens",
    "input_cost_per_token",
    "output_cost_per_token",
    "cache_read_cost_per_token",
    "cache_write_cost_per_token",
    "supports_function_calling",
    "supports_vision",
]

CatalogShape = Literal["provider_nested", "flat"]

DEFAULT_NESTED_MODE = "chat"


@dataclass(slots=True)
class NormalizedModel:
    key: str
    name: str
    provider: str | None = None
    display_name: str | None = None
    mode: str | None = None
    knowledge_cutoff: str | None = None
    input_modalities: tuple[str, ...] = field(default_factory=tuple)
    output_modalities: tuple[str, ...] = field(default_factory=tuple)
    reasoning: bool | None = None
    tool_call: bool | None = None
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    input_cost_per_token: float | None = None
    output_cost_per_token: float | None = None
    cache_read_cost_per_token: float | None = None
    cache_write_cost_per_token: float | None = None

    @property
    def supports_function_calling(self) -> bool | None:
        return self.tool_call

    @property
    def supports_vision(self) -> bool:
        return "image" in self.input_modalities

    def as_record(self) -> dict[str, Any]:
        record = asdict(self)
        record["input_modalities"] = list(self.input_modalities)
        record["output_modalities"] = list(self.output_modalities)
        record["supports_function_calling"] = self.supports_function_calling
        record["supports_vision"] = self.supports_vision
        return record


def _pick(record: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if "." in key:
            current: Any = record
            found = True
            for part in key.split("."):
                if isinstance(current, dict) and part in current:
                    current = current[part]
                else:
                    found = False
                    break
            if found and current is not None:
                return current
        elif key in record and record[key] is not None:
            return record[key]
    return None


def _to_cost(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        cost = float(value)
    except (TypeError, ValueError):
        return None
    return cost if cost >= 0 else None


def _to_tokens(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        tokens = int(float(value))
    except (TypeError, ValueError):
        return None
    return tokens if tokens >= 0 else None


def _to_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "y"}:
        return True
    if normalized in {"false", "0", "no", "n"}:
        return False
    return None


def _to_modalities(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v).strip().lower() for v in value if str(v).strip())


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pricing_and_limits(entry: dict[str, Any]) -> dict[str, Any]:
    # `cost`/`limit` is the current shape, `pricing`/`limits` the older one.
    # Each sub-field falls back on its own, so an empty or partial `cost`
    # object still picks up whatever `pricing` carries.
    return {
        "input_cost_per_token": _to_cost(_pick(entry, "cost.input", "pricing.input", "input_cost_per_token")),
        "output_cost_per_token": _to_cost(_pick(entry, "cost.output", "pricing.output", "output_cost_per_token")),
        "cache_read_cost_per_token": _to_cost(
            _pick(entry, "cost.cache_read", "pricing.cache_read", "cache_read_input_token_cost")
        ),
        "cache_write_cost_per_token": _to_cost(
            _pick(entry, "cost.cache_write", "pricing.cache_write", "cache_creation_input_token_cost")
        ),
        "max_input_tokens": _to_tokens(_pick(entry, "limit.context", "limits.context", "max_input_tokens")),
        "max_output_tokens": _to_tokens(
            _pick(entry, "limit.output", "limits.output", "max_output_tokens", "max_tokens")
        ),
    }


def normalize_entry(
    key: str,
    entry: dict[str, Any],
    *,
    provider: str | None = None,
    name: str | None = None,
    default_mode: str | None = None,
) -> NormalizedModel:
    """Flatten one raw catalog entry into a :class:`NormalizedModel`."""
    provider = provider or _to_text(_pick(entry, "provider", "litellm_provider"))
    name = name or key
    tool_call = _to_bool(_pick(entry, "tool_call", "supports_function_calling"))
    input_modalities = _to_modalities(_pick(entry, "input_modalities", "modalities.input"))
    if not input_modalities and _to_bool(entry.get("supports_vision")):
        input_modalities = ("text", "image")

    return NormalizedModel(
        key=key,
        name=name,
        provider=provider,
        display_name=_to_text(entry.get("name")) or name,
        mode=_to_text(entry.get("mode")) or default_mode,
        knowledge_cutoff=_to_text(_pick(entry, "knowledge", "knowledge_cutoff")),
        input_modalities=input_modalities,
        output_modalities=_to_modalities(_pick(entry, "output_modalities", "modalities.output")),
        reasoning=_to_bool(entry.get("reasoning")),
        tool_call=tool_call,
        **_pricing_and_limits(entry),
    )


def detect_shape(payload: dict[str, Any]) -> CatalogShape:
    """Tell a providerId -> {models: {...}} catalog from a flat name -> entry one."""
    for value in payload.values():
        if isinstance(value, dict) and isinstance(value.get("models"), dict):
            return "provider_nested"
    return "flat"


def normalize_catalog(payload: Any) -> dict[str, NormalizedModel]:
    """Flatten either catalog shape into ``key -> NormalizedModel``.

    Anything that is not a JSON object yields an empty catalog.
    """
    if not isinstance(payload, dict):
        return {}

    catalog: dict[str, NormalizedModel] = {}
    if detect_shape(payload) == "provider_nested":
        for provider_id, provider_info in payload.items():
            models = provider_info.get("models") if isinstance(provider_info, dict) else None
            if not isinstance(models, dict):
                continue
            for model_id, entry in models.items():
                if not isinstance(entry, dict):
                    continue
                # Composite key: several providers ship a model literally called "o3".
                key = f"{provider_id}/{model_id}"
                catalog[key] = normalize_entry(
                    key,
                    entry,
                    provider=str(provider_id),
                    name=_to_text(entry.get("id")) or str(model_id),
                    default_mode=DEFAULT_NESTED_MODE,
                )
        return catalog

    for name, entry in payload.items():
        if not isinstance(entry, dict):
            continue
        catalog[str(name)] = normalize_entry(str(name), entry)
    return catalog


def to_frame(models: list[NormalizedModel]) -> pd.DataFrame:
    frame = pd.DataFrame([model.as_record() for model in models])
    if frame.empty:
        frame = pd.DataFrame(columns=CANONICAL_COLUMNS)
    for col in CANONICAL_COLUMNS:
        if col not in frame.columns:
            frame[col] = None
    return frame[CANONICAL_COLUMNS]
