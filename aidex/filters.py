from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from aidex.schema import NormalizedModel, to_frame

DEFAULT_SORT_FIELD = "knowledge_cutoff"

# True when a bigger value is better (sorted descending). Cost fields are
# cheaper-first. Declared per field, never inferred.
HIGHER_IS_BETTER = {
    "knowledge_cutoff": True,
    "max_input_tokens": True,
    "max_output_tokens": True,
    "input_cost_per_token": False,
    "output_cost_per_token": False,
    "cache_read_cost_per_token": False,
    "cache_write_cost_per_token": False,
}

SORT_ALIASES = {
    "max_tokens": "max_output_tokens",
    "knowledge": "knowledge_cutoff",
    "cutoff": "knowledge_cutoff",
    "context": "max_input_tokens",
    "cost": "input_cost_per_token",
}

_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_PARTIAL_DATE = re.compile(r"^\d{4}(-\d{2}){0,2}$")


class UnknownSortFieldError(ValueError):
    """Raised for a sort field without a declared polarity."""


def resolve_sort_field(name: str) -> str:
    normalized = name.strip().lower()
    normalized = SORT_ALIASES.get(normalized, normalized)
    if normalized not in HIGHER_IS_BETTER:
        raise UnknownSortFieldError(
            f"Unknown sort field {name!r}. Must be one of: {', '.join(sorted(HIGHER_IS_BETTER))}"
        )
    return normalized


def normalize_date(value: Any) -> str | None:
    """Bring ``YYYYMMDD``/``YYYY-MM``/``YYYY`` onto ``YYYY-MM-DD``; ``None`` if it is not a date."""
    if value is None:
        return None
    text = str(value).strip()
    compact = _COMPACT_DATE.match(text)
    if compact:
        text = "-".join(compact.groups())
    if not _PARTIAL_DATE.match(text):
        return None
    parts = text.split("-")
    parts += ["01"] * (3 - len(parts))
    return "-".join(parts)


def parse_cutoffs(values: pd.Series) -> pd.Series:
    return pd.to_datetime(values.map(normalize_date), format="%Y-%m-%d", errors="coerce")


@dataclass(slots=True)
class FilterOptions:
    provider: str | None = None
    tool_call: bool = False
    vision: bool = False
    reasoning: bool = False
    input_modalities: list[str] = field(default_factory=list)
    output_modalities: list[str] = field(default_factory=list)
    mode: str | None = None


def _provider_matches(model: NormalizedModel, needles: list[str]) -> bool:
    provider = (model.provider or "").lower()
    return any(needle in provider for needle in needles)


def apply_filters(candidates: list[NormalizedModel], options: FilterOptions) -> list[NormalizedModel]:
    """Keep candidates passing every set option (logical AND)."""
    results = list(candidates)

    if options.provider:
        needles = [p.strip().lower() for p in options.provider.split(",") if p.strip()]
        if needles:
            results = [m for m in results if _provider_matches(m, needles)]

    if options.tool_call:
        results = [m for m in results if m.supports_function_calling is True]

    if options.vision:
        results = [m for m in results if m.supports_vision is True]

    if options.reasoning:
        results = [m for m in results if m.reasoning is True]

    if options.input_modalities:
        wanted = {m.strip().lower() for m in options.input_modalities if m.strip()}
        results = [m for m in results if wanted <= set(m.input_modalities)]

    if options.output_modalities:
        wanted = {m.strip().lower() for m in options.output_modalities if m.strip()}
        results = [m for m in results if wanted <= set(m.output_modalities)]

    if options.mode:
        mode = options.mode.strip().lower()
        results = [m for m in results if (m.mode or "").lower() == mode]

    return results


def sort_models(models: list[NormalizedModel], sort_field: str | None = None) -> list[NormalizedModel]:
    """Stable sort by a declared field; no field means newest knowledge cutoff first.

    Missing numbers rank as ``0``, so an unknown cost sorts ahead of every real
    cost. Missing or unparseable cutoffs sort last.
    """
    if len(models) < 2:
        return list(models)

    sort_field = resolve_sort_field(sort_field) if sort_field else DEFAULT_SORT_FIELD
    frame = to_frame(models)

    if sort_field == "knowledge_cutoff":
        cutoffs = parse_cutoffs(frame["knowledge_cutoff"])
        # Newest first; NaT gets +inf so it lands at the end.
        rank = -cutoffs.map(lambda ts: ts.value if pd.notna(ts) else float("-inf")).astype("float64")
    else:
        values = pd.to_numeric(frame[sort_field], errors="coerce").fillna(0.0).astype("float64")
        rank = -values if HIGHER_IS_BETTER[sort_field] else values

    order = rank.reset_index(drop=True).sort_values(kind="mergesort").index
    return [models[i] for i in order]
