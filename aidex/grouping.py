from __future__ import annotations

import re
from typing import Callable

from aidex.filters import normalize_date, sort_models
from aidex.logging import get_logger
from aidex.schema import NormalizedModel
from aidex.series import OTHER, UNKNOWN, RuleTable, default_rules, get_model_series

log = get_logger("aidex.grouping")

GROUP_BY_CHOICES = ("type", "provider", "mode", "series")

TYPE_KEYWORDS = ("preview", "vision", "realtime", "audio")
LATEST_BUCKET = "latest"

DATE_SUFFIX = re.compile(r"[-_](\d{4}-\d{2}-\d{2}|\d{8})(?:$|[-_])")


def split_version(key: str) -> tuple[str, str] | None:
    """Split ``"acme/gpt-x-2024-06-01"`` into ``("acme/gpt-x", "2024-06-01")``.

    Returns ``None`` when there is no dated suffix or nothing precedes it.
    """
    match = DATE_SUFFIX.search(key)
    if not match:
        return None
    base = key[: match.start()]
    if not base:
        return None
    return base, normalize_date(match.group(1)) or match.group(1)


def collapse_versions(models: list[NormalizedModel]) -> list[NormalizedModel]:
    """Keep only the newest dated snapshot per base name, preserving input order."""
    latest: dict[str, tuple[str, str]] = {}
    for model in models:
        version = split_version(model.key)
        if version is None:
            continue
        base, date = version
        current = latest.get(base)
        if current is None or date > current[1]:
            latest[base] = (model.key, date)

    keep = {key for key, _ in latest.values()}
    return [m for m in models if split_version(m.key) is None or m.key in keep]


def _bucket(models: list[NormalizedModel], label_for: Callable[[NormalizedModel], str]) -> dict[str, list[NormalizedModel]]:
    groups: dict[str, list[NormalizedModel]] = {}
    for model in models:
        groups.setdefault(label_for(model), []).append(model)
    return groups


def group_by_type(models: list[NormalizedModel]) -> dict[str, list[NormalizedModel]]:
    groups: dict[str, list[NormalizedModel]] = {LATEST_BUCKET: []}
    groups.update({keyword: [] for keyword in TYPE_KEYWORDS})
    for model in models:
        name = model.name.lower()
        matched = [keyword for keyword in TYPE_KEYWORDS if keyword in name]
        if not matched:
            groups[LATEST_BUCKET].append(model)
        # A name like "gpt-4o-audio-preview" is listed under each of its keywords.
        for keyword in matched:
            groups[keyword].append(model)
    return groups


def group_by_series(models: list[NormalizedModel], rules: RuleTable) -> dict[str, list[NormalizedModel]]:
    groups = _bucket(models, lambda m: get_model_series(m.name, m.provider, rules))

    ordered: list[str] = []
    for model in models:
        for label in rules.series_order(model.provider):
            if label in groups and label not in ordered:
                ordered.append(label)
    tail = [OTHER, UNKNOWN]
    ordered += [label for label in groups if label not in ordered and label not in tail]
    ordered += [label for label in tail if label in groups]
    return {label: groups[label] for label in ordered}


def group_models(
    models: list[NormalizedModel],
    strategy: str,
    *,
    sort_field: str | None = None,
    show_all: bool = False,
    rules: RuleTable | None = None,
    verbose: int = 0,
) -> tuple[dict[str, list[NormalizedModel]], int]:
    """Partition ``models`` into named buckets.

    Empty buckets are dropped. Inside each bucket the default cutoff sort is
    re-applied unless ``sort_field`` was given, and older snapshots are
    collapsed unless ``show_all`` is set. Returns the buckets and the number
    of entries hidden by collapsing.
    """
    if strategy == "type":
        groups = group_by_type(models)
    elif strategy == "provider":
        groups = _bucket(models, lambda m: m.provider or UNKNOWN)
    elif strategy == "mode":
        groups = _bucket(models, lambda m: m.mode or UNKNOWN)
    elif strategy == "series":
        groups = group_by_series(models, rules or default_rules())
    else:
        raise ValueError(f"Invalid group-by value {strategy!r}. Must be one of: {', '.join(GROUP_BY_CHOICES)}")

    hidden = 0
    result: dict[str, list[NormalizedModel]] = {}
    for label, bucket in groups.items():
        if not bucket:
            continue
        if not sort_field:
            bucket = sort_models(bucket)
        if not show_all:
            collapsed = collapse_versions(bucket)
            hidden += len(bucket) - len(collapsed)
            bucket = collapsed
        result[label] = bucket

    if verbose >= 1:
        log.info("grouped", strategy=strategy, groups={label: len(b) for label, b in result.items()}, hidden=hidden)
    return result, hidden
