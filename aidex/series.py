"""Name-pattern classification of models into legacy/series buckets.

The rules live in ``data/series_rules.json`` and are compiled once into an
immutable :class:`RuleTable`. Classification is a pure function of
``(name, provider, rules)``; patterns are tried in their declared order and the
first match wins.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

LEGACY = "legacy"
OTHER = "other"
UNKNOWN = "unknown"

RULES_PATH = Path(__file__).parent / "data" / "series_rules.json"


@dataclass(frozen=True, slots=True)
class SeriesRule:
    label: str
    pattern: re.Pattern[str]


@dataclass(frozen=True, slots=True)
class RuleTable:
    aliases: Mapping[str, str]
    legacy: Mapping[str, tuple[re.Pattern[str], ...]]
    series: Mapping[str, tuple[SeriesRule, ...]]

    def resolve_provider(self, provider: str | None) -> str | None:
        if not provider:
            return None
        provider = provider.strip().lower()
        provider = self.aliases.get(provider, provider)
        if provider in self.series or provider in self.legacy:
            return provider
        return None

    def series_order(self, provider: str | None) -> tuple[str, ...]:
        """Declared bucket order for a provider: its series, then legacy."""
        resolved = self.resolve_provider(provider)
        if resolved is None:
            return ()
        labels: list[str] = []
        for rule in self.series.get(resolved, ()):
            if rule.label not in labels:
                labels.append(rule.label)
        if resolved in self.legacy:
            labels.append(LEGACY)
        return tuple(labels)


def build_rule_table(raw: dict[str, Any]) -> RuleTable:
    aliases = {str(k).lower(): str(v).lower() for k, v in (raw.get("aliases") or {}).items()}
    legacy = {
        str(provider).lower(): tuple(re.compile(p, re.IGNORECASE) for p in patterns)
        for provider, patterns in (raw.get("legacy") or {}).items()
    }
    series = {
        str(provider).lower(): tuple(
            SeriesRule(label=str(rule["label"]), pattern=re.compile(rule["pattern"], re.IGNORECASE)) for rule in rules
        )
        for provider, rules in (raw.get("series") or {}).items()
    }
    return RuleTable(
        aliases=MappingProxyType(aliases),
        legacy=MappingProxyType(legacy),
        series=MappingProxyType(series),
    )


def load_rules(path: str | Path) -> RuleTable:
    return build_rule_table(json.loads(Path(path).read_text(encoding="utf-8")))


@lru_cache(maxsize=1)
def default_rules() -> RuleTable:
    return load_rules(RULES_PATH)


def _bare_name(name: str) -> str:
    # "openai/gpt-4o" and "gpt-4o" classify the same way.
    return name.rsplit("/", 1)[-1].strip().lower()


def is_legacy_model(name: str, provider: str | None, rules: RuleTable | None = None) -> bool:
    rules = rules or default_rules()
    resolved = rules.resolve_provider(provider)
    if resolved is None:
        return False
    bare = _bare_name(name)
    return any(pattern.search(bare) for pattern in rules.legacy.get(resolved, ()))


def get_model_series(name: str, provider: str | None, rules: RuleTable | None = None) -> str:
    """Return the series label for a model.

    Unrecognized providers give ``"unknown"``. For known providers the legacy
    patterns are tried first, then the series patterns; no match gives
    ``"other"``.
    """
    rules = rules or default_rules()
    resolved = rules.resolve_provider(provider)
    if resolved is None:
        return UNKNOWN
    if is_legacy_model(name, resolved, rules):
        return LEGACY
    bare = _bare_name(name)
    for rule in rules.series.get(resolved, ()):
        if rule.pattern.search(bare):
            return rule.label
    return OTHER
