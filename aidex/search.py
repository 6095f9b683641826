from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass

from aidex.logging import get_logger
from aidex.schema import NormalizedModel

log = get_logger("aidex.search")

TOKEN_SPLIT = re.compile(r"[\s,]+")

FIELD_BOOST = {"name": 3.0, "provider": 1.0, "mode": 1.0, "content": 1.0}

EXACT_WEIGHT = 1.0
PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45


def tokenize(text: str) -> list[str]:
    return [token.casefold() for token in TOKEN_SPLIT.split(text or "") if token]


def edit_distance(a: str, b: str, max_distance: int) -> int:
    """Levenshtein distance, or ``max_distance + 1`` once it is known to exceed it."""
    if abs(len(a) - len(b)) > max_distance:
        return max_distance + 1
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (char_a != char_b),
            )
        if min(current) > max_distance:
            return max_distance + 1
        previous = current
    return previous[-1]


@dataclass(frozen=True, slots=True)
class ScoredKey:
    key: str
    score: float
    position: int


class SearchIndex:
    """Inverted index over name/provider/mode plus a combined free-text field.

    ``fuzzy`` is the edit-distance tolerance as a fraction of the query term
    length (0.2 lets a six-letter term differ by one edit).
    """

    def __init__(self, catalog: dict[str, NormalizedModel], *, fuzzy: float = 0.2, verbose: int = 0) -> None:
        self.catalog = catalog
        self.fuzzy = fuzzy
        self.verbose = verbose
        self._positions = {key: position for position, key in enumerate(catalog)}
        self._terms: dict[str, dict[str, set[str]]] = {field: defaultdict(set) for field in FIELD_BOOST}
        for key, model in catalog.items():
            for field, text in self._documents(model).items():
                for term in tokenize(text):
                    self._terms[field][term].add(key)
        if verbose >= 2:
            log.debug(
                "search_index_built",
                documents=len(catalog),
                terms={field: len(terms) for field, terms in self._terms.items()},
            )

    @staticmethod
    def _documents(model: NormalizedModel) -> dict[str, str]:
        provider = model.provider or ""
        mode = model.mode or ""
        return {
            "name": model.name,
            "provider": provider,
            "mode": mode,
            "content": f"{model.key} {model.name} {provider} {mode}",
        }

    def _match_weight(self, query_term: str, term: str) -> float:
        if term == query_term:
            return EXACT_WEIGHT
        if term.startswith(query_term):
            return PREFIX_WEIGHT * len(query_term) / len(term)
        max_distance = round(len(query_term) * self.fuzzy)
        if max_distance < 1:
            return 0.0
        distance = edit_distance(query_term, term, max_distance)
        if distance > max_distance:
            return 0.0
        return FUZZY_WEIGHT * (1 - distance / max(len(query_term), len(term)))

    def score(self, query: str) -> list[ScoredKey]:
        """Rank every key matching any query term; best score first, ties by catalog order."""
        scores: dict[str, float] = defaultdict(float)
        for query_term in tokenize(query):
            for field, terms in self._terms.items():
                best: dict[str, float] = {}
                for term, keys in terms.items():
                    weight = self._match_weight(query_term, term)
                    if weight <= 0:
                        continue
                    for key in keys:
                        best[key] = max(best.get(key, 0.0), weight)
                for key, weight in best.items():
                    scores[key] += FIELD_BOOST[field] * weight
        ranked = [ScoredKey(key, score, self._positions[key]) for key, score in scores.items()]
        ranked.sort(key=lambda item: (-item.score, item.position))
        return ranked

    def search(self, query: str, *, empty_returns_all: bool = True) -> list[NormalizedModel]:
        """Resolve a query: exact key, then case-insensitive prefix, then fuzzy.

        The first non-empty tier wins. A blank query returns the whole catalog
        (in catalog order) or nothing, depending on ``empty_returns_all``.
        """
        query = (query or "").strip()
        if not query:
            return list(self.catalog.values()) if empty_returns_all else []

        if query in self.catalog:
            if self.verbose >= 2:
                log.debug("search_exact_match", query=query)
            return [self.catalog[query]]

        lowered = query.lower()
        prefixed = [
            model
            for model in self.catalog.values()
            if model.name.lower().startswith(lowered) or model.key.lower().startswith(lowered)
        ]
        if prefixed:
            if self.verbose >= 2:
                log.debug("search_prefix_match", query=query, matches=len(prefixed))
            return prefixed

        ranked = self.score(query)
        if self.verbose >= 2:
            log.debug(
                "search_fuzzy_match",
                query=query,
                matches=len(ranked),
                top=[(item.key, round(item.score, 3)) for item in ranked[:5]],
            )
        return [self.catalog[item.key] for item in ranked]
