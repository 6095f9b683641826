from __future__ import annotations

from dataclasses import dataclass

from aidex.args import QueryRequest
from aidex.filters import FilterOptions, apply_filters, sort_models
from aidex.grouping import collapse_versions, group_models
from aidex.logging import get_logger
from aidex.schema import NormalizedModel
from aidex.search import SearchIndex

log = get_logger("aidex.query")


class NoMatchError(LookupError):
    """A search or comparison term resolved to zero models."""

    def __init__(self, term: str | None = None) -> None:
        self.term = term
        if term:
            super().__init__(f"No models found matching: {term}")
        else:
            super().__init__("No models found matching the specified criteria")


class TooFewModelsError(ValueError):
    """A comparison resolved to fewer than two distinct models."""

    def __init__(self) -> None:
        super().__init__("Please provide at least 2 different models to compare")


@dataclass(slots=True)
class QueryResult:
    groups: dict[str, list[NormalizedModel]]
    hidden_count: int = 0
    grouped: bool = False
    sorted_by: str | None = None

    @property
    def models(self) -> list[NormalizedModel]:
        return [model for bucket in self.groups.values() for model in bucket]


def filter_options(request: QueryRequest) -> FilterOptions:
    return FilterOptions(
        provider=request.provider,
        tool_call=request.tool_call,
        vision=request.vision,
        reasoning=request.reasoning,
        input_modalities=list(request.input_modalities),
        output_modalities=list(request.output_modalities),
        mode=request.mode,
    )


def unique_by_key(models: list[NormalizedModel]) -> list[NormalizedModel]:
    seen: set[str] = set()
    unique: list[NormalizedModel] = []
    for model in models:
        if model.key not in seen:
            seen.add(model.key)
            unique.append(model)
    return unique


def arrange(models: list[NormalizedModel], request: QueryRequest) -> QueryResult:
    """Sort, then collapse versions and/or group according to the request."""
    ordered = sort_models(models, request.sort_by)

    if request.group_by:
        groups, hidden = group_models(
            ordered,
            request.group_by,
            sort_field=request.sort_by,
            show_all=request.show_all,
            verbose=request.verbose,
        )
        return QueryResult(groups=groups, hidden_count=hidden, grouped=True, sorted_by=request.sort_by)

    hidden = 0
    if not request.show_all:
        collapsed = collapse_versions(ordered)
        hidden = len(ordered) - len(collapsed)
        ordered = collapsed
    return QueryResult(groups={"": ordered}, hidden_count=hidden, sorted_by=request.sort_by)


def run_search(
    catalog: dict[str, NormalizedModel],
    request: QueryRequest,
    index: SearchIndex | None = None,
) -> QueryResult:
    """Plain listing: a blank query starts from the whole catalog."""
    index = index or SearchIndex(catalog, verbose=request.verbose)
    query = request.query
    candidates = unique_by_key(index.search(query, empty_returns_all=True))
    results = apply_filters(candidates, filter_options(request))
    if request.verbose >= 1:
        log.info("search_done", query=query, candidates=len(candidates), filtered=len(results))
    if not results:
        raise NoMatchError()
    return arrange(results, request)


def run_compare(
    catalog: dict[str, NormalizedModel],
    request: QueryRequest,
    index: SearchIndex | None = None,
) -> QueryResult:
    """Resolve every comma-separated term; any term without matches aborts the comparison."""
    index = index or SearchIndex(catalog, verbose=request.verbose)
    matched: list[NormalizedModel] = []
    for term in request.compare_terms:
        found = index.search(term, empty_returns_all=False)
        if not found:
            raise NoMatchError(term)
        matched.extend(found)

    unique = unique_by_key(matched)
    if request.verbose >= 1:
        log.info("compare_resolved", terms=request.compare_terms, models=len(unique))
    if len(unique) < 2:
        raise TooFewModelsError()
    return arrange(unique, request)
