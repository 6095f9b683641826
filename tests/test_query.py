import pytest

from aidex.args import QueryRequest
from aidex.query import NoMatchError, TooFewModelsError, run_compare, run_search
from aidex.schema import normalize_catalog


def _catalog() -> dict:
    return normalize_catalog(
        {
            "acme": {
                "models": {
                    "gpt-x-2024-01-01": {"id": "gpt-x-2024-01-01", "knowledge": "2023-10"},
                    "gpt-x-2024-06-01": {"id": "gpt-x-2024-06-01", "knowledge": "2024-03"},
                    "other": {"id": "other", "knowledge": "2024-01", "tool_call": True},
                }
            },
            "openai": {
                "models": {
                    "gpt-4": {"id": "gpt-4", "knowledge": "2021-09", "tool_call": True},
                    "o3": {"id": "o3", "knowledge": "2024-05", "cost": {"input": 2e-6}},
                }
            },
        }
    )


def _keys(models) -> list[str]:
    return [m.key for m in models]


def test_default_query_keeps_only_latest_snapshot() -> None:
    result = run_search(_catalog(), QueryRequest(terms=["gpt-x"]))
    assert _keys(result.models) == ["acme/gpt-x-2024-06-01"]
    assert result.hidden_count == 1
    assert result.grouped is False


def test_show_all_keeps_every_snapshot() -> None:
    result = run_search(_catalog(), QueryRequest(terms=["gpt-x"], show_all=True))
    assert _keys(result.models) == ["acme/gpt-x-2024-06-01", "acme/gpt-x-2024-01-01"]
    assert result.hidden_count == 0


def test_blank_query_lists_catalog_newest_first() -> None:
    result = run_search(_catalog(), QueryRequest())
    assert _keys(result.models) == ["openai/o3", "acme/gpt-x-2024-06-01", "acme/other", "openai/gpt-4"]


def test_filters_apply_to_search_results() -> None:
    result = run_search(_catalog(), QueryRequest(tool_call=True, sort_by="knowledge_cutoff"))
    assert _keys(result.models) == ["acme/other", "openai/gpt-4"]
    assert result.sorted_by == "knowledge_cutoff"


def test_search_without_results_raises() -> None:
    with pytest.raises(NoMatchError) as exc:
        run_search(_catalog(), QueryRequest(terms=["gpt-x"], provider="openai"))
    assert exc.value.term is None
    assert str(exc.value) == "No models found matching the specified criteria"


def test_search_on_empty_catalog_raises() -> None:
    with pytest.raises(NoMatchError):
        run_search({}, QueryRequest())


def test_grouped_search() -> None:
    result = run_search(_catalog(), QueryRequest(provider="acme,openai", group_by="provider"))
    assert result.grouped is True
    assert list(result.groups) == ["openai", "acme"]
    assert _keys(result.groups["acme"]) == ["acme/gpt-x-2024-06-01", "acme/other"]
    assert result.hidden_count == 1


def test_compare_reports_the_missing_term() -> None:
    with pytest.raises(NoMatchError) as exc:
        run_compare(_catalog(), QueryRequest(compare="gpt-4,claude-2"))
    assert exc.value.term == "claude-2"
    assert str(exc.value) == "No models found matching: claude-2"


def test_compare_needs_two_distinct_models() -> None:
    with pytest.raises(TooFewModelsError):
        run_compare(_catalog(), QueryRequest(compare="openai/o3, openai/o3"))
    with pytest.raises(TooFewModelsError):
        run_compare(_catalog(), QueryRequest(compare=" , "))


def test_compare_two_models() -> None:
    result = run_compare(_catalog(), QueryRequest(compare="openai/gpt-4,openai/o3"))
    assert _keys(result.models) == ["openai/o3", "openai/gpt-4"]
