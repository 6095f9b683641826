from aidex.schema import normalize_catalog
from aidex.search import SearchIndex, edit_distance, tokenize


def _catalog() -> dict:
    return normalize_catalog(
        {
            "openai": {
                "models": {
                    "gpt-4o": {"id": "gpt-4o"},
                    "gpt-4o-mini": {"id": "gpt-4o-mini"},
                    "o3": {"id": "o3"},
                }
            },
            "azure": {"models": {"o3": {"id": "o3"}, "gpt-4o": {"id": "gpt-4o"}}},
            "anthropic": {
                "models": {
                    "claude-3-5-sonnet-20241022": {"id": "claude-3-5-sonnet-20241022"},
                    "claude-sonnet-4-20250514": {"id": "claude-sonnet-4-20250514"},
                }
            },
        }
    )


def _keys(models) -> list[str]:
    return [m.key for m in models]


def test_tokenize_splits_on_whitespace_and_commas() -> None:
    assert tokenize("GPT-4o, Claude  openai") == ["gpt-4o", "claude", "openai"]


def test_edit_distance() -> None:
    assert edit_distance("kitten", "sitting", 5) == 3
    assert edit_distance("kitten", "sitting", 1) > 1
    assert edit_distance("abc", "abcdef", 1) == 2
    assert edit_distance("abc", "abc", 0) == 0


def test_exact_key_wins_over_prefix_matches() -> None:
    index = SearchIndex(_catalog())
    assert _keys(index.search("openai/gpt-4o")) == ["openai/gpt-4o"]


def test_prefix_match_is_case_insensitive_and_keeps_catalog_order() -> None:
    index = SearchIndex(_catalog())
    assert _keys(index.search("GPT-4O")) == ["openai/gpt-4o", "openai/gpt-4o-mini", "azure/gpt-4o"]


def test_prefix_match_on_key() -> None:
    index = SearchIndex(_catalog())
    assert _keys(index.search("azure/")) == ["azure/o3", "azure/gpt-4o"]


def test_fuzzy_match_tolerates_a_typo() -> None:
    index = SearchIndex(_catalog())
    assert _keys(index.search("gpt-4p")) == ["openai/gpt-4o", "azure/gpt-4o"]


def test_fuzzy_match_on_multiple_terms() -> None:
    index = SearchIndex(_catalog())
    # "claude" is a closer prefix of the shorter name.
    assert _keys(index.search("claude sonet")) == [
        "anthropic/claude-sonnet-4-20250514",
        "anthropic/claude-3-5-sonnet-20241022",
    ]


def test_name_matches_outrank_other_fields() -> None:
    catalog = normalize_catalog({"x1": {"provider": "sonar"}, "sonar": {"provider": "perplexity"}})
    index = SearchIndex(catalog)
    ranked = index.score("sonar")
    assert [item.key for item in ranked] == ["sonar", "x1"]
    assert ranked[0].score > ranked[1].score


def test_blank_query_is_caller_choice() -> None:
    catalog = _catalog()
    index = SearchIndex(catalog)
    assert _keys(index.search("  ")) == list(catalog)
    assert index.search("", empty_returns_all=False) == []


def test_no_match_returns_empty() -> None:
    index = SearchIndex(_catalog())
    assert index.search("zzzzzzzz") == []


def test_empty_catalog() -> None:
    index = SearchIndex({})
    assert index.search("gpt") == []
    assert index.search("") == []
