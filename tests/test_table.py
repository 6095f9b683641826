import io
import json

import pytest
from rich.console import Console

from aidex.query import QueryResult
from aidex.schema import NormalizedModel
from aidex.table import (
    HEADERS,
    LOSS_STYLE,
    WIN_STYLE,
    best_values,
    build_rows,
    format_cost,
    format_modalities,
    format_tokens,
    render_result,
    result_payload,
)


def _model(key: str, **fields) -> NormalizedModel:
    provider, _, name = key.partition("/")
    return NormalizedModel(key=key, name=name, provider=provider, **fields)


def _render(result: QueryResult, title: str = "Model Details:") -> str:
    console = Console(file=io.StringIO(), record=True, width=250)
    render_result(result, console, title=title)
    return console.export_text()


@pytest.mark.parametrize(
    ("tokens", "expected"),
    [(None, "N/A"), (0, "N/A"), (512, "512"), (8192, "8.192k"), (128000, "128k"), (2_000_000, "2M"), (1_048_576, "1.049M")],
)
def test_format_tokens(tokens, expected) -> None:
    assert format_tokens(tokens) == expected


@pytest.mark.parametrize(
    ("cost", "expected"),
    [(None, "-"), (0.0, "$0.00"), (0.00003, "$30.00"), (0.0000005, "$0.500"), (0.00000015, "$0.150")],
)
def test_format_cost(cost, expected) -> None:
    assert format_cost(cost) == expected


def test_format_modalities() -> None:
    assert format_modalities(("text", "image")) == "TI"
    assert format_modalities(("pdf", "x-ray")) == "PX"
    assert format_modalities(()) == "-"


def test_best_values_follow_field_polarity() -> None:
    models = [
        _model("acme/a", max_input_tokens=128000, input_cost_per_token=0.000001),
        _model("acme/b", max_input_tokens=200000, input_cost_per_token=None),
    ]
    best = best_values(models)
    assert best["max_input_tokens"] == 200000
    assert best["input_cost_per_token"] == 0.000001
    assert "output_cost_per_token" not in best
    assert best_values(models[:1]) == {}


def test_rows_mark_wins_and_losses() -> None:
    models = [
        _model("acme/a", max_input_tokens=128000, tool_call=True),
        _model("acme/b", max_input_tokens=200000, tool_call=False),
    ]
    rows = build_rows(models)
    assert len(rows[0]) == len(HEADERS)
    tokens_col = HEADERS.index("In Tok")
    tools_col = HEADERS.index("Tools")
    assert rows[1][tokens_col].style == WIN_STYLE
    assert rows[0][tokens_col].style == LOSS_STYLE
    assert rows[0][tools_col].plain == "✓"
    assert rows[0][tools_col].style == WIN_STYLE
    assert rows[1][tools_col].style == LOSS_STYLE


def test_render_plain_result() -> None:
    result = QueryResult(groups={"": [_model("acme/a", max_input_tokens=8192)]}, hidden_count=2)
    text = _render(result)
    assert "Model Details:" in text
    assert "acme/a" in text
    assert "8.192k" in text
    assert "2 entries hidden" in text
    assert "--group-by" in text
    assert "--sort-by" in text


def test_render_grouped_result() -> None:
    result = QueryResult(
        groups={"openai": [_model("openai/o3")], "anthropic": [_model("anthropic/claude")]},
        grouped=True,
        sorted_by="max_input_tokens",
    )
    text = _render(result, title="Model Comparison:")
    assert "OPENAI Models:" in text
    assert "ANTHROPIC Models:" in text
    assert text.index("OPENAI Models:") < text.index("ANTHROPIC Models:")
    assert "entries hidden" not in text
    assert "Tip:" not in text


def test_render_group_label_with_brackets() -> None:
    result = QueryResult(groups={"chat[/]": [_model("acme/x", mode="chat[/]")]}, grouped=True)
    text = _render(result)
    assert "CHAT[/] Models:" in text
    assert "acme/x" in text


def test_result_payload_is_json_safe() -> None:
    result = QueryResult(groups={"": [_model("acme/a", input_cost_per_token=0.0, input_modalities=("text",))]})
    payload = result_payload(result)
    record = payload["groups"]["all"][0]
    assert record["key"] == "acme/a"
    assert record["input_cost_per_token"] == 0.0
    assert record["output_cost_per_token"] is None
    assert record["input_modalities"] == ["text"]
    assert payload["hidden_count"] == 0
    json.dumps(payload)
