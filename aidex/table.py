from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

import pandas as pd
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from aidex.query import QueryResult
from aidex.schema import NormalizedModel

WIN_STYLE = "green"
LOSS_STYLE = "bright_black"

MODALITY_GLYPHS = {"text": "T", "image": "I", "audio": "A", "video": "V", "pdf": "P"}


def format_tokens(tokens: int | None) -> str:
    if not tokens:
        return "N/A"
    if tokens >= 1_000_000:
        return f"{_trim(tokens / 1_000_000)}M"
    if tokens >= 1000:
        return f"{_trim(tokens / 1000)}k"
    return f"{tokens:,}"


def _trim(value: float) -> str:
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_cost(cost: float | None) -> str:
    """Per-token cost as dollars per million tokens; ``-`` when unknown."""
    if cost is None:
        return "-"
    per_million = cost * 1_000_000
    if per_million == 0:
        return "$0.00"
    if per_million >= 1:
        return f"${per_million:.2f}"
    return f"${per_million:.3f}"


def format_modalities(modalities: tuple[str, ...]) -> str:
    if not modalities:
        return "-"
    return "".join(MODALITY_GLYPHS.get(m, m[:1].upper()) for m in modalities)


def format_flag(value: bool | None) -> str:
    if value is None:
        return "-"
    return "✓" if value else "×"


def format_text(value: Any) -> str:
    return str(value) if value else "-"


@dataclass(frozen=True, slots=True)
class Column:
    field: str
    label: str
    format: Callable[[Any], str]
    # None: not ranked; True/False: which direction wins.
    higher_is_better: bool | None = None
    justify: str = "left"


COLUMNS = [
    Column("provider", "Provider", format_text),
    Column("mode", "Mode", format_text),
    Column("knowledge_cutoff", "Cutoff", format_text),
    Column("input_modalities", "In", format_modalities),
    Column("output_modalities", "Out", format_modalities),
    Column("reasoning", "Reason", format_flag, justify="center"),
    Column("tool_call", "Tools", format_flag, justify="center"),
    Column("max_input_tokens", "In Tok", format_tokens, higher_is_better=True, justify="right"),
    Column("max_output_tokens", "Out Tok", format_tokens, higher_is_better=True, justify="right"),
    Column("input_cost_per_token", "$/1M In", format_cost, higher_is_better=False, justify="right"),
    Column("output_cost_per_token", "$/1M Out", format_cost, higher_is_better=False, justify="right"),
    Column("cache_read_cost_per_token", "$/1M Cache R", format_cost, higher_is_better=False, justify="right"),
]

HEADERS = ["Model", *(column.label for column in COLUMNS)]


def best_values(models: list[NormalizedModel]) -> dict[str, float]:
    """Best value per ranked column, only when at least two rows are compared."""
    if len(models) < 2:
        return {}
    best: dict[str, float] = {}
    for column in COLUMNS:
        if column.higher_is_better is None:
            continue
        values = [v for v in (getattr(m, column.field) for m in models) if isinstance(v, (int, float))]
        if values:
            best[column.field] = max(values) if column.higher_is_better else min(values)
    return best


def build_rows(models: list[NormalizedModel]) -> list[list[Text]]:
    best = best_values(models)
    rows: list[list[Text]] = []
    for model in models:
        row = [Text(model.key)]
        for column in COLUMNS:
            value = getattr(model, column.field)
            cell = column.format(value)
            if column.field in best and isinstance(value, (int, float)) and not isinstance(value, bool):
                row.append(Text(cell, style=WIN_STYLE if value == best[column.field] else LOSS_STYLE))
            elif isinstance(value, bool):
                row.append(Text(cell, style=WIN_STYLE if value else LOSS_STYLE))
            else:
                row.append(Text(cell))
        rows.append(row)
    return rows


def build_table(models: list[NormalizedModel]) -> Table:
    table = Table(box=box.DOUBLE, show_lines=True, header_style="bold")
    table.add_column("Model", no_wrap=True)
    for column in COLUMNS:
        table.add_column(column.label, justify=column.justify, no_wrap=True)
    for row in build_rows(models):
        table.add_row(*row)
    return table


def summary_lines(result: QueryResult) -> list[str]:
    lines = ["[bold]Summary:[/bold]"]
    if result.hidden_count > 0:
        lines.append(
            f"[yellow]{result.hidden_count} entries hidden[/yellow] (older models) - use --show-all to see all versions"
        )
    if not result.grouped:
        lines.append("[dim]Tip: Use --group-by type|provider|mode|series to organize results[/dim]")
    if not result.sorted_by:
        lines.append("[dim]Tip: Use --sort-by <field> or --sort-token/--sort-cost to sort results[/dim]")
    return lines


def render_result(result: QueryResult, console: Console, *, title: str) -> None:
    console.print(f"\n{title}")
    if result.grouped:
        for label, models in result.groups.items():
            console.print()
            console.print(Text(f"{label.upper()} Models:", style="bold"))
            console.print(build_table(models))
    else:
        console.print(build_table(result.models))
    console.print()
    for line in summary_lines(result):
        console.print(line)


def _json_safe(value: Any) -> Any:
    if value is pd.NA:
        return None
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, set):
        return sorted(_json_safe(v) for v in value)
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def result_payload(result: QueryResult) -> dict[str, Any]:
    groups = {
        (label or "all"): [model.as_record() for model in models] for label, models in result.groups.items()
    }
    return _json_safe(
        {
            "grouped": result.grouped,
            "sort_by": result.sorted_by,
            "hidden_count": result.hidden_count,
            "groups": groups,
        }
    )
