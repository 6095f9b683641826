from __future__ import annotations

import argparse
import sys
from typing import Any, Literal

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from aidex.filters import resolve_sort_field
from aidex.grouping import GROUP_BY_CHOICES


class UsageError(ValueError):
    """Invalid combination of command-line options."""


class QueryRequest(BaseModel):
    terms: list[str] = []
    provider: str | None = None
    tool_call: bool = False
    vision: bool = False
    reasoning: bool = False
    input_modalities: list[str] = []
    output_modalities: list[str] = []
    mode: str | None = None
    sort_by: str | None = None
    group_by: str | None = None
    show_all: bool = False
    compare: str | None = None
    verbose: int = 0
    output_format: Literal["table", "json"] = "table"
    catalog_file: str | None = None

    @field_validator("sort_by")
    @classmethod
    def _known_sort_field(cls, value: str | None) -> str | None:
        return resolve_sort_field(value) if value else None

    @field_validator("group_by")
    @classmethod
    def _known_group_by(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower() or "series"
        if value not in GROUP_BY_CHOICES:
            raise ValueError(f"Invalid --group-by value. Must be one of: {', '.join(GROUP_BY_CHOICES)}")
        return value

    @field_validator("verbose")
    @classmethod
    def _clamp_verbose(cls, value: int) -> int:
        return max(0, min(value, 2))

    @model_validator(mode="after")
    def _group_by_needs_scope(self) -> "QueryRequest":
        if self.group_by and not (self.query or self.provider or self.compare_terms):
            raise ValueError("--group-by needs a model search term (or -m/--model) or a -p/--provider filter")
        return self

    @property
    def query(self) -> str:
        return " ".join(t.strip() for t in self.terms if t.strip())

    @property
    def compare_terms(self) -> list[str]:
        if not self.compare:
            return []
        return [term.strip() for term in self.compare.split(",") if term.strip()]


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="aidex",
        usage="aidex [options] [search terms]",
        description="Look up and compare AI models: pricing, token limits and modalities.",
    )
    parser.add_argument("terms", nargs="*", help="Search terms (exact key, prefix or fuzzy match)")
    parser.add_argument("-m", "--model", action="append", default=[], help="Search for specific model(s)")
    parser.add_argument("-p", "--provider", help="Filter by provider (comma-separated, substring match)")
    parser.add_argument("-f", "--function-calling", action="store_true", help="Only models that support function calling")
    parser.add_argument("-t", "--tool-call", action="store_true", help="Alias of --function-calling")
    parser.add_argument("-v", "--vision", action="store_true", help="Only models that accept image input")
    parser.add_argument("--reasoning", action="store_true", help="Only reasoning models")
    parser.add_argument(
        "-i", "--input", action="append", default=[], help="Required input modality (repeatable or comma-separated)"
    )
    parser.add_argument(
        "-o", "--output", action="append", default=[], help="Required output modality (repeatable or comma-separated)"
    )
    parser.add_argument("--mode", help="Filter by mode (chat, embedding, completion, rerank, ...)")
    parser.add_argument("--sort-token", action="store_true", help="Sort by max input tokens (descending)")
    parser.add_argument("--sort-cost", action="store_true", help="Sort by input cost per token (cheapest first)")
    parser.add_argument("-s", "--sort-by", help="Sort by field (max_input_tokens, input_cost_per_token, ...)")
    parser.add_argument(
        "-g",
        "--group-by",
        nargs="?",
        const="series",
        help=f"Group results by: {', '.join(GROUP_BY_CHOICES)} (default: series)",
    )
    parser.add_argument("--show-all", action="store_true", help="Show all versions of models (including older ones)")
    parser.add_argument("-c", "--compare", help="Compare multiple models (comma-separated)")
    parser.add_argument("--format", dest="output_format", choices=["table", "json"], default="table")
    parser.add_argument("--catalog-file", help="Read the catalog from a local JSON file instead of the network")
    parser.add_argument(
        "-V", "--verbose", action="count", default=0, help="Show debug output on stderr (repeat for more, max: 2)"
    )
    return parser


def _split_list(values: list[str]) -> list[str]:
    items: list[str] = []
    for value in values:
        items.extend(part.strip().lower() for part in value.split(",") if part.strip())
    return items


def _sort_field(parsed: argparse.Namespace) -> str | None:
    if parsed.sort_token:
        return "max_input_tokens"
    if parsed.sort_cost:
        return "input_cost_per_token"
    if parsed.sort_by:
        return parsed.sort_by.lower()
    return None


def request_from_namespace(parsed: argparse.Namespace) -> QueryRequest:
    input_modalities = _split_list(parsed.input)
    if parsed.vision and "image" not in input_modalities:
        input_modalities.append("image")

    payload: dict[str, Any] = {
        "terms": [*parsed.terms, *parsed.model],
        "provider": parsed.provider,
        "tool_call": parsed.tool_call or parsed.function_calling,
        "vision": parsed.vision,
        "reasoning": parsed.reasoning,
        "input_modalities": input_modalities,
        "output_modalities": _split_list(parsed.output),
        "mode": parsed.mode,
        "sort_by": _sort_field(parsed),
        "group_by": parsed.group_by,
        "show_all": parsed.show_all,
        "compare": parsed.compare,
        "verbose": parsed.verbose,
        "output_format": parsed.output_format,
        "catalog_file": parsed.catalog_file,
    }
    try:
        return QueryRequest(**payload)
    except ValidationError as exc:
        raise UsageError(_validation_message(exc)) from exc


def _validation_message(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        cause = (error.get("ctx") or {}).get("error")
        messages.append(str(cause) if cause is not None else error["msg"])
    return "; ".join(messages)


def parse_args(argv: list[str] | None = None) -> QueryRequest:
    return request_from_namespace(build_parser().parse_args(argv))
