from __future__ import annotations

import json
import sys

from rich.console import Console

from aidex.args import UsageError, parse_args
from aidex.catalog import load_catalog
from aidex.config import load_settings
from aidex.logging import configure_logging
from aidex.query import NoMatchError, TooFewModelsError, run_compare, run_search
from aidex.search import SearchIndex
from aidex.table import render_result, result_payload

# Piped output gets a wide fixed page instead of rich's 80-column fallback.
PIPE_WIDTH = 220


def _stdout_console() -> Console:
    if sys.stdout.isatty():
        return Console()
    return Console(width=PIPE_WIDTH)


def main(argv: list[str] | None = None) -> int:
    errors = Console(stderr=True, highlight=False, soft_wrap=True)
    try:
        request = parse_args(argv)
    except UsageError as exc:
        errors.print(f"aidex: error: {exc}", markup=False)
        return 1

    configure_logging(request.verbose)
    settings = load_settings(catalog_file=request.catalog_file)
    catalog = load_catalog(settings, verbose=request.verbose)
    index = SearchIndex(catalog, verbose=request.verbose)

    try:
        if request.compare is not None:
            result = run_compare(catalog, request, index)
            title = "Model Comparison:"
        else:
            result = run_search(catalog, request, index)
            title = "Model Details:"
    except (NoMatchError, TooFewModelsError) as exc:
        errors.print(str(exc), markup=False)
        return 1

    if request.output_format == "json":
        print(json.dumps(result_payload(result), indent=2))
    else:
        render_result(result, _stdout_console(), title=title)
    return 0
