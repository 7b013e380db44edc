"""Command-line utilities for folding search results."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from resultfold.core.models import Query, QueryResults
from resultfold.exceptions import ConfigError, TransportError
from resultfold.services.folding_service import FoldingService
from resultfold.settings import EndpointSettings

logger = logging.getLogger(__name__)


def _add_folding_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--field", required=True, help="Folding field, e.g. @foldingcollection")
    parser.add_argument("--parent-field", default=None, help="Field identifying parent results")
    parser.add_argument("--child-field", default=None, help="Field identifying child results")
    parser.add_argument(
        "--rearrange", default=None, help="Sort child results, e.g. '@date descending'"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fold search results into document groups")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fold = subparsers.add_parser("fold", help="Fold a saved search response (JSON file)")
    fold.add_argument("path", type=Path, help="Path to a search response with a 'results' list")
    _add_folding_arguments(fold)

    search = subparsers.add_parser("search", help="Run a folded query against the search endpoint")
    search.add_argument("keywords", help="Free-text keywords")
    _add_folding_arguments(search)
    search.add_argument("--number-of-results", type=int, default=10)
    search.add_argument("--range", type=int, default=2, help="Related results per group")
    search.add_argument("--expand", action="store_true", help="Fetch the rest of every group")
    search.add_argument("--expand-expression", default=None)
    search.add_argument("--maximum-expanded-results", type=int, default=None)
    search.add_argument("--range-field", default=None)
    search.add_argument("--endpoint-url", default=None, help="Overrides FOLDING_ENDPOINT_URL")

    return parser


def _folding_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "field": args.field,
        "parent_field": args.parent_field,
        "child_field": args.child_field,
        "rearrange": args.rearrange,
    }
    return {key: value for key, value in options.items() if value is not None}


def _print_results(results: QueryResults) -> None:
    output = {
        "totalCount": results.total_count,
        "results": [result.to_dict() for result in results.results],
    }
    print(json.dumps(output, indent=2, default=str))


def _run_fold(args: argparse.Namespace) -> None:
    payload = json.loads(args.path.read_text(encoding="utf-8"))
    results = QueryResults.from_payload(payload)
    service = FoldingService(enable_expand=False, **_folding_options(args))
    _print_results(service.process_results(results, Query()))


def _run_search(args: argparse.Namespace) -> None:
    settings = EndpointSettings(base_url=args.endpoint_url)
    client = settings.build_client()
    options = _folding_options(args)
    options["range"] = args.range
    if args.expand_expression:
        options["expand_expression"] = args.expand_expression
    if args.maximum_expanded_results is not None:
        options["maximum_expanded_results"] = args.maximum_expanded_results
    if args.range_field:
        options["range_field"] = args.range_field
    service = FoldingService(endpoint=client, **options)

    query = service.prepare_query(
        Query(keyword_expression=args.keywords, number_of_results=args.number_of_results)
    )
    results = service.process_results(client.search(query), query)
    if args.expand:
        for top in results.results:
            if top.more_results is not None:
                top.more_results()
    _print_results(results)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    commands: Dict[str, Any] = {
        "fold": _run_fold,
        "search": _run_search,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.error("Unknown command")
        return 1

    try:
        handler(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    except TransportError as exc:
        logger.warning("Search endpoint failed: %s", exc)
        print(f"Search failed: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Could not read search response: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
