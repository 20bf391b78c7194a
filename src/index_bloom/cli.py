"""Command-line front-end for index-bloom.

Examples:
  index-bloom index ./docs --index-file docs.json
  index-bloom search "bloom filter" --index-file docs.json
  index-bloom stats --index-file docs.json
"""

# ruff: noqa: T201  # CLI intentionally prints results for operators

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
import textwrap
import time

import orjson
from pydantic import ValidationError

from index_bloom.config import Settings
from index_bloom.exceptions import (
    ContentReadError,
    HashDerivationError,
    InvalidCapacityError,
    InvalidErrorRateError,
    MalformedPersistedStateError,
    SourceTypeError,
)
from index_bloom.observability.logging import configure_logging
from index_bloom.search.document_index import DocumentIndex
from index_bloom.sources import IngestReport, ingest_source


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_USAGE = 2
EXIT_STATE = 3
EXIT_HASH = 4


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="index-bloom",
        description="Probabilistic full-text index built from one Bloom filter per document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Exit codes:
              0  success
              1  search matched no document
              2  usage or configuration error
              3  unreadable content or malformed index file
              4  hash derivation failure
            """
        ).strip(),
    )
    parser.add_argument("--log-level", help="Override INDEX_BLOOM_LOG_LEVEL (debug, info, warning, ...)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit structured JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Ingest files or directories into the index")
    index_parser.add_argument("sources", nargs="+", type=Path, metavar="SOURCE", help="File or directory to ingest")
    index_parser.add_argument(
        "--index-file",
        type=Path,
        help="Persisted index to update (default: INDEX_BLOOM_INDEX_FILE)",
    )
    index_parser.add_argument(
        "--error-rate",
        type=float,
        help="False-positive rate for a new index (default: INDEX_BLOOM_ERROR_RATE)",
    )
    index_parser.add_argument(
        "--recursive",
        action="store_true",
        default=None,
        help="Descend into subdirectories of directory sources",
    )

    search_parser = subparsers.add_parser("search", help="Find documents containing every keyword")
    search_parser.add_argument("keywords", nargs="+", metavar="KEYWORD", help="Keywords; all must match")
    search_parser.add_argument(
        "--index-file",
        type=Path,
        help="Persisted index to query (default: INDEX_BLOOM_INDEX_FILE)",
    )

    stats_parser = subparsers.add_parser("stats", help="Print per-document filter statistics as JSON")
    stats_parser.add_argument(
        "--index-file",
        type=Path,
        help="Persisted index to inspect (default: INDEX_BLOOM_INDEX_FILE)",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    json_logs = settings.json_logs if args.json_logs is None else args.json_logs
    configure_logging(args.log_level or settings.log_level, json_output=json_logs)

    handlers = {"index": _run_index, "search": _run_search, "stats": _run_stats}
    try:
        return handlers[args.command](args, settings)
    except (InvalidCapacityError, InvalidErrorRateError, SourceTypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except (ContentReadError, MalformedPersistedStateError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_STATE
    except HashDerivationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_HASH


def _run_index(args: argparse.Namespace, settings: Settings) -> int:
    index_file: Path = args.index_file or settings.index_file
    recursive = settings.recursive if args.recursive is None else args.recursive
    index = _open_or_create(index_file, args.error_rate if args.error_rate is not None else settings.error_rate)

    started = time.perf_counter()
    total = IngestReport(source=index_file)
    for source in args.sources:
        report = ingest_source(index, source, recursive=recursive)
        total.merge(report)
        _print_report(report)

    index.save(index_file)
    duration = time.perf_counter() - started
    print(
        f"Indexed {total.documents_indexed} document(s), skipped {total.documents_skipped} "
        f"in {duration:.2f}s -> {index_file} ({len(index)} document(s) total)"
    )
    return EXIT_OK


def _run_search(args: argparse.Namespace, settings: Settings) -> int:
    index = DocumentIndex.open(args.index_file or settings.index_file)
    hits = index.search(" ".join(args.keywords))
    if hits is None:
        print("No match", file=sys.stderr)
        return EXIT_NO_MATCH
    for identifier in hits:
        print(identifier)
    return EXIT_OK


def _run_stats(args: argparse.Namespace, settings: Settings) -> int:
    index = DocumentIndex.open(args.index_file or settings.index_file)
    print(orjson.dumps(index.get_stats(), option=orjson.OPT_INDENT_2).decode("utf-8"))
    return EXIT_OK


def _open_or_create(index_file: Path, error_rate: float) -> DocumentIndex:
    if not index_file.exists():
        logger.info("Creating new index at %s (error rate %s)", index_file, error_rate)
        return DocumentIndex(error_rate)

    index = DocumentIndex.open(index_file)
    if index.error_rate != error_rate:
        logger.warning(
            "Index %s was built with error rate %s; keeping it instead of %s",
            index_file,
            index.error_rate,
            error_rate,
        )
    return index


def _print_report(report: IngestReport) -> None:
    print(f"- {report.source}: indexed {report.documents_indexed}, skipped {report.documents_skipped}")
    if report.errors:
        preview = report.errors[:3]
        for entry in preview:
            print(f"  error: {entry}")
        remaining = len(report.errors) - len(preview)
        if remaining > 0:
            print(f"  ... {remaining} more error(s)")


if __name__ == "__main__":
    raise SystemExit(main())
