"""CLI adapter — performs one fetch and prints the requested reports."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from fetchstats import create_fetcher
from fetchstats.engine.models import FetchRequest, FetchResult, ReportStatus
from fetchstats.errors import FetchError, UnsupportedSchemeError
from fetchstats.reporters.registry import ReporterRegistry, parse_reporter_names

logger = logging.getLogger("fetchstats")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fetchstats",
        description="Fetch a URI and report DNS/TCP/TLS/transfer timings.",
    )
    parser.add_argument("--uri", default="", help="URI to request (required).")
    parser.add_argument(
        "--no-cache", action="store_true",
        help="Request that the content not come from a cache in the middle.",
    )
    parser.add_argument("--out-file", default=os.devnull, help="File to save downloaded data to.")
    parser.add_argument(
        "--reporters", default="",
        help="Comma-separated list of reporters to call. Use '--reporters list' for a list.",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Overall timeout in seconds.")
    parser.add_argument("--trace-dir", default=None, help="Append the snapshot JSON to <dir>/snapshots.jsonl.")
    return parser


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("FETCHSTATS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s.%(msecs)03d %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
        stream=sys.stderr,
    )


def print_reporter_list(registry: ReporterRegistry) -> None:
    print("List of reporters:")
    for reporter in registry:
        print(f"    {reporter.name:<12} {reporter.title()}")


def print_reports(result: FetchResult) -> None:
    if not result.reports:
        return
    print("")
    for outcome in result.reports:
        if outcome.status is ReportStatus.OK:
            print(f"{outcome.name}: {outcome.title}")
            print(outcome.description)
            print(outcome.body)
            print("")
        elif outcome.status is ReportStatus.FAILED:
            print(f"Reporter {outcome.name} failed: {outcome.error}")


async def run_cli(args: argparse.Namespace) -> int:
    fetcher = create_fetcher(timeout=args.timeout, trace_dir=args.trace_dir)

    if args.reporters == "list":
        print_reporter_list(fetcher.registry)
        return 0

    request = FetchRequest(
        uri=args.uri,
        no_cache=args.no_cache,
        out_file=args.out_file,
        reporters=parse_reporter_names(args.reporters),
    )
    try:
        result = await fetcher.fetch(request)
    except UnsupportedSchemeError:
        print("Currently, only http:// and https:// URIs are supported")
        return 1
    except FetchError as exc:
        logger.error("%s", exc)
        return 1

    print_reports(result)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.reporters != "list" and not args.uri:
        print("No URI specified!")
        parser.print_usage()
        sys.exit(1)

    configure_logging()
    sys.exit(asyncio.run(run_cli(args)))


if __name__ == "__main__":
    main()
