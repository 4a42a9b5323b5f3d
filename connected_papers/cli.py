"""Command-line entry point for the Connected Papers client.

Usage:
    connected-papers usages
    connected-papers free-papers
    connected-papers graph 9397e7acd062245d37350f5c05faf56e9cfae0d6 --output graph.json

The API key and service address are read from ``CONNECTED_PAPERS_API_KEY``
and ``CONNECTED_PAPERS_REST_API`` (a ``.env`` file in the working
directory is loaded first).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from connected_papers.api.client import ConnectedPapersClient
from connected_papers.core.exceptions import ConnectedPapersError
from connected_papers.models.status import GraphResponseStatus

logger = logging.getLogger("connected_papers.cli")

EXIT_OK = 0
EXIT_NOT_FRESH = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="connected-papers",
        description="Query the Connected Papers API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("usages", help="Print the remaining request quota")
    subparsers.add_parser("free-papers", help="List free-access paper ids")

    graph = subparsers.add_parser("graph", help="Fetch the graph for a paper")
    graph.add_argument("paper_id", help="Paper identifier")
    graph.add_argument(
        "--fresh-only",
        action="store_true",
        help="Request a fresh graph from the first poll",
    )
    graph.add_argument(
        "--no-loop",
        action="store_true",
        help="Stop after the first response instead of waiting for a fresh graph",
    )
    graph.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the final graph JSON to this file",
    )
    return parser


async def _run_graph(client: ConnectedPapersClient, args: argparse.Namespace) -> int:
    final = None
    async for outcome in client.iter_graph(
        args.paper_id,
        fresh_only=args.fresh_only,
        loop_until_fresh=not args.no_loop,
    ):
        progress = "" if outcome.progress is None else f" ({outcome.progress:.0%})"
        print(f"{outcome.status.value}{progress}")
        final = outcome

    if final is None:
        return EXIT_ERROR

    if args.output is not None and final.graph is not None:
        args.output.write_text(json.dumps(final.graph, indent=2), encoding="utf-8")
        logger.info("Graph written | path=%s", args.output)

    return EXIT_OK if final.status is GraphResponseStatus.FRESH else EXIT_NOT_FRESH


async def _run(args: argparse.Namespace) -> int:
    async with ConnectedPapersClient() as client:
        if args.command == "usages":
            print(await client.get_remaining_usages())
            return EXIT_OK
        if args.command == "free-papers":
            for paper_id in await client.get_free_access_papers():
                print(paper_id)
            return EXIT_OK
        return await _run_graph(client, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(Path.cwd() / ".env")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args))
    except ConnectedPapersError as exc:
        logger.error("Request failed | %s", exc.to_error_dict())
        return EXIT_ERROR
    except OSError as exc:
        logger.error("Could not write output | error=%s", exc)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
