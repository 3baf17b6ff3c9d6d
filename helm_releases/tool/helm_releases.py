"""Command line tool for inspecting the release graph of a helm release model."""

import argparse
import asyncio
import logging
import sys
import traceback

from helm_releases.exceptions import ReleaseException
from . import get, graph

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for inspecting helm releases and targets.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    get.GetAction.register(subparsers)
    graph.GraphAction.register(subparsers)
    graph.PlanAction.register(subparsers)
    return parser


def main() -> None:
    """Helm-releases command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except ReleaseException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("helm-releases error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
