"""
Command line: print the runtime snapshot or query it.

    kairos-state [--host-root PATH] [--debug|--trace] show [--json]
    kairos-state get kairos.version
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from .errors import EnumerationError, QueryError
from .logging import get_logger, setup_logging

log = get_logger("cli")

HOST_ROOT_ENV = "KAIROS_STATE_HOST_ROOT"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kairos-state",
        description="Show boot mode and Kairos partition layout of this host.",
    )
    parser.add_argument(
        "--host-root",
        type=Path,
        default=Path(os.environ.get(HOST_ROOT_ENV, "/")),
        help=f"Root of the host to inspect (default: ${HOST_ROOT_ENV} or /)",
    )
    parser.add_argument("--debug", action="store_true", help="Log every absorbed failure and command")
    parser.add_argument("--trace", action="store_true", help="Also log raw tool output")

    sub = parser.add_subparsers(dest="command")
    show = sub.add_parser("show", help="Print the whole snapshot (default)")
    show.add_argument("--json", action="store_true", help="Print JSON instead of text")
    get = sub.add_parser("get", help="Print the result of a jq query, e.g. 'oem.mount_point'")
    get.add_argument("query")

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "show"
        args.json = False
    return args


def _snapshot(host_root: Path):
    from .inspectors import new_runtime

    try:
        return new_runtime(host_root)
    except EnumerationError as e:
        log.error("partition data unavailable: {}", e)
        return e.runtime


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(debug=args.debug, trace=args.trace)

    runtime = _snapshot(args.host_root)

    if args.command == "get":
        from .query import query

        try:
            print(query(runtime, args.query))
        except QueryError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    from .renderers import render_text, to_mapping

    if args.json:
        print(json.dumps(to_mapping(runtime), indent=2))
    else:
        sys.stdout.write(render_text(runtime))
    return 0


if __name__ == "__main__":
    sys.exit(main())
