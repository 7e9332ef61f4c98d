"""corsfair CLI — inspect a policy and dry-run CORS decisions.

Entry point registered as ``corsfair`` in ``pyproject.toml``::

    [project.scripts]
    corsfair = "corsfair.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``corsfair`` command."""
    parser = argparse.ArgumentParser(
        prog="corsfair",
        description="corsfair — per-route CORS policies for ASGI applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- corsfair rules ---------------------------------------------------
    rules_parser = subparsers.add_parser("rules", help="List policy rules in resolution order")
    rules_parser.add_argument(
        "policy",
        help="Import string (e.g. myapp:cors)",
    )

    # -- corsfair check ---------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Show the CORS decision for a request")
    check_parser.add_argument(
        "policy",
        help="Import string (e.g. myapp:cors)",
    )
    check_parser.add_argument("method", help="Request method (OPTIONS for a preflight)")
    check_parser.add_argument("path", help="Request path (e.g. /api/42/action)")
    check_parser.add_argument(
        "--origin",
        default="https://example.com",
        help="Origin header value",
    )
    check_parser.add_argument(
        "--request-method",
        default=None,
        help="Access-Control-Request-Method (preflight only)",
    )
    check_parser.add_argument(
        "--request-headers",
        default=None,
        help="Access-Control-Request-Headers, comma-separated (preflight only)",
    )
    check_parser.add_argument(
        "--credentials",
        action="store_true",
        help="Send a Cookie header, as a credentialed browser request would",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "rules":
        from corsfair.cli._rules import run_rules

        run_rules(args)
    elif args.command == "check":
        from corsfair.cli._check import run_check

        run_check(args)
