"""``corsfair check`` — dry-run a CORS decision.

Builds a request from the command line, runs it through the fairing's
hooks, and prints the outcome and the headers that would be sent.
Exits with code 1 when the request would be denied.
"""

import argparse
import sys

from corsfair.cli._resolve import resolve_policy
from corsfair.errors import ConfigurationError
from corsfair.http.request import Request


def _build_request(args: argparse.Namespace) -> Request:
    headers: dict[str, str] = {"Origin": args.origin}
    if args.request_method:
        headers["Access-Control-Request-Method"] = args.request_method
    if args.request_headers:
        headers["Access-Control-Request-Headers"] = args.request_headers
    if args.credentials:
        headers["Cookie"] = "session=cli"
    return Request.create(args.method, args.path, headers)


def run_check(args: argparse.Namespace) -> None:
    """Print the decision for one request and exit 1 if it is denied."""
    try:
        fairing = resolve_policy(args.policy)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        request = _build_request(args)
    except UnicodeEncodeError as exc:
        print(f"Error: header values must be latin-1 encodable: {exc.object!r}", file=sys.stderr)
        raise SystemExit(1) from exc

    decision = fairing.decide(request)

    if decision is None:
        print("not applicable (not a CORS request)")
        return

    kind = "preflight" if decision.preflight else "request"
    if not decision.allowed:
        print(f"denied {kind}: {decision.reason}")
        raise SystemExit(1)

    rule = decision.rule
    matched = f" by {', '.join(rule.methods)} {rule.template}" if rule is not None else ""
    print(f"allowed {kind}{matched}")
    for name, value in decision.headers():
        print(f"{name}: {value}")
