"""``corsfair rules`` — list policy rules.

Prints every rule of every attached table, in the order they are tried.
"""

import argparse
import sys

from corsfair.cli._resolve import resolve_policy
from corsfair.errors import ConfigurationError
from corsfair.policy.rule import ANY, PolicyRule


def _describe(values: object) -> str:
    if values is ANY:
        return "*"
    return ", ".join(sorted(values))  # type: ignore[call-overload]


def _row(index: int, rule: PolicyRule) -> tuple[str, str, str, str, str]:
    return (
        str(index),
        ", ".join(rule.methods),
        rule.template,
        _describe(rule.origins),
        _describe(rule.headers),
    )


def run_rules(args: argparse.Namespace) -> None:
    """List the rules of a policy as a table of #, METHODS, PATTERN, ORIGINS, HEADERS."""
    try:
        fairing = resolve_policy(args.policy)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rules = [rule for table in fairing.tables for rule in table.rules]
    if not rules:
        print("No rules registered.")
        return

    header = ("#", "METHODS", "PATTERN", "ORIGINS", "HEADERS")
    rows = [_row(i, rule) for i, rule in enumerate(rules, start=1)]

    # Column widths (the last column is left unpadded)
    widths = [max(len(r[col]) for r in (header, *rows)) for col in range(4)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths) + "  {}"

    print(fmt.format(*header))
    print("-" * min(sum(widths) + 8 + max(len(r[4]) for r in (header, *rows)), 80))
    for row in rows:
        print(fmt.format(*row))
