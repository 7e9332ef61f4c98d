"""Ordered policy table.

Rules are registered during setup and resolved in registration order:
the first rule whose pattern matches the path AND whose methods include
the request method wins. Overlapping patterns with disjoint method sets
are therefore fine, and nothing is ever merged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any, TypeAlias

from corsfair.errors import ConfigurationError
from corsfair.policy.rule import PolicyRule

logger = logging.getLogger("corsfair.policy")

# (template, methods) as accepted by ``cors()``
Endpoint: TypeAlias = tuple[str, Iterable[str] | str]


class PolicyTable:
    """An ordered, freezable collection of ``PolicyRule``.

    Usage::

        table = PolicyTable()
        table.add("/api/:user/action", ["GET", "PUT"])
        table.add("/api/:user/delete", ["DELETE"])
        table.freeze()
        table.resolve("/api/42/delete", "DELETE")  # -> the second rule
    """

    __slots__ = ("_frozen", "_rules", "name")

    def __init__(self, rules: Iterable[PolicyRule] = (), *, name: str | None = None) -> None:
        self.name = name
        self._rules: list[PolicyRule] = []
        self._frozen = False
        for rule in rules:
            self.register(rule)

    # -- Registration --

    def register(self, rule: PolicyRule) -> PolicyRule:
        """Append *rule*. Must be called before ``freeze()``."""
        if self._frozen:
            msg = "Cannot register rules after the policy table is frozen."
            raise ConfigurationError(msg)
        if not isinstance(rule, PolicyRule):
            msg = f"Expected a PolicyRule, got {type(rule).__name__}"
            raise ConfigurationError(msg)
        self._rules.append(rule)
        logger.debug(
            "Registered CORS rule %s %s",
            ", ".join(rule.methods),
            rule.template,
        )
        return rule

    def add(self, template: str, methods: Iterable[str] | str, **policy: Any) -> PolicyRule:
        """Compile *template* into a rule and register it.

        Keyword arguments are passed through to ``PolicyRule.create``
        (``origins``, ``headers``, ``expose_headers``, ``allow_credentials``,
        ``max_age``). ``PatternError`` propagates so a bad template fails
        at startup.
        """
        return self.register(PolicyRule.create(template, methods, **policy))

    def freeze(self) -> PolicyTable:
        """Freeze the table. No more rules can be registered."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Resolution --

    def resolve(self, path: str, method: str) -> PolicyRule | None:
        """Return the first rule covering *method* on *path*, or None.

        A rule whose pattern matches but whose methods don't is skipped,
        so a later rule for the same path may still apply.
        """
        for rule in self._rules:
            if rule.applies_to(path, method):
                return rule
        return None

    def rules_for_path(self, path: str) -> tuple[PolicyRule, ...]:
        """All rules whose pattern matches *path*, in registration order."""
        return tuple(rule for rule in self._rules if rule.pattern.matches(path))

    @property
    def rules(self) -> tuple[PolicyRule, ...]:
        """Registered rules in registration order."""
        return tuple(self._rules)

    def __iter__(self) -> Iterator[PolicyRule]:
        return iter(tuple(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        state = "frozen" if self._frozen else "open"
        return f"<PolicyTable{label} {len(self._rules)} rules, {state}>"

    # -- Composition --

    @classmethod
    def flatten(cls, *tables: PolicyTable, name: str | None = None) -> PolicyTable:
        """Concatenate *tables* in order into one frozen table.

        Resolution over the result equals trying each table in turn.
        """
        rules = [rule for table in tables for rule in table.rules]
        return cls(rules, name=name).freeze()


def cors(*endpoints: Endpoint, name: str | None = None, **policy: Any) -> PolicyTable:
    """Build and freeze a table from ``(template, methods)`` pairs.

    Usage::

        table = cors(
            ("/api/:user/action", ["GET", "PUT"]),
            ("/api/:user/delete", "DELETE"),
        )

    Extra keyword arguments apply the same policy to every endpoint.
    """
    table = PolicyTable(name=name)
    for endpoint in endpoints:
        try:
            template, methods = endpoint
        except (TypeError, ValueError) as exc:
            msg = f"Expected a (template, methods) pair, got {endpoint!r}"
            raise ConfigurationError(msg) from exc
        table.add(template, methods, **policy)
    return table.freeze()
