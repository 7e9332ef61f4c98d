"""Policy — rules and the ordered table that resolves them.

Tables are built during setup and frozen before the server starts
accepting requests.
"""

from corsfair.policy.rule import ANY, DEFAULT_ALLOW_HEADERS, PolicyRule, Wildcard
from corsfair.policy.table import PolicyTable, cors

__all__ = ["ANY", "DEFAULT_ALLOW_HEADERS", "PolicyRule", "PolicyTable", "Wildcard", "cors"]
