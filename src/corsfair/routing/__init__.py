"""Routing — compiled route patterns with segment-by-segment matching.

Patterns are compiled once when a rule is registered and are immutable
afterwards.
"""

from corsfair.routing.pattern import PathSegment, RoutePattern, compile_pattern

__all__ = ["PathSegment", "RoutePattern", "compile_pattern"]
