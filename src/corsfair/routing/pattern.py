"""Compiled route patterns.

A pattern is a sequence of literal and parameter segments. Each segment
position decides literal-vs-parameter at compile time, so matching is a
single left-to-right pass with no backtracking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from corsfair.errors import PatternError
from corsfair.routing.params import CATCH_ALL, CONVERTERS

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route template.

    Static:   ``users``       (is_param=False)
    Param:    ``:id``/``{id}`` (is_param=True, param_name="id")
    Typed:    ``{id:int}``     (is_param=True, param_name="id", param_type="int")
    Catch-all: ``{rest:path}`` (is_param=True, param_type="path")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"

    @property
    def is_catch_all(self) -> bool:
        return self.is_param and self.param_type == CATCH_ALL


def _param_name(template: str, name: str) -> str:
    if not name:
        raise PatternError(template, "empty parameter name")
    if not _NAME_RE.match(name):
        raise PatternError(template, f"invalid parameter name {name!r}")
    return name


def _parse_segment(template: str, part: str) -> PathSegment:
    if part.startswith(":"):
        return PathSegment(value=part, is_param=True, param_name=_param_name(template, part[1:]))

    opens, closes = part.count("{"), part.count("}")
    if opens or closes:
        if opens != closes:
            raise PatternError(template, f"unbalanced parameter delimiters in {part!r}")
        if opens > 1 or not (part.startswith("{") and part.endswith("}")):
            raise PatternError(
                template, f"parameter {part!r} must span the whole path segment"
            )
        inner = part[1:-1]
        name, _, param_type = inner.partition(":")
        param_type = param_type or "str"
        if param_type not in CONVERTERS:
            known = ", ".join(sorted(CONVERTERS))
            raise PatternError(
                template, f"unknown converter {param_type!r} (expected one of: {known})"
            )
        return PathSegment(
            value=part,
            is_param=True,
            param_name=_param_name(template, name),
            param_type=param_type,
        )

    if part.startswith("<") and part.endswith(">"):
        raise PatternError(
            template,
            f"{part!r} looks like a <param> placeholder; use {{param}} or :param",
        )
    return PathSegment(value=part)


def parse_template(template: str) -> tuple[PathSegment, ...]:
    """Parse a route template into segments.

    Examples::

        "/users"             -> (PathSegment("users"),)
        "/api/:user/action"  -> (PathSegment("api"), PathSegment(":user", is_param=True, ...), ...)
        "/files/{rest:path}" -> (PathSegment("files"), PathSegment("{rest:path}", param_type="path"))
    """
    if not isinstance(template, str):
        raise PatternError(template, "template must be a string")

    segments = tuple(
        _parse_segment(template, part) for part in template.split("/") if part
    )

    seen: set[str] = set()
    for index, seg in enumerate(segments):
        if not seg.is_param:
            continue
        if seg.param_name in seen:
            raise PatternError(template, f"duplicate parameter name {seg.param_name!r}")
        seen.add(seg.param_name or "")
        if seg.is_catch_all and index != len(segments) - 1:
            raise PatternError(template, "a {name:path} catch-all must be the last segment")
    return segments


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A compiled, immutable route template.

    Usage::

        pattern = RoutePattern.compile("/api/:user/action")
        pattern.matches("/api/42/action")   # True
        pattern.matches("/api/42/action/")  # True
        pattern.match("/api/42/action")     # {"user": "42"}
    """

    template: str
    segments: tuple[PathSegment, ...]
    _regexes: tuple[re.Pattern[str] | None, ...] = field(repr=False, compare=False)

    @classmethod
    def compile(cls, template: str) -> RoutePattern:
        """Compile *template*. Raises ``PatternError`` if it is malformed."""
        segments = parse_template(template)
        regexes = tuple(
            re.compile(CONVERTERS[seg.param_type]) if seg.is_param else None
            for seg in segments
        )
        return cls(template=template, segments=segments, _regexes=regexes)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name or "" for seg in self.segments if seg.is_param)

    @property
    def has_catch_all(self) -> bool:
        return bool(self.segments) and self.segments[-1].is_catch_all

    def match(self, path: object) -> dict[str, str] | None:
        """Match *path* and return captured parameters, or None.

        Never raises: non-string input is simply no match. Empty segments
        are ignored, so trailing and doubled slashes don't matter.
        """
        if not isinstance(path, str):
            return None
        parts = [p for p in path.split("/") if p]
        segments = self.segments

        if self.has_catch_all:
            if len(parts) < len(segments):
                return None
        elif len(parts) != len(segments):
            return None

        params: dict[str, str] = {}
        for index, seg in enumerate(segments):
            if seg.is_catch_all:
                params[seg.param_name or CATCH_ALL] = "/".join(parts[index:])
                return params
            part = parts[index]
            if not seg.is_param:
                if part != seg.value:
                    return None
                continue
            regex = self._regexes[index]
            if regex is None or not regex.fullmatch(part):
                return None
            params[seg.param_name or ""] = part
        return params

    def matches(self, path: object) -> bool:
        """True if *path* matches this pattern."""
        return self.match(path) is not None

    def __str__(self) -> str:
        return self.template


def compile_pattern(template: str) -> RoutePattern:
    """Compile a route template. Shorthand for ``RoutePattern.compile``."""
    return RoutePattern.compile(template)
