"""Path parameter converters.

Built-in converters for typed segments like ``{id:int}``.
"""


# Full-segment regex for each supported converter. "path" is the
# trailing catch-all and spans the rest of the path.
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}

CATCH_ALL = "path"
