"""Policy import resolution — resolves ``"module:attribute"`` strings to a fairing.

Shared utility used by ``corsfair rules`` and ``corsfair check``.
"""

import importlib

from corsfair.middleware.fairing import CORSFairing
from corsfair.policy.table import PolicyTable


def resolve_policy(import_string: str) -> CORSFairing:
    """Resolve an import string to a ``CORSFairing``.

    Accepts ``"module:attribute"`` format.  When the attribute portion
    is omitted, defaults to ``"cors"`` (e.g. ``"myapp"`` resolves to
    ``myapp.cors``).

    The attribute may be a ``CORSFairing``, a ``PolicyTable`` (wrapped in
    a fairing with the default configuration), or a zero-argument factory
    returning either.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is neither a fairing nor a table.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "cors"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, CORSFairing):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, PolicyTable):
        return CORSFairing(obj)
    if not isinstance(obj, CORSFairing):
        msg = (
            f"{import_string!r} resolved to {type(obj).__name__}, "
            "not a CORSFairing or PolicyTable"
        )
        raise TypeError(msg)
    return obj
