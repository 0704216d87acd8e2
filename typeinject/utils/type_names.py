"""Readable names for type identifiers used in messages and logs."""

from typing import Any


def type_name(type_id: Any) -> str:
    """Return a readable name for a type identifier.

    Classes are rendered as ``module.QualName`` (builtins without module),
    every other type form (generic aliases, unions, strings) via ``repr``.
    """
    if isinstance(type_id, type):
        if type_id.__module__ == "builtins":
            return type_id.__qualname__
        return f"{type_id.__module__}.{type_id.__qualname__}"
    if isinstance(type_id, str):
        return type_id
    return repr(type_id)
