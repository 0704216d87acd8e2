"""Discovery of record fields marked for injection."""

import dataclasses
import inspect
import weakref
from typing import Any, Dict, Optional, Tuple, get_type_hints

from loguru import logger

from .types import has_inject_marker, strip_annotated

FieldSpec = Tuple[Tuple[str, Any], ...]

# record class -> marker key -> marked fields; only fully resolved hints are cached
_field_cache: "weakref.WeakKeyDictionary[type, Dict[str, FieldSpec]]" = weakref.WeakKeyDictionary()


def dereference(value: Any) -> Any:
    """Follow weak references down to the referenced object (``None`` if dead)."""
    while isinstance(value, weakref.ReferenceType):
        value = value()
    return value


def class_hints(cls: type) -> Tuple[Dict[str, Any], Optional[Exception]]:
    """Annotations of ``cls`` and its bases, keeping ``Annotated`` metadata.

    Returns:
        ``(hints, error)``; when forward references cannot be evaluated,
        ``error`` is the failure and ``hints`` holds the raw annotations
    """
    try:
        return get_type_hints(cls, include_extras=True), None
    except (NameError, TypeError) as e:
        hints: Dict[str, Any] = {}
        for base in reversed(cls.__mro__):
            try:
                hints.update(inspect.get_annotations(base))
            except NameError:
                continue
        return hints, e


def is_record(value: Any) -> bool:
    """Check whether ``value`` is an instance with named, annotated fields."""
    if value is None or isinstance(value, type):
        return False
    if dataclasses.is_dataclass(value):
        return True
    hints, _ = class_hints(type(value))
    return bool(hints)


def injection_fields(cls: type, marker_key: str = "inject") -> FieldSpec:
    """Return ``(field_name, type_id)`` for every settable field marked for injection.

    A dataclass field is marked when its metadata holds a non-empty value
    under ``marker_key`` (see ``injected()``). Any annotated field, dataclass
    or not, is marked by ``Annotated[T, Inject]``.

    Fields whose name starts with an underscore and fields of frozen
    dataclasses cannot be set and are skipped.

    Results are cached per class while the class is alive. Classes whose
    annotations could not be fully resolved are inspected again on every
    call, so a forward reference defined later is picked up.
    """
    cached = _field_cache.get(cls, {}).get(marker_key)
    if cached is not None:
        return cached

    hints, error = class_hints(cls)
    if error is not None:
        logger.warning(
            f"Could not resolve annotations of {cls.__qualname__} ({error}); "
            "unresolved forward references are used as type identifiers"
        )

    marked = _marked_fields(cls, hints, marker_key)
    if error is None:
        _field_cache.setdefault(cls, {})[marker_key] = marked
    return marked


def _marked_fields(cls: type, hints: Dict[str, Any], marker_key: str) -> FieldSpec:
    marked = []

    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen
        for field in dataclasses.fields(cls):
            hint = hints.get(field.name, field.type)
            if not (field.metadata.get(marker_key) or has_inject_marker(hint)):
                continue
            if frozen or field.name.startswith("_"):
                logger.debug(f"Skipping unsettable field {cls.__qualname__}.{field.name}")
                continue
            marked.append((field.name, strip_annotated(hint)))
        return tuple(marked)

    for name, hint in hints.items():
        if not has_inject_marker(hint):
            continue
        if name.startswith("_"):
            logger.debug(f"Skipping unsettable field {cls.__qualname__}.{name}")
            continue
        marked.append((name, strip_annotated(hint)))
    return tuple(marked)
