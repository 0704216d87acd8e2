"""Type identifiers, interface matching and the field injection marker."""

import dataclasses
import inspect
import weakref
from typing import Annotated, Any, Dict, FrozenSet, Generic, Optional, Protocol, get_args, get_origin

from ..errors import InvalidInterfaceError

# Attributes that typing / abc machinery puts on Protocol classes. They are
# not part of the capability set a Protocol describes.
_PROTOCOL_MACHINERY = frozenset({
    "__abstractmethods__", "__annotate__", "__annotate_func__", "__annotations__",
    "__annotations_cache__", "__callable_proto_members_only__",
    "__class_getitem__", "__dict__", "__doc__",
    "__firstlineno__", "__init__", "__init_subclass__", "__module__",
    "__non_callable_proto_members__", "__orig_bases__", "__parameters__",
    "__protocol_attrs__", "__qualname__", "__slots__", "__static_attributes__",
    "__subclasshook__", "__type_params__", "__weakref__", "_is_protocol",
    "_is_runtime_protocol",
})

_protocol_members_cache: "weakref.WeakKeyDictionary[type, FrozenSet[str]]" = weakref.WeakKeyDictionary()


class _InjectMarker:
    """Marker placed in ``Annotated`` metadata to opt a field into injection."""

    _instance: Optional["_InjectMarker"] = None

    def __new__(cls) -> "_InjectMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Inject"


Inject = _InjectMarker()


def injected(*, marker_key: str = "inject", **kwargs: Any) -> Any:
    """Declare a dataclass field that the container fills in.

    Unless ``default`` or ``default_factory`` is given, the field defaults
    to ``None`` so the dataclass can be constructed before injection.

    Example:
        @dataclass
        class Handler:
            db: Database = injected()
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[marker_key] = "true"
    if "default" not in kwargs and "default_factory" not in kwargs:
        kwargs["default"] = None
    return dataclasses.field(metadata=metadata, **kwargs)


def is_protocol(type_id: Any) -> bool:
    """Check whether ``type_id`` is a ``typing.Protocol`` class (not an implementation)."""
    return isinstance(type_id, type) and bool(getattr(type_id, "_is_protocol", False))


def is_interface(type_id: Any) -> bool:
    """Check whether ``type_id`` denotes a capability set rather than a concrete type.

    Protocols and abstract base classes with unimplemented abstract methods
    are interfaces.
    """
    if not isinstance(type_id, type):
        return False
    return is_protocol(type_id) or inspect.isabstract(type_id)


def interface_of(marker: Any) -> type:
    """Return the interface denoted by ``marker``.

    ``marker`` is an interface class, or an indirection to one such as
    ``type[MyProtocol]``; indirections are unwrapped until an interface is
    reached.

    Raises:
        InvalidInterfaceError: If ``marker`` does not denote an interface
    """
    current = marker
    while get_origin(current) is type:
        args = get_args(current)
        if not args:
            break
        current = args[0]

    if not is_interface(current):
        raise InvalidInterfaceError(marker)
    return current


def protocol_members(protocol: type) -> FrozenSet[str]:
    """Names a value must expose to satisfy ``protocol``."""
    cached = _protocol_members_cache.get(protocol)
    if cached is not None:
        return cached

    members = set()
    for base in protocol.__mro__:
        if base in (object, Protocol, Generic) or not is_protocol(base):
            continue
        for name in list(vars(base)) + list(_annotations(base)):
            if name in _PROTOCOL_MACHINERY or name.startswith("_abc_"):
                continue
            members.add(name)

    result = frozenset(members)
    _protocol_members_cache[protocol] = result
    return result


def satisfies(value: Any, interface: type) -> bool:
    """Check whether a bound value satisfies an interface.

    Protocols are matched structurally against the value, abstract classes
    nominally with ``isinstance``.
    """
    if is_protocol(interface):
        return all(hasattr(value, name) for name in protocol_members(interface))
    return isinstance(value, interface)


def strip_annotated(hint: Any) -> Any:
    """Drop ``Annotated`` metadata, returning the underlying type."""
    if get_origin(hint) is Annotated:
        return get_args(hint)[0]
    return hint


def has_inject_marker(hint: Any) -> bool:
    """Check whether an annotation carries the ``Inject`` marker."""
    if get_origin(hint) is not Annotated:
        return False
    return any(meta is Inject for meta in hint.__metadata__)


def _annotations(cls: type) -> Dict[str, Any]:
    try:
        return inspect.get_annotations(cls)
    except NameError:
        return {}
