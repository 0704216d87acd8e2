"""Bindings store: type identifier -> already resolved value."""

from typing import Any, Dict, Iterator, List, Optional, Tuple


class _Missing:
    """Sentinel for "no value", distinct from a bound ``None``."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class TypeRegistry:
    """Mapping from type identifier to a resolved value.

    One value per identifier; a later ``put`` replaces the earlier one.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._values: Dict[Any, Any] = {}

    def put(self, type_id: Any, value: Any) -> None:
        """Bind ``value`` under ``type_id``, replacing any existing binding."""
        self._values[type_id] = value

    def lookup(self, type_id: Any) -> Any:
        """Return the value bound to ``type_id`` or ``MISSING``."""
        return self._values.get(type_id, MISSING)

    def items(self) -> List[Tuple[Any, Any]]:
        """Snapshot of ``(type_id, value)`` pairs in insertion order."""
        return list(self._values.items())

    def types(self) -> List[Any]:
        """List all bound type identifiers."""
        return list(self._values)

    def __contains__(self, type_id: Any) -> bool:
        return type_id in self._values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.types())

    def __len__(self) -> int:
        return len(self._values)
