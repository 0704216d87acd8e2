"""Providers: deferred producers of one or more typed values.

A provider is registered under every type it declares as output and is
consumed by the container the first time any of those types is requested.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from ..errors import NotCallableError, ProviderError
from ..utils.type_names import type_name
from .signature import Dependency, callable_name, dependencies, result_types


@dataclass(frozen=True)
class Provider:
    """A producer callable together with its declared inputs and outputs.

    Attributes:
        factory: The callable producing the values
        parameters: Ordered parameters resolved from the container
        result_types: Ordered type identifiers of the produced values
        unpack: Whether ``factory`` returns a tuple split across ``result_types``
    """

    factory: Callable[..., Any]
    parameters: Tuple[Dependency, ...]
    result_types: Tuple[Any, ...]
    unpack: bool = False

    @classmethod
    def from_callable(cls, factory: Any) -> "Provider":
        """Build a provider by inspecting ``factory``'s annotations.

        Args:
            factory: Function, method, class, partial or callable instance;
                an existing ``Provider`` is returned unchanged

        Returns:
            The provider

        Raises:
            NotCallableError: If ``factory`` is not callable
            ProviderError: If the output types cannot be determined
        """
        if isinstance(factory, Provider):
            return factory
        if not callable(factory):
            raise NotCallableError(factory)

        types, unpack = result_types(factory)
        return cls(
            factory=factory,
            parameters=dependencies(factory),
            result_types=types,
            unpack=unpack,
        )

    @property
    def name(self) -> str:
        return callable_name(self.factory)

    def split_results(self, value: Any) -> List[Any]:
        """Align a raw return value with ``result_types``.

        Raises:
            ProviderError: If a multi-output provider did not return a tuple
                of the declared length
        """
        if not self.result_types:
            return []
        if not self.unpack:
            return [value]
        if not isinstance(value, tuple) or len(value) != len(self.result_types):
            raise ProviderError(
                f"Provider {self.name} declared {len(self.result_types)} results "
                f"but returned {value!r}",
                provider=self.factory,
            )
        return list(value)


class ProviderTable:
    """Mapping from type identifier to the provider that can produce it."""

    def __init__(self):
        """Initialize an empty provider table."""
        self._providers: Dict[Any, Provider] = {}

    def register(self, provider: Provider) -> None:
        """Register ``provider`` under each of its result types."""
        for result_type in provider.result_types:
            self._providers[result_type] = provider
            logger.debug(f"Registered provider {provider.name} for {type_name(result_type)}")

    def take(self, type_id: Any) -> Optional[Provider]:
        """Return the provider pending for ``type_id``, if any."""
        return self._providers.get(type_id)

    def remove(self, type_id: Any) -> None:
        """Forget the provider for ``type_id``; absent entries are ignored."""
        self._providers.pop(type_id, None)

    def types(self) -> List[Any]:
        """List all type identifiers with a pending provider."""
        return list(self._providers)

    def __contains__(self, type_id: Any) -> bool:
        return type_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)
