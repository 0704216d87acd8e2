"""Dependency injection container for typeinject.

This module provides the container with support for:
- Value bindings keyed by type, Protocol or abstract class
- Lazy, run-once providers whose own parameters are injected
- Structural Protocol matching against bound values
- Hierarchical containers with parent/child relationships
- Field injection into records and argument injection into callables

Resolution order for a requested type is fixed: concrete binding, pending
provider, interface implementor among the bindings, then the parent.
"""

import threading
import weakref
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from loguru import logger

from ..config import ConfigurationManager, ContainerSettings
from ..errors import CyclicDependencyError, DependencyNotFoundError, NotCallableError, UsageError
from ..utils.logging_utils import configure_logging
from ..utils.type_names import type_name
from .fields import dereference, injection_fields, is_record
from .providers import Provider, ProviderTable
from .registry import MISSING, TypeRegistry
from .signature import EMPTY, Dependency, callable_name, dependencies
from .types import interface_of, is_interface, satisfies

T = TypeVar("T")


class Container:
    """Runtime dependency container.

    Values are bound under a type identifier; missing values are produced by
    providers on first demand and cached. A child container falls back to its
    parent for anything it cannot resolve itself.

    Not thread-safe unless created with ``ContainerSettings(thread_safe=True)``.

    Example:
        container = Container()
        container.map_value(Config()).register_provider(make_database)
        handler = container.invoke(build_handler)
    """

    def __init__(
        self,
        parent: Optional["Container"] = None,
        settings: Optional[ContainerSettings] = None,
    ):
        """Initialize an empty container.

        Args:
            parent: Parent container for hierarchical resolution
            settings: Behaviour switches (defaults to ``ContainerSettings()``)
        """
        self.settings = settings or ContainerSettings()
        self._bindings = TypeRegistry()
        self._providers = ProviderTable()
        self._parent = parent
        self._lock = threading.RLock() if self.settings.thread_safe else nullcontext()
        # Providers currently running on this container, innermost last
        self._running: List[Tuple[Any, Provider]] = []

    @classmethod
    def from_config(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        setup_logging: bool = True,
    ) -> "Container":
        """Create a container configured from YAML and environment settings.

        Args:
            config_path: Optional explicit configuration file
            setup_logging: Install the loguru sink at the configured
                ``logging.level``; pass False when the application manages
                its own sinks

        Returns:
            A new root container
        """
        manager = ConfigurationManager(config_path=config_path)
        settings = manager.container_settings()
        if setup_logging:
            level = manager.logging_settings().level
            configure_logging(level=level)
            logger.debug(f"Configured logging at level {level}")
        return cls(settings=settings)

    @property
    def parent(self) -> Optional["Container"]:
        return self._parent

    def set_parent(self, parent: Optional["Container"]) -> None:
        """Set (or replace) the container consulted when resolution fails locally."""
        self._parent = parent

    def create_child(self) -> "Container":
        """Create a child container with the same settings and this container as parent."""
        return Container(parent=self, settings=self.settings)

    # Registration

    def map_value(self, value: Any) -> "Container":
        """Bind ``value`` under its own concrete type."""
        return self.map_explicit(type(value), value)

    def map_as(self, value: Any, interface_marker: Any) -> "Container":
        """Bind ``value`` under the interface denoted by ``interface_marker``.

        Raises:
            InvalidInterfaceError: If the marker does not denote an interface
        """
        return self.map_explicit(interface_of(interface_marker), value)

    def map_explicit(self, type_id: Any, value: Any) -> "Container":
        """Bind ``value`` under a caller-supplied type identifier.

        The container does not check that ``value`` matches ``type_id``.
        """
        with self._lock:
            self._bindings.put(type_id, value)
        logger.debug(f"Mapped value for {type_name(type_id)}")
        return self

    def register_provider(self, factory: Union[Callable[..., Any], Provider]) -> "Container":
        """Register a provider under every type it declares as output.

        Args:
            factory: Callable whose return annotation names its outputs, a
                class (which provides itself), or a ``Provider``

        Raises:
            NotCallableError: If ``factory`` is not callable
            ProviderError: If the output types cannot be determined
        """
        provider = Provider.from_callable(factory)
        if not provider.result_types:
            logger.warning(f"Provider {provider.name} declares no results and was not registered")
            return self

        with self._lock:
            self._providers.register(provider)
        return self

    # Resolution

    def get(self, type_id: Any, default: Any = None) -> Any:
        """Return the value for ``type_id``, or ``default`` when nothing can supply it.

        A plain miss never raises. A provider whose own dependencies cannot be
        resolved does raise, since the failure happened while producing a
        value that was registered as available.

        Raises:
            DependencyNotFoundError: If a provider invoked here cannot be satisfied
            CyclicDependencyError: If providers depend on each other in a cycle
        """
        value = self._lookup(type_id)
        return default if value is MISSING else value

    def resolve(self, type_id: Any) -> Any:
        """Return the value for ``type_id``.

        Raises:
            DependencyNotFoundError: If the type cannot be resolved
        """
        value = self._lookup(type_id)
        if value is MISSING:
            raise DependencyNotFoundError(type_id)
        return value

    def has(self, type_id: Any) -> bool:
        """Check whether ``type_id`` can be resolved without invoking any provider."""
        with self._lock:
            if type_id in self._bindings or type_id in self._providers:
                return True
            if is_interface(type_id) and self._find_implementor(type_id) is not MISSING:
                return True
        return self._parent is not None and self._parent.has(type_id)

    def _lookup(self, type_id: Any) -> Any:
        with self._lock:
            value = self._bindings.lookup(type_id)
            if value is not MISSING:
                return value

            provider = self._providers.take(type_id)
            if provider is not None:
                value = self._run_provider(type_id, provider)
                if value is not MISSING:
                    return value

            if is_interface(type_id):
                value = self._find_implementor(type_id)
                if value is not MISSING:
                    return value

        if self._parent is not None:
            return self._parent._lookup(type_id)
        return MISSING

    def _run_provider(self, type_id: Any, provider: Provider) -> Any:
        """Invoke ``provider`` once and cache every value it produces."""
        if self.settings.detect_cycles and any(p is provider for _, p in self._running):
            raise CyclicDependencyError([t for t, _ in self._running] + [type_id])

        self._running.append((type_id, provider))
        try:
            raw = self._call(provider.factory, provider.parameters)
        finally:
            self._running.pop()

        logger.debug(f"Invoked provider {provider.name} for {type_name(type_id)}")

        value = MISSING
        for result_type, result in zip(provider.result_types, provider.split_results(raw)):
            self._bindings.put(result_type, result)
            # A provider runs at most once
            self._providers.remove(result_type)
            if result_type == type_id:
                value = result
        return value

    def _find_implementor(self, interface: type) -> Any:
        # First match in binding order wins
        for _, value in self._bindings.items():
            if satisfies(value, interface):
                return value
        return MISSING

    # Injection

    def apply(self, record: Any) -> None:
        """Inject dependencies into the marked fields of ``record`` in place.

        Weak references are followed to the referenced object. Values that are
        not records (no named, annotated fields) are left untouched.

        Raises:
            DependencyNotFoundError: For the first marked field that cannot be
                resolved; fields set before it keep their new values
        """
        target = dereference(record)
        if not is_record(target):
            logger.debug(f"Nothing to inject into {type(target).__name__}")
            return

        record_type = type(target)
        for name, type_id in injection_fields(record_type, self.settings.marker_key):
            value = self._lookup(type_id)
            if value is MISSING:
                raise DependencyNotFoundError(type_id, field_name=name, target=record_type)
            setattr(target, name, value)
            logger.debug(f"Injected {type_name(type_id)} into {record_type.__qualname__}.{name}")

    def apply_map(self, record: Any) -> "Container":
        """Inject into ``record`` and, on success, bind it under its own type.

        Raises:
            DependencyNotFoundError: If injection fails; nothing is bound then
        """
        self.apply(record)
        target = dereference(record)
        if target is None and isinstance(record, weakref.ReferenceType):
            return self
        return self.map_value(target)

    def invoke(self, func: Callable[..., T]) -> T:
        """Call ``func`` with every parameter resolved from the container.

        Parameters are resolved in declaration order; ``*args`` and
        ``**kwargs`` are ignored and unannotated parameters take their
        default. The return value is handed back unchanged.

        Raises:
            NotCallableError: If ``func`` is not callable
            UsageError: If a parameter has neither annotation nor default
            DependencyNotFoundError: For the first unresolved parameter;
                ``func`` is not called
        """
        if not callable(func):
            raise NotCallableError(func)
        return self._call(func, dependencies(func))

    def _call(self, func: Callable[..., Any], parameters: Sequence[Dependency]) -> Any:
        args: List[Any] = []
        kwargs = {}

        for dep in parameters:
            if dep.type_id is EMPTY:
                if dep.default is EMPTY:
                    raise UsageError(
                        f"Parameter '{dep.name}' of {callable_name(func)} "
                        "has neither a type annotation nor a default"
                    )
                value = dep.default
            else:
                value = self._lookup(dep.type_id)
                if value is MISSING:
                    raise DependencyNotFoundError(
                        dep.type_id, parameter_name=dep.name, target=func
                    )

            if dep.keyword_only:
                kwargs[dep.name] = value
            else:
                args.append(value)

        return func(*args, **kwargs)

    def __repr__(self) -> str:
        return (
            f"Container(bindings={len(self._bindings)}, providers={len(self._providers)}, "
            f"has_parent={self._parent is not None})"
        )
