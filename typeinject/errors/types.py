"""Specific error types for typeinject."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from ..utils.type_names import type_name
from .base import InjectError


class ResolutionError(InjectError):
    """A requested dependency could not be produced.

    Resolution errors are ordinary, recoverable failures: calling code may
    catch them and fall back to something else.
    """


class DependencyNotFoundError(ResolutionError):
    """No binding, provider, implementor or parent could supply a type."""

    def __init__(
        self,
        type_id: Any,
        *,
        field_name: Optional[str] = None,
        parameter_name: Optional[str] = None,
        target: Any = None,
        **kwargs: Any,
    ):
        """Initialize dependency-not-found error.

        Args:
            type_id: The unresolved type identifier
            field_name: Record field that requested the type, if any
            parameter_name: Callable parameter that requested the type, if any
            target: The record type or callable being injected
        """
        super().__init__(f"Dependency not found for type {type_name(type_id)}", **kwargs)
        self.type_id = type_id

        self.context.add_technical_detail("type", type_name(type_id))
        if field_name:
            self.context.add_technical_detail("field", field_name)
        if parameter_name:
            self.context.add_technical_detail("parameter", parameter_name)
        if target is not None:
            self.context.add_technical_detail("target", _target_name(target))
        self.context.add_suggestion(
            f"Register a value or provider for {type_name(type_id)} before resolving it"
        )


class CyclicDependencyError(ResolutionError):
    """A provider depends, directly or transitively, on its own output."""

    def __init__(self, chain: Sequence[Any], **kwargs: Any):
        """Initialize cyclic dependency error.

        Args:
            chain: Type identifiers being resolved, ending with the repeated one
        """
        path = " -> ".join(type_name(t) for t in chain)
        super().__init__(f"Cyclic dependency detected: {path}", **kwargs)
        self.chain = list(chain)
        self.context.add_technical_detail("chain", [type_name(t) for t in chain])


class UsageError(InjectError, TypeError):
    """The container API was called incorrectly.

    These signal programmer error and are not meant to be recovered from.
    """

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class InvalidInterfaceError(UsageError):
    """A marker passed as an interface does not denote one."""

    def __init__(self, marker: Any, **kwargs: Any):
        super().__init__(
            "interface_of() called with a value that is not an interface "
            f"(Protocol or abstract class): {type_name(marker)}",
            **kwargs,
        )
        self.marker = marker
        self.with_suggestion("Pass the Protocol class itself, e.g. interface_of(MyProtocol)")


class NotCallableError(UsageError):
    """A value used as a callable or provider is not callable."""

    def __init__(self, value: Any, **kwargs: Any):
        super().__init__(f"Expected a callable, got {type(value).__name__}", **kwargs)
        self.value = value


class ProviderError(UsageError):
    """A provider's declaration or return value is malformed."""

    def __init__(self, message: str, *, provider: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if provider is not None:
            self.context.add_technical_detail("provider", _target_name(provider))


class ConfigurationError(InjectError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[Path] = None,
        field_path: Optional[str] = None,
        **kwargs: Any,
    ):
        """Initialize configuration error."""
        super().__init__(message, **kwargs)

        if config_path:
            self.context.add_technical_detail("config_path", str(config_path))
        if field_path:
            self.context.add_technical_detail("field_path", field_path)


def _target_name(target: Any) -> str:
    if isinstance(target, type):
        return type_name(target)
    return getattr(target, "__qualname__", None) or repr(target)
