"""Error types for typeinject.

Two families:
- Resolution errors: a dependency could not be produced (recoverable)
- Usage errors: the API was called incorrectly (programmer error)
"""

from .base import ErrorContext, InjectError
from .types import (
    ConfigurationError,
    CyclicDependencyError,
    DependencyNotFoundError,
    InvalidInterfaceError,
    NotCallableError,
    ProviderError,
    ResolutionError,
    UsageError,
)

__all__ = [
    "InjectError",
    "ErrorContext",
    "ResolutionError",
    "DependencyNotFoundError",
    "CyclicDependencyError",
    "UsageError",
    "InvalidInterfaceError",
    "NotCallableError",
    "ProviderError",
    "ConfigurationError",
]
