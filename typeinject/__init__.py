"""Runtime dependency container for typeinject.

Provides:
- Value bindings by type, Protocol or abstract class
- Lazy run-once providers with injected parameters
- Parent/child container hierarchies
- Field injection (dataclasses, Annotated[T, Inject])
- Argument injection for arbitrary callables
"""

__version__ = "0.1.0"

from typeinject.config import ConfigurationManager, ContainerSettings
from typeinject.di import (
    MISSING,
    Container,
    Inject,
    Provider,
    injected,
    interface_of,
)
from typeinject.errors import (
    ConfigurationError,
    CyclicDependencyError,
    DependencyNotFoundError,
    InjectError,
    InvalidInterfaceError,
    NotCallableError,
    ProviderError,
    ResolutionError,
    UsageError,
)
from typeinject.utils import configure_logging

__all__ = [
    "Container",
    "Provider",
    "Inject",
    "injected",
    "interface_of",
    "MISSING",
    "ContainerSettings",
    "ConfigurationManager",
    "configure_logging",
    "InjectError",
    "ResolutionError",
    "DependencyNotFoundError",
    "CyclicDependencyError",
    "UsageError",
    "InvalidInterfaceError",
    "NotCallableError",
    "ProviderError",
    "ConfigurationError",
]
