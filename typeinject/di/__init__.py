"""Dependency injection for typeinject.

This module provides a type-keyed container with support for:
- Value bindings by concrete type, Protocol or abstract class
- Lazy providers invoked at most once
- Parent/child container hierarchies
- Field injection into records and argument injection into callables
"""

from .container import Container
from .providers import Provider, ProviderTable
from .registry import MISSING, TypeRegistry
from .types import Inject, injected, interface_of, is_interface, satisfies

__all__ = [
    # Container
    "Container",
    # Storage
    "TypeRegistry",
    "ProviderTable",
    "Provider",
    "MISSING",
    # Markers and type helpers
    "Inject",
    "injected",
    "interface_of",
    "is_interface",
    "satisfies",
]
