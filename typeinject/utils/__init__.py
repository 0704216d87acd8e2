"""Shared helpers for typeinject."""

from .logging_utils import configure_logging
from .type_names import type_name

__all__ = ["configure_logging", "type_name"]
