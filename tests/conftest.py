"""Pytest configuration and shared fixtures for all tests."""

import sys

import pytest
from loguru import logger

from typeinject import Container, ContainerSettings


@pytest.fixture
def container():
    """Create a fresh root container."""
    return Container()


@pytest.fixture
def thread_safe_container():
    """Create a container guarded by a re-entrant lock."""
    return Container(settings=ContainerSettings(thread_safe=True))


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def restore_logger():
    """Reinstate loguru's default stderr sink after a test reconfigures logging."""
    yield
    logger.remove()
    logger.add(sys.stderr)
