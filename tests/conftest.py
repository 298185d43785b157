# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator

import pytest

from todobatch.core.config import clear_settings_cache
from todobatch.domains.todo import (
    CachedTodoRepository,
    InMemoryTodoRepository,
    Priority,
    StatsService,
    TodoService,
)
from todobatch.models.todo import CreateTodoRequest


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def memory_repository() -> InMemoryTodoRepository:
    """Provide an empty in-memory repository."""
    return InMemoryTodoRepository()


@pytest.fixture
def cached_repository() -> CachedTodoRepository:
    """Provide an empty cached repository with room for three todos."""
    return CachedTodoRepository(max_size=3)


@pytest.fixture
def stats_service(memory_repository: InMemoryTodoRepository) -> StatsService:
    """Provide a stats service bound to the in-memory repository."""
    return StatsService(memory_repository)


@pytest.fixture
def todo_service(
    memory_repository: InMemoryTodoRepository,
    stats_service: StatsService,
) -> TodoService:
    """Provide a todo service that records statistics."""
    return TodoService(memory_repository, stats=stats_service)


@pytest.fixture
def sample_requests() -> list[CreateTodoRequest]:
    """Provide five valid creation requests."""
    return [
        CreateTodoRequest(
            title=f"Task {i}",
            description=f"Description {i}",
            priority=Priority((i % 3) + 1),
        )
        for i in range(5)
    ]
