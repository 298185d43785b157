# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Construction of repository backends from configuration."""

from typing import Literal

from todobatch.domains.todo.cache import CachedTodoRepository
from todobatch.domains.todo.memory import InMemoryTodoRepository
from todobatch.domains.todo.repository import TodoRepository

StorageBackend = Literal["memory", "cache"]


def create_repository(backend: StorageBackend, cache_max_size: int = 100) -> TodoRepository:
    """Build a repository for the named backend.

    Args:
        backend: "memory" or "cache".
        cache_max_size: Capacity used by the cache backend.

    Returns:
        A new, empty repository.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if backend == "memory":
        return InMemoryTodoRepository()
    if backend == "cache":
        return CachedTodoRepository(max_size=cache_max_size)
    raise ValueError(f"Unknown storage backend: {backend!r} (expected 'memory' or 'cache')")
