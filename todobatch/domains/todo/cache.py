# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bounded cache-style todo repository.

Holds at most ``max_size`` todos. When full, creating a todo evicts the
one updated least recently. Lookups are counted as hits or misses.
"""

import logging
import threading
from dataclasses import replace
from typing import Any

from todobatch.domains.todo.entity import Todo
from todobatch.domains.todo.errors import TodoNotFoundError
from todobatch.domains.todo.repository import StorageCapabilities, TodoRepository
from todobatch.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CachedTodoRepository(TodoRepository):
    """Size-limited repository with ids "cache-1", "cache-2", ...

    Deleted todos are dropped from the cache instead of being retained,
    since the cache only keeps live entries.

    Attributes:
        max_size: Maximum number of todos held.
        hits: Lookups that found a todo.
        misses: Lookups that did not.
        evictions: Todos dropped to make room.
    """

    capabilities = StorageCapabilities(storage_info=True, cache=True)
    storage_type = "cached"

    def __init__(self, max_size: int = 100) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")

        self._lock = threading.Lock()
        self._todos: dict[str, Todo] = {}
        self._next_id = 1
        self.max_size = max_size
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    async def create(self, todo: Todo) -> Todo:
        with self._lock:
            if len(self._todos) >= self.max_size:
                self._evict_oldest()

            now = utc_now()
            stored = replace(
                todo,
                id=f"cache-{self._next_id}",
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._todos[stored.id] = stored
            return replace(stored)

    async def find_by_id(self, todo_id: str) -> Todo | None:
        with self._lock:
            todo = self._todos.get(todo_id)
            if todo is None:
                self.misses += 1
                return None

            self.hits += 1
            return replace(todo)

    async def find_all(self) -> list[Todo]:
        with self._lock:
            return [replace(todo) for todo in self._todos.values()]

    async def update(self, todo: Todo) -> Todo:
        with self._lock:
            existing = self._todos.get(todo.id)
            if existing is None:
                self.misses += 1
                raise TodoNotFoundError(f"Todo not found: {todo.id}")

            self.hits += 1
            stored = replace(todo, created_at=existing.created_at, updated_at=utc_now())
            self._todos[stored.id] = stored
            return replace(stored)

    async def delete(self, todo_id: str) -> None:
        with self._lock:
            if todo_id not in self._todos:
                self.misses += 1
                raise TodoNotFoundError(f"Todo not found: {todo_id}")

            self.hits += 1
            del self._todos[todo_id]

    async def count(self) -> int:
        with self._lock:
            return len(self._todos)

    async def count_completed(self) -> int:
        with self._lock:
            return sum(1 for todo in self._todos.values() if todo.completed)

    def _evict_oldest(self) -> None:
        # Caller holds the lock
        if not self._todos:
            return

        oldest = min(self._todos.values(), key=lambda todo: todo.updated_at)
        del self._todos[oldest.id]
        self.evictions += 1
        logger.debug("Evicted todo %s from cache", oldest.id)

    def _storage_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "storage_type": self.storage_type,
                "total_todos": len(self._todos),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "hit_rate": f"{self._compute_hit_rate():.2f}%",
            }

    def _clear_cache(self) -> None:
        with self._lock:
            cleared = len(self._todos)
            self._todos.clear()
        logger.info("Cleared %d todos from cache", cleared)

    def _hit_rate(self) -> float:
        with self._lock:
            return self._compute_hit_rate()

    def _compute_hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total * 100
