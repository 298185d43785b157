# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory todo repository.

Todos live in a dict guarded by a lock. The critical sections contain no
awaits, so a plain threading lock also covers callers running in worker
threads.
"""

import logging
import threading
from dataclasses import replace
from typing import Any

from todobatch.domains.todo.entity import Todo
from todobatch.domains.todo.errors import TodoNotFoundError
from todobatch.domains.todo.repository import StorageCapabilities, TodoRepository
from todobatch.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)


class InMemoryTodoRepository(TodoRepository):
    """Dict-backed repository with sequential ids ("1", "2", ...).

    Attributes:
        access_count: Number of repository calls served.
        last_access: Time of the most recent call.
    """

    capabilities = StorageCapabilities(storage_info=True)
    storage_type = "in-memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._todos: dict[str, Todo] = {}
        self._next_id = 1
        self.access_count = 0
        self.last_access = utc_now()

    async def create(self, todo: Todo) -> Todo:
        with self._lock:
            now = utc_now()
            stored = replace(
                todo,
                id=str(self._next_id),
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._todos[stored.id] = stored
            self._touch()

        logger.debug("Stored todo %s", stored.id)
        return replace(stored)

    async def find_by_id(self, todo_id: str) -> Todo | None:
        with self._lock:
            self._touch()
            todo = self._todos.get(todo_id)
            if todo is None or todo.is_deleted:
                return None
            return replace(todo)

    async def find_all(self) -> list[Todo]:
        with self._lock:
            self._touch()
            return [replace(todo) for todo in self._todos.values() if not todo.is_deleted]

    async def update(self, todo: Todo) -> Todo:
        with self._lock:
            existing = self._todos.get(todo.id)
            if existing is None or existing.is_deleted:
                raise TodoNotFoundError(f"Todo not found: {todo.id}")

            stored = replace(todo, created_at=existing.created_at, updated_at=utc_now())
            self._todos[stored.id] = stored
            self._touch()
            return replace(stored)

    async def delete(self, todo_id: str) -> None:
        with self._lock:
            existing = self._todos.get(todo_id)
            if existing is None or existing.is_deleted:
                raise TodoNotFoundError(f"Todo not found: {todo_id}")

            existing.mark_deleted()
            self._touch()

        logger.debug("Deleted todo %s", todo_id)

    async def count(self) -> int:
        with self._lock:
            return sum(1 for todo in self._todos.values() if not todo.is_deleted)

    async def count_completed(self) -> int:
        with self._lock:
            return sum(
                1 for todo in self._todos.values() if todo.completed and not todo.is_deleted
            )

    def _touch(self) -> None:
        self.access_count += 1
        self.last_access = utc_now()

    def _storage_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "storage_type": self.storage_type,
                "total_todos": sum(1 for todo in self._todos.values() if not todo.is_deleted),
                "deleted_todos": sum(1 for todo in self._todos.values() if todo.is_deleted),
                "access_count": self.access_count,
                "last_access": format_iso(self.last_access),
            }
