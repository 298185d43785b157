# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Todo service for managing todo operations.

This module provides the TodoService class for:
- Todo CRUD operations
- Toggling completion
- Switching the storage backend at runtime

The service depends only on the TodoRepository contract, so any backend
can be plugged in.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING

from todobatch.domains.todo.entity import Priority, Todo
from todobatch.domains.todo.errors import TodoNotFoundError, TodoValidationError

if TYPE_CHECKING:
    from todobatch.domains.todo.repository import TodoRepository
    from todobatch.domains.todo.stats import StatsService
    from todobatch.models.todo import CreateTodoRequest, UpdateTodoRequest

logger = logging.getLogger(__name__)


class TodoService:
    """Service for managing todos.

    Attributes:
        repository: Storage backend.
        stats: Optional statistics recorder.
    """

    def __init__(
        self,
        repository: TodoRepository,
        stats: StatsService | None = None,
    ) -> None:
        """Initialize todo service.

        Args:
            repository: Storage backend for todos.
            stats: Optional statistics service that records each operation.
        """
        self.repository = repository
        self.stats = stats

    async def create(self, request: CreateTodoRequest) -> Todo:
        """Create a new todo.

        Args:
            request: Todo creation data.

        Returns:
            The stored todo with its assigned id.

        Raises:
            TodoValidationError: If the data is not a valid todo.
        """
        started = time.perf_counter()
        try:
            todo = Todo(
                title=request.title,
                description=request.description,
                priority=request.priority,
            )
            if not todo.is_valid():
                raise TodoValidationError("Invalid todo data: title and priority 1-3 are required")

            todo.priority = Priority(todo.priority)
            created = await self.repository.create(todo)
            logger.info("Created todo: %s (%s)", created.title, created.id)
            return created
        finally:
            self._record("create", started)

    async def get_by_id(self, todo_id: str) -> Todo:
        """Get a todo by id.

        Raises:
            TodoNotFoundError: If the todo does not exist.
        """
        started = time.perf_counter()
        try:
            return await self._get_existing(todo_id)
        finally:
            self._record("read", started)

    async def list_all(self) -> list[Todo]:
        """List all active todos ordered by creation time."""
        started = time.perf_counter()
        try:
            todos = await self.repository.find_all()
            return sorted(todos, key=lambda todo: todo.created_at)
        finally:
            self._record("read", started)

    async def update(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        """Update fields of an existing todo.

        Args:
            todo_id: Todo identifier.
            request: Fields to change; None values are left untouched.

        Returns:
            Updated todo.

        Raises:
            TodoNotFoundError: If the todo does not exist.
            TodoValidationError: If the result would be invalid.
        """
        started = time.perf_counter()
        try:
            todo = await self._get_existing(todo_id)

            if request.title is not None:
                todo.title = request.title
            if request.description is not None:
                todo.description = request.description
            if request.priority is not None:
                todo.priority = request.priority
            if request.completed is not None:
                todo.completed = request.completed

            if not todo.is_valid():
                raise TodoValidationError("Invalid todo data: title and priority 1-3 are required")

            updated = await self.repository.update(todo)
            logger.info("Updated todo: %s", todo_id)
            return updated
        finally:
            self._record("update", started)

    async def delete(self, todo_id: str) -> None:
        """Delete a todo.

        Raises:
            TodoNotFoundError: If the todo does not exist.
        """
        started = time.perf_counter()
        try:
            await self.repository.delete(todo_id)
            logger.info("Deleted todo: %s", todo_id)
        finally:
            self._record("delete", started)

    async def toggle_complete(self, todo_id: str) -> Todo:
        """Flip the completion flag of a todo.

        Raises:
            TodoNotFoundError: If the todo does not exist.
        """
        started = time.perf_counter()
        try:
            todo = await self._get_existing(todo_id)
            if todo.completed:
                todo.mark_incomplete()
            else:
                todo.mark_complete()
            return await self.repository.update(todo)
        finally:
            self._record("update", started)

    def switch_storage(self, repository: TodoRepository) -> TodoRepository:
        """Replace the storage backend.

        Existing todos are not migrated.

        Args:
            repository: New storage backend.

        Returns:
            The previous backend.
        """
        previous = self.repository
        self.repository = repository
        if self.stats is not None:
            self.stats.repository = repository

        logger.info(
            "Switched storage backend: %s -> %s",
            previous.storage_type,
            repository.storage_type,
        )
        return previous

    async def _get_existing(self, todo_id: str) -> Todo:
        todo = await self.repository.find_by_id(todo_id)
        if todo is None:
            raise TodoNotFoundError(f"Todo not found: {todo_id}")
        return todo

    def _record(self, request_type: str, started: float) -> None:
        if self.stats is not None:
            self.stats.record_request(
                request_type,
                timedelta(seconds=time.perf_counter() - started),
            )
