# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Todo domain package.

This package provides todo management functionality including:
- Todo entity with soft-delete lifecycle
- Repository contract with in-memory and cached backends
- CRUD service, request statistics and concurrent batch creation
- Background notification worker
"""

from todobatch.domains.todo.batch import TodoBatchService
from todobatch.domains.todo.cache import CachedTodoRepository
from todobatch.domains.todo.entity import Priority, Todo, TodoState
from todobatch.domains.todo.errors import (
    NotificationQueueFullError,
    NotificationTimeoutError,
    TodoNotFoundError,
    TodoServiceError,
    TodoValidationError,
    UnsupportedCapabilityError,
)
from todobatch.domains.todo.factory import StorageBackend, create_repository
from todobatch.domains.todo.memory import InMemoryTodoRepository
from todobatch.domains.todo.notifier import Notification, NotificationResult, Notifier
from todobatch.domains.todo.repository import (
    Capability,
    StorageCapabilities,
    TodoRepository,
)
from todobatch.domains.todo.service import TodoService
from todobatch.domains.todo.stats import StatsService

__all__ = [
    # Entity
    "Todo",
    "Priority",
    "TodoState",
    # Repositories
    "TodoRepository",
    "Capability",
    "StorageCapabilities",
    "InMemoryTodoRepository",
    "CachedTodoRepository",
    "StorageBackend",
    "create_repository",
    # Services
    "TodoService",
    "StatsService",
    "TodoBatchService",
    "Notifier",
    "Notification",
    "NotificationResult",
    # Errors
    "TodoServiceError",
    "TodoNotFoundError",
    "TodoValidationError",
    "UnsupportedCapabilityError",
    "NotificationQueueFullError",
    "NotificationTimeoutError",
]
