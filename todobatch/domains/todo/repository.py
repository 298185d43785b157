# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Todo repository contract.

Every backend implements the required async CRUD set defined by
TodoRepository. Optional capabilities (storage statistics, cache
management) are declared up front in a StorageCapabilities flag set
fixed at construction, so callers check ``supports()`` instead of
inspecting the backend's type.

Example:
    repo = InMemoryTodoRepository()
    if repo.supports(Capability.STORAGE_INFO):
        print(repo.get_stats())
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from todobatch.domains.todo.entity import Todo
from todobatch.domains.todo.errors import UnsupportedCapabilityError


class Capability(str, Enum):
    """Optional repository capabilities."""

    STORAGE_INFO = "storage_info"
    CACHE = "cache"


@dataclass(frozen=True)
class StorageCapabilities:
    """Capability flags of a repository backend.

    Attributes:
        storage_info: Backend reports its type and statistics.
        cache: Backend exposes cache management (clear, hit rate).
    """

    storage_info: bool = False
    cache: bool = False

    def has(self, capability: Capability) -> bool:
        """Check a single capability flag."""
        return bool(getattr(self, capability.value))

    def enabled(self) -> list[str]:
        """Names of all enabled capabilities."""
        return [capability.value for capability in Capability if self.has(capability)]


class TodoRepository(ABC):
    """Required storage operations for todos.

    Implementations must return copies of stored todos so callers cannot
    mutate repository state without going through update().

    Attributes:
        capabilities: Optional capabilities provided by this backend.
        storage_type: Short backend name.
    """

    capabilities: StorageCapabilities = StorageCapabilities()
    storage_type: str = "unknown"

    @abstractmethod
    async def create(self, todo: Todo) -> Todo:
        """Store a new todo, assigning its id and timestamps."""

    @abstractmethod
    async def find_by_id(self, todo_id: str) -> Todo | None:
        """Return an active todo by id, or None if missing or deleted."""

    @abstractmethod
    async def find_all(self) -> list[Todo]:
        """Return all active todos."""

    @abstractmethod
    async def update(self, todo: Todo) -> Todo:
        """Replace an existing active todo.

        Raises:
            TodoNotFoundError: If the todo is missing or deleted.
        """

    @abstractmethod
    async def delete(self, todo_id: str) -> None:
        """Soft delete a todo.

        Raises:
            TodoNotFoundError: If the todo is missing or already deleted.
        """

    @abstractmethod
    async def count(self) -> int:
        """Number of active todos."""

    @abstractmethod
    async def count_completed(self) -> int:
        """Number of active todos marked completed."""

    def supports(self, capability: Capability) -> bool:
        """Whether this backend provides an optional capability."""
        return self.capabilities.has(capability)

    def require(self, capability: Capability) -> None:
        """Raise if this backend lacks an optional capability.

        Raises:
            UnsupportedCapabilityError: If the capability is not provided.
        """
        if not self.supports(capability):
            raise UnsupportedCapabilityError(
                f"Storage backend '{self.storage_type}' does not support {capability.value}"
            )

    # Storage info capability

    def get_stats(self) -> dict[str, Any]:
        """Storage-specific statistics.

        Raises:
            UnsupportedCapabilityError: If the backend has no storage info.
        """
        self.require(Capability.STORAGE_INFO)
        return self._storage_stats()

    def _storage_stats(self) -> dict[str, Any]:
        raise NotImplementedError

    # Cache capability

    def clear_cache(self) -> None:
        """Drop all cached entries.

        Raises:
            UnsupportedCapabilityError: If the backend is not a cache.
        """
        self.require(Capability.CACHE)
        self._clear_cache()

    def hit_rate(self) -> float:
        """Cache hit rate as a percentage.

        Raises:
            UnsupportedCapabilityError: If the backend is not a cache.
        """
        self.require(Capability.CACHE)
        return self._hit_rate()

    def _clear_cache(self) -> None:
        raise NotImplementedError

    def _hit_rate(self) -> float:
        raise NotImplementedError
