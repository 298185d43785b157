# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Concurrent batch creation of todos.

TodoBatchService binds TodoService.create as the unit of work for a
BatchExecutor. Each request in the batch is created independently; a
failing item is reported in the summary without affecting the others.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from todobatch.core.batch import BatchExecutor, BatchSummary, ConcurrencyStrategy
from todobatch.domains.todo.entity import Todo
from todobatch.utils.logging import get_logger

if TYPE_CHECKING:
    from todobatch.domains.todo.service import TodoService
    from todobatch.models.todo import CreateTodoRequest

logger = get_logger(__name__)


class TodoBatchService:
    """Create many todos with bounded concurrency.

    Attributes:
        todo_service: Service performing the single-todo create.
        executor: Executor holding the concurrency limit.
        process_delay: Seconds to wait before each create.
    """

    def __init__(
        self,
        todo_service: TodoService,
        executor: BatchExecutor[CreateTodoRequest, Todo],
        process_delay: float = 0.0,
    ) -> None:
        """Initialize the batch service.

        Args:
            todo_service: Service used to create each todo.
            executor: Executor configured with the worker count.
            process_delay: Seconds to wait before each create. Zero disables it.
        """
        self.todo_service = todo_service
        self.executor = executor
        self.process_delay = process_delay

    async def create_many(
        self,
        requests: Sequence[CreateTodoRequest],
        strategy: ConcurrencyStrategy | str | None = None,
    ) -> BatchSummary[Todo]:
        """Create every requested todo.

        Args:
            requests: Validated creation requests.
            strategy: Concurrency strategy; the executor default when None.

        Returns:
            Summary whose successful results carry the created todos.
        """
        logger.info(
            "Batch create requested",
            item_count=len(requests),
            strategy=str(strategy or self.executor.strategy.value),
            storage=self.todo_service.repository.storage_type,
        )
        return await self.executor.run(requests, self._create_one, strategy)

    async def _create_one(self, request: CreateTodoRequest) -> Todo:
        if self.process_delay > 0:
            await asyncio.sleep(self.process_delay)
        return await self.todo_service.create(request)
