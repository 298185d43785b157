# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Services are process-wide singletons built once from settings by
init_services() (called from the app lifespan) and handed to endpoints
through the get_* dependency functions.

Example:
    @router.post("/batch")
    async def create_batch(
        batch_service: TodoBatchService = Depends(get_batch_service),
    ):
        ...
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, status

from todobatch.core.batch import BatchExecutor
from todobatch.core.config import Settings, get_settings
from todobatch.domains.todo import (
    Notifier,
    StatsService,
    TodoBatchService,
    TodoService,
    create_repository,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Services shared by all requests."""

    todo_service: TodoService
    stats_service: StatsService
    batch_service: TodoBatchService
    notifier: Notifier


_container: ServiceContainer | None = None


def build_services(settings: Settings) -> ServiceContainer:
    """Wire repository, services, executor and notifier from settings.

    Args:
        settings: Application settings.

    Returns:
        Container with freshly built services.
    """
    repository = create_repository(
        settings.storage.backend,
        cache_max_size=settings.storage.cache_max_size,
    )
    stats_service = StatsService(repository)
    todo_service = TodoService(repository, stats=stats_service)
    executor = BatchExecutor(
        concurrency=settings.batch.worker_count,
        strategy=settings.batch.strategy,
        name="todo-batch",
    )
    batch_service = TodoBatchService(
        todo_service,
        executor,
        process_delay=settings.batch.process_delay_ms / 1000,
    )
    notifier = Notifier(
        todo_service,
        queue_size=settings.notifier.queue_size,
        result_queue_size=settings.notifier.result_queue_size,
        send_delay=settings.notifier.send_delay_ms / 1000,
    )

    return ServiceContainer(
        todo_service=todo_service,
        stats_service=stats_service,
        batch_service=batch_service,
        notifier=notifier,
    )


def init_services(settings: Settings | None = None) -> ServiceContainer:
    """Build the service singletons."""
    global _container
    settings = settings or get_settings()
    _container = build_services(settings)

    logger.info(
        "Services initialized (storage=%s, workers=%d, strategy=%s)",
        _container.todo_service.repository.storage_type,
        settings.batch.worker_count,
        settings.batch.strategy,
    )
    return _container


def close_services() -> None:
    """Drop the service singletons."""
    global _container
    _container = None


def get_container() -> ServiceContainer:
    """Get the initialized service container.

    Raises:
        HTTPException: If services have not been initialized.
    """
    if _container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services not initialized",
        )
    return _container


def get_todo_service() -> TodoService:
    """Dependency returning the todo service."""
    return get_container().todo_service


def get_batch_service() -> TodoBatchService:
    """Dependency returning the batch creation service."""
    return get_container().batch_service
