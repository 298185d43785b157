# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Todo batch API endpoints.

This module provides endpoints for creating many todos at once:
- POST /batch - Create todos with the worker pool strategy
- POST /batch-v2 - Create todos with the per-item semaphore strategy

Each item is validated on the way in; items that fail during creation
are reported in the response instead of failing the request.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from todobatch.api.dependencies import get_batch_service
from todobatch.core.batch import BatchError, ConcurrencyStrategy
from todobatch.core.config import Settings, get_settings
from todobatch.domains.todo import TodoBatchService
from todobatch.models.todo import BatchCreateRequest, BatchCreateResponse
from todobatch.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_batch(
    data: BatchCreateRequest,
    strategy: ConcurrencyStrategy,
    batch_service: TodoBatchService,
    settings: Settings,
) -> BatchCreateResponse:
    """Validate the batch size, run it and map the summary.

    Raises:
        HTTPException: 400 if the batch is too large, 500 if the batch
            could not be executed.
    """
    if len(data.todos) > settings.batch.max_batch_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.batch.max_batch_size} todos per batch",
        )

    logger.info(
        "Starting batch of %d todos (%s)",
        len(data.todos),
        strategy.value,
    )

    # Executor log lines carry the endpoint that started the batch
    bind_context(endpoint=f"batch:{strategy.value}", item_count=len(data.todos))
    try:
        summary = await batch_service.create_many(data.todos, strategy)
    except BatchError as e:
        logger.error("Batch failed: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Batch could not be processed: {e}",
        )
    finally:
        clear_context()

    logger.info(
        "Batch complete: success=%d failed=%d time=%s",
        summary.success_count,
        summary.failure_count,
        summary.time_elapsed,
    )
    return BatchCreateResponse.from_summary(summary)


@router.post(
    "/batch",
    response_model=BatchCreateResponse,
    summary="Create todos in batch (worker pool)",
    description="Create several todos concurrently using a fixed pool of workers.",
)
async def create_batch(
    data: BatchCreateRequest,
    batch_service: TodoBatchService = Depends(get_batch_service),
    settings: Settings = Depends(get_settings),
) -> BatchCreateResponse:
    """Create todos through the worker pool strategy.

    Args:
        data: Todos to create.
        batch_service: Batch creation service.
        settings: Application settings.

    Returns:
        Batch summary with one result per requested todo.
    """
    return await _run_batch(data, ConcurrencyStrategy.WORKER_POOL, batch_service, settings)


@router.post(
    "/batch-v2",
    response_model=BatchCreateResponse,
    summary="Create todos in batch (semaphore)",
    description="Create several todos with one task per item, limited by a semaphore.",
)
async def create_batch_v2(
    data: BatchCreateRequest,
    batch_service: TodoBatchService = Depends(get_batch_service),
    settings: Settings = Depends(get_settings),
) -> BatchCreateResponse:
    """Create todos through the semaphore strategy.

    Args:
        data: Todos to create.
        batch_service: Batch creation service.
        settings: Application settings.

    Returns:
        Batch summary with one result per requested todo.
    """
    return await _run_batch(data, ConcurrencyStrategy.SEMAPHORE, batch_service, settings)
