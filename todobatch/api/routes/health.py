# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoint."""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from todobatch import __version__
from todobatch.api.dependencies import get_todo_service
from todobatch.core.config import Settings, get_settings
from todobatch.domains.todo import TodoService
from todobatch.utils.datetime import seconds_to_human, utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime: str = Field(description="Server uptime, human readable")
    storage_type: str = Field(description="Active todo storage backend")


@router.get("/health", response_model=HealthResponse)
async def health(
    todo_service: TodoService = Depends(get_todo_service),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Report liveness and the active storage backend."""
    return HealthResponse(
        status="ok",
        timestamp=utc_now(),
        version=__version__,
        environment=settings.environment,
        uptime=seconds_to_human(int(time.time() - _server_start_time)),
        storage_type=todo_service.repository.storage_type,
    )
