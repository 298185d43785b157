# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for todos and batch creation.

Validation of incoming todo data (non-blank title, priority in range)
happens here, before a request reaches the batch executor.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from todobatch.core.batch import BatchSummary, UnitResult
from todobatch.domains.todo.entity import Priority, Todo, TodoState


class CreateTodoRequest(BaseModel):
    """Data needed to create a todo."""

    title: str = Field(min_length=1, max_length=200, description="Todo title")
    description: str = Field(default="", max_length=2000, description="Optional details")
    priority: Priority = Field(description="Priority: 1=low, 2=medium, 3=high")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        """Reject titles made only of whitespace."""
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()


class UpdateTodoRequest(BaseModel):
    """Partial todo update. Fields left as None are unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    priority: Priority | None = None
    completed: bool | None = None


class BatchCreateRequest(BaseModel):
    """Several todos to create in one call."""

    todos: list[CreateTodoRequest] = Field(
        min_length=1,
        description="Todos to create, processed concurrently",
    )


class TodoResponse(BaseModel):
    """Todo as returned by the API."""

    id: str
    title: str
    description: str
    priority: Priority
    completed: bool
    state: TodoState
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @classmethod
    def from_entity(cls, todo: Todo) -> "TodoResponse":
        """Build a response from a domain entity."""
        return cls(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            priority=todo.priority,
            completed=todo.completed,
            state=todo.state,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
            deleted_at=todo.deleted_at,
        )


class BatchResultItem(BaseModel):
    """Outcome of one item in a batch."""

    index: int = Field(description="Position of the item in the request")
    success: bool
    todo_id: str | None = Field(default=None, description="Id of the created todo")
    error: str | None = Field(default=None, description="Failure reason")
    duration_ms: float = Field(description="Time spent creating this item")
    worker_id: int | None = Field(default=None, description="Pool worker that ran the item")

    @classmethod
    def from_unit(cls, result: UnitResult[Todo]) -> "BatchResultItem":
        """Build an item from an executor result."""
        return cls(
            index=result.index,
            success=result.success,
            todo_id=result.output.id if result.success and result.output is not None else None,
            error=result.error_message,
            duration_ms=round(result.duration * 1000, 3),
            worker_id=result.worker_id,
        )


class BatchCreateResponse(BaseModel):
    """Aggregate outcome of a batch creation."""

    batch_id: str | None = None
    strategy: str
    concurrency: int
    peak_concurrency: int
    success_count: int
    failure_count: int
    results: list[BatchResultItem]
    time_elapsed: str = Field(description="Elapsed wall-clock time, human readable")
    elapsed_ms: float

    @classmethod
    def from_summary(cls, summary: BatchSummary[Todo]) -> "BatchCreateResponse":
        """Build the response from a batch summary, results ordered by index."""
        return cls(
            batch_id=summary.batch_id,
            strategy=summary.strategy.value,
            concurrency=summary.concurrency,
            peak_concurrency=summary.peak_concurrency,
            success_count=summary.success_count,
            failure_count=summary.failure_count,
            results=[BatchResultItem.from_unit(result) for result in summary.ordered_results()],
            time_elapsed=summary.time_elapsed,
            elapsed_ms=round(summary.elapsed.total_seconds() * 1000, 3),
        )
