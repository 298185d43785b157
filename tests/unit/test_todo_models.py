# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for todo request and response models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from todobatch.core.batch import BatchSummary, ConcurrencyStrategy, UnitResult
from todobatch.domains.todo import Priority, Todo
from todobatch.models.todo import (
    BatchCreateRequest,
    BatchCreateResponse,
    BatchResultItem,
    CreateTodoRequest,
    TodoResponse,
    UpdateTodoRequest,
)


class TestCreateTodoRequest:
    """Tests for creation request validation."""

    def test_valid(self):
        """Test a minimal valid request."""
        request = CreateTodoRequest(title="  Plan sprint ", priority=3)

        assert request.title == "Plan sprint"
        assert request.description == ""
        assert request.priority is Priority.HIGH

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title(self, title):
        """Test empty and whitespace titles."""
        with pytest.raises(ValidationError):
            CreateTodoRequest(title=title, priority=1)

    def test_title_too_long(self):
        """Test the title length limit."""
        with pytest.raises(ValidationError):
            CreateTodoRequest(title="x" * 201, priority=1)

    @pytest.mark.parametrize("priority", [0, 4, "urgent"])
    def test_invalid_priority(self, priority):
        """Test priorities outside 1-3."""
        with pytest.raises(ValidationError):
            CreateTodoRequest(title="Task", priority=priority)

    def test_priority_required(self):
        """Test that priority has no default."""
        with pytest.raises(ValidationError):
            CreateTodoRequest(title="Task")


class TestUpdateTodoRequest:
    """Tests for partial updates."""

    def test_all_optional(self):
        """Test an empty update."""
        request = UpdateTodoRequest()

        assert request.model_dump(exclude_none=True) == {}

    def test_empty_title_rejected(self):
        """Test that a provided title must not be empty."""
        with pytest.raises(ValidationError):
            UpdateTodoRequest(title="")


class TestBatchCreateRequest:
    """Tests for batch request validation."""

    def test_empty_batch_rejected(self):
        """Test that at least one todo is required."""
        with pytest.raises(ValidationError):
            BatchCreateRequest(todos=[])

    def test_invalid_item_rejected(self):
        """Test that each item is validated."""
        with pytest.raises(ValidationError):
            BatchCreateRequest(todos=[{"title": "ok", "priority": 1}, {"title": "", "priority": 1}])


class TestResponses:
    """Tests for response mapping."""

    def test_todo_response_from_entity(self):
        """Test mapping a domain todo."""
        todo = Todo(title="Task", id="7", priority=Priority.LOW)

        response = TodoResponse.from_entity(todo)

        assert response.id == "7"
        assert response.state == "active"
        assert response.deleted_at is None

    def test_batch_result_item_success(self):
        """Test mapping a successful unit."""
        result = UnitResult.succeeded(0, Todo(title="A", id="1"), duration=0.002, worker_id=2)

        item = BatchResultItem.from_unit(result)

        assert item.todo_id == "1"
        assert item.error is None
        assert item.duration_ms == 2.0
        assert item.worker_id == 2

    def test_batch_result_item_failure(self):
        """Test mapping a failed unit."""
        item = BatchResultItem.from_unit(UnitResult.failed(4, "boom"))

        assert item.success is False
        assert item.todo_id is None
        assert item.error == "boom"

    def test_batch_create_response_orders_results(self):
        """Test that results are returned in request order."""
        summary = BatchSummary(
            success_count=1,
            failure_count=1,
            results=[
                UnitResult.failed(1, "boom"),
                UnitResult.succeeded(0, Todo(title="A", id="1")),
            ],
            elapsed=timedelta(seconds=1.5),
            strategy=ConcurrencyStrategy.SEMAPHORE,
            concurrency=3,
            peak_concurrency=2,
            batch_id="b1",
        )

        response = BatchCreateResponse.from_summary(summary)

        assert [item.index for item in response.results] == [0, 1]
        assert response.strategy == "semaphore"
        assert response.time_elapsed == "1.500s"
        assert response.elapsed_ms == 1500.0
        assert response.peak_concurrency == 2
