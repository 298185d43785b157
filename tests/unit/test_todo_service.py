# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for todo, statistics and batch services."""

import asyncio
import threading
from datetime import timedelta

import pytest

from todobatch.core.batch import BatchExecutor, ConcurrencyStrategy
from todobatch.domains.todo import (
    CachedTodoRepository,
    InMemoryTodoRepository,
    Priority,
    StatsService,
    Todo,
    TodoBatchService,
    TodoNotFoundError,
    TodoRepository,
    TodoService,
    TodoValidationError,
)
from todobatch.models.todo import CreateTodoRequest, UpdateTodoRequest


class FlakyRepository(InMemoryTodoRepository):
    """In-memory repository that refuses titles containing "fail"."""

    async def create(self, todo: Todo) -> Todo:
        await asyncio.sleep(0.005)
        if "fail" in todo.title:
            raise RuntimeError(f"storage rejected {todo.title}")
        return await super().create(todo)


class PlainRepository(TodoRepository):
    """Backend without optional capabilities."""

    storage_type = "plain"

    async def create(self, todo):
        return todo

    async def find_by_id(self, todo_id):
        return None

    async def find_all(self):
        return []

    async def update(self, todo):
        return todo

    async def delete(self, todo_id):
        return None

    async def count(self):
        return 0

    async def count_completed(self):
        return 0


class TestTodoServiceCreate:
    """Tests for todo creation."""

    @pytest.mark.asyncio
    async def test_create_success(self, todo_service):
        """Test successful creation."""
        todo = await todo_service.create(
            CreateTodoRequest(title="Write tests", priority=Priority.HIGH)
        )

        assert todo.id == "1"
        assert todo.title == "Write tests"
        assert todo.priority is Priority.HIGH

    @pytest.mark.asyncio
    async def test_create_blank_title_rejected(self, todo_service):
        """Test domain validation of unvalidated input."""
        request = CreateTodoRequest.model_construct(title="   ", description="", priority=2)

        with pytest.raises(TodoValidationError):
            await todo_service.create(request)

    @pytest.mark.asyncio
    async def test_create_bad_priority_rejected(self, todo_service):
        """Test priority outside 1-3."""
        request = CreateTodoRequest.model_construct(title="Task", description="", priority=9)

        with pytest.raises(TodoValidationError):
            await todo_service.create(request)

    @pytest.mark.asyncio
    async def test_create_records_stats_on_failure(self, todo_service, stats_service):
        """Test that failed creates are still counted."""
        request = CreateTodoRequest.model_construct(title="", description="", priority=2)

        with pytest.raises(TodoValidationError):
            await todo_service.create(request)

        assert stats_service.get_detailed_stats()["create_requests"] == 1


class TestTodoServiceOperations:
    """Tests for read, update, delete and toggle."""

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, todo_service):
        """Test lookup of unknown todo."""
        with pytest.raises(TodoNotFoundError):
            await todo_service.get_by_id("404")

    @pytest.mark.asyncio
    async def test_list_all_ordered(self, todo_service, sample_requests):
        """Test listing returns todos by creation time."""
        for request in sample_requests:
            await todo_service.create(request)

        todos = await todo_service.list_all()

        assert [todo.title for todo in todos] == [f"Task {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_update_partial(self, todo_service):
        """Test that None fields are left unchanged."""
        created = await todo_service.create(
            CreateTodoRequest(title="Old", description="Keep", priority=Priority.LOW)
        )

        updated = await todo_service.update(
            created.id, UpdateTodoRequest(title="New", completed=True)
        )

        assert updated.title == "New"
        assert updated.description == "Keep"
        assert updated.priority == Priority.LOW
        assert updated.completed is True

    @pytest.mark.asyncio
    async def test_update_missing(self, todo_service):
        """Test updating an unknown todo."""
        with pytest.raises(TodoNotFoundError):
            await todo_service.update("404", UpdateTodoRequest(title="x"))

    @pytest.mark.asyncio
    async def test_delete(self, todo_service):
        """Test deleted todos are no longer found."""
        created = await todo_service.create(CreateTodoRequest(title="A", priority=2))

        await todo_service.delete(created.id)

        with pytest.raises(TodoNotFoundError):
            await todo_service.get_by_id(created.id)

    @pytest.mark.asyncio
    async def test_toggle_complete(self, todo_service):
        """Test toggling twice restores the flag."""
        created = await todo_service.create(CreateTodoRequest(title="A", priority=2))

        toggled = await todo_service.toggle_complete(created.id)
        assert toggled.completed is True

        toggled = await todo_service.toggle_complete(created.id)
        assert toggled.completed is False

    @pytest.mark.asyncio
    async def test_switch_storage(self, todo_service, stats_service, memory_repository):
        """Test swapping the backend for the service and its stats."""
        await todo_service.create(CreateTodoRequest(title="A", priority=2))
        cache = CachedTodoRepository(max_size=10)

        previous = todo_service.switch_storage(cache)

        assert previous is memory_repository
        assert todo_service.repository is cache
        assert stats_service.repository is cache
        assert await todo_service.list_all() == []

        created = await todo_service.create(CreateTodoRequest(title="B", priority=2))
        assert created.id == "cache-1"


class TestStatsService:
    """Tests for request statistics."""

    def test_record_request(self, stats_service):
        """Test per-type counters and average response time."""
        stats_service.record_request("create", timedelta(milliseconds=10))
        stats_service.record_request("read", timedelta(milliseconds=30))
        stats_service.record_request("other", timedelta(milliseconds=20))

        detailed = stats_service.get_detailed_stats()

        assert detailed["request_count"] == 3
        assert detailed["create_requests"] == 1
        assert detailed["read_requests"] == 1
        assert detailed["update_requests"] == 0
        assert detailed["avg_response_time"] == "20.00ms"

    def test_concurrent_updates_are_not_lost(self, stats_service):
        """Test counters under many threads."""
        def hammer():
            for _ in range(500):
                stats_service.record_request("update", timedelta(microseconds=5))
                stats_service.record_request("other", timedelta(microseconds=5))

        threads = [threading.Thread(target=hammer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats_service.request_count == 8 * 500 * 2
        assert stats_service.get_detailed_stats()["update_requests"] == 8 * 500

    @pytest.mark.asyncio
    async def test_get_stats(self, todo_service, stats_service):
        """Test todo counts and completion rate."""
        created = await todo_service.create(CreateTodoRequest(title="A", priority=1))
        await todo_service.create(CreateTodoRequest(title="B", priority=1))
        await todo_service.create(CreateTodoRequest(title="C", priority=1))
        await todo_service.toggle_complete(created.id)

        stats = await stats_service.get_stats()

        assert stats["total_todos"] == 3
        assert stats["completed_todos"] == 1
        assert stats["pending_todos"] == 2
        assert stats["completion_rate"] == 33.33
        assert stats["active_tasks"] >= 1
        assert stats["storage_type"] == "in-memory"

    @pytest.mark.asyncio
    async def test_get_stats_empty(self, stats_service):
        """Test completion rate without todos."""
        stats = await stats_service.get_stats()

        assert stats["completion_rate"] == 0.0

    def test_storage_stats_supported(self, stats_service):
        """Test passthrough of backend statistics."""
        assert stats_service.get_storage_stats()["storage_type"] == "in-memory"

    def test_storage_stats_unsupported(self):
        """Test backends without storage info."""
        stats = StatsService(PlainRepository())

        assert stats.get_storage_stats() == {"error": "storage does not provide statistics"}

    def test_reset(self, stats_service):
        """Test clearing all counters."""
        stats_service.record_request("delete", timedelta(milliseconds=1))

        stats_service.reset()

        detailed = stats_service.get_detailed_stats()
        assert detailed["request_count"] == 0
        assert detailed["delete_requests"] == 0


class TestTodoBatchService:
    """Tests for concurrent batch creation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "strategy", [ConcurrencyStrategy.WORKER_POOL, ConcurrencyStrategy.SEMAPHORE]
    )
    async def test_create_many(self, todo_service, sample_requests, strategy):
        """Test that every request becomes a stored todo."""
        service = TodoBatchService(todo_service, BatchExecutor(3))

        summary = await service.create_many(sample_requests, strategy)

        assert summary.success_count == 5
        assert summary.strategy is strategy
        ids = {result.output.id for result in summary.results}
        assert len(ids) == 5
        assert len(await todo_service.list_all()) == 5

    @pytest.mark.asyncio
    async def test_partial_failure(self, stats_service):
        """Test that storage failures only affect their own item."""
        repository = FlakyRepository()
        stats_service.repository = repository
        service = TodoBatchService(
            TodoService(repository, stats=stats_service),
            BatchExecutor(2),
        )
        requests = [
            CreateTodoRequest(title="ok 0", priority=1),
            CreateTodoRequest(title="fail 1", priority=1),
            CreateTodoRequest(title="ok 2", priority=1),
            CreateTodoRequest(title="fail 3", priority=1),
        ]

        summary = await service.create_many(requests)

        assert summary.success_count == 2
        assert summary.failure_count == 2
        assert [r.index for r in summary.failures()] == [1, 3]
        assert summary.failures()[0].error_message == "storage rejected fail 1"
        assert await repository.count() == 2
        assert stats_service.get_detailed_stats()["create_requests"] == 4

    @pytest.mark.asyncio
    async def test_validation_failure_reported_per_item(self, todo_service):
        """Test that invalid items fail without aborting the batch."""
        service = TodoBatchService(todo_service, BatchExecutor(2))
        requests = [
            CreateTodoRequest(title="valid", priority=2),
            CreateTodoRequest.model_construct(title=" ", description="", priority=2),
        ]

        summary = await service.create_many(requests, "semaphore")

        assert summary.success_count == 1
        assert summary.failures()[0].index == 1
        assert "Invalid todo data" in summary.failures()[0].error_message

    @pytest.mark.asyncio
    async def test_process_delay(self, todo_service, sample_requests):
        """Test that the configured delay applies to each item."""
        service = TodoBatchService(todo_service, BatchExecutor(5), process_delay=0.05)

        summary = await service.create_many(sample_requests)

        assert summary.peak_concurrency == 5
        assert summary.elapsed.total_seconds() >= 0.04
