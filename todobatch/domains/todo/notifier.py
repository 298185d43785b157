# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Background notifications for todos.

A Notifier owns one long-lived worker task fed by a bounded queue.
send_async() checks that the todo exists and enqueues the notification;
it never waits for delivery. A full queue refuses new notifications
immediately instead of blocking the caller.

Example:
    notifier = Notifier(todo_service, queue_size=100)
    notifier.start()
    await notifier.send_async(todo.id, "Due tomorrow", delay_seconds=5)
    ...
    await notifier.stop()
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from todobatch.domains.todo.errors import (
    NotificationQueueFullError,
    NotificationTimeoutError,
)
from todobatch.utils.datetime import utc_now
from todobatch.utils.logging import get_logger

if TYPE_CHECKING:
    from todobatch.domains.todo.entity import Todo
    from todobatch.domains.todo.service import TodoService

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    """A message about one todo, sent after an optional delay in seconds."""

    todo_id: str
    message: str
    delay: float = 0.0


@dataclass(frozen=True)
class NotificationResult:
    """Delivery outcome of one notification."""

    todo_id: str
    success: bool
    error: str | None = None
    timestamp: datetime = field(default_factory=utc_now)


DeliverFn = Callable[[Notification], Awaitable[None]]


class Notifier:
    """Queue-fed background sender.

    Delivery counters are shared between the worker and callers reading
    stats, so they are only touched under a lock.

    Attributes:
        todo_service: Used to check that a todo exists before queueing.
        send_delay: Simulated delivery latency in seconds.
    """

    def __init__(
        self,
        todo_service: TodoService,
        queue_size: int = 100,
        result_queue_size: int = 100,
        send_delay: float = 0.5,
        deliver: DeliverFn | None = None,
    ) -> None:
        """Initialize the notifier. The worker starts with start().

        Args:
            todo_service: Service used to look up todos.
            queue_size: Pending notifications held before refusing more.
            result_queue_size: Delivery results kept; older ones are not
                evicted, new ones are dropped when full.
            send_delay: Simulated latency of the default delivery.
            deliver: Coroutine function that performs delivery and raises
                on failure. Defaults to a logging simulation.
        """
        if queue_size < 1 or result_queue_size < 1:
            raise ValueError("queue sizes must be at least 1")

        self.todo_service = todo_service
        self.send_delay = send_delay
        self._deliver = deliver or self._simulate_delivery
        self._queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=queue_size)
        self._results: asyncio.Queue[NotificationResult] = asyncio.Queue(
            maxsize=result_queue_size
        )
        self._worker_task: asyncio.Task[None] | None = None
        self._lock = threading.Lock()
        self._total_sent = 0
        self._total_failed = 0

    @property
    def is_running(self) -> bool:
        """Whether the background worker is alive."""
        return self._worker_task is not None and not self._worker_task.done()

    def start(self) -> None:
        """Start the background worker on the running event loop."""
        if self.is_running:
            return
        self._worker_task = asyncio.create_task(self._worker(), name="todo-notifier")
        logger.info("Notification worker started", queue_size=self._queue.maxsize)

    async def stop(self) -> None:
        """Stop the worker. Notifications still queued are not delivered."""
        task = self._worker_task
        if task is None:
            return

        self._worker_task = None
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.info("Notification worker stopped", pending=self._queue.qsize())

    async def send_async(
        self,
        todo_id: str,
        message: str,
        delay_seconds: float = 0.0,
    ) -> Notification:
        """Queue a notification without waiting for delivery.

        Raises:
            TodoNotFoundError: If the todo does not exist.
            NotificationQueueFullError: If the queue has no free slot.
        """
        await self.todo_service.get_by_id(todo_id)

        notification = Notification(todo_id=todo_id, message=message, delay=delay_seconds)
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            raise NotificationQueueFullError("Notification queue is full") from None

        logger.info("Notification queued", todo_id=todo_id, delay_seconds=delay_seconds)
        return notification

    async def send_batch_async(self, todos: Sequence[Todo], message: str) -> None:
        """Queue the same message for several todos concurrently.

        Every todo is attempted; the first error is raised afterwards.
        """
        outcomes = await asyncio.gather(
            *(self.send_async(todo.id, message) for todo in todos),
            return_exceptions=True,
        )
        errors = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
        if errors:
            raise errors[0]

    async def send_with_timeout(
        self,
        todo_id: str,
        message: str,
        timeout: float,
    ) -> Notification:
        """Queue a notification, waiting up to ``timeout`` seconds for room.

        Raises:
            TodoNotFoundError: If the todo does not exist.
            NotificationTimeoutError: If no slot freed up in time.
        """
        await self.todo_service.get_by_id(todo_id)

        notification = Notification(todo_id=todo_id, message=message)
        try:
            await asyncio.wait_for(self._queue.put(notification), timeout)
        except TimeoutError:
            raise NotificationTimeoutError(
                f"Notification for todo {todo_id} not queued within {timeout}s"
            ) from None
        return notification

    async def join(self) -> None:
        """Wait until every queued notification has been processed."""
        await self._queue.join()

    def drain_results(self) -> list[NotificationResult]:
        """Remove and return the delivery results collected so far."""
        results = []
        while not self._results.empty():
            results.append(self._results.get_nowait())
        return results

    def get_stats(self) -> dict[str, Any]:
        """Delivery counters and queue depths."""
        with self._lock:
            sent, failed = self._total_sent, self._total_failed

        return {
            "total_sent": sent,
            "total_failed": failed,
            "queue_length": self._queue.qsize(),
            "results_pending": self._results.qsize(),
            "worker_running": self.is_running,
        }

    async def _worker(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._process(notification)
            finally:
                self._queue.task_done()

    async def _process(self, notification: Notification) -> None:
        if notification.delay > 0:
            await asyncio.sleep(notification.delay)

        try:
            await self._deliver(notification)
        except Exception as e:
            error = str(e) or type(e).__name__
            with self._lock:
                self._total_failed += 1
            logger.warning("Notification failed", todo_id=notification.todo_id, error=error)
            result = NotificationResult(todo_id=notification.todo_id, success=False, error=error)
        else:
            with self._lock:
                self._total_sent += 1
            result = NotificationResult(todo_id=notification.todo_id, success=True)

        try:
            self._results.put_nowait(result)
        except asyncio.QueueFull:
            logger.debug("Result queue full, dropping result", todo_id=notification.todo_id)

    async def _simulate_delivery(self, notification: Notification) -> None:
        logger.info(
            "Sending notification",
            todo_id=notification.todo_id,
            message=notification.message,
        )
        await asyncio.sleep(self.send_delay)
