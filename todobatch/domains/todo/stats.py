# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request statistics for the todo service.

Counters are updated from request handlers and batch workers at the same
time, so every read and write happens under one mutual-exclusion lock,
held only for the duration of the update or snapshot.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from todobatch.domains.todo.repository import Capability
from todobatch.utils.datetime import format_duration, format_iso, utc_now

if TYPE_CHECKING:
    from todobatch.domains.todo.repository import TodoRepository

logger = logging.getLogger(__name__)

REQUEST_TYPES = ("create", "read", "update", "delete")


class StatsService:
    """Thread-safe request counters plus repository-derived todo counts.

    Attributes:
        repository: Repository used for todo counts and storage stats.
    """

    def __init__(self, repository: TodoRepository) -> None:
        """Initialize stats service.

        Args:
            repository: Repository to read todo counts from.
        """
        self.repository = repository
        self._lock = threading.Lock()
        self._request_count = 0
        self._total_response_time = timedelta(0)
        self._last_request_time: datetime = utc_now()
        self._by_type: dict[str, int] = dict.fromkeys(REQUEST_TYPES, 0)

    def record_request(self, request_type: str, duration: timedelta) -> None:
        """Record one served request.

        Args:
            request_type: One of create, read, update, delete. Other values
                only count towards the total.
            duration: Time spent serving the request.
        """
        with self._lock:
            self._request_count += 1
            self._total_response_time += duration
            self._last_request_time = utc_now()
            if request_type in self._by_type:
                self._by_type[request_type] += 1

    @property
    def request_count(self) -> int:
        """Total number of recorded requests."""
        with self._lock:
            return self._request_count

    async def get_stats(self) -> dict[str, Any]:
        """Todo counts, completion rate and storage type.

        Returns:
            Dictionary of counts keyed by name.
        """
        total = await self.repository.count()
        completed = await self.repository.count_completed()
        completion_rate = completed / total * 100 if total > 0 else 0.0

        return {
            "total_todos": total,
            "completed_todos": completed,
            "pending_todos": total - completed,
            "completion_rate": round(completion_rate, 2),
            "active_tasks": len(asyncio.all_tasks()),
            "storage_type": self.repository.storage_type,
        }

    def get_detailed_stats(self) -> dict[str, Any]:
        """Request counters snapshot."""
        with self._lock:
            average = timedelta(0)
            if self._request_count > 0:
                average = self._total_response_time / self._request_count

            return {
                "request_count": self._request_count,
                "last_request_time": format_iso(self._last_request_time),
                "avg_response_time": format_duration(average),
                **{f"{name}_requests": count for name, count in self._by_type.items()},
            }

    def get_storage_stats(self) -> dict[str, Any]:
        """Storage-specific statistics when the backend provides them."""
        if not self.repository.supports(Capability.STORAGE_INFO):
            return {"error": "storage does not provide statistics"}
        return self.repository.get_stats()

    def reset(self) -> None:
        """Reset all request counters."""
        with self._lock:
            self._request_count = 0
            self._total_response_time = timedelta(0)
            self._last_request_time = utc_now()
            self._by_type = dict.fromkeys(REQUEST_TYPES, 0)

        logger.info("Request statistics reset")
