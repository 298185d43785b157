# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Result types produced by the batch executor.

UnitResult describes one processed item, BatchSummary the whole batch.
Both are plain dataclasses; the API layer maps them to pydantic response
models.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from todobatch.utils.datetime import format_duration

R = TypeVar("R")


class ConcurrencyStrategy(str, Enum):
    """How the executor schedules units of work.

    WORKER_POOL runs a fixed set of long-lived workers fed from a shared
    queue. SEMAPHORE spawns one task per item and limits admission with
    a counting semaphore.
    """

    WORKER_POOL = "worker_pool"
    SEMAPHORE = "semaphore"


class UnitState(str, Enum):
    """Lifecycle of a single unit of work."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed."""
        return self in (UnitState.SUCCEEDED, UnitState.FAILED)


class BatchState(str, Enum):
    """Lifecycle of a batch as seen by the result collector."""

    ACCEPTING = "accepting"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"


@dataclass(frozen=True)
class UnitResult(Generic[R]):
    """Outcome of processing one item.

    ``success`` decides which field is populated. A unit of work that
    returns None succeeds with ``output=None``: None is a valid output,
    and ``error_message`` stays None for every successful result.

    Attributes:
        index: Position of the item in the original input sequence.
        success: Whether the unit of work completed without raising.
        output: Value returned by the unit of work (success only).
        error_message: Description of the failure (failure only).
        duration: Seconds spent inside the unit of work.
        worker_id: Worker that ran the item (worker pool strategy only).
    """

    index: int
    success: bool
    output: R | None = None
    error_message: str | None = None
    duration: float = 0.0
    worker_id: int | None = None

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"index must be non-negative, got {self.index}")
        if self.success and self.error_message is not None:
            raise ValueError("a successful result cannot carry an error message")
        if not self.success:
            if not self.error_message:
                raise ValueError("a failed result requires a non-empty error message")
            if self.output is not None:
                raise ValueError("a failed result cannot carry an output")

    @classmethod
    def succeeded(
        cls,
        index: int,
        output: R,
        duration: float = 0.0,
        worker_id: int | None = None,
    ) -> "UnitResult[R]":
        """Build a successful result."""
        return cls(
            index=index,
            success=True,
            output=output,
            duration=duration,
            worker_id=worker_id,
        )

    @classmethod
    def failed(
        cls,
        index: int,
        error_message: str,
        duration: float = 0.0,
        worker_id: int | None = None,
    ) -> "UnitResult[R]":
        """Build a failed result."""
        return cls(
            index=index,
            success=False,
            error_message=error_message,
            duration=duration,
            worker_id=worker_id,
        )

    @property
    def state(self) -> UnitState:
        """Terminal state reached by this unit."""
        return UnitState.SUCCEEDED if self.success else UnitState.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        data: dict[str, Any] = {
            "index": self.index,
            "success": self.success,
            "duration_ms": round(self.duration * 1000, 3),
        }
        if self.success:
            data["output"] = self.output
        else:
            data["error"] = self.error_message
        if self.worker_id is not None:
            data["worker_id"] = self.worker_id
        return data


@dataclass
class BatchSummary(Generic[R]):
    """Aggregate outcome of a batch.

    Results are kept in emission order, which generally differs from
    input order. Use ordered_results() to get them sorted by index.

    Attributes:
        success_count: Number of units that succeeded.
        failure_count: Number of units that failed.
        results: One UnitResult per input item.
        elapsed: Wall-clock time from invocation to the last aggregated result.
        strategy: Strategy used to run the batch.
        concurrency: Configured concurrency limit.
        peak_concurrency: Highest number of units observed running at once.
    """

    success_count: int
    failure_count: int
    results: list[UnitResult[R]]
    elapsed: timedelta
    strategy: ConcurrencyStrategy
    concurrency: int
    peak_concurrency: int = 0
    batch_id: str | None = field(default=None, compare=False)

    @classmethod
    def empty(
        cls,
        strategy: ConcurrencyStrategy,
        concurrency: int,
        elapsed: timedelta = timedelta(0),
        batch_id: str | None = None,
    ) -> "BatchSummary[R]":
        """Summary for a batch with no items."""
        return cls(
            success_count=0,
            failure_count=0,
            results=[],
            elapsed=elapsed,
            strategy=strategy,
            concurrency=concurrency,
            batch_id=batch_id,
        )

    @property
    def total(self) -> int:
        """Number of items in the batch."""
        return self.success_count + self.failure_count

    @property
    def time_elapsed(self) -> str:
        """Elapsed time as a short human readable string."""
        return format_duration(self.elapsed)

    def ordered_results(self) -> list[UnitResult[R]]:
        """Results sorted by their original input position."""
        return sorted(self.results, key=lambda result: result.index)

    def failures(self) -> list[UnitResult[R]]:
        """Failed results sorted by index."""
        return [result for result in self.ordered_results() if not result.success]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "batch_id": self.batch_id,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "results": [result.to_dict() for result in self.ordered_results()],
            "time_elapsed": self.time_elapsed,
            "elapsed_ms": round(self.elapsed.total_seconds() * 1000, 3),
            "strategy": self.strategy.value,
            "concurrency": self.concurrency,
            "peak_concurrency": self.peak_concurrency,
        }
