# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bounded concurrent batch executor.

This module runs a sequence of independent units of work with at most
``concurrency`` of them in flight, and returns a BatchSummary once every
unit has finished.

Two strategies share the same contract:
- Worker pool: a fixed set of workers pulls items from a shared queue
- Semaphore: one task per item, admitted through a counting semaphore

Workers never touch the counters. Every worker pushes messages (unit
started, unit finished) into a single results queue, and one collector
task owns all aggregation state.

Example:
    executor = BatchExecutor(concurrency=3)

    async def create(request):
        return await todo_service.create(request)

    summary = await executor.run(requests, create)
    print(summary.success_count, summary.failure_count)
"""

import asyncio
import contextvars
import functools
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar, Union
from uuid import uuid4

from todobatch.core.batch.errors import BatchConfigurationError, BatchExecutionError
from todobatch.core.batch.models import (
    BatchState,
    BatchSummary,
    ConcurrencyStrategy,
    UnitResult,
    UnitState,
)
from todobatch.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Unit of work: sync callables run in a worker thread, async ones on the loop
ProcessFn = Union[Callable[[T], Awaitable[R]], Callable[[T], R]]

# Tells a pool worker that the queue is drained
_END_OF_QUEUE = object()

# Tells the collector that every producer has been joined
_DONE = object()


@dataclass(frozen=True)
class _UnitStarted:
    """Message sent when a unit leaves the queue and starts running."""

    index: int


class _ResultCollector(Generic[R]):
    """Single owner of the aggregation state for one batch.

    Consumes messages from the results queue until the end marker and
    tracks per-unit states, counters and the running/peak concurrency.
    """

    def __init__(self, expected: int) -> None:
        self.expected = expected
        self.states: list[UnitState] = [UnitState.QUEUED] * expected
        self.results: list[UnitResult[R]] = []
        self.success_count = 0
        self.failure_count = 0
        self.running = 0
        self.peak_running = 0
        self.state = BatchState.ACCEPTING

    async def consume(self, queue: asyncio.Queue[Any]) -> "_ResultCollector[R]":
        """Drain the results queue until the end marker arrives."""
        while True:
            message = await queue.get()
            if message is _DONE:
                break
            if isinstance(message, _UnitStarted):
                self._start(message.index)
            else:
                self._finish(message)

        if len(self.results) != self.expected:
            raise BatchExecutionError(
                f"Expected {self.expected} results but collected {len(self.results)}"
            )
        return self

    def _start(self, index: int) -> None:
        self._transition(index, UnitState.RUNNING)
        self.running += 1
        self.peak_running = max(self.peak_running, self.running)

    def _finish(self, result: UnitResult[R]) -> None:
        self._transition(result.index, result.state)
        self.running -= 1
        self.results.append(result)

        if result.success:
            self.success_count += 1
        else:
            self.failure_count += 1

        if len(self.results) == self.expected:
            self.state = BatchState.COMPLETE
        else:
            self.state = BatchState.IN_FLIGHT

    def _transition(self, index: int, target: UnitState) -> None:
        if not 0 <= index < self.expected:
            raise BatchExecutionError(f"Result index {index} is out of range")

        current = self.states[index]
        allowed = {
            UnitState.QUEUED: (UnitState.RUNNING,),
            UnitState.RUNNING: (UnitState.SUCCEEDED, UnitState.FAILED),
        }
        if target not in allowed.get(current, ()):
            raise BatchExecutionError(
                f"Unit {index} cannot move from {current.value} to {target.value}"
            )
        self.states[index] = target


class BatchExecutor(Generic[T, R]):
    """Run independent units of work with bounded concurrency.

    The concurrency limit is fixed at construction. The strategy has a
    default but can be chosen per call.

    Attributes:
        concurrency: Maximum number of units running at the same time.
        strategy: Default strategy used by run().
        name: Label used in logs and task names.
    """

    def __init__(
        self,
        concurrency: int,
        strategy: ConcurrencyStrategy | str = ConcurrencyStrategy.WORKER_POOL,
        name: str = "batch",
    ) -> None:
        """Initialize the executor.

        Args:
            concurrency: Maximum number of concurrently running units (>= 1).
            strategy: Default concurrency strategy.
            name: Label used in logs and task names.

        Raises:
            BatchConfigurationError: If concurrency or strategy is invalid.
        """
        if isinstance(concurrency, bool) or not isinstance(concurrency, int):
            raise BatchConfigurationError(
                f"Concurrency limit must be an integer, got {concurrency!r}"
            )
        if concurrency < 1:
            raise BatchConfigurationError(
                f"Concurrency limit must be at least 1, got {concurrency}"
            )

        self.concurrency = concurrency
        self.strategy = self._resolve_strategy(strategy)
        self.name = name

    async def run(
        self,
        items: Iterable[T],
        process: ProcessFn,
        strategy: ConcurrencyStrategy | str | None = None,
    ) -> BatchSummary[R]:
        """Process every item and return the aggregate summary.

        Failures raised by ``process`` are recorded on the item's result
        and never abort sibling units. The call returns only after every
        item has produced exactly one result.

        Args:
            items: Independent work items. Consumed once.
            process: Unit of work applied to each item. It reports failure
                by raising. Plain functions run in a worker thread.
            strategy: Overrides the default strategy for this call.

        Returns:
            BatchSummary with one UnitResult per item.

        Raises:
            BatchConfigurationError: If process is not callable or the
                strategy is unknown.
            BatchExecutionError: If concurrent units could not be spawned.
        """
        chosen = self.strategy if strategy is None else self._resolve_strategy(strategy)
        if not callable(process):
            raise BatchConfigurationError(
                f"Unit of work must be callable, got {type(process).__name__}"
            )

        work = list(items)
        batch_id = uuid4().hex[:12]
        log = logger.bind(
            batch=self.name,
            batch_id=batch_id,
            strategy=chosen.value,
            concurrency=self.concurrency,
        )
        started = time.perf_counter()

        if not work:
            log.debug("Empty batch, nothing to schedule")
            return BatchSummary.empty(
                strategy=chosen,
                concurrency=self.concurrency,
                elapsed=timedelta(seconds=time.perf_counter() - started),
                batch_id=batch_id,
            )

        log.info("Batch started", item_count=len(work))

        call = self._as_coroutine(process)
        collector = await self._execute(work, call, chosen, log)

        elapsed = timedelta(seconds=time.perf_counter() - started)
        summary: BatchSummary[R] = BatchSummary(
            success_count=collector.success_count,
            failure_count=collector.failure_count,
            results=collector.results,
            elapsed=elapsed,
            strategy=chosen,
            concurrency=self.concurrency,
            peak_concurrency=collector.peak_running,
            batch_id=batch_id,
        )

        log.info(
            "Batch complete",
            success_count=summary.success_count,
            failure_count=summary.failure_count,
            peak_concurrency=summary.peak_concurrency,
            time_elapsed=summary.time_elapsed,
        )
        return summary

    async def run_worker_pool(self, items: Iterable[T], process: ProcessFn) -> BatchSummary[R]:
        """Run the batch with the fixed worker pool strategy."""
        return await self.run(items, process, ConcurrencyStrategy.WORKER_POOL)

    async def run_with_semaphore(self, items: Iterable[T], process: ProcessFn) -> BatchSummary[R]:
        """Run the batch with the per-item task and semaphore strategy."""
        return await self.run(items, process, ConcurrencyStrategy.SEMAPHORE)

    async def _execute(
        self,
        work: list[T],
        call: Callable[[T], Awaitable[R]],
        strategy: ConcurrencyStrategy,
        log: Any,
    ) -> _ResultCollector[R]:
        """Spawn producers and the collector, then join all of them.

        On any failure, including cancellation of the caller, every task
        spawned so far is cancelled and awaited before the error propagates.
        """
        results: asyncio.Queue[Any] = asyncio.Queue()
        collector: _ResultCollector[R] = _ResultCollector(expected=len(work))
        tasks: list[asyncio.Task[None]] = []
        collect_task: asyncio.Task[_ResultCollector[R]] | None = None

        try:
            try:
                collect_task = asyncio.create_task(
                    collector.consume(results),
                    name=f"{self.name}-collector",
                )
                if strategy is ConcurrencyStrategy.WORKER_POOL:
                    self._spawn_workers(work, call, results, tasks)
                else:
                    self._spawn_per_item(work, call, results, tasks)
            except (RuntimeError, MemoryError) as e:
                log.error("Failed to spawn batch tasks", spawned=len(tasks), error=str(e))
                raise BatchExecutionError(f"Could not start batch: {e}") from e

            await asyncio.gather(*tasks)
            results.put_nowait(_DONE)
            return await collect_task
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            if collect_task is not None and not collect_task.done():
                pending.append(collect_task)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                log.warning("Batch aborted, cancelled in-flight units", cancelled=len(pending))
            raise

    def _spawn_workers(
        self,
        work: list[T],
        call: Callable[[T], Awaitable[R]],
        results: asyncio.Queue[Any],
        tasks: list[asyncio.Task[None]],
    ) -> None:
        jobs: asyncio.Queue[Any] = asyncio.Queue()
        for index, item in enumerate(work):
            jobs.put_nowait((index, item))

        worker_count = min(self.concurrency, len(work))
        for _ in range(worker_count):
            jobs.put_nowait(_END_OF_QUEUE)

        for worker_id in range(1, worker_count + 1):
            tasks.append(
                asyncio.create_task(
                    self._worker(worker_id, jobs, call, results),
                    name=f"{self.name}-worker-{worker_id}",
                )
            )

    def _spawn_per_item(
        self,
        work: list[T],
        call: Callable[[T], Awaitable[R]],
        results: asyncio.Queue[Any],
        tasks: list[asyncio.Task[None]],
    ) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)
        for index, item in enumerate(work):
            tasks.append(
                asyncio.create_task(
                    self._admit(semaphore, index, item, call, results),
                    name=f"{self.name}-item-{index}",
                )
            )

    async def _worker(
        self,
        worker_id: int,
        jobs: asyncio.Queue[Any],
        call: Callable[[T], Awaitable[R]],
        results: asyncio.Queue[Any],
    ) -> None:
        """Pull items until the end-of-queue marker."""
        processed = 0
        while True:
            job = await jobs.get()
            if job is _END_OF_QUEUE:
                break
            index, item = job
            results.put_nowait(await self._run_unit(index, item, call, results, worker_id))
            processed += 1

        logger.debug("Worker finished", batch=self.name, worker_id=worker_id, processed=processed)

    async def _admit(
        self,
        semaphore: asyncio.Semaphore,
        index: int,
        item: T,
        call: Callable[[T], Awaitable[R]],
        results: asyncio.Queue[Any],
    ) -> None:
        """Wait for an admission slot, run one item, release the slot."""
        async with semaphore:
            result = await self._run_unit(index, item, call, results)
        results.put_nowait(result)

    async def _run_unit(
        self,
        index: int,
        item: T,
        call: Callable[[T], Awaitable[R]],
        results: asyncio.Queue[Any],
        worker_id: int | None = None,
    ) -> UnitResult[R]:
        results.put_nowait(_UnitStarted(index))
        started = time.perf_counter()
        try:
            output = await call(item)
        except Exception as e:
            duration = time.perf_counter() - started
            message = str(e) or type(e).__name__
            logger.warning(
                "Unit of work failed",
                batch=self.name,
                index=index,
                worker_id=worker_id,
                error=message,
                error_type=type(e).__name__,
            )
            return UnitResult.failed(index, message, duration=duration, worker_id=worker_id)

        duration = time.perf_counter() - started
        logger.debug("Unit of work succeeded", batch=self.name, index=index, worker_id=worker_id)
        return UnitResult.succeeded(index, output, duration=duration, worker_id=worker_id)

    @staticmethod
    def _as_coroutine(process: ProcessFn) -> Callable[[T], Awaitable[R]]:
        """Adapt the unit of work to a coroutine function."""
        if inspect.iscoroutinefunction(process) or inspect.iscoroutinefunction(
            getattr(process, "__call__", None)
        ):
            return process  # type: ignore[return-value]

        async def call_in_thread(item: T) -> R:
            loop = asyncio.get_running_loop()
            context = contextvars.copy_context()
            future = loop.run_in_executor(None, functools.partial(context.run, process, item))
            try:
                output = await asyncio.shield(future)
            except asyncio.CancelledError:
                # A running thread cannot be interrupted; keep the unit (and
                # its admission slot) alive until the call returns.
                while not future.done():
                    try:
                        await asyncio.wait([future])
                    except asyncio.CancelledError:
                        continue
                if not future.cancelled():
                    future.exception()
                raise
            if inspect.isawaitable(output):
                return await output
            return output

        return call_in_thread

    @staticmethod
    def _resolve_strategy(strategy: ConcurrencyStrategy | str) -> ConcurrencyStrategy:
        try:
            return ConcurrencyStrategy(strategy)
        except ValueError:
            valid = ", ".join(s.value for s in ConcurrencyStrategy)
            raise BatchConfigurationError(
                f"Unknown concurrency strategy {strategy!r}; expected one of: {valid}"
            ) from None
