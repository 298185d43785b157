# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bounded concurrent batch execution.

Components:
- BatchExecutor: Runs independent units of work with a concurrency cap
- UnitResult / BatchSummary: Per-item and aggregate outcomes
- ConcurrencyStrategy: Worker pool or per-item semaphore scheduling

Quick Start:
    from todobatch.core.batch import BatchExecutor, ConcurrencyStrategy

    executor = BatchExecutor(concurrency=3)
    summary = await executor.run(items, process, ConcurrencyStrategy.SEMAPHORE)
"""

from todobatch.core.batch.errors import (
    BatchConfigurationError,
    BatchError,
    BatchExecutionError,
)
from todobatch.core.batch.executor import BatchExecutor, ProcessFn
from todobatch.core.batch.models import (
    BatchState,
    BatchSummary,
    ConcurrencyStrategy,
    UnitResult,
    UnitState,
)

__all__ = [
    # Executor
    "BatchExecutor",
    "ProcessFn",
    # Models
    "BatchSummary",
    "UnitResult",
    "ConcurrencyStrategy",
    "UnitState",
    "BatchState",
    # Errors
    "BatchError",
    "BatchConfigurationError",
    "BatchExecutionError",
]
