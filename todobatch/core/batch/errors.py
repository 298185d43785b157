# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the batch executor.

Per-item failures are never raised; they are recorded on the item's
UnitResult. Only batch-level problems surface as exceptions.
"""


class BatchError(Exception):
    """Base exception for batch executor errors."""

    pass


class BatchConfigurationError(BatchError):
    """Raised before any work starts when the batch cannot be set up.

    Examples are a concurrency limit below one, a process callable that
    is not callable, or an unknown strategy name.
    """

    pass


class BatchExecutionError(BatchError):
    """Raised when the batch as a whole cannot be carried out.

    Covers failures to spawn concurrent units and broken result
    bookkeeping. Callers receive this instead of a partial summary.
    """

    pass
