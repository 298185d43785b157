# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for batch result types."""

from datetime import timedelta

import pytest

from todobatch.core.batch import (
    BatchSummary,
    ConcurrencyStrategy,
    UnitResult,
    UnitState,
)


class TestUnitResult:
    """Tests for single unit outcomes."""

    def test_succeeded(self):
        """Test building a successful result."""
        result = UnitResult.succeeded(2, "todo-2", duration=0.25, worker_id=1)

        assert result.success is True
        assert result.output == "todo-2"
        assert result.error_message is None
        assert result.state is UnitState.SUCCEEDED

    def test_failed(self):
        """Test building a failed result."""
        result = UnitResult.failed(0, "title must not be blank")

        assert result.success is False
        assert result.output is None
        assert result.state is UnitState.FAILED

    def test_none_is_a_valid_output(self):
        """Test that a unit returning None still counts as a success."""
        result = UnitResult.succeeded(0, None)

        assert result.success is True
        assert result.error_message is None
        assert result.to_dict()["output"] is None

    def test_failed_requires_message(self):
        """Test that a failure without a message is rejected."""
        with pytest.raises(ValueError, match="non-empty error message"):
            UnitResult.failed(0, "")

    def test_success_cannot_carry_error(self):
        """Test that a success with an error message is rejected."""
        with pytest.raises(ValueError):
            UnitResult(index=0, success=True, error_message="oops")

    def test_failure_cannot_carry_output(self):
        """Test that a failure with an output is rejected."""
        with pytest.raises(ValueError):
            UnitResult(index=0, success=False, output=1, error_message="oops")

    def test_negative_index_rejected(self):
        """Test that indices start at zero."""
        with pytest.raises(ValueError):
            UnitResult.succeeded(-1, None)

    def test_to_dict(self):
        """Test dictionary conversion for both outcomes."""
        ok = UnitResult.succeeded(1, {"id": "1"}, duration=0.0125, worker_id=2).to_dict()
        bad = UnitResult.failed(3, "boom", duration=0.001).to_dict()

        assert ok == {
            "index": 1,
            "success": True,
            "duration_ms": 12.5,
            "output": {"id": "1"},
            "worker_id": 2,
        }
        assert bad == {"index": 3, "success": False, "duration_ms": 1.0, "error": "boom"}


class TestUnitState:
    """Tests for unit lifecycle states."""

    @pytest.mark.parametrize(
        "state,terminal",
        [
            (UnitState.QUEUED, False),
            (UnitState.RUNNING, False),
            (UnitState.SUCCEEDED, True),
            (UnitState.FAILED, True),
        ],
    )
    def test_is_terminal(self, state, terminal):
        """Test which states end the lifecycle."""
        assert state.is_terminal is terminal


@pytest.fixture
def mixed_summary():
    """Summary with results in emission order."""
    return BatchSummary(
        success_count=2,
        failure_count=1,
        results=[
            UnitResult.succeeded(2, "c"),
            UnitResult.failed(1, "bad"),
            UnitResult.succeeded(0, "a"),
        ],
        elapsed=timedelta(milliseconds=312),
        strategy=ConcurrencyStrategy.WORKER_POOL,
        concurrency=3,
        peak_concurrency=3,
        batch_id="abc123",
    )


class TestBatchSummary:
    """Tests for the aggregate summary."""

    def test_total(self, mixed_summary):
        """Test that total is the sum of both counters."""
        assert mixed_summary.total == 3

    def test_ordered_results(self, mixed_summary):
        """Test sorting results back into input order."""
        assert [r.index for r in mixed_summary.ordered_results()] == [0, 1, 2]
        assert [r.index for r in mixed_summary.results] == [2, 1, 0]

    def test_failures(self, mixed_summary):
        """Test filtering failed results."""
        failures = mixed_summary.failures()

        assert len(failures) == 1
        assert failures[0].error_message == "bad"

    def test_time_elapsed(self, mixed_summary):
        """Test human readable elapsed time."""
        assert mixed_summary.time_elapsed == "312.00ms"

    def test_empty(self):
        """Test the summary of an empty batch."""
        summary = BatchSummary.empty(ConcurrencyStrategy.SEMAPHORE, concurrency=4)

        assert summary.total == 0
        assert summary.results == []
        assert summary.peak_concurrency == 0
        assert summary.strategy is ConcurrencyStrategy.SEMAPHORE

    def test_to_dict(self, mixed_summary):
        """Test dictionary conversion."""
        data = mixed_summary.to_dict()

        assert data["batch_id"] == "abc123"
        assert data["success_count"] == 2
        assert data["failure_count"] == 1
        assert data["strategy"] == "worker_pool"
        assert data["elapsed_ms"] == 312.0
        assert [item["index"] for item in data["results"]] == [0, 1, 2]
        assert data["results"][1]["error"] == "bad"

    def test_batch_id_ignored_in_equality(self, mixed_summary):
        """Test that two summaries with different ids compare equal."""
        other = BatchSummary(
            success_count=2,
            failure_count=1,
            results=list(mixed_summary.results),
            elapsed=mixed_summary.elapsed,
            strategy=mixed_summary.strategy,
            concurrency=3,
            peak_concurrency=3,
            batch_id="other",
        )

        assert other == mixed_summary
