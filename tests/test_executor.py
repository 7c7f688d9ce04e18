"""Tests for the batch executor.

Tests cover:
- Outcome and summary shape
- Count invariants for empty, all-success, all-failure and mixed batches
- Failure isolation between sibling operations
- Concurrency cap
- Batch input validation helpers
"""

import asyncio

import pytest

from gdrive_mcp.tools.executor import (
    BatchSummary,
    Outcome,
    execute_batch,
    require_keys,
    require_list,
    run_batch,
)

from fakes import http_error


def _echo_id(op):
    return {"fileId": op}


@pytest.mark.unit
class TestOutcome:
    """Test outcome serialization."""

    def test_success_outcome_with_data(self):
        outcome = Outcome(success=True, echo={"fileId": "A"}, data={"id": "A"})
        assert outcome.to_dict() == {"success": True, "fileId": "A", "data": {"id": "A"}}

    def test_success_outcome_without_data_omits_key(self):
        outcome = Outcome(success=True, echo={"fileId": "A", "operation": "trash"})
        assert outcome.to_dict() == {"success": True, "fileId": "A", "operation": "trash"}

    def test_failed_outcome_carries_error(self):
        outcome = Outcome(success=False, echo={"fileId": "B"}, error="File not found: B.")
        assert outcome.to_dict() == {
            "success": False,
            "fileId": "B",
            "error": "File not found: B.",
        }


@pytest.mark.unit
class TestBatchSummary:
    """Test summary derivation."""

    def test_empty_summary(self):
        summary = BatchSummary.from_outcomes([])
        assert summary.to_dict() == {"totalOperations": 0, "successful": 0, "failed": 0}

    def test_mixed_summary(self):
        outcomes = [
            Outcome(success=True),
            Outcome(success=False, error="x"),
            Outcome(success=True),
        ]
        summary = BatchSummary.from_outcomes(outcomes)
        assert summary.total == 3
        assert summary.successful == 2
        assert summary.failed == 1


@pytest.mark.unit
class TestExecuteBatch:
    """Test batch execution semantics."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 1, 5, 25])
    async def test_counts_match_operations(self, count):
        """Every operation yields exactly one outcome."""
        async def perform(op):
            if op % 3 == 0:
                raise RuntimeError(f"op {op} failed")
            return op

        operations = list(range(count))
        result = await run_batch("test", operations, perform, _echo_id)

        assert len(result["results"]) == count
        summary = result["summary"]
        assert summary["totalOperations"] == count
        assert summary["successful"] + summary["failed"] == count

    @pytest.mark.asyncio
    async def test_all_failures_are_absorbed(self):
        """A batch whose every call fails still returns normally."""
        async def perform(op):
            raise http_error(500, f"Backend error for {op}")

        result = await run_batch("test", ["A", "B", "C"], perform, _echo_id)

        assert result["status"] == "success"
        assert result["summary"] == {"totalOperations": 3, "successful": 0, "failed": 3}
        assert {r["fileId"] for r in result["results"]} == {"A", "B", "C"}
        assert all(r["error"].startswith("Backend error for") for r in result["results"])

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_siblings(self):
        completed = []

        async def perform(op):
            if op == "B":
                raise http_error(404, "File not found: B.")
            await asyncio.sleep(0)
            completed.append(op)
            return {"id": op}

        outcomes = await execute_batch(["A", "B", "C"], perform, _echo_id)

        assert sorted(completed) == ["A", "C"]
        by_id = {o.echo["fileId"]: o for o in outcomes}
        assert by_id["A"].success and by_id["A"].data == {"id": "A"}
        assert not by_id["B"].success
        assert by_id["B"].error == "File not found: B."
        assert by_id["C"].success

    @pytest.mark.asyncio
    async def test_provider_message_passed_through(self):
        """HttpError outcomes carry the API's message, not the HTTP preamble."""
        async def perform(op):
            raise http_error(403, "The user does not have sufficient permissions for this file.")

        outcomes = await execute_batch(["A"], perform, _echo_id)
        assert outcomes[0].error == "The user does not have sufficient permissions for this file."

    @pytest.mark.asyncio
    async def test_empty_batch_performs_nothing(self):
        async def perform(op):
            raise AssertionError("should not be called")

        assert await execute_batch([], perform, _echo_id) == []

    @pytest.mark.asyncio
    async def test_concurrency_cap_is_respected(self):
        in_flight = 0
        peak = 0

        async def perform(op):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return op

        outcomes = await execute_batch(list(range(12)), perform, _echo_id, max_concurrency=3)

        assert len(outcomes) == 12
        assert all(o.success for o in outcomes)
        assert peak <= 3

    @pytest.mark.asyncio
    async def test_unbounded_runs_concurrently(self):
        in_flight = 0
        peak = 0

        async def perform(op):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await execute_batch(list(range(5)), perform, _echo_id, max_concurrency=0)
        assert peak == 5


@pytest.mark.unit
class TestBatchInputValidation:
    """Test validation of batch input shape."""

    def test_require_list_accepts_empty(self):
        assert require_list([], "file_ids") == []

    def test_require_list_rejects_non_list(self):
        with pytest.raises(ValueError, match="file_ids must be a list"):
            require_list("A,B", "file_ids")

    def test_require_keys_reports_index_and_key(self):
        items = [{"fileId": "A", "role": "reader"}, {"fileId": "B"}]
        with pytest.raises(ValueError, match=r"operations\[1\] is missing required key 'role'"):
            require_keys(items, "operations", ("fileId", "role"))

    def test_require_keys_rejects_non_dict_items(self):
        with pytest.raises(ValueError, match="missing required key 'fileId'"):
            require_keys(["A"], "operations", ("fileId",))
