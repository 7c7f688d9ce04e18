"""Batch execution for multi-item Drive tools.

Every batch tool fans its operations out concurrently, records one
``Outcome`` per operation and reports a summary. A failing remote call is
captured on its own outcome and never affects sibling operations.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from ..constants import ErrorMessage, ResponseStatus
from ..decorators import error_message

logger = logging.getLogger(__name__)

Op = TypeVar("Op")


@dataclass
class Outcome:
    """Result of attempting one batch operation."""

    success: bool
    echo: dict[str, Any] = field(default_factory=dict)
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, **self.echo}
        if self.success:
            if self.data is not None:
                result["data"] = self.data
        else:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class BatchSummary:
    """Counts derived from a list of outcomes."""

    total: int
    successful: int
    failed: int

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[Outcome]) -> "BatchSummary":
        successful = sum(1 for outcome in outcomes if outcome.success)
        return cls(
            total=len(outcomes),
            successful=successful,
            failed=len(outcomes) - successful,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "totalOperations": self.total,
            "successful": self.successful,
            "failed": self.failed,
        }


async def execute_batch(
    operations: Sequence[Op],
    perform: Callable[[Op], Awaitable[Any]],
    describe: Callable[[Op], dict[str, Any]],
    max_concurrency: int = 0,
) -> list[Outcome]:
    """Run ``perform`` for every operation and collect one outcome each.

    Args:
        operations: Ordered operations; may be empty
        perform: Coroutine function doing the remote work for one operation
        describe: Returns the identifying fields echoed on the outcome
        max_concurrency: Upper bound on in-flight operations, 0 for no limit

    Returns:
        Outcomes in input order, ``len(outcomes) == len(operations)``
    """
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    async def run_one(operation: Op) -> Outcome:
        echo = describe(operation)
        try:
            if semaphore is None:
                data = await perform(operation)
            else:
                async with semaphore:
                    data = await perform(operation)
        except Exception as e:
            message = error_message(e)
            logger.warning(f"Batch operation {echo} failed: {message}")
            return Outcome(success=False, echo=echo, error=message)
        return Outcome(success=True, echo=echo, data=data)

    if not operations:
        return []
    return list(await asyncio.gather(*(run_one(op) for op in operations)))


async def run_batch(
    tool_name: str,
    operations: Sequence[Op],
    perform: Callable[[Op], Awaitable[Any]],
    describe: Callable[[Op], dict[str, Any]],
    max_concurrency: int = 0,
) -> dict[str, Any]:
    """Execute a batch and shape the ``{results, summary}`` response."""
    logger.info(
        f"{tool_name}: dispatching {len(operations)} operations "
        f"(max_concurrency={max_concurrency or 'unbounded'})"
    )
    outcomes = await execute_batch(operations, perform, describe, max_concurrency)
    summary = BatchSummary.from_outcomes(outcomes)
    logger.info(
        f"{tool_name}: {summary.successful}/{summary.total} succeeded, "
        f"{summary.failed} failed"
    )
    return {
        "status": ResponseStatus.SUCCESS.value,
        "results": [outcome.to_dict() for outcome in outcomes],
        "summary": summary.to_dict(),
    }


def require_list(value: Any, field_name: str) -> list[Any]:
    """Reject batch input that is not a list."""
    if not isinstance(value, list):
        raise ValueError(ErrorMessage.BATCH_NOT_A_LIST.format(field=field_name))
    return value


def require_keys(items: list[Any], field_name: str, keys: Sequence[str]) -> None:
    """Reject batch items that are not dicts carrying every key in ``keys``."""
    for index, item in enumerate(items):
        for key in keys:
            if not isinstance(item, dict) or not item.get(key):
                raise ValueError(
                    ErrorMessage.BATCH_ITEM_MISSING.format(
                        field=field_name, index=index, key=key
                    )
                )
