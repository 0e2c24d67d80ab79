"""
Aggregate statistics over stored bulk operations
"""

from typing import Any, Dict, List

from .models import (
    BulkOperation,
    BulkOperationStatus,
    BulkOperationSummary,
    BulkOperationType,
    BulkTargetType,
)
from .utils import duration_seconds, round_half_up


def calculate_summary(operations: List[BulkOperation]) -> BulkOperationSummary:
    """Counts by status, type and target, plus timing and success rate"""

    def count_status(status: BulkOperationStatus) -> int:
        return sum(1 for op in operations if op.status == status)

    by_type = {t.value: 0 for t in BulkOperationType}
    by_target = {t.value: 0 for t in BulkTargetType}
    for op in operations:
        by_type[op.operation_type.value] += 1
        by_target[op.target_type.value] += 1

    summary = BulkOperationSummary(
        total_operations=len(operations),
        pending_operations=count_status(BulkOperationStatus.PENDING),
        running_operations=count_status(BulkOperationStatus.RUNNING),
        completed_operations=count_status(BulkOperationStatus.COMPLETED),
        failed_operations=count_status(BulkOperationStatus.FAILED),
        operations_by_type=by_type,
        operations_by_target=by_target,
    )

    finished = [op for op in operations if op.started_at and op.completed_at]
    if finished:
        total_seconds = sum(
            duration_seconds(op.started_at, op.completed_at) for op in finished
        )
        summary.avg_completion_time_minutes = round_half_up(
            total_seconds / len(finished) / 60, 2
        )

        successful = sum(
            1 for op in finished if op.status == BulkOperationStatus.COMPLETED
        )
        summary.success_rate_percentage = round_half_up(
            successful / len(finished) * 100
        )

    return summary


def get_statistics(operations: List[BulkOperation]) -> Dict[str, Any]:
    """Subset of the summary shown on the capabilities screen"""
    summary = calculate_summary(operations)
    return summary.model_dump(
        include={
            "total_operations",
            "running_operations",
            "completed_operations",
            "failed_operations",
            "avg_completion_time_minutes",
            "operations_by_type",
            "operations_by_target",
        }
    )
