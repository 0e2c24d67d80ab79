"""
Unit tests for operation summaries
"""

from focusprint.models import BulkOperationStatus, BulkOperationType, BulkTargetType
from focusprint.summary import calculate_summary, get_statistics


class TestCalculateSummary:
    def test_empty(self):
        summary = calculate_summary([])

        assert summary.total_operations == 0
        assert summary.avg_completion_time_minutes == 0.0
        assert summary.success_rate_percentage == 0
        assert summary.operations_by_type["enable_users"] == 0
        assert set(summary.operations_by_target) == {t.value for t in BulkTargetType}

    def test_counts_and_rates(self, make_operation):
        operations = [
            make_operation(
                op_id="bulk_1",
                status=BulkOperationStatus.COMPLETED,
                started_at="2025-07-01T10:00:00.000Z",
                completed_at="2025-07-01T10:02:00.000Z",
            ),
            make_operation(
                op_id="bulk_2",
                status=BulkOperationStatus.FAILED,
                started_at="2025-07-01T10:00:00.000Z",
                completed_at="2025-07-01T10:04:00.000Z",
            ),
            make_operation(
                op_id="bulk_3",
                operation_type=BulkOperationType.SUSPEND_CLIENTS,
                target_type=BulkTargetType.CLIENTS,
                status=BulkOperationStatus.RUNNING,
                started_at="2025-07-01T10:00:00.000Z",
            ),
            make_operation(op_id="bulk_4"),
        ]

        summary = calculate_summary(operations)

        assert summary.total_operations == 4
        assert summary.pending_operations == 1
        assert summary.running_operations == 1
        assert summary.completed_operations == 1
        assert summary.failed_operations == 1
        assert summary.operations_by_type["enable_users"] == 3
        assert summary.operations_by_type["suspend_clients"] == 1
        assert summary.operations_by_target["clients"] == 1
        # Only operations with both timestamps count: (2 + 4) / 2 minutes
        assert summary.avg_completion_time_minutes == 3.0
        assert summary.success_rate_percentage == 50

    def test_success_rate_rounds_half_up(self, make_operation):
        """Test 1 of 8 finished operations reads as 13 percent"""
        statuses = [BulkOperationStatus.COMPLETED] + [BulkOperationStatus.FAILED] * 7
        operations = [
            make_operation(
                op_id=f"bulk_{i}",
                status=status,
                started_at="2025-07-01T10:00:00.000Z",
                completed_at="2025-07-01T10:01:00.000Z",
            )
            for i, status in enumerate(statuses)
        ]

        assert calculate_summary(operations).success_rate_percentage == 13

    def test_statistics_subset(self, make_operation):
        stats = get_statistics([make_operation()])

        assert stats["total_operations"] == 1
        assert "pending_operations" not in stats
        assert "success_rate_percentage" not in stats
        assert "operations_by_type" in stats
