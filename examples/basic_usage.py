"""
Basic usage examples for FocuSprint bulk operations
"""

import asyncio

from focusprint.bulk import BulkOperationManager
from focusprint.config import BulkSettings
from focusprint.models import (
    BulkOperationFilters,
    BulkOperationRequest,
    BulkOperationStatus,
    BulkOperationType,
    BulkTargetType,
)


async def run_examples():
    """Submit, poll, list and cancel bulk operations in-process"""

    print("FocuSprint Bulk Operations Examples")
    print("=" * 40)

    # In actual use these calls arrive through the MCP tools
    manager = BulkOperationManager(settings=BulkSettings(batch_delay_seconds=0.05))

    print("\n1. Dry run a role change:")
    preview = await manager.create_bulk_operation(
        BulkOperationRequest(
            operation_type=BulkOperationType.UPDATE_USER_ROLES,
            target_type=BulkTargetType.USERS,
            target_ids=["user-1", "user-2"],
            parameters={"new_role": "manager"},
            dry_run=True,
        ),
        "admin-1",
        "Ada Admin",
    )
    print(f"   Estimated duration: {preview.estimated_duration_seconds}s")

    print("\n2. Enable users in batches of 2:")
    response = await manager.create_bulk_operation(
        BulkOperationRequest(
            operation_type=BulkOperationType.ENABLE_USERS,
            target_type=BulkTargetType.USERS,
            target_ids=[f"user-{i}" for i in range(1, 6)],
            parameters={"enabled": True},
            reason="Onboarding batch",
            batch_size=2,
        ),
        "admin-1",
        "Ada Admin",
    )
    operation = await manager.wait_for(response.operation.id)
    print(f"   {operation.id}: {operation.status.value}, "
          f"{operation.progress.successful_items}/{operation.progress.total_items} ok")

    print("\n3. Cancel a migration mid-run:")
    response = await manager.create_bulk_operation(
        BulkOperationRequest(
            operation_type=BulkOperationType.CLIENT_MIGRATION,
            target_type=BulkTargetType.CLIENTS,
            target_ids=[f"client-{i}" for i in range(1, 21)],
            parameters={"target_plan": "BUSINESS"},
            batch_size=1,
        ),
        "admin-1",
        "Ada Admin",
    )
    await asyncio.sleep(0.1)
    result = await manager.cancel_bulk_operation(
        response.operation.id, "admin-1", "Ada Admin", "Wrong plan selected"
    )
    operation = await manager.wait_for(response.operation.id)
    print(f"   {result.message}; processed "
          f"{operation.progress.processed_items}/{operation.progress.total_items}")

    print("\n4. List completed operations:")
    history = await manager.get_bulk_operations(
        BulkOperationFilters(status=[BulkOperationStatus.COMPLETED])
    )
    for op in history.operations:
        print(f"   {op.id} {op.operation_type.value}")
    print(f"   Success rate: {history.summary.success_rate_percentage}%")


if __name__ == "__main__":
    asyncio.run(run_examples())
