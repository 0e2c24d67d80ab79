"""
Unit tests for focusprint/tools/bulk.py MCP tool functions
"""

from unittest.mock import AsyncMock, Mock

import pytest

from focusprint.bulk import BulkOperationManager
from focusprint.exceptions import ConcurrencyLimitError
from focusprint.models import BulkOperationStatus
from focusprint.tools.bulk import (
    _managers,
    cancel_bulk_operation,
    get_bulk_capabilities,
    get_bulk_operation,
    list_bulk_operations,
    register_bulk_tools,
    submit_bulk_operation,
)


def submit_kwargs(**overrides):
    kwargs = {
        "operation_type": "enable_users",
        "target_type": "users",
        "target_ids": ["u1", "u2"],
        "parameters": {"enabled": True},
        "reason": "Onboarding",
        "dry_run": False,
        "batch_size": None,
        "metadata": None,
        "created_by": "admin-1",
        "created_by_name": "Ada Admin",
    }
    kwargs.update(overrides)
    return kwargs


def list_kwargs(**overrides):
    kwargs = {
        "operation_type": None,
        "target_type": None,
        "status": None,
        "created_by": None,
        "date_from": None,
        "date_to": None,
        "search": None,
        "page": 1,
        "limit": 50,
    }
    kwargs.update(overrides)
    return kwargs


class TestBulkTools:
    """Test MCP bulk tool functions against a real manager"""

    @pytest.fixture
    def manager(self, bulk_settings):
        return BulkOperationManager(settings=bulk_settings)

    @pytest.fixture
    def setup_managers(self, manager):
        """Setup _managers module variable"""
        original = _managers.copy()
        _managers.clear()
        _managers.update({"bulk_manager": manager})
        yield
        _managers.clear()
        _managers.update(original)

    # SUBMIT_BULK_OPERATION TOOL TESTS

    @pytest.mark.asyncio
    async def test_submit_success(self, setup_managers, manager):
        result = await submit_bulk_operation.fn(**submit_kwargs())

        assert result["success"] is True
        assert result["message"] == "Bulk operation created and started successfully"
        assert result["operation"]["status"] == "pending"
        assert result["operation"]["reason"] == "Onboarding"
        assert len(result["validation_results"]) == 2
        assert result["estimated_duration_seconds"] == 1
        assert result["request_id"]

        operation = await manager.wait_for(result["operation"]["id"])
        assert operation.status.value == "completed"

    @pytest.mark.asyncio
    async def test_submit_dry_run(self, setup_managers, manager):
        result = await submit_bulk_operation.fn(**submit_kwargs(dry_run=True))

        assert result["success"] is True
        assert result["message"] == "Bulk operation validated successfully"
        assert manager.store.get_all() == []

    @pytest.mark.asyncio
    async def test_submit_unknown_operation_type(self, setup_managers):
        result = await submit_bulk_operation.fn(
            **submit_kwargs(operation_type="explode_users")
        )

        assert result["success"] is False
        assert result["error_code"] == "INVALID_PARAMETER"
        assert "Invalid operation_type" in result["error"]

    @pytest.mark.asyncio
    async def test_submit_empty_targets(self, setup_managers):
        result = await submit_bulk_operation.fn(**submit_kwargs(target_ids=[]))

        assert result["success"] is False
        assert result["error_code"] == "TARGET_LIMIT"
        assert result["error"] == "At least one target ID is required"

    @pytest.mark.asyncio
    async def test_submit_validation_failure(self, setup_managers, manager):
        result = await submit_bulk_operation.fn(
            **submit_kwargs(operation_type="update_user_roles", parameters={})
        )

        assert result["success"] is False
        assert result["error_code"] == "BULK_VALIDATION_FAILED"
        assert [v["can_proceed"] for v in result["validation_results"]] == [
            False,
            False,
        ]
        assert manager.store.get_all() == []

    @pytest.mark.asyncio
    async def test_submit_concurrency_limit(self, setup_managers):
        _managers["bulk_manager"] = Mock()
        _managers["bulk_manager"].create_bulk_operation = AsyncMock(
            side_effect=ConcurrencyLimitError(3)
        )

        result = await submit_bulk_operation.fn(**submit_kwargs())

        assert result["success"] is False
        assert result["error_code"] == "CONCURRENCY_LIMIT"

    @pytest.mark.asyncio
    async def test_submit_unexpected_error(self, setup_managers):
        _managers["bulk_manager"] = Mock()
        _managers["bulk_manager"].create_bulk_operation = AsyncMock(
            side_effect=RuntimeError("store offline")
        )

        result = await submit_bulk_operation.fn(**submit_kwargs())

        assert result["success"] is False
        assert result["error"] == "Error: RuntimeError: store offline"

    # GET_BULK_OPERATION TOOL TESTS

    @pytest.mark.asyncio
    async def test_get_operation(self, setup_managers, manager):
        submitted = await submit_bulk_operation.fn(**submit_kwargs())
        op_id = submitted["operation"]["id"]
        await manager.wait_for(op_id)

        result = await get_bulk_operation.fn(operation_id=op_id)

        assert result["success"] is True
        assert result["operation"]["status"] == "completed"
        assert len(result["operation"]["results"]) == 2
        runtime = result["runtime_info"]
        assert runtime["is_running"] is False
        assert runtime["estimated_time_remaining_seconds"] is None
        assert runtime["actual_duration_seconds"] is not None
        assert runtime["can_be_cancelled"] is False

    @pytest.mark.asyncio
    async def test_get_operation_not_found(self, setup_managers):
        result = await get_bulk_operation.fn(operation_id="bulk_missing")

        assert result["success"] is False
        assert result["error_code"] == "OperationNotFoundError"

    # LIST_BULK_OPERATIONS TOOL TESTS

    @pytest.mark.asyncio
    async def test_list_with_filters(self, setup_managers, manager, make_operation):
        manager.store.add(make_operation(op_id="bulk_1"))
        manager.store.add(
            make_operation(op_id="bulk_2", status=BulkOperationStatus.COMPLETED)
        )

        result = await list_bulk_operations.fn(**list_kwargs(status="completed"))

        assert result["success"] is True
        assert [op["id"] for op in result["operations"]] == ["bulk_2"]
        assert result["pagination"]["total"] == 1
        assert result["filters"]["status"] == ["completed"]
        assert result["summary"]["total_operations"] == 2

    @pytest.mark.asyncio
    async def test_list_caps_page_size(self, setup_managers):
        result = await list_bulk_operations.fn(**list_kwargs(limit=500))
        assert result["pagination"]["limit"] == 100

    @pytest.mark.asyncio
    async def test_list_invalid_status(self, setup_managers):
        result = await list_bulk_operations.fn(**list_kwargs(status="completed,done"))

        assert result["success"] is False
        assert result["error_code"] == "INVALID_PARAMETER"

    # CANCEL_BULK_OPERATION TOOL TESTS

    @pytest.mark.asyncio
    async def test_cancel_pending(self, setup_managers, manager, make_operation):
        manager.store.add(make_operation(op_id="bulk_1"))

        result = await cancel_bulk_operation.fn(
            operation_id="bulk_1",
            reason=None,
            cancelled_by="admin-1",
            cancelled_by_name="Ada Admin",
        )

        assert result["success"] is True
        assert result["message"] == "Bulk operation cancelled successfully"
        operation = manager.store.get_by_id("bulk_1")
        assert operation.status.value == "cancelled"
        assert operation.error_message == "Bulk operation cancelled by admin"

    @pytest.mark.asyncio
    async def test_cancel_missing(self, setup_managers):
        result = await cancel_bulk_operation.fn(
            operation_id="bulk_missing",
            reason="typo",
            cancelled_by="admin-1",
            cancelled_by_name="Ada Admin",
        )

        assert result["success"] is False
        assert result["message"] == "Bulk operation not found"
        assert result["operation_id"] == "bulk_missing"

    # GET_BULK_CAPABILITIES TOOL TESTS

    @pytest.mark.asyncio
    async def test_capabilities(self, setup_managers):
        result = await get_bulk_capabilities.fn()

        assert result["success"] is True
        types = [op["operation_type"] for op in result["supported_operations"]]
        assert "enable_users" in types
        assert "client_migration" in types
        assert "enable_users" in result["operation_categories"]["user_management"][
            "operations"
        ]
        assert result["parameter_templates"]["update_user_roles"] == {
            "new_role": "member"
        }
        assert "delete_users" in result["risk_levels"]["critical"]
        assert result["system_limits"]["max_batch_size"] == 100
        assert result["current_statistics"]["total_operations"] == 0

    # REGISTRATION

    def test_register_bulk_tools(self):
        mcp = Mock()
        original = _managers.copy()
        try:
            register_bulk_tools(mcp, {"bulk_manager": Mock()})
            assert mcp.tool.call_count == 5
        finally:
            _managers.clear()
            _managers.update(original)
