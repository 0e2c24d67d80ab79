"""
Bulk operation tools for FocuSprint
"""

from typing import Any

from pydantic import Field

from ..capabilities import (
    OPERATION_CATEGORIES,
    PARAMETER_TEMPLATES,
    RISK_LEVELS,
    system_limits,
)
from ..exceptions import (
    BulkValidationError,
    ErrorSanitizer,
    OperationNotFoundError,
)
from ..logging_config import setup_logging
from ..models import (
    BulkOperationFilters,
    BulkOperationRequest,
    BulkOperationStatus,
    BulkOperationType,
    BulkTargetType,
)
from ..utils import duration_seconds, round_half_up
from .base import create_success_response, handle_tool_errors, parse_enum, parse_enum_list


logger = setup_logging()

# Module-level managers dictionary for dependency injection
_managers: dict[str, Any] = {}

MAX_PAGE_SIZE = 100


def _ensure_managers_initialized():
    """Ensure managers are initialized, with fallback to server-level managers"""
    if not _managers:
        try:
            from .. import server

            bulk_manager = getattr(server, "bulk_manager", None)
            if not bulk_manager:
                raise AttributeError("bulk_manager not found in server module")

            _managers.update(
                {
                    "bulk_manager": bulk_manager,
                    "config_manager": getattr(server, "config_manager", None),
                }
            )
        except (ImportError, AttributeError) as e:
            logger.error(f"Failed to initialize managers: {e!s}")
            raise RuntimeError(f"Manager initialization failed: {e!s}")


@handle_tool_errors
async def submit_bulk_operation(
    operation_type: str = Field(..., description="Bulk operation type, e.g. enable_users"),
    target_type: str = Field(..., description="Target kind: users, licenses, clients, ..."),
    target_ids: list[str] = Field(..., description="Ids of the entities to act upon"),
    parameters: dict[str, Any] | None = Field(
        None, description="Operation parameters, e.g. {\"new_role\": \"member\"}"
    ),
    reason: str | None = Field(None, description="Why the operation is run"),
    dry_run: bool = Field(False, description="Validate only, do not store or run"),
    batch_size: int | None = Field(None, description="Targets per batch"),
    metadata: dict[str, Any] | None = Field(None, description="Free-form metadata"),
    created_by: str = Field("mcp-admin", description="Admin id"),
    created_by_name: str = Field("MCP Admin", description="Admin display name"),
    request_id: str | None = None,
) -> dict[str, Any]:
    """Create and start a bulk operation"""
    _ensure_managers_initialized()

    request = BulkOperationRequest(
        operation_type=parse_enum(BulkOperationType, operation_type, "operation_type"),
        target_type=parse_enum(BulkTargetType, target_type, "target_type"),
        target_ids=target_ids,
        parameters=parameters or {},
        reason=reason,
        dry_run=dry_run,
        batch_size=batch_size,
        metadata=metadata,
    )

    try:
        response = await _managers["bulk_manager"].create_bulk_operation(
            request, created_by, created_by_name
        )
    except BulkValidationError as e:
        logger.info(f"Request {request_id}: bulk submission rejected by validation")
        return {
            "success": False,
            "error": ErrorSanitizer.get_user_friendly_message(e),
            "error_code": e.error_code,
            "validation_results": [
                v.model_dump(mode="json") for v in e.validation_results
            ],
            "request_id": request_id,
        }

    message = (
        "Bulk operation validated successfully"
        if dry_run
        else "Bulk operation created and started successfully"
    )
    return create_success_response(
        message, request_id, **response.model_dump(mode="json")
    )


@handle_tool_errors
async def get_bulk_operation(
    operation_id: str = Field(..., description="Bulk operation id"),
    request_id: str | None = None,
) -> dict[str, Any]:
    """Get a bulk operation with runtime information"""
    _ensure_managers_initialized()

    operation = await _managers["bulk_manager"].get_bulk_operation(operation_id)
    if operation is None:
        raise OperationNotFoundError(operation_id)

    is_running = operation.status == BulkOperationStatus.RUNNING
    actual = duration_seconds(operation.started_at, operation.completed_at)

    return {
        "success": True,
        "operation": operation.model_dump(mode="json"),
        "runtime_info": {
            "is_running": is_running,
            "estimated_time_remaining_seconds": (
                operation.progress.estimated_time_remaining_seconds
                if is_running
                else None
            ),
            "actual_duration_seconds": (
                round_half_up(actual) if actual is not None else None
            ),
            "can_be_cancelled": operation.status
            in (BulkOperationStatus.PENDING, BulkOperationStatus.RUNNING),
        },
        "request_id": request_id,
    }


@handle_tool_errors
async def list_bulk_operations(
    operation_type: str | None = Field(None, description="Comma-separated operation types"),
    target_type: str | None = Field(None, description="Comma-separated target types"),
    status: str | None = Field(None, description="Comma-separated statuses"),
    created_by: str | None = Field(None, description="Creator admin id"),
    date_from: str | None = Field(None, description="Created at or after (ISO format)"),
    date_to: str | None = Field(None, description="Created at or before (ISO format)"),
    search: str | None = Field(None, description="Case-insensitive substring"),
    page: int = Field(1, description="Page number, starting at 1"),
    limit: int = Field(50, description="Page size (max 100)"),
    request_id: str | None = None,
) -> dict[str, Any]:
    """List bulk operations with filtering and pagination"""
    _ensure_managers_initialized()

    filters = BulkOperationFilters(
        operation_type=parse_enum_list(BulkOperationType, operation_type, "operation_type"),
        target_type=parse_enum_list(BulkTargetType, target_type, "target_type"),
        status=parse_enum_list(BulkOperationStatus, status, "status"),
        created_by=created_by,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )

    history = await _managers["bulk_manager"].get_bulk_operations(
        filters, page=page, limit=min(limit, MAX_PAGE_SIZE)
    )
    return {
        "success": True,
        **history.model_dump(mode="json"),
        "request_id": request_id,
    }


@handle_tool_errors
async def cancel_bulk_operation(
    operation_id: str = Field(..., description="Bulk operation id"),
    reason: str | None = Field(None, description="Cancellation reason"),
    cancelled_by: str = Field("mcp-admin", description="Admin id"),
    cancelled_by_name: str = Field("MCP Admin", description="Admin display name"),
    request_id: str | None = None,
) -> dict[str, Any]:
    """Cancel a pending or running bulk operation"""
    _ensure_managers_initialized()

    result = await _managers["bulk_manager"].cancel_bulk_operation(
        operation_id,
        cancelled_by,
        cancelled_by_name,
        reason or "Bulk operation cancelled by admin",
    )
    return {
        "success": result.success,
        "message": result.message,
        "operation_id": operation_id,
        "request_id": request_id,
    }


@handle_tool_errors
async def get_bulk_capabilities(
    request_id: str | None = None,
) -> dict[str, Any]:
    """Describe supported bulk operations, limits and current statistics"""
    _ensure_managers_initialized()

    bulk_manager = _managers["bulk_manager"]
    return create_success_response(
        "Bulk operation capabilities",
        request_id,
        supported_operations=[
            {**op, "operation_type": op["operation_type"].value,
             "target_type": op["target_type"].value}
            for op in bulk_manager.get_supported_operations()
        ],
        operation_categories={
            key: {**category, "operations": [op.value for op in category["operations"]]}
            for key, category in OPERATION_CATEGORIES.items()
        },
        parameter_templates={
            op.value: template for op, template in PARAMETER_TEMPLATES.items()
        },
        risk_levels={
            level: [op.value for op in ops] for level, ops in RISK_LEVELS.items()
        },
        system_limits=system_limits(bulk_manager.settings),
        current_statistics=bulk_manager.get_statistics(),
    )


def register_bulk_tools(mcp, managers):
    """Register bulk operation tools with the MCP server"""

    # Update module-level managers for dependency injection
    _managers.update(managers)

    mcp.tool(submit_bulk_operation)
    mcp.tool(get_bulk_operation)
    mcp.tool(list_bulk_operations)
    mcp.tool(cancel_bulk_operation)
    mcp.tool(get_bulk_capabilities)


# Add .fn attribute to each function for backwards compatibility with tests
# This mimics the behavior of FastMCP decorated functions
submit_bulk_operation.fn = submit_bulk_operation
get_bulk_operation.fn = get_bulk_operation
list_bulk_operations.fn = list_bulk_operations
cancel_bulk_operation.fn = cancel_bulk_operation
get_bulk_capabilities.fn = get_bulk_capabilities


__all__ = [
    "cancel_bulk_operation",
    "get_bulk_capabilities",
    "get_bulk_operation",
    "list_bulk_operations",
    "register_bulk_tools",
    "submit_bulk_operation",
]
