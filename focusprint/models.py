"""
Data models for FocuSprint bulk operations
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field


class BulkOperationType(str, Enum):
    """Bulk operation types"""

    # User operations
    ENABLE_USERS = "enable_users"
    DISABLE_USERS = "disable_users"
    UPDATE_USER_ROLES = "update_user_roles"
    RESET_PASSWORDS = "reset_passwords"
    DELETE_USERS = "delete_users"

    # License operations
    ACTIVATE_LICENSES = "activate_licenses"
    DEACTIVATE_LICENSES = "deactivate_licenses"
    UPDATE_LICENSE_PLANS = "update_license_plans"
    EXTEND_LICENSE_EXPIRATION = "extend_license_expiration"
    TRANSFER_LICENSES = "transfer_licenses"

    # Client operations
    UPDATE_CLIENT_PLANS = "update_client_plans"
    SUSPEND_CLIENTS = "suspend_clients"
    REACTIVATE_CLIENTS = "reactivate_clients"
    BILLING_ADJUSTMENTS = "billing_adjustments"
    DELETE_CLIENTS = "delete_clients"

    # Cross-system operations
    CLIENT_MIGRATION = "client_migration"
    AUDIT_EXPORT = "audit_export"
    COMPLIANCE_REPORT = "compliance_report"
    FEATURE_FLAG_SYNC = "feature_flag_sync"
    BULK_NOTIFICATIONS = "bulk_notifications"
    SYSTEM_MAINTENANCE = "system_maintenance"


class BulkTargetType(str, Enum):
    """Kinds of entity a bulk operation acts upon"""

    USERS = "users"
    LICENSES = "licenses"
    CLIENTS = "clients"
    FEATURE_FLAGS = "feature_flags"
    TICKETS = "tickets"
    AUDIT_LOGS = "audit_logs"
    MIXED = "mixed"


class BulkOperationStatus(str, Enum):
    """Operation status values"""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    PARTIAL_SUCCESS = "partial_success"


TERMINAL_STATUSES = frozenset(
    {
        BulkOperationStatus.COMPLETED,
        BulkOperationStatus.FAILED,
        BulkOperationStatus.CANCELLED,
        BulkOperationStatus.PARTIAL_SUCCESS,
    }
)


class BulkOperationStage(str, Enum):
    """Coarse progress marker"""

    INITIALIZING = "initializing"
    VALIDATING = "validating"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    COMPLETED = "completed"


class BulkOperationProgress(BaseModel):
    """Progress snapshot of a bulk operation"""

    total_items: int = Field(..., ge=0, description="Number of targets")
    processed_items: int = Field(0, ge=0, description="Targets processed so far")
    successful_items: int = Field(0, ge=0, description="Targets that succeeded")
    failed_items: int = Field(0, ge=0, description="Targets that failed")
    percentage_complete: int = Field(0, ge=0, le=100, description="Percent done")
    estimated_time_remaining_seconds: Optional[int] = Field(
        None, description="Estimated seconds until completion"
    )
    current_item: Optional[str] = Field(None, description="Target being processed")
    stage: BulkOperationStage = Field(
        BulkOperationStage.INITIALIZING, description="Current stage"
    )


class BulkOperationResult(BaseModel):
    """Outcome for a single target"""

    target_id: str = Field(..., description="Target identifier")
    target_name: Optional[str] = Field(None, description="Human readable target name")
    success: bool = Field(..., description="Whether the target was processed")
    error_message: Optional[str] = Field(None, description="Failure reason")
    warnings: List[str] = Field(default_factory=list, description="Target warnings")
    processed_at: str = Field(..., description="Processing timestamp (ISO 8601)")
    result_data: Optional[Dict[str, Any]] = Field(
        None, description="Handler result payload"
    )


class BulkOperation(BaseModel):
    """A bulk action request plus its evolving execution record"""

    id: str = Field(..., description="Operation identifier")
    operation_type: BulkOperationType = Field(..., description="Operation type")
    target_type: BulkTargetType = Field(..., description="Target entity kind")
    target_ids: List[str] = Field(..., description="Ordered target ids")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Operation parameters"
    )
    reason: Optional[str] = Field(None, description="Free-text justification")
    status: BulkOperationStatus = Field(
        BulkOperationStatus.PENDING, description="Operation status"
    )
    progress: BulkOperationProgress = Field(..., description="Progress snapshot")
    results: List[BulkOperationResult] = Field(
        default_factory=list, description="Per-target outcomes"
    )
    created_by: str = Field(..., description="Creator id")
    created_by_name: str = Field(..., description="Creator display name")
    created_at: str = Field(..., description="Creation timestamp (ISO 8601)")
    started_at: Optional[str] = Field(None, description="Processing start time")
    completed_at: Optional[str] = Field(None, description="Terminal state time")
    error_message: Optional[str] = Field(None, description="Operation-level error")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Caller metadata")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class BulkOperationRequest(BaseModel):
    """Submission payload"""

    operation_type: BulkOperationType
    target_type: BulkTargetType
    target_ids: List[str]
    parameters: Dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None
    dry_run: bool = False
    batch_size: Optional[int] = Field(None, ge=1)
    metadata: Optional[Dict[str, Any]] = None


class BulkValidationResult(BaseModel):
    """Validation verdict for a single target"""

    target_id: str
    target_name: Optional[str] = None
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    can_proceed: bool


class BulkOperationResponse(BaseModel):
    """Result of a submission"""

    operation: BulkOperation
    validation_results: List[BulkValidationResult] = Field(default_factory=list)
    estimated_duration_seconds: int = 0
    warnings: List[str] = Field(default_factory=list)


class BulkOperationFilters(BaseModel):
    """Listing filters; empty fields do not filter"""

    operation_type: Optional[List[BulkOperationType]] = None
    target_type: Optional[List[BulkTargetType]] = None
    status: Optional[List[BulkOperationStatus]] = None
    created_by: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    search: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BulkOperationSummary(BaseModel):
    """Aggregate counts for dashboards"""

    total_operations: int = 0
    pending_operations: int = 0
    running_operations: int = 0
    completed_operations: int = 0
    failed_operations: int = 0
    operations_by_type: Dict[str, int] = Field(default_factory=dict)
    operations_by_target: Dict[str, int] = Field(default_factory=dict)
    avg_completion_time_minutes: float = 0.0
    success_rate_percentage: int = 0


class BulkOperationHistory(BaseModel):
    """A page of operations plus the summary of the whole store"""

    operations: List[BulkOperation]
    pagination: Pagination
    filters: BulkOperationFilters
    summary: BulkOperationSummary


class CancelResult(BaseModel):
    success: bool
    message: str


# Typed operation parameters, one model per handler family


class UserEnableParameters(BaseModel):
    enabled: Optional[bool] = None


class UserRoleParameters(BaseModel):
    new_role: Optional[str] = None
    effective_date: Optional[str] = None


class PasswordResetParameters(BaseModel):
    send_email: bool = False
    temporary_password: bool = False


class LicenseActivationParameters(BaseModel):
    active: Optional[bool] = None


class LicensePlanParameters(BaseModel):
    new_plan: Optional[str] = None
    effective_date: Optional[str] = None


class LicenseExtensionParameters(BaseModel):
    extension_days: Optional[int] = None
    new_expiration_date: Optional[str] = None


class ClientPlanParameters(BaseModel):
    new_plan: Optional[str] = None
    effective_date: Optional[str] = None
    prorate_billing: bool = False


class ClientSuspensionParameters(BaseModel):
    suspended: Optional[bool] = None
    suspension_reason: Optional[str] = None


class BillingAdjustmentParameters(BaseModel):
    adjustment_type: Optional[Literal["credit", "debit", "refund"]] = None
    adjustment_amount: Optional[float] = None
    adjustment_reason: Optional[str] = None


class ClientMigrationParameters(BaseModel):
    source_plan: Optional[str] = None
    target_plan: Optional[str] = None
    migration_date: Optional[str] = None
    migrate_data: bool = False


class AuditExportParameters(BaseModel):
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    export_format: Literal["csv", "json", "pdf"] = "csv"
    include_sensitive_data: bool = False


class FeatureFlagSyncParameters(BaseModel):
    source_environment: Optional[str] = None
    target_environment: Optional[str] = None
    flag_categories: List[str] = Field(default_factory=list)


PARAMETER_MODELS: Dict[BulkOperationType, Type[BaseModel]] = {
    BulkOperationType.ENABLE_USERS: UserEnableParameters,
    BulkOperationType.DISABLE_USERS: UserEnableParameters,
    BulkOperationType.UPDATE_USER_ROLES: UserRoleParameters,
    BulkOperationType.RESET_PASSWORDS: PasswordResetParameters,
    BulkOperationType.ACTIVATE_LICENSES: LicenseActivationParameters,
    BulkOperationType.DEACTIVATE_LICENSES: LicenseActivationParameters,
    BulkOperationType.UPDATE_LICENSE_PLANS: LicensePlanParameters,
    BulkOperationType.EXTEND_LICENSE_EXPIRATION: LicenseExtensionParameters,
    BulkOperationType.UPDATE_CLIENT_PLANS: ClientPlanParameters,
    BulkOperationType.SUSPEND_CLIENTS: ClientSuspensionParameters,
    BulkOperationType.REACTIVATE_CLIENTS: ClientSuspensionParameters,
    BulkOperationType.BILLING_ADJUSTMENTS: BillingAdjustmentParameters,
    BulkOperationType.CLIENT_MIGRATION: ClientMigrationParameters,
    BulkOperationType.AUDIT_EXPORT: AuditExportParameters,
    BulkOperationType.FEATURE_FLAG_SYNC: FeatureFlagSyncParameters,
}


def parse_parameters(
    operation_type: BulkOperationType, parameters: Dict[str, Any]
) -> Optional[BaseModel]:
    """Parse a raw parameter map into the typed model for the operation.

    Returns None for operation types without a handler. Raises
    pydantic.ValidationError when a value has the wrong type.
    """
    model = PARAMETER_MODELS.get(operation_type)
    if model is None:
        return None
    return model.model_validate(parameters or {})
