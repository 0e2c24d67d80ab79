"""
Target handlers for bulk operations.

Each handler performs the mutation for one target and returns a payload
describing the change. These handlers only synthesize the payload; wiring
them to the user, license and client services is what turns a bulk
operation into a real one. Handlers raise on failure.
"""

from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from .exceptions import UnsupportedOperationError
from .logging_config import setup_logging
from .models import (
    AuditExportParameters,
    BillingAdjustmentParameters,
    BulkOperationType,
    ClientMigrationParameters,
    ClientPlanParameters,
    ClientSuspensionParameters,
    FeatureFlagSyncParameters,
    LicenseActivationParameters,
    LicenseExtensionParameters,
    LicensePlanParameters,
    PasswordResetParameters,
    UserEnableParameters,
    UserRoleParameters,
    parse_parameters,
)
from .utils import parse_datetime, utc_now, utc_now_iso

logger = setup_logging()

Handler = Callable[[str, BaseModel], Awaitable[Dict[str, Any]]]


async def process_user_enable_disable(
    user_id: str, params: UserEnableParameters
) -> Dict[str, Any]:
    return {"user_id": user_id, "enabled": params.enabled, "updated_at": utc_now_iso()}


async def process_user_role_update(
    user_id: str, params: UserRoleParameters
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "old_role": "member",
        "new_role": params.new_role,
        "updated_at": utc_now_iso(),
    }


async def process_password_reset(
    user_id: str, params: PasswordResetParameters
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "password_reset": True,
        "email_sent": params.send_email,
        "temporary_password": params.temporary_password,
        "reset_at": utc_now_iso(),
    }


async def process_license_activation(
    license_id: str, params: LicenseActivationParameters
) -> Dict[str, Any]:
    return {"license_id": license_id, "active": params.active, "updated_at": utc_now_iso()}


async def process_license_plan_update(
    license_id: str, params: LicensePlanParameters
) -> Dict[str, Any]:
    now = utc_now_iso()
    return {
        "license_id": license_id,
        "old_plan": "PRO",
        "new_plan": params.new_plan,
        "effective_date": params.effective_date or now,
        "updated_at": now,
    }


async def process_license_extension(
    license_id: str, params: LicenseExtensionParameters
) -> Dict[str, Any]:
    current_expiration = utc_now()
    if params.new_expiration_date:
        new_expiration = parse_datetime(params.new_expiration_date)
    else:
        new_expiration = current_expiration + timedelta(
            days=params.extension_days or 30
        )

    return {
        "license_id": license_id,
        "old_expiration": current_expiration.isoformat(),
        "new_expiration": new_expiration.isoformat(),
        "extension_days": params.extension_days,
        "updated_at": utc_now_iso(),
    }


async def process_client_plan_update(
    client_id: str, params: ClientPlanParameters
) -> Dict[str, Any]:
    now = utc_now_iso()
    return {
        "client_id": client_id,
        "old_plan": "PRO",
        "new_plan": params.new_plan,
        "effective_date": params.effective_date or now,
        "prorate_billing": params.prorate_billing,
        "updated_at": now,
    }


async def process_client_suspension(
    client_id: str, params: ClientSuspensionParameters
) -> Dict[str, Any]:
    return {
        "client_id": client_id,
        "suspended": params.suspended,
        "suspension_reason": params.suspension_reason,
        "updated_at": utc_now_iso(),
    }


async def process_billing_adjustment(
    client_id: str, params: BillingAdjustmentParameters
) -> Dict[str, Any]:
    return {
        "client_id": client_id,
        "adjustment_type": params.adjustment_type,
        "adjustment_amount": params.adjustment_amount,
        "adjustment_reason": params.adjustment_reason,
        "processed_at": utc_now_iso(),
    }


async def process_client_migration(
    client_id: str, params: ClientMigrationParameters
) -> Dict[str, Any]:
    now = utc_now()
    return {
        "client_id": client_id,
        "source_plan": params.source_plan,
        "target_plan": params.target_plan,
        "migration_date": params.migration_date or now.isoformat(),
        "data_migrated": params.migrate_data,
        "migration_id": f"migration_{int(now.timestamp() * 1000)}",
        "completed_at": now.isoformat(),
    }


async def process_audit_export(
    export_id: str, params: AuditExportParameters
) -> Dict[str, Any]:
    return {
        "export_id": export_id,
        "date_from": params.date_from,
        "date_to": params.date_to,
        "format": params.export_format,
        "include_sensitive_data": params.include_sensitive_data,
        "file_url": f"/exports/audit_{export_id}.{params.export_format}",
        "exported_at": utc_now_iso(),
    }


async def process_feature_flag_sync(
    flag_id: str, params: FeatureFlagSyncParameters
) -> Dict[str, Any]:
    return {
        "flag_id": flag_id,
        "source_environment": params.source_environment,
        "target_environment": params.target_environment,
        "flag_categories": params.flag_categories,
        "synced_at": utc_now_iso(),
    }


OT = BulkOperationType

DEFAULT_HANDLERS: Dict[BulkOperationType, Tuple[Handler, str]] = {
    OT.ENABLE_USERS: (process_user_enable_disable, "User"),
    OT.DISABLE_USERS: (process_user_enable_disable, "User"),
    OT.UPDATE_USER_ROLES: (process_user_role_update, "User"),
    OT.RESET_PASSWORDS: (process_password_reset, "User"),
    OT.ACTIVATE_LICENSES: (process_license_activation, "License"),
    OT.DEACTIVATE_LICENSES: (process_license_activation, "License"),
    OT.UPDATE_LICENSE_PLANS: (process_license_plan_update, "License"),
    OT.EXTEND_LICENSE_EXPIRATION: (process_license_extension, "License"),
    OT.UPDATE_CLIENT_PLANS: (process_client_plan_update, "Client"),
    OT.SUSPEND_CLIENTS: (process_client_suspension, "Client"),
    OT.REACTIVATE_CLIENTS: (process_client_suspension, "Client"),
    OT.BILLING_ADJUSTMENTS: (process_billing_adjustment, "Client"),
    OT.CLIENT_MIGRATION: (process_client_migration, "Client"),
    OT.AUDIT_EXPORT: (process_audit_export, "Audit Export"),
    OT.FEATURE_FLAG_SYNC: (process_feature_flag_sync, "Feature Flag"),
}


class TargetHandlerRegistry:
    """Dispatches a target to the handler registered for its operation type"""

    def __init__(
        self, handlers: Optional[Dict[BulkOperationType, Tuple[Handler, str]]] = None
    ):
        self._handlers = dict(DEFAULT_HANDLERS if handlers is None else handlers)

    def register(
        self, operation_type: BulkOperationType, handler: Handler, label: str
    ) -> None:
        self._handlers[operation_type] = (handler, label)

    def supports(self, operation_type: BulkOperationType) -> bool:
        return operation_type in self._handlers

    async def dispatch(
        self,
        operation_type: BulkOperationType,
        target_id: str,
        parameters: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any]]:
        """Run the handler for one target.

        Returns:
            (target_name, result_data)

        Raises:
            UnsupportedOperationError: If no handler is registered
        """
        if operation_type not in self._handlers:
            raise UnsupportedOperationError(operation_type.value)

        handler, label = self._handlers[operation_type]
        params = parse_parameters(operation_type, parameters)
        result = await handler(target_id, params)
        return f"{label} {target_id}", result
