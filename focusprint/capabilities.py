"""
Static catalogue of what the bulk subsystem can do
"""

from typing import Any, Dict, List

from .config import BulkSettings
from .models import BulkOperationType, BulkTargetType

OT = BulkOperationType

SUPPORTED_OPERATIONS: List[Dict[str, Any]] = [
    # User operations
    {
        "operation_type": OT.ENABLE_USERS,
        "target_type": BulkTargetType.USERS,
        "description": "Enable multiple user accounts",
        "required_parameters": ["enabled"],
        "max_targets": 1000,
        "estimated_time_per_item_seconds": 0.5,
    },
    {
        "operation_type": OT.DISABLE_USERS,
        "target_type": BulkTargetType.USERS,
        "description": "Disable multiple user accounts",
        "required_parameters": ["enabled"],
        "max_targets": 1000,
        "estimated_time_per_item_seconds": 0.5,
    },
    {
        "operation_type": OT.UPDATE_USER_ROLES,
        "target_type": BulkTargetType.USERS,
        "description": "Update roles for multiple users",
        "required_parameters": ["new_role"],
        "max_targets": 500,
        "estimated_time_per_item_seconds": 0.75,
    },
    {
        "operation_type": OT.RESET_PASSWORDS,
        "target_type": BulkTargetType.USERS,
        "description": "Reset passwords for multiple users",
        "required_parameters": [],
        "max_targets": 200,
        "estimated_time_per_item_seconds": 1.0,
    },
    # License operations
    {
        "operation_type": OT.ACTIVATE_LICENSES,
        "target_type": BulkTargetType.LICENSES,
        "description": "Activate multiple licenses",
        "required_parameters": ["active"],
        "max_targets": 1000,
        "estimated_time_per_item_seconds": 0.5,
    },
    {
        "operation_type": OT.UPDATE_LICENSE_PLANS,
        "target_type": BulkTargetType.LICENSES,
        "description": "Update plans for multiple licenses",
        "required_parameters": ["new_plan"],
        "max_targets": 500,
        "estimated_time_per_item_seconds": 1.0,
    },
    # Client operations
    {
        "operation_type": OT.UPDATE_CLIENT_PLANS,
        "target_type": BulkTargetType.CLIENTS,
        "description": "Update plans for multiple clients",
        "required_parameters": ["new_plan"],
        "max_targets": 200,
        "estimated_time_per_item_seconds": 1.25,
    },
    {
        "operation_type": OT.BILLING_ADJUSTMENTS,
        "target_type": BulkTargetType.CLIENTS,
        "description": "Apply billing adjustments to multiple clients",
        "required_parameters": ["adjustment_type", "adjustment_amount"],
        "max_targets": 100,
        "estimated_time_per_item_seconds": 1.5,
    },
    # Cross-system operations
    {
        "operation_type": OT.CLIENT_MIGRATION,
        "target_type": BulkTargetType.CLIENTS,
        "description": "Migrate multiple clients between plans",
        "required_parameters": ["target_plan"],
        "max_targets": 50,
        "estimated_time_per_item_seconds": 5.0,
    },
    {
        "operation_type": OT.AUDIT_EXPORT,
        "target_type": BulkTargetType.AUDIT_LOGS,
        "description": "Export audit logs for multiple entities",
        "required_parameters": ["export_format"],
        "max_targets": 100,
        "estimated_time_per_item_seconds": 2.5,
    },
]

OPERATION_CATEGORIES: Dict[str, Dict[str, Any]] = {
    "user_management": {
        "name": "User Management",
        "description": "Operations for managing user accounts",
        "operations": [
            OT.ENABLE_USERS,
            OT.DISABLE_USERS,
            OT.UPDATE_USER_ROLES,
            OT.RESET_PASSWORDS,
            OT.DELETE_USERS,
        ],
    },
    "license_management": {
        "name": "License Management",
        "description": "Operations for managing licenses",
        "operations": [
            OT.ACTIVATE_LICENSES,
            OT.DEACTIVATE_LICENSES,
            OT.UPDATE_LICENSE_PLANS,
            OT.EXTEND_LICENSE_EXPIRATION,
            OT.TRANSFER_LICENSES,
        ],
    },
    "client_management": {
        "name": "Client Management",
        "description": "Operations for managing client accounts",
        "operations": [
            OT.UPDATE_CLIENT_PLANS,
            OT.SUSPEND_CLIENTS,
            OT.REACTIVATE_CLIENTS,
            OT.BILLING_ADJUSTMENTS,
            OT.DELETE_CLIENTS,
        ],
    },
    "cross_system": {
        "name": "Cross-System Operations",
        "description": "Complex operations spanning multiple systems",
        "operations": [
            OT.CLIENT_MIGRATION,
            OT.AUDIT_EXPORT,
            OT.COMPLIANCE_REPORT,
            OT.FEATURE_FLAG_SYNC,
            OT.BULK_NOTIFICATIONS,
            OT.SYSTEM_MAINTENANCE,
        ],
    },
}

PARAMETER_TEMPLATES: Dict[BulkOperationType, Dict[str, Any]] = {
    OT.ENABLE_USERS: {"enabled": True},
    OT.DISABLE_USERS: {"enabled": False},
    OT.UPDATE_USER_ROLES: {"new_role": "member"},
    OT.RESET_PASSWORDS: {"send_email": True, "temporary_password": True},
    OT.ACTIVATE_LICENSES: {"active": True},
    OT.DEACTIVATE_LICENSES: {"active": False},
    OT.UPDATE_LICENSE_PLANS: {"new_plan": "PRO"},
    OT.EXTEND_LICENSE_EXPIRATION: {"extension_days": 30},
    OT.UPDATE_CLIENT_PLANS: {"new_plan": "PRO", "prorate_billing": True},
    OT.SUSPEND_CLIENTS: {
        "suspended": True,
        "suspension_reason": "Administrative action",
    },
    OT.REACTIVATE_CLIENTS: {"suspended": False},
    OT.BILLING_ADJUSTMENTS: {
        "adjustment_type": "credit",
        "adjustment_amount": 0,
        "adjustment_reason": "Billing correction",
    },
    OT.CLIENT_MIGRATION: {"target_plan": "BUSINESS", "migrate_data": True},
    OT.AUDIT_EXPORT: {"export_format": "csv", "include_sensitive_data": False},
    OT.FEATURE_FLAG_SYNC: {
        "source_environment": "staging",
        "target_environment": "production",
        "flag_categories": ["ui_features", "api_features"],
    },
}

RISK_LEVELS: Dict[str, List[BulkOperationType]] = {
    "low": [OT.ENABLE_USERS, OT.ACTIVATE_LICENSES, OT.REACTIVATE_CLIENTS],
    "medium": [
        OT.DISABLE_USERS,
        OT.UPDATE_USER_ROLES,
        OT.UPDATE_LICENSE_PLANS,
        OT.SUSPEND_CLIENTS,
    ],
    "high": [OT.RESET_PASSWORDS, OT.BILLING_ADJUSTMENTS, OT.CLIENT_MIGRATION],
    "critical": [OT.DELETE_USERS, OT.DELETE_CLIENTS, OT.SYSTEM_MAINTENANCE],
}

# Seconds-per-item multipliers used for duration estimates
COMPLEXITY_MULTIPLIERS: Dict[BulkOperationType, float] = {
    OT.ENABLE_USERS: 1,
    OT.DISABLE_USERS: 1,
    OT.UPDATE_USER_ROLES: 1.5,
    OT.RESET_PASSWORDS: 2,
    OT.DELETE_USERS: 3,
    OT.ACTIVATE_LICENSES: 1,
    OT.DEACTIVATE_LICENSES: 1,
    OT.UPDATE_LICENSE_PLANS: 2,
    OT.EXTEND_LICENSE_EXPIRATION: 1.5,
    OT.TRANSFER_LICENSES: 3,
    OT.UPDATE_CLIENT_PLANS: 2.5,
    OT.SUSPEND_CLIENTS: 2,
    OT.REACTIVATE_CLIENTS: 2,
    OT.BILLING_ADJUSTMENTS: 3,
    OT.DELETE_CLIENTS: 5,
    OT.CLIENT_MIGRATION: 10,
    OT.AUDIT_EXPORT: 5,
    OT.COMPLIANCE_REPORT: 8,
    OT.FEATURE_FLAG_SYNC: 2,
    OT.BULK_NOTIFICATIONS: 1.5,
    OT.SYSTEM_MAINTENANCE: 15,
}

BASE_SECONDS_PER_ITEM = 0.5


def get_risk_level(operation_type: BulkOperationType) -> str:
    for level, operations in RISK_LEVELS.items():
        if operation_type in operations:
            return level
    return "medium"


def system_limits(settings: BulkSettings) -> Dict[str, Any]:
    """Limits advertised to admin clients"""
    return {
        "max_concurrent_operations": settings.max_concurrent_operations,
        "max_targets_per_operation": settings.max_targets_per_operation,
        "default_batch_size": settings.default_batch_size,
        "max_batch_size": settings.max_batch_size,
        "operation_timeout_hours": settings.operation_timeout_hours,
        "max_operation_history": settings.max_operation_history,
    }
