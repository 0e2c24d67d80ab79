"""
Audit trail for bulk operation lifecycle events
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .exceptions import ErrorHandler
from .logging_config import setup_logging
from .models import BulkOperation
from .utils import utc_now_iso

logger = setup_logging()


class AuditSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AuditEntry(BaseModel):
    """One recorded admin or system action"""

    admin_id: str = Field(..., description="Actor id ('system' for the processor)")
    admin_name: str = Field(..., description="Actor display name")
    action: str = Field(..., description="created, completed, cancelled or failed")
    resource_id: str = Field(..., description="Operation id")
    resource_name: str = Field(..., description="e.g. 'Bulk enable_users'")
    description: str
    context: Dict[str, Any] = Field(default_factory=dict)
    severity: AuditSeverity = AuditSeverity.MEDIUM
    status: str = "success"
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now_iso)


class AuditLogger:
    """Bounded in-memory audit log, newest last"""

    def __init__(self, max_entries: int = 5000):
        self.max_entries = max_entries
        self._entries: List[AuditEntry] = []

    def log_operation_event(
        self,
        operation: BulkOperation,
        action: str,
        performed_by: str,
        performed_by_name: str,
        description: str,
        request_info: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditEntry]:
        """Record a lifecycle event; failures are logged, never raised"""
        entry = None
        resource_id = getattr(operation, "id", None)
        with ErrorHandler.error_context(logger, f"audit {action} {resource_id}"):
            severity = AuditSeverity.MEDIUM
            if action == "failed" or operation.operation_type.value.startswith(
                "delete_"
            ):
                severity = AuditSeverity.HIGH

            request_info = request_info or {}
            entry = AuditEntry(
                admin_id=performed_by,
                admin_name=performed_by_name,
                action=action,
                resource_id=operation.id,
                resource_name=f"Bulk {operation.operation_type.value}",
                description=description,
                context={
                    "operation_type": operation.operation_type.value,
                    "target_type": operation.target_type.value,
                    "target_count": len(operation.target_ids),
                    "status": operation.status.value,
                    "progress": operation.progress.model_dump(mode="json"),
                    "reason": operation.reason,
                },
                severity=severity,
                status="error" if action == "failed" else "success",
                ip_address=request_info.get("ip_address"),
                user_agent=request_info.get("user_agent"),
            )
            self._entries.append(entry)
            if len(self._entries) > self.max_entries:
                del self._entries[: len(self._entries) - self.max_entries]

            logger.info(
                f"Audit [{severity.value}] {action} {operation.id} "
                f"by {performed_by_name}: {description}"
            )
        return entry

    def entries(self, operation_id: Optional[str] = None) -> List[AuditEntry]:
        if operation_id is None:
            return list(self._entries)
        return [e for e in self._entries if e.resource_id == operation_id]
