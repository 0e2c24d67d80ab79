"""Submission validation for bulk operations."""

from collections import Counter
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from .capabilities import get_risk_level
from .exceptions import TargetLimitError
from .logging_config import setup_logging
from .models import (
    PARAMETER_MODELS,
    BulkOperationRequest,
    BulkOperationType,
    BulkTargetType,
    BulkValidationResult,
    parse_parameters,
)

logger = setup_logging()

OT = BulkOperationType

# Each inner tuple is an any-of group: at least one key must be set
REQUIRED_PARAMETERS: Dict[BulkOperationType, List[Tuple[str, ...]]] = {
    OT.UPDATE_USER_ROLES: [("new_role",)],
    OT.UPDATE_LICENSE_PLANS: [("new_plan",)],
    OT.EXTEND_LICENSE_EXPIRATION: [("extension_days", "new_expiration_date")],
    OT.UPDATE_CLIENT_PLANS: [("new_plan",)],
    OT.BILLING_ADJUSTMENTS: [("adjustment_type",), ("adjustment_amount",)],
    OT.CLIENT_MIGRATION: [("target_plan",)],
}

RISK_WARNINGS = {
    "high": "High-risk operation: review validation results before proceeding",
    "critical": "Critical operation: may affect system performance",
}


class BulkOperationValidator:
    """Per-target validation of bulk submissions."""

    def __init__(self, max_targets: int = 1000):
        self.max_targets = max_targets

    def validate_request(
        self, request: BulkOperationRequest
    ) -> List[BulkValidationResult]:
        """Validate every target of a request.

        Raises:
            TargetLimitError: If there are no targets or more than max_targets.
                Raised before any per-target check runs.
        """
        count = len(request.target_ids)
        if count == 0 or count > self.max_targets:
            raise TargetLimitError(count, self.max_targets)

        parameter_errors = self.parameter_errors(
            request.operation_type, request.parameters
        )
        occurrences = Counter(request.target_ids)

        results = []
        for target_id in request.target_ids:
            verdict = self._verdict(
                request.target_type, target_id, parameter_errors
            )
            if target_id and occurrences[target_id] > 1:
                verdict.warnings.append(
                    f"Target ID appears {occurrences[target_id]} times"
                )
            results.append(verdict)

        invalid = sum(1 for r in results if not r.can_proceed)
        if invalid:
            logger.info(
                f"Validation of {request.operation_type.value} rejected "
                f"{invalid}/{count} target(s)"
            )
        return results

    def validate_target(
        self,
        operation_type: BulkOperationType,
        target_type: BulkTargetType,
        target_id: str,
        parameters: Dict[str, Any],
    ) -> BulkValidationResult:
        """Validate a single target independently of its siblings."""
        return self._verdict(
            target_type, target_id, self.parameter_errors(operation_type, parameters)
        )

    def parameter_errors(
        self, operation_type: BulkOperationType, parameters: Dict[str, Any]
    ) -> List[str]:
        """Errors for missing required keys and wrongly typed values."""
        parameters = parameters or {}
        errors = []

        for group in REQUIRED_PARAMETERS.get(operation_type, []):
            if not any(parameters.get(key) for key in group):
                if len(group) == 1:
                    errors.append(f"{group[0]} parameter is required")
                else:
                    errors.append(f"Either {' or '.join(group)} is required")

        try:
            parse_parameters(operation_type, parameters)
        except PydanticValidationError as e:
            for err in e.errors():
                field = ".".join(str(p) for p in err["loc"])
                errors.append(f"Invalid parameter {field}: {err['msg']}")

        return errors

    def request_warnings(self, request: BulkOperationRequest) -> List[str]:
        """Warnings that apply to the request as a whole."""
        warnings = []
        risk = get_risk_level(request.operation_type)
        if risk in RISK_WARNINGS:
            warnings.append(RISK_WARNINGS[risk])
        if request.operation_type not in PARAMETER_MODELS:
            warnings.append(
                f"No handler is registered for {request.operation_type.value}; "
                "targets will be recorded as failed"
            )
        return warnings

    def _verdict(
        self, target_type: BulkTargetType, target_id: str, parameter_errors: List[str]
    ) -> BulkValidationResult:
        errors = []
        if not target_id or not target_id.strip():
            errors.append("Target ID cannot be empty")
        errors.extend(parameter_errors)

        # Existence checks need the real datastore; every target is assumed present
        return BulkValidationResult(
            target_id=target_id,
            target_name=f"{target_type.value} {target_id}",
            is_valid=not errors,
            errors=errors,
            warnings=[],
            can_proceed=not errors,
        )
