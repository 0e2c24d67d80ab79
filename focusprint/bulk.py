"""Bulk operations for FocuSprint."""

import asyncio
import math
import time
from typing import Any, Dict, List, Optional

from .audit import AuditLogger
from .capabilities import (
    BASE_SECONDS_PER_ITEM,
    COMPLEXITY_MULTIPLIERS,
    SUPPORTED_OPERATIONS,
)
from .config import BulkSettings
from .exceptions import (
    BulkValidationError,
    ConcurrencyLimitError,
    ErrorHandler,
    ErrorSanitizer,
    FocuSprintError,
)
from .handlers import TargetHandlerRegistry
from .logging_config import setup_logging
from .models import (
    BulkOperation,
    BulkOperationFilters,
    BulkOperationHistory,
    BulkOperationProgress,
    BulkOperationRequest,
    BulkOperationResponse,
    BulkOperationResult,
    BulkOperationStage,
    BulkOperationStatus,
    CancelResult,
    Pagination,
)
from .storage import InMemoryOperationStore, OperationRepository
from .summary import calculate_summary, get_statistics
from .utils import generate_operation_id, round_half_up, utc_now_iso
from .validation import BulkOperationValidator

logger = setup_logging()

CANCELLABLE_STATUSES = (BulkOperationStatus.PENDING, BulkOperationStatus.RUNNING)


class CancellationToken:
    """Flag a processor polls between targets"""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def final_status(successful: int, failed: int) -> BulkOperationStatus:
    if failed == 0:
        return BulkOperationStatus.COMPLETED
    if successful == 0:
        return BulkOperationStatus.FAILED
    return BulkOperationStatus.PARTIAL_SUCCESS


class BulkOperationManager:
    """Validates, stores and runs bulk operations in the background."""

    def __init__(
        self,
        settings: Optional[BulkSettings] = None,
        store: Optional[OperationRepository] = None,
        handlers: Optional[TargetHandlerRegistry] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.settings = settings or BulkSettings()
        self.store = (
            store
            if store is not None
            else InMemoryOperationStore(self.settings.max_operation_history)
        )
        self.handlers = handlers or TargetHandlerRegistry()
        self.audit = audit_logger or AuditLogger(self.settings.audit_history)
        self.validator = BulkOperationValidator(
            self.settings.max_targets_per_operation
        )

        self._tasks: Dict[str, asyncio.Task] = {}
        self._tokens: Dict[str, CancellationToken] = {}

    # Submission

    async def create_bulk_operation(
        self,
        request: BulkOperationRequest,
        created_by: str,
        created_by_name: str,
        request_info: Optional[Dict[str, Any]] = None,
    ) -> BulkOperationResponse:
        """Validate a request, store it and start processing.

        Raises:
            TargetLimitError: No targets, or more than the configured maximum
            BulkValidationError: At least one target cannot proceed
            ConcurrencyLimitError: Too many operations already in flight
        """
        validation = self.validator.validate_request(request)
        if any(not v.can_proceed for v in validation):
            raise BulkValidationError(validation)

        in_flight = self._in_flight_ids()
        if len(in_flight) >= self.settings.max_concurrent_operations:
            raise ConcurrencyLimitError(self.settings.max_concurrent_operations)

        batch_size = min(
            request.batch_size or self.settings.default_batch_size,
            self.settings.max_batch_size,
        )

        operation = BulkOperation(
            id=generate_operation_id(),
            operation_type=request.operation_type,
            target_type=request.target_type,
            target_ids=list(request.target_ids),
            parameters=dict(request.parameters),
            reason=request.reason,
            status=BulkOperationStatus.PENDING,
            progress=BulkOperationProgress(
                total_items=len(request.target_ids),
                stage=BulkOperationStage.INITIALIZING,
            ),
            created_by=created_by,
            created_by_name=created_by_name,
            created_at=utc_now_iso(),
            metadata=request.metadata,
        )

        if request.dry_run:
            logger.info(
                f"Dry run of {request.operation_type.value} on "
                f"{len(request.target_ids)} target(s) validated"
            )
        else:
            self.store.add(operation)
            self.audit.log_operation_event(
                operation,
                "created",
                created_by,
                created_by_name,
                "Bulk operation created",
                request_info,
            )
            self._start_processing(operation.id, batch_size)
            logger.info(
                f"Created bulk operation {operation.id} "
                f"({request.operation_type.value}, {len(request.target_ids)} targets, "
                f"batch_size={batch_size})"
            )

        warnings: List[str] = []
        for message in [w for v in validation for w in v.warnings] + (
            self.validator.request_warnings(request)
        ):
            if message not in warnings:
                warnings.append(message)

        return BulkOperationResponse(
            operation=operation,
            validation_results=validation,
            estimated_duration_seconds=self.estimate_operation_duration(request),
            warnings=warnings,
        )

    def _in_flight_ids(self) -> set:
        running = {
            op.id
            for op in self.store.get_all()
            if op.status == BulkOperationStatus.RUNNING
        }
        running.update(op_id for op_id, task in self._tasks.items() if not task.done())
        return running

    def _start_processing(self, operation_id: str, batch_size: int) -> None:
        token = CancellationToken()
        task = asyncio.get_running_loop().create_task(
            self._process_operation(operation_id, batch_size, token),
            name=f"bulk-{operation_id}",
        )
        self._tokens[operation_id] = token
        self._tasks[operation_id] = task

        def _forget(_task, operation_id=operation_id):
            self._tasks.pop(operation_id, None)
            self._tokens.pop(operation_id, None)

        task.add_done_callback(_forget)

    # Queries

    async def get_bulk_operation(self, operation_id: str) -> Optional[BulkOperation]:
        return self.store.get_by_id(operation_id)

    async def get_bulk_operations(
        self,
        filters: Optional[BulkOperationFilters] = None,
        page: int = 1,
        limit: int = 50,
    ) -> BulkOperationHistory:
        """Filtered, paginated listing with a summary of the whole store"""
        filters = filters or BulkOperationFilters()
        page = max(page, 1)
        limit = max(limit, 1)

        matching = self.store.filter(filters)
        total = len(matching)
        offset = (page - 1) * limit

        return BulkOperationHistory(
            operations=matching[offset : offset + limit],
            pagination=Pagination(
                page=page, limit=limit, total=total, pages=math.ceil(total / limit)
            ),
            filters=filters,
            summary=calculate_summary(self.store.get_all()),
        )

    def get_statistics(self) -> Dict[str, Any]:
        return get_statistics(self.store.get_all())

    def get_supported_operations(self) -> List[Dict[str, Any]]:
        return [
            {
                **entry,
                "max_targets": min(
                    entry["max_targets"], self.settings.max_targets_per_operation
                ),
            }
            for entry in SUPPORTED_OPERATIONS
            if self.handlers.supports(entry["operation_type"])
        ]

    def estimate_operation_duration(self, request: BulkOperationRequest) -> int:
        multiplier = COMPLEXITY_MULTIPLIERS.get(request.operation_type, 1)
        return round_half_up(
            len(request.target_ids) * BASE_SECONDS_PER_ITEM * multiplier
        )

    # Cancellation

    async def cancel_bulk_operation(
        self,
        operation_id: str,
        cancelled_by: str,
        cancelled_by_name: str,
        reason: Optional[str] = None,
    ) -> CancelResult:
        operation = self.store.get_by_id(operation_id)
        if operation is None:
            return CancelResult(success=False, message="Bulk operation not found")

        if operation.status not in CANCELLABLE_STATUSES:
            return CancelResult(
                success=False,
                message="Operation cannot be cancelled in current status",
            )

        updated = self.store.update(
            operation_id,
            status=BulkOperationStatus.CANCELLED,
            completed_at=utc_now_iso(),
            error_message=reason or "Operation cancelled by admin",
        )
        if not updated:
            return CancelResult(success=False, message="Failed to cancel operation")

        token = self._tokens.get(operation_id)
        if token is not None:
            token.cancel()

        self.audit.log_operation_event(
            self.store.get_by_id(operation_id),
            "cancelled",
            cancelled_by,
            cancelled_by_name,
            reason or "Bulk operation cancelled",
        )
        logger.info(f"Bulk operation {operation_id} cancelled by {cancelled_by_name}")
        return CancelResult(
            success=True, message="Bulk operation cancelled successfully"
        )

    # Processing

    async def _process_operation(
        self, operation_id: str, batch_size: int, token: CancellationToken
    ) -> None:
        """Drive one operation from pending to a terminal state"""
        try:
            operation = self.store.get_by_id(operation_id)
            if operation is None or operation.is_terminal:
                return

            self.store.update(
                operation_id,
                status=BulkOperationStatus.RUNNING,
                started_at=utc_now_iso(),
                progress=operation.progress.model_copy(
                    update={"stage": BulkOperationStage.VALIDATING}
                ),
            )

            target_ids = operation.target_ids
            total = len(target_ids)
            results: List[BulkOperationResult] = []
            successful = failed = 0
            loop_start = time.monotonic()

            for batch_start in range(0, total, batch_size):
                if token.cancelled:
                    break
                batch = target_ids[batch_start : batch_start + batch_size]

                self.store.update(
                    operation_id,
                    progress=self._progress(
                        total,
                        successful,
                        failed,
                        BulkOperationStage.PROCESSING,
                        current_item=batch[0],
                        elapsed=time.monotonic() - loop_start,
                    ),
                )

                for target_id in batch:
                    if token.cancelled:
                        break
                    result = await self._process_target(operation, target_id)
                    results.append(result)
                    if result.success:
                        successful += 1
                    else:
                        failed += 1

                # Yield to the event loop between batches
                await asyncio.sleep(self.settings.batch_delay_seconds)

            current = self.store.get_by_id(operation_id)
            if token.cancelled or current is None or current.is_terminal:
                self._record_cancelled(operation_id, total, successful, failed, results)
                return

            status = final_status(successful, failed)
            self.store.update(
                operation_id,
                status=status,
                completed_at=utc_now_iso(),
                results=results,
                progress=BulkOperationProgress(
                    total_items=total,
                    processed_items=total,
                    successful_items=successful,
                    failed_items=failed,
                    percentage_complete=100,
                    stage=BulkOperationStage.COMPLETED,
                ),
            )

            logger.info(
                f"Bulk operation {operation_id} finished with status {status.value}: "
                f"{successful} successful, {failed} failed"
            )
            self.audit.log_operation_event(
                self.store.get_by_id(operation_id),
                "completed",
                "system",
                "System",
                f"Bulk operation completed: {successful} successful, {failed} failed",
            )

        except asyncio.CancelledError:
            logger.warning(f"Processing of bulk operation {operation_id} interrupted")
            self._mark_failed(operation_id, "Processing interrupted by shutdown")
            raise

        except Exception as e:
            logger.error(
                f"Error processing bulk operation {operation_id}: "
                f"{type(e).__name__}: {ErrorSanitizer.sanitize_message(str(e))}"
            )
            self._mark_failed(operation_id, ErrorSanitizer.sanitize_message(str(e)))

    async def _process_target(
        self, operation: BulkOperation, target_id: str
    ) -> BulkOperationResult:
        """Run one target; failures are confined to its result"""
        try:
            target_name, result_data = await self.handlers.dispatch(
                operation.operation_type, target_id, operation.parameters
            )
            return BulkOperationResult(
                target_id=target_id,
                target_name=target_name,
                success=True,
                processed_at=utc_now_iso(),
                result_data=result_data,
            )
        except Exception as e:
            message = e.message if isinstance(e, FocuSprintError) else str(e)
            logger.debug(f"Target {target_id} of {operation.id} failed: {message}")
            return BulkOperationResult(
                target_id=target_id,
                success=False,
                error_message=ErrorSanitizer.sanitize_message(message)
                or "Unknown error",
                processed_at=utc_now_iso(),
            )

    def _progress(
        self,
        total: int,
        successful: int,
        failed: int,
        stage: BulkOperationStage,
        current_item: Optional[str] = None,
        elapsed: float = 0.0,
    ) -> BulkOperationProgress:
        processed = successful + failed
        remaining = None
        if processed:
            remaining = round_half_up(elapsed / processed * (total - processed))
        return BulkOperationProgress(
            total_items=total,
            processed_items=processed,
            successful_items=successful,
            failed_items=failed,
            percentage_complete=(
                round_half_up(processed / total * 100) if total else 0
            ),
            estimated_time_remaining_seconds=remaining,
            current_item=current_item,
            stage=stage,
        )

    def _record_cancelled(
        self,
        operation_id: str,
        total: int,
        successful: int,
        failed: int,
        results: List[BulkOperationResult],
    ) -> None:
        # Status and completed_at were set by the cancel call
        self.store.update(
            operation_id,
            results=results,
            progress=self._progress(
                total, successful, failed, BulkOperationStage.FINALIZING
            ),
        )
        logger.info(
            f"Bulk operation {operation_id} stopped after cancellation: "
            f"{successful + failed}/{total} processed"
        )

    def _mark_failed(self, operation_id: str, message: str) -> None:
        # Runs from exception paths; a failing store is logged, not raised
        with ErrorHandler.error_context(logger, f"mark {operation_id} failed"):
            operation = self.store.get_by_id(operation_id)
            if operation is None or operation.is_terminal:
                return
            self.store.update(
                operation_id,
                status=BulkOperationStatus.FAILED,
                completed_at=utc_now_iso(),
                error_message=message or "Unknown error",
            )
            self.audit.log_operation_event(
                self.store.get_by_id(operation_id),
                "failed",
                "system",
                "System",
                f"Bulk operation failed: {message}",
            )

    # Lifecycle helpers

    async def wait_for(self, operation_id: str) -> Optional[BulkOperation]:
        """Wait until the operation's processor has finished"""
        task = self._tasks.get(operation_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self.store.get_by_id(operation_id)

    async def shutdown(self) -> None:
        """Cancel outstanding processors and fail the operations they owned"""
        owned = dict(self._tasks)
        for task in owned.values():
            task.cancel()
        if owned:
            await asyncio.gather(*owned.values(), return_exceptions=True)

        # A task cancelled before its first step never ran its own handler
        for operation_id in owned:
            self._mark_failed(operation_id, "Processing interrupted by shutdown")
