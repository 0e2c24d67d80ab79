"""
Operation storage for bulk operations.

The in-memory store stands in for a database table. Callers depend on the
OperationRepository protocol only, so a persistent backend can replace it.
"""

from typing import List, Optional, Protocol

from .logging_config import setup_logging
from .models import BulkOperation, BulkOperationFilters
from .utils import parse_datetime

logger = setup_logging()


class OperationRepository(Protocol):
    """Capabilities the bulk manager needs from a store"""

    def add(self, operation: BulkOperation) -> None: ...

    def get_all(self) -> List[BulkOperation]: ...

    def get_by_id(self, operation_id: str) -> Optional[BulkOperation]: ...

    def update(self, operation_id: str, **changes) -> bool: ...

    def filter(self, filters: BulkOperationFilters) -> List[BulkOperation]: ...

    def clear(self) -> None: ...


class InMemoryOperationStore:
    """Newest-first, capacity-bounded operation registry"""

    def __init__(self, max_operations: int = 1000):
        if max_operations < 1:
            raise ValueError("max_operations must be at least 1")
        self.max_operations = max_operations
        self._operations: List[BulkOperation] = []

    def __len__(self) -> int:
        return len(self._operations)

    def add(self, operation: BulkOperation) -> None:
        self._operations.insert(0, operation)

        if len(self._operations) > self.max_operations:
            evicted = self._operations[self.max_operations :]
            del self._operations[self.max_operations :]
            logger.debug(
                f"Evicted {len(evicted)} old operation(s): "
                f"{', '.join(op.id for op in evicted)}"
            )

    def get_all(self) -> List[BulkOperation]:
        return list(self._operations)

    def get_by_id(self, operation_id: str) -> Optional[BulkOperation]:
        for operation in self._operations:
            if operation.id == operation_id:
                return operation
        return None

    def update(self, operation_id: str, **changes) -> bool:
        """Merge changes into the stored record; False if it is absent"""
        for index, operation in enumerate(self._operations):
            if operation.id == operation_id:
                self._operations[index] = operation.model_copy(update=changes)
                return True
        return False

    def filter(self, filters: BulkOperationFilters) -> List[BulkOperation]:
        operations = list(self._operations)

        if filters.operation_type:
            operations = [
                op for op in operations if op.operation_type in filters.operation_type
            ]

        if filters.target_type:
            operations = [
                op for op in operations if op.target_type in filters.target_type
            ]

        if filters.status:
            operations = [op for op in operations if op.status in filters.status]

        if filters.created_by:
            operations = [op for op in operations if op.created_by == filters.created_by]

        if filters.date_from:
            date_from = parse_datetime(filters.date_from)
            operations = [
                op for op in operations if parse_datetime(op.created_at) >= date_from
            ]

        if filters.date_to:
            date_to = parse_datetime(filters.date_to)
            operations = [
                op for op in operations if parse_datetime(op.created_at) <= date_to
            ]

        if filters.search:
            needle = filters.search.lower()
            operations = [
                op
                for op in operations
                if needle in op.operation_type.value
                or needle in op.target_type.value
                or needle in op.created_by_name.lower()
                or (op.reason and needle in op.reason.lower())
            ]

        return operations

    def clear(self) -> None:
        self._operations = []
