"""
Test configuration and fixtures for FocuSprint
"""

import asyncio
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from focusprint.bulk import BulkOperationManager
from focusprint.config import BulkSettings, ConfigManager
from focusprint.models import (
    BulkOperation,
    BulkOperationProgress,
    BulkOperationRequest,
    BulkOperationStatus,
    BulkOperationType,
    BulkTargetType,
)
from focusprint.storage import InMemoryOperationStore


@pytest.fixture
def temp_config_dir():
    """Create temporary config directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_config_manager(temp_config_dir):
    """ConfigManager rooted in a temp home directory"""
    with patch("focusprint.config.Path.home") as mock_home:
        mock_home.return_value = temp_config_dir
        config_mgr = ConfigManager()
        yield config_mgr


@pytest.fixture
def bulk_settings():
    """Settings without the inter-batch pause"""
    return BulkSettings(batch_delay_seconds=0)


@pytest.fixture
def bulk_manager(bulk_settings):
    return BulkOperationManager(settings=bulk_settings)


@pytest.fixture
def enable_request():
    """Enable three users in batches of two"""
    return BulkOperationRequest(
        operation_type=BulkOperationType.ENABLE_USERS,
        target_type=BulkTargetType.USERS,
        target_ids=["u1", "u2", "u3"],
        parameters={"enabled": True},
        batch_size=2,
    )


@pytest.fixture
def make_operation():
    """Factory for stored operation records"""

    def _make(
        op_id="bulk_1",
        operation_type=BulkOperationType.ENABLE_USERS,
        target_type=BulkTargetType.USERS,
        status=BulkOperationStatus.PENDING,
        created_by="admin-1",
        created_by_name="Ada Admin",
        created_at="2025-07-01T10:00:00.000Z",
        reason=None,
        started_at=None,
        completed_at=None,
        target_ids=None,
    ):
        target_ids = target_ids or ["u1"]
        return BulkOperation(
            id=op_id,
            operation_type=operation_type,
            target_type=target_type,
            target_ids=target_ids,
            status=status,
            progress=BulkOperationProgress(total_items=len(target_ids)),
            created_by=created_by,
            created_by_name=created_by_name,
            created_at=created_at,
            reason=reason,
            started_at=started_at,
            completed_at=completed_at,
        )

    return _make


class RecordingStore(InMemoryOperationStore):
    """Store that remembers every progress snapshot written to it"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.progress_updates = []

    def update(self, operation_id, **changes):
        if "progress" in changes:
            self.progress_updates.append(changes["progress"])
        return super().update(operation_id, **changes)


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def gate():
    """Events a handler can use to pause mid-operation"""

    class Gate:
        def __init__(self):
            self.reached = asyncio.Event()
            self.release = asyncio.Event()

    return Gate
