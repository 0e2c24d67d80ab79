"""
Unit tests for target handlers and their dispatch
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from focusprint.exceptions import UnsupportedOperationError
from focusprint.handlers import (
    DEFAULT_HANDLERS,
    TargetHandlerRegistry,
    process_license_extension,
)
from focusprint.models import (
    PARAMETER_MODELS,
    BulkOperationType,
    LicenseExtensionParameters,
)
from focusprint.utils import parse_datetime, utc_now


class TestTargetHandlerRegistry:
    def test_default_handlers_cover_parameter_models(self):
        """Every operation type with typed parameters has a handler"""
        assert set(DEFAULT_HANDLERS) == set(PARAMETER_MODELS)

    @pytest.mark.asyncio
    async def test_dispatch_enable(self):
        registry = TargetHandlerRegistry()
        name, data = await registry.dispatch(
            BulkOperationType.DISABLE_USERS, "u1", {"enabled": False}
        )

        assert name == "User u1"
        assert data["user_id"] == "u1"
        assert data["enabled"] is False

    @pytest.mark.asyncio
    async def test_dispatch_role_update(self):
        registry = TargetHandlerRegistry()
        _, data = await registry.dispatch(
            BulkOperationType.UPDATE_USER_ROLES, "u1", {"new_role": "admin"}
        )
        assert data["new_role"] == "admin"
        assert data["old_role"] == "member"

    @pytest.mark.asyncio
    async def test_dispatch_audit_export(self):
        registry = TargetHandlerRegistry()
        name, data = await registry.dispatch(
            BulkOperationType.AUDIT_EXPORT, "exp1", {"export_format": "json"}
        )
        assert name == "Audit Export exp1"
        assert data["file_url"] == "/exports/audit_exp1.json"

    @pytest.mark.asyncio
    async def test_dispatch_client_migration(self):
        registry = TargetHandlerRegistry()
        _, data = await registry.dispatch(
            BulkOperationType.CLIENT_MIGRATION,
            "c1",
            {"source_plan": "PRO", "target_plan": "BUSINESS", "migrate_data": True},
        )
        assert data["target_plan"] == "BUSINESS"
        assert data["data_migrated"] is True
        assert data["migration_id"].startswith("migration_")

    @pytest.mark.asyncio
    async def test_dispatch_unsupported_raises(self):
        registry = TargetHandlerRegistry()
        with pytest.raises(UnsupportedOperationError) as exc_info:
            await registry.dispatch(BulkOperationType.TRANSFER_LICENSES, "l1", {})

        assert exc_info.value.message == "Unsupported operation type: transfer_licenses"

    @pytest.mark.asyncio
    async def test_dispatch_bad_parameters_raise(self):
        registry = TargetHandlerRegistry()
        with pytest.raises(PydanticValidationError):
            await registry.dispatch(
                BulkOperationType.AUDIT_EXPORT, "exp1", {"export_format": "xml"}
            )

    @pytest.mark.asyncio
    async def test_register_overrides(self):
        async def custom(target_id, params):
            return {"custom": target_id}

        registry = TargetHandlerRegistry()
        registry.register(BulkOperationType.ENABLE_USERS, custom, "Account")

        name, data = await registry.dispatch(BulkOperationType.ENABLE_USERS, "u9", {})
        assert name == "Account u9"
        assert data == {"custom": "u9"}

    def test_empty_registry(self):
        registry = TargetHandlerRegistry(handlers={})
        assert registry.supports(BulkOperationType.ENABLE_USERS) is False


class TestLicenseExtension:
    @pytest.mark.asyncio
    async def test_extension_days(self):
        before = utc_now()
        data = await process_license_extension(
            "l1", LicenseExtensionParameters(extension_days=10)
        )

        old = parse_datetime(data["old_expiration"])
        new = parse_datetime(data["new_expiration"])
        assert old >= before
        assert new - old == timedelta(days=10)
        assert data["extension_days"] == 10

    @pytest.mark.asyncio
    async def test_explicit_expiration_date_wins(self):
        data = await process_license_extension(
            "l1",
            LicenseExtensionParameters(
                extension_days=10, new_expiration_date="2030-01-01T00:00:00Z"
            ),
        )
        assert parse_datetime(data["new_expiration"]).year == 2030
