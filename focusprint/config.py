"""
Configuration management for FocuSprint bulk operations
"""

import json
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidConfigError
from .logging_config import setup_logging

logger = setup_logging()

ENV_PREFIX = "FOCUSPRINT_"


class BulkSettings(BaseModel):
    """Limits and tuning for the bulk operation subsystem"""

    max_concurrent_operations: int = Field(
        3, ge=1, description="Running operations allowed at once"
    )
    max_targets_per_operation: int = Field(
        1000, ge=1, description="Upper bound on target ids per submission"
    )
    default_batch_size: int = Field(50, ge=1, description="Targets per batch")
    max_batch_size: int = Field(100, ge=1, description="Largest accepted batch size")
    max_operation_history: int = Field(
        1000, ge=1, description="Operations kept in the store"
    )
    batch_delay_seconds: float = Field(
        0.1, ge=0, description="Pause between batches"
    )
    operation_timeout_hours: int = Field(
        24, ge=1, description="Advertised operation timeout"
    )
    audit_history: int = Field(5000, ge=1, description="Audit entries kept in memory")


class ConfigManager:
    """Manage FocuSprint configuration"""

    def __init__(self):
        self.config_dir = Path.home() / ".focusprint"
        self.config_file = self.config_dir / "bulk.json"
        self.settings: BulkSettings = BulkSettings()
        self._load_config()

    def _load_config(self):
        """Load configuration from file and environment"""
        data: Dict[str, Any] = {}

        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    loaded = json.load(f)
                if not isinstance(loaded, dict):
                    raise ValueError(
                        f"expected a JSON object, got {type(loaded).__name__}"
                    )
                data.update(loaded)
                logger.info(f"Loaded bulk settings from {self.config_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Error loading config file: {e}")
                data = {}

        for name in BulkSettings.model_fields:
            env_value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if env_value is not None:
                data[name] = env_value

        try:
            self.settings = BulkSettings(**data)
        except PydanticValidationError as e:
            error = InvalidConfigError(
                "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ),
                config_path=str(self.config_file),
            )
            logger.error(f"{error} - falling back to defaults")
            self.settings = BulkSettings()

    def save_config(self):
        """Save configuration to file"""
        self.config_dir.mkdir(exist_ok=True)

        with open(self.config_file, "w") as f:
            json.dump(self.settings.model_dump(), f, indent=2)
        logger.info("Configuration saved")

    def update_settings(self, **changes) -> BulkSettings:
        """Apply and persist setting changes

        Raises:
            InvalidConfigError: If a changed value fails validation
        """
        try:
            self.settings = BulkSettings(**{**self.settings.model_dump(), **changes})
        except PydanticValidationError as e:
            raise InvalidConfigError(str(e), config_path=str(self.config_file))
        self.save_config()
        return self.settings
