"""
FocuSprint MCP Server - platform-admin bulk operations
"""

from fastmcp import FastMCP

from .audit import AuditLogger
from .bulk import BulkOperationManager
from .config import ConfigManager
from .logging_config import setup_logging
from .tools import register_all_tools


logger = setup_logging()

mcp = FastMCP("focusprint-bulk")

logger.info("Initializing FocuSprint bulk operations server...")

try:
    config_manager = ConfigManager()
    audit_logger = AuditLogger(config_manager.settings.audit_history)
    bulk_manager = BulkOperationManager(
        settings=config_manager.settings,
        audit_logger=audit_logger,
    )
    logger.info("All managers initialized successfully")

    managers = {
        "config_manager": config_manager,
        "bulk_manager": bulk_manager,
    }

    register_all_tools(mcp, managers)
    logger.info("All tools registered successfully")

except Exception as e:
    logger.error(f"Error initializing FocuSprint server: {e}")
    raise


from .tools.bulk import (
    cancel_bulk_operation,
    get_bulk_capabilities,
    get_bulk_operation,
    list_bulk_operations,
    submit_bulk_operation,
)


__all__ = [
    "cancel_bulk_operation",
    "get_bulk_capabilities",
    "get_bulk_operation",
    "list_bulk_operations",
    "submit_bulk_operation",
]

# Main entry point for running the server
if __name__ == "__main__":
    mcp.run()
