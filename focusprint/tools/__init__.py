"""
FocuSprint MCP Tools - Modular tool definitions
"""

from .bulk import register_bulk_tools


__all__ = [
    "register_bulk_tools",
]


def register_all_tools(mcp, managers):
    """Register all tool modules with the MCP server"""
    register_bulk_tools(mcp, managers)
