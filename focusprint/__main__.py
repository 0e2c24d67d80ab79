#!/usr/bin/env python3
"""
Main entry point for FocuSprint bulk operations server
"""

from .server import mcp


def main():
    """Entry point for the focusprint-mcp command"""
    mcp.run()


if __name__ == "__main__":
    main()
