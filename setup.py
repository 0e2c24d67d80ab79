#!/usr/bin/env python
"""
Setup script for FocuSprint bulk operations.
Install with pip install -e . (add [test] for the test tooling).
"""

from setuptools import setup, find_packages

setup(
    name="focusprint-bulk",
    version="0.3.0",
    description="Platform-admin bulk operations for FocuSprint, served over MCP",
    python_requires=">=3.10",
    packages=find_packages(include=["focusprint", "focusprint.*"]),
    package_data={
        "focusprint": ["py.typed"],
    },
    install_requires=[
        "fastmcp>=2.0",
        "pydantic>=2.0",
        "python-dateutil>=2.8",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "focusprint-mcp=focusprint.__main__:main",
        ],
    },
)
