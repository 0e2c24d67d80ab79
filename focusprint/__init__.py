"""
FocuSprint platform-admin bulk operations
"""

__version__ = "0.3.0"
