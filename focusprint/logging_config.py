"""
Shared logging configuration for FocuSprint
"""

import logging
import os
import sys


def setup_logging():
    """Configure logging to stderr for all FocuSprint modules"""
    # Only configure if not already configured
    if not logging.getLogger().handlers:
        level_name = os.getenv("FOCUSPRINT_LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            stream=sys.stderr,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    import inspect

    frame = inspect.stack()[1]
    module = inspect.getmodule(frame[0])
    return logging.getLogger(module.__name__ if module else __name__)
