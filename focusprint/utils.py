"""
Utility functions for FocuSprint
"""

import math
import random
import string
import time
from datetime import datetime, timezone
from typing import Optional, Union

from dateutil import parser

from .logging_config import setup_logging

logger = setup_logging()

_BASE36 = string.digits + string.ascii_lowercase


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current time as an ISO 8601 string with millisecond precision"""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(dt_str: Union[str, datetime]) -> datetime:
    """Parse datetime string or return datetime object"""
    if isinstance(dt_str, datetime):
        dt = dt_str
    else:
        try:
            dt = parser.parse(dt_str)
        except (ValueError, OverflowError, TypeError) as e:
            logger.error(f"Error parsing datetime '{dt_str}': {e}")
            raise ValueError(f"Invalid datetime format: {dt_str}")

    # Ensure timezone awareness
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def round_half_up(value: float, digits: int = 0):
    """Round with halves going up (2.5 -> 3), unlike the builtin round()"""
    scale = 10**digits
    rounded = math.floor(value * scale + 0.5)
    return int(rounded) if digits == 0 else rounded / scale


def generate_operation_id() -> str:
    """Build an id of the form bulk_<epoch ms>_<9 base36 chars>"""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"bulk_{int(time.time() * 1000)}_{suffix}"


def duration_seconds(
    start: Optional[Union[str, datetime]], end: Optional[Union[str, datetime]]
) -> Optional[float]:
    """Seconds between two timestamps, or None when either is missing"""
    if not start or not end:
        return None
    return (parse_datetime(end) - parse_datetime(start)).total_seconds()
