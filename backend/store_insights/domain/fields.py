"""
Lenient field coercion for backend records

Backend JSON is not always clean: amounts arrive as "N/A" or empty strings,
timestamps as free text. These helpers are used by the domain models'
before-validators so a bad field degrades to a default instead of failing
the whole record.

Author: Store Insights
Date: 2026-01-26
"""
import logging
import math
from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

_float = TypeAdapter(float)
_int = TypeAdapter(int)
_datetime = TypeAdapter(datetime)


def lenient_float(value: Any) -> float:
    """Parse an amount; missing or unparseable values become 0"""
    if value is None or value == "":
        return 0.0
    try:
        amount = _float.validate_python(value)
    except ValidationError:
        amount = math.nan
    if not math.isfinite(amount):
        logger.warning(f"Unparseable amount {value!r}, using 0")
        return 0.0
    return amount


def lenient_int(value: Any) -> int:
    """Parse a count; fractional values are truncated, unparseable become 0"""
    if value is None or value == "":
        return 0
    try:
        return _int.validate_python(value)
    except ValidationError:
        return int(lenient_float(value))


def lenient_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return _int.validate_python(value)
    except ValidationError:
        logger.warning(f"Unparseable number {value!r}, ignoring")
        return None


def lenient_datetime(value: Any) -> Optional[datetime]:
    """Parse a timestamp; missing or unparseable values become None"""
    if value is None or value == "":
        return None
    try:
        return _datetime.validate_python(value)
    except ValidationError:
        logger.warning(f"Unparseable timestamp {value!r}, ignoring")
        return None
