"""
Explicit value coercion for JSON responses.

Database drivers hand back 64-bit integers, Decimals and datetimes (naive on
SQLite, aware on Postgres). These helpers convert them for a response without
ever raising on a value that came out of the database; missing data becomes 0
(or None for timestamps).
"""
import enum
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from app.utils.timeutils import as_utc

_CENTS = Decimal("0.01")


def to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value))
        if not number.is_finite():
            return 0
        return int(number)
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 0


def to_money(value: Any) -> float:
    """Round to 2 decimal places (half-up) and return a float"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            return 0.0
        return float(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError, TypeError):
        return 0.0


def to_iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def utc_date_key(value: datetime) -> str:
    """Calendar date (UTC) of a timestamp as YYYY-MM-DD"""
    return as_utc(value).date().isoformat()


def enum_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return value.value
    return str(value)
