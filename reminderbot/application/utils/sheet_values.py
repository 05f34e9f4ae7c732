from __future__ import annotations

import logging
import math
import numbers
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

EXCEL_EPOCH = datetime(1899, 12, 30)

DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%d-%m-%Y %H:%M",
    "%Y-%m-%d",
)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def normalize_phone(value: Any) -> str:
    """Digits-only phone identifier; numeric cells never go through scientific notation."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        text = format(Decimal(repr(value)).quantize(Decimal(1)), "f") if value.is_integer() else repr(value)
    elif isinstance(value, int):
        text = str(value)
    else:
        text = str(value)
    return re.sub(r"\D", "", text)


def excel_serial_to_datetime(serial: float) -> datetime:
    moment = EXCEL_EPOCH + timedelta(days=float(serial))
    # Serial fractions drift by a few microseconds; snap to the minute
    return (moment + timedelta(seconds=30)).replace(second=0, microsecond=0)


def parse_datetime_text(text: str) -> datetime | None:
    cleaned = text.strip()
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def normalize_appointment_time(
    value: Any,
    timezone: ZoneInfo,
    now: datetime | None = None,
    row_label: str = "",
) -> datetime:
    """
    Accepts an Excel serial number, a string or a native date/datetime and
    returns a tz-aware datetime in the business timezone. Falls back to now.
    """
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value.to_pydatetime() if hasattr(value, "to_pydatetime") else value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    elif isinstance(value, numbers.Real) and not isinstance(value, bool) and not is_blank(value):
        parsed = excel_serial_to_datetime(value)
    elif isinstance(value, str):
        parsed = parse_datetime_text(value)

    if parsed is None:
        logger.warning(
            "Could not parse appointment time, defaulting to now",
            extra={"reason": f"row={row_label} value={value!r}"},
        )
        return now or datetime.now(timezone)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone)
    return parsed.astimezone(timezone)


def format_sheet_datetime(value: datetime, timezone: ZoneInfo) -> str:
    return value.astimezone(timezone).strftime("%Y-%m-%d %H:%M")
