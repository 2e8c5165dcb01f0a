"""Date parsing for broker trade reports.

Both parsers return ``None`` instead of raising so a single bad cell never
aborts an import; callers decide whether to skip or flag the row.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Callable

import pandas as pd

# Serial 1 is 1900-01-01 but the serial system counts a 1900-02-29 that never
# existed, so anchoring at 1899-12-30 lines up every serial from March 1900 on.
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

# Tried in order after "." and "/" are normalized to "-".
TRADE_DATE_LAYOUTS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d-%m-%Y %H:%M:%S",
    "%d-%m-%Y %H:%M",
    "%Y-%m-%d",
    "%d-%m-%Y",
)

NINJATRADER_DATE_LAYOUTS = (
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
)
NINJATRADER_LATE_LAYOUTS = ("%d/%m/%Y %H:%M",)


def _to_naive(parsed: datetime) -> datetime:
    if parsed.tzinfo is None:
        return parsed
    return parsed.replace(tzinfo=None)


def parse_with_layouts(text: str, layouts: tuple[str, ...]) -> datetime | None:
    for layout in layouts:
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    return None


def parse_generic_datetime(text: str) -> datetime | None:
    # pandas reads "now"/"today" as the wall clock.
    if not any(ch.isdigit() for ch in text):
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed) or not isinstance(parsed, pd.Timestamp):
        return None
    return _to_naive(parsed.to_pydatetime())


def from_spreadsheet_serial(serial: float) -> datetime | None:
    if not math.isfinite(serial) or serial <= 0:
        return None
    try:
        moment = SPREADSHEET_EPOCH + timedelta(days=float(serial))
    except OverflowError:
        return None
    # Serial fractions carry float noise; snap to whole seconds.
    return (moment + timedelta(microseconds=500_000)).replace(microsecond=0)


def parse_trade_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return from_spreadsheet_serial(value)

    text = str(value).strip()
    if not text:
        return None

    normalized = text.replace(".", "-").replace("/", "-")
    steps: tuple[Callable[[], datetime | None], ...] = (
        lambda: parse_with_layouts(normalized, TRADE_DATE_LAYOUTS),
        lambda: parse_generic_datetime(text),
    )
    for step in steps:
        parsed = step()
        if parsed is not None:
            return parsed
    return None


def parse_ninjatrader_date(value: Any) -> datetime | None:
    # NinjaTrader writes dates as text; numbers are never serials here.
    if value is None or isinstance(value, (bool, int, float)):
        return None
    text = str(value).strip()
    if not text:
        return None

    steps: tuple[Callable[[], datetime | None], ...] = (
        lambda: parse_with_layouts(text, NINJATRADER_DATE_LAYOUTS),
        lambda: parse_generic_datetime(text),
        lambda: parse_with_layouts(text, NINJATRADER_LATE_LAYOUTS),
    )
    for step in steps:
        parsed = step()
        if parsed is not None:
            return parsed
    return None


__all__ = [
    "NINJATRADER_DATE_LAYOUTS",
    "SPREADSHEET_EPOCH",
    "TRADE_DATE_LAYOUTS",
    "from_spreadsheet_serial",
    "parse_generic_datetime",
    "parse_ninjatrader_date",
    "parse_trade_date",
    "parse_with_layouts",
]
