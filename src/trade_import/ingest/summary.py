from __future__ import annotations

import re

from trade_import.ingest.grid import RawGrid, cell_text
from trade_import.utils.money import parse_money

_TOTAL_LABEL = "total net profit"
_MARKUP_TOTAL_RE = re.compile(r"Total Net Profit:[\s\S]*?<b[^>]*>([\s\S]*?)</b>", re.IGNORECASE)
_NUMBER_CHARS_RE = re.compile(r"[^0-9.,()\-]")
_DIGIT_RE = re.compile(r"\d")
# "1,234" or "(12,345,678)": comma groups of three with no decimal point.
_GROUPED_THOUSANDS_RE = re.compile(r"[(\-]*\d{1,3}(?:,\d{3})+\)?")


def _number_in(text: str, lone_comma_is_decimal: bool | None = None) -> float | None:
    if not _DIGIT_RE.search(text):
        return None
    cleaned = _NUMBER_CHARS_RE.sub("", text)
    if _GROUPED_THOUSANDS_RE.fullmatch(cleaned):
        return parse_money(cleaned, lone_comma_is_decimal=False)
    return parse_money(cleaned, lone_comma_is_decimal=lone_comma_is_decimal)


def total_net_profit_from_grid(
    grid: RawGrid, *, lone_comma_is_decimal: bool | None = None
) -> float | None:
    # Summaries sit at the bottom of the sheet, so scan upwards.
    for row in reversed(grid.rows):
        if not row:
            continue
        joined = " ".join(cell_text(cell) for cell in row).lower()
        if _TOTAL_LABEL not in joined:
            continue
        for cell in row:
            if isinstance(cell, bool):
                continue
            if isinstance(cell, (int, float)):
                return float(cell)
            text = cell_text(cell)
            if not text or "total" in text.lower():
                continue
            value = _number_in(text, lone_comma_is_decimal)
            if value is not None:
                return value
    return None


def total_net_profit_from_markup(
    content: str, *, lone_comma_is_decimal: bool | None = None
) -> float | None:
    match = _MARKUP_TOTAL_RE.search(content)
    if match is None:
        return None
    return _number_in(re.sub(r"<[^>]*>", "", match.group(1)), lone_comma_is_decimal)


__all__ = ["total_net_profit_from_grid", "total_net_profit_from_markup"]
