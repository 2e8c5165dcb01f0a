"""Money helpers for locale-ambiguous broker amounts."""

from __future__ import annotations

import math
import re
from typing import Any

from trade_import.config.settings import get_settings

_CURRENCY_RE = re.compile(r"(US\$|R\$|USD|BRL|\$|€|£)", re.IGNORECASE)


def normalize_separators(text: str, *, lone_comma_is_decimal: bool = True) -> str:
    """Rewrite ``text`` so that ``.`` is the only decimal separator.

    With both separators present the last one is the decimal mark. A lone
    comma is a decimal mark by default, which matches NinjaTrader's
    Portuguese exports (``21160,50``); pass ``lone_comma_is_decimal=False``
    to read it as a thousands separator instead.
    """
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if "," in text:
        if lone_comma_is_decimal:
            return text.replace(",", ".", 1)
        return text.replace(",", "")
    return text


def parse_money(value: Any, *, lone_comma_is_decimal: bool | None = None) -> float:
    """Parse a broker amount; unparseable text is ``0.0``.

    ``lone_comma_is_decimal`` defaults to ``TRADE_IMPORT_LONE_COMMA_DECIMAL``.
    """
    if lone_comma_is_decimal is None:
        lone_comma_is_decimal = get_settings().lone_comma_is_decimal
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0

    text = str(value).strip()
    if not text:
        return 0.0

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    text = _CURRENCY_RE.sub("", text)
    text = "".join(text.split())
    if text.startswith("-"):
        negative = True
        text = text[1:]
    elif text.startswith("+"):
        text = text[1:]
    # "(-100.00)" carries both negative markers.
    text = text.lstrip("-")

    text = normalize_separators(text, lone_comma_is_decimal=lone_comma_is_decimal)
    try:
        amount = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return -abs(amount) if negative else amount


def parse_price(value: Any, *, lone_comma_is_decimal: bool | None = None) -> float:
    return parse_money(value, lone_comma_is_decimal=lone_comma_is_decimal)


__all__ = ["normalize_separators", "parse_money", "parse_price"]
