from __future__ import annotations

import re
from typing import Any

LONG = "Long"
SHORT = "Short"

# Trailing futures contract tokens: " 12-25", " 3-2025", " DEC25".
CONTRACT_SUFFIX_RE = re.compile(r"\s+(\d{1,2}-\d{2,4}|[A-Z]{3}\d{2})$", re.IGNORECASE)


def normalize_trade_type(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    if "buy" in text:
        return LONG
    if "sell" in text:
        return SHORT
    # NinjaTrader Portuguese exports write Comprada/Venda.
    if "comprada" in text or text == "long":
        return LONG
    if "venda" in text or text == "short":
        return SHORT
    return None


def clean_symbol(value: Any) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    text = text.split(".", 1)[0]
    return CONTRACT_SUFFIX_RE.sub("", text).strip()


__all__ = ["CONTRACT_SUFFIX_RE", "LONG", "SHORT", "clean_symbol", "normalize_trade_type"]
