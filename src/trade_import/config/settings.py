from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = str(os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ImportSettings:
    legacy_encoding: str = "cp1252"
    sniff_bytes: int = 512
    min_row_cells: int = 3
    csv_delimiter: str = ","
    lone_comma_is_decimal: bool = True


def get_settings() -> ImportSettings:
    return ImportSettings(
        legacy_encoding=os.getenv("TRADE_IMPORT_LEGACY_ENCODING", "cp1252") or "cp1252",
        sniff_bytes=max(4, _env_int("TRADE_IMPORT_SNIFF_BYTES", 512)),
        min_row_cells=max(1, _env_int("TRADE_IMPORT_MIN_ROW_CELLS", 3)),
        csv_delimiter=os.getenv("TRADE_IMPORT_CSV_DELIMITER", ",") or ",",
        lone_comma_is_decimal=_env_bool("TRADE_IMPORT_LONE_COMMA_DECIMAL", True),
    )
