from __future__ import annotations

import re

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.columns import markup_layout_for
from trade_import.ingest.grid import Cell, RawGrid, RawTradeData, cell_text, first_cell_text
from trade_import.ingest.sections import (
    SectionWindow,
    is_following_section_label,
    is_positions_label,
)
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

_MARKUP_DATE_RE = re.compile(r"^\d{4}\.\d{2}\.\d{2}")
_TRADE_DIRECTIONS = {"buy", "sell"}


def _is_blank_row(row: list[Cell]) -> bool:
    return not any(cell_text(cell) for cell in row)


def _skip_reason(row: list[Cell], min_cells: int) -> str | None:
    if not row or _is_blank_row(row):
        return "empty"
    first = first_cell_text(row)
    if is_positions_label(first) or is_following_section_label(first):
        return "section label"
    if len(row) < min_cells:
        return "too few cells"
    return None


def normalize_section_rows(
    grid: RawGrid,
    window: SectionWindow,
    headers: tuple[str, ...],
    *,
    settings: ImportSettings | None = None,
) -> list[RawTradeData]:
    settings = settings or get_settings()
    records: list[RawTradeData] = []

    for index in window.data_indices:
        row = grid.rows[index]
        reason = _skip_reason(row, settings.min_row_cells)
        if reason is not None:
            logger.debug("Skipping row %d: %s", index, reason)
            continue

        record: RawTradeData = {}
        for position, header in enumerate(headers):
            if position >= len(row):
                break
            value = row[position]
            if value is None:
                continue
            record[header] = value
        records.append(record)

    return records


def is_markup_trade_row(cells: list[str]) -> bool:
    if len(cells) < 4 or not _MARKUP_DATE_RE.match(cells[0]):
        return False
    # Balance, deposit and credit rows share the table with real trades.
    return cells[3].strip().lower() in _TRADE_DIRECTIONS


def normalize_markup_rows(grid: RawGrid, indices: list[int]) -> list[RawTradeData]:
    records: list[RawTradeData] = []
    for index in indices:
        cells = [cell_text(cell) for cell in grid.rows[index]]
        if not is_markup_trade_row(cells):
            logger.debug("Skipping HTML row %d: not a trade row", index)
            continue
        layout = markup_layout_for(len(cells))
        records.append(layout.resolve(cells))
    return records


__all__ = ["is_markup_trade_row", "normalize_markup_rows", "normalize_section_rows"]
