from __future__ import annotations

import csv
import html
import io
import re
from datetime import date, datetime, time
from typing import Any, Callable

import openpyxl

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.decoding import decode_text
from trade_import.ingest.errors import (
    CorruptedContainerError,
    EmptyExtractionError,
    ReportParseError,
)
from trade_import.ingest.grid import Cell, RawGrid
from trade_import.ingest.sniffing import ReportFormat
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

Extractor = Callable[[bytes, ImportSettings], RawGrid]

# Quoted attribute values may contain ">".
_ATTRS = r"""(?:"[^"]*"|'[^']*'|[^'">])*"""
_TR_RE = re.compile(rf"<tr\b{_ATTRS}>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
_TD_RE = re.compile(rf"<td\b{_ATTRS}>(.*?)</td>", re.IGNORECASE | re.DOTALL)
_BOLD_RE = re.compile(rf"<b\b{_ATTRS}>(.*?)</b>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(rf"<{_ATTRS}>")

_CORRUPTION_MARKERS = ("disallowed character", "invalid")


def _strip_tags(fragment: str) -> str:
    text = html.unescape(_TAG_RE.sub("", fragment))
    return " ".join(text.replace("\xa0", " ").split())


def extract_delimited_grid(payload: bytes, settings: ImportSettings) -> RawGrid:
    text = decode_text(payload, settings)
    rows: list[list[Cell]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        cells = next(csv.reader([line], delimiter=settings.csv_delimiter), [])
        rows.append([cell.strip() for cell in cells])
    return RawGrid(rows=rows)


def _workbook_cell(value: Any) -> Cell:
    if value is None or isinstance(value, (int, float)):
        return value
    if isinstance(value, datetime):
        return value.strftime("%Y.%m.%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y.%m.%d")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    return str(value)


def _trim_trailing_empty(cells: list[Cell]) -> list[Cell]:
    end = len(cells)
    while end and (cells[end - 1] is None or cells[end - 1] == ""):
        end -= 1
    return cells[:end]


def extract_workbook_grid(payload: bytes, settings: ImportSettings) -> RawGrid:
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(payload), data_only=True)
    except Exception as exc:
        reason = str(exc)
        if any(marker in reason.lower() for marker in _CORRUPTION_MARKERS):
            raise CorruptedContainerError(reason) from exc
        raise ReportParseError(f"The workbook could not be read ({reason}).") from exc

    try:
        if not workbook.worksheets:
            return RawGrid(rows=[])
        sheet = workbook.worksheets[0]
        logger.info("Reading worksheet '%s'", sheet.title)
        rows: list[list[Cell]] = []
        # Leading empty cells stay in place so positions match the header row.
        for values in sheet.iter_rows(min_row=1, min_col=1, values_only=True):
            rows.append(_trim_trailing_empty([_workbook_cell(value) for value in values]))
    finally:
        workbook.close()

    return RawGrid(rows=rows)


def extract_markup_grid(payload: bytes, settings: ImportSettings) -> RawGrid:
    content = decode_text(payload, settings)
    rows: list[list[Cell]] = []
    banners: dict[int, tuple[str, ...]] = {}

    for row_match in _TR_RE.finditer(content):
        row_content = row_match.group(1)
        bold = tuple(
            label for label in (_strip_tags(m.group(1)) for m in _BOLD_RE.finditer(row_content)) if label
        )
        if bold:
            banners[len(rows)] = bold
        rows.append([_strip_tags(m.group(1)) for m in _TD_RE.finditer(row_content)])

    return RawGrid(rows=rows, banners=banners)


EXTRACTORS: dict[ReportFormat, Extractor] = {
    ReportFormat.DELIMITED: extract_delimited_grid,
    ReportFormat.WORKBOOK: extract_workbook_grid,
    ReportFormat.MARKUP: extract_markup_grid,
}


def extract_grid(
    payload: bytes,
    report_format: ReportFormat,
    *,
    settings: ImportSettings | None = None,
) -> RawGrid:
    settings = settings or get_settings()
    grid = EXTRACTORS[report_format](payload, settings)
    if not any(grid.rows):
        raise EmptyExtractionError(report_format.value)
    logger.debug("Extracted %d rows from %s payload", len(grid), report_format.value)
    return grid


__all__ = [
    "EXTRACTORS",
    "extract_delimited_grid",
    "extract_grid",
    "extract_markup_grid",
    "extract_workbook_grid",
]
