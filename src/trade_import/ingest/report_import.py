"""Entry points that turn an uploaded trade report into raw trade rows.

The pipeline is: sniff the container, extract a cell grid, find the
Positions section, name the columns, emit one dict per trade row, and read
the report's own Total Net Profit when it has one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.columns import disambiguate_headers
from trade_import.ingest.decoding import decode_text
from trade_import.ingest.extractors import extract_grid
from trade_import.ingest.grid import ImportResult
from trade_import.ingest.rows import normalize_markup_rows, normalize_section_rows
from trade_import.ingest.sections import locate_positions_section, markup_positions_rows
from trade_import.ingest.sniffing import ReportFormat, sniff_format
from trade_import.ingest.summary import total_net_profit_from_grid, total_net_profit_from_markup
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

ReportSource = Union[str, Path, BinaryIO, bytes]


@dataclass(frozen=True)
class ReportPayload:
    data: bytes
    filename: str | None = None
    content_type: str | None = None


def read_binary_payload(file_obj: ReportSource) -> bytes:
    if isinstance(file_obj, bytes):
        return file_obj
    if isinstance(file_obj, (str, Path)):
        return Path(file_obj).read_bytes()
    if hasattr(file_obj, "read"):
        payload = file_obj.read()
        if isinstance(payload, str):
            return payload.encode("utf-8")
        return payload
    raise TypeError("Unsupported report input type.")


def _source_name(file_obj: ReportSource) -> str | None:
    if isinstance(file_obj, (str, Path)):
        return Path(file_obj).name
    name = getattr(file_obj, "name", None)
    return Path(name).name if isinstance(name, str) else None


def import_trade_report(
    payload: bytes,
    filename: str | None = None,
    content_type: str | None = None,
    *,
    settings: ImportSettings | None = None,
) -> ImportResult:
    settings = settings or get_settings()
    report_format = sniff_format(payload, filename, content_type, settings=settings)
    logger.info("Importing %s as %s", filename or "upload", report_format.value)

    grid = extract_grid(payload, report_format, settings=settings)

    if report_format is ReportFormat.MARKUP:
        rows = normalize_markup_rows(grid, markup_positions_rows(grid))
        total = total_net_profit_from_markup(
            decode_text(payload, settings),
            lone_comma_is_decimal=settings.lone_comma_is_decimal,
        )
    else:
        window = locate_positions_section(grid)
        headers = disambiguate_headers(grid.rows[window.header_index])
        rows = normalize_section_rows(grid, window, headers, settings=settings)
        total = total_net_profit_from_grid(
            grid, lone_comma_is_decimal=settings.lone_comma_is_decimal
        )

    logger.info("Imported %d trade rows from %s", len(rows), filename or "upload")
    return ImportResult(rows=rows, total_net_profit=total, source_format=report_format.value)


def import_report_payload(
    report: ReportPayload, *, settings: ImportSettings | None = None
) -> ImportResult:
    return import_trade_report(
        report.data, report.filename, report.content_type, settings=settings
    )


def load_trade_report(
    file_obj: ReportSource,
    filename: str | None = None,
    content_type: str | None = None,
    *,
    settings: ImportSettings | None = None,
) -> ImportResult:
    payload = read_binary_payload(file_obj)
    return import_trade_report(
        payload, filename or _source_name(file_obj), content_type, settings=settings
    )


async def aload_trade_report(
    file_obj: ReportSource,
    filename: str | None = None,
    content_type: str | None = None,
    *,
    settings: ImportSettings | None = None,
) -> ImportResult:
    """Async variant of ``load_trade_report``.

    Only the byte read leaves the event loop; parsing is CPU bound and runs
    inline once the bytes are in memory.
    """
    payload = await asyncio.to_thread(read_binary_payload, file_obj)
    return import_trade_report(
        payload, filename or _source_name(file_obj), content_type, settings=settings
    )


__all__ = [
    "ImportResult",
    "ReportPayload",
    "aload_trade_report",
    "import_report_payload",
    "import_trade_report",
    "load_trade_report",
    "read_binary_payload",
]
