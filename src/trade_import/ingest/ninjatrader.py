"""NinjaTrader grid exports (Portuguese ``;`` and English ``,`` variants).

Rows keep the export's own header text as keys; use
``column_mapping.ninjatrader_auto_mapping`` to find the trade fields.
"""

from __future__ import annotations

import csv
import io
import math

import pandas as pd

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.decoding import decode_text
from trade_import.ingest.errors import EmptyExtractionError, ReportParseError
from trade_import.ingest.grid import ImportResult, RawTradeData
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

SOURCE_FORMAT = "ninjatrader"
TRADE_NUMBER_COLUMNS = ("Núm. Neg.", "Trade number")
_CANDIDATE_DELIMITERS = (";", ",", "\t")


def sniff_delimiter(header_line: str) -> str:
    counts = {delimiter: header_line.count(delimiter) for delimiter in _CANDIDATE_DELIMITERS}
    best = max(_CANDIDATE_DELIMITERS, key=lambda delimiter: counts[delimiter])
    return best if counts[best] else ","


def _is_trade_number(value: str) -> bool:
    if not value:
        return False
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def _trade_number(row: dict[str, str]) -> str:
    for column in TRADE_NUMBER_COLUMNS:
        value = row.get(column, "")
        if value:
            return value
    return ""


def _warn_overlong_lines(content: str, delimiter: str, width: int) -> None:
    # A delimiter inside a free-text cell (strategy names) adds fields; such rows
    # are kept and whatever runs past the header is dropped.
    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    for fields in reader:
        if len(fields) > width:
            logger.warning(
                "NinjaTrader line %d (trade %r) has %d fields, expected %d; extra fields dropped",
                reader.line_num,
                fields[0],
                len(fields),
                width,
            )


def parse_ninjatrader_content(content: str) -> ImportResult:
    if not content or not content.strip():
        raise EmptyExtractionError(SOURCE_FORMAT, "File is empty")

    header_line = next(line for line in content.splitlines() if line.strip())
    delimiter = sniff_delimiter(header_line)

    try:
        width = len(next(csv.reader([header_line], delimiter=delimiter)))
        _warn_overlong_lines(content, delimiter, width)
        df = pd.read_csv(
            io.StringIO(content),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            usecols=list(range(width)),
            engine="python",
        )
    except pd.errors.EmptyDataError as exc:
        raise EmptyExtractionError(SOURCE_FORMAT, "File is empty") from exc
    except (pd.errors.ParserError, csv.Error) as exc:
        raise ReportParseError(f"The NinjaTrader export could not be read ({exc}).") from exc

    if df.empty:
        raise EmptyExtractionError(
            SOURCE_FORMAT, "CSV file must have at least a header and one data row"
        )

    # A trailing delimiter on every line shows up as an unnamed column.
    keep = [
        column
        for column in df.columns
        if str(column).strip() and not str(column).startswith("Unnamed:")
    ]
    records = df[keep].fillna("").to_dict(orient="records")

    rows: list[RawTradeData] = []
    for record in records:
        row = {str(key): str(value).strip() for key, value in record.items()}
        if not _is_trade_number(_trade_number(row)):
            continue
        rows.append(row)

    logger.info(
        "NinjaTrader export: %d trade rows of %d (delimiter %r)", len(rows), len(records), delimiter
    )
    return ImportResult(rows=rows, total_net_profit=None, source_format=SOURCE_FORMAT)


def parse_ninjatrader_payload(
    payload: bytes, *, settings: ImportSettings | None = None
) -> ImportResult:
    settings = settings or get_settings()
    return parse_ninjatrader_content(decode_text(payload, settings))


__all__ = [
    "TRADE_NUMBER_COLUMNS",
    "parse_ninjatrader_content",
    "parse_ninjatrader_payload",
    "sniff_delimiter",
]
