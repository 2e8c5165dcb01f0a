"""Tradovate Performance exports (CSV and PDF).

Each row is one round trip. Tradovate has no side column: a trade whose buy
fill precedes its sell fill is long, otherwise short.
"""

from __future__ import annotations

import io
import re
from datetime import datetime
from typing import Any

import pandas as pd
import pdfplumber

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.decoding import decode_text
from trade_import.ingest.errors import EmptyExtractionError, ReportParseError
from trade_import.ingest.grid import ImportResult, RawTradeData
from trade_import.ingest.ninjatrader import sniff_delimiter
from trade_import.ingest.report_import import ReportSource, read_binary_payload
from trade_import.ingest.validators import LONG, SHORT
from trade_import.utils.dates import parse_generic_datetime, parse_with_layouts
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

SOURCE_FORMAT = "tradovate"
REQUIRED_COLUMNS = ("symbol", "pnl", "boughttimestamp", "soldtimestamp")

TRADOVATE_DATE_LAYOUTS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
)

# Root + month code + 1-2 digit year: NQZ5, MESH5, MNQZ25.
_CONTRACT_RE = re.compile(r"^([A-Z]{2,})([FGHJKMNQUVXZ])(\d{1,2})$", re.IGNORECASE)
_MONEY_STRIP_RE = re.compile(r"[$(),\s]")

_PDF_TRADE_RE = re.compile(
    r"([A-Z]{2,6}\d{0,2})\s+(\d+)\s+([\d.]+)\s+"
    r"(\d{1,2}/\d{1,2}/\d{4})\s+(\d{1,2}:\d{2}:\d{2})\s+.*?"
    r"(\d{1,2}/\d{1,2}/\d{4})\s+(\d{1,2}:\d{2}:\d{2})\s+([\d.]+)\s+"
    r"(\$[\d,.]+|\$\([\d,.]+\))",
    re.IGNORECASE,
)
_PDF_LOOSE_TRADE_RE = re.compile(
    r"([A-Z]{2,4}[A-Z]\d{1,2})\s+(\d+)\s+([\d,.]+)\s+"
    r"(\d{1,2}/\d{1,2}/\d{4}\s+\d{1,2}:\d{2}:\d{2}).*?"
    r"(\d{1,2}/\d{1,2}/\d{4}\s+\d{1,2}:\d{2}:\d{2})\s+([\d,.]+)\s+"
    r"(\$?[\d,()-]+\.?\d*)",
    re.IGNORECASE,
)


def parse_tradovate_money(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    negative = "(" in text and ")" in text
    try:
        amount = float(_MONEY_STRIP_RE.sub("", text))
    except ValueError:
        return 0.0
    return -abs(amount) if negative else amount


def parse_tradovate_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, (bool, int, float)):
        return None
    text = str(value).strip()
    if not text:
        return None
    parsed = parse_with_layouts(text, TRADOVATE_DATE_LAYOUTS)
    if parsed is not None:
        return parsed
    return parse_generic_datetime(text)


def determine_tradovate_direction(bought_timestamp: Any, sold_timestamp: Any) -> str:
    bought = parse_tradovate_date(bought_timestamp)
    sold = parse_tradovate_date(sold_timestamp)
    if bought is None or sold is None:
        return LONG
    return LONG if bought < sold else SHORT


def clean_tradovate_symbol(value: Any) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    match = _CONTRACT_RE.match(text)
    if match is None:
        return text
    return match.group(1)


def _trade_row(row: dict[str, str]) -> RawTradeData:
    trade: RawTradeData = {
        "symbol": row.get("symbol", ""),
        "qty": row.get("qty", "") or "1",
        "buyPrice": row.get("buyprice", ""),
        "sellPrice": row.get("sellprice", ""),
        "pnl": row.get("pnl", ""),
        "boughtTimestamp": row.get("boughttimestamp", ""),
        "soldTimestamp": row.get("soldtimestamp", ""),
        "duration": row.get("duration", ""),
    }
    for source, target in (("buyfillid", "buyFillId"), ("sellfillid", "sellFillId")):
        if row.get(source):
            trade[target] = row[source]
    return trade


def parse_tradovate_content(content: str) -> ImportResult:
    if not content or not content.strip():
        raise EmptyExtractionError(SOURCE_FORMAT, "File is empty")

    header_line = next(line for line in content.splitlines() if line.strip())
    try:
        df = pd.read_csv(
            io.StringIO(content),
            sep=sniff_delimiter(header_line),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )
    except pd.errors.EmptyDataError as exc:
        raise EmptyExtractionError(SOURCE_FORMAT, "File is empty") from exc
    except pd.errors.ParserError as exc:
        raise ReportParseError(f"The Tradovate export could not be read ({exc}).") from exc

    if df.empty:
        raise EmptyExtractionError(
            SOURCE_FORMAT, "CSV file must have at least a header and one data row"
        )

    df.columns = [str(column).strip().lower() for column in df.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ReportParseError(
            f"Missing required columns: {', '.join(missing)}",
            details={"missing_columns": missing},
        )

    rows: list[RawTradeData] = []
    total_pnl = 0.0
    for record in df.fillna("").to_dict(orient="records"):
        row = {str(key): str(value).strip() for key, value in record.items()}
        trade = _trade_row(row)
        if not trade["symbol"] or not (trade["boughtTimestamp"] or trade["soldTimestamp"]):
            continue
        rows.append(trade)
        total_pnl += parse_tradovate_money(trade["pnl"])

    logger.info("Tradovate CSV: %d trades, total P&L %.2f", len(rows), total_pnl)
    return ImportResult(rows=rows, total_net_profit=total_pnl, source_format=SOURCE_FORMAT)


def parse_tradovate_payload(
    payload: bytes, *, settings: ImportSettings | None = None
) -> ImportResult:
    settings = settings or get_settings()
    return parse_tradovate_content(decode_text(payload, settings))


def extract_trades_from_pdf_text(text: str) -> list[RawTradeData]:
    if "TRADES" not in text and "Symbol" not in text and "Buy Price" not in text:
        return []

    start = text.find("TRADES")
    section = text[start:] if start != -1 else text

    trades: list[RawTradeData] = []
    for match in _PDF_TRADE_RE.finditer(section):
        symbol, qty, buy_price, buy_date, buy_time, sell_date, sell_time, sell_price, pnl = (
            match.groups()
        )
        trades.append(
            {
                "symbol": symbol,
                "qty": qty,
                "buyPrice": buy_price,
                "sellPrice": sell_price,
                "pnl": pnl,
                "boughtTimestamp": f"{buy_date} {buy_time}",
                "soldTimestamp": f"{sell_date} {sell_time}",
                # Duration wraps across lines in the PDF and is not recoverable.
                "duration": "",
            }
        )
    if trades:
        return trades

    for match in _PDF_LOOSE_TRADE_RE.finditer(section):
        symbol, qty, buy_price, bought, sold, sell_price, pnl = match.groups()
        trades.append(
            {
                "symbol": symbol,
                "qty": qty,
                "buyPrice": buy_price.replace(",", ""),
                "sellPrice": sell_price.replace(",", ""),
                "pnl": pnl,
                "boughtTimestamp": bought,
                "soldTimestamp": sold,
                "duration": "",
            }
        )
    return trades


def _pdf_text(payload: bytes) -> str:
    pages: list[str] = []
    try:
        with pdfplumber.open(io.BytesIO(payload)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text() or ""
                # One line per page keeps multi-line cells inside a single match.
                pages.append(" ".join(page_text.split()))
    except Exception as exc:
        raise ReportParseError(f"pdfplumber failed to read PDF ({exc}).") from exc
    return "\n".join(pages)


def parse_tradovate_pdf(file_obj: ReportSource) -> ImportResult:
    trades = extract_trades_from_pdf_text(_pdf_text(read_binary_payload(file_obj)))
    if not trades:
        raise EmptyExtractionError(
            SOURCE_FORMAT,
            "No trades found in the PDF. Check that the file is a Tradovate Performance report.",
        )
    total_pnl = sum(parse_tradovate_money(trade["pnl"]) for trade in trades)
    logger.info("Tradovate PDF: %d trades, total P&L %.2f", len(trades), total_pnl)
    return ImportResult(rows=trades, total_net_profit=total_pnl, source_format=SOURCE_FORMAT)


__all__ = [
    "REQUIRED_COLUMNS",
    "clean_tradovate_symbol",
    "determine_tradovate_direction",
    "extract_trades_from_pdf_text",
    "parse_tradovate_content",
    "parse_tradovate_date",
    "parse_tradovate_money",
    "parse_tradovate_payload",
    "parse_tradovate_pdf",
]
