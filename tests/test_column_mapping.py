from __future__ import annotations

from trade_import.ingest.column_mapping import (
    ColumnMapping,
    detect_column_mapping,
    ninjatrader_auto_mapping,
    tradovate_auto_mapping,
)
from trade_import.ingest.columns import CANONICAL_FIELDS


def test_detects_metatrader_open_close_names_first():
    headers = ["Time", "Open Time", "Symbol", "Type", "Price", "Open Price", "Close Time", "Close Price"]

    mapping = detect_column_mapping(headers)

    assert mapping.entry_date == "Open Time"
    assert mapping.entry_price == "Open Price"
    assert mapping.exit_date == "Close Time"
    assert mapping.exit_price == "Close Price"


def test_detects_canonical_position_headers():
    mapping = detect_column_mapping(list(CANONICAL_FIELDS))

    assert mapping.as_dict() == {
        "entry_date": "Entry Time",
        "symbol": "Symbol",
        "direction": "Type",
        "volume": "Volume",
        "entry_price": "Entry Price",
        "exit_date": "Exit Time",
        "exit_price": "Exit Price",
        "profit": "Profit",
        "commission": "Commission",
        "swap": "Swap",
        "sl": "S/L",
        "tp": "T/P",
    }


def test_detects_portuguese_headers_case_insensitively():
    headers = ["data abertura", "ATIVO", "Tipo", "Lote", "Preço Entrada", "Lucro", "Corretagem", "Taxas"]

    mapping = detect_column_mapping(headers)

    assert mapping.entry_date == "data abertura"
    assert mapping.symbol == "ATIVO"
    assert mapping.direction == "Tipo"
    assert mapping.volume == "Lote"
    assert mapping.entry_price == "Preço Entrada"
    assert mapping.profit == "Lucro"
    assert mapping.commission == "Corretagem"
    assert mapping.swap == "Taxas"
    assert mapping.missing(["exit_date", "symbol"]) == ["exit_date"]


def test_detects_english_ninjatrader_headers():
    headers = [
        "Trade number",
        "Instrument",
        "Account",
        "Strategy",
        "Market pos.",
        "Qty",
        "Entry price",
        "Exit price",
        "Entry time",
        "Exit time",
    ]

    mapping = detect_column_mapping(headers)

    assert mapping.symbol == "Instrument"
    assert mapping.direction == "Market pos."
    assert mapping.volume == "Qty"
    assert mapping.entry_price == "Entry price"
    assert mapping.exit_price == "Exit price"
    assert mapping.entry_date == "Entry time"
    assert mapping.exit_date == "Exit time"


def test_broker_presets():
    ninja = ninjatrader_auto_mapping()
    tradovate = tradovate_auto_mapping()

    assert ninja.symbol == "Ativo"
    assert ninja.commission == "Corretagem"
    assert ninja.swap == ""
    assert tradovate.entry_date == "boughtTimestamp"
    assert tradovate.profit == "pnl"
    assert tradovate.direction == ""
    assert isinstance(tradovate, ColumnMapping)
