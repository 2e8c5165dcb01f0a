from __future__ import annotations

from dataclasses import asdict, dataclass

# Exact MetaTrader header names win over any alias match.
PREFERRED_HEADERS: dict[str, str] = {
    "entry_date": "Open Time",
    "symbol": "Symbol",
    "direction": "Type",
    "volume": "Volume",
    "entry_price": "Open Price",
    "exit_date": "Close Time",
    "exit_price": "Close Price",
    "profit": "Profit",
    "commission": "Commission",
    "swap": "Swap",
}

FIELD_ALIASES: dict[str, list[str]] = {
    "entry_date": ["Open Time", "Time", "Entry Time", "Data Abertura", "Hora Entrada"],
    "symbol": ["Symbol", "Ativo", "Instrumento", "Instrument"],
    "direction": ["Type", "Tipo", "Direção", "Direcao", "Market pos.", "Pos mercado."],
    "volume": ["Volume", "Size", "Lote", "Qtd", "Qty", "Quantidade"],
    "entry_price": ["Open Price", "Price", "Entry Price", "Preço Entrada", "Preco Entrada"],
    "exit_date": ["Close Time", "Exit Time", "Data Fechamento", "Hora Saída", "Hora Saida"],
    "exit_price": ["Close Price", "Exit Price", "Preço Saída", "Preco Saida"],
    "sl": ["S / L", "SL", "Stop Loss", "S/L", "StopLoss"],
    "tp": ["T / P", "TP", "Take Profit", "T/P", "TakeProfit"],
    "profit": ["Profit", "Lucro", "P/L", "PnL"],
    "commission": [
        "Commission",
        "Comission",
        "Comissao",
        "Comissão",
        "Fee",
        "Fees",
        "Corretagem",
        "Cost",
    ],
    "swap": ["Swap", "Swaps", "Rollover", "Taxes", "Taxa", "Taxas"],
}


@dataclass(frozen=True)
class ColumnMapping:
    """Header text feeding each trade field; empty string when unmapped."""

    entry_date: str = ""
    symbol: str = ""
    direction: str = ""
    volume: str = ""
    entry_price: str = ""
    exit_date: str = ""
    exit_price: str = ""
    profit: str = ""
    commission: str = ""
    swap: str = ""
    sl: str = ""
    tp: str = ""

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def missing(self, fields: list[str]) -> list[str]:
        values = self.as_dict()
        return [field for field in fields if not values.get(field)]


def _normalize(text: str) -> str:
    return " ".join(str(text).strip().lower().split())


def _find_header(headers: list[str], candidates: list[str]) -> str | None:
    normalized_to_original: dict[str, str] = {}
    for header in headers:
        normalized_to_original.setdefault(_normalize(header), header)
    for candidate in candidates:
        found = normalized_to_original.get(_normalize(candidate))
        if found is not None:
            return found
    return None


def detect_column_mapping(headers: list[str]) -> ColumnMapping:
    headers = [str(header) for header in headers]
    mapping: dict[str, str] = {}
    for field, aliases in FIELD_ALIASES.items():
        preferred = PREFERRED_HEADERS.get(field)
        if preferred is not None and preferred in headers:
            mapping[field] = preferred
            continue
        found = _find_header(headers, aliases)
        if found is not None:
            mapping[field] = found
    return ColumnMapping(**mapping)


def ninjatrader_auto_mapping() -> ColumnMapping:
    return ColumnMapping(
        entry_date="Hora entrada",
        symbol="Ativo",
        direction="Pos mercado.",
        volume="Qtd",
        entry_price="Preço entrada",
        exit_date="Hora saída",
        exit_price="Preço saída",
        profit="Profit",
        commission="Corretagem",
    )


def tradovate_auto_mapping() -> ColumnMapping:
    # Direction comes from the bought/sold timestamp order, not a column.
    return ColumnMapping(
        entry_date="boughtTimestamp",
        symbol="symbol",
        volume="qty",
        entry_price="buyPrice",
        exit_date="soldTimestamp",
        exit_price="sellPrice",
        profit="pnl",
    )


__all__ = [
    "ColumnMapping",
    "FIELD_ALIASES",
    "PREFERRED_HEADERS",
    "detect_column_mapping",
    "ninjatrader_auto_mapping",
    "tradovate_auto_mapping",
]
