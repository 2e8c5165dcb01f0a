"""Header disambiguation for MetaTrader-style position tables.

MetaTrader exports repeat ``Time`` and ``Price`` for the open and close legs
of a position. Names are resolved by position against the standard 13-column
layout; repeats at any other position get a numeric suffix instead of a
guessed role, because an inserted column (taxes, a hidden cell) shifts every
column after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from trade_import.ingest.grid import Cell, cell_text

CANONICAL_FIELDS = (
    "Entry Time",
    "Ticket",
    "Symbol",
    "Type",
    "Volume",
    "Entry Price",
    "S/L",
    "T/P",
    "Exit Time",
    "Exit Price",
    "Commission",
    "Swap",
    "Profit",
)

# Repeated header label -> {expected position: role} in the 13-column layout.
_REPEATED_LABEL_ROLES: dict[str, dict[int, str]] = {
    "Time": {0: "Entry Time", 8: "Exit Time"},
    "Price": {5: "Entry Price", 9: "Exit Price"},
}

_LABEL_ALIASES = {
    "time": "Time",
    "horário": "Time",
    "horario": "Time",
    "price": "Price",
    "preço": "Price",
    "preco": "Price",
}

_TRANSLATED_HEADERS = {
    "ativo": "Symbol",
    "tipo": "Type",
    "volume": "Volume",
    "comissão": "Commission",
    "comissao": "Commission",
    "lucro": "Profit",
    "position": "Position",
    "s / l": "S/L",
    "t / p": "T/P",
}


def disambiguate_headers(header_row: list[Cell]) -> tuple[str, ...]:
    names: list[str] = []
    unexpected_counts: dict[str, int] = {}

    for index, raw in enumerate(header_row):
        text = cell_text(raw)
        lowered = text.lower()
        label = _LABEL_ALIASES.get(lowered)

        if label is None:
            names.append(_TRANSLATED_HEADERS.get(lowered, text))
            continue

        role = _REPEATED_LABEL_ROLES[label].get(index)
        if role is not None and role not in names:
            names.append(role)
            continue

        unexpected_counts[label] = unexpected_counts.get(label, 0) + 1
        names.append(f"{label}_{unexpected_counts[label] + 1}")

    return tuple(names)


@dataclass(frozen=True)
class MarkupLayout:
    """Role -> cell position for one HTML report column count.

    ``Profit`` is not listed: it is always the last cell of the row.
    """

    name: str
    positions: Mapping[str, int]

    def resolve(self, cells: list[str]) -> dict[str, str]:
        record = {
            role: cells[position] if 0 <= position < len(cells) else ""
            for role, position in self.positions.items()
        }
        record["Profit"] = cells[-1] if cells else ""
        return record


_BASE_POSITIONS = {
    "Entry Time": 0,
    "Ticket": 1,
    "Symbol": 2,
    "Type": 3,
    "Volume": 4,
    "Entry Price": 5,
    "S/L": 6,
    "T/P": 7,
    "Exit Time": 8,
    "Exit Price": 9,
    "Commission": 10,
    "Swap": 11,
}

MT4_STANDARD = MarkupLayout(name="mt4-13", positions=dict(_BASE_POSITIONS))

# Extra (taxes or hidden) column right after Type shifts Volume onwards by one.
MT4_EXTRA_AFTER_TYPE = MarkupLayout(
    name="mt4-14",
    positions={
        **_BASE_POSITIONS,
        "Volume": 5,
        "Entry Price": 6,
        "S/L": 7,
        "T/P": 8,
        "Exit Time": 9,
        "Exit Price": 10,
        "Commission": 11,
        "Swap": 12,
    },
)


def _mt5_wide(column_count: int) -> MarkupLayout:
    # MT5 appends its extra columns after T/P; commission and swap sit just
    # before the trailing profit cell.
    return MarkupLayout(
        name=f"mt5-{column_count}",
        positions={
            **_BASE_POSITIONS,
            "Commission": column_count - 3,
            "Swap": column_count - 2,
        },
    )


MARKUP_LAYOUTS: dict[int, MarkupLayout] = {
    13: MT4_STANDARD,
    14: MT4_EXTRA_AFTER_TYPE,
    15: _mt5_wide(15),
}


def markup_layout_for(column_count: int) -> MarkupLayout:
    layout = MARKUP_LAYOUTS.get(column_count)
    if layout is not None:
        return layout
    if column_count > max(MARKUP_LAYOUTS):
        return _mt5_wide(column_count)
    return MT4_STANDARD


__all__ = [
    "CANONICAL_FIELDS",
    "MARKUP_LAYOUTS",
    "MarkupLayout",
    "disambiguate_headers",
    "markup_layout_for",
]
