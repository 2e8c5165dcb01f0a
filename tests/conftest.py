from __future__ import annotations

import io
from typing import Any, Callable

import openpyxl
import pytest

MT_HEADER = [
    "Time",
    "Position",
    "Symbol",
    "Type",
    "Volume",
    "Price",
    "S / L",
    "T / P",
    "Time",
    "Price",
    "Commission",
    "Swap",
    "Profit",
]


def _markup_row(cells: list[str]) -> str:
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


def build_markup_report(
    trade_rows: list[list[str]],
    *,
    total: str | None = None,
    closing_banner: str = "Orders",
    header: bool = True,
) -> str:
    parts = ["<html>", "<body>", "<table>", "<tr><td><b>Positions</b></td></tr>"]
    if header:
        parts.append(_markup_row(MT_HEADER))
    parts.extend(_markup_row(row) for row in trade_rows)
    if closing_banner:
        parts.append(f"<tr><td><b>{closing_banner}</b></td></tr>")
    parts.append("</table>")
    if total is not None:
        parts.append(f"<table><tr><td>Total Net Profit:</td><td><b>{total}</b></td></tr></table>")
    parts.extend(["</body>", "</html>"])
    return "\n".join(parts)


@pytest.fixture
def markup_trade_row() -> list[str]:
    return [
        "2025.12.05 10:00:00",
        "12345",
        "EURUSD",
        "buy",
        "1.00",
        "1.05000",
        "1.04000",
        "1.06000",
        "2025.12.05 12:00:00",
        "1.05500",
        "-5.00",
        "-2.00",
        "500.00",
    ]


@pytest.fixture
def markup_report() -> Callable[..., str]:
    return build_markup_report


@pytest.fixture
def positions_csv() -> bytes:
    lines = [
        "Metadata,Line1",
        "Metadata,Line2",
        "Metadata,Line3",
        "Metadata,Line4",
        "Metadata,Line5",
        "Positions,",
        ",".join(MT_HEADER),
        "2025.12.05 10:00,123,EURUSD,buy,1.0,1.05,1.04,1.06,2025.12.05 12:00,1.055,0,0,500",
        "Orders,",
        "ignored,row",
    ]
    return "\n".join(lines).encode("utf-8")


@pytest.fixture
def xlsx_bytes() -> Callable[[list[list[Any]]], bytes]:
    def _build(rows: list[list[Any]]) -> bytes:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = "Report"
        for row in rows:
            sheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _build
