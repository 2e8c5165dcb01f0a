from __future__ import annotations

import asyncio
import io
from datetime import datetime

import pytest

from trade_import.config.settings import ImportSettings
from trade_import.ingest import extractors
from trade_import.ingest.errors import (
    CorruptedContainerError,
    MissingSectionError,
    TradeReportError,
    UnrecognizedContainerError,
)
from trade_import.ingest.report_import import (
    ReportPayload,
    aload_trade_report,
    import_report_payload,
    import_trade_report,
    load_trade_report,
)
from trade_import.utils.dates import parse_trade_date
from trade_import.utils.money import parse_money

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SIMPLE_REPORT = """
<html>
  <body>
    <table>
      <tr><td><b>Positions</b></td></tr>
      <tr>
        <td>Time</td><td>Ticket</td><td>Symbol</td><td>Type</td><td>Volume</td><td>Price</td>
        <td>S/L</td><td>T/P</td><td>Time</td><td>Price</td><td>Comm</td><td>Swap</td><td>Profit</td>
      </tr>
      <tr>
        <td>2025.01.01</td><td>1</td><td>EURUSD</td><td>buy</td><td>1</td><td>1.00</td>
        <td>0</td><td>0</td><td>2025.01.01</td><td>1.10</td><td>0</td><td>0</td><td>100.00</td>
      </tr>
    </table>
    <table>
      <tr><td>Total Net Profit:</td><td><b>100.00</b></td></tr>
    </table>
  </body>
</html>
"""


def test_csv_with_metadata_and_sections(positions_csv):
    result = import_trade_report(positions_csv, "test.csv", "text/csv")

    assert result.source_format == "delimited"
    assert result.total_net_profit is None
    assert len(result.rows) == 1
    row = result.rows[0]
    assert parse_trade_date(row["Entry Time"]) == datetime(2025, 12, 5, 10, 0)
    assert parse_trade_date(row["Exit Time"]) == datetime(2025, 12, 5, 12, 0)
    assert parse_money(row["Entry Price"]) == 1.05
    assert parse_money(row["Exit Price"]) == 1.055
    assert row["Position"] == "123"
    assert row["Symbol"] == "EURUSD"
    assert row["Type"] == "buy"
    assert parse_money(row["Profit"]) == 500


def test_csv_without_positions_section_names_both_labels():
    payload = b"Time,Symbol,Type\n2025.01.01 10:00,EURUSD,buy\n"

    with pytest.raises(MissingSectionError, match='Section "Positions"/"Posições" not found'):
        import_trade_report(payload, "trades.csv", "text/csv")


def test_csv_with_empty_positions_section_returns_no_rows():
    payload = b"Positions\nTime,Symbol,Type\nOrders\n"

    result = import_trade_report(payload, "trades.csv")

    assert result.rows == []


def test_workbook_report(xlsx_bytes):
    payload = xlsx_bytes(
        [
            ["Positions"],
            ["Time", "Symbol", "Type", "Volume", "Price", "S / L", "T / P", "Time", "Price", "Commission", "Swap", "Profit"],
            ["2025.01.01 10:00", "EURUSD", "buy", 1, 1.05, 0, 0, "2025.01.01 11:00", 1.06, 0, 0, 100],
            ["Orders"],
            ["Results"],
            ["Total Net Profit:", None, 100],
        ]
    )

    result = import_trade_report(payload, "trades.xlsx", XLSX_MIME)

    assert result.source_format == "workbook"
    assert len(result.rows) == 1
    row = result.rows[0]
    assert row["Entry Time"] == "2025.01.01 10:00"
    assert row["Symbol"] == "EURUSD"
    assert row["Profit"] == 100
    # Twelve columns: the second Time/Price pair is not at the 13-column positions.
    assert row["Time_2"] == "2025.01.01 11:00"
    assert row["Price_2"] == 1.05
    assert row["Price_3"] == 1.06
    assert result.total_net_profit == 100.0


def test_workbook_with_real_date_cells(xlsx_bytes):
    payload = xlsx_bytes(
        [
            ["Posições"],
            ["Horário", "Position", "Ativo", "Tipo", "Volume", "Preço", "S / L", "T / P", "Horário", "Preço", "Comissão", "Swap", "Lucro"],
            [
                datetime(2025, 3, 4, 9, 15, 0),
                77,
                "WIN",
                "sell",
                2,
                128000,
                None,
                None,
                datetime(2025, 3, 4, 9, 45, 0),
                127800,
                -1.5,
                0,
                40,
            ],
        ]
    )

    row = import_trade_report(payload, "relatorio.xlsx").rows[0]

    assert parse_trade_date(row["Entry Time"]) == datetime(2025, 3, 4, 9, 15)
    assert row["Symbol"] == "WIN"
    assert row["Exit Price"] == 127800
    assert "S/L" not in row
    assert row["Profit"] == 40


def test_corrupted_workbook_maps_to_resave_message(monkeypatch):
    def _boom(*_args, **_kwargs):
        raise ValueError("Cannot convert: disallowed character")

    monkeypatch.setattr(extractors.openpyxl, "load_workbook", _boom)

    with pytest.raises(CorruptedContainerError) as excinfo:
        import_trade_report(b"PK\x03\x04rest-of-zip", "trades.xlsx", XLSX_MIME)

    assert excinfo.value.kind == "corrupted_container"


def test_non_zip_non_markup_workbook_is_rejected():
    with pytest.raises(UnrecognizedContainerError):
        import_trade_report(b"\x00\x01\x02\x03binary", "trades.xlsx", XLSX_MIME)


def test_markup_saved_as_xlsx_is_read_as_html():
    result = import_trade_report(SIMPLE_REPORT.encode("utf-8"), "ReportHistory.xlsx", XLSX_MIME)

    assert result.source_format == "markup"
    assert result.rows[0]["Symbol"] == "EURUSD"
    assert result.total_net_profit == 100.0


def test_utf16le_and_utf8_markup_are_equivalent():
    utf8 = import_trade_report(SIMPLE_REPORT.encode("utf-8"), "report.html", "text/html")
    utf16le = import_trade_report(
        b"\xff\xfe" + SIMPLE_REPORT.encode("utf-16-le"), "report.html", "text/html"
    )
    utf16be = import_trade_report(
        b"\xfe\xff" + SIMPLE_REPORT.encode("utf-16-be"), "report_be.html", "text/html"
    )

    assert utf16le.rows == utf8.rows
    assert utf16be.rows == utf8.rows
    assert utf16le.total_net_profit == 100.0
    assert utf8.rows[0]["Profit"] == "100.00"


def test_markup_report_13_columns(markup_report, markup_trade_row):
    html = markup_report([markup_trade_row])

    result = import_trade_report(html.encode("utf-8"), "report.html")

    assert result.rows == [
        {
            "Entry Time": "2025.12.05 10:00:00",
            "Ticket": "12345",
            "Symbol": "EURUSD",
            "Type": "buy",
            "Volume": "1.00",
            "Entry Price": "1.05000",
            "S/L": "1.04000",
            "T/P": "1.06000",
            "Exit Time": "2025.12.05 12:00:00",
            "Exit Price": "1.05500",
            "Commission": "-5.00",
            "Swap": "-2.00",
            "Profit": "500.00",
        }
    ]


def test_markup_report_drops_balance_rows_and_keeps_order(markup_report, markup_trade_row):
    balance = list(markup_trade_row)
    balance[3] = "balance"
    second = list(markup_trade_row)
    second[2] = "GBPUSD"
    second[3] = "sell"
    html = markup_report([balance, markup_trade_row, second], total="1234.56", closing_banner="Deals")

    result = import_trade_report(html.encode("utf-8"), "report.html")

    assert [row["Symbol"] for row in result.rows] == ["EURUSD", "GBPUSD"]
    assert [row["Type"] for row in result.rows] == ["buy", "sell"]
    assert result.total_net_profit == 1234.56


def test_markup_report_14_columns(markup_report, markup_trade_row):
    row = markup_trade_row[:4] + ["ExtraColumn"] + markup_trade_row[4:]

    trade = import_trade_report(markup_report([row]).encode("utf-8"), "report.html").rows[0]

    assert trade["Volume"] == "1.00"
    assert trade["Entry Price"] == "1.05000"
    assert trade["Exit Price"] == "1.05500"
    assert trade["Profit"] == "500.00"


def test_markup_report_ignores_rows_after_orders_banner(markup_report, markup_trade_row):
    html = markup_report([markup_trade_row]).replace(
        "</table>", "<tr><td>2025.12.06 10:00:00</td><td>9</td><td>XAUUSD</td><td>buy</td></tr></table>", 1
    )

    result = import_trade_report(html.encode("utf-8"), "report.html")

    assert [row["Symbol"] for row in result.rows] == ["EURUSD"]


def test_load_trade_report_from_path_and_file_object(tmp_path, positions_csv):
    path = tmp_path / "history.csv"
    path.write_bytes(positions_csv)

    from_path = load_trade_report(path)
    from_stream = load_trade_report(io.BytesIO(positions_csv), "history.csv")

    assert from_path.rows == from_stream.rows
    assert len(from_path.rows) == 1


def test_import_report_payload(positions_csv):
    result = import_report_payload(ReportPayload(data=positions_csv, filename="x.csv"))

    assert result.rows[0]["Symbol"] == "EURUSD"


def test_aload_trade_report_matches_sync(tmp_path):
    path = tmp_path / "report.html"
    path.write_text(SIMPLE_REPORT, encoding="utf-8")

    result = asyncio.run(aload_trade_report(path))

    assert result.rows == load_trade_report(path).rows
    assert result.total_net_profit == 100.0


def test_all_failures_share_base_error():
    with pytest.raises(TradeReportError):
        import_trade_report(b"plain text", "notes.bin")


def test_import_passes_lone_comma_setting_to_total():
    payload = SIMPLE_REPORT.replace("<b>100.00</b>", "<b>12,50</b>").encode("utf-8")

    decimal = import_trade_report(payload, "report.html", settings=ImportSettings())
    grouped = import_trade_report(
        payload, "report.html", settings=ImportSettings(lone_comma_is_decimal=False)
    )

    assert decimal.total_net_profit == 12.5
    assert grouped.total_net_profit == 1250.0
