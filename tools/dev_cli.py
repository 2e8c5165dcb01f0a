from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from trade_import.config.settings import get_settings
from trade_import.ingest.column_mapping import detect_column_mapping
from trade_import.ingest.errors import TradeReportError
from trade_import.ingest.grid import ImportResult


def _import_file(path: Path, broker: str) -> ImportResult:
    if broker == "ninjatrader":
        from trade_import.ingest.ninjatrader import parse_ninjatrader_payload

        return parse_ninjatrader_payload(path.read_bytes())
    if broker == "tradovate":
        from trade_import.ingest.tradovate import parse_tradovate_payload, parse_tradovate_pdf

        if path.suffix.lower() == ".pdf":
            return parse_tradovate_pdf(path)
        return parse_tradovate_payload(path.read_bytes())

    from trade_import.ingest.report_import import load_trade_report

    return load_trade_report(path)


def _cmd_inspect(args: argparse.Namespace) -> int:
    path = Path(args.file)
    try:
        result = _import_file(path, args.broker)
    except TradeReportError as exc:
        print(json.dumps({"error": exc.kind, "message": exc.message}, ensure_ascii=False, indent=2))
        return 1

    headers = list(result.rows[0].keys()) if result.rows else []
    summary = {
        "file": path.name,
        "source_format": result.source_format,
        "row_count": len(result.rows),
        "total_net_profit": result.total_net_profit,
        "column_mapping": detect_column_mapping(headers).as_dict(),
        "rows": result.rows[: args.rows],
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2, default=str))
    return 0


def _cmd_settings(_: argparse.Namespace) -> int:
    for key, value in asdict(get_settings()).items():
        print(f"{key}={value!r}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trade report import developer CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sp_inspect = subparsers.add_parser("inspect", help="Import a report and print the result as JSON")
    sp_inspect.add_argument("file", help="Path to the exported report.")
    sp_inspect.add_argument(
        "--broker",
        choices=["auto", "ninjatrader", "tradovate"],
        default="auto",
        help="Broker-specific reader; auto sniffs MetaTrader-style reports.",
    )
    sp_inspect.add_argument(
        "--rows",
        type=int,
        default=5,
        help="Number of rows to print.",
    )
    sp_inspect.set_defaults(func=_cmd_inspect)

    sp_settings = subparsers.add_parser("settings", help="Print resolved import settings")
    sp_settings.set_defaults(func=_cmd_settings)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
