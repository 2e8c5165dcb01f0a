"""Classified failures raised by the trade-report import engine.

Every error carries a stable ``kind`` code so callers can branch without
matching on message text, and a ``message`` that is safe to show to the
person who uploaded the file.
"""

from __future__ import annotations

from typing import Any

POSITIONS_LABELS = ("Positions", "Posições")


class TradeReportError(ValueError):
    kind = "trade_report_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnrecognizedContainerError(TradeReportError):
    kind = "unrecognized_container"

    def __init__(self, filename: str | None = None) -> None:
        super().__init__(
            "The file does not look like a valid Excel workbook (.xlsx), CSV or HTML "
            "trade report. If it is an HTML report that was renamed, save it as .html, "
            "or open it in the original application and save it again.",
            details={"filename": filename},
        )


class CorruptedContainerError(TradeReportError):
    kind = "corrupted_container"

    def __init__(self, reason: str, filename: str | None = None) -> None:
        super().__init__(
            "The workbook contains characters the reader cannot accept. Open the file "
            "in Excel and save it again under the same name; this removes the invalid "
            "characters and lets the import run.",
            details={"filename": filename, "reason": reason},
        )


class MissingSectionError(TradeReportError):
    kind = "missing_section"

    def __init__(self) -> None:
        labels = "/".join(f'"{label}"' for label in POSITIONS_LABELS)
        super().__init__(
            f"Section {labels} not found in the file. Check that you exported the "
            "trade history report that includes the Positions table.",
            details={"expected_labels": list(POSITIONS_LABELS)},
        )


class MissingHeaderRowError(TradeReportError):
    kind = "missing_header_row"

    def __init__(self, label_row: int) -> None:
        super().__init__(
            'Header row not found after "Positions" section; the export looks truncated.',
            details={"label_row": label_row},
        )


class EmptyExtractionError(TradeReportError):
    kind = "empty_extraction"

    def __init__(
        self, source_format: str, message: str = "No rows could be read from the file."
    ) -> None:
        super().__init__(
            message,
            details={"source_format": source_format},
        )


class ReportDecodeError(TradeReportError):
    kind = "decode_failed"


class ReportParseError(TradeReportError):
    kind = "parse_failed"


__all__ = [
    "CorruptedContainerError",
    "EmptyExtractionError",
    "MissingHeaderRowError",
    "MissingSectionError",
    "POSITIONS_LABELS",
    "ReportDecodeError",
    "ReportParseError",
    "TradeReportError",
    "UnrecognizedContainerError",
]
