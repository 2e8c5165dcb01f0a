from __future__ import annotations

from enum import Enum
from pathlib import PurePath

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.decoding import decode_text
from trade_import.ingest.errors import UnrecognizedContainerError
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"

_DELIMITED_EXTENSIONS = {".csv", ".tsv", ".txt"}
_DELIMITED_MIME_TYPES = {"text/csv", "text/plain", "text/tab-separated-values", "application/csv"}
_MARKUP_EXTENSIONS = {".html", ".htm"}
_MARKUP_MIME_TYPES = {"text/html", "application/xhtml+xml"}


class ReportFormat(str, Enum):
    WORKBOOK = "workbook"
    DELIMITED = "delimited"
    MARKUP = "markup"


def _extension(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def _mime(content_type: str | None) -> str:
    # Drop parameters such as "; charset=utf-8".
    return str(content_type or "").split(";", 1)[0].strip().lower()


def declares_delimited(filename: str | None, content_type: str | None) -> bool:
    return _extension(filename) in _DELIMITED_EXTENSIONS or _mime(content_type) in _DELIMITED_MIME_TYPES


def declares_markup(filename: str | None, content_type: str | None) -> bool:
    return _extension(filename) in _MARKUP_EXTENSIONS or _mime(content_type) in _MARKUP_MIME_TYPES


def looks_like_markup(prefix_text: str) -> bool:
    head = prefix_text.lstrip("﻿").strip()
    lowered = head.lower()
    return head.startswith("<") or "<html" in lowered or "<!doctype html" in lowered


def sniff_format(
    payload: bytes,
    filename: str | None = None,
    content_type: str | None = None,
    *,
    settings: ImportSettings | None = None,
) -> ReportFormat:
    """Pick the extraction strategy for ``payload``.

    The filename and content type are hints only: a declared CSV is trusted,
    but a declared workbook must carry the zip signature, and anything whose
    first bytes decode to markup is routed to the HTML report reader.
    """
    settings = settings or get_settings()

    if declares_delimited(filename, content_type):
        return ReportFormat.DELIMITED
    if declares_markup(filename, content_type):
        return ReportFormat.MARKUP
    if payload[:4] == ZIP_SIGNATURE:
        return ReportFormat.WORKBOOK

    prefix = decode_text(payload[: settings.sniff_bytes], settings)
    if looks_like_markup(prefix):
        logger.info("Detected HTML content in %s; switching to the HTML report reader", filename or "upload")
        return ReportFormat.MARKUP

    raise UnrecognizedContainerError(filename)


__all__ = [
    "ReportFormat",
    "ZIP_SIGNATURE",
    "declares_delimited",
    "declares_markup",
    "looks_like_markup",
    "sniff_format",
]
