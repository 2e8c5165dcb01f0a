from __future__ import annotations

import logging
import os

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# pdfminer (under pdfplumber) emits one DEBUG line per PDF object.
_NOISY_LIBRARY_LOGGERS = ("pdfminer", "openpyxl")
_CONFIGURED = False


def _resolve_level(level: str | int | None) -> str | int:
    if level is not None:
        return level.strip().upper() if isinstance(level, str) else level
    raw = os.getenv("TRADE_IMPORT_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO"
    return raw.strip().upper()


def configure_logging(level: str | int | None = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    logging.basicConfig(level=_resolve_level(level), format=_DEFAULT_FORMAT)
    for name in _NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
