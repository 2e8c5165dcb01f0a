from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Callable

from trade_import.config.settings import ImportSettings, get_settings
from trade_import.ingest.errors import ReportDecodeError
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DecodedText:
    text: str
    encoding: str


# Each step returns None when it does not apply to the payload.
DecodeStep = Callable[[bytes, ImportSettings], DecodedText | None]


def _utf16le_bom(payload: bytes, _settings: ImportSettings) -> DecodedText | None:
    if not payload.startswith(codecs.BOM_UTF16_LE):
        return None
    body = payload[len(codecs.BOM_UTF16_LE):]
    return DecodedText(text=body.decode("utf-16-le", errors="replace"), encoding="utf-16-le")


def _utf16be_bom(payload: bytes, _settings: ImportSettings) -> DecodedText | None:
    if not payload.startswith(codecs.BOM_UTF16_BE):
        return None
    body = payload[len(codecs.BOM_UTF16_BE):]
    return DecodedText(text=body.decode("utf-16-be", errors="replace"), encoding="utf-16-be")


def _strict_utf8(payload: bytes, _settings: ImportSettings) -> DecodedText | None:
    try:
        return DecodedText(text=payload.decode("utf-8-sig"), encoding="utf-8")
    except UnicodeDecodeError:
        return None


def _legacy_single_byte(payload: bytes, settings: ImportSettings) -> DecodedText | None:
    try:
        text = payload.decode(settings.legacy_encoding)
    except UnicodeDecodeError:
        # cp1252 leaves five byte values undefined; latin-1 maps every byte.
        text = payload.decode("latin-1")
        return DecodedText(text=text, encoding="latin-1")
    except LookupError as exc:
        raise ReportDecodeError(
            f"Unknown legacy encoding '{settings.legacy_encoding}'."
        ) from exc
    return DecodedText(text=text, encoding=settings.legacy_encoding)


DECODE_STEPS: tuple[DecodeStep, ...] = (
    _utf16le_bom,
    _utf16be_bom,
    _strict_utf8,
    _legacy_single_byte,
)


def decode_payload(payload: bytes, settings: ImportSettings | None = None) -> DecodedText:
    settings = settings or get_settings()
    for step in DECODE_STEPS:
        decoded = step(payload, settings)
        if decoded is None:
            continue
        if step is _legacy_single_byte:
            logger.warning("Payload is not valid UTF-8; decoded as %s", decoded.encoding)
        return decoded
    raise ReportDecodeError("The file could not be decoded as text.")


def decode_text(payload: bytes, settings: ImportSettings | None = None) -> str:
    return decode_payload(payload, settings).text


__all__ = ["DECODE_STEPS", "DecodedText", "decode_payload", "decode_text"]
