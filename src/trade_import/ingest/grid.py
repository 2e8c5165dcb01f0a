from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

Cell = Union[str, int, float, None]
RawTradeData = dict[str, Union[str, int, float]]


@dataclass(frozen=True)
class RawGrid:
    """Rows of untyped cells in source order.

    ``banners`` maps a row index to the bold labels found in that row; only
    the HTML report reader fills it, since those reports mark sections with
    bold banner rows inside the same table as the data.
    """

    rows: list[list[Cell]]
    banners: dict[int, tuple[str, ...]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ImportResult:
    rows: list[RawTradeData]
    total_net_profit: float | None = None
    source_format: str = ""

    def __len__(self) -> int:
        return len(self.rows)


def cell_text(value: Cell) -> str:
    if value is None:
        return ""
    return str(value).strip()


def first_cell_text(row: list[Cell]) -> str:
    if not row:
        return ""
    return cell_text(row[0])


__all__ = ["Cell", "ImportResult", "RawGrid", "RawTradeData", "cell_text", "first_cell_text"]
