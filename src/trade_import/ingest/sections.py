from __future__ import annotations

from dataclasses import dataclass

from trade_import.ingest.errors import MissingHeaderRowError, MissingSectionError
from trade_import.ingest.grid import RawGrid, first_cell_text
from trade_import.utils.logging import get_logger

logger = get_logger(__name__)

POSITIONS_SECTION_LABELS = frozenset({"positions", "posições"})
FOLLOWING_SECTION_LABELS = frozenset({"orders", "ordens", "deals", "ofertas"})


def _label_key(text: str) -> str:
    return text.strip().rstrip(":").strip().lower()


def is_positions_label(text: str) -> bool:
    return _label_key(text) in POSITIONS_SECTION_LABELS


def is_following_section_label(text: str) -> bool:
    return _label_key(text) in FOLLOWING_SECTION_LABELS


@dataclass(frozen=True)
class SectionWindow:
    label_index: int
    header_index: int
    data_start: int
    data_end: int

    @property
    def data_indices(self) -> range:
        return range(self.data_start, self.data_end)


def locate_positions_section(grid: RawGrid) -> SectionWindow:
    """Find the Positions block of a sheet-shaped report.

    The header is the row right after the label; data runs until the next
    section label in the first cell or the end of the grid.
    """
    label_index = next(
        (index for index, row in enumerate(grid.rows) if is_positions_label(first_cell_text(row))),
        None,
    )
    if label_index is None:
        raise MissingSectionError()

    header_index = label_index + 1
    if header_index >= len(grid.rows):
        raise MissingHeaderRowError(label_index)

    data_end = len(grid.rows)
    for index in range(header_index + 1, len(grid.rows)):
        if is_following_section_label(first_cell_text(grid.rows[index])):
            data_end = index
            break

    logger.debug(
        "Positions section: label row %d, header row %d, data rows %d-%d",
        label_index,
        header_index,
        header_index + 1,
        data_end,
    )
    return SectionWindow(
        label_index=label_index,
        header_index=header_index,
        data_start=header_index + 1,
        data_end=data_end,
    )


def _row_labels(grid: RawGrid, index: int) -> tuple[str, ...]:
    labels = grid.banners.get(index, ())
    row = grid.rows[index]
    if len(row) == 1:
        labels = (*labels, first_cell_text(row))
    return labels


def markup_positions_rows(grid: RawGrid) -> list[int]:
    """Indices of rows that sit inside a Positions banner in an HTML report.

    A Positions banner sets the section flag, an Orders/Deals banner clears
    it; rows outside the flag are ignored.
    """
    in_positions = False
    seen_positions = False
    selected: list[int] = []

    for index in range(len(grid.rows)):
        labels = _row_labels(grid, index)
        if any(is_positions_label(label) for label in labels):
            in_positions = True
            seen_positions = True
            continue
        if any(is_following_section_label(label) for label in labels):
            in_positions = False
            continue
        if in_positions:
            selected.append(index)

    if not seen_positions:
        raise MissingSectionError()
    return selected


__all__ = [
    "FOLLOWING_SECTION_LABELS",
    "POSITIONS_SECTION_LABELS",
    "SectionWindow",
    "is_following_section_label",
    "is_positions_label",
    "locate_positions_section",
    "markup_positions_rows",
]
