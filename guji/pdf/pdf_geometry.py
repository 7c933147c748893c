"""Slot grid geometry for woodblock-style pages."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from ..errors import GridIndexError, LayoutConfigError
from .pdf_settings import BookSettings, CanvasSettings


class MultiRowLayout(Enum):
    DISABLED = "disabled"
    HORIZONTAL_LEAF = "leaf"
    HORIZONTAL_PAGE = "page"


@dataclass(frozen=True, slots=True)
class MultiRowMode:
    """How several leaves' worth of columns are stacked on one page.

    Example:
        >>> MultiRowMode.from_flags(enabled=True, count=2, layout_flag=2).layout
        <MultiRowLayout.HORIZONTAL_PAGE: 'page'>
        >>> MultiRowMode.from_flags(enabled=True, count=1, layout_flag=2).bands
        1
    """

    layout: MultiRowLayout = MultiRowLayout.DISABLED
    rows: int = 1

    @property
    def bands(self) -> int:
        if self.layout is MultiRowLayout.DISABLED:
            return 1
        return self.rows

    @classmethod
    def from_flags(cls, *, enabled: bool, count: int, layout_flag: int) -> "MultiRowMode":
        """Return the mode selected by canvas/book flags.

        Args:
            enabled: Canvas multi-row switch.
            count: Number of bands requested by the canvas.
            layout_flag: Book selector, 2 for page-level split, otherwise leaf.
        Returns:
            MultiRowMode instance.
        """

        if not enabled or count <= 1:
            return cls()
        if layout_flag == 2:
            return cls(layout=MultiRowLayout.HORIZONTAL_PAGE, rows=count)
        return cls(layout=MultiRowLayout.HORIZONTAL_LEAF, rows=count)


@dataclass(frozen=True, slots=True)
class Cell:
    x: float
    y: float


ORIGIN = Cell(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class GeometryGrid:
    """Precomputed slot positions for one page.

    ``main`` holds the left edge of each full-width slot, ``annotation`` the
    right half of the same slot. Both tables are 1-indexed; index 0 is the
    origin.
    """

    capacity: int
    main: Sequence[Cell]
    annotation: Sequence[Cell]
    column_width: float
    row_height: float
    canvas_width: float
    canvas_height: float
    margins_top: float
    margins_bottom: float
    rows_per_column: int
    columns: int
    bands: int

    @property
    def band_size(self) -> int:
        return self.columns * self.rows_per_column

    def main_cell(self, idx: int) -> Cell:
        """Return the main-text position for a slot.

        Raises:
            GridIndexError: When ``idx`` falls outside ``0..capacity``.
        """

        cell = self.main_lookup(idx)
        if cell is None:
            raise GridIndexError(f"layout index {idx} out of range")
        return cell

    def main_lookup(self, idx: int) -> Cell | None:
        if 0 <= idx < len(self.main):
            return self.main[idx]
        return None

    def annotation_lookup(self, idx: int) -> Cell | None:
        if 0 <= idx < len(self.annotation):
            return self.annotation[idx]
        return None


def _round3(value: float) -> float:
    """Round half away from zero to three decimals; NaN becomes 0.

    Example:
        >>> _round3(1.23456), _round3(-2.0004), _round3(float("nan"))
        (1.235, -2.0, 0.0)
    """

    if math.isnan(value):
        return 0.0
    return math.copysign(math.floor(abs(value) * 1000 + 0.5), value) / 1000


def build_geometry(
    *, book: BookSettings, canvas: CanvasSettings, mode: MultiRowMode
) -> GeometryGrid:
    """Build the slot grid for a book on a canvas.

    Args:
        book: Book settings (rows per leaf and vertical nudge).
        canvas: Canvas geometry.
        mode: Multi-row banding mode.
    Returns:
        GeometryGrid with ``capacity + 1`` entries in each table.
    Raises:
        LayoutConfigError: Zero columns/rows or rows not divisible by bands.

    Example:
        >>> grid = build_geometry(
        ...     book=BookSettings(row_num=20),
        ...     canvas=CanvasSettings(canvas_width=440, canvas_height=600, margins_top=50,
        ...                           margins_bottom=50, margins_left=20, margins_right=20,
        ...                           leaf_col=2, leaf_center_width=0),
        ...     mode=MultiRowMode(),
        ... )
        >>> grid.capacity, len(grid.main), grid.main[1]
        (40, 41, Cell(x=220.0, y=525.0))
    """

    columns = canvas.leaf_col
    row_num = book.row_num
    if columns == 0 or row_num == 0:
        raise LayoutConfigError("canvas columns/row_num must be > 0")
    bands = mode.bands
    if bands == 0 or row_num % bands != 0:
        raise LayoutConfigError(f"row_num {row_num} not divisible by multirows {bands}")
    column_width = (
        canvas.canvas_width
        - canvas.margins_left
        - canvas.margins_right
        - canvas.leaf_center_width
    ) / columns
    row_height = (canvas.canvas_height - canvas.margins_top - canvas.margins_bottom) / row_num
    rows_per_column = row_num // bands

    main: List[Cell] = [ORIGIN]
    annotation: List[Cell] = [ORIGIN]
    for band, column in _column_order(mode=mode, columns=columns):
        base_x = _column_x(canvas=canvas, column=column, column_width=column_width)
        band_offset = rows_per_column * band * row_height
        for row in range(1, rows_per_column + 1):
            y = (
                canvas.canvas_height
                - canvas.margins_top
                - band_offset
                - row_height * row
                + book.row_delta_y
            )
            cell = Cell(_round3(base_x), _round3(y))
            main.append(cell)
            annotation.append(Cell(cell.x + column_width / 2, cell.y))

    return GeometryGrid(
        capacity=columns * row_num,
        main=tuple(main),
        annotation=tuple(annotation),
        column_width=column_width,
        row_height=row_height,
        canvas_width=canvas.canvas_width,
        canvas_height=canvas.canvas_height,
        margins_top=canvas.margins_top,
        margins_bottom=canvas.margins_bottom,
        rows_per_column=rows_per_column,
        columns=columns,
        bands=bands,
    )


def _column_order(*, mode: MultiRowMode, columns: int) -> List[tuple[int, int]]:
    """Return (band, column) pairs in slot order.

    Leaf banding walks every column of one band before the next band. Page
    banding walks the right half of the page through all bands, then the left
    half through all bands.

    Example:
        >>> _column_order(mode=MultiRowMode(MultiRowLayout.HORIZONTAL_PAGE, 2), columns=2)
        [(0, 1), (1, 1), (0, 2), (1, 2)]
    """

    bands = mode.bands
    if mode.layout is MultiRowLayout.HORIZONTAL_PAGE:
        half = columns // 2
        right = [(band, column) for band in range(bands) for column in range(1, half + 1)]
        left = [
            (band, column) for band in range(bands) for column in range(half + 1, columns + 1)
        ]
        return right + left
    return [(band, column) for band in range(bands) for column in range(1, columns + 1)]


def _column_x(*, canvas: CanvasSettings, column: int, column_width: float) -> float:
    """Return the left x of a 1-based column counted from the right margin."""

    x = canvas.canvas_width - canvas.margins_right - column_width * column
    if column > canvas.leaf_col / 2:
        x -= canvas.leaf_center_width
    return x
