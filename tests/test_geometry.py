"""
Tests for guji.pdf.pdf_geometry - slot grid construction.
"""

import pytest

from guji.errors import GridIndexError, LayoutConfigError
from guji.pdf.pdf_geometry import (
    ORIGIN,
    Cell,
    MultiRowLayout,
    MultiRowMode,
    _round3,
    build_geometry,
)
from guji.pdf.pdf_settings import BookSettings, CanvasSettings


def test_capacity_and_table_sizes(grid):
    assert grid.capacity == 40
    assert len(grid.main) == 41
    assert len(grid.annotation) == 41
    assert grid.main[0] == ORIGIN
    assert grid.rows_per_column == 20
    assert grid.column_width == 200
    assert grid.row_height == 25


def test_first_column_runs_top_to_bottom_from_the_right(grid):
    assert grid.main[1] == Cell(220.0, 525.0)
    assert grid.main[2] == Cell(220.0, 500.0)
    assert grid.main[20] == Cell(220.0, 50.0)
    # second column sits one column width to the left
    assert grid.main[21] == Cell(20.0, 525.0)


def test_annotation_cells_are_half_a_column_right(grid):
    for idx in (1, 17, 40):
        assert grid.annotation[idx].x == pytest.approx(grid.main[idx].x + 100)
        assert grid.annotation[idx].y == grid.main[idx].y


def test_row_delta_y_shifts_every_row(canvas):
    book = BookSettings(row_num=20, row_delta_y=3.5)
    grid = build_geometry(book=book, canvas=canvas, mode=MultiRowMode())
    assert grid.main[1].y == 528.5


def test_center_gutter_shifts_left_half(canvas):
    canvas.leaf_center_width = 40
    grid = build_geometry(book=BookSettings(row_num=20), canvas=canvas, mode=MultiRowMode())
    assert grid.column_width == 180
    assert grid.main[1].x == 240.0
    assert grid.main[21].x == 20.0


def test_main_cell_out_of_range(grid):
    assert grid.main_lookup(41) is None
    assert grid.annotation_lookup(-1) is None
    with pytest.raises(GridIndexError):
        grid.main_cell(41)


def test_zero_columns_rejected(canvas):
    canvas.leaf_col = 0
    with pytest.raises(LayoutConfigError):
        build_geometry(book=BookSettings(row_num=20), canvas=canvas, mode=MultiRowMode())


def test_zero_rows_rejected(canvas):
    with pytest.raises(LayoutConfigError):
        build_geometry(book=BookSettings(row_num=0), canvas=canvas, mode=MultiRowMode())


def test_rows_must_divide_into_bands(canvas):
    mode = MultiRowMode(MultiRowLayout.HORIZONTAL_LEAF, 3)
    with pytest.raises(LayoutConfigError):
        build_geometry(book=BookSettings(row_num=20), canvas=canvas, mode=mode)


class TestMultiRow:
    """Banded layouts stack shorter columns vertically"""

    def test_from_flags(self):
        assert MultiRowMode.from_flags(enabled=False, count=3, layout_flag=1).bands == 1
        assert MultiRowMode.from_flags(enabled=True, count=1, layout_flag=1).bands == 1
        leaf = MultiRowMode.from_flags(enabled=True, count=2, layout_flag=1)
        assert leaf.layout is MultiRowLayout.HORIZONTAL_LEAF
        assert leaf.bands == 2

    def test_leaf_banding_fills_band_before_moving_down(self, canvas):
        mode = MultiRowMode(MultiRowLayout.HORIZONTAL_LEAF, 2)
        grid = build_geometry(book=BookSettings(row_num=20), canvas=canvas, mode=mode)
        assert grid.capacity == 40
        assert grid.rows_per_column == 10
        assert grid.band_size == 20
        # slots 1-10 column 1 band 0, 11-20 column 2 band 0
        assert grid.main[11] == Cell(20.0, 525.0)
        # slot 21 is column 1, first row of band 1
        assert grid.main[21] == Cell(220.0, 275.0)

    def test_page_banding_walks_right_half_through_bands(self):
        canvas = CanvasSettings(
            canvas_width=840, canvas_height=600, margins_top=50, margins_bottom=50,
            margins_left=20, margins_right=20, leaf_col=4, leaf_center_width=0,
        )
        mode = MultiRowMode(MultiRowLayout.HORIZONTAL_PAGE, 2)
        grid = build_geometry(book=BookSettings(row_num=20), canvas=canvas, mode=mode)
        # right half: columns 1, 2 in band 0, then columns 1, 2 in band 1
        assert grid.main[1].x == grid.main[21].x == 620.0
        assert grid.main[21].y == 275.0
        # left half starts after 40 slots
        assert grid.main[41] == Cell(220.0, 525.0)


def test_round3_half_away_from_zero():
    assert _round3(2.5) == 2.5
    assert _round3(-1.23456) == -1.235
    assert _round3(float("nan")) == 0.0
