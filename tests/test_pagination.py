"""
Tests for guji.pdf.pdf_pagination_flow - main-text placement state machine.
"""

import pytest
from reportlab.lib import colors

from guji.pdf.pdf_fonts import FontResolver
from guji.pdf.pdf_geometry import MultiRowLayout, MultiRowMode, build_geometry
from guji.pdf.pdf_glyphs import GlyphFactory
from guji.pdf.pdf_pagination import PageCursor, PaginationEngine
from guji.pdf.pdf_settings import BookLineStyle
from guji.pdf.pdf_types import TypesetOptions

PAD = " " * 19


def _run(engine, text, cursor=None):
    cursor = cursor or PageCursor()
    engine.process_entry(text=text, title="論語", cursor=cursor)
    return cursor


def _chars(page):
    return "".join(glyph.char for glyph in page.glyphs)


class TestPageFill:
    """Plain characters fill slots and flip pages only when needed"""

    def test_exact_capacity_stays_on_one_page(self, make_engine):
        cursor = _run(make_engine(), "甲" * 40)
        assert cursor.pages == []
        assert cursor.slot == 40
        assert len(cursor.page.glyphs) == 40
        assert cursor.page.number == 1

    def test_overflow_starts_next_page(self, make_engine):
        cursor = _run(make_engine(), "甲" * 41)
        assert len(cursor.pages) == 1
        assert len(cursor.pages[0].glyphs) == 40
        assert cursor.page.number == 2
        assert cursor.page.title == "論語"
        assert cursor.slot == 1
        assert cursor.generated_pages == 1

    def test_plain_glyph_is_centered_in_its_cell(self, make_engine):
        cursor = _run(make_engine(), "子曰")
        first, second = cursor.page.glyphs
        assert (first.x, first.y, first.font_size, first.rotation) == (290.0, 525.0, 60.0, 0.0)
        assert (second.x, second.y) == (290.0, 500.0)
        assert first.font_slot == 1
        assert first.color == colors.black

    def test_newlines_are_ignored(self, make_engine):
        cursor = _run(make_engine(), "子\n曰\r")
        assert cursor.slot == 2

    def test_test_page_limit_stops_processing(self, make_engine):
        cursor = _run(make_engine(test_pages=1), "甲" * 45)
        assert len(cursor.pages) == 1
        assert cursor.page.glyphs == []
        assert cursor.slot == 0

    def test_verbose_prints_each_glyph(self, make_engine, capsys):
        _run(make_engine(verbose=True), "子曰")
        out = capsys.readouterr().out
        assert "[page 1 slot 1] char '子'" in out
        assert "[page 1 slot 2] char '曰'" in out


class TestBreakMarkers:
    """Control characters move the slot cursor"""

    def test_page_break_after_ten_characters(self, make_engine):
        cursor = _run(make_engine(), "甲" * 10 + "%" + PAD + "乙" * 5)
        assert len(cursor.pages) == 1
        assert cursor.pages[0].number == 1
        assert _chars(cursor.pages[0]) == "甲" * 10
        assert cursor.page.number == 2
        assert _chars(cursor.page) == "乙" * 5
        assert cursor.slot == 5

    def test_page_break_on_empty_page_still_advances_number(self, make_engine):
        cursor = _run(make_engine(), "%" + PAD + "乙")
        assert cursor.pages == []
        assert cursor.page.number == 2

    def test_half_leaf_noop_at_start(self, make_engine):
        cursor = _run(make_engine(), "$" + PAD)
        assert cursor.slot == 0
        assert cursor.page.glyphs == []

    def test_half_leaf_jumps_to_middle(self, make_engine):
        cursor = _run(make_engine(), "甲" * 5 + "$" + PAD + "乙")
        assert cursor.slot == 21
        assert cursor.page.glyphs[-1].y == 525.0
        assert cursor.page.glyphs[-1].x == 90.0

    def test_half_leaf_past_middle_fills_page(self, make_engine):
        cursor = _run(make_engine(), "甲" * 25 + "$" + PAD + "乙")
        assert len(cursor.pages) == 1
        assert cursor.slot == 1

    def test_last_column_jump(self, make_engine):
        cursor = _run(make_engine(), "甲" + "&" + PAD + "乙")
        assert cursor.slot == 21

    def test_last_column_jump_at_column_boundary(self, make_engine):
        cursor = _run(make_engine(), "甲" * 20 + "&" + PAD + "乙")
        assert cursor.slot == 21
        assert (cursor.page.glyphs[-1].x, cursor.page.glyphs[-1].y) == (90.0, 525.0)

    def test_last_column_jump_one_past_start_reuses_cell(self, make_engine):
        cursor = _run(make_engine(), "甲" * 21 + "&" + PAD + "乙")
        assert cursor.slot == 21
        previous, last = cursor.page.glyphs[-2:]
        assert (previous.char, last.char) == ("甲", "乙")
        assert (last.x, last.y) == (previous.x, previous.y)

    def test_last_column_ignored_when_already_there(self, make_engine):
        cursor = _run(make_engine(), "甲" * 25 + "&" + PAD + "乙")
        assert cursor.slot == 26

    def test_band_break_is_plain_text_without_bands(self, make_engine):
        cursor = _run(make_engine(), "甲^")
        assert _chars(cursor.page) == "甲^"
        assert cursor.slot == 2

    def test_band_break_moves_to_next_band(self, book, canvas, fonts):
        grid = build_geometry(
            book=book, canvas=canvas, mode=MultiRowMode(MultiRowLayout.HORIZONTAL_LEAF, 2)
        )
        glyphs = GlyphFactory(
            book=book, grid=grid, resolver=FontResolver(fonts=fonts, mapping=book.fonts)
        )
        engine = PaginationEngine(book=book, grid=grid, glyphs=glyphs, options=TypesetOptions())
        cursor = _run(engine, "甲" * 3 + "^" + "乙")
        assert cursor.slot == 21
        assert _chars(cursor.page) == "甲甲甲乙"
        assert cursor.page.glyphs[-1].y == 275.0


class TestMarks:
    """Punctuation marks attach to neighbours or take rotated slots"""

    def test_non_slot_mark_attaches_to_previous_glyph(self, make_engine):
        cursor = _run(make_engine(), "子，曰")
        assert cursor.slot == 2
        mark = cursor.page.glyphs[1]
        assert mark.char == "，"
        assert (mark.x, mark.y, mark.font_size) == (320.0, pytest.approx(520.0), 30.0)

    def test_mark_at_page_start_uses_first_cell(self, make_engine):
        cursor = _run(make_engine(), "，")
        assert cursor.slot == 0
        assert cursor.page.glyphs[0].x == 320.0

    def test_rotated_mark_takes_a_slot(self, make_engine):
        cursor = _run(make_engine(), "「子")
        rotated, plain = cursor.page.glyphs
        assert cursor.slot == 2
        assert rotated.rotation == -90.0
        assert rotated.font_size == pytest.approx(48.0)
        assert (rotated.x, rotated.y) == (pytest.approx(240.0), pytest.approx(532.5))
        assert plain.y == 500.0

    def test_rotated_mark_on_full_page_starts_next_page(self, make_engine):
        cursor = _run(make_engine(), "甲" * 40 + "「")
        assert len(cursor.pages) == 1
        assert _chars(cursor.pages[0]) == "甲" * 40
        assert cursor.page.number == 2
        assert cursor.slot == 1
        (rotated,) = cursor.page.glyphs
        assert rotated.rotation == -90.0
        assert (rotated.x, rotated.y) == (pytest.approx(240.0), pytest.approx(532.5))

    def test_mark_after_last_slot_stays_on_page(self, make_engine):
        cursor = _run(make_engine(), "甲" * 40 + "。" + "乙")
        assert len(cursor.pages) == 1
        page = cursor.pages[0]
        assert len(page.glyphs) == 41
        assert page.glyphs[-1].char == "。"
        assert (page.glyphs[-1].x, page.glyphs[-1].y) == (120.0, pytest.approx(45.0))
        assert _chars(cursor.page) == "乙"
        assert cursor.slot == 1

    def test_period_color_override(self, book, make_engine):
        book.text_modes.only_period = True
        book.text_modes.only_period_color = colors.red
        cursor = _run(make_engine(), "子。")
        assert cursor.page.glyphs[0].color == colors.black
        assert cursor.page.glyphs[1].color == colors.red


class TestBookline:
    """Title brackets toggle a wavy underline"""

    def test_brackets_consumed_when_enabled(self, book, make_engine):
        book.book_line_flag = True
        book.bookline = BookLineStyle(width=2, color=colors.red)
        cursor = _run(make_engine(), "《論語》曰")
        assert _chars(cursor.page) == "論語曰"
        assert cursor.slot == 3
        assert len(cursor.page.lines) == 2
        line = cursor.page.lines[0]
        assert line.wavy
        assert (line.x1, line.x2) == (218.0, 218.0)
        assert (line.y1, line.y2) == (pytest.approx(517.5), pytest.approx(542.5))
        assert line.color == colors.red
        assert not cursor.bookline_active

    def test_open_bracket_state_carries_over(self, book, make_engine):
        book.book_line_flag = True
        book.bookline = BookLineStyle()
        engine = make_engine()
        cursor = _run(engine, "《論")
        assert cursor.bookline_active
        _run(engine, "語", cursor=cursor)
        assert len(cursor.page.lines) == 2

    def test_brackets_drawn_when_disabled(self, make_engine):
        cursor = _run(make_engine(), "《論語》")
        assert _chars(cursor.page) == "《論語》"
        assert cursor.page.lines == []
        assert cursor.slot == 4

    def test_space_gets_no_line(self, book, make_engine):
        book.book_line_flag = True
        book.bookline = BookLineStyle()
        cursor = _run(make_engine(), "《 論》")
        assert len(cursor.page.lines) == 1


def test_missing_glyph_uses_placeholder(book, grid):
    from conftest import FakeFonts

    resolver = FontResolver(fonts=FakeFonts(missing="龘"), mapping=book.fonts)
    glyphs = GlyphFactory(book=book, grid=grid, resolver=resolver)
    engine = PaginationEngine(book=book, grid=grid, glyphs=glyphs, options=TypesetOptions())
    cursor = _run(engine, "龘")
    assert _chars(cursor.page) == "□"
    assert cursor.slot == 1
