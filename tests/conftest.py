from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the project root importable when pytest runs from its entrypoint.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from guji.pdf.pdf_fonts import FontResolver
from guji.pdf.pdf_geometry import MultiRowMode, build_geometry
from guji.pdf.pdf_glyphs import GlyphFactory
from guji.pdf.pdf_pagination_flow import PaginationEngine
from guji.pdf.pdf_settings import (
    BookSettings,
    CanvasSettings,
    FontMapping,
    FontSlot,
    MarkAdjust,
    PunctuationSettings,
)
from guji.pdf.pdf_types import TypesetOptions


class FakeFonts:
    """Font capability that covers everything except ``missing`` characters."""

    def __init__(self, missing: str = "", per_slot: dict[int, str] | None = None) -> None:
        self.missing = missing
        self.per_slot = per_slot or {}

    def has_glyph(self, slot_id: int, char: str) -> bool:
        if char in self.missing:
            return False
        if slot_id in self.per_slot:
            return char in self.per_slot[slot_id]
        return True

    def font_name(self, slot_id: int) -> str | None:
        return "Helvetica"


@pytest.fixture
def canvas() -> CanvasSettings:
    """Two columns of 200 units, rows of 25 units at ``row_num=20``."""

    return CanvasSettings(
        canvas_width=440,
        canvas_height=600,
        margins_top=50,
        margins_bottom=50,
        margins_left=20,
        margins_right=20,
        leaf_col=2,
        leaf_center_width=0,
    )


@pytest.fixture
def book() -> BookSettings:
    return BookSettings(
        title="論語",
        author="孔子",
        row_num=20,
        fonts=FontMapping(
            slots={1: FontSlot(id=1, name="main.ttf"), 2: FontSlot(id=2, name="ext.ttf")},
            text_stack=[1, 2],
            comment_stack=[1, 2],
        ),
        punctuation=PunctuationSettings(
            text_nop=MarkAdjust(chars="，。", scale=0.5, offset_x=0.5, offset_y=0.2),
            text_rotate=MarkAdjust(chars="「」", scale=0.8, offset_x=0.1, offset_y=0.3),
            comment_nop=MarkAdjust(chars="，。", scale=0.5, offset_x=0.4, offset_y=0.1),
            comment_rotate=MarkAdjust(chars="「」", scale=0.8),
            comment_strip_chars="，。",
        ),
    )


@pytest.fixture
def fonts() -> FakeFonts:
    return FakeFonts()


@pytest.fixture
def grid(book, canvas):
    return build_geometry(book=book, canvas=canvas, mode=MultiRowMode())


@pytest.fixture
def glyphs(book, grid, fonts) -> GlyphFactory:
    resolver = FontResolver(fonts=fonts, mapping=book.fonts)
    return GlyphFactory(book=book, grid=grid, resolver=resolver)


@pytest.fixture
def make_engine(book, grid, glyphs):
    """Return a factory building engines with custom run options."""

    def factory(**options) -> PaginationEngine:
        return PaginationEngine(
            book=book, grid=grid, glyphs=glyphs, options=TypesetOptions(**options)
        )

    return factory
