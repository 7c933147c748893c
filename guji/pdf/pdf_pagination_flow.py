"""Character-by-character placement of one chapter onto grid pages."""

from __future__ import annotations

from typing import List

from .pdf_annotations import AnnotationLayout
from .pdf_constants import (
    ANNOTATION_CLOSE,
    ANNOTATION_OPEN,
    BAND_BREAK,
    BOOKLINE_CLOSE,
    BOOKLINE_OPEN,
    HALF_LEAF_BREAK,
    LAST_COLUMN_BREAK,
    PAGE_BREAK,
)
from .pdf_geometry import ORIGIN, Cell, GeometryGrid
from .pdf_glyphs import GlyphFactory
from .pdf_pagination_state import PageCursor, _debug
from .pdf_settings import BookSettings
from .pdf_types import TypesetOptions


class _CharStream:
    """Iterator over chapter text with one-character lookahead.

    Example:
        >>> stream = _CharStream("甲乙丙丁")
        >>> next(stream), stream.peek()
        ('甲', '乙')
        >>> stream.skip(2)
        >>> list(stream)
        ['丁']
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._idx = 0

    def __iter__(self) -> "_CharStream":
        return self

    def __next__(self) -> str:
        if self._idx >= len(self._text):
            raise StopIteration
        ch = self._text[self._idx]
        self._idx += 1
        return ch

    def peek(self) -> str | None:
        if self._idx >= len(self._text):
            return None
        return self._text[self._idx]

    def skip(self, count: int) -> None:
        self._idx = min(len(self._text), self._idx + max(count, 0))

    def take_until(self, stop: str) -> List[str]:
        """Consume characters up to and including ``stop``; return those before it."""

        taken: List[str] = []
        for ch in self:
            if ch == stop:
                break
            taken.append(ch)
        return taken


class PaginationEngine:
    """Places preprocessed chapter text into grid slots, page by page.

    Breaking markers (``%``, ``$``, ``^``, ``&``) move the cursor, ``《`` and
    ``》`` toggle the bookline underline, and ``【...】`` blocks are handed to
    ``AnnotationLayout``. Every other character is a plain glyph, a non-slot
    mark attached to the previous glyph, or a rotated mark taking its own slot.

    Args:
        book: Book settings.
        grid: Page geometry.
        glyphs: Glyph factory shared with the annotation layout.
        options: Run options (test-page cap, verbose tracing).
    """

    def __init__(
        self,
        *,
        book: BookSettings,
        grid: GeometryGrid,
        glyphs: GlyphFactory,
        options: TypesetOptions,
    ) -> None:
        self.book = book
        self.grid = grid
        self.glyphs = glyphs
        self.options = options
        self.annotations = AnnotationLayout(book=book, grid=grid, glyphs=glyphs)

    def process_entry(self, *, text: str, title: str, cursor: PageCursor) -> None:
        """Lay out one chapter, continuing from ``cursor``.

        Stops early once the test-page cap is reached.
        """

        stream = _CharStream(text)
        padding = self.book.row_num - 1
        for char in stream:
            if char in "\r\n":
                continue
            if char == PAGE_BREAK:
                stream.skip(padding)
                cursor.finalize_page(title=title)
                if self.options.reached_limit(cursor.generated_pages):
                    break
                continue
            if char == HALF_LEAF_BREAK:
                stream.skip(padding)
                self.jump_half_leaf(cursor=cursor)
                continue
            if char == BAND_BREAK and self.grid.bands > 1:
                self.jump_band(cursor=cursor)
                continue
            if char == LAST_COLUMN_BREAK:
                stream.skip(padding)
                self.jump_last_column(cursor=cursor)
                continue
            if char in (BOOKLINE_OPEN, BOOKLINE_CLOSE):
                cursor.bookline_active = char == BOOKLINE_OPEN
                if self.book.book_line_flag:
                    continue
            elif char == ANNOTATION_OPEN:
                cursor.pending_annotations.extend(stream.take_until(ANNOTATION_CLOSE))
                if cursor.pending_annotations:
                    self.annotations.layout(cursor=cursor, title=title)
                    cursor.last_position = None
                continue
            if self._place_char(char=char, stream=stream, cursor=cursor, title=title):
                break

    def jump_half_leaf(self, *, cursor: PageCursor) -> None:
        """Move to the start of the next half-leaf, or the end of the page.

        Example:
            >>> engine = PaginationEngine.__new__(PaginationEngine)
            >>> engine.grid = type("Grid", (), {"capacity": 40})()
            >>> cursor = PageCursor(slot=3)
            >>> engine.jump_half_leaf(cursor=cursor); cursor.slot
            20
            >>> engine.jump_half_leaf(cursor=cursor); cursor.slot
            20
            >>> cursor.slot = 25; engine.jump_half_leaf(cursor=cursor); cursor.slot
            40
        """

        half = self.grid.capacity // 2
        if cursor.slot in (0, half):
            return
        cursor.slot = half if cursor.slot < half else self.grid.capacity

    def jump_band(self, *, cursor: PageCursor) -> None:
        """Move to the start of the next horizontal band."""

        band = self.grid.band_size
        if band == 0:
            return
        next_start = (cursor.slot // band + 1) * band
        cursor.slot = min(next_start, self.grid.capacity)
        cursor.last_position = None

    def jump_last_column(self, *, cursor: PageCursor) -> None:
        """Move to the top of the page's last column when not already past it."""

        rows_per_column = self.grid.rows_per_column
        if rows_per_column == 0:
            return
        last_column_start = max(self.grid.capacity - rows_per_column, 0)
        if cursor.slot <= last_column_start + 1:
            cursor.slot = last_column_start

    def _place_char(
        self, *, char: str, stream: _CharStream, cursor: PageCursor, title: str
    ) -> bool:
        """Place one character; return True when the test-page cap stops the run."""

        rotated = self.glyphs.is_text_rotated(char)
        mark = not rotated and self.glyphs.is_text_mark(char)
        if not mark and cursor.slot == self.grid.capacity:
            cursor.finalize_page(title=title)
            if self.options.reached_limit(cursor.generated_pages):
                return True

        if mark:
            cell = (
                cursor.last_position
                or self.grid.main_lookup(max(cursor.slot, 1))
                or ORIGIN
            )
            self._append(cursor=cursor, cell=cell, char=char, mark=True)
            return False

        cursor.slot += 1
        cell = self.grid.main_cell(cursor.slot)
        glyph = self.glyphs.build(cell=cell, char=char, rotated=rotated)
        if glyph is not None:
            if self.options.verbose and not rotated:
                print(f"[page {cursor.page.number} slot {cursor.slot}] char '{glyph.char}'")
            cursor.page.glyphs.append(glyph)
            cursor.last_position = cell
            if cursor.bookline_active and char != " ":
                line = self.glyphs.bookline(cell=cell)
                if line is not None:
                    cursor.page.lines.append(line)
        if not rotated and cursor.slot == self.grid.capacity:
            self._attach_boundary_mark(stream=stream, cursor=cursor, cell=cell)
        return False

    def _attach_boundary_mark(self, *, stream: _CharStream, cursor: PageCursor, cell: Cell) -> None:
        """Keep a mark that follows the page's last glyph on the same page."""

        upcoming = stream.peek()
        if upcoming is None or not self.glyphs.is_text_mark(upcoming):
            return
        next(stream)
        _debug(msg=f"page {cursor.page.number}: boundary mark '{upcoming}'")
        self._append(
            cursor=cursor, cell=cursor.last_position or cell, char=upcoming, mark=True
        )

    def _append(
        self,
        *,
        cursor: PageCursor,
        cell: Cell,
        char: str,
        mark: bool = False,
    ) -> None:
        glyph = self.glyphs.build(cell=cell, char=char, mark=mark)
        if glyph is not None:
            cursor.page.glyphs.append(glyph)
