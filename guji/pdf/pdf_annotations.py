"""Interlinear annotation packing (two characters per slot)."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List

from .pdf_constants import BOOKLINE_CLOSE, BOOKLINE_OPEN
from .pdf_geometry import Cell, GeometryGrid
from .pdf_glyphs import GlyphFactory
from .pdf_pagination_state import AnnotationStep, PageCursor
from .pdf_settings import BookSettings


@dataclass(slots=True)
class _AnnotationState:
    """State that lives for one annotation block."""

    bookline_active: bool = False
    last_cell: Cell | None = None


class AnnotationLayout:
    """Packs annotation characters into the half-width sub-columns.

    Characters fill the right half of the current column top to bottom, then
    the left half, never spilling into the next column within one pass. Each
    pass is one ``AnnotationStep``; the driver in ``layout`` starts a new page
    whenever a pass reports ``NEEDS_NEW_PAGE``.
    """

    def __init__(self, *, book: BookSettings, grid: GeometryGrid, glyphs: GlyphFactory) -> None:
        self.book = book
        self.grid = grid
        self.glyphs = glyphs

    def layout(self, *, cursor: PageCursor, title: str) -> None:
        """Lay out ``cursor.pending_annotations`` starting after ``cursor.slot``.

        Anything that cannot be packed stays on ``cursor.pending_annotations``.
        """

        remaining: Deque[str] = deque(cursor.pending_annotations)
        cursor.pending_annotations.clear()
        state = _AnnotationState()
        while remaining:
            step = self._pack_column(cursor=cursor, remaining=remaining, state=state)
            if step is AnnotationStep.NEEDS_NEW_PAGE:
                cursor.finalize_page(title=title)
                state.last_cell = None
            elif step is AnnotationStep.EXHAUSTED:
                break
        cursor.pending_annotations.extend(remaining)

    def slots_needed(self, chars: Iterable[str]) -> int:
        """Return slot pairs needed for ``chars``, rounding up.

        Example:
            >>> from guji.pdf.pdf_settings import BookSettings
            >>> layout = AnnotationLayout(book=BookSettings(), grid=None, glyphs=None)
            >>> layout.slots_needed("甲乙丙")
            2
        """

        consuming = sum(1 for ch in chars if self._consumes_slot(ch))
        return (consuming + 1) // 2

    def _pack_column(
        self, *, cursor: PageCursor, remaining: Deque[str], state: _AnnotationState
    ) -> AnnotationStep:
        rows_per_column = self.grid.rows_per_column
        if cursor.slot >= self.grid.capacity:
            return AnnotationStep.NEEDS_NEW_PAGE
        row_idx = cursor.slot % rows_per_column + 1
        available = rows_per_column - row_idx + 1
        if available <= 0:
            return AnnotationStep.NEEDS_NEW_PAGE
        needed = self.slots_needed(remaining)
        if needed == 0:
            self._drain_marks(cursor=cursor, remaining=remaining, state=state)
            return AnnotationStep.EXHAUSTED
        pairs = min(available, needed)
        cells = self._column_cells(start=cursor.slot, pairs=pairs)
        if cells is None:
            return AnnotationStep.NEEDS_NEW_PAGE
        taken = self._take(remaining=remaining, count=pairs * 2)
        consumed = self._place(cursor=cursor, chars=taken, cells=cells, state=state)
        cursor.slot += (consumed + 1) // 2
        return AnnotationStep.PACKED

    def _column_cells(self, *, start: int, pairs: int) -> List[Cell] | None:
        """Return right-half cells then left-half cells for the next slots.

        Returns None when any of the slots lies beyond the page.
        """

        if start + pairs > self.grid.capacity:
            return None
        right = [self.grid.annotation_lookup(start + offset) for offset in range(1, pairs + 1)]
        left = [self.grid.main_lookup(start + offset) for offset in range(1, pairs + 1)]
        cells = right + left
        if any(cell is None for cell in cells):
            return None
        return cells

    def _take(self, *, remaining: Deque[str], count: int) -> List[str]:
        """Pop characters until ``count`` slot-consuming ones are taken."""

        taken: List[str] = []
        pending = count
        while remaining:
            ch = remaining.popleft()
            if self._consumes_slot(ch):
                pending -= 1
            taken.append(ch)
            if pending <= 0:
                break
        return taken

    def _place(
        self,
        *,
        cursor: PageCursor,
        chars: List[str],
        cells: List[Cell],
        state: _AnnotationState,
    ) -> int:
        """Draw ``chars`` into ``cells`` and return how many cells were used."""

        cell_iter = iter(cells)
        last = state.last_cell
        consumed = 0
        for ch in chars:
            if self._is_bookline_toggle(ch):
                state.bookline_active = ch == BOOKLINE_OPEN
                continue
            if self.glyphs.is_comment_mark(ch):
                if last is not None:
                    self._append(cursor=cursor, cell=last, char=ch, mark=True)
                continue
            cell = next(cell_iter)
            last = cell
            state.last_cell = cell
            consumed += 1
            self._append(
                cursor=cursor, cell=cell, char=ch, rotated=self.glyphs.is_comment_rotated(ch)
            )
            if state.bookline_active and ch != " ":
                line = self.glyphs.bookline(cell=cell)
                if line is not None:
                    cursor.page.lines.append(line)
        return consumed

    def _drain_marks(
        self, *, cursor: PageCursor, remaining: Deque[str], state: _AnnotationState
    ) -> None:
        """Attach trailing non-slot marks to the last annotation cell."""

        while remaining:
            ch = remaining.popleft()
            if self._is_bookline_toggle(ch):
                continue
            if state.last_cell is not None and self.glyphs.is_comment_mark(ch):
                self._append(cursor=cursor, cell=state.last_cell, char=ch, mark=True)

    def _append(
        self,
        *,
        cursor: PageCursor,
        cell: Cell,
        char: str,
        mark: bool = False,
        rotated: bool = False,
    ) -> None:
        glyph = self.glyphs.build(cell=cell, char=char, comment=True, mark=mark, rotated=rotated)
        if glyph is not None:
            cursor.page.glyphs.append(glyph)

    def _is_bookline_toggle(self, ch: str) -> bool:
        return self.book.book_line_flag and ch in (BOOKLINE_OPEN, BOOKLINE_CLOSE)

    def _consumes_slot(self, ch: str) -> bool:
        if self._is_bookline_toggle(ch):
            return False
        return ch not in self.book.punctuation.comment_nop
