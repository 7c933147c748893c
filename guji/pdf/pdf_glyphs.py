"""Glyph and stroke construction shared by text and annotation layout."""

from __future__ import annotations

from reportlab.lib import colors

from .pdf_constants import BOOKLINE_ABOVE, BOOKLINE_BELOW, FULL_STOP, ROTATED_MARK_DEGREES
from .pdf_fonts import FontResolver
from .pdf_geometry import Cell, GeometryGrid
from .pdf_settings import BookSettings, MarkAdjust
from .pdf_types import GlyphPlacement, LinePlacement


class GlyphFactory:
    """Turns a character and a grid cell into a placed glyph.

    Args:
        book: Book settings (colors, punctuation adjustments, font stacks).
        grid: Page geometry.
        resolver: Font fallback resolver.
    """

    def __init__(self, *, book: BookSettings, grid: GeometryGrid, resolver: FontResolver) -> None:
        self.book = book
        self.grid = grid
        self.resolver = resolver

    def is_text_mark(self, char: str) -> bool:
        return char in self.book.punctuation.text_nop

    def is_text_rotated(self, char: str) -> bool:
        return char in self.book.punctuation.text_rotate

    def is_comment_mark(self, char: str) -> bool:
        return char in self.book.punctuation.comment_nop

    def is_comment_rotated(self, char: str) -> bool:
        return char in self.book.punctuation.comment_rotate

    def build(
        self,
        *,
        cell: Cell,
        char: str,
        comment: bool = False,
        mark: bool = False,
        rotated: bool = False,
    ) -> GlyphPlacement | None:
        """Return the placement for ``char`` at ``cell``.

        Args:
            cell: Grid cell (left edge of the slot, baseline y).
            char: Character to draw.
            comment: Use annotation fonts, colors and the half-width column.
            mark: Non-slot mark; scaled and offset, not centered.
            rotated: Rotated mark; scaled, offset and turned -90 degrees.
        Returns:
            GlyphPlacement, or None when no font covers even the placeholder.
        """

        fonts = self.book.fonts
        stack = fonts.comment_stack if comment else fonts.text_stack
        pick = self.resolver.resolve(char, stack)
        if pick is None:
            return None
        font_size = pick.slot.comment_size if comment else pick.slot.text_size
        width = self.grid.column_width / 2 if comment else self.grid.column_width
        x = cell.x
        y = cell.y
        color = self._color(char=pick.char, comment=comment)
        rotation = pick.slot.rotate_deg
        if not mark and not rotated:
            x += (width - font_size) / 2
        if comment:
            y += (self.grid.row_height - font_size) / 4
        if mark:
            adjust = self._adjust(comment=comment, rotated=False)
            font_size *= adjust.scale
            x += width * adjust.offset_x
            y -= self.grid.row_height * adjust.offset_y
        if rotated:
            adjust = self._adjust(comment=comment, rotated=True)
            font_size *= adjust.scale
            x += width * adjust.offset_x
            y += self.grid.row_height * adjust.offset_y
            rotation = ROTATED_MARK_DEGREES
        return GlyphPlacement(
            char=pick.char,
            font_slot=pick.slot_id,
            font_size=font_size,
            x=x,
            y=y,
            rotation=rotation,
            color=color,
        )

    def bookline(self, *, cell: Cell) -> LinePlacement | None:
        """Return the wavy stroke drawn just left of a glyph, if configured."""

        style = self.book.bookline
        if not self.book.book_line_flag or style is None:
            return None
        x = cell.x - style.width
        return LinePlacement(
            x1=x,
            y1=cell.y - self.grid.row_height * BOOKLINE_ABOVE,
            x2=x,
            y2=cell.y + self.grid.row_height * BOOKLINE_BELOW,
            width=style.width,
            color=style.color,
            wavy=True,
        )

    def _color(self, *, char: str, comment: bool) -> colors.Color:
        color = self.book.comment_font_color if comment else self.book.text_font_color
        modes = self.book.text_modes
        if modes.only_period and char == FULL_STOP and modes.only_period_color is not None:
            return modes.only_period_color
        return color

    def _adjust(self, *, comment: bool, rotated: bool) -> MarkAdjust:
        punctuation = self.book.punctuation
        if comment:
            return punctuation.comment_rotate if rotated else punctuation.comment_nop
        return punctuation.text_rotate if rotated else punctuation.text_nop
