"""Draws a document plan onto a reportlab canvas."""

from __future__ import annotations

import math
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Protocol

from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas

from ..numerals import NumeralTable
from .pdf_settings import BookSettings, CanvasSettings
from .pdf_types import CoverMode, DocumentPlan, GlyphPlacement, LinePlacement, PagePlan

COVER_LINE_SPACING = 1.2
WAVE_MIN_SPAN = 20.0
WAVE_SEGMENT = 12.0
WAVE_AMPLITUDE = 0.05


class FontNames(Protocol):
    """Maps font slot ids to names registered with ``pdfmetrics``."""

    def font_name(self, slot_id: int) -> str | None:
        """Return the registered font name for ``slot_id``."""


class DocumentRenderer:
    """Writes a ``DocumentPlan`` to PDF, one canvas unit per point.

    Args:
        book: Book settings (title styles, colors, metadata).
        canvas_settings: Page size and creator text.
        fonts: Registered font names per slot.
        numerals: Numeral table for page numbers.
        background: Optional image drawn under every page.
    """

    def __init__(
        self,
        *,
        book: BookSettings,
        canvas_settings: CanvasSettings,
        fonts: FontNames,
        numerals: NumeralTable,
        background: Path | None = None,
    ) -> None:
        self.book = book
        self.canvas_settings = canvas_settings
        self.fonts = fonts
        self.numerals = numerals
        self.background = background

    def render(self, *, plan: DocumentPlan, output_path: Path) -> None:
        """Render the cover and every planned page to ``output_path``."""

        size = (self.canvas_settings.canvas_width, self.canvas_settings.canvas_height)
        c = pdf_canvas.Canvas(str(output_path), pagesize=size)
        c.setTitle(self.book.title)
        c.setAuthor(self.book.author)
        if self.canvas_settings.logo_text:
            c.setCreator(self.canvas_settings.logo_text)
        self._draw_cover(c, plan=plan)
        c.showPage()
        outlines = self._outline_map(plan=plan)
        for page in plan.pages:
            self._draw_page(c, page=page)
            for idx, title in enumerate(outlines.get(page.number, [])):
                key = f"page-{page.number}-{idx}"
                c.bookmarkPage(key)
                c.addOutlineEntry(title, key, level=0)
            c.showPage()
        c.save()

    def _outline_map(self, *, plan: DocumentPlan) -> Dict[int, List[str]]:
        if not self.book.title_style.directory:
            return {}
        mapping: Dict[int, List[str]] = defaultdict(list)
        for outline in plan.outlines:
            mapping[outline.page_number].append(outline.title)
        return mapping

    def _draw_cover(self, c: pdf_canvas.Canvas, *, plan: DocumentPlan) -> None:
        if plan.cover is CoverMode.IMAGE:
            if plan.cover_path is not None and Path(plan.cover_path).is_file():
                self._draw_full_page_image(c, path=Path(plan.cover_path))
                return
            print(f"Cover image requested ({plan.cover_path}) but not found; using generated cover")
        self._draw_background(c)
        font = self._title_font()
        if font is None:
            return
        cover = self.book.cover
        height = self.canvas_settings.canvas_height
        for idx, char in enumerate(self.book.title):
            y = height - cover.title_y - idx * cover.title_font_size * COVER_LINE_SPACING
            self._draw_text(c, font=font, size=cover.title_font_size, color=cover.color,
                            x=cover.title_font_size, y=y, text=char)
        for idx, char in enumerate(self.book.author):
            y = height - cover.author_y - idx * cover.author_font_size * COVER_LINE_SPACING
            self._draw_text(c, font=font, size=cover.author_font_size, color=cover.color,
                            x=cover.author_font_size / 2, y=y, text=char)

    def _draw_page(self, c: pdf_canvas.Canvas, *, page: PagePlan) -> None:
        self._draw_background(c)
        self._draw_title(c, title=page.title)
        self._draw_page_number(c, number=page.number)
        for line in page.lines:
            self._draw_line(c, line=line)
        for glyph in page.glyphs:
            self._draw_glyph(c, glyph=glyph)

    def _draw_background(self, c: pdf_canvas.Canvas) -> None:
        if self.background is not None and Path(self.background).is_file():
            self._draw_full_page_image(c, path=Path(self.background))

    def _draw_full_page_image(self, c: pdf_canvas.Canvas, *, path: Path) -> None:
        c.drawImage(
            str(path),
            0,
            0,
            width=self.canvas_settings.canvas_width,
            height=self.canvas_settings.canvas_height,
        )

    def _draw_title(self, c: pdf_canvas.Canvas, *, title: str) -> None:
        font = self._title_font()
        if font is None:
            return
        style = self.book.title_style
        x = self.canvas_settings.canvas_width / 2 - style.font_size / 2 if style.center else 0.0
        for idx, char in enumerate(title):
            y = style.y - style.font_size * idx * style.y_dis
            self._draw_text(c, font=font, size=style.font_size, color=style.color, x=x, y=y, text=char)

    def _draw_page_number(self, c: pdf_canvas.Canvas, *, number: int) -> None:
        font = self._title_font()
        if font is None:
            return
        pager = self.book.pager_style
        x = self.canvas_settings.canvas_width / 2 - pager.font_size / 2
        for idx, char in enumerate(self.numerals.render(number)):
            y = pager.y - pager.font_size * idx * self.book.title_style.y_dis
            self._draw_text(c, font=font, size=pager.font_size, color=pager.color, x=x, y=y, text=char)

    def _draw_line(self, c: pdf_canvas.Canvas, *, line: LinePlacement) -> None:
        c.saveState()
        c.setStrokeColor(line.color)
        c.setLineWidth(line.width)
        if line.wavy:
            path = c.beginPath()
            points = wave_points(line)
            path.moveTo(*points[0])
            for point in points[1:]:
                path.lineTo(*point)
            c.drawPath(path, stroke=1, fill=0)
        else:
            c.line(line.x1, line.y1, line.x2, line.y2)
        c.restoreState()

    def _draw_glyph(self, c: pdf_canvas.Canvas, *, glyph: GlyphPlacement) -> None:
        font = self.fonts.font_name(glyph.font_slot)
        if font is None:
            return
        self._draw_text(
            c,
            font=font,
            size=glyph.font_size,
            color=glyph.color,
            x=glyph.x,
            y=glyph.y,
            text=glyph.char,
            rotation=glyph.rotation,
        )

    def _draw_text(
        self,
        c: pdf_canvas.Canvas,
        *,
        font: str,
        size: float,
        color: colors.Color,
        x: float,
        y: float,
        text: str,
        rotation: float = 0.0,
    ) -> None:
        c.setFont(font, size)
        c.setFillColor(color)
        if abs(rotation) > 1e-6:
            c.saveState()
            c.translate(x, y)
            c.rotate(rotation)
            c.drawString(0, 0, text)
            c.restoreState()
        else:
            c.drawString(x, y, text)

    def _title_font(self) -> str | None:
        stack = self.book.fonts.text_stack
        if not stack:
            return None
        return self.fonts.font_name(stack[0])


def wave_points(line: LinePlacement) -> List[tuple[float, float]]:
    """Sample a sine wave running from ``(x1, y1)`` to ``(x2, y2)``.

    Example:
        >>> from reportlab.lib import colors
        >>> points = wave_points(LinePlacement(0, 0, 0, 24, 1, colors.black, wavy=True))
        >>> len(points), points[0], points[-1][1]
        (3, (0.0, 0.0), 24.0)
    """

    span = abs(line.y2 - line.y1)
    segments = max(1, math.ceil(max(span, WAVE_MIN_SPAN) / WAVE_SEGMENT))
    amplitude = max(span, 1.0) * WAVE_AMPLITUDE
    wavelength = max(span, 1.0) / segments
    points: List[tuple[float, float]] = []
    for idx in range(segments + 1):
        t = idx / segments
        y = line.y1 + (line.y2 - line.y1) * t
        wave = amplitude * math.sin(2 * math.pi * (y - line.y1) / wavelength)
        points.append((line.x1 + wave, float(y)))
    return points
