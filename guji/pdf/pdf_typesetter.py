"""Assembles a chapter range into a document plan."""

from __future__ import annotations

from typing import Protocol

from ..models import TextCorpus
from ..numerals import NumeralTable
from .pdf_constants import APPENDIX_POSTFIX, PREFACE_POSTFIX, TITLE_NUMBER_TOKEN
from .pdf_geometry import GeometryGrid
from .pdf_glyphs import GlyphFactory
from .pdf_pagination_flow import PaginationEngine
from .pdf_pagination_state import PageCursor, _debug
from .pdf_settings import BookSettings
from .pdf_types import CoverMode, DocumentPlan, OutlineEntry, TypesetOptions


class _ProgressTracker(Protocol):
    """Protocol for chapter progress updates."""

    def update(self, n: int | float = 1) -> object:
        """Advance the progress tracker by ``n``."""


class Typesetter:
    """Runs the pagination engine over ``options.from_..options.to``.

    Each chapter starts on a fresh page once the current page holds glyphs,
    and contributes one outline entry pointing at its first page. Cursor state,
    including the bookline flag, carries across chapters.

    Args:
        book: Book settings.
        grid: Page geometry.
        glyphs: Glyph factory (fonts and punctuation adjustments).
        numerals: Numeral table for chapter titles.
        corpus: Preprocessed chapters.
        options: Run options.
        progress: Optional tracker advanced once per chapter.
    """

    def __init__(
        self,
        *,
        book: BookSettings,
        grid: GeometryGrid,
        glyphs: GlyphFactory,
        numerals: NumeralTable,
        corpus: TextCorpus,
        options: TypesetOptions,
        progress: _ProgressTracker | None = None,
    ) -> None:
        self.book = book
        self.grid = grid
        self.numerals = numerals
        self.corpus = corpus
        self.options = options
        self.progress = progress
        self.engine = PaginationEngine(book=book, grid=grid, glyphs=glyphs, options=options)

    def build_plan(self) -> DocumentPlan:
        """Return the document plan for the configured chapter range.

        Outline entries record the page number current when each chapter
        starts. A chapter that opens with ``%`` or an empty final chapter
        therefore points at a page that is never emitted, and
        ``DocumentPlan.validate`` rejects the plan.

        Raises:
            MissingChapterError: When an ordinal in the range has no chapter.
        """

        if self.options.cover_image is not None:
            plan = DocumentPlan(cover=CoverMode.IMAGE, cover_path=self.options.cover_image)
        else:
            plan = DocumentPlan(cover=CoverMode.GENERATED)
        cursor = PageCursor()
        for ordinal in range(self.options.from_, self.options.to + 1):
            entry = self.corpus.entry(ordinal)
            title = self.compute_title(ordinal)
            if cursor.page.glyphs:
                cursor.finalize_page(title=title)
                if self.options.reached_limit(cursor.generated_pages):
                    break
            else:
                cursor.page.title = title
            plan.outlines.append(OutlineEntry(title=title, page_number=cursor.next_page_number))
            _debug(msg=f"chapter {entry.name} starts on page {cursor.next_page_number}")
            self.engine.process_entry(text=entry.data, title=title, cursor=cursor)
            if self.progress is not None:
                self.progress.update(1)
            if self.options.reached_limit(cursor.generated_pages):
                break
        if cursor.page.glyphs and not self.options.reached_limit(cursor.generated_pages):
            cursor.pages.append(cursor.page)
        plan.pages = cursor.pages
        return plan

    def compute_title(self, ordinal: int) -> str:
        """Return the running title for a chapter.

        The book title is followed by the configured postfix. With a prologue
        present, chapter numbers count from the file after it; chapter 0 is
        the preface, the highest ordinal of a book with an appendix is the
        appendix, and otherwise ``X`` in the postfix becomes the numeral.

        Example:
            >>> from guji.models import TextEntry
            >>> from guji.pdf.pdf_settings import TitleStyle
            >>> corpus = TextCorpus(
            ...     {n: TextEntry(f"{n:03}.txt", n, "") for n in (0, 1, 2, 999)},
            ...     has_prologue=True,
            ...     has_appendix=True,
            ... )
            >>> book = BookSettings(title="論語", title_style=TitleStyle(postfix="卷X"))
            >>> setter = Typesetter.__new__(Typesetter)
            >>> setter.book, setter.corpus, setter.numerals = book, corpus, NumeralTable()
            >>> [setter.compute_title(n) for n in (0, 1, 3, 999)]
            ['論語序', '論語序', '論語卷二', '論語附']
        """

        title = self.book.title
        postfix = self.book.title_style.postfix
        if postfix is None:
            return title
        chapter = ordinal
        if self.corpus.has_prologue:
            chapter = max(chapter - 1, 0)
        if chapter == 0:
            postfix = PREFACE_POSTFIX
        elif self.corpus.has_appendix and ordinal == self.corpus.highest_ordinal():
            postfix = APPENDIX_POSTFIX
        elif TITLE_NUMBER_TOKEN in postfix:
            postfix = postfix.replace(TITLE_NUMBER_TOKEN, self.numerals.render(chapter))
        return title + postfix
