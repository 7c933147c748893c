"""Mutable cursor state threaded through pagination."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .pdf_constants import DEBUG_TYPESETTING
from .pdf_geometry import Cell
from .pdf_types import PagePlan


def _debug(*, msg: str) -> None:
    """Print typesetting debug output when enabled.

    Args:
        msg: Message to print.
    Returns:
        None.
    """

    if DEBUG_TYPESETTING:
        print(msg)


class AnnotationStep(Enum):
    """Outcome of packing one column of annotation text."""

    PACKED = "packed"
    NEEDS_NEW_PAGE = "needs-new-page"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class PageCursor:
    """Everything that changes while characters are placed.

    Args:
        page: Page currently being filled.
        pages: Finished pages, in order.
        slot: Last consumed slot on ``page`` (0 when none).
        generated_pages: Number of pages pushed to ``pages``.
        next_page_number: Number of ``page``.
        bookline_active: Inside a bookline bracket pair.
        last_position: Cell of the last placed glyph, for non-slot marks.
        pending_annotations: Annotation characters not yet laid out.
    """

    page: PagePlan = field(default_factory=lambda: PagePlan(number=1))
    pages: List[PagePlan] = field(default_factory=list)
    slot: int = 0
    generated_pages: int = 0
    next_page_number: int = 1
    bookline_active: bool = False
    last_position: Cell | None = None
    pending_annotations: List[str] = field(default_factory=list)

    def finalize_page(self, *, title: str) -> None:
        """Emit the current page if it has glyphs and start the next one.

        The page number advances even when the current page was empty.

        Example:
            >>> cursor = PageCursor(slot=7)
            >>> cursor.finalize_page(title="卷")
            >>> cursor.pages, cursor.slot, cursor.page.number
            ([], 0, 2)
        """

        if self.page.glyphs:
            _debug(msg=f"page {self.page.number}: {len(self.page.glyphs)} glyphs")
            self.pages.append(self.page)
            self.generated_pages += 1
        self.slot = 0
        self.next_page_number += 1
        self.page = PagePlan(number=self.next_page_number, title=title)
        self.last_position = None
