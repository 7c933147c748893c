"""Data structures for page planning and rendering."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List

from reportlab.lib import colors

from ..errors import PlanValidationError


class CoverMode(Enum):
    IMAGE = "image"
    GENERATED = "generated"


@dataclass(slots=True)
class GlyphPlacement:
    """A single character drawn at an absolute canvas position.

    Args:
        char: Character actually drawn (after variant fallback).
        font_slot: Font slot id used to draw it.
        font_size: Size in canvas units.
        x: Baseline origin x.
        y: Baseline origin y.
        rotation: Rotation in degrees, negative for clockwise.
        color: Fill color.
    """

    char: str
    font_slot: int
    font_size: float
    x: float
    y: float
    rotation: float
    color: colors.Color


@dataclass(slots=True)
class LinePlacement:
    """A straight or wavy stroke, used for bookline underlines."""

    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    color: colors.Color
    wavy: bool = False


@dataclass(slots=True)
class PagePlan:
    """Placements for one output page.

    Args:
        number: 1-based page number, increasing across the document.
        title: Running title shown in the center gutter.
    """

    number: int
    title: str = ""
    glyphs: List[GlyphPlacement] = field(default_factory=list)
    lines: List[LinePlacement] = field(default_factory=list)


@dataclass(slots=True)
class OutlineEntry:
    title: str
    page_number: int


@dataclass(slots=True)
class TypesetOptions:
    """Run options for one compilation.

    Args:
        from_: First chapter ordinal (inclusive).
        to: Last chapter ordinal (inclusive).
        test_pages: Stop once this many pages have been emitted.
        verbose: Print every placed main-text glyph.
        cover_image: Optional cover image path; selects an image cover.
    """

    from_: int = 1
    to: int = 1
    test_pages: int | None = None
    verbose: bool = False
    cover_image: Path | None = None

    def reached_limit(self, generated_pages: int) -> bool:
        """Return True once the test-page cap has been reached.

        Example:
            >>> TypesetOptions(test_pages=2).reached_limit(2), TypesetOptions().reached_limit(99)
            (True, False)
        """

        return self.test_pages is not None and generated_pages >= self.test_pages


@dataclass(slots=True)
class DocumentPlan:
    """Ordered pages and outline entries handed to the renderer."""

    cover: CoverMode
    cover_path: Path | None = None
    pages: List[PagePlan] = field(default_factory=list)
    outlines: List[OutlineEntry] = field(default_factory=list)

    def validate(self) -> None:
        """Check page numbering and outline references.

        Raises:
            PlanValidationError: On an image cover without a path, a zero or
                non-increasing page number, or an outline pointing at a page
                that was never emitted.

        Example:
            >>> DocumentPlan(CoverMode.GENERATED, pages=[PagePlan(2), PagePlan(1)]).validate()
            Traceback (most recent call last):
            ...
            guji.errors.PlanValidationError: page numbers must be strictly increasing (2 -> 1)
        """

        if self.cover is CoverMode.IMAGE and self.cover_path is None:
            raise PlanValidationError("cover plan requests an image but no cover_path was recorded")
        last_page = 0
        seen_pages = set()
        for page in self.pages:
            if page.number == 0:
                raise PlanValidationError("page number cannot be 0")
            if page.number <= last_page:
                raise PlanValidationError(
                    f"page numbers must be strictly increasing ({last_page} -> {page.number})"
                )
            last_page = page.number
            seen_pages.add(page.number)
        for outline in self.outlines:
            if outline.page_number not in seen_pages:
                raise PlanValidationError(
                    f"outline '{outline.title}' references missing page {outline.page_number}"
                )

    def to_json(self) -> str:
        """Return the plan as pretty-printed JSON for debugging."""

        data = asdict(self)
        if data["cover_path"] is None:
            data.pop("cover_path")
        return json.dumps(data, ensure_ascii=False, indent=2, default=_json_default)

    def write_debug_json(self, path: Path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")


def color_hex(color: colors.Color) -> str:
    """Return ``#rrggbb`` for a reportlab color.

    Example:
        >>> color_hex(colors.red)
        '#ff0000'
    """

    return "#" + color.hexval()[2:]


def _json_default(value: Any) -> Any:
    if isinstance(value, colors.Color):
        return color_hex(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
