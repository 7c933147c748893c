"""PDF generation for a book directory of preprocessed chapters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from tqdm import tqdm

from ..errors import LayoutConfigError
from ..ingest import load_corpus
from ..models import TextCorpus
from ..numerals import NumeralTable
from .pdf_fonts import FontResolver, TTFontCapability
from .pdf_geometry import GeometryGrid, MultiRowMode, build_geometry
from .pdf_glyphs import GlyphFactory
from .pdf_render import DocumentRenderer
from .pdf_settings import BookSettings, CanvasSettings, load_book_settings, load_canvas_settings
from .pdf_typesetter import Typesetter
from .pdf_types import DocumentPlan, TypesetOptions

NUMERALS_FILE = "num2zh_jid.txt"
IMAGE_SUFFIXES = (".jpg", ".png")

__all__ = [
    "BuildPaths",
    "build_pdf",
    "output_name",
    "plan_document",
]


@dataclass(slots=True)
class BuildPaths:
    """Directory layout of a typesetting workspace.

    Args:
        books_dir: Holds ``<book_id>/book.json`` and ``<book_id>/text/``.
        canvas_dir: Holds ``<canvas_id>.json`` and optional background images.
        fonts_dir: Font files named by the book's font slots.
        db_dir: Holds the numeral table.
    """

    books_dir: Path = Path("books")
    canvas_dir: Path = Path("canvas")
    fonts_dir: Path = Path("fonts")
    db_dir: Path = Path("db")


@dataclass(slots=True)
class _LayoutSetup:
    """Everything derived from settings before typesetting starts."""

    book: BookSettings
    canvas: CanvasSettings
    grid: GeometryGrid
    fonts: TTFontCapability
    glyphs: GlyphFactory


def build_pdf(
    *,
    book_id: str,
    paths: BuildPaths | None = None,
    from_: int = 1,
    to: int | None = None,
    test_pages: int | None = None,
    verbose: bool = False,
    debug_plan: Path | None = None,
) -> Path:
    """Typeset chapters ``from_..to`` of a book and write the PDF.

    Args:
        book_id: Directory name under ``paths.books_dir``.
        paths: Workspace directories; defaults to ``books``, ``canvas``,
            ``fonts`` and ``db`` under the current directory.
        from_: First chapter ordinal.
        to: Last chapter ordinal; defaults to ``from_``.
        test_pages: Stop after this many pages.
        verbose: Print each placed main-text glyph.
        debug_plan: Optional path for a JSON dump of the document plan.
    Returns:
        Path of the written PDF inside the book directory.

    Example:
        >>> build_pdf(book_id="lunyu", from_=1, to=3)  # doctest: +SKIP
        PosixPath('books/lunyu/《論語》文本1至3.pdf')
    """

    resolved = paths or BuildPaths()
    last = from_ if to is None else to
    if last < from_:
        raise LayoutConfigError(f"--to ({last}) must be >= --from ({from_})")
    book_dir = resolved.books_dir / book_id
    text_dir = book_dir / "text"
    _ensure_exists(path=book_dir, label="book directory")
    _ensure_exists(path=text_dir, label="book text directory")

    setup = _prepare_layout(book_dir=book_dir, paths=resolved)
    numerals = NumeralTable.load(resolved.db_dir / NUMERALS_FILE)
    corpus = load_corpus(text_dir=text_dir, book=setup.book)
    options = TypesetOptions(
        from_=from_,
        to=last,
        test_pages=test_pages,
        verbose=verbose,
        cover_image=_first_existing(book_dir / f"cover{suffix}" for suffix in IMAGE_SUFFIXES),
    )
    plan = plan_document(
        book=setup.book, grid=setup.grid, glyphs=setup.glyphs, numerals=numerals,
        corpus=corpus, options=options,
    )
    if debug_plan is not None:
        try:
            plan.write_debug_json(debug_plan)
        except OSError as exc:
            print(f"Failed to write plan debug JSON ({debug_plan}): {exc}")
        else:
            print(f"Document plan debug JSON written to {debug_plan}")

    output_path = book_dir / output_name(title=setup.book.title, from_=from_, to=last)
    print(f"Rendering PDF to {output_path}")
    renderer = DocumentRenderer(
        book=setup.book,
        canvas_settings=setup.canvas,
        fonts=setup.fonts,
        numerals=numerals,
        background=_first_existing(
            resolved.canvas_dir / f"{setup.book.canvas_id}{suffix}" for suffix in IMAGE_SUFFIXES
        ),
    )
    renderer.render(plan=plan, output_path=output_path)
    print("Done.")
    return output_path


def plan_document(
    *,
    book: BookSettings,
    grid: GeometryGrid,
    glyphs: GlyphFactory,
    numerals: NumeralTable,
    corpus: TextCorpus,
    options: TypesetOptions,
) -> DocumentPlan:
    """Typeset the chapter range with a progress bar and validate the plan.

    Raises:
        MissingChapterError: When a chapter in the range is absent.
        PlanValidationError: When the assembled plan is inconsistent, including
            an outline for a chapter whose start page ends up empty.
    """

    total = options.to - options.from_ + 1
    progress = tqdm(total=total, desc="Typesetting chapters", unit="chapter") if total > 0 else None
    try:
        plan = Typesetter(
            book=book,
            grid=grid,
            glyphs=glyphs,
            numerals=numerals,
            corpus=corpus,
            options=options,
            progress=progress,
        ).build_plan()
    finally:
        if progress is not None:
            progress.close()
    plan.validate()
    return plan


def output_name(*, title: str, from_: int, to: int) -> str:
    """Return the PDF file name for a chapter range.

    Example:
        >>> output_name(title="論語", from_=1, to=3)
        '《論語》文本1至3.pdf'
    """

    return f"《{title}》文本{from_}至{to}.pdf"


def _prepare_layout(*, book_dir: Path, paths: BuildPaths) -> _LayoutSetup:
    """Load and validate settings, then build the grid and font resolver."""

    book_config = book_dir / "book.json"
    _ensure_exists(path=book_config, label="book configuration")
    book = load_book_settings(book_config)
    book.validate()
    canvas_config = paths.canvas_dir / f"{book.canvas_id}.json"
    _ensure_exists(path=canvas_config, label="canvas configuration")
    canvas = load_canvas_settings(canvas_config)
    canvas.validate()
    print(f"Loaded '{book.title}' by {book.author}")

    mode = MultiRowMode.from_flags(
        enabled=canvas.multirows_enabled,
        count=canvas.multirows_count,
        layout_flag=book.multirows_horizontal_layout,
    )
    grid = build_geometry(book=book, canvas=canvas, mode=mode)
    fonts = TTFontCapability(slots=book.fonts.slots, fonts_dir=paths.fonts_dir)
    resolver = FontResolver(fonts=fonts, mapping=book.fonts, variant_fallback=book.try_st)
    print(
        f"Layout: {canvas.leaf_col} columns x {book.row_num} rows "
        f"({grid.capacity} glyphs/page)"
    )
    return _LayoutSetup(
        book=book,
        canvas=canvas,
        grid=grid,
        fonts=fonts,
        glyphs=GlyphFactory(book=book, grid=grid, resolver=resolver),
    )


def _ensure_exists(*, path: Path, label: str) -> None:
    if not path.exists():
        raise LayoutConfigError(f"{label} not found: {path}")


def _first_existing(candidates: Iterable[Path]) -> Path | None:
    """Return the first candidate path that is a file."""

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None
