"""
Typeset a range of chapters from ``books/<book_id>/text/`` into a PDF.
"""

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from guji.errors import TypesettingError
from guji.pdf.builder import BuildPaths, build_pdf


def _parse_args(argv=None) -> argparse.Namespace:
    """Return CLI arguments for the build script."""

    parser = argparse.ArgumentParser(
        description="Typeset classical Chinese text onto a woodblock-style grid."
    )
    parser.add_argument(
        "-b",
        "--book",
        required=True,
        metavar="BOOK_ID",
        help="Book identifier (maps to <books-dir>/<BOOK_ID>/).",
    )
    parser.add_argument(
        "-f",
        "--from",
        dest="from_",
        type=int,
        default=1,
        metavar="START",
        help="First chapter ordinal (matches NNN.txt).",
    )
    parser.add_argument(
        "-t",
        "--to",
        type=int,
        default=None,
        metavar="END",
        help="Last chapter ordinal, inclusive. Defaults to START.",
    )
    parser.add_argument(
        "-z",
        "--test-pages",
        type=int,
        default=None,
        metavar="NUM",
        help="Stop after NUM pages, for quick inspection.",
    )
    parser.add_argument("--books-dir", type=Path, default=Path("books"))
    parser.add_argument("--canvas-dir", type=Path, default=Path("canvas"))
    parser.add_argument("--fonts-dir", type=Path, default=Path("fonts"))
    parser.add_argument(
        "--db-dir",
        type=Path,
        default=Path("db"),
        help="Directory containing num2zh_jid.txt.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print every placed main-text glyph.",
    )
    parser.add_argument(
        "--debug-plan",
        type=Path,
        default=None,
        metavar="JSON_PATH",
        help="Write the computed document plan as JSON.",
    )
    args = parser.parse_args(argv)
    if args.to is not None and args.to < args.from_:
        parser.error("--to must be >= --from")
    return args


def main(argv=None) -> int:
    """Build the PDF and return a process exit code.

    Example:
        >>> main(["--book", "lunyu", "--from", "1", "--to", "3"])  # doctest: +SKIP
        0
    """

    args = _parse_args(argv)
    paths = BuildPaths(
        books_dir=args.books_dir,
        canvas_dir=args.canvas_dir,
        fonts_dir=args.fonts_dir,
        db_dir=args.db_dir,
    )
    try:
        build_pdf(
            book_id=args.book,
            paths=paths,
            from_=args.from_,
            to=args.to,
            test_pages=args.test_pages,
            verbose=args.verbose,
            debug_plan=args.debug_plan,
        )
    except TypesettingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
