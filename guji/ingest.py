"""
Helpers that assemble chapter files into a typed corpus.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .cleaning import process_text
from .errors import MissingChapterError
from .models import TextCorpus, TextEntry
from .pdf.pdf_settings import BookSettings

APPENDIX_FILE = "999.txt"


def _chapter_files(*, text_dir: Path) -> List[Path]:
    """Return ``*.txt`` files (any case) sorted by file name."""

    if not text_dir.is_dir():
        raise MissingChapterError(None, f"text directory not found: {text_dir}")
    files = [
        path
        for path in text_dir.iterdir()
        if path.is_file() and path.suffix.lower() == ".txt"
    ]
    return sorted(files, key=lambda path: path.name)


def _ordinal(stem: str) -> int | None:
    """Return the numeric ordinal encoded in a file stem.

    Example:
        >>> _ordinal("007"), _ordinal("preface")
        (7, None)
    """

    if stem.isascii() and stem.isdigit():
        return int(stem)
    return None


def load_corpus(*, text_dir: Path, book: BookSettings) -> TextCorpus:
    """Read and preprocess every chapter under ``text_dir``.

    Args:
        text_dir: Directory containing ``NNN.txt`` chapter files.
        book: Book settings driving replacements and padding.
    Returns:
        TextCorpus keyed by ordinal. A stem made only of zeros marks the
        prologue; ``999.txt`` marks the appendix. Files without a numeric stem
        are skipped.
    Raises:
        MissingChapterError: When the directory holds no ``.txt`` files.
    """

    entries: Dict[int, TextEntry] = {}
    has_prologue = False
    has_appendix = False
    for path in _chapter_files(text_dir=text_dir):
        lower = path.name.lower()
        stem = lower[: -len(".txt")]
        if stem and set(stem) == {"0"}:
            has_prologue = True
        if lower == APPENDIX_FILE:
            has_appendix = True
        ordinal = _ordinal(stem)
        if ordinal is None:
            continue
        content = path.read_text(encoding="utf-8")
        entries[ordinal] = TextEntry(
            name=path.name,
            ordinal=ordinal,
            data=process_text(content, book),
            source_path=path,
        )
    if not entries:
        raise MissingChapterError(None, f"no .txt files found under {text_dir}")
    return TextCorpus(entries=entries, has_prologue=has_prologue, has_appendix=has_appendix)
