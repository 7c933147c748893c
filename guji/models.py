"""
Typed containers for preprocessed chapter text.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from .errors import MissingChapterError


@dataclass(slots=True)
class TextEntry:
    """One chapter file after preprocessing.

    Attributes:
        name: Source file name, e.g. ``003.txt``.
        ordinal: Numeric stem of the file name.
        data: Flat character stream with control markers and padding.
    """

    name: str
    ordinal: int
    data: str
    source_path: Path | None = None


@dataclass(slots=True)
class TextCorpus:
    """Sparse collection of chapters keyed by ordinal."""

    entries: Dict[int, TextEntry] = field(default_factory=dict)
    has_prologue: bool = False
    has_appendix: bool = False

    def entry(self, ordinal: int) -> TextEntry:
        """Return the chapter for ``ordinal``.

        Raises:
            MissingChapterError: When no chapter exists for the ordinal.

        Example:
            >>> TextCorpus().entry(3)
            Traceback (most recent call last):
            ...
            guji.errors.MissingChapterError: text entry 3 not available
        """

        found = self.entries.get(ordinal)
        if found is None:
            raise MissingChapterError(ordinal)
        return found

    def highest_ordinal(self) -> int:
        """Return the largest ordinal present, or 0 for an empty corpus.

        Example:
            >>> TextCorpus({2: TextEntry("002.txt", 2, "")}).highest_ordinal()
            2
        """

        return max(self.entries, default=0)
