"""
Chinese numeral lookup for chapter titles and page numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

FALLBACK_DIGITS = "〇一二三四五六七八九"


@dataclass(slots=True)
class NumeralTable:
    """Literal ``n -> text`` table with a digit-by-digit fallback.

    Example:
        >>> table = NumeralTable({10: "十"})
        >>> table.render(10), table.render(12), table.render(0)
        ('十', '一二', '〇')
    """

    entries: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "NumeralTable":
        """Read a pipe-delimited table such as ``12|十二``.

        Blank lines, ``#`` comments, and rows whose key is not an integer are
        ignored.
        """

        return cls.parse(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def parse(cls, content: str) -> "NumeralTable":
        """Return a table from pipe-delimited text.

        Example:
            >>> NumeralTable.parse("# header\\n1|一\\nx|bad\\n21|廿一|extra").entries
            {1: '一', 21: '廿一'}
        """

        entries: Dict[int, str] = {}
        for line in content.splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue
            parts = trimmed.split("|")
            if len(parts) < 2:
                continue
            key = parts[0]
            if not (key.isascii() and key.isdigit()):
                continue
            entries[int(key)] = parts[1]
        return cls(entries)

    def get(self, number: int) -> str | None:
        return self.entries.get(number)

    def render(self, number: int) -> str:
        value = self.get(number)
        if value is not None:
            return value
        return fallback_digits(number)


def fallback_digits(number: int) -> str:
    """Spell ``number`` digit by digit, most significant first.

    Example:
        >>> fallback_digits(105)
        '一〇五'
    """

    return "".join(FALLBACK_DIGITS[int(digit)] for digit in str(number))
