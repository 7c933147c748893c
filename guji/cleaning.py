"""
Line normalization and slot padding for chapter text.
"""

from __future__ import annotations

from typing import Callable, Iterable

from .pdf.pdf_constants import (
    ANNOTATION_CLOSE,
    ANNOTATION_OPEN,
    BLANK_SLOT,
    BOOKLINE_CLOSE,
    BOOKLINE_OPEN,
    FULL_STOP,
)
from .pdf.pdf_settings import BookSettings, ReplacementRules, TextModes


def squeeze_whitespace(value: str) -> str:
    """Drop every whitespace character, including full-width spaces.

    Example:
        >>> squeeze_whitespace(" 子曰\\u3000學而 時習之 ")
        '子曰學而時習之'
    """

    return "".join(ch for ch in value if not ch.isspace())


def apply_replacements(value: str, rules: ReplacementRules) -> str:
    """Apply character replacement tables, then token deletions.

    Example:
        >>> rules = ReplacementRules(comma_pairs=[("，", "、")], number_pairs=[("1", "一")],
        ...                          delete_tokens=["「", ""])
        >>> apply_replacements("「1，2", rules)
        '一、2'
    """

    result = value
    for source, target in rules.comma_pairs:
        result = result.replace(source, target)
    for source, target in rules.number_pairs:
        result = result.replace(source, target)
    for token in rules.delete_tokens:
        if token:
            result = result.replace(token, "")
    return result


def apply_text_modes(value: str, modes: TextModes) -> str:
    """Apply punctuation removal and collapse-to-period modes.

    Example:
        >>> modes = TextModes(only_period=True, only_period_tokens=["，", "；"])
        >>> apply_text_modes("，子曰；，學而。", modes)
        '子曰。學而。'
    """

    result = value
    if modes.remove_punctuations:
        for token in modes.remove_tokens:
            result = result.replace(token, "")
    if modes.only_period:
        for token in modes.only_period_tokens:
            result = result.replace(token, FULL_STOP)
        result = _collapse_periods(result)
    return result


def _collapse_periods(value: str) -> str:
    """Drop repeated full stops and a leading full stop."""

    kept: list[str] = []
    last = ""
    for ch in value:
        if ch == FULL_STOP and last == FULL_STOP:
            continue
        if not kept and ch == FULL_STOP:
            continue
        last = ch
        kept.append(ch)
    return "".join(kept)


def remove_chars(value: str, chars: Iterable[str]) -> str:
    """Remove every occurrence of each character in ``chars``."""

    result = value
    for ch in chars:
        result = result.replace(ch, "")
    return result


def _annotation_spans(value: str) -> Iterable[tuple[int, int]]:
    """Yield (start, end) bounds of each closed annotation, brackets included.

    Scanning stops at the first bracket without a closing partner.
    """

    cursor = 0
    while True:
        start = value.find(ANNOTATION_OPEN, cursor)
        if start < 0:
            return
        end = value.find(ANNOTATION_CLOSE, start + 1)
        if end < 0:
            return
        yield start, end + 1
        cursor = end + 1


def count_annotation_slots(value: str) -> int:
    """Return the grid slots consumed by annotations (two characters per slot).

    Example:
        >>> count_annotation_slots("子曰【甲乙丙】學【丁丁】")
        3
    """

    total = 0
    for start, end in _annotation_spans(value):
        inner = end - start - 2
        total += (inner + 1) // 2
    return total


def strip_annotations(value: str) -> str:
    """Remove annotation brackets together with their contents.

    Example:
        >>> strip_annotations("子曰【甲乙】學【未閉")
        '子曰學【未閉'
    """

    pieces: list[str] = []
    cursor = 0
    for start, end in _annotation_spans(value):
        pieces.append(value[cursor:start])
        cursor = end
    pieces.append(value[cursor:])
    return "".join(pieces)


def missing_spaces(total: int, row_num: int) -> int:
    """Return the padding needed to end on a column boundary.

    Example:
        >>> missing_spaces(23, 20), missing_spaces(40, 20), missing_spaces(5, 0)
        (17, 0, 0)
    """

    if row_num == 0:
        return 0
    remainder = total % row_num
    return 0 if remainder == 0 else row_num - remainder


def normalize_line(raw_line: str, book: BookSettings) -> str:
    """Run replacements and text modes on one source line.

    Returns an empty string for blank lines.
    """

    cleaners: tuple[Callable[[str], str], ...] = (
        squeeze_whitespace,
        lambda value: apply_replacements(value, book.replacements),
        lambda value: apply_text_modes(value, book.text_modes),
        lambda value: value.replace(BLANK_SLOT, " "),
    )
    result = raw_line.strip()
    if not result:
        return ""
    for cleaner in cleaners:
        result = cleaner(result)
    return result


def slot_count(line: str, book: BookSettings) -> int:
    """Return how many grid slots ``line`` occupies once laid out.

    Non-slot marks, stripped comment characters and (when the decoration is
    enabled) bookline brackets take no slot; annotations take half a slot per
    character, rounded up per annotation.

    Example:
        >>> slot_count("子曰【甲乙丙】", BookSettings())
        4
    """

    working = remove_chars(line, book.punctuation.text_nop.chars)
    working = remove_chars(working, book.punctuation.comment_strip_chars)
    if book.book_line_flag:
        working = remove_chars(working, BOOKLINE_OPEN + BOOKLINE_CLOSE)
    annotation_slots = count_annotation_slots(working)
    return len(strip_annotations(working)) + annotation_slots


def pad_line(line: str, book: BookSettings) -> str:
    """Return ``line`` padded with spaces so it ends on a column boundary.

    Example:
        >>> pad_line("子曰【甲乙丙】", BookSettings(row_num=6))
        '子曰【甲乙丙】  '
    """

    spaces = missing_spaces(slot_count(line, book), book.row_num)
    if 0 < spaces < book.row_num:
        return line + " " * spaces
    return line


def process_text(content: str, book: BookSettings) -> str:
    """Normalize and pad every non-empty line, joined into one stream.

    Args:
        content: Raw chapter file contents.
        book: Book settings with replacement rules and row count.
    Returns:
        Flat character stream ready for pagination.

    Example:
        >>> process_text("子曰\\n\\n學而 時習之\\n", BookSettings(row_num=4))
        '子曰  學而時習之   '
    """

    processed: list[str] = []
    for raw_line in content.split("\n"):
        line = normalize_line(raw_line, book)
        if not line:
            continue
        processed.append(pad_line(line, book))
    return "".join(processed)
