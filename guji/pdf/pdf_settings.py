"""Book and canvas settings for grid typesetting."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from reportlab.lib import colors

from ..errors import LayoutConfigError

FONT_SLOT_IDS = range(1, 6)


def parse_color(value: str | colors.Color | None, default: colors.Color) -> colors.Color:
    """Return a reportlab color for a config value.

    Args:
        value: Color name, ``#rrggbb``/``#rgb`` string, Color, or None.
        default: Color used when ``value`` is empty.
    Returns:
        Parsed Color.

    Example:
        >>> parse_color("#ff0000", colors.black).hexval()
        '0xff0000'
        >>> parse_color("", colors.black) is colors.black
        True
    """

    if value is None or value == "":
        return default
    if isinstance(value, colors.Color):
        return value
    raw = value.strip()
    if raw.startswith("#") and len(raw) == 4:
        raw = "#" + "".join(ch * 2 for ch in raw[1:])
    try:
        return colors.toColor(raw)
    except ValueError as exc:
        raise LayoutConfigError(f"unsupported color '{value}'") from exc


@dataclass(slots=True)
class CanvasSettings:
    """Physical page geometry, in canvas units (1 unit = 1 pt).

    Example:
        >>> CanvasSettings().validate()
    """

    canvas_width: float = 2480.0
    canvas_height: float = 1860.0
    margins_top: float = 200.0
    margins_bottom: float = 50.0
    margins_left: float = 50.0
    margins_right: float = 50.0
    leaf_col: int = 24
    leaf_center_width: float = 120.0
    logo_text: str | None = None
    multirows_enabled: bool = False
    multirows_count: int = 1

    def validate(self) -> None:
        """Raise ``LayoutConfigError`` when the canvas cannot hold a grid."""

        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise LayoutConfigError("canvas_width/height must be > 0")
        if self.leaf_col == 0:
            raise LayoutConfigError("leaf_col must be > 0")
        horizontal = self.margins_left + self.margins_right
        if horizontal >= self.canvas_width:
            raise LayoutConfigError(
                f"left+right margins ({horizontal}) exceed canvas width ({self.canvas_width})"
            )
        vertical = self.margins_top + self.margins_bottom
        if vertical >= self.canvas_height:
            raise LayoutConfigError(
                f"top+bottom margins ({vertical}) exceed canvas height ({self.canvas_height})"
            )


@dataclass(slots=True)
class FontSlot:
    """A configured font file and its per-slot sizing."""

    id: int
    name: str
    rotate_deg: float = 0.0
    text_size: float = 60.0
    comment_size: float = 30.0


@dataclass(slots=True)
class FontMapping:
    """Font slots plus the priority stacks for text and annotations."""

    slots: Dict[int, FontSlot] = field(default_factory=dict)
    text_stack: List[int] = field(default_factory=list)
    comment_stack: List[int] = field(default_factory=list)

    def slot(self, slot_id: int) -> FontSlot | None:
        return self.slots.get(slot_id)


@dataclass(slots=True)
class CoverStyle:
    title_font_size: float = 120.0
    title_y: float = 200.0
    author_font_size: float = 60.0
    author_y: float = 600.0
    color: colors.Color = colors.black


@dataclass(slots=True)
class TitleStyle:
    """Running title placement.

    Args:
        center: Draw the title down the center gutter instead of the left edge.
        postfix: Optional pattern appended to the book title; ``X`` is replaced
            by the chapter numeral.
        directory: Emit PDF bookmarks for chapter outlines.
    """

    center: bool = True
    postfix: str | None = None
    directory: bool = False
    font_size: float = 80.0
    color: colors.Color = colors.black
    y: float = 1200.0
    y_dis: float = 1.2


@dataclass(slots=True)
class PagerStyle:
    font_size: float = 35.0
    color: colors.Color = colors.black
    y: float = 500.0


@dataclass(slots=True)
class ReplacementRules:
    """Single-character replacements and token deletions applied per line."""

    comma_pairs: List[Tuple[str, str]] = field(default_factory=list)
    number_pairs: List[Tuple[str, str]] = field(default_factory=list)
    delete_tokens: List[str] = field(default_factory=list)


@dataclass(slots=True)
class TextModes:
    remove_punctuations: bool = False
    remove_tokens: List[str] = field(default_factory=list)
    only_period: bool = False
    only_period_tokens: List[str] = field(default_factory=list)
    only_period_color: colors.Color | None = None


@dataclass(slots=True)
class MarkAdjust:
    """Punctuation characters sharing a scale and x/y offset.

    Offsets are fractions of the column width (x) and row height (y).
    """

    chars: str = ""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __contains__(self, char: str) -> bool:
        return bool(char) and char in self.chars


@dataclass(slots=True)
class PunctuationSettings:
    text_nop: MarkAdjust = field(default_factory=MarkAdjust)
    text_rotate: MarkAdjust = field(default_factory=MarkAdjust)
    comment_nop: MarkAdjust = field(default_factory=MarkAdjust)
    comment_rotate: MarkAdjust = field(default_factory=MarkAdjust)
    comment_strip_chars: str = ""


@dataclass(slots=True)
class BookLineStyle:
    width: float = 1.0
    color: colors.Color = colors.black


@dataclass(slots=True)
class BookSettings:
    """Everything the typesetter needs to know about one book.

    Example:
        >>> book = BookSettings(title="論語", fonts=FontMapping(
        ...     slots={1: FontSlot(id=1, name="a.ttf")}, text_stack=[1], comment_stack=[1]))
        >>> book.validate()
    """

    title: str = ""
    author: str = ""
    canvas_id: str = "default"
    row_num: int = 30
    row_delta_y: float = 0.0
    multirows_horizontal_layout: int = 1
    fonts: FontMapping = field(default_factory=FontMapping)
    try_st: bool = False
    text_font_color: colors.Color = colors.black
    comment_font_color: colors.Color = colors.black
    cover: CoverStyle = field(default_factory=CoverStyle)
    title_style: TitleStyle = field(default_factory=TitleStyle)
    pager_style: PagerStyle = field(default_factory=PagerStyle)
    replacements: ReplacementRules = field(default_factory=ReplacementRules)
    text_modes: TextModes = field(default_factory=TextModes)
    punctuation: PunctuationSettings = field(default_factory=PunctuationSettings)
    bookline: BookLineStyle | None = None
    book_line_flag: bool = False

    def validate(self) -> None:
        """Raise ``LayoutConfigError`` for settings the layout cannot use."""

        if self.row_num == 0:
            raise LayoutConfigError("row_num must be > 0")
        if not self.fonts.text_stack:
            raise LayoutConfigError("text font stack must not be empty")
        if not self.fonts.comment_stack:
            raise LayoutConfigError("comment font stack must not be empty")
        if self.cover.title_font_size <= 0 or self.cover.author_font_size <= 0:
            raise LayoutConfigError("cover font sizes must be > 0")
        if self.title_style.font_size <= 0:
            raise LayoutConfigError("title font size must be > 0")
        if self.pager_style.font_size <= 0:
            raise LayoutConfigError("pager font size must be > 0")


def load_canvas_settings(path: Path) -> CanvasSettings:
    """Read canvas settings from a JSON document.

    Args:
        path: JSON file whose keys mirror ``CanvasSettings`` fields.
    Returns:
        CanvasSettings instance.
    """

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return CanvasSettings(**_known_fields(data=data, cls=CanvasSettings))


def load_book_settings(path: Path) -> BookSettings:
    """Read book settings from a JSON document.

    Args:
        path: JSON file with top-level book keys plus nested ``fonts``,
            ``cover``, ``title_style``, ``pager_style``, ``replacements``,
            ``text_modes``, ``punctuation`` and ``bookline`` objects.
    Returns:
        BookSettings instance.
    """

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return book_settings_from_dict(data=data)


def book_settings_from_dict(*, data: Mapping[str, Any]) -> BookSettings:
    """Return BookSettings built from plain JSON-style data.

    Example:
        >>> book = book_settings_from_dict(data={
        ...     "title": "論語",
        ...     "row_num": 20,
        ...     "fonts": {"slots": [{"id": 1, "name": "a.ttf"}], "text_stack": [1], "comment_stack": [1]},
        ...     "replacements": {"comma_pairs": ["，,"]},
        ... })
        >>> book.row_num, book.replacements.comma_pairs
        (20, [('，', ',')])
    """

    scalars = _known_fields(data=data, cls=BookSettings)
    for nested in (
        "fonts",
        "cover",
        "title_style",
        "pager_style",
        "replacements",
        "text_modes",
        "punctuation",
        "bookline",
    ):
        scalars.pop(nested, None)
    for key in ("text_font_color", "comment_font_color"):
        if key in scalars:
            scalars[key] = parse_color(scalars[key], colors.black)
    book_line_flag = bool(data.get("book_line_flag", False))
    bookline = None
    if book_line_flag:
        bookline = _bookline_style(data=data.get("bookline") or {})
    return BookSettings(
        **scalars,
        fonts=_font_mapping(data=data.get("fonts") or {}),
        cover=_cover_style(data=data.get("cover") or {}),
        title_style=_title_style(data=data.get("title_style") or {}),
        pager_style=_pager_style(data=data.get("pager_style") or {}),
        replacements=_replacement_rules(data=data.get("replacements") or {}),
        text_modes=_text_modes(data=data.get("text_modes") or {}),
        punctuation=_punctuation(data=data.get("punctuation") or {}),
        bookline=bookline,
    )


def _known_fields(*, data: Mapping[str, Any], cls: type) -> Dict[str, Any]:
    """Return the subset of ``data`` whose keys are fields of ``cls``."""

    names = set(cls.__dataclass_fields__)
    return {key: value for key, value in data.items() if key in names}


def _font_mapping(*, data: Mapping[str, Any]) -> FontMapping:
    """Return FontMapping from JSON data; slot ids outside 1..5 are dropped."""

    slots: Dict[int, FontSlot] = {}
    for raw in data.get("slots", []):
        slot = FontSlot(**_known_fields(data=raw, cls=FontSlot))
        if slot.id in FONT_SLOT_IDS and slot.name:
            slots[slot.id] = slot
    return FontMapping(
        slots=slots,
        text_stack=_font_stack(data.get("text_stack", [])),
        comment_stack=_font_stack(data.get("comment_stack", [])),
    )


def _font_stack(raw: Sequence[int] | str) -> List[int]:
    """Return slot ids from a list or a digit string such as ``"132"``.

    Example:
        >>> _font_stack("1327")
        [1, 3, 2]
    """

    if isinstance(raw, str):
        raw = [int(ch) for ch in raw if ch.isdigit()]
    return [int(idx) for idx in raw if int(idx) in FONT_SLOT_IDS]


def _cover_style(*, data: Mapping[str, Any]) -> CoverStyle:
    values = _known_fields(data=data, cls=CoverStyle)
    values["color"] = parse_color(values.get("color"), colors.black)
    return CoverStyle(**values)


def _title_style(*, data: Mapping[str, Any]) -> TitleStyle:
    values = _known_fields(data=data, cls=TitleStyle)
    values["color"] = parse_color(values.get("color"), colors.black)
    postfix = (values.get("postfix") or "").strip()
    values["postfix"] = postfix or None
    return TitleStyle(**values)


def _pager_style(*, data: Mapping[str, Any]) -> PagerStyle:
    values = _known_fields(data=data, cls=PagerStyle)
    values["color"] = parse_color(values.get("color"), colors.black)
    return PagerStyle(**values)


def _replacement_pairs(raw: Sequence[str] | str) -> List[Tuple[str, str]]:
    """Return (char, replacement) pairs from ``"ab|cd"`` or ``["ab", "cd"]``.

    The first character of each token is the source; entries without a
    replacement are skipped.

    Example:
        >>> _replacement_pairs("，,|x|。.")
        [('，', ','), ('。', '.')]
    """

    tokens = raw.split("|") if isinstance(raw, str) else list(raw)
    return [(token[0], token[1:]) for token in tokens if len(token) > 1]


def _token_list(raw: Sequence[str] | str) -> List[str]:
    tokens = raw.split("|") if isinstance(raw, str) else list(raw)
    return [token for token in tokens if token]


def _replacement_rules(*, data: Mapping[str, Any]) -> ReplacementRules:
    return ReplacementRules(
        comma_pairs=_replacement_pairs(data.get("comma_pairs", [])),
        number_pairs=_replacement_pairs(data.get("number_pairs", [])),
        delete_tokens=_token_list(data.get("delete_tokens", [])),
    )


def _text_modes(*, data: Mapping[str, Any]) -> TextModes:
    period_color = data.get("only_period_color")
    return TextModes(
        remove_punctuations=bool(data.get("remove_punctuations", False)),
        remove_tokens=_token_list(data.get("remove_tokens", [])),
        only_period=bool(data.get("only_period", False)),
        only_period_tokens=_token_list(data.get("only_period_tokens", [])),
        only_period_color=parse_color(period_color, colors.black) if period_color else None,
    )


def _mark_adjust(*, data: Mapping[str, Any]) -> MarkAdjust:
    values = _known_fields(data=data, cls=MarkAdjust)
    chars = values.get("chars", "")
    if isinstance(chars, str) and "|" in chars:
        chars = "".join(token[0] for token in chars.split("|") if token)
    elif not isinstance(chars, str):
        chars = "".join(token[0] for token in chars if token)
    values["chars"] = chars
    return MarkAdjust(**values)


def _punctuation(*, data: Mapping[str, Any]) -> PunctuationSettings:
    text_nop = _mark_adjust(data=data.get("text_nop") or {})
    comment_nop = _mark_adjust(data=data.get("comment_nop") or {})
    strip_chars = data.get("comment_strip_chars")
    return PunctuationSettings(
        text_nop=text_nop,
        text_rotate=_mark_adjust(data=data.get("text_rotate") or {}),
        comment_nop=comment_nop,
        comment_rotate=_mark_adjust(data=data.get("comment_rotate") or {}),
        comment_strip_chars=comment_nop.chars if strip_chars is None else strip_chars,
    )


def _bookline_style(*, data: Mapping[str, Any]) -> BookLineStyle:
    values = _known_fields(data=data, cls=BookLineStyle)
    values["color"] = parse_color(values.get("color"), colors.black)
    return BookLineStyle(**values)
