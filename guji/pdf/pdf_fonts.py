"""Font coverage checks and glyph fallback for grid typesetting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Protocol, Sequence

import opencc
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from ..errors import LayoutConfigError
from .pdf_constants import PLACEHOLDER_GLYPH
from .pdf_settings import FontMapping, FontSlot


class FontCapability(Protocol):
    """Answers whether a font slot can draw a character."""

    def has_glyph(self, slot_id: int, char: str) -> bool:
        """Return True when slot ``slot_id`` has a glyph for ``char``."""


class ScriptVariant(Enum):
    TRADITIONAL = "s2t"
    SIMPLIFIED = "t2s"


class VariantConverter(Protocol):
    """Converts a character to a Traditional or Simplified variant."""

    def convert(self, char: str, variant: ScriptVariant) -> str:
        """Return the converted text for ``char``."""


class OpenCCConverter:
    """VariantConverter backed by OpenCC conversion tables."""

    def __init__(self) -> None:
        self._converters = {variant: opencc.OpenCC(variant.value) for variant in ScriptVariant}

    def convert(self, char: str, variant: ScriptVariant) -> str:
        return self._converters[variant].convert(char)


class TTFontCapability:
    """Loads TrueType font slots with reportlab and checks their cmaps.

    Each slot is registered with ``pdfmetrics`` under ``font_name(slot_id)``
    so the renderer can draw with the same fonts.
    """

    def __init__(self, *, slots: Mapping[int, FontSlot], fonts_dir: Path, prefix: str = "guji-font") -> None:
        self._fonts: Dict[int, TTFont] = {}
        for slot_id, slot in slots.items():
            path = Path(fonts_dir) / slot.name
            name = f"{prefix}{slot_id}"
            try:
                font = TTFont(name, str(path))
            except (OSError, TTFError) as exc:
                raise LayoutConfigError(f"loading font {path}: {exc}") from exc
            pdfmetrics.registerFont(font)
            self._fonts[slot_id] = font

    def has_glyph(self, slot_id: int, char: str) -> bool:
        font = self._fonts.get(slot_id)
        if font is None or not char:
            return False
        return font.face.charToGlyph.get(ord(char), 0) != 0

    def font_name(self, slot_id: int) -> str | None:
        font = self._fonts.get(slot_id)
        return font.fontName if font is not None else None


@dataclass(frozen=True, slots=True)
class FontPick:
    """The character actually drawn and the slot chosen for it."""

    char: str
    slot_id: int
    slot: FontSlot


class FontResolver:
    """Finds a font slot for a character, walking a priority stack.

    Stack order is strict priority: the first slot covering the character
    wins. With variant fallback enabled, the Traditional and then the
    Simplified form are tried against the whole stack before giving up on the
    placeholder glyph.

    Example:
        >>> class Fonts:
        ...     def has_glyph(self, slot_id, char):
        ...         return (slot_id, char) in {(1, "甲"), (2, "甲"), (2, "□")}
        >>> mapping = FontMapping(slots={1: FontSlot(1, "a.ttf"), 2: FontSlot(2, "b.ttf")})
        >>> resolver = FontResolver(fonts=Fonts(), mapping=mapping)
        >>> resolver.resolve("甲", [1, 2]).slot_id, resolver.resolve("乙", [1, 2]).char
        (1, '□')
    """

    def __init__(
        self,
        *,
        fonts: FontCapability,
        mapping: FontMapping,
        variant_fallback: bool = False,
        converter: VariantConverter | None = None,
    ) -> None:
        self.fonts = fonts
        self.mapping = mapping
        self.variant_fallback = variant_fallback
        if variant_fallback and converter is None:
            converter = OpenCCConverter()
        self.converter = converter

    def pick(self, char: str, stack: Sequence[int]) -> FontPick | None:
        for slot_id in stack:
            slot = self.mapping.slot(slot_id)
            if slot is not None and self.fonts.has_glyph(slot_id, char):
                return FontPick(char=char, slot_id=slot_id, slot=slot)
        return None

    def resolve(self, char: str, stack: Sequence[int]) -> FontPick | None:
        """Return the pick for ``char``, a variant, or the placeholder.

        Returns None only when not even the placeholder glyph is covered.
        """

        found = self.pick(char, stack) or self._pick_variant(char, stack)
        if found is not None:
            return found
        return self.pick(PLACEHOLDER_GLYPH, stack)

    def _pick_variant(self, char: str, stack: Sequence[int]) -> FontPick | None:
        if not self.variant_fallback or self.converter is None:
            return None
        for variant in (ScriptVariant.TRADITIONAL, ScriptVariant.SIMPLIFIED):
            candidate = self.converter.convert(char, variant)[:1]
            if not candidate or candidate == char:
                continue
            found = self.pick(candidate, stack)
            if found is not None:
                return found
        return None
