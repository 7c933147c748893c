"""Shared constants for grid layout and text processing."""

from __future__ import annotations

import os

PAGE_BREAK = "%"
HALF_LEAF_BREAK = "$"
BAND_BREAK = "^"
LAST_COLUMN_BREAK = "&"
BOOKLINE_OPEN = "《"
BOOKLINE_CLOSE = "》"
ANNOTATION_OPEN = "【"
ANNOTATION_CLOSE = "】"
BLANK_SLOT = "@"
FULL_STOP = "。"
PLACEHOLDER_GLYPH = "□"
TITLE_NUMBER_TOKEN = "X"
PREFACE_POSTFIX = "序"
APPENDIX_POSTFIX = "附"
BOOKLINE_ABOVE = 0.3
BOOKLINE_BELOW = 0.7
ROTATED_MARK_DEGREES = -90.0
DEBUG_TYPESETTING = os.getenv("DEBUG_TYPESETTING", "0") not in {
    "",
    "0",
    "false",
    "False",
}
