"""Public pagination helpers for grid output."""

from __future__ import annotations

from .pdf_annotations import AnnotationLayout
from .pdf_pagination_flow import PaginationEngine
from .pdf_pagination_state import AnnotationStep, PageCursor

__all__ = [
    "AnnotationLayout",
    "AnnotationStep",
    "PageCursor",
    "PaginationEngine",
]
