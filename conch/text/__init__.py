"""Text ranges."""

from conch.text.text import TextRange, cover_all, line_number, slice_text_range

__all__ = [
    "TextRange",
    "cover_all",
    "line_number",
    "slice_text_range",
]
