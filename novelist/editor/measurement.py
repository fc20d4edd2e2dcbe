"""Layout measurement used by the pagination controller."""
import re
import textwrap
from typing import List, Protocol

from config import CHARS_PER_LINE, FONT_SIZE_PX, LINE_HEIGHT_RATIO

LINE_BREAK_PATTERN = re.compile(r"\r?\n")


class LayoutMeasurer(Protocol):
    """Height and line measurements supplied by the presentation layer."""

    def content_height(self, paragraphs: List[str]) -> float:
        """Rendered height of a page holding ``paragraphs``."""
        ...

    def line_count(self, text: str) -> int:
        """Number of newline-delimited lines in a page's rendered text."""
        ...

    def page_height(self, lines: int) -> float:
        """Height of a page tall enough for ``lines`` lines."""
        ...


class TextMetrics:
    """
    Headless measurer for fixed-pitch text.

    Every paragraph is soft-wrapped at ``chars_per_line`` columns and each
    wrapped line is ``font_size_px * line_height_ratio`` pixels tall.
    Paragraphs are separated by one blank line, as in the page text.
    """

    def __init__(
        self,
        chars_per_line: int = CHARS_PER_LINE,
        font_size_px: float = FONT_SIZE_PX,
        line_height_ratio: float = LINE_HEIGHT_RATIO
    ):
        if chars_per_line < 1:
            raise ValueError("chars_per_line must be positive")
        self.chars_per_line = chars_per_line
        self.line_height = font_size_px * line_height_ratio

    def wrapped_lines(self, paragraph: str) -> int:
        """Visual lines taken by one paragraph; an empty paragraph still takes one."""
        total = 0
        for line in LINE_BREAK_PATTERN.split(paragraph):
            total += max(1, len(textwrap.wrap(line, width=self.chars_per_line)))
        return total

    def content_height(self, paragraphs: List[str]) -> float:
        """Wrapped paragraph lines plus one blank separator line between paragraphs."""
        lines = sum(self.wrapped_lines(paragraph) for paragraph in paragraphs)
        lines += max(0, len(paragraphs) - 1)
        return self.page_height(lines)

    def line_count(self, text: str) -> int:
        return len(LINE_BREAK_PATTERN.split(text))

    def page_height(self, lines: int) -> float:
        return lines * self.line_height
