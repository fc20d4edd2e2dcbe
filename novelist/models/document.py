"""Document data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class PageState(str, Enum):
    """Lifecycle of a page: fresh -> monitoring -> maxed (terminal)."""
    FRESH = "fresh"
    MONITORING = "monitoring"
    MAXED = "maxed"


@dataclass(eq=False)
class Page:
    """Represents a single fixed-height page of the manuscript."""
    number: int  # 1-indexed display number
    text: str = ""
    state: PageState = PageState.FRESH

    @property
    def marker(self) -> str:
        """Page-number marker shown above the page."""
        return f"-- {self.number} --"

    @property
    def maxed(self) -> bool:
        return self.state is PageState.MAXED

    @property
    def word_count(self) -> int:
        return len(self.text.split())


@dataclass
class Document:
    """Ordered sequence of pages making up the manuscript."""
    pages: List[Page] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def add_page(self, after: Optional[Page] = None, text: str = "") -> Page:
        """
        Create a page and insert it into the document.

        Args:
            after: Page the new one follows; appended at the end when None
            text: Initial page text

        Returns:
            The new Page, numbered sequentially with the rest of the document
        """
        position = len(self.pages) if after is None else self.index_of(after) + 1
        page = Page(number=position + 1, text=text)
        self.pages.insert(position, page)
        self._renumber()
        return page

    def index_of(self, page: Page) -> int:
        for index, candidate in enumerate(self.pages):
            if candidate is page:
                return index
        raise ValueError(f"Page {page.number} does not belong to this document")

    def clear(self) -> None:
        self.pages.clear()

    def _renumber(self) -> None:
        for index, page in enumerate(self.pages):
            page.number = index + 1
