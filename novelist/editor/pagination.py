"""Pagination controller: fixed-height pages, context extraction and inline completions."""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from config import (
    MAX_LINES_PER_PAGE,
    PAGE_BOX_LINES,
    CONTEXT_WINDOW_WORDS,
    PLACEHOLDER_TEXT,
    ERROR_MARKER_TEXT,
    DEFAULT_AUTHOR,
)
from models.document import Document, Page, PageState
from models.story import StoryMetadata
from editor.measurement import LayoutMeasurer, TextMetrics
from editor.relay_client import RelayClient

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK_PATTERN = re.compile(r"\r?\n\r?\n")
PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_TERMINALS = ".!?"
INVALID_WORD_COUNT_MESSAGE = "Please enter a valid positive number."


@dataclass(eq=False)
class PendingCompletion:
    """A placeholder waiting for generated text."""
    page: Page
    offset: int  # where the placeholder starts in page.text
    context: str
    word_count: Optional[int] = None
    result: Optional[str] = None
    task: Optional["asyncio.Task"] = None


class PaginationController:
    """
    Keeps the manuscript split into fixed-height pages.

    Layout measurement is delegated to a LayoutMeasurer so the splitting
    logic does not depend on any rendering engine. The controller exclusively
    owns its Document; story metadata is held by reference and read at
    request time.
    """

    def __init__(
        self,
        relay: Optional[RelayClient] = None,
        metadata: Optional[StoryMetadata] = None,
        measurer: Optional[LayoutMeasurer] = None,
        author: str = DEFAULT_AUTHOR,
        max_lines: int = MAX_LINES_PER_PAGE,
        box_lines: int = PAGE_BOX_LINES,
        context_words: int = CONTEXT_WINDOW_WORDS,
        alert: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize the controller with a single empty page.

        Args:
            relay: Client used for completion requests
            metadata: Story metadata shared with the application shell
            measurer: Layout measurement capability (defaults to TextMetrics)
            author: Author whose style completions imitate
            max_lines: Lines a page may hold before it spills
            box_lines: Lines of height given to each rendered page box
            context_words: Size of the trailing context window
            alert: Callback used to show messages to the user
        """
        self.relay = relay
        self.metadata = metadata if metadata is not None else StoryMetadata()
        self.measurer = measurer or TextMetrics()
        self.author = author
        self.max_lines = max_lines
        self.box_lines = box_lines
        self.context_words = context_words
        self.alert = alert

        self.document = Document()
        self.focused_page: Page = self.document.add_page()
        self._pending: List[PendingCompletion] = []

    @property
    def pages(self) -> List[Page]:
        return self.document.pages

    @property
    def page_box_height(self) -> float:
        """Fixed height of the editable box drawn for every page."""
        return self.measurer.page_height(self.box_lines)

    def load_text(self, text: str) -> Document:
        """
        Replace the document with ``text``, paginated by rendered height.

        Paragraphs are separated by blank lines. A paragraph that would push
        the current page past its maximum height moves to a new page; a
        paragraph taller than a page on its own is kept whole, leaving an
        oversized page.

        Args:
            text: Plain-text manuscript

        Returns:
            The rebuilt Document
        """
        self.document.clear()
        self._pending.clear()

        max_height = self.measurer.page_height(self.max_lines)
        paragraphs = [p.strip() for p in PARAGRAPH_BREAK_PATTERN.split(text)]
        paragraphs = [p for p in paragraphs if p]

        current_page = self.document.add_page()
        current_paragraphs: List[str] = []

        for paragraph in paragraphs:
            candidate = current_paragraphs + [paragraph]

            if current_paragraphs and self.measurer.content_height(candidate) > max_height:
                # Revert, finalize this page and start the next one with the paragraph
                current_page.text = PARAGRAPH_SEPARATOR.join(current_paragraphs)
                current_page = self.document.add_page()
                current_paragraphs = [paragraph]
            else:
                current_paragraphs = candidate

        current_page.text = PARAGRAPH_SEPARATOR.join(current_paragraphs)
        self.focused_page = self.document.pages[0]

        logger.info(f"Loaded {len(paragraphs)} paragraphs into {self.document.total_pages} pages")
        return self.document

    def update_page(self, page: Page, text: str) -> Optional[Page]:
        """Apply an edit from the presentation layer and run the overflow check."""
        page.text = text
        return self.monitor_input(page)

    def monitor_input(self, page: Page) -> Optional[Page]:
        """
        Overflow check run on every content-changing input event.

        The first time a page exceeds the line limit it becomes maxed and a
        new page is inserted right after it and focused. A maxed page never
        splits again.

        Returns:
            The newly created page, or None
        """
        if page.state is PageState.MAXED:
            return None
        page.state = PageState.MONITORING

        lines = self.measurer.line_count(page.text)
        if lines <= self.max_lines:
            return None

        page.state = PageState.MAXED
        new_page = self.document.add_page(after=page)
        self.focused_page = new_page
        logger.info(f"Page {page.number} reached {lines} lines; opened page {new_page.number}")
        return new_page

    def extract_context(self, page: Page, cursor: int) -> str:
        """Last ``context_words`` words between the start of the page and the cursor."""
        words = page.text[:cursor].split()
        return " ".join(words[-self.context_words:]) if words else ""

    def dispatch_completion(
        self,
        page: Page,
        cursor: int,
        word_count: Optional[int] = None
    ) -> PendingCompletion:
        """
        Insert a placeholder at the cursor and request generated text in the background.

        Must be called from within a running event loop. Returns immediately;
        the placeholder is replaced when the request resolves, with the
        error marker if it fails.

        Args:
            page: Page being edited
            cursor: Character offset of the cursor in page.text
            word_count: Words to generate (relay default when None)

        Returns:
            PendingCompletion whose ``task`` finishes once the page is updated
        """
        if self.relay is None:
            raise RuntimeError("No relay client configured for completions")

        cursor = max(0, min(cursor, len(page.text)))
        context = self.extract_context(page, cursor)

        page.text = page.text[:cursor] + PLACEHOLDER_TEXT + page.text[cursor:]
        self._shift_pending(page, cursor, len(PLACEHOLDER_TEXT))

        pending = PendingCompletion(page=page, offset=cursor, context=context, word_count=word_count)
        self._pending.append(pending)
        pending.task = asyncio.ensure_future(self._complete(pending))
        return pending

    async def request_completion(
        self,
        page: Page,
        cursor: int,
        word_count: Optional[int] = None
    ) -> str:
        """Dispatch a completion and wait for it; returns the text spliced into the page."""
        pending = self.dispatch_completion(page, cursor, word_count)
        await pending.task
        return pending.result

    def handle_keydown(
        self,
        page: Page,
        key: str,
        cursor: int,
        ctrl: bool = False,
        ask_word_count: Optional[Callable[[], Optional[str]]] = None
    ) -> Optional[PendingCompletion]:
        """
        Key bindings: Tab completes with the default length, Ctrl+G asks for a word count.

        Returns:
            The dispatched completion, or None if the key triggered nothing
        """
        if key == "Tab" and not ctrl:
            return self.dispatch_completion(page, cursor)

        if ctrl and key.lower() == "g":
            raw = ask_word_count() if ask_word_count else None
            if raw is None:
                return None
            word_count = self.parse_word_count(raw)
            if word_count is None:
                self._notify(INVALID_WORD_COUNT_MESSAGE)
                return None
            return self.dispatch_completion(page, cursor, word_count)

        return None

    @staticmethod
    def parse_word_count(raw: str) -> Optional[int]:
        try:
            value = int(raw.strip())
        except ValueError:
            return None
        return value if value > 0 else None

    def get_full_content(self) -> str:
        """Plain text of every page, separated by blank lines. Used for export."""
        content = "".join(page.text.strip() + PARAGRAPH_SEPARATOR for page in self.document.pages)
        return content.strip()

    async def _complete(self, pending: PendingCompletion) -> None:
        try:
            generated = await self.relay.generate(
                protagonist=self.metadata.protagonist,
                outline=self.metadata.outline,
                author=self.author,
                story_context=pending.context,
                word_count=pending.word_count
            )
        except Exception as e:
            logger.error(f"Error generating completion: {e}", exc_info=True)
            generated = ERROR_MARKER_TEXT

        self._resolve(pending, generated)

    def _resolve(self, pending: PendingCompletion, generated: str) -> None:
        """Swap a placeholder for generated text, adding a space where words would collide."""
        if pending in self._pending:
            self._pending.remove(pending)

        page = pending.page
        start = self._locate_placeholder(page, pending.offset)
        if start is None:
            logger.warning(f"Placeholder on page {page.number} was removed; dropping completion")
            return

        preceding = page.text[start - 1:start] if start > 0 else ""
        needs_space = (
            preceding != ""
            and not preceding.isspace()
            and preceding not in SENTENCE_TERMINALS
            and generated[:1] != ""
            and not generated[:1].isspace()
        )
        final_text = f" {generated}" if needs_space else generated

        end = start + len(PLACEHOLDER_TEXT)
        page.text = page.text[:start] + final_text + page.text[end:]
        self._shift_pending(page, start, len(final_text) - len(PLACEHOLDER_TEXT))
        pending.result = final_text

    def _locate_placeholder(self, page: Page, offset: int) -> Optional[int]:
        """Start of the placeholder occurrence closest to ``offset``."""
        starts = [m.start() for m in re.finditer(re.escape(PLACEHOLDER_TEXT), page.text)]
        if not starts:
            return None
        return min(starts, key=lambda start: abs(start - offset))

    def _shift_pending(self, page: Page, position: int, delta: int) -> None:
        for other in self._pending:
            if other.page is page and other.offset >= position:
                other.offset += delta

    def _notify(self, message: str) -> None:
        logger.warning(message)
        if self.alert:
            self.alert(message)
