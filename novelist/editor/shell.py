"""Application shell: story metadata, access gate, help popup and file interchange."""
import logging
from pathlib import Path
from typing import Optional, Union

from config import DEFAULT_TITLE, DEFAULT_PROTAGONIST, DEFAULT_OUTLINE, DEFAULT_AUTHOR, FLAG_EXPIRY_DAYS
from models.story import StoryMetadata
from editor.measurement import LayoutMeasurer
from editor.pagination import PaginationController
from editor.relay_client import RelayClient, RelayError
from editor.storage import (
    KeyValueStore,
    TITLE_KEY,
    PROTAGONIST_KEY,
    OUTLINE_KEY,
    ACCESS_GRANTED_KEY,
    HELP_SHOWN_KEY,
)

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid access code. Please try again."
VERIFY_ERROR_MESSAGE = "Error verifying access code. Please try again."


class NovelistApp:
    """Top-level state of the editor application; owns the story metadata."""

    def __init__(
        self,
        store: KeyValueStore,
        relay: RelayClient,
        measurer: Optional[LayoutMeasurer] = None,
        author: str = DEFAULT_AUTHOR
    ):
        self.store = store
        self.relay = relay

        self.menu_open = False
        self.drawer_open = False
        self.show_help_popup = False
        self.error_message = ""

        self.metadata = StoryMetadata()
        self.load_metadata()

        self.editor = PaginationController(
            relay=relay,
            metadata=self.metadata,
            measurer=measurer,
            author=author
        )
        self.check_if_help_shown()

    @property
    def access_granted(self) -> bool:
        return self.store.get(ACCESS_GRANTED_KEY) is not None

    def load_metadata(self) -> StoryMetadata:
        """Read title, protagonist and outline from the store; empty or missing values use the defaults."""
        self.metadata.title = self.store.get(TITLE_KEY) or DEFAULT_TITLE
        self.metadata.protagonist = self.store.get(PROTAGONIST_KEY) or DEFAULT_PROTAGONIST
        self.metadata.outline = self.store.get(OUTLINE_KEY) or DEFAULT_OUTLINE
        return self.metadata

    def save_metadata(self) -> None:
        self.store.set(TITLE_KEY, self.metadata.title)
        self.store.set(PROTAGONIST_KEY, self.metadata.protagonist)
        self.store.set(OUTLINE_KEY, self.metadata.outline)
        logger.info(f"Saved story metadata for '{self.metadata.title}'")

    def check_if_help_shown(self) -> None:
        """Open the help popup on first launch and remember that it was shown."""
        if self.store.get(HELP_SHOWN_KEY) is None:
            self.show_help_popup = True
            self.store.set(HELP_SHOWN_KEY, "true", ttl_days=FLAG_EXPIRY_DAYS)

    def check_if_access_granted(self) -> None:
        if not self.access_granted:
            self.show_help_popup = True

    async def submit_access_code(self, access_code: str) -> bool:
        """
        Verify an access code with the relay.

        Failures only set ``error_message``; the popup stays open.

        Returns:
            True if access was granted
        """
        try:
            success = await self.relay.verify_access_code(access_code)
        except RelayError as e:
            logger.error(f"Access code verification failed: {e}")
            self.error_message = VERIFY_ERROR_MESSAGE
            return False

        if not success:
            self.error_message = INVALID_CODE_MESSAGE
            return False

        self.store.set(ACCESS_GRANTED_KEY, "true", ttl_days=FLAG_EXPIRY_DAYS)
        self.error_message = ""
        self.show_help_popup = False
        return True

    def toggle_menu(self) -> None:
        self.menu_open = not self.menu_open

    def toggle_drawer(self) -> None:
        self.drawer_open = not self.drawer_open

    def open_help_popup(self) -> None:
        self.show_help_popup = True

    def close_help_popup(self) -> None:
        self.show_help_popup = False

    def save_file(self, path: Optional[Union[str, Path]]) -> bool:
        """
        Export the manuscript as UTF-8 plain text.

        Args:
            path: Destination chosen by the user; None means the dialog was cancelled

        Returns:
            True if the file was written
        """
        if path is None:
            logger.info("Save operation cancelled or failed: no file chosen")
            return False

        content = self.editor.get_full_content()
        try:
            Path(path).write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Save operation cancelled or failed: {e}")
            return False

        self.menu_open = False
        logger.info(f"Saved manuscript to {path}")
        return True

    def open_file(self, path: Optional[Union[str, Path]]) -> bool:
        """
        Import a UTF-8 plain-text manuscript and re-paginate it.

        Args:
            path: File chosen by the user; None means the dialog was cancelled

        Returns:
            True if the file was loaded
        """
        if path is None:
            logger.info("Open operation cancelled or failed: no file chosen")
            return False

        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Open operation cancelled or failed: {e}")
            return False

        self.editor.load_text(text)
        self.menu_open = False
        logger.info(f"Opened manuscript {path}")
        return True
