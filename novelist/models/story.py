"""Story metadata model."""
from dataclasses import dataclass

from config import DEFAULT_TITLE, DEFAULT_PROTAGONIST, DEFAULT_OUTLINE


@dataclass
class StoryMetadata:
    """Title, protagonist description and outline of the story being written."""
    title: str = DEFAULT_TITLE
    protagonist: str = DEFAULT_PROTAGONIST
    outline: str = DEFAULT_OUTLINE
