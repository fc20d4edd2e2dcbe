"""Data models for the Novelist editor and completion relay."""
from .document import Document, Page, PageState
from .story import StoryMetadata
from .api import (
    VerifyAccessCodeRequest,
    VerifyAccessCodeResponse,
    GenerateRequest,
    GenerateResponse,
    ErrorResponse,
)

__all__ = [
    "Document",
    "Page",
    "PageState",
    "StoryMetadata",
    "VerifyAccessCodeRequest",
    "VerifyAccessCodeResponse",
    "GenerateRequest",
    "GenerateResponse",
    "ErrorResponse",
]
