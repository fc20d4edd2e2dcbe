"""Request and response models for the relay HTTP API."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Accepts both the camelCase wire names and the snake_case field names."""
    model_config = ConfigDict(populate_by_name=True)


class VerifyAccessCodeRequest(_CamelModel):
    """Body of POST /api/verify-access-code."""
    # Any JSON value is accepted; anything but the exact secret string fails verification
    access_code: Optional[Any] = Field(default=None, alias="accessCode")


class VerifyAccessCodeResponse(BaseModel):
    """Body returned by POST /api/verify-access-code."""
    success: bool


class GenerateRequest(_CamelModel):
    """Body of POST /api/generate."""
    protagonist: str = ""
    outline: str = ""
    author: str = ""
    story_context: str = Field(default="", alias="storyContext")
    word_count: Optional[int] = Field(default=None, alias="wordCount", ge=0)


class GenerateResponse(_CamelModel):
    """Body returned by POST /api/generate on success."""
    generated_text: str = Field(alias="generatedText")


class ErrorResponse(BaseModel):
    """Body returned by POST /api/generate on failure."""
    error: str
