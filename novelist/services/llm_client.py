"""LLM Client for the Groq chat-completions API."""
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import GROQ_API_KEY, COMPLETION_MODEL, TEMPERATURE

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for sending single-shot completion requests to Groq."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = COMPLETION_MODEL,
        temperature: float = TEMPERATURE
    ):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            model: Chat model used for every completion
            temperature: Sampling temperature
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.model = model
        self.temperature = temperature
        self.client = Groq(api_key=self.api_key)
        logger.info(f"LLMClient initialized with model {model}")

    def generate(self, prompt: str, max_tokens: int) -> LLMResponse:
        """
        Request one completion for a single user message. No retries.

        Args:
            prompt: Complete instruction prompt
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()

        try:
            logger.debug(f"Generating completion with model: {self.model}, max_tokens={max_tokens}")

            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": prompt
                    }
                ],
                max_tokens=max_tokens,
                temperature=self.temperature,
                n=1
            )
        except RateLimitError as e:
            raise self._error("RATE_LIMIT_ERROR", "Rate limit exceeded.", e, start_time)
        except AuthenticationError as e:
            raise self._error("AUTHENTICATION_ERROR", "Authentication failed. Please check your API key.", e, start_time)
        except APITimeoutError as e:
            raise self._error("TIMEOUT_ERROR", "Request timed out.", e, start_time)
        except APIError as e:
            raise self._error("API_ERROR", f"Groq API error: {str(e)}", e, start_time)
        except Exception as e:
            raise self._error("UNKNOWN_ERROR", f"Unexpected error during generation: {str(e)}", e, start_time)

        latency_ms = int((time.time() - start_time) * 1000)

        try:
            text = response.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise self._error("MALFORMED_RESPONSE", "Provider returned no completion choices.", e, start_time)

        usage = getattr(response, "usage", None)
        tokens_input = usage.prompt_tokens if usage else 0
        tokens_output = usage.completion_tokens if usage else 0

        logger.info(
            f"Generated completion: model={self.model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=self.model
        )

    def _error(self, code: str, message: str, exc: Exception, start_time: float) -> LLMClientError:
        """Build and log a structured error for a failed provider call."""
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": self.model,
                "latency_ms": latency_ms,
                "original_error": str(exc),
                "error_type": type(exc).__name__
            }
        )
        logger.error(
            f"{code}: model={self.model}, latency={latency_ms}ms, error={exc}",
            exc_info=exc,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)
