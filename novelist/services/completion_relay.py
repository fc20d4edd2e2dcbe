"""Completion relay: access-code check and prompt forwarding to the LLM."""
import hmac
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from config import NOVELIST_ACCESS_CODE, DEFAULT_WORD_COUNT, TOKENS_PER_WORD, CONTEXT_WINDOW_WORDS
from services.llm_client import LLMClient

logger = logging.getLogger(__name__)

SENTENCE_END_PATTERN = re.compile(r"[.!?]\s*$")

CAPITAL_START = "Your response shall start with a capital letter."
LOWERCASE_START = "Your response shall start with a lowercase letter, unless it is a person's name."


@dataclass
class CompletionResult:
    """Trimmed continuation plus the figures that produced it."""
    text: str
    word_count: int
    max_tokens: int
    prompt_tokens: Optional[int] = None


class CompletionRelay:
    """Stateless pass-through from the editor to the text-generation provider."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        access_code: Optional[str] = None,
        token_encoder=None
    ):
        """
        Initialize the relay.

        Args:
            llm_client: Provider client; generation fails while it is None
            access_code: Secret to compare against (defaults to NOVELIST_ACCESS_CODE)
            token_encoder: Optional tiktoken encoding used to log prompt size
        """
        self.llm_client = llm_client
        self.access_code = access_code if access_code is not None else NOVELIST_ACCESS_CODE
        self.token_encoder = token_encoder

        if not self.access_code:
            logger.warning("NOVELIST_ACCESS_CODE is not set; every access code will be rejected")

    def verify_access_code(self, code: Any) -> bool:
        """
        Compare a submitted code against the configured secret.

        No partial-match feedback is given and a missing secret rejects
        everything, so callers cannot tell a wrong code from a misconfigured
        server. Values that are not strings never match.
        """
        if not isinstance(code, str) or not code or not self.access_code:
            return False
        return hmac.compare_digest(code.encode("utf-8"), self.access_code.encode("utf-8"))

    @staticmethod
    def capitalization_instruction(story_context: str) -> str:
        """Directive telling the model how to capitalize its first word."""
        if SENTENCE_END_PATTERN.search(story_context or ""):
            return CAPITAL_START
        return LOWERCASE_START

    @staticmethod
    def effective_word_count(word_count: Optional[int]) -> int:
        # Missing and zero both fall back to the default
        return word_count or DEFAULT_WORD_COUNT

    @staticmethod
    def trim_to_words(text: str, word_count: int) -> str:
        """Keep at most ``word_count`` whitespace-delimited words."""
        return " ".join(text.split()[:word_count]).strip()

    @staticmethod
    def build_prompt(
        protagonist: str,
        outline: str,
        author: str,
        story_context: str
    ) -> str:
        """
        Build the continuation prompt.

        Args:
            protagonist: Protagonist description
            outline: Story outline
            author: Author whose tone and style should be imitated
            story_context: Trailing words of the manuscript before the cursor

        Returns:
            Complete prompt string
        """
        instruction = CompletionRelay.capitalization_instruction(story_context)

        prompt = f"""Continue or complete the last sentence of the story based on the context provided and your understanding. The context includes the last {CONTEXT_WINDOW_WORDS} words of the story so far.

Ensure your continuation:

- Logically follows from the context.
- Is coherent with the protagonist's characteristics and the story outline.
- Adheres to the tone and style of {author}.
- Avoids repeating any previous content.

Start with the appropriate capitalization as instructed.

Protagonist: {protagonist}

Story Outline: {outline}

Context (last {CONTEXT_WINDOW_WORDS} words of the story so far):

"{story_context}"

{instruction}
"""

        return prompt

    def generate(
        self,
        protagonist: str,
        outline: str,
        author: str,
        story_context: str,
        word_count: Optional[int] = None
    ) -> CompletionResult:
        """
        Generate a continuation trimmed to the requested number of words.

        Raises:
            RuntimeError: If no provider client is configured
            LLMClientError: If the provider call fails
        """
        if self.llm_client is None:
            raise RuntimeError("No LLM client configured; set GROQ_API_KEY")

        requested_words = self.effective_word_count(word_count)
        max_tokens = requested_words * TOKENS_PER_WORD

        prompt = self.build_prompt(protagonist, outline, author, story_context)
        logger.debug(f"Completion prompt:\n{prompt}")

        prompt_tokens = None
        if self.token_encoder is not None:
            prompt_tokens = len(self.token_encoder.encode(prompt))
            logger.info(f"Prompt size: {prompt_tokens} tokens, budget {max_tokens} tokens")

        response = self.llm_client.generate(prompt=prompt, max_tokens=max_tokens)
        text = self.trim_to_words(response.text, requested_words)

        logger.info(f"Returning {len(text.split())}/{requested_words} words")
        return CompletionResult(
            text=text,
            word_count=requested_words,
            max_tokens=max_tokens,
            prompt_tokens=prompt_tokens
        )
