"""HTTP client the editor uses to reach the completion relay."""
import logging
from typing import Any, Dict, Optional

import httpx

from config import RELAY_URL

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/verify-access-code"
GENERATE_PATH = "/api/generate"


class RelayError(Exception):
    """Raised when the relay cannot be reached or answers with something unusable."""


class RelayClient:
    """Async client for the relay endpoints. No timeout and no retries."""

    def __init__(self, base_url: str = RELAY_URL, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the relay client.

        Args:
            base_url: Relay root URL, used when no client is supplied
            client: Preconfigured httpx.AsyncClient (tests pass one with a mock transport)
        """
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=None)

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def verify_access_code(self, access_code: str) -> bool:
        """
        Ask the relay whether ``access_code`` is valid.

        Raises:
            RelayError: On transport failure or a malformed reply
        """
        data = await self._post(VERIFY_PATH, {"accessCode": access_code})
        success = data.get("success")
        if not isinstance(success, bool):
            raise RelayError(f"Malformed verification response: {data}")
        return success

    async def generate(
        self,
        protagonist: str,
        outline: str,
        author: str,
        story_context: str,
        word_count: Optional[int] = None
    ) -> str:
        """
        Request a continuation of ``story_context``.

        Returns:
            Generated text, stripped

        Raises:
            RelayError: On transport failure, a non-2xx status or a malformed reply
        """
        payload: Dict[str, Any] = {
            "protagonist": protagonist,
            "outline": outline,
            "author": author,
            "storyContext": story_context,
        }
        if word_count is not None:
            payload["wordCount"] = word_count

        data = await self._post(GENERATE_PATH, payload)
        generated_text = data.get("generatedText")
        if not isinstance(generated_text, str):
            raise RelayError(f"Malformed generation response: {data}")
        return generated_text.strip()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Relay returned {e.response.status_code} for {path}: {e.response.text}")
            raise RelayError(f"Relay returned status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Could not reach relay at {path}: {e}")
            raise RelayError(f"Could not reach relay: {e}") from e
        except ValueError as e:
            logger.error(f"Relay sent a non-JSON body for {path}: {e}")
            raise RelayError("Relay sent a non-JSON body") from e

        if not isinstance(data, dict):
            raise RelayError(f"Unexpected relay payload: {data!r}")
        return data
