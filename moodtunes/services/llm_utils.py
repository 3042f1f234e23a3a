"""
Shared LLM Utilities

LLM calling and reply cleanup for Gemini interactions: one place that knows how
to call the model with a timeout and how to turn a fenced reply into JSON.
"""

import asyncio
import json
import re
from typing import Any, Optional

import structlog

from ..errors import AIResponseError, UpstreamAIError

logger = structlog.get_logger(__name__)

# Opening fence with optional language tag, or a bare closing fence
CODE_FENCE_PATTERN = re.compile(r"```[A-Za-z0-9_+-]*")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence delimiters the model may wrap around JSON."""
    return CODE_FENCE_PATTERN.sub("", text).strip()


class LLMUtils:
    """
    Shared utilities for LLM interactions.

    Consolidates:
    - LLM calling with a bounded wait
    - Response cleaning
    - JSON decoding
    """

    def __init__(self, llm_client, timeout: float = 10.0):
        """
        Initialize LLM utilities with client.

        Args:
            llm_client: LLM client (e.g., a Gemini GenerativeModel)
            timeout: Seconds to wait for a reply
        """
        self.llm_client = llm_client
        self.timeout = timeout
        self.logger = logger.bind(component="LLMUtils")

    async def call_llm(self, prompt: str) -> str:
        """
        Call LLM and return raw text response.

        Args:
            prompt: Full prompt text

        Returns:
            Raw LLM response text

        Raises:
            UpstreamAIError: If the LLM call fails, times out or returns no text
        """
        if not self.llm_client:
            raise UpstreamAIError("LLM client not initialized")

        self.logger.debug("Making LLM call", prompt_length=len(prompt))

        try:
            response = await asyncio.wait_for(self._generate(prompt), timeout=self.timeout)
            text = self._extract_text(response)
        except asyncio.TimeoutError:
            self.logger.error("LLM call timed out", timeout=self.timeout)
            raise UpstreamAIError(f"LLM call timed out after {self.timeout}s")
        except UpstreamAIError:
            raise
        except Exception as e:
            self.logger.error("LLM API call failed", error=str(e), error_type=type(e).__name__)
            raise UpstreamAIError(f"LLM call failed: {e}") from e

        self.logger.debug("LLM text response received", response_length=len(text))
        return text

    async def _generate(self, prompt: str) -> Any:
        """Call the async client method when available, else run the sync one in a thread."""
        if hasattr(self.llm_client, "generate_content_async"):
            return await self.llm_client.generate_content_async(prompt)
        return await asyncio.to_thread(self.llm_client.generate_content, prompt)

    def _extract_text(self, response: Any) -> str:
        """Pull the reply text out of a Gemini response object."""
        text: Optional[str] = None
        try:
            text = response.text
        except (AttributeError, ValueError):
            # .text raises ValueError when the candidate was blocked or empty
            candidates = getattr(response, "candidates", None)
            if candidates:
                text = candidates[0].content.parts[0].text

        if not isinstance(text, str):
            raise UpstreamAIError("Unable to extract text from Gemini response")
        return text

    def parse_json_response(self, response_text: str) -> Any:
        """
        Decode a model reply as JSON after removing code fences.

        Args:
            response_text: Raw LLM response text

        Returns:
            Decoded JSON value

        Raises:
            AIResponseError: If the cleaned text is not valid JSON
        """
        cleaned_text = strip_code_fences(response_text)

        try:
            return json.loads(cleaned_text)
        except json.JSONDecodeError as e:
            self.logger.warning(
                "JSON parsing failed",
                error=str(e),
                response_preview=response_text[:300]
            )
            raise AIResponseError(f"Model reply is not valid JSON: {e}") from e
