"""
Keyword Extraction Service

Turns a free-text mood description into three Spotify search keywords using
Gemini. The model reply is treated as untrusted input: it must decode to
``{"keywords": [str, str, str]}`` or the call fails with AIResponseError.
"""

from typing import Any, List

import structlog

from ..errors import AIResponseError, ValidationError
from ..models.track_models import KeywordSet
from .llm_utils import LLMUtils

logger = structlog.get_logger(__name__)

KEYWORD_COUNT = 3
MOOD_TEXT_REQUIRED = "Input text is required and must be a non-empty string."

PROMPT_TEMPLATE = """The user gave this mood: "{mood}".
Suggest {count} genres or vibe keywords that would fit for Spotify search.
Respond ONLY in JSON format like: {{"keywords": ["chill", "lofi", "study"]}}
Return exactly {count} short keywords and nothing else."""


def build_keyword_prompt(mood_text: str) -> str:
    """Embed the mood text verbatim in the fixed instruction prompt."""
    return PROMPT_TEMPLATE.format(mood=mood_text, count=KEYWORD_COUNT)


def validate_keywords(parsed: Any) -> List[str]:
    """
    Check the decoded reply has the expected shape.

    Args:
        parsed: Decoded JSON value from the model

    Returns:
        The keywords, trimmed, in model order

    Raises:
        AIResponseError: If the shape is not an object with exactly 3 non-empty strings
    """
    if not isinstance(parsed, dict):
        raise AIResponseError(f"Expected a JSON object, got {type(parsed).__name__}")

    keywords = parsed.get("keywords")
    if not isinstance(keywords, list):
        raise AIResponseError("Reply has no 'keywords' array")

    if len(keywords) != KEYWORD_COUNT:
        raise AIResponseError(f"Expected {KEYWORD_COUNT} keywords, got {len(keywords)}")

    cleaned = []
    for keyword in keywords:
        if not isinstance(keyword, str) or not keyword.strip():
            raise AIResponseError(f"Invalid keyword value: {keyword!r}")
        cleaned.append(keyword.strip())

    return cleaned


class KeywordExtractor:
    """
    Extracts search keywords from a mood description.

    A malformed model reply is a hard error; there is no empty-list fallback.
    """

    def __init__(self, llm_utils: LLMUtils):
        """
        Initialize the keyword extractor.

        Args:
            llm_utils: LLM helper wrapping the Gemini model
        """
        self.llm_utils = llm_utils
        self.logger = logger.bind(service="KeywordExtractor")

    async def extract(self, mood_text: Any) -> KeywordSet:
        """
        Ask the model for keywords matching ``mood_text``.

        Args:
            mood_text: Free-text mood description from the caller

        Returns:
            KeywordSet with exactly three keywords

        Raises:
            ValidationError: If mood_text is not a non-empty string
            UpstreamAIError: If the model call fails
            AIResponseError: If the reply cannot be parsed or has the wrong shape
        """
        if not isinstance(mood_text, str) or not mood_text.strip():
            raise ValidationError(MOOD_TEXT_REQUIRED)

        raw_reply = await self.llm_utils.call_llm(build_keyword_prompt(mood_text))

        try:
            keywords = validate_keywords(self.llm_utils.parse_json_response(raw_reply))
        except AIResponseError as e:
            self.logger.error(
                "Failed to parse JSON from Gemini",
                error=e.message,
                raw_reply=raw_reply[:500]
            )
            raise

        self.logger.info("Keywords extracted", keywords=keywords)
        return KeywordSet(keywords=keywords)
