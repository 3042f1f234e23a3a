"""
Tests for KeywordExtractor and the shared LLM utilities.

The Gemini model is a Mock whose ``generate_content_async`` returns objects
with a ``text`` attribute, like the real SDK response.
"""

import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest

from moodtunes.errors import AIResponseError, UpstreamAIError, ValidationError
from moodtunes.services.keyword_service import (
    KeywordExtractor,
    build_keyword_prompt,
    validate_keywords,
)
from moodtunes.services.llm_utils import LLMUtils, strip_code_fences


def gemini_reply(text):
    response = Mock()
    response.text = text
    return response


@pytest.fixture
def mock_gemini_client():
    client = Mock()
    client.generate_content_async = AsyncMock(
        return_value=gemini_reply('{"keywords": ["lofi", "chill", "study"]}')
    )
    return client


@pytest.fixture
def extractor(mock_gemini_client):
    return KeywordExtractor(LLMUtils(mock_gemini_client, timeout=1.0))


class TestStripCodeFences:
    """Reply cleanup."""

    @pytest.mark.parametrize("raw", [
        '```json\n{"keywords": []}\n```',
        '```\n{"keywords": []}\n```',
        '```JSON {"keywords": []} ```',
        '  {"keywords": []}  ',
    ])
    def test_strips_fences(self, raw):
        assert strip_code_fences(raw) == '{"keywords": []}'


class TestPrompt:
    """Prompt construction."""

    def test_embeds_mood_verbatim(self):
        prompt = build_keyword_prompt('rainy "focus" day')

        assert 'The user gave this mood: "rainy "focus" day".' in prompt

    def test_requests_json_keywords(self):
        prompt = build_keyword_prompt("happy")

        assert '{"keywords": ["chill", "lofi", "study"]}' in prompt
        assert "3" in prompt


class TestValidateKeywords:
    """Shape validation of the decoded reply."""

    def test_trims_keywords(self):
        assert validate_keywords({"keywords": [" lofi ", "chill", "study"]}) == ["lofi", "chill", "study"]

    @pytest.mark.parametrize("parsed", [
        ["lofi", "chill", "study"],
        {"genres": ["lofi", "chill", "study"]},
        {"keywords": "lofi, chill, study"},
        {"keywords": ["lofi", "chill"]},
        {"keywords": ["lofi", "chill", "study", "jazz"]},
        {"keywords": ["lofi", 7, "study"]},
        {"keywords": ["lofi", "  ", "study"]},
    ])
    def test_rejects_wrong_shape(self, parsed):
        with pytest.raises(AIResponseError):
            validate_keywords(parsed)


class TestKeywordExtractor:
    """End-to-end extraction with a mocked model."""

    @pytest.mark.asyncio
    async def test_plain_json_reply(self, extractor):
        keyword_set = await extractor.extract("rainy focus")

        assert keyword_set.keywords == ["lofi", "chill", "study"]

    @pytest.mark.asyncio
    async def test_fenced_reply(self, extractor, mock_gemini_client):
        """Code-fenced replies are unwrapped before parsing."""
        mock_gemini_client.generate_content_async.return_value = gemini_reply(
            '```json\n{"keywords":["lofi","chill","study"]}\n```'
        )

        keyword_set = await extractor.extract("rainy focus")

        assert keyword_set.to_dict() == {"keywords": ["lofi", "chill", "study"]}

    @pytest.mark.asyncio
    async def test_prompt_sent_to_model(self, extractor, mock_gemini_client):
        await extractor.extract("sunny road trip")

        prompt = mock_gemini_client.generate_content_async.call_args[0][0]
        assert prompt == build_keyword_prompt("sunny road trip")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mood", ["", "   \n", None, 12, {"text": "happy"}])
    async def test_invalid_mood_text(self, extractor, mock_gemini_client, mood):
        """Invalid input is rejected before the model is called."""
        with pytest.raises(ValidationError) as exc_info:
            await extractor.extract(mood)

        assert exc_info.value.status_code == 400
        mock_gemini_client.generate_content_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, extractor, mock_gemini_client):
        mock_gemini_client.generate_content_async.return_value = gemini_reply(
            "Sure! Here are some keywords: lofi, chill, study"
        )

        with pytest.raises(AIResponseError) as exc_info:
            await extractor.extract("rainy focus")

        assert exc_info.value.public_message == "Failed to process AI response."

    @pytest.mark.asyncio
    async def test_wrong_keyword_count(self, extractor, mock_gemini_client):
        mock_gemini_client.generate_content_async.return_value = gemini_reply(
            json.dumps({"keywords": ["lofi"]})
        )

        with pytest.raises(AIResponseError):
            await extractor.extract("rainy focus")

    @pytest.mark.asyncio
    async def test_model_failure(self, extractor, mock_gemini_client):
        mock_gemini_client.generate_content_async.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(UpstreamAIError) as exc_info:
            await extractor.extract("rainy focus")

        assert exc_info.value.public_message == "Gemini error"


class TestLLMUtils:
    """Model calling details."""

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow_reply(prompt):
            await asyncio.sleep(1)
            return gemini_reply("{}")

        client = Mock()
        client.generate_content_async = slow_reply

        with pytest.raises(UpstreamAIError):
            await LLMUtils(client, timeout=0.01).call_llm("hello")

    @pytest.mark.asyncio
    async def test_sync_client_fallback(self):
        """Clients without an async method are called in a worker thread."""
        class SyncClient:
            def generate_content(self, prompt):
                return gemini_reply(f"echo: {prompt}")

        assert await LLMUtils(SyncClient()).call_llm("hi") == "echo: hi"

    @pytest.mark.asyncio
    async def test_missing_client(self):
        with pytest.raises(UpstreamAIError):
            await LLMUtils(None).call_llm("hi")

    @pytest.mark.asyncio
    async def test_blocked_response_without_text(self, mock_gemini_client):
        class BlockedResponse:
            candidates = []

            @property
            def text(self):
                raise ValueError("response was blocked")

        mock_gemini_client.generate_content_async.return_value = BlockedResponse()

        with pytest.raises(UpstreamAIError):
            await LLMUtils(mock_gemini_client).call_llm("hi")

    def test_parse_json_response_invalid(self):
        with pytest.raises(AIResponseError):
            LLMUtils(Mock()).parse_json_response("```json\nnot json\n```")
