"""
Services Module

Business logic for mood-to-keyword extraction and playlist search.
"""

from .keyword_service import KeywordExtractor, build_keyword_prompt, validate_keywords
from .llm_utils import LLMUtils, strip_code_fences
from .playlist_service import PlaylistService, fisher_yates_shuffle

__all__ = [
    "KeywordExtractor",
    "build_keyword_prompt",
    "validate_keywords",
    "LLMUtils",
    "strip_code_fences",
    "PlaylistService",
    "fisher_yates_shuffle",
]
