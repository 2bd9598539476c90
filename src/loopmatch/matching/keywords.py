"""Keyword and theme extraction from free-text intent."""

import logging

from ..config import GenerationConfig
from ..errors import ProviderError
from ..providers.base import GenerationProvider
from .prompts import theme_prompt

logger = logging.getLogger(__name__)

KEYWORD_STOP_WORDS = frozenset({"help", "want", "need", "feel", "make", "get", "have"})
MIN_KEYWORD_LENGTH = 4


def extract_keywords(text: str) -> list[str]:
    """Lexical keywords: lowercased words longer than 3 chars minus stop words.

    Always available and never fails. Duplicates are removed, keeping the
    first occurrence order.
    """
    words = [
        word
        for word in text.lower().split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in KEYWORD_STOP_WORDS
    ]
    return list(dict.fromkeys(words))


def parse_themes(response: str) -> list[str]:
    return [t.strip().lower() for t in response.split(",") if t.strip()]


class ThemeExtractor:
    """Semantic theme extraction backed by the generation provider.

    Falls back to lexical keywords when no provider is configured, the
    provider call fails, or the response holds no themes.
    """

    def __init__(
        self,
        provider: GenerationProvider | None,
        config: GenerationConfig | None = None,
    ):
        self.provider = provider
        self.config = config or GenerationConfig()

    async def extract_themes(self, text: str) -> list[str]:
        """Return 3-5 themes for the intent, or lexical keywords on failure.

        Costs one billed provider call when a provider is configured.
        """
        if self.provider is None:
            return extract_keywords(text)

        try:
            response = await self.provider.complete(
                theme_prompt(text),
                temperature=self.config.theme_temperature,
                max_tokens=self.config.theme_max_tokens,
            )
        except ProviderError as e:
            logger.warning(f"Theme extraction failed, using keywords: {e}")
            return extract_keywords(text)

        themes = parse_themes(response)
        if not themes:
            logger.warning(f"Malformed theme response {response[:50]!r}, using keywords")
            return extract_keywords(text)

        logger.debug(f"Extracted themes {themes} from '{text[:50]}'")
        return themes
