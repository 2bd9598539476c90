"""OpenAI text-generation provider implementation."""

import logging
import os

import openai
from openai import AsyncOpenAI

from ..errors import ProviderAPIError, ProviderAuthError
from .base import GenerationProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIGenerationProvider(GenerationProvider):
    """OpenAI chat-completions provider.

    The client enforces its own timeout; a timed out call surfaces as
    ProviderAPIError like any other failure.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. If not provided, reads from
                    OPENAI_API_KEY environment variable.
            model: Chat model name
            timeout: Per-request timeout in seconds

        Raises:
            ProviderAuthError: If API key is not provided
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise ProviderAuthError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment "
                "variable or provide api_key parameter."
            )

        self.model = model
        self._client = AsyncOpenAI(api_key=self._api_key, timeout=timeout)

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Complete a single user prompt.

        Raises:
            ProviderAuthError: If the key is rejected
            ProviderAPIError: On rate limits, timeouts, server errors or an
                empty completion
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.AuthenticationError as e:
            raise ProviderAuthError(f"Authentication failed: {e}", e) from e
        except openai.RateLimitError as e:
            raise ProviderAPIError(f"Rate limit exceeded: {e}", 429, e) from e
        except openai.APITimeoutError as e:
            raise ProviderAPIError(f"Request timed out: {e}", None, e) from e
        except openai.APIStatusError as e:
            raise ProviderAPIError(f"API call failed: {e}", e.status_code, e) from e
        except openai.OpenAIError as e:
            raise ProviderAPIError(f"API call failed: {e}", None, e) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderAPIError("No completion text received from API")

        logger.debug(f"Completion from {self.model}: {len(content)} chars")
        return content
