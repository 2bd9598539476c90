"""Abstract base classes for external generation and synthesis providers.

Both kinds of provider are billed per call and slow (seconds), so callers
must consult the caches and stores before invoking them.
"""

from abc import ABC, abstractmethod

from .models import SynthesisResult


class GenerationProvider(ABC):
    """Abstract base class for text-generation providers."""

    @abstractmethod
    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Complete a single-turn prompt.

        Args:
            prompt: User prompt text
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Completion text

        Raises:
            ProviderError: If the call fails, times out or returns nothing
        """
        pass


class SynthesisProvider(ABC):
    """Abstract base class for speech-synthesis providers.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "elevenlabs")
        }
    """

    @abstractmethod
    async def synthesize(self, text: str, voice: str, pace: str) -> SynthesisResult:
        """Convert text to audio.

        Args:
            text: The text to convert to speech
            voice: Voice type or provider voice id
            pace: Speaking pace ("slow" or "normal")

        Returns:
            Audio bytes with their duration

        Raises:
            ProviderError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        pass
