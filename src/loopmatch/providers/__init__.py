"""Provider abstraction for external generation and synthesis services.

This module provides a registry pattern for managing providers,
allowing runtime selection of different backends by name.
"""

from typing import ClassVar

from .base import GenerationProvider, SynthesisProvider
from .elevenlabs import ElevenLabsSynthesisProvider
from .models import SynthesisResult, VoiceSettings
from .openai import OpenAIGenerationProvider

__all__ = [
    "GenerationProvider",
    "ProviderRegistry",
    "SynthesisProvider",
    "SynthesisResult",
    "VoiceSettings",
]

Provider = GenerationProvider | SynthesisProvider


class ProviderRegistry:
    """Registry for managing providers.

    This class maintains a registry of available providers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type[Provider]]] = {}
    _instances: ClassVar[dict[str, Provider]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type[Provider]) -> None:
        """Register a provider.

        Args:
            name: Name to register the provider under
            provider_class: Class implementing GenerationProvider or SynthesisProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type[Provider]:
        """Get a provider class by name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def get_instance(cls, name: str, **kwargs) -> Provider:
        """Get a cached provider instance by name.

        Creates the instance on first call, returns cached instance after,
        so HTTP clients are reused across requests.

        Raises:
            KeyError: If provider name not found
            ProviderAuthError: If the provider has no credentials
        """
        if name not in cls._instances:
            provider_class = cls.get(name)
            cls._instances[name] = provider_class(**kwargs)
        return cls._instances[name]


# Register providers
ProviderRegistry.register("openai", OpenAIGenerationProvider)
ProviderRegistry.register("elevenlabs", ElevenLabsSynthesisProvider)
