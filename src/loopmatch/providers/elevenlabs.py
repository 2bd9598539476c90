"""ElevenLabs speech-synthesis provider implementation."""

import asyncio
import logging
import os

from elevenlabs import VoiceSettings as ElevenLabsVoiceSettings
from elevenlabs.client import ElevenLabs

from ..errors import ProviderAPIError, ProviderAuthError
from .base import SynthesisProvider
from .models import SynthesisResult, VoiceSettings, estimate_mp3_duration_ms

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "eleven_multilingual_v2"
OUTPUT_FORMAT = "mp3_44100_128"

# Voice types exposed to callers, mapped to ElevenLabs voice ids
VOICE_IDS = {
    "neutral": "ZqvIIuD5aI9JFejebHiH",  # Mira (F)
    "confident": "xGDJhCwcqw94ypljc95Z",  # Archer (M)
    "premium1": "qxTFXDYbGcR8GaHSjczg",  # James (M)
    "premium2": "BpjGufoPiobT79j2vtj4",  # Priyanka (F)
    "premium3": "eUdJpUEN3EslrgE24PKx",  # Rhea (F)
    "premium4": "7JxUWWyYwXK8kmqmKEnT",  # Chuck (M)
    "premium5": "wdymxIQkYn7MJCYCQF2Q",  # Zara (F)
    "premium6": "zA6D7RyKdc2EClouEMkQ",  # Almee (F)
    "premium7": "KGZeK6FsnWQdrkDHnDNA",  # Kristen (F)
    "premium8": "wgHvco1wiREKN0BdyVx5",  # Drew (M)
}


def _classify_error(e: Exception, action: str) -> Exception:
    """Map an SDK exception onto the provider error taxonomy."""
    status_code = getattr(e, "status_code", None)
    message = str(e)
    if status_code == 401 or "unauthorized" in message.lower():
        return ProviderAuthError(f"Authentication failed: {e}", e)
    if status_code == 429 or "429" in message:
        return ProviderAPIError(f"Rate limit exceeded: {e}", 429, e)
    if status_code is not None and status_code >= 500:
        return ProviderAPIError(f"Server error: {e}", status_code, e)
    return ProviderAPIError(f"{action} failed: {e}", status_code, e)


class ElevenLabsSynthesisProvider(SynthesisProvider):
    """ElevenLabs TTS provider implementation.

    Accepts either a voice type from ``VOICE_IDS`` or a raw ElevenLabs
    voice id.
    """

    def __init__(
        self, api_key: str | None = None, model_id: str = DEFAULT_MODEL_ID
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID to use

        Raises:
            ProviderAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise ProviderAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise ProviderAuthError(
                f"Failed to initialize ElevenLabs client: {e}", e
            ) from e

        self.model_id = model_id
        self._voices_cache: list[dict] | None = None

    async def synthesize(self, text: str, voice: str, pace: str) -> SynthesisResult:
        """Convert text to speech audio.

        Args:
            text: Text to convert to speech
            voice: Voice type (e.g. "neutral") or ElevenLabs voice id
            pace: "slow" or "normal"

        Returns:
            MP3 audio with estimated duration

        Raises:
            ProviderAPIError: If API call fails
            ProviderAuthError: If authentication fails
            ValueError: If text is empty or pace is unknown
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        settings = VoiceSettings.for_pace(pace)
        voice_id = VOICE_IDS.get(voice, voice)

        # Run synchronous ElevenLabs client in thread to avoid blocking event loop
        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=text.strip(),
                voice_id=voice_id,
                model_id=self.model_id,
                output_format=OUTPUT_FORMAT,
                voice_settings=ElevenLabsVoiceSettings(
                    stability=settings.stability,
                    similarity_boost=settings.similarity_boost,
                    speed=settings.speed,
                ),
            )
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise _classify_error(e, "Synthesis") from e

        if not audio_bytes:
            raise ProviderAPIError("No audio data received from API")

        logger.debug(
            f"Synthesized {len(audio_bytes)} bytes with voice {voice} at {pace} pace"
        )
        return SynthesisResult(
            audio=audio_bytes, duration_ms=estimate_mp3_duration_ms(audio_bytes)
        )

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            return [
                {"id": v.voice_id, "name": v.name, "provider": "elevenlabs"}
                for v in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _classify_error(e, "Listing voices") from e

        self._voices_cache = voices
        return voices
