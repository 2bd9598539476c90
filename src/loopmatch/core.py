"""Core functionality for loopmatch - wires stores, providers and the matcher."""

import logging
from dataclasses import dataclass

from .audio.gateway import AudioReference, AudioRenderer, CacheGateway
from .config import EngineConfig, load_config
from .errors import ProviderAuthError
from .feedback import record_feedback
from .matching.matcher import Matcher
from .matching.pool import PoolWriter
from .matching.results import MatchResult
from .providers import ProviderRegistry
from .providers.base import GenerationProvider, SynthesisProvider
from .store.audio import AudioCacheStore
from .store.blob import BlobStore, LocalBlobStore
from .store.content import ContentStore
from .store.models import ContentLine, Goal

logger = logging.getLogger(__name__)


def _generation_provider(config: EngineConfig) -> GenerationProvider | None:
    """Instantiate the configured generation provider, if credentials exist."""
    generation = config.generation
    try:
        return ProviderRegistry.get_instance(
            generation.provider,
            model=generation.model,
            timeout=generation.timeout_seconds,
        )
    except ProviderAuthError as e:
        logger.warning(f"Generation disabled, falling back to keywords and fixed lines: {e}")
        return None


def _synthesis_provider(config: EngineConfig) -> SynthesisProvider | None:
    try:
        return ProviderRegistry.get_instance(config.tts.provider)
    except ProviderAuthError as e:
        logger.warning(f"Synthesis disabled, only cached audio is available: {e}")
        return None


@dataclass
class Engine:
    """The content-reuse engine and its collaborators."""

    config: EngineConfig
    content_store: ContentStore
    audio_store: AudioCacheStore
    matcher: Matcher
    pool_writer: PoolWriter
    gateway: CacheGateway
    renderer: AudioRenderer

    @classmethod
    def from_config(
        cls,
        config: EngineConfig | None = None,
        generation_provider: GenerationProvider | None = None,
        synthesis_provider: SynthesisProvider | None = None,
        blobs: BlobStore | None = None,
    ) -> "Engine":
        """Build an engine, creating providers from the registry when not given.

        Args:
            config: Engine configuration (loaded from disk when None)
            generation_provider: Overrides the configured generation provider
            synthesis_provider: Overrides the configured synthesis provider
            blobs: Overrides the local filesystem blob store
        """
        config = config or load_config()
        storage = config.storage

        content_store = ContentStore(storage.content_db)
        audio_store = AudioCacheStore(storage.audio_db)
        blobs = blobs or LocalBlobStore(storage.blob_dir)

        if generation_provider is None:
            generation_provider = _generation_provider(config)
        if synthesis_provider is None:
            synthesis_provider = _synthesis_provider(config)

        matcher = Matcher(content_store, config, generation_provider)
        pool_writer = PoolWriter(content_store, matcher.extractor)
        matcher.pool_writer = pool_writer

        gateway = CacheGateway(audio_store, blobs, storage.audio_bucket)
        renderer = AudioRenderer(gateway, synthesis_provider, content_store)

        logger.info(f"Engine initialized at {storage.data_dir}")
        return cls(
            config=config,
            content_store=content_store,
            audio_store=audio_store,
            matcher=matcher,
            pool_writer=pool_writer,
            gateway=gateway,
            renderer=renderer,
        )

    async def match_or_generate(
        self,
        intent: str,
        goal: Goal,
        user_id: str | None = None,
        is_first_session: bool = False,
    ) -> MatchResult:
        return await self.matcher.match_or_generate(intent, goal, user_id, is_first_session)

    async def get_or_render_audio(
        self, content: ContentLine | str, voice: str | None = None, pace: str | None = None
    ) -> AudioReference:
        """Render with the configured voice and pace unless overridden."""
        return await self.renderer.get_or_render_audio(
            content, voice or self.config.tts.voice, pace or self.config.tts.pace
        )

    async def render_session(
        self,
        lines: list[ContentLine | str],
        voice: str | None = None,
        pace: str | None = None,
        spacing_ms: int | None = None,
    ) -> AudioReference:
        """Render a whole session as one artifact, using config defaults."""
        return await self.renderer.render_session(
            lines,
            voice or self.config.tts.voice,
            pace or self.config.tts.pace,
            self.config.tts.spacing_ms if spacing_ms is None else spacing_ms,
        )

    async def record_feedback(
        self, log_id: str, rating: float, was_replayed: bool = False
    ) -> None:
        await record_feedback(self.content_store, log_id, rating, was_replayed)

    def cost_summary(self) -> dict:
        return self.content_store.cost_summary(self.config.costs.generated)

    async def close(self) -> None:
        """Wait for background pool writes to finish."""
        await self.pool_writer.close()
