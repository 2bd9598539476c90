"""Audio cache gateway and renderer.

All synthesis goes through AudioRenderer, which consults the cache before
calling the paid synthesis provider. Two requests missing the same key at
the same moment may both synthesize; the second write simply overwrites
the first entry's artifact description. That duplicate is accepted rather
than serialising requests behind a lock.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..errors import PersistenceError, ProviderError
from ..providers.base import SynthesisProvider
from ..providers.models import PACES, mp3_silence
from ..store.audio import AudioCacheStore
from ..store.blob import BlobStore
from ..store.content import ContentStore
from ..store.models import AudioCacheEntry, ContentLine
from .keys import derive_cache_key, text_identity

logger = logging.getLogger(__name__)


@dataclass
class RenderMetadata:
    """Description of a freshly synthesized artifact."""

    duration_ms: int
    item_count: int
    voice: str
    pace: str
    spacing_ms: int | None = None
    content_type: str = "audio/mpeg"


@dataclass
class AudioReference:
    """Where a rendered artifact lives, returned to callers.

    Attributes:
        cache_key: Fingerprint the artifact is stored under
        url: Location the audio can be fetched from
        duration_ms: Playback duration
        size_bytes: Artifact size
        cache_hit: True when no synthesis call was made
    """

    cache_key: str
    url: str
    duration_ms: int
    size_bytes: int
    cache_hit: bool

    @classmethod
    def from_entry(cls, entry: AudioCacheEntry, cache_hit: bool) -> "AudioReference":
        return cls(
            cache_key=entry.cache_key,
            url=entry.location,
            duration_ms=entry.duration_ms,
            size_bytes=entry.size_bytes,
            cache_hit=cache_hit,
        )


class CacheGateway:
    """Mediates every read and write of the audio cache.

    An entry only counts as a hit when its artifact still exists in blob
    storage; a dangling entry is reported as a miss and overwritten by the
    next store().
    """

    def __init__(self, store: AudioCacheStore, blobs: BlobStore, bucket: str):
        self.cache_store = store
        self.blobs = blobs
        self.bucket = bucket

    async def lookup(self, cache_key: str) -> AudioCacheEntry | None:
        """Return the cached entry and record the hit, or None on a miss.

        Store errors degrade to a miss rather than failing the request.
        """
        try:
            entry = await asyncio.to_thread(self.cache_store.get, cache_key)
            if entry is None:
                logger.debug(f"Cache miss: {cache_key[:8]}")
                return None

            if not await asyncio.to_thread(self.blobs.exists, entry.bucket, entry.path):
                logger.warning(
                    f"Cache corruption: entry {cache_key[:8]} exists but artifact "
                    f"missing at {entry.bucket}/{entry.path}"
                )
                return None

            entry = await asyncio.to_thread(self.cache_store.touch, cache_key)
        except PersistenceError as e:
            logger.error(f"Error during cache lookup: {e}")
            return None

        if entry is not None:
            logger.info(
                f"Cache hit {cache_key[:8]} ({entry.size_bytes / 1024:.1f} KB, "
                f"accessed {entry.access_count} times)"
            )
        return entry

    async def store(
        self, cache_key: str, audio: bytes, metadata: RenderMetadata
    ) -> AudioCacheEntry:
        """Write the artifact to blob storage and record it under the key.

        Writing an existing key replaces the artifact description and keeps
        its access statistics.

        Raises:
            PersistenceError: If the blob or the entry cannot be written
        """
        path = f"{cache_key}.mp3"
        try:
            location = await asyncio.to_thread(
                self.blobs.put, self.bucket, path, audio, metadata.content_type
            )
        except OSError as e:
            raise PersistenceError(f"Failed to store audio blob {path}: {e}", e) from e

        entry = AudioCacheEntry(
            cache_key=cache_key,
            location=location,
            bucket=self.bucket,
            path=path,
            size_bytes=len(audio),
            duration_ms=metadata.duration_ms,
            item_count=metadata.item_count,
            voice=metadata.voice,
            pace=metadata.pace,
            spacing_ms=metadata.spacing_ms,
        )
        await asyncio.to_thread(self.cache_store.upsert, entry)
        logger.info(f"Saved audio to cache: {cache_key[:8]} ({len(audio) / 1024:.1f} KB)")
        return entry

    async def read(self, cache_key: str) -> bytes:
        """Return the stored artifact bytes for a key.

        Raises:
            PersistenceError: If the artifact cannot be read
        """
        path = f"{cache_key}.mp3"
        try:
            return await asyncio.to_thread(self.blobs.read, self.bucket, path)
        except OSError as e:
            raise PersistenceError(f"Failed to read audio blob {path}: {e}", e) from e


class AudioRenderer:
    """Returns audio for content, synthesizing only on a cache miss."""

    def __init__(
        self,
        gateway: CacheGateway,
        provider: SynthesisProvider | None,
        content_store: ContentStore | None = None,
    ):
        self.gateway = gateway
        self.provider = provider
        self.content_store = content_store

    async def get_or_render_audio(
        self, content: ContentLine | str, voice: str, pace: str
    ) -> AudioReference:
        """Get cached audio for a line or text, rendering it on a miss.

        The cache key uses the canonical text hash, so identical wording
        shares one artifact even across separately stored lines.

        Args:
            content: Stored line or raw text
            voice: Voice to render with
            pace: Speaking pace

        Returns:
            Reference to the cached or newly rendered artifact

        Raises:
            ProviderError: If synthesis is needed and fails or no provider
                is configured
            PersistenceError: If a fresh artifact cannot be stored
            ValueError: If pace is not a known pace
        """
        _check_pace(pace)
        text = content.text if isinstance(content, ContentLine) else content
        cache_key = derive_cache_key(text_identity(text), voice, pace)

        entry = await self.gateway.lookup(cache_key)
        if entry is not None:
            reference = AudioReference.from_entry(entry, cache_hit=True)
        else:
            if self.provider is None:
                raise ProviderError("No synthesis provider configured")

            logger.debug(f"Synthesizing '{text[:50]}' with {voice}/{pace}")
            result = await self.provider.synthesize(text, voice, pace)
            entry = await self.gateway.store(
                cache_key,
                result.audio,
                RenderMetadata(
                    duration_ms=result.duration_ms,
                    item_count=1,
                    voice=voice,
                    pace=pace,
                    content_type=result.content_type,
                ),
            )
            reference = AudioReference.from_entry(entry, cache_hit=False)

        if isinstance(content, ContentLine):
            await self._remember_on_line(content, voice, reference)
        return reference

    async def render_lines(
        self, lines: list[ContentLine | str], voice: str, pace: str
    ) -> list[AudioReference]:
        """Render every line of a session concurrently, in order."""
        return list(
            await asyncio.gather(
                *(self.get_or_render_audio(line, voice, pace) for line in lines)
            )
        )

    async def render_session(
        self, lines: list[ContentLine | str], voice: str, pace: str, spacing_ms: int
    ) -> AudioReference:
        """Get one artifact holding every line in order, rendering it on a miss.

        The key covers the ordered line identities and the spacing, so a
        reordered session or a different gap is a separate artifact. On a
        miss each line goes through get_or_render_audio, so lines already
        cached are not synthesized again, and the line audio is joined with
        spacing_ms of silence between consecutive lines.

        Raises:
            ValueError: If lines is empty, spacing_ms is negative or pace is
                unknown
            ProviderError: If a line needs synthesis and it fails
            PersistenceError: If an artifact cannot be read or stored
        """
        if not lines:
            raise ValueError("a session needs at least one line")
        if spacing_ms < 0:
            raise ValueError("spacing_ms cannot be negative")
        _check_pace(pace)

        texts = [line.text if isinstance(line, ContentLine) else line for line in lines]
        cache_key = derive_cache_key(
            [text_identity(text) for text in texts], voice, pace, spacing_ms
        )

        entry = await self.gateway.lookup(cache_key)
        if entry is not None:
            return AudioReference.from_entry(entry, cache_hit=True)

        references = await self.render_lines(lines, voice, pace)
        gap = mp3_silence(spacing_ms)
        parts = []
        for i, reference in enumerate(references):
            if i:
                parts.append(gap)
            parts.append(await self.gateway.read(reference.cache_key))

        logger.debug(f"Joining {len(lines)} lines into session {cache_key[:8]}")
        entry = await self.gateway.store(
            cache_key,
            b"".join(parts),
            RenderMetadata(
                duration_ms=sum(r.duration_ms for r in references)
                + spacing_ms * (len(lines) - 1),
                item_count=len(lines),
                voice=voice,
                pace=pace,
                spacing_ms=spacing_ms,
            ),
        )
        return AudioReference.from_entry(entry, cache_hit=False)

    async def _remember_on_line(
        self, line: ContentLine, voice: str, reference: AudioReference
    ) -> None:
        if self.content_store is None:
            return
        if line.audio_url == reference.url and line.audio_voice_id == voice:
            return
        try:
            await asyncio.to_thread(
                self.content_store.set_audio_reference,
                line.id,
                voice,
                reference.duration_ms,
                reference.url,
            )
        except PersistenceError as e:
            logger.error(f"Failed to record audio reference on line {line.id}: {e}")


def _check_pace(pace: str) -> None:
    if pace not in PACES:
        raise ValueError(f"pace must be one of {PACES}, got {pace!r}")
