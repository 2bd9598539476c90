"""Durable stores for content, audio cache metadata and audio bytes."""

from .audio import AudioCacheStore
from .blob import BlobStore, LocalBlobStore
from .content import ContentStore
from .models import (
    AudioCacheEntry,
    ContentLine,
    GenerationLog,
    Goal,
    MatchTier,
    TemplateBundle,
)

__all__ = [
    "AudioCacheEntry",
    "AudioCacheStore",
    "BlobStore",
    "ContentLine",
    "ContentStore",
    "GenerationLog",
    "Goal",
    "LocalBlobStore",
    "MatchTier",
    "TemplateBundle",
]
