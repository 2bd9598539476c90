"""Content-addressed audio caching for rendered speech."""

from .gateway import AudioReference, AudioRenderer, CacheGateway, RenderMetadata
from .keys import derive_cache_key, line_identity, text_identity

__all__ = [
    "AudioReference",
    "AudioRenderer",
    "CacheGateway",
    "RenderMetadata",
    "derive_cache_key",
    "line_identity",
    "text_identity",
]
