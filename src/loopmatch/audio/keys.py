"""Deterministic cache keys for rendered audio."""

import hashlib
import json
from collections.abc import Sequence

from ..store.models import normalize_text


def text_identity(text: str) -> str:
    """Content identity of a line's text, stable under whitespace changes."""
    digest = hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()
    return f"text:{digest}"


def line_identity(line_id: str) -> str:
    """Content identity of a stored ContentLine."""
    return f"line:{line_id}"


def derive_cache_key(
    content: str | Sequence[str],
    voice: str,
    pace: str,
    spacing_ms: int | None = None,
) -> str:
    """Fingerprint every input that changes the rendered bytes.

    Multi-line renders pass their identities in playback order together
    with the silence between lines; order is significant.

    Args:
        content: One content identity, or an ordered sequence of them
        voice: Voice used for synthesis
        pace: Speaking pace
        spacing_ms: Silence between lines for multi-line renders

    Returns:
        64-character SHA-256 hex digest

    Raises:
        ValueError: If content, voice or pace is missing
    """
    if content is None or voice is None or pace is None:
        raise ValueError("All parameters (content, voice, pace) must be non-None")
    if not content or not voice or not pace:
        raise ValueError("content, voice and pace must be non-empty")

    payload = {
        "content": content if isinstance(content, str) else list(content),
        "voice": voice,
        "pace": pace,
        "spacing_ms": spacing_ms,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
