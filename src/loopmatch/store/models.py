"""Data models for the content store and audio cache store."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Goal(str, Enum):
    """Wellness goal category shared by lines, templates and logs."""

    SLEEP = "sleep"
    FOCUS = "focus"
    CALM = "calm"
    MANIFEST = "manifest"


class MatchTier(str, Enum):
    """Strategy that produced a content set, in evaluation order."""

    EXACT = "exact"
    POOLED = "pooled"
    GENERATED = "generated"
    FALLBACK = "fallback"


def new_id() -> str:
    """Generate a stable record id."""
    return uuid.uuid4().hex


def normalize_text(text: str) -> str:
    """Collapse internal whitespace and strip the ends of a content line."""
    return " ".join(text.split())


@dataclass
class ContentLine:
    """A single candidate affirmation.

    Text is never edited in place; a changed wording is a new line so that
    audio cache keys derived from the line stay valid.

    Attributes:
        text: Normalized affirmation text
        goal: Goal category the line was written for
        tags: Free-form theme tags used by pooled matching
        emotion: Optional single emotion label
        use_count: Advisory selection counter used for ranking
        rating: Optional user rating between 0.0 and 5.0
        audio_voice_id: Voice of the last rendered audio for this line
        audio_duration_ms: Duration of the last rendered audio
        audio_url: Location of the last rendered audio
        id: Stable identifier
        created_at: When the line was stored
    """

    text: str
    goal: Goal
    tags: list[str] = field(default_factory=list)
    emotion: str | None = None
    use_count: int = 0
    rating: float | None = None
    audio_voice_id: str | None = None
    audio_duration_ms: int | None = None
    audio_url: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Normalize text and validate the rating range."""
        self.text = normalize_text(self.text)
        if not self.text:
            raise ValueError("text cannot be empty")
        self.goal = Goal(self.goal)
        if self.rating is not None and not 0.0 <= self.rating <= 5.0:
            raise ValueError("rating must be between 0.0 and 5.0")


@dataclass
class TemplateBundle:
    """A curated, named set of ContentLine references.

    Attributes:
        title: Display title
        goal: Goal category
        keywords: Intent keywords matched against request keywords
        affirmation_ids: Ordered ContentLine ids making up the session
        use_count: Advisory selection counter
        rating: Optional user rating
        is_default: Whether this is a built-in default for its goal
        ambient_category: Optional ambient-sound category
        ambient_hz: Optional ambient-sound frequency label
    """

    title: str
    goal: Goal
    keywords: list[str] = field(default_factory=list)
    affirmation_ids: list[str] = field(default_factory=list)
    use_count: int = 0
    rating: float | None = None
    is_default: bool = False
    ambient_category: str | None = None
    ambient_hz: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.goal = Goal(self.goal)
        self.keywords = [k.lower() for k in self.keywords]


@dataclass
class GenerationLog:
    """Append-only audit record of one matching decision.

    content_used holds ContentLine ids when the tier selected stored lines,
    otherwise the produced texts.
    """

    intent: str
    goal: Goal
    tier: MatchTier
    content_used: list[str]
    cost: float
    confidence: float
    user_id: str | None = None
    template_id: str | None = None
    session_id: str | None = None
    was_rated: bool = False
    user_rating: float | None = None
    was_replayed: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.goal = Goal(self.goal)
        self.tier = MatchTier(self.tier)


@dataclass
class AudioCacheEntry:
    """Maps a cache key to a rendered audio artifact.

    Attributes:
        cache_key: Deterministic fingerprint of the rendered inputs
        location: URL where the artifact can be fetched
        bucket: Blob storage bucket holding the artifact
        path: Path of the artifact inside the bucket
        size_bytes: Artifact size
        duration_ms: Audio duration
        item_count: Number of content lines rendered into the artifact
        voice: Voice used for synthesis
        pace: Pace used for synthesis
        spacing_ms: Silence between lines for multi-line renders
        access_count: Number of cache hits served
        last_accessed_at: Time of the most recent hit (or creation)
        created_at: When the entry was first written
    """

    cache_key: str
    location: str
    bucket: str
    path: str
    size_bytes: int
    duration_ms: int
    item_count: int
    voice: str
    pace: str
    spacing_ms: int | None = None
    access_count: int = 0
    last_accessed_at: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)
