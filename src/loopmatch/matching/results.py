"""Tagged result types for the matching tiers.

Each tier either produces its own result type or a Rejected outcome
carrying the reason it fell through.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from ..store.models import MatchTier


@dataclass(frozen=True)
class Rejected:
    """A tier declined to produce content (not an error)."""

    tier: MatchTier
    reason: str


@dataclass
class MatchResult:
    """Content set chosen for a request.

    Attributes:
        content_texts: Affirmation texts in playback order
        confidence: How well the set matches the intent (0.0-1.0)
        cost: Money spent producing the set
        content_ids: Stored ContentLine ids, when the tier used stored lines
        template_id: TemplateBundle used by an exact match
        log_id: GenerationLog row recording the decision
    """

    tier: ClassVar[MatchTier]

    content_texts: list[str]
    confidence: float
    cost: float
    content_ids: list[str] = field(default_factory=list)
    template_id: str | None = None
    log_id: str | None = None


@dataclass
class ExactResult(MatchResult):
    tier: ClassVar[MatchTier] = MatchTier.EXACT


@dataclass
class PooledResult(MatchResult):
    tier: ClassVar[MatchTier] = MatchTier.POOLED


@dataclass
class GeneratedResult(MatchResult):
    tier: ClassVar[MatchTier] = MatchTier.GENERATED


@dataclass
class FallbackResult(MatchResult):
    tier: ClassVar[MatchTier] = MatchTier.FALLBACK

