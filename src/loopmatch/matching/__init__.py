"""Tiered matching of user intent to reusable or generated content."""

from .keywords import ThemeExtractor, extract_keywords
from .matcher import Matcher
from .pool import PoolWriter
from .results import (
    ExactResult,
    FallbackResult,
    GeneratedResult,
    MatchResult,
    PooledResult,
    Rejected,
)

__all__ = [
    "ExactResult",
    "FallbackResult",
    "GeneratedResult",
    "MatchResult",
    "Matcher",
    "PoolWriter",
    "PooledResult",
    "Rejected",
    "ThemeExtractor",
    "extract_keywords",
]
