"""Pure scoring and selection functions behind the matching tiers.

These heuristics are calibrated against the cost-savings targets; keep the
arithmetic as is when changing the surrounding code.
"""

import re
from collections.abc import Sequence
from typing import TypeVar

from ..store.models import ContentLine, TemplateBundle

DIVERSITY_STOP_WORDS = frozenset({"that", "this", "with", "from", "into", "have", "been"})
MIN_DIVERSITY_WORD_LENGTH = 5
MAX_SHARED_WORDS = 3

NUMBERED_LINE = re.compile(r"^\d+[.)]")
BULLETED_LINE = re.compile(r"^[•\-*]")

T = TypeVar("T", bound=ContentLine)


def template_similarity(intent_keywords: Sequence[str], template_keywords: Sequence[str]) -> float:
    """Share of keywords in common, relative to the larger keyword set."""
    denominator = max(len(intent_keywords), len(template_keywords))
    if denominator == 0:
        return 0.0
    template_lower = {k.lower() for k in template_keywords}
    common = [k for k in intent_keywords if k.lower() in template_lower]
    return len(common) / denominator


def best_template(
    intent_keywords: Sequence[str], templates: Sequence[TemplateBundle]
) -> tuple[TemplateBundle, float] | None:
    """Pick the most similar template; ties keep the store's ranking order."""
    best: tuple[TemplateBundle, float] | None = None
    for template in templates:
        similarity = template_similarity(intent_keywords, template.keywords)
        if best is None or similarity > best[1]:
            best = (template, similarity)
    return best


def diversity_tokens(text: str) -> list[str]:
    """Meaningful words of a line: longer than 4 chars, minus stop words."""
    return [
        word
        for word in text.lower().split()
        if len(word) >= MIN_DIVERSITY_WORD_LENGTH and word not in DIVERSITY_STOP_WORDS
    ]


def select_diverse(candidates: Sequence[T], min_count: int, max_count: int) -> list[T]:
    """Greedily pick candidates that repeat few words already selected.

    A candidate is accepted when fewer than three of its tokens are already
    in the used-word set. Selection stops at ``max_count``; fewer than
    ``min_count`` accepted candidates yields an empty list.
    """
    selected: list[T] = []
    used_words: set[str] = set()

    for candidate in candidates:
        words = diversity_tokens(candidate.text)
        overlap = sum(1 for w in words if w in used_words)
        if overlap < MAX_SHARED_WORDS:
            selected.append(candidate)
            used_words.update(words)
            if len(selected) >= max_count:
                break

    return selected if len(selected) >= min_count else []


def theme_confidence(themes: Sequence[str], lines: Sequence[ContentLine]) -> float:
    """Fraction of themes covered by any selected line's tags or emotion.

    A theme is covered when it is a case-insensitive substring of a tag, or
    a tag is a substring of it.
    """
    if not themes:
        return 0.5

    labels = [tag.lower() for line in lines for tag in line.tags]
    labels += [line.emotion.lower() for line in lines if line.emotion]

    covered = [
        theme
        for theme in themes
        if any(theme.lower() in label or label in theme.lower() for label in labels)
    ]
    return len(covered) / len(themes)


def parse_generated_lines(text: str, max_lines: int) -> list[str]:
    """Split a completion into usable lines, dropping list markers."""
    lines = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line or NUMBERED_LINE.match(line) or BULLETED_LINE.match(line):
            continue
        lines.append(line)
    return lines[:max_lines]
