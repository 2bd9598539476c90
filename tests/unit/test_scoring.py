"""Unit tests for the matching score and selection functions."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from loopmatch.matching.scoring import (
    best_template,
    diversity_tokens,
    parse_generated_lines,
    select_diverse,
    template_similarity,
    theme_confidence,
)
from loopmatch.store.models import ContentLine, Goal, TemplateBundle


def line(text: str, tags: list[str] | None = None, emotion: str | None = None) -> ContentLine:
    return ContentLine(text=text, goal=Goal.CALM, tags=tags or [], emotion=emotion)


class TestTemplateSimilarity:
    """Test keyword similarity between an intent and a template."""

    def test_full_overlap(self) -> None:
        """Test identical keyword sets score 1.0."""
        assert template_similarity(["sleep", "rest"], ["rest", "sleep"]) == 1.0

    def test_relative_to_larger_set(self) -> None:
        """Test the denominator is the larger of the two sets."""
        assert template_similarity(["sleep"], ["sleep", "relax", "rest"]) == 1 / 3
        assert template_similarity(["sleep", "deep", "night", "tired"], ["sleep"]) == 0.25

    def test_case_insensitive(self) -> None:
        """Test template keywords match regardless of case."""
        assert template_similarity(["sleep"], ["SLEEP"]) == 1.0

    def test_empty_sets(self) -> None:
        """Test empty keyword sets score zero."""
        assert template_similarity([], []) == 0.0
        assert template_similarity([], ["sleep"]) == 0.0

    def test_best_template_keeps_first_of_ties(self) -> None:
        """Test ties are resolved in favour of the earlier ranked template."""
        first = TemplateBundle(title="A", goal=Goal.SLEEP, keywords=["sleep", "rest"])
        second = TemplateBundle(title="B", goal=Goal.SLEEP, keywords=["sleep", "calm"])
        third = TemplateBundle(title="C", goal=Goal.SLEEP, keywords=["focus"])

        template, similarity = best_template(["sleep"], [first, second, third])

        assert template is first
        assert similarity == 0.5

    def test_best_template_none_when_empty(self) -> None:
        """Test no candidates yields None."""
        assert best_template(["sleep"], []) is None


class TestDiversity:
    """Test greedy diverse selection."""

    def test_tokens_skip_short_and_stop_words(self) -> None:
        """Test tokens are words of five or more chars minus stop words."""
        assert diversity_tokens("I breathe with calm into peaceful stillness") == [
            "breathe",
            "peaceful",
            "stillness",
        ]

    def test_rejects_lines_sharing_three_words(self) -> None:
        """Test a candidate repeating three used words is skipped."""
        candidates = [
            line("gentle peaceful quiet evening"),
            line("gentle peaceful quiet morning"),
            line("gentle peaceful bright morning"),
        ]

        selected = select_diverse(candidates, 1, 10)

        assert [c.text for c in selected] == [
            "gentle peaceful quiet evening",
            "gentle peaceful bright morning",
        ]

    def test_accepts_lines_sharing_two_words(self) -> None:
        """Test two repeated words are still considered diverse."""
        candidates = [line("gentle peaceful evening"), line("gentle peaceful morning")]

        assert len(select_diverse(candidates, 2, 10)) == 2

    def test_stops_at_max(self) -> None:
        """Test selection stops once max_count lines are accepted."""
        candidates = [line(f"unique{i} words{i}") for i in range(12)]

        selected = select_diverse(candidates, 6, 10)

        assert len(selected) == 10
        assert selected == candidates[:10]

    def test_below_min_returns_empty(self) -> None:
        """Test fewer accepted lines than min_count yields nothing."""
        candidates = [line("gentle peaceful quiet")] * 8

        assert select_diverse(candidates, 6, 10) == []


class TestThemeConfidence:
    """Test theme coverage scoring."""

    def test_fraction_of_covered_themes(self) -> None:
        """Test confidence is covered themes over all themes."""
        lines = [line("x", tags=["anxiety", "racing"])]

        assert theme_confidence(["calm", "racing", "anxiety"], lines) == 2 / 3

    def test_substring_either_direction(self) -> None:
        """Test themes match tags containing them and tags contained in them."""
        lines = [line("x", tags=["Restful"]), line("y", tags=["mind"])]

        assert theme_confidence(["rest", "racing mind"], lines) == 1.0

    def test_emotion_counts_as_label(self) -> None:
        """Test the emotion label covers themes too."""
        lines = [line("x", emotion="Gratitude")]

        assert theme_confidence(["gratitude"], lines) == 1.0

    def test_no_themes(self) -> None:
        """Test empty themes give neutral confidence."""
        assert theme_confidence([], [line("x", tags=["calm"])]) == 0.5


class TestParseGeneratedLines:
    """Test parsing of generated completions."""

    def test_drops_numbered_and_bulleted_lines(self) -> None:
        """Test list-formatted lines and blanks are dropped."""
        text = "I am calm\n\n1. numbered\n2) also numbered\n- dash\n* star\n• bullet\n  I am safe  "

        assert parse_generated_lines(text, 10) == ["I am calm", "I am safe"]

    def test_truncates_to_max(self) -> None:
        """Test output is capped at max_lines."""
        text = "\n".join(f"I am line {i}" for i in range(15))

        assert len(parse_generated_lines(text, 10)) == 10
