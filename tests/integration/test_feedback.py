"""Integration tests for post-hoc feedback on matching decisions."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from test_helpers import make_pool_lines

from loopmatch.feedback import record_feedback
from loopmatch.store.content import ContentStore
from loopmatch.store.models import GenerationLog, Goal, MatchTier, TemplateBundle


def add_log(store: ContentStore, tier: MatchTier, content_used: list[str], **kwargs) -> GenerationLog:
    log = GenerationLog(
        intent="calm my racing anxiety",
        goal=Goal.CALM,
        tier=tier,
        content_used=content_used,
        cost=0.0,
        confidence=0.8,
        **kwargs,
    )
    store.add_log(log)
    return log


class TestRecordFeedback:
    """Test rating annotations and content boosts."""

    @pytest.mark.asyncio
    async def test_high_rating_boosts_pooled_lines(self, content_store: ContentStore) -> None:
        """Test a rating of 4 or more boosts every pooled line."""
        lines = make_pool_lines(Goal.CALM, ["calm"], count=2)
        lines[0].rating = None
        content_store.add_lines(lines)
        log = add_log(content_store, MatchTier.POOLED, [line.id for line in lines])

        await record_feedback(content_store, log.id, 5, was_replayed=True)

        stored_log = content_store.get_log(log.id)
        assert stored_log.was_rated is True
        assert stored_log.user_rating == 5
        assert stored_log.was_replayed is True

        unrated, rated = content_store.get_lines([line.id for line in lines])
        assert unrated.rating == pytest.approx(0.1)
        assert unrated.use_count == 1
        assert rated.rating == pytest.approx(min(5.0, lines[1].rating + 0.1))

    @pytest.mark.asyncio
    async def test_high_rating_boosts_exact_template(self, content_store: ContentStore) -> None:
        """Test an exact decision boosts its template."""
        template = TemplateBundle(title="Calm", goal=Goal.CALM, keywords=["calm"], rating=3.0)
        content_store.add_template(template)
        log = add_log(content_store, MatchTier.EXACT, ["a"], template_id=template.id)

        await record_feedback(content_store, log.id, 4)

        stored = content_store.get_template(template.id)
        assert stored.rating == pytest.approx(3.1)
        assert stored.use_count == 1

    @pytest.mark.asyncio
    async def test_low_rating_only_annotates(self, content_store: ContentStore) -> None:
        """Test ratings below 4 are recorded without boosting content."""
        lines = make_pool_lines(Goal.CALM, ["calm"], count=1)
        content_store.add_lines(lines)
        log = add_log(content_store, MatchTier.POOLED, [lines[0].id])

        await record_feedback(content_store, log.id, 3)

        assert content_store.get_log(log.id).user_rating == 3
        assert content_store.get_line(lines[0].id).use_count == 0

    @pytest.mark.asyncio
    async def test_generated_log_has_nothing_to_boost(self, content_store: ContentStore) -> None:
        """Test generated decisions store texts, which are never boosted."""
        log = add_log(content_store, MatchTier.GENERATED, ["I am calm"])

        await record_feedback(content_store, log.id, 5)

        assert content_store.get_log(log.id).was_rated is True

    @pytest.mark.asyncio
    async def test_invalid_rating_raises(self, content_store: ContentStore) -> None:
        """Test ratings outside 1-5 are rejected."""
        log = add_log(content_store, MatchTier.FALLBACK, [])

        with pytest.raises(ValueError, match="between 1 and 5"):
            await record_feedback(content_store, log.id, 0)
        with pytest.raises(ValueError):
            await record_feedback(content_store, log.id, 6)

    @pytest.mark.asyncio
    async def test_unknown_log_raises(self, content_store: ContentStore) -> None:
        """Test feedback on an unknown decision raises KeyError."""
        with pytest.raises(KeyError):
            await record_feedback(content_store, "missing", 5)
