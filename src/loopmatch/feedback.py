"""Post-hoc feedback on matching decisions."""

import asyncio
import logging

from .errors import PersistenceError
from .store.content import ContentStore
from .store.models import MatchTier

logger = logging.getLogger(__name__)

BOOST_MIN_RATING = 4
RATING_BOOST = 0.1


async def record_feedback(
    store: ContentStore, log_id: str, rating: float, was_replayed: bool = False
) -> None:
    """Annotate a generation log with a user rating.

    A rating of 4 or more also boosts the content that earned it: every
    pooled line of a pooled decision, or the template of an exact one.

    Args:
        store: Content store holding the log
        log_id: GenerationLog id returned with the match result
        rating: User rating between 1 and 5
        was_replayed: Whether the user replayed the session

    Raises:
        ValueError: If rating is outside 1-5
        KeyError: If no log has the given id
        PersistenceError: If the annotation cannot be written
    """
    if not 1 <= rating <= 5:
        raise ValueError(f"rating must be between 1 and 5, got {rating}")

    log = await asyncio.to_thread(store.get_log, log_id)
    if log is None:
        raise KeyError(f"Generation log '{log_id}' not found")

    await asyncio.to_thread(store.annotate_log, log_id, rating, was_replayed)
    logger.info(f"Feedback on {log_id}: rating={rating}, replayed={was_replayed}")

    if rating < BOOST_MIN_RATING:
        return

    # Boosts are ranking signals only
    try:
        if log.tier is MatchTier.POOLED and log.content_used:
            await asyncio.to_thread(store.boost_lines, log.content_used, RATING_BOOST)
        elif log.tier is MatchTier.EXACT and log.template_id:
            await asyncio.to_thread(store.boost_template, log.template_id, RATING_BOOST)
    except PersistenceError as e:
        logger.error(f"Failed to boost content for log {log_id}: {e}")
