"""Pool writer: feeds freshly generated lines back into the content pool."""

import asyncio
import logging
from dataclasses import dataclass

from ..store.content import ContentStore
from ..store.models import ContentLine, Goal
from .keywords import ThemeExtractor

logger = logging.getLogger(__name__)

DEFAULT_EMOTION = "general"


@dataclass
class PoolJob:
    """Generated lines waiting to be written to the pool."""

    lines: list[str]
    goal: Goal
    intent: str


class PoolWriter:
    """Persists generated lines so future pooled matches improve.

    Writes are handed to a background queue so the request that produced
    the lines never waits on them. Failures are logged, never raised: pool
    growth is an optimisation, not part of the request's result.
    """

    def __init__(self, store: ContentStore, extractor: ThemeExtractor):
        self.store = store
        self.extractor = extractor
        self._queue: asyncio.Queue[PoolJob] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None

    async def save_pool(self, lines: list[str], goal: Goal, intent: str) -> None:
        """Write one ContentLine per generated line, tagged with intent themes.

        Each line starts with a use count of 1 since it was just served.
        """
        try:
            themes = await self.extractor.extract_themes(intent)
            records = [
                ContentLine(
                    text=text,
                    goal=goal,
                    tags=themes,
                    emotion=themes[0] if themes else DEFAULT_EMOTION,
                    use_count=1,
                )
                for text in lines
            ]
            await asyncio.to_thread(self.store.add_lines, records)
            logger.info(f"Saved {len(records)} new lines to the {Goal(goal).value} pool")
        except Exception as e:
            logger.error(f"Error saving {len(lines)} lines to pool: {e}")

    def submit(self, lines: list[str], goal: Goal, intent: str) -> None:
        """Queue lines for a background pool write without waiting on it."""
        self._queue.put_nowait(PoolJob(lines=list(lines), goal=goal, intent=intent))
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._process_queue())

    async def _process_queue(self) -> None:
        """Process queued writes serially."""
        while True:
            job = await self._queue.get()
            try:
                await self.save_pool(job.lines, job.goal, job.intent)
            except Exception as e:
                logger.error(f"Error processing pool job: {e}")
            finally:
                self._queue.task_done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def join(self) -> None:
        """Wait until every queued write has been attempted."""
        await self._queue.join()

    async def close(self) -> None:
        """Drain outstanding writes and stop the worker."""
        if self._worker is None:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
