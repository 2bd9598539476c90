"""Tiered content matcher: exact template, pooled assembly, generation, fallback.

Each request walks the tiers in cost order and stops at the first one that
accepts. Generation is the only tier that spends money on text; the
fallback tier always succeeds so a caller never receives an empty set.
"""

import asyncio
import logging
from collections.abc import Callable

from ..config import EngineConfig, load_config
from ..errors import PersistenceError, ProviderError
from ..providers.base import GenerationProvider
from ..store.content import ContentStore
from ..store.models import GenerationLog, Goal, MatchTier
from .fallback import fallback_lines
from .keywords import ThemeExtractor, extract_keywords
from .pool import PoolWriter
from .prompts import affirmation_prompt
from .results import (
    ExactResult,
    FallbackResult,
    GeneratedResult,
    MatchResult,
    PooledResult,
    Rejected,
)
from .scoring import (
    best_template,
    parse_generated_lines,
    select_diverse,
    theme_confidence,
)

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.5


class Matcher:
    """Decides whether to reuse, assemble or generate content for an intent.

    Example:
        matcher = Matcher(store, config, generation_provider=provider)
        result = await matcher.match_or_generate("help me sleep", Goal.SLEEP)
        print(result.tier, result.cost, result.content_texts)
    """

    def __init__(
        self,
        store: ContentStore,
        config: EngineConfig,
        generation_provider: GenerationProvider | None = None,
        pool_writer: PoolWriter | None = None,
        config_loader: Callable[[], EngineConfig] = load_config,
    ):
        """Initialize the matcher.

        Args:
            store: Content store holding lines, templates and logs
            config: Thresholds, pool sizes and tier prices
            generation_provider: Paid text generator; None disables tiers
                that need it (themes fall back to keywords)
            pool_writer: Receives generated lines; None disables pool growth
            config_loader: Used by reload_config() when no config is given
        """
        self.store = store
        self.config = config
        self.provider = generation_provider
        self.extractor = ThemeExtractor(generation_provider, config.generation)
        self.pool_writer = pool_writer
        self._config_loader = config_loader

    def reload_config(self, config: EngineConfig | None = None) -> EngineConfig:
        """Swap in a new configuration, reading it from the loader if not given."""
        self.config = config or self._config_loader()
        self.extractor.config = self.config.generation
        logger.info(
            f"Matcher config reloaded: exact>{self.config.matching.exact_threshold}, "
            f"pooled>={self.config.matching.pooled_threshold}"
        )
        return self.config

    def tier_cost(self, tier: MatchTier) -> float:
        """Price of a request served by the given tier."""
        if tier is MatchTier.POOLED:
            return self.config.costs.pooled
        if tier is MatchTier.GENERATED:
            return self.config.costs.generated
        return 0.0

    async def match_or_generate(
        self,
        intent: str,
        goal: Goal,
        user_id: str | None = None,
        is_first_session: bool = False,
    ) -> MatchResult:
        """Produce a content set for the intent and record the decision.

        First sessions skip straight to generation. Otherwise tiers run in
        order: exact, pooled, generated, fallback.

        Args:
            intent: Free-text description of what the user wants
            goal: Goal category
            user_id: Requester, if known
            is_first_session: Whether this is the requester's first session

        Returns:
            Result of the tier that accepted, with its log id set

        Raises:
            PersistenceError: If the GenerationLog row cannot be written
        """
        goal = Goal(goal)
        result: MatchResult | None = None

        if is_first_session and self.config.matching.always_generate_first:
            logger.info(f"First session - generating new content (user={user_id}, goal={goal.value})")
        else:
            for attempt in (self.try_exact, self.try_pooled):
                outcome = await attempt(intent, goal)
                if isinstance(outcome, Rejected):
                    logger.debug(f"{outcome.tier.value} tier rejected: {outcome.reason}")
                    continue
                result = outcome
                break

        if result is None:
            outcome = await self.try_generated(intent, goal)
            if isinstance(outcome, Rejected):
                logger.warning(f"Generation rejected ({outcome.reason}), using fallback")
                result = self.fallback(goal)
            else:
                result = outcome

        logger.info(
            f"Matched '{intent[:50]}' via {result.tier.value} "
            f"(confidence={result.confidence:.2f}, cost={result.cost:.2f})"
        )
        result.log_id = await self._record(intent, goal, user_id, result)
        return result

    async def try_exact(self, intent: str, goal: Goal) -> ExactResult | Rejected:
        """TIER 1: reuse a curated template whose keywords match the intent."""
        matching = self.config.matching
        keywords = extract_keywords(intent)
        if not keywords:
            return Rejected(MatchTier.EXACT, "no keywords in intent")

        try:
            templates = await asyncio.to_thread(
                self.store.find_templates_by_keywords,
                goal,
                keywords,
                matching.template_candidates,
            )
        except PersistenceError as e:
            logger.error(f"Error finding exact match: {e}")
            return Rejected(MatchTier.EXACT, "template query failed")

        best = best_template(keywords, templates)
        if best is None:
            return Rejected(MatchTier.EXACT, "no template shares a keyword")
        template, similarity = best

        if similarity < matching.exact_min_similarity:
            return Rejected(MatchTier.EXACT, f"similarity {similarity:.2f} too low")
        if not similarity > matching.exact_threshold:
            return Rejected(
                MatchTier.EXACT,
                f"similarity {similarity:.2f} does not exceed {matching.exact_threshold}",
            )

        try:
            lines = await asyncio.to_thread(self.store.get_lines, template.affirmation_ids)
        except PersistenceError as e:
            logger.error(f"Error resolving template {template.id}: {e}")
            return Rejected(MatchTier.EXACT, "template lines could not be loaded")
        if len(lines) < matching.min_lines:
            return Rejected(
                MatchTier.EXACT,
                f"template {template.id} resolves to {len(lines)} lines",
            )

        try:
            await asyncio.to_thread(self.store.increment_template_usage, template.id)
        except PersistenceError as e:
            logger.error(f"Failed to bump usage of template {template.id}: {e}")

        logger.info(f"Using exact template match {template.id} (similarity={similarity:.2f})")
        return ExactResult(
            content_texts=[line.text for line in lines],
            content_ids=[line.id for line in lines],
            template_id=template.id,
            confidence=similarity,
            cost=self.tier_cost(MatchTier.EXACT),
        )

    async def try_pooled(self, intent: str, goal: Goal) -> PooledResult | Rejected:
        """TIER 2: assemble a diverse set from pooled lines sharing the intent's themes."""
        matching = self.config.matching
        themes = await self.extractor.extract_themes(intent)
        if not themes:
            return Rejected(MatchTier.POOLED, "no themes in intent")

        try:
            candidates = await asyncio.to_thread(
                self.store.find_lines_by_themes, goal, themes, matching.pool_candidates
            )
        except PersistenceError as e:
            logger.error(f"Error building from pool: {e}")
            return Rejected(MatchTier.POOLED, "pool query failed")

        if len(candidates) < matching.min_lines:
            return Rejected(MatchTier.POOLED, f"only {len(candidates)} candidates in pool")

        selected = select_diverse(candidates, matching.min_lines, matching.max_lines)
        if len(selected) < matching.min_lines:
            return Rejected(MatchTier.POOLED, "not enough diverse candidates")

        confidence = theme_confidence(themes, selected)
        if confidence < matching.pooled_threshold:
            return Rejected(MatchTier.POOLED, f"theme coverage {confidence:.2f} too low")

        selected_ids = [line.id for line in selected]
        try:
            await asyncio.to_thread(self.store.increment_line_usage, selected_ids)
        except PersistenceError as e:
            logger.error(f"Failed to bump usage of pooled lines: {e}")

        logger.info(f"Using {len(selected)} pooled lines (confidence={confidence:.2f})")
        return PooledResult(
            content_texts=[line.text for line in selected],
            content_ids=selected_ids,
            confidence=confidence,
            cost=self.tier_cost(MatchTier.POOLED),
        )

    async def try_generated(self, intent: str, goal: Goal) -> GeneratedResult | Rejected:
        """TIER 3: pay the generation provider for fresh lines."""
        if self.provider is None:
            return Rejected(MatchTier.GENERATED, "generation provider not configured")

        matching = self.config.matching
        generation = self.config.generation
        prompt = affirmation_prompt(intent, goal, matching.min_lines, matching.max_lines)

        try:
            response = await self.provider.complete(
                prompt,
                temperature=generation.temperature,
                max_tokens=generation.max_tokens,
            )
        except ProviderError as e:
            logger.error(f"Generation failed for goal {goal.value}: {e}")
            return Rejected(MatchTier.GENERATED, f"provider error: {e}")

        lines = parse_generated_lines(response, matching.max_lines)
        if len(lines) < matching.min_lines:
            return Rejected(MatchTier.GENERATED, f"only {len(lines)} usable lines generated")

        if self.pool_writer is not None:
            self.pool_writer.submit(lines, goal, intent)

        return GeneratedResult(
            content_texts=lines,
            confidence=1.0,
            cost=self.tier_cost(MatchTier.GENERATED),
        )

    def fallback(self, goal: Goal) -> FallbackResult:
        """TIER 4: fixed lines for the goal, always available."""
        return FallbackResult(
            content_texts=fallback_lines(goal),
            confidence=FALLBACK_CONFIDENCE,
            cost=self.tier_cost(MatchTier.FALLBACK),
        )

    async def _record(
        self, intent: str, goal: Goal, user_id: str | None, result: MatchResult
    ) -> str:
        log = GenerationLog(
            user_id=user_id,
            intent=intent,
            goal=goal,
            tier=result.tier,
            content_used=result.content_ids or result.content_texts,
            template_id=result.template_id,
            cost=result.cost,
            confidence=result.confidence,
        )
        await asyncio.to_thread(self.store.add_log, log)
        return log.id
