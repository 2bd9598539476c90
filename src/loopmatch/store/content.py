"""SQLite content store for lines, templates and generation logs."""

import logging
import sqlite3
from datetime import datetime

from .db import SQLiteStore, dump_list, load_list, load_time, placeholders
from .models import ContentLine, GenerationLog, Goal, MatchTier, TemplateBundle

logger = logging.getLogger(__name__)

MAX_RATING = 5.0


class ContentStore(SQLiteStore):
    """Durable records for content lines, template bundles and generation logs.

    Keyword, tag and affirmation-id sets are stored as JSON arrays and
    matched with ``json_each`` so overlap filtering happens in SQL.
    """

    def _init_db(self, conn: sqlite3.Connection) -> None:
        """Initialize database schema with tables and indexes."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS content_line (
                id TEXT PRIMARY KEY,
                text TEXT NOT NULL,
                goal TEXT NOT NULL,
                tags TEXT NOT NULL DEFAULT '[]',
                emotion TEXT,
                use_count INTEGER NOT NULL DEFAULT 0,
                rating REAL,
                audio_voice_id TEXT,
                audio_duration_ms INTEGER,
                audio_url TEXT,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS template_bundle (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                goal TEXT NOT NULL,
                keywords TEXT NOT NULL DEFAULT '[]',
                affirmation_ids TEXT NOT NULL DEFAULT '[]',
                use_count INTEGER NOT NULL DEFAULT 0,
                rating REAL,
                is_default INTEGER NOT NULL DEFAULT 0,
                ambient_category TEXT,
                ambient_hz TEXT,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS generation_log (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                intent TEXT NOT NULL,
                goal TEXT NOT NULL,
                tier TEXT NOT NULL,
                content_used TEXT NOT NULL DEFAULT '[]',
                template_id TEXT,
                session_id TEXT,
                cost REAL NOT NULL,
                confidence REAL NOT NULL,
                was_rated INTEGER NOT NULL DEFAULT 0,
                user_rating REAL,
                was_replayed INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_line_goal ON content_line(goal)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_template_goal ON template_bundle(goal)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_log_created ON generation_log(created_at)"
        )

    # Content lines

    def add_lines(self, lines: list[ContentLine]) -> None:
        """Insert new content lines.

        Raises:
            PersistenceError: If the insert fails (including duplicate ids)
        """
        with self._transaction() as conn:
            conn.executemany(
                """
                INSERT INTO content_line (
                    id, text, goal, tags, emotion, use_count, rating,
                    audio_voice_id, audio_duration_ms, audio_url, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                [
                    (
                        line.id,
                        line.text,
                        line.goal.value,
                        dump_list(line.tags),
                        line.emotion,
                        line.use_count,
                        line.rating,
                        line.audio_voice_id,
                        line.audio_duration_ms,
                        line.audio_url,
                        line.created_at.isoformat(),
                    )
                    for line in lines
                ],
            )

    def add_line(self, line: ContentLine) -> None:
        self.add_lines([line])

    def get_line(self, line_id: str) -> ContentLine | None:
        lines = self.get_lines([line_id])
        return lines[0] if lines else None

    def get_lines(self, line_ids: list[str]) -> list[ContentLine]:
        """Resolve line ids, preserving the requested order.

        Repeated ids resolve once, at their first position.
        Ids with no stored line are dropped rather than substituted.
        """
        if not line_ids:
            return []
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM content_line WHERE id IN ({placeholders(line_ids)})",
                line_ids,
            ).fetchall()
        by_id = {row["id"]: self._row_to_line(row) for row in rows}
        return [by_id[line_id] for line_id in dict.fromkeys(line_ids) if line_id in by_id]

    def find_lines_by_themes(
        self, goal: Goal, themes: list[str], limit: int
    ) -> list[ContentLine]:
        """Find lines for a goal whose tags or emotion overlap the themes.

        Ranked by rating (nulls last) then use count, both descending.
        """
        themes = [t.lower() for t in themes]
        if not themes:
            return []
        marks = placeholders(themes)
        with self._transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM content_line AS l
                WHERE l.goal = ?
                AND (
                    EXISTS (
                        SELECT 1 FROM json_each(l.tags)
                        WHERE lower(json_each.value) IN ({marks})
                    )
                    OR lower(l.emotion) IN ({marks})
                )
                ORDER BY l.rating IS NULL, l.rating DESC, l.use_count DESC
                LIMIT ?
            """,
                [Goal(goal).value, *themes, *themes, limit],
            ).fetchall()
        return [self._row_to_line(row) for row in rows]

    def increment_line_usage(self, line_ids: list[str]) -> None:
        if not line_ids:
            return
        with self._transaction() as conn:
            conn.execute(
                f"""
                UPDATE content_line SET use_count = use_count + 1
                WHERE id IN ({placeholders(line_ids)})
            """,
                line_ids,
            )

    def boost_lines(self, line_ids: list[str], amount: float) -> None:
        """Bump use count and rating of highly rated lines, capped at 5."""
        if not line_ids:
            return
        with self._transaction() as conn:
            conn.execute(
                f"""
                UPDATE content_line
                SET use_count = use_count + 1,
                    rating = min(?, coalesce(rating, 0) + ?)
                WHERE id IN ({placeholders(line_ids)})
            """,
                [MAX_RATING, amount, *line_ids],
            )

    def set_audio_reference(
        self, line_id: str, voice: str, duration_ms: int, audio_url: str
    ) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE content_line
                SET audio_voice_id = ?, audio_duration_ms = ?, audio_url = ?
                WHERE id = ?
            """,
                (voice, duration_ms, audio_url, line_id),
            )

    # Template bundles

    def add_template(self, template: TemplateBundle) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO template_bundle (
                    id, title, goal, keywords, affirmation_ids, use_count, rating,
                    is_default, ambient_category, ambient_hz, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    template.id,
                    template.title,
                    template.goal.value,
                    dump_list(template.keywords),
                    dump_list(template.affirmation_ids),
                    template.use_count,
                    template.rating,
                    int(template.is_default),
                    template.ambient_category,
                    template.ambient_hz,
                    template.created_at.isoformat(),
                ),
            )

    def promote_template(
        self, title: str, goal: Goal, keywords: list[str], line_ids: list[str]
    ) -> TemplateBundle:
        """Create a template bundle from lines that were already persisted."""
        template = TemplateBundle(
            title=title, goal=goal, keywords=keywords, affirmation_ids=line_ids
        )
        self.add_template(template)
        logger.info(f"Promoted {len(line_ids)} lines to template '{title}'")
        return template

    def get_template(self, template_id: str) -> TemplateBundle | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM template_bundle WHERE id = ?", (template_id,)
            ).fetchone()
        return self._row_to_template(row) if row else None

    def find_templates_by_keywords(
        self, goal: Goal, keywords: list[str], limit: int
    ) -> list[TemplateBundle]:
        """Find templates for a goal whose keywords intersect the request.

        Ranked by use count then rating (nulls last), both descending.
        """
        keywords = [k.lower() for k in keywords]
        if not keywords:
            return []
        with self._transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM template_bundle AS t
                WHERE t.goal = ?
                AND EXISTS (
                    SELECT 1 FROM json_each(t.keywords)
                    WHERE lower(json_each.value) IN ({placeholders(keywords)})
                )
                ORDER BY t.use_count DESC, t.rating IS NULL, t.rating DESC
                LIMIT ?
            """,
                [Goal(goal).value, *keywords, limit],
            ).fetchall()
        return [self._row_to_template(row) for row in rows]

    def increment_template_usage(self, template_id: str) -> None:
        with self._transaction() as conn:
            conn.execute(
                "UPDATE template_bundle SET use_count = use_count + 1 WHERE id = ?",
                (template_id,),
            )

    def boost_template(self, template_id: str, amount: float) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE template_bundle
                SET use_count = use_count + 1,
                    rating = min(?, coalesce(rating, 0) + ?)
                WHERE id = ?
            """,
                (MAX_RATING, amount, template_id),
            )

    # Generation logs

    def add_log(self, log: GenerationLog) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO generation_log (
                    id, user_id, intent, goal, tier, content_used, template_id,
                    session_id, cost, confidence, was_rated, user_rating,
                    was_replayed, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    log.id,
                    log.user_id,
                    log.intent,
                    log.goal.value,
                    log.tier.value,
                    dump_list(log.content_used),
                    log.template_id,
                    log.session_id,
                    log.cost,
                    log.confidence,
                    int(log.was_rated),
                    log.user_rating,
                    int(log.was_replayed),
                    log.created_at.isoformat(),
                ),
            )

    def get_log(self, log_id: str) -> GenerationLog | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM generation_log WHERE id = ?", (log_id,)
            ).fetchone()
        return self._row_to_log(row) if row else None

    def annotate_log(self, log_id: str, rating: float, was_replayed: bool) -> None:
        """Record post-hoc feedback, the only mutation a log row allows."""
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE generation_log
                SET was_rated = 1, user_rating = ?, was_replayed = ?
                WHERE id = ?
            """,
                (rating, int(was_replayed), log_id),
            )

    def cost_summary(
        self, generated_cost: float, since: datetime | None = None
    ) -> dict:
        """Summarize request counts and spend per tier.

        Args:
            generated_cost: Price of one full generation, used for savings
            since: Only include decisions made at or after this time

        Returns:
            Dictionary with per-tier counts and cost, totals and savings
        """
        query = "SELECT tier, COUNT(*) AS n, SUM(cost) AS cost FROM generation_log"
        params: list = []
        if since is not None:
            query += " WHERE created_at >= ?"
            params.append(since.isoformat())
        query += " GROUP BY tier"

        with self._transaction() as conn:
            rows = conn.execute(query, params).fetchall()

        tiers = {tier.value: {"count": 0, "cost": 0.0} for tier in MatchTier}
        for row in rows:
            tiers[row["tier"]] = {"count": row["n"], "cost": row["cost"] or 0.0}

        requests = sum(t["count"] for t in tiers.values())
        total_cost = sum(t["cost"] for t in tiers.values())
        return {
            "tiers": tiers,
            "requests": requests,
            "total_cost": round(total_cost, 4),
            "saved": round(requests * generated_cost - total_cost, 4),
        }

    # Row conversion

    @staticmethod
    def _row_to_line(row: sqlite3.Row) -> ContentLine:
        return ContentLine(
            id=row["id"],
            text=row["text"],
            goal=Goal(row["goal"]),
            tags=load_list(row["tags"]),
            emotion=row["emotion"],
            use_count=row["use_count"],
            rating=row["rating"],
            audio_voice_id=row["audio_voice_id"],
            audio_duration_ms=row["audio_duration_ms"],
            audio_url=row["audio_url"],
            created_at=load_time(row["created_at"]),
        )

    @staticmethod
    def _row_to_template(row: sqlite3.Row) -> TemplateBundle:
        return TemplateBundle(
            id=row["id"],
            title=row["title"],
            goal=Goal(row["goal"]),
            keywords=load_list(row["keywords"]),
            affirmation_ids=load_list(row["affirmation_ids"]),
            use_count=row["use_count"],
            rating=row["rating"],
            is_default=bool(row["is_default"]),
            ambient_category=row["ambient_category"],
            ambient_hz=row["ambient_hz"],
            created_at=load_time(row["created_at"]),
        )

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> GenerationLog:
        return GenerationLog(
            id=row["id"],
            user_id=row["user_id"],
            intent=row["intent"],
            goal=Goal(row["goal"]),
            tier=MatchTier(row["tier"]),
            content_used=load_list(row["content_used"]),
            template_id=row["template_id"],
            session_id=row["session_id"],
            cost=row["cost"],
            confidence=row["confidence"],
            was_rated=bool(row["was_rated"]),
            user_rating=row["user_rating"],
            was_replayed=bool(row["was_replayed"]),
            created_at=load_time(row["created_at"]),
        )
