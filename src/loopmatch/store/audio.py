"""SQLite audio cache store for rendered speech artifacts."""

import sqlite3
from datetime import datetime, timedelta

from .db import SQLiteStore, load_time
from .models import AudioCacheEntry


class AudioCacheStore(SQLiteStore):
    """Durable cache key to artifact mapping with access statistics.

    Access metadata (count and last access) is the input to any eviction
    policy; this store records it but never deletes entries itself.
    """

    def _init_db(self, conn: sqlite3.Connection) -> None:
        """Initialize database schema with unique cache keys."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS audio_cache (
                cache_key TEXT PRIMARY KEY,
                location TEXT NOT NULL,
                bucket TEXT NOT NULL,
                path TEXT NOT NULL,
                size_bytes INTEGER NOT NULL,
                duration_ms INTEGER NOT NULL,
                item_count INTEGER NOT NULL,
                voice TEXT NOT NULL,
                pace TEXT NOT NULL,
                spacing_ms INTEGER,
                access_count INTEGER NOT NULL DEFAULT 0,
                last_accessed_at TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_audio_last_accessed
            ON audio_cache(last_accessed_at)
        """)

    def upsert(self, entry: AudioCacheEntry) -> None:
        """Write an entry, replacing artifact metadata if the key exists.

        A duplicate write keeps the existing access statistics and creation
        time; only the artifact description is overwritten.
        """
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO audio_cache (
                    cache_key, location, bucket, path, size_bytes, duration_ms,
                    item_count, voice, pace, spacing_ms, access_count,
                    last_accessed_at, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    location = excluded.location,
                    bucket = excluded.bucket,
                    path = excluded.path,
                    size_bytes = excluded.size_bytes,
                    duration_ms = excluded.duration_ms,
                    item_count = excluded.item_count,
                    voice = excluded.voice,
                    pace = excluded.pace,
                    spacing_ms = excluded.spacing_ms
            """,
                (
                    entry.cache_key,
                    entry.location,
                    entry.bucket,
                    entry.path,
                    entry.size_bytes,
                    entry.duration_ms,
                    entry.item_count,
                    entry.voice,
                    entry.pace,
                    entry.spacing_ms,
                    entry.access_count,
                    entry.last_accessed_at.isoformat(),
                    entry.created_at.isoformat(),
                ),
            )

    def get(self, cache_key: str) -> AudioCacheEntry | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM audio_cache WHERE cache_key = ?", (cache_key,)
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def touch(self, cache_key: str) -> AudioCacheEntry | None:
        """Atomically record a hit and return the updated entry.

        The increment happens in a single UPDATE so concurrent hits on the
        same key are all counted.

        Returns:
            Updated entry, or None if the key is not cached
        """
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE audio_cache
                SET access_count = access_count + 1, last_accessed_at = ?
                WHERE cache_key = ?
            """,
                (datetime.now().isoformat(), cache_key),
            )
            row = conn.execute(
                "SELECT * FROM audio_cache WHERE cache_key = ?", (cache_key,)
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def stats(self) -> dict:
        """Aggregate entry count, stored bytes and total hits."""
        with self._transaction() as conn:
            row = conn.execute("""
                SELECT COUNT(*) AS entries,
                       COALESCE(SUM(size_bytes), 0) AS total_bytes,
                       COALESCE(SUM(access_count), 0) AS total_accesses
                FROM audio_cache
            """).fetchone()
        return {
            "entries": row["entries"],
            "total_bytes": row["total_bytes"],
            "total_accesses": row["total_accesses"],
        }

    def stale_entries(
        self, max_age_days: int = 30, unused_days: int = 7
    ) -> list[AudioCacheEntry]:
        """List eviction candidates without removing them.

        An entry is stale when it is older than ``max_age_days``, or when it
        has not been accessed for ``unused_days`` and was hit fewer than twice.
        """
        now = datetime.now()
        max_age = (now - timedelta(days=max_age_days)).isoformat()
        unused = (now - timedelta(days=unused_days)).isoformat()
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM audio_cache
                WHERE created_at < ?
                OR (last_accessed_at < ? AND access_count < 2)
                ORDER BY last_accessed_at
            """,
                (max_age, unused),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> AudioCacheEntry:
        return AudioCacheEntry(
            cache_key=row["cache_key"],
            location=row["location"],
            bucket=row["bucket"],
            path=row["path"],
            size_bytes=row["size_bytes"],
            duration_ms=row["duration_ms"],
            item_count=row["item_count"],
            voice=row["voice"],
            pace=row["pace"],
            spacing_ms=row["spacing_ms"],
            access_count=row["access_count"],
            last_accessed_at=load_time(row["last_accessed_at"]),
            created_at=load_time(row["created_at"]),
        )
