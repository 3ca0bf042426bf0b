"""SQLite database operations for FountainScan."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import aiosqlite

logger = logging.getLogger(__name__)


class Database:
    """Async SQLite store for user reports, warning logs and detection keywords."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def connect(self):
        """Establish database connection and create tables."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        # Some SQLite builds reject these pragmas.
        try:
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA busy_timeout=5000")
            await self._connection.commit()
        except Exception:
            pass
        await self._create_tables()

    async def close(self):
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _create_tables(self):
        """Create database tables if they don't exist."""
        async with self._lock:
            await self._connection.executescript(
                """
                    CREATE TABLE IF NOT EXISTS user_reports (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        reported_url TEXT NOT NULL,
                        report_reason TEXT NOT NULL,
                        user_email TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS warning_logs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        site_url TEXT,
                        detection_score INTEGER,
                        keywords TEXT,
                        message TEXT,
                        severity TEXT,
                        user_email TEXT,
                        source TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS detection_keywords (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        keyword TEXT UNIQUE NOT NULL,
                        severity TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE INDEX IF NOT EXISTS idx_warning_logs_email ON warning_logs(user_email);
                """
            )
            await self._connection.commit()

    async def _fetch_all(self, query: str, params: tuple = ()) -> list[dict]:
        async with self._lock:
            cursor = await self._connection.execute(query, params)
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # -- reports -------------------------------------------------------------

    async def add_report(
        self,
        reported_url: str,
        report_reason: str,
        user_email: str | None = None,
    ) -> int:
        """Store a user report and return its id."""
        async with self._lock:
            cursor = await self._connection.execute(
                """
                INSERT INTO user_reports (reported_url, report_reason, user_email)
                VALUES (?, ?, ?)
                """,
                (reported_url, report_reason, user_email),
            )
            await self._connection.commit()
            return cursor.lastrowid

    async def get_reports(self, limit: int | None = None) -> list[dict]:
        query = "SELECT * FROM user_reports ORDER BY id DESC"
        params: tuple = ()
        if limit:
            query += " LIMIT ?"
            params = (int(limit),)
        return await self._fetch_all(query, params)

    # -- warning logs --------------------------------------------------------

    async def add_warning(
        self,
        *,
        site_url: str | None = None,
        detection_score: int | None = None,
        keywords: list[str] | None = None,
        message: str | None = None,
        severity: str | None = None,
        user_email: str | None = None,
        source: str | None = None,
    ) -> int:
        """Store a warning log entry and return its id."""
        async with self._lock:
            cursor = await self._connection.execute(
                """
                INSERT INTO warning_logs
                    (site_url, detection_score, keywords, message, severity, user_email, source)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    site_url,
                    detection_score,
                    json.dumps(list(keywords)) if keywords is not None else None,
                    message,
                    severity,
                    user_email,
                    source,
                ),
            )
            await self._connection.commit()
            return cursor.lastrowid

    @staticmethod
    def _decode_warning(row: dict) -> dict:
        raw = row.get("keywords")
        try:
            row["keywords"] = json.loads(raw) if raw else []
        except (TypeError, ValueError):
            row["keywords"] = []
        return row

    async def get_warnings(self, user_email: str | None = None) -> list[dict]:
        if user_email:
            rows = await self._fetch_all(
                "SELECT * FROM warning_logs WHERE user_email = ? ORDER BY id DESC",
                (user_email,),
            )
        else:
            rows = await self._fetch_all("SELECT * FROM warning_logs ORDER BY id DESC")
        return [self._decode_warning(row) for row in rows]

    # -- detection keywords --------------------------------------------------

    async def add_keyword(self, keyword: str, severity: str | None = None) -> Optional[int]:
        """Add a keyword; returns None if it already exists."""
        value = (keyword or "").strip().lower()
        if not value:
            raise ValueError("keyword is required")
        async with self._lock:
            try:
                cursor = await self._connection.execute(
                    "INSERT INTO detection_keywords (keyword, severity) VALUES (?, ?)",
                    (value, severity),
                )
            except aiosqlite.IntegrityError:
                logger.debug("Keyword already exists: %s", value)
                return None
            await self._connection.commit()
            return cursor.lastrowid

    async def get_keywords(self) -> list[dict]:
        return await self._fetch_all("SELECT * FROM detection_keywords ORDER BY id")

    async def delete_keyword(self, keyword_id: int) -> bool:
        async with self._lock:
            cursor = await self._connection.execute(
                "DELETE FROM detection_keywords WHERE id = ?",
                (int(keyword_id),),
            )
            await self._connection.commit()
            return cursor.rowcount > 0

    async def get_counts(self) -> dict:
        """Row counts for health output."""
        counts = {}
        for table in ("user_reports", "warning_logs", "detection_keywords"):
            rows = await self._fetch_all(f"SELECT COUNT(*) AS n FROM {table}")
            counts[table] = int(rows[0]["n"]) if rows else 0
        return counts
