"""SQLite store for tagging configuration.

Holds the global defaults and per-job overrides of the tag base URL and
the three commit comments.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from svntag.config import settings
from svntag.core.exceptions import ConfigurationError
from svntag.models.tag import TagRequest
from svntag.utils.logging import get_logger

logger = get_logger("config_store")

DEFAULT_REQUEST = TagRequest(
    base_url_template="http://subversion_host/project/tags/last-successful/${env['JOB_NAME']}",
    tag_comment="Tagged by svntag. Build:${env['BUILD_TAG']}.",
    mkdir_comment="Created by svntag.",
    delete_comment="Delete old tag by svntag.",
)

_FIELDS = ("base_url_template", "tag_comment", "mkdir_comment", "delete_comment")


class ConfigStore:
    """Persists tagging defaults and job overrides in SQLite."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path or settings.config_db_path).expanduser()
        self._ensure_db_exists()

    def _ensure_db_exists(self) -> None:
        """Create database and tables if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create configuration directory: {e}",
                {"db_path": str(self.db_path)},
            ) from e

        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tag_defaults (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    base_url_template TEXT NOT NULL,
                    tag_comment TEXT NOT NULL,
                    mkdir_comment TEXT NOT NULL,
                    delete_comment TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS job_configs (
                    job_name TEXT PRIMARY KEY,
                    base_url_template TEXT NOT NULL DEFAULT '',
                    tag_comment TEXT NOT NULL DEFAULT '',
                    mkdir_comment TEXT NOT NULL DEFAULT '',
                    delete_comment TEXT NOT NULL DEFAULT '',
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

        logger.debug("config_store.initialized", db_path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with row factory."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise ConfigurationError(
                f"Cannot open configuration database: {e}",
                {"db_path": str(self.db_path)},
            ) from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise ConfigurationError(
                f"Configuration database error: {e}",
                {"db_path": str(self.db_path)},
            ) from e
        finally:
            conn.close()

    @staticmethod
    def _row_to_request(row: sqlite3.Row) -> TagRequest:
        return TagRequest(**{name: row[name] for name in _FIELDS})

    async def load(self) -> TagRequest:
        """Global defaults, or the built-in defaults when none were saved."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM tag_defaults WHERE id = 1").fetchone()

        return self._row_to_request(row) if row else DEFAULT_REQUEST

    async def save(self, request: TagRequest) -> TagRequest:
        """Replace the global defaults."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO tag_defaults
                (id, base_url_template, tag_comment, mkdir_comment, delete_comment, updated_at)
                VALUES (1, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    base_url_template = excluded.base_url_template,
                    tag_comment = excluded.tag_comment,
                    mkdir_comment = excluded.mkdir_comment,
                    delete_comment = excluded.delete_comment,
                    updated_at = excluded.updated_at
                """,
                (*(getattr(request, name) for name in _FIELDS), datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

        logger.info("config_store.defaults_saved")
        return request

    async def get_job(self, job_name: str) -> TagRequest | None:
        """Stored overrides for a job."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM job_configs WHERE job_name = ?",
                (job_name,),
            ).fetchone()

        return self._row_to_request(row) if row else None

    async def save_job(self, job_name: str, request: TagRequest) -> TagRequest:
        """Store overrides for a job. Blank fields mean "use the default"."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO job_configs
                (job_name, base_url_template, tag_comment, mkdir_comment, delete_comment, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(job_name) DO UPDATE SET
                    base_url_template = excluded.base_url_template,
                    tag_comment = excluded.tag_comment,
                    mkdir_comment = excluded.mkdir_comment,
                    delete_comment = excluded.delete_comment,
                    updated_at = excluded.updated_at
                """,
                (
                    job_name,
                    *(getattr(request, name) for name in _FIELDS),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()

        logger.info("config_store.job_saved", job_name=job_name)
        return request

    async def delete_job(self, job_name: str) -> bool:
        """Remove a job's overrides."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM job_configs WHERE job_name = ?", (job_name,))
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("config_store.job_deleted", job_name=job_name)
        return deleted

    async def list_jobs(self) -> list[str]:
        """Names of jobs with stored overrides."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT job_name FROM job_configs ORDER BY job_name").fetchall()

        return [row["job_name"] for row in rows]

    async def effective_request(self, job_name: str | None = None) -> TagRequest:
        """Job overrides with blank fields filled from the global defaults."""
        defaults = await self.load()
        if not job_name:
            return defaults

        job = await self.get_job(job_name)
        return job.with_defaults(defaults) if job else defaults


@lru_cache
def get_config_store() -> ConfigStore:
    """Get the configuration store singleton."""
    return ConfigStore()
