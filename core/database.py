"""
Random Quotes - Database Module
SQLite with WAL mode, schema management, and connection handling
"""

import sqlite3
from pathlib import Path
from typing import Optional, List, Tuple
from contextlib import contextmanager

from core.logger import log_success, log_error, log_config, log_section, log_warning

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Per-widget preferences. Each widget owns a small set of named values
-- ('paths', 'quotes'), each a JSON array of strings.
CREATE TABLE IF NOT EXISTS widget_preferences (
    widget_id INTEGER NOT NULL CHECK (widget_id > 0),
    key TEXT NOT NULL,
    value JSON NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (widget_id, key)
);
"""


class Database:
    """SQLite database manager with WAL mode and per-call connections."""

    def __init__(
        self,
        db_path: Path,
        busy_timeout_ms: int = 10000,
    ):
        """
        Initialize the database.

        Args:
            db_path: Path to the SQLite database file
            busy_timeout_ms: Timeout for busy/locked database
        """
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        """
        Initialize the database: create file, set WAL mode, apply schema.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            log_section("Initializing preference database", "📁")
            log_config("Path", str(self.db_path), indent=1)

            with self.get_connection() as conn:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")

                cursor = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
                )
                if cursor.fetchone() is None:
                    conn.executescript(SCHEMA_SQL)
                    conn.execute(
                        "INSERT INTO schema_version (version) VALUES (?)",
                        (SCHEMA_VERSION,)
                    )
                    log_config("Schema", f"Created (v{SCHEMA_VERSION})", indent=1)
                else:
                    cursor = conn.execute("SELECT MAX(version) FROM schema_version")
                    current_version = cursor.fetchone()[0] or 0
                    if current_version > SCHEMA_VERSION:
                        log_warning(
                            f"Database schema v{current_version} is newer than this "
                            f"release (v{SCHEMA_VERSION})"
                        )
                    # Tables are created with IF NOT EXISTS, safe to re-run
                    conn.executescript(SCHEMA_SQL)
                    log_config("Schema", f"Version {current_version}", indent=1)

                cursor = conn.execute("PRAGMA journal_mode")
                mode = cursor.fetchone()[0]
                log_config("Mode", f"{mode.upper()} (Write-Ahead Logging)", indent=1)

            log_success("Preference database ready")
            self._initialized = True
            return True

        except (sqlite3.Error, OSError) as e:
            log_error(f"Database initialization failed: {e}")
            return False

    @contextmanager
    def get_connection(self) -> sqlite3.Connection:
        """
        Get a database connection with proper configuration.

        Everything done inside the with-block is one transaction: committed on
        normal exit, rolled back if the block raises.

        Yields:
            Configured SQLite connection
        """
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.busy_timeout_ms / 1000,
            check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)}")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute(
        self,
        sql: str,
        params: Tuple = (),
        fetch: bool = False
    ) -> Optional[List[sqlite3.Row]]:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement
            params: Parameters for the statement
            fetch: Whether to fetch and return results

        Returns:
            List of rows if fetch=True, None otherwise
        """
        with self.get_connection() as conn:
            cursor = conn.execute(sql, params)
            if fetch:
                return cursor.fetchall()
            return None

    def get_stats(self) -> dict:
        """Get database statistics."""
        stats = {}

        with self.get_connection() as conn:
            cursor = conn.execute("SELECT COUNT(DISTINCT widget_id) FROM widget_preferences")
            stats["configured_widgets"] = cursor.fetchone()[0]

            cursor = conn.execute("SELECT COUNT(*) FROM widget_preferences")
            stats["stored_values"] = cursor.fetchone()[0]

        return stats


# Global database instance
_db: Optional[Database] = None


def get_database() -> Database:
    """Get the global database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


def init_database(db_path: Path, busy_timeout_ms: int = 10000) -> Optional[Database]:
    """
    Initialize the global database instance.

    Returns:
        The database, or None if it could not be opened
    """
    global _db
    db = Database(db_path, busy_timeout_ms)
    if not db.initialize():
        return None
    _db = db
    return _db
