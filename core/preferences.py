"""
Random Quotes - Preference Store

Durable per-widget persistence for the configured source file paths and the
quotes derived from them. Values live in the widget_preferences table as
JSON arrays of strings, one row per (widget, key).

Absence of data is never an error here: reads of an unknown widget return an
empty list. Database failures are wrapped in StorageError and propagated to
the caller without retrying.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional, Sequence

from core.database import Database, get_database
from core.errors import MissingWidgetIdError, StorageError
from core.logger import log_debug, log_error
from core.widget import WidgetInstanceId, WidgetState, parse_widget_id

PATHS_KEY = "paths"
QUOTES_KEY = "quotes"


def _require_id(widget_id: Any) -> WidgetInstanceId:
    """Resolve a widget id for a write, refusing missing/sentinel ids."""
    resolved = parse_widget_id(widget_id)
    if resolved is None:
        raise MissingWidgetIdError()
    return resolved


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """Translate database failures into StorageError."""
    try:
        yield
    except sqlite3.Error as e:
        log_error(f"Preference storage failed while trying to {action}: {e}")
        raise StorageError(f"Could not {action}: {e}") from e


class PreferenceStore:
    """
    Key-value preferences partitioned by widget instance.

    Each write replaces the whole value for its key; nothing is merged with
    what was stored before.
    """

    def __init__(self, database: Optional[Database] = None):
        self._db = database or get_database()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def delete_record(self, widget_id: Any) -> None:
        """Remove every stored value for the widget. No-op if none exist."""
        wid = _require_id(widget_id)
        with _storage_errors(f"delete preferences for widget {wid}"):
            with self._db.get_connection() as conn:
                conn.execute(
                    "DELETE FROM widget_preferences WHERE widget_id = ?",
                    (wid.value,)
                )
        log_debug(f"Deleted preferences for widget {wid}")

    def write_paths(self, widget_id: Any, paths: Sequence[str]) -> None:
        """Store the source path list, replacing any previous list."""
        wid = _require_id(widget_id)
        with _storage_errors(f"write paths for widget {wid}"):
            with self._db.get_connection() as conn:
                self._put(conn, wid, PATHS_KEY, paths)
        log_debug(f"Stored {len(paths)} path(s) for widget {wid}")

    def write_quotes(self, widget_id: Any, quotes: Sequence[str]) -> None:
        """Store the quote collection, replacing any previous collection."""
        wid = _require_id(widget_id)
        with _storage_errors(f"write quotes for widget {wid}"):
            with self._db.get_connection() as conn:
                self._put(conn, wid, QUOTES_KEY, quotes)
        log_debug(f"Stored {len(quotes)} quote(s) for widget {wid}")

    def replace_record(
        self,
        widget_id: Any,
        paths: Sequence[str],
        quotes: Sequence[str]
    ) -> None:
        """
        Delete the old record and write the new one in a single transaction.

        Concurrent readers see either the previous paths and quotes or the
        new ones, never an empty record in between.
        """
        wid = _require_id(widget_id)
        with _storage_errors(f"replace preferences for widget {wid}"):
            with self._db.get_connection() as conn:
                conn.execute(
                    "DELETE FROM widget_preferences WHERE widget_id = ?",
                    (wid.value,)
                )
                self._put(conn, wid, PATHS_KEY, paths)
                self._put(conn, wid, QUOTES_KEY, quotes)
        log_debug(f"Replaced preferences for widget {wid}: {len(paths)} path(s), {len(quotes)} quote(s)")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_paths(self, widget_id: Any) -> List[str]:
        """Get the stored source paths, or [] if none are configured."""
        return self._get(widget_id, PATHS_KEY)

    def read_quotes(self, widget_id: Any) -> List[str]:
        """Get the stored quotes, or [] if none have been processed."""
        return self._get(widget_id, QUOTES_KEY)

    def has_record(self, widget_id: Any) -> bool:
        """Check whether anything is stored for the widget."""
        wid = parse_widget_id(widget_id)
        if wid is None:
            return False
        with _storage_errors(f"look up widget {wid}"):
            rows = self._db.execute(
                "SELECT 1 FROM widget_preferences WHERE widget_id = ? LIMIT 1",
                (wid.value,),
                fetch=True
            )
        return bool(rows)

    def widget_state(self, widget_id: Any) -> WidgetState:
        """Where the widget is in the unconfigured -> paths set -> ready cycle."""
        if self.read_quotes(widget_id):
            return WidgetState.READY
        if self.read_paths(widget_id):
            return WidgetState.PATHS_SET
        return WidgetState.UNCONFIGURED

    def list_widget_ids(self) -> List[WidgetInstanceId]:
        """All widgets that have stored preferences, in ascending order."""
        with _storage_errors("list configured widgets"):
            rows = self._db.execute(
                "SELECT DISTINCT widget_id FROM widget_preferences ORDER BY widget_id",
                fetch=True
            )
        return [WidgetInstanceId(row["widget_id"]) for row in rows or []]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _put(
        conn: sqlite3.Connection,
        wid: WidgetInstanceId,
        key: str,
        values: Sequence[str]
    ) -> None:
        """Upsert one value inside an open transaction."""
        payload = json.dumps([str(v) for v in values])
        now = datetime.now().isoformat()
        conn.execute(
            """
            INSERT INTO widget_preferences (widget_id, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(widget_id, key) DO UPDATE SET value = ?, updated_at = ?
            """,
            (wid.value, key, payload, now, payload, now)
        )

    def _get(self, widget_id: Any, key: str) -> List[str]:
        wid = parse_widget_id(widget_id)
        if wid is None:
            return []

        with _storage_errors(f"read {key} for widget {wid}"):
            rows = self._db.execute(
                "SELECT value FROM widget_preferences WHERE widget_id = ? AND key = ?",
                (wid.value, key),
                fetch=True
            )
        if not rows:
            return []

        try:
            value = json.loads(rows[0]["value"])
        except (TypeError, json.JSONDecodeError) as e:
            log_error(f"Corrupt {key} value for widget {wid}: {e}")
            raise StorageError(f"Stored {key} for widget {wid} is not valid JSON") from e

        if not isinstance(value, list):
            raise StorageError(f"Stored {key} for widget {wid} is not a list")
        return [str(v) for v in value]
