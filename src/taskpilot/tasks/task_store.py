# src/taskpilot/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import ActiveTaskConflict
from .task_models import (
    Task,
    TaskEvent,
    TaskEventType,
    TaskFilters,
    TaskPriority,
    TaskStatus,
)

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "category_id",
        "priority",
        "status",
        "scheduled_date",
        "estimated_minutes",
        "actual_start",
        "actual_end",
        "actual_minutes",
    }
)

_ACTIVE_INDEX = "uq_tasks_one_active_per_owner"


class TaskStore:
    """
    SQLite task store: tasks plus their append-only event ledger.

    The schema is migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Invariants enforced here, not in Python:
    - at most one in_progress task per owner (partial unique index)
    - task_events rows are never updated (trigger); they go away only
      with their task (ON DELETE CASCADE)

    Thread-safety:
    - each call opens its own SQLite connection,
    - except inside transaction(), where calls made on the same thread share
      one connection holding the write lock (BEGIN IMMEDIATE).
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened explicitly in transaction().
        conn = sqlite3.connect(str(self._db_path), timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.OperationalError):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        shared = getattr(self._local, "conn", None)
        if shared is not None:
            yield shared
            return
        conn = self._get_conn()
        try:
            yield conn
        finally:
            conn.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run the enclosed store calls atomically.

        Takes SQLite's write lock up front, so a read-check-write sequence
        inside the block cannot interleave with another writer. Reentrant:
        a nested call joins the outer transaction.
        """
        if getattr(self._local, "conn", None) is not None:
            yield
            return

        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            self._local.conn = conn
            try:
                yield
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            else:
                conn.execute("COMMIT")
            finally:
                self._local.conn = None
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._conn() as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    category_id TEXT,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    status TEXT NOT NULL DEFAULT 'pending',
                    scheduled_date TEXT,
                    estimated_minutes INTEGER,
                    actual_start REAL,
                    actual_end REAL,
                    actual_minutes INTEGER,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT")
            add_col("category_id", "TEXT")
            add_col("priority", "TEXT NOT NULL DEFAULT 'medium'")
            add_col("scheduled_date", "TEXT")
            add_col("estimated_minutes", "INTEGER")
            add_col("actual_start", "REAL")
            add_col("actual_end", "REAL")
            add_col("actual_minutes", "INTEGER")

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id TEXT NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    event_type TEXT NOT NULL,
                    timestamp REAL NOT NULL,
                    metadata TEXT NOT NULL DEFAULT '{}'
                )
                """
            )

            cur.execute(
                """
                CREATE TRIGGER IF NOT EXISTS task_events_append_only
                BEFORE UPDATE ON task_events
                BEGIN
                    SELECT RAISE(ABORT, 'task_events is append-only');
                END
                """
            )

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks(owner_id, status)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_owner_scheduled ON tasks(owner_id, scheduled_date)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_task_events_task ON task_events(task_id, timestamp, id)"
            )
            cur.execute(
                f"CREATE UNIQUE INDEX IF NOT EXISTS {_ACTIVE_INDEX} "
                "ON tasks(owner_id) WHERE status = 'in_progress'"
            )

    @staticmethod
    def _meta_to_str(meta: dict[str, Any] | None) -> str:
        if not meta:
            return "{}"
        try:
            return json.dumps(meta, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode event metadata; storing {}.")
            return "{}"

    @staticmethod
    def _str_to_meta(s: str | None) -> dict[str, Any]:
        if not s:
            return {}
        try:
            val = json.loads(s)
        except ValueError:
            return {}
        return val if isinstance(val, dict) else {}

    @staticmethod
    def _to_db(name: str, value: Any) -> Any:
        if value is None:
            return None
        if name in ("status", "priority"):
            return str(value)
        if name == "scheduled_date":
            return value.isoformat() if isinstance(value, date) else str(value)
        if name in ("actual_start", "actual_end"):
            return float(value)
        if name in ("estimated_minutes", "actual_minutes"):
            return int(value)
        return value

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        scheduled = row["scheduled_date"]
        return Task(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            name=str(row["name"] or ""),
            status=TaskStatus.from_db(row["status"]),
            priority=TaskPriority(row["priority"] or TaskPriority.MEDIUM.value),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
            description=row["description"],
            category_id=row["category_id"],
            scheduled_date=date.fromisoformat(scheduled) if scheduled else None,
            estimated_minutes=(
                int(row["estimated_minutes"]) if row["estimated_minutes"] is not None else None
            ),
            actual_start=float(row["actual_start"]) if row["actual_start"] is not None else None,
            actual_end=float(row["actual_end"]) if row["actual_end"] is not None else None,
            actual_minutes=int(row["actual_minutes"]) if row["actual_minutes"] is not None else None,
        )

    def _row_to_event(self, row: sqlite3.Row) -> TaskEvent:
        return TaskEvent(
            id=int(row["id"]),
            task_id=str(row["task_id"]),
            event_type=TaskEventType(row["event_type"]),
            timestamp=float(row["timestamp"]),
            metadata=self._str_to_meta(row["metadata"]),
        )

    # ---- tasks ----

    def count_tasks(self) -> int:
        with self._conn() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def create(
        self,
        *,
        owner_id: str,
        name: str,
        now_ts: float,
        description: str | None = None,
        category_id: str | None = None,
        priority: TaskPriority | str | None = None,
        scheduled_date: date | None = None,
        estimated_minutes: int | None = None,
    ) -> Task:
        if not owner_id:
            raise ValueError("owner_id is required")
        if not name or not name.strip():
            raise ValueError("name is required")

        task_id = uuid.uuid4().hex
        prio = TaskPriority(priority) if priority else TaskPriority.MEDIUM

        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, owner_id, name, description, category_id,
                    priority, status, scheduled_date, estimated_minutes,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    owner_id,
                    name.strip(),
                    description,
                    category_id,
                    prio.value,
                    TaskStatus.PENDING.value,
                    self._to_db("scheduled_date", scheduled_date),
                    self._to_db("estimated_minutes", estimated_minutes),
                    float(now_ts),
                    float(now_ts),
                ),
            )
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()

        logger.debug("Task added id=%s owner=%s name=%r", task_id, owner_id, name)
        return self._row_to_task(row)

    def find_by_id(self, task_id: str) -> Task | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def find_by_id_for_owner(self, task_id: str, owner_id: str) -> Task | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND owner_id = ?",
                (str(task_id), str(owner_id)),
            ).fetchone()
            return self._row_to_task(row) if row else None

    def update_fields(self, task_id: str, *, now_ts: float, **fields: Any) -> Task | None:
        """
        Partial update. Only the given keyword fields are written; pass None to
        store NULL. Returns the updated task (None if it does not exist).

        Raises ActiveTaskConflict when setting status=in_progress would give the
        owner a second running task.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown task fields: {sorted(unknown)}")

        if not fields:
            return self.find_by_id(task_id)

        sets = [f"{name} = ?" for name in fields]
        params: list[Any] = [self._to_db(name, value) for name, value in fields.items()]
        sets.append("updated_at = ?")
        params.append(float(now_ts))
        params.append(str(task_id))

        sql = f"UPDATE tasks SET {', '.join(sets)} WHERE id = ?"

        with self._conn() as conn:
            try:
                conn.execute(sql, params)
            except sqlite3.IntegrityError as exc:
                if "tasks.owner_id" not in str(exc):
                    raise
                row = conn.execute("SELECT owner_id FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
                raise ActiveTaskConflict(row["owner_id"] if row else "?") from exc
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def remove(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            return cur.rowcount > 0

    # ---- queries ----

    def list_by_filters(self, owner_id: str, filters: TaskFilters) -> list[Task]:
        conditions = ["owner_id = ?"]
        params: list[Any] = [owner_id]

        if filters.status is not None:
            conditions.append("status = ?")
            params.append(str(filters.status))
        if filters.date is not None:
            conditions.append("scheduled_date = ?")
            params.append(filters.date.isoformat())
        if filters.category_id:
            conditions.append("category_id = ?")
            params.append(filters.category_id)
        if filters.priority is not None:
            conditions.append("priority = ?")
            params.append(str(filters.priority))

        params.extend([int(filters.limit), int(filters.offset)])

        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT *
                FROM tasks
                WHERE {' AND '.join(conditions)}
                ORDER BY
                    CASE WHEN status = 'in_progress' THEN 0 ELSE 1 END,
                    scheduled_date IS NULL,
                    scheduled_date ASC,
                    created_at DESC,
                    rowid DESC
                LIMIT ? OFFSET ?
                """,
                params,
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def get_active_tasks_for_owner(self, owner_id: str, limit: int = 2) -> list[Task]:
        """
        In-progress tasks of the owner, newest start first.

        Returns a list (not a single task) so callers can notice broken data.
        """
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE owner_id = ? AND status = 'in_progress'
                ORDER BY actual_start DESC
                LIMIT ?
                """,
                (owner_id, int(limit)),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def get_tasks_for_day(
        self,
        owner_id: str,
        *,
        day: date,
        start_ts: float,
        end_ts: float,
        include_active: bool,
    ) -> list[Task]:
        """
        Tasks scheduled on `day`, or started within [start_ts, end_ts), or
        (with include_active) currently running.

        Ordering: in_progress first, then actual_start desc (nulls last),
        then created_at desc.
        """
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE owner_id = ?
                  AND (
                    scheduled_date = ?
                        OR (actual_start IS NOT NULL AND actual_start >= ? AND actual_start < ?)
                        OR (? AND status = 'in_progress')
                    )
                ORDER BY
                    CASE WHEN status = 'in_progress' THEN 0 ELSE 1 END,
                    actual_start IS NULL,
                    actual_start DESC,
                    created_at DESC,
                    rowid DESC
                """,
                (owner_id, day.isoformat(), float(start_ts), float(end_ts), 1 if include_active else 0),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def count_by_status_for_owner(
        self,
        owner_id: str,
        *,
        day: date,
        start_ts: float,
        end_ts: float,
    ) -> dict[TaskStatus, int]:
        counts = {s: 0 for s in TaskStatus}
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT status, COUNT(*) AS n
                FROM tasks
                WHERE owner_id = ?
                  AND (
                    scheduled_date = ?
                        OR (actual_start IS NOT NULL AND actual_start >= ? AND actual_start < ?)
                    )
                GROUP BY status
                """,
                (owner_id, day.isoformat(), float(start_ts), float(end_ts)),
            ).fetchall()
        for row in rows:
            counts[TaskStatus.from_db(row["status"])] = int(row["n"])
        return counts

    # ---- ledger ----

    def append_event(
        self,
        task_id: str,
        event_type: TaskEventType,
        *,
        at: float,
        metadata: dict[str, Any] | None = None,
    ) -> TaskEvent:
        with self._conn() as conn:
            cur = conn.execute(
                "INSERT INTO task_events(task_id, event_type, timestamp, metadata) VALUES (?, ?, ?, ?)",
                (str(task_id), str(event_type), float(at), self._meta_to_str(metadata)),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for task_events insert")
            row = conn.execute("SELECT * FROM task_events WHERE id = ?", (rowid,)).fetchone()
            return self._row_to_event(row)

    def events_for_task(self, task_id: str) -> list[TaskEvent]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM task_events WHERE task_id = ? ORDER BY timestamp ASC, id ASC",
                (str(task_id),),
            ).fetchall()
            return [self._row_to_event(r) for r in rows]

    def last_event_for_task(self, task_id: str) -> TaskEvent | None:
        with self._conn() as conn:
            row = conn.execute(
                """
                SELECT *
                FROM task_events
                WHERE task_id = ?
                ORDER BY timestamp DESC, id DESC
                LIMIT 1
                """,
                (str(task_id),),
            ).fetchone()
            return self._row_to_event(row) if row else None
