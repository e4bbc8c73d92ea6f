from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Iterable

import aiosqlite

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH = Path("data/leadflow.db")

_TASK_SELECT = """
    SELECT t.id, t.first_name, t.phone, t.notes, t.status, t.priority,
           t.agent_id, t.upload_id, t.created_at, t.updated_at,
           a.name AS agent_name, a.email AS agent_email
    FROM tasks t
    LEFT JOIN agents a ON a.id = t.agent_id
"""

_TASK_COLUMNS = (
    "id",
    "first_name",
    "phone",
    "notes",
    "status",
    "priority",
    "agent_id",
    "upload_id",
    "created_at",
    "updated_at",
)

_UPDATABLE_TASK_COLUMNS = frozenset({"status", "priority", "notes", "updated_at"})


class Database:
    """Async SQLite document store for agents, tasks and uploads.

    Holds a single persistent connection with WAL mode for concurrent reads.
    All writes are serialised through that connection.
    """

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else _DEFAULT_DB_PATH
        self._conn: aiosqlite.Connection | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the database file, apply the schema, and open the persistent connection."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        schema_sql = (
            resources.files("leadflow.db").joinpath("schema.sql").read_text()
        )

        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA foreign_keys=ON")
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

        logger.info("Database initialized at %s", self.db_path)

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        assert self._conn is not None, "Database not initialized, call initialize() first"
        return self._conn

    # ------------------------------------------------------------------
    # Agent operations
    # ------------------------------------------------------------------

    async def insert_agent(self, agent: dict[str, Any]) -> None:
        await self.conn.execute(
            """
            INSERT INTO agents (id, name, email, mobile, password_hash, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                agent["id"],
                agent["name"],
                agent["email"],
                agent["mobile"],
                agent["password_hash"],
                agent["created_at"],
            ),
        )
        await self.conn.commit()

    async def get_agent(self, agent_id: str) -> dict[str, Any] | None:
        cursor = await self.conn.execute("SELECT * FROM agents WHERE id = ?", (agent_id,))
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def get_agent_by_email(self, email: str) -> dict[str, Any] | None:
        cursor = await self.conn.execute(
            "SELECT * FROM agents WHERE email = ? COLLATE NOCASE", (email,)
        )
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def list_agents(self) -> list[dict[str, Any]]:
        """All agents in registration order; this order is the distribution pool."""
        cursor = await self.conn.execute(
            "SELECT * FROM agents ORDER BY created_at ASC, rowid ASC"
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Task operations
    # ------------------------------------------------------------------

    async def insert_task(self, task: dict[str, Any]) -> None:
        await self.conn.execute(
            f"""
            INSERT INTO tasks ({", ".join(_TASK_COLUMNS)})
            VALUES ({", ".join("?" for _ in _TASK_COLUMNS)})
            """,
            tuple(task.get(column) for column in _TASK_COLUMNS),
        )
        await self.conn.commit()

    async def get_task(self, task_id: str) -> dict[str, Any] | None:
        cursor = await self.conn.execute(f"{_TASK_SELECT} WHERE t.id = ?", (task_id,))
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def list_tasks(self, agent_id: str | None = None) -> list[dict[str, Any]]:
        if agent_id:
            cursor = await self.conn.execute(
                f"{_TASK_SELECT} WHERE t.agent_id = ? ORDER BY t.created_at DESC, t.seq DESC",
                (agent_id,),
            )
        else:
            cursor = await self.conn.execute(
                f"{_TASK_SELECT} ORDER BY t.created_at DESC, t.seq DESC"
            )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> bool:
        unknown = set(fields) - _UPDATABLE_TASK_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update task columns: {sorted(unknown)}")
        if not fields:
            return await self.get_task(task_id) is not None

        assignments = ", ".join(f"{column} = ?" for column in fields)
        cursor = await self.conn.execute(
            f"UPDATE tasks SET {assignments} WHERE id = ?",
            (*fields.values(), task_id),
        )
        await self.conn.commit()
        return cursor.rowcount > 0

    async def delete_task(self, task_id: str) -> bool:
        cursor = await self.conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        await self.conn.commit()
        return cursor.rowcount > 0

    async def delete_tasks(self, task_ids: Iterable[str]) -> int:
        ids = list(task_ids)
        if not ids:
            return 0
        cursor = await self.conn.execute(
            f"DELETE FROM tasks WHERE id IN ({', '.join('?' for _ in ids)})",
            ids,
        )
        await self.conn.commit()
        return cursor.rowcount

    async def count_tasks(self) -> int:
        cursor = await self.conn.execute("SELECT COUNT(*) FROM tasks")
        row = await cursor.fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Upload operations
    # ------------------------------------------------------------------

    async def insert_upload(self, upload: dict[str, Any]) -> None:
        await self.conn.execute(
            """
            INSERT INTO uploads
                (id, original_name, stored_name, content_type, size, path,
                 uploaded_at, distributed_count)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                upload["id"],
                upload["original_name"],
                upload["stored_name"],
                upload["content_type"],
                upload["size"],
                upload["path"],
                upload["uploaded_at"],
                upload["distributed_count"],
            ),
        )
        await self.conn.commit()

    async def list_uploads(self) -> list[dict[str, Any]]:
        cursor = await self.conn.execute(
            "SELECT * FROM uploads ORDER BY uploaded_at DESC, rowid DESC"
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------

    async def log_event(
        self, event_type: str, agent_id: str | None, details: dict[str, Any] | None = None
    ) -> None:
        await self.conn.execute(
            """
            INSERT INTO event_log (event_type, agent_id, details)
            VALUES (?, ?, ?)
            """,
            (event_type, agent_id, json.dumps(details) if details else None),
        )
        await self.conn.commit()

    async def get_events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        if event_type:
            cursor = await self.conn.execute(
                "SELECT * FROM event_log WHERE event_type = ? ORDER BY id",
                (event_type,),
            )
        else:
            cursor = await self.conn.execute("SELECT * FROM event_log ORDER BY id")
        rows = await cursor.fetchall()
        events = []
        for row in rows:
            d = dict(row)
            d["details"] = json.loads(d["details"]) if d["details"] else {}
            events.append(d)
        return events
