from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Generator, List, Optional

from pydantic import ValidationError

from .errors import NotFoundError, SerdeError, SqlError, UnavailableError
from .repositories import Repository
from .schemas import HomeworkRecord, NewHomework, Patch
from .utils import new_uid, next_updated_at, now_ts

logger = logging.getLogger(__name__)

FILE_NAME = "deadlines.db"


@dataclass(frozen=True)
class _Cols:
    table: str = "homeworks"
    uid: str = "uid"
    name: str = "name"
    due_text: str = "due_text"
    difficulty: str = "difficulty"
    progress: str = "progress"
    tags: str = "tags"
    milestones: str = "milestones"
    deleted: str = "deleted"
    created_at: str = "created_at"
    updated_at: str = "updated_at"
    schema_version: str = "schema_version"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    One connection is owned by the instance and guarded by a lock held for
    each whole operation. Writes run inside a transaction that commits only
    when every statement succeeded.
    """

    def __init__(self, data_dir: Path) -> None:
        data_dir = Path(data_dir)
        self._db_path = data_dir / FILE_NAME
        self._lock = RLock()
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
        except (OSError, sqlite3.Error) as e:
            raise UnavailableError(str(e)) from e
        self._connection.row_factory = sqlite3.Row
        try:
            self._connection.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as e:
            logger.debug("WAL journal mode not enabled for %s: %s", self._db_path, e)
        self._init_db()

    @property
    def path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        with self._lock:
            try:
                yield self._connection
            except sqlite3.Error as e:
                raise SqlError(str(e)) from e

    @contextmanager
    def _transaction(self) -> Generator[sqlite3.Connection, None, None]:
        # sqlite3's connection context manager commits on success and rolls
        # back when the block raises.
        with self._conn() as conn:
            with conn:
                yield conn

    def _init_db(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.uid} TEXT PRIMARY KEY,
                    {_COLS.name} TEXT NOT NULL,
                    {_COLS.due_text} TEXT NOT NULL,
                    {_COLS.difficulty} INTEGER NOT NULL,
                    {_COLS.progress} INTEGER NOT NULL,
                    {_COLS.tags} TEXT NOT NULL,
                    {_COLS.milestones} TEXT NOT NULL,
                    {_COLS.deleted} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} INTEGER NOT NULL,
                    {_COLS.updated_at} INTEGER NOT NULL,
                    {_COLS.schema_version} INTEGER NOT NULL DEFAULT 1
                )
                """
            )
            for col in (_COLS.due_text, _COLS.updated_at, _COLS.deleted):
                conn.execute(
                    f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_{col} ON {_COLS.table}({col})"
                )

    def _row_to_record(self, row: sqlite3.Row) -> HomeworkRecord:
        try:
            return HomeworkRecord(
                uid=row[_COLS.uid],
                name=row[_COLS.name],
                due_text=row[_COLS.due_text],
                difficulty=row[_COLS.difficulty],
                progress=row[_COLS.progress],
                tags=json.loads(row[_COLS.tags]),
                milestones=json.loads(row[_COLS.milestones]),
                deleted=bool(row[_COLS.deleted]),
                created_at=row[_COLS.created_at],
                updated_at=row[_COLS.updated_at],
                schema_version=row[_COLS.schema_version],
            )
        except (ValueError, TypeError, ValidationError) as e:
            raise SerdeError(f"row {row[_COLS.uid]!r}: {e}") from e

    @staticmethod
    def _columns(record: HomeworkRecord) -> tuple:
        """Column values in table order, tags and milestones encoded as JSON text."""
        data = record.model_dump(mode="json")
        return (
            data["uid"],
            data["name"],
            data["due_text"],
            data["difficulty"],
            data["progress"],
            json.dumps(data["tags"]),
            json.dumps(data["milestones"]),
            1 if data["deleted"] else 0,
            data["created_at"],
            data["updated_at"],
            data["schema_version"],
        )

    def list(self) -> List[HomeworkRecord]:
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                WHERE {_COLS.deleted} = 0
                ORDER BY {_COLS.due_text} ASC
                """
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def get(self, uid: str) -> Optional[HomeworkRecord]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.uid} = ?", (uid,)
            ).fetchone()
        return self._row_to_record(row) if row else None

    def create(self, payload: NewHomework) -> HomeworkRecord:
        record = HomeworkRecord.from_new(payload, uid=new_uid(), now=now_ts())
        with self._transaction() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.uid}, {_COLS.name}, {_COLS.due_text},
                    {_COLS.difficulty}, {_COLS.progress}, {_COLS.tags}, {_COLS.milestones},
                    {_COLS.deleted}, {_COLS.created_at}, {_COLS.updated_at}, {_COLS.schema_version})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._columns(record),
            )
        logger.debug("created %s in %s", record.uid, self._db_path)
        return record

    def _current_updated_at(self, conn: sqlite3.Connection, uid: str) -> int:
        row = conn.execute(
            f"SELECT {_COLS.updated_at} FROM {_COLS.table} WHERE {_COLS.uid} = ?", (uid,)
        ).fetchone()
        if row is None:
            raise NotFoundError(uid)
        return int(row[_COLS.updated_at])

    def update(self, record: HomeworkRecord) -> HomeworkRecord:
        record = record.validated()
        with self._transaction() as conn:
            previous = self._current_updated_at(conn, record.uid)
            updated = record.model_copy(update={"updated_at": next_updated_at(previous)}, deep=True)
            uid, *values = self._columns(updated)
            conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.name} = ?, {_COLS.due_text} = ?, {_COLS.difficulty} = ?,
                    {_COLS.progress} = ?, {_COLS.tags} = ?, {_COLS.milestones} = ?,
                    {_COLS.deleted} = ?, {_COLS.created_at} = ?, {_COLS.updated_at} = ?,
                    {_COLS.schema_version} = ?
                WHERE {_COLS.uid} = ?
                """,
                (*values, uid),
            )
        return updated

    def patch(self, uid: str, patch: Patch) -> HomeworkRecord:
        # get -> merge -> update; the lock is reentrant so the whole sequence
        # runs without another thread in between.
        with self._lock:
            current = self.get(uid)
            if current is None:
                raise NotFoundError(uid)
            merged = current.apply_patch(patch, current.updated_at)
            return self.update(merged)

    def delete(self, uid: str) -> None:
        with self._transaction() as conn:
            previous = self._current_updated_at(conn, uid)
            conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.deleted} = 1, {_COLS.updated_at} = ? WHERE {_COLS.uid} = ?",
                (next_updated_at(previous), uid),
            )
        logger.debug("soft-deleted %s in %s", uid, self._db_path)
