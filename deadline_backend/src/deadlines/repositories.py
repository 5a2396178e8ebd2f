from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional, Union

from .errors import NotFoundError
from .schemas import HomeworkRecord, NewHomework, Patch
from .settings import get_settings
from .utils import new_uid, next_updated_at, now_ts

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for deadline storage backends.

    Every backend is safe for concurrent callers within one process. Failures
    are raised as RepoError subclasses.
    """

    @abstractmethod
    def list(self) -> List[HomeworkRecord]:
        """Return all non-deleted records sorted ascending by due_text."""

    @abstractmethod
    def get(self, uid: str) -> Optional[HomeworkRecord]:
        """Return the record with this uid, soft-deleted or not, or None if it never existed."""

    @abstractmethod
    def create(self, payload: NewHomework) -> HomeworkRecord:
        """Assign a fresh uid and timestamps, store and return the new record."""

    @abstractmethod
    def update(self, record: HomeworkRecord) -> HomeworkRecord:
        """
        Replace every field of the record with the same uid.

        Raises NotFoundError, or pydantic ValidationError before anything is
        written when a field holds an invalid value.
        """

    @abstractmethod
    def patch(self, uid: str, patch: Patch) -> HomeworkRecord:
        """Merge the provided patch fields into an existing record. Raises NotFoundError."""

    @abstractmethod
    def delete(self, uid: str) -> None:
        """Soft-delete a record. Raises NotFoundError; repeated deletes succeed."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository. Nothing survives a process restart.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, HomeworkRecord] = {}

    def list(self) -> List[HomeworkRecord]:
        with self._lock:
            items = [r.model_copy(deep=True) for r in self._items.values() if not r.deleted]
            items.sort(key=lambda r: r.due_text)
            return items

    def get(self, uid: str) -> Optional[HomeworkRecord]:
        with self._lock:
            item = self._items.get(uid)
            return None if item is None else item.model_copy(deep=True)

    def create(self, payload: NewHomework) -> HomeworkRecord:
        with self._lock:
            uid = new_uid()
            while uid in self._items:
                uid = new_uid()
            record = HomeworkRecord.from_new(payload, uid=uid, now=now_ts())
            self._items[uid] = record
            logger.debug("created %s", uid)
            return record.model_copy(deep=True)

    def update(self, record: HomeworkRecord) -> HomeworkRecord:
        record = record.validated()
        with self._lock:
            existing = self._items.get(record.uid)
            if existing is None:
                raise NotFoundError(record.uid)
            updated = record.model_copy(
                update={"updated_at": next_updated_at(existing.updated_at)}, deep=True
            )
            self._items[record.uid] = updated
            return updated.model_copy(deep=True)

    def patch(self, uid: str, patch: Patch) -> HomeworkRecord:
        with self._lock:
            existing = self._items.get(uid)
            if existing is None:
                raise NotFoundError(uid)
            merged = existing.apply_patch(patch, next_updated_at(existing.updated_at))
            self._items[uid] = merged
            return merged.model_copy(deep=True)

    def delete(self, uid: str) -> None:
        with self._lock:
            existing = self._items.get(uid)
            if existing is None:
                raise NotFoundError(uid)
            self._items[uid] = existing.model_copy(
                update={"deleted": True, "updated_at": next_updated_at(existing.updated_at)}
            )
            logger.debug("soft-deleted %s", uid)


# PUBLIC_INTERFACE
def init_repo(data_dir: Optional[Union[str, Path]] = None, backend: str = "sqlite") -> Repository:
    """
    Build the repository for a storage location.

    - data_dir is None: InMemoryRepository (no persistence)
    - data_dir set: SQLiteRepository under that directory, or JsonRepository
      when backend == "json". The directory and data file are created if missing.

    Raises UnavailableError when the storage location cannot be initialized.
    """
    if data_dir is None:
        logger.info("using in-memory repository")
        return InMemoryRepository()

    path = Path(data_dir)
    if backend == "json":
        from .json_store import JsonRepository

        logger.info("using JSON repository in %s", path)
        return JsonRepository(path)

    from .db import SQLiteRepository

    logger.info("using SQLite repository in %s", path)
    return SQLiteRepository(path)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository selected from settings.

    The instance is created once and shared by every caller.
    """
    settings = get_settings()
    return init_repo(settings.data_dir, settings.persistence_backend)
