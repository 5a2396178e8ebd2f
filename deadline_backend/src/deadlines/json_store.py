"""
Flat-file repository storing the whole collection as one JSON document.

Every operation, including a single get, reads the entire file; mutations
rewrite the entire file. Suitable for small collections only.

Known limitations:
- Writes truncate and rewrite the file in place (no atomic rename), so a
  crash mid-write can leave a corrupted file behind.
- A file that fails to parse is read as an empty collection instead of
  raising. The next successful write then replaces the unreadable content,
  which silently loses whatever the file held.
- Reads validate every record as strictly as writes do (for example names
  longer than 200 characters are rejected), so a single hand-edited record
  that breaks a field rule makes the whole file read as empty, with the same
  data loss on the next write.
- The lock only serializes callers inside this process.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import NotFoundError, SerdeError, UnavailableError
from .repositories import Repository
from .schemas import HomeworkRecord, NewHomework, Patch
from .utils import new_uid, next_updated_at, now_ts

logger = logging.getLogger(__name__)

FILE_NAME = "deadlines.json"

_RECORDS = TypeAdapter(List[HomeworkRecord])


class JsonRepository(Repository):
    """
    Whole-document JSON repository implementing the Repository interface.
    """

    def __init__(self, data_dir: Path) -> None:
        data_dir = Path(data_dir)
        self._path = data_dir / FILE_NAME
        self._lock = Lock()
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._path.write_text("[]", encoding="utf-8")
        except OSError as e:
            raise UnavailableError(str(e)) from e

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[HomeworkRecord]:
        try:
            raw = self._path.read_bytes()
        except OSError as e:
            raise UnavailableError(str(e)) from e
        try:
            return _RECORDS.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "could not parse %s, treating it as empty (%d errors)", self._path, e.error_count()
            )
            return []

    def _save(self, records: List[HomeworkRecord]) -> None:
        try:
            payload = json.dumps(_RECORDS.dump_python(records, mode="json"), indent=2)
        except (TypeError, ValueError) as e:
            raise SerdeError(str(e)) from e
        try:
            with open(self._path, "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as e:
            raise UnavailableError(str(e)) from e

    @staticmethod
    def _index_of(records: List[HomeworkRecord], uid: str) -> int:
        for i, r in enumerate(records):
            if r.uid == uid:
                return i
        raise NotFoundError(uid)

    def list(self) -> List[HomeworkRecord]:
        with self._lock:
            records = [r for r in self._load() if not r.deleted]
        records.sort(key=lambda r: r.due_text)
        return records

    def get(self, uid: str) -> Optional[HomeworkRecord]:
        with self._lock:
            for r in self._load():
                if r.uid == uid:
                    return r
            return None

    def create(self, payload: NewHomework) -> HomeworkRecord:
        with self._lock:
            records = self._load()
            taken = {r.uid for r in records}
            uid = new_uid()
            while uid in taken:
                uid = new_uid()
            record = HomeworkRecord.from_new(payload, uid=uid, now=now_ts())
            records.append(record)
            self._save(records)
            logger.debug("created %s in %s", uid, self._path)
            return record

    def update(self, record: HomeworkRecord) -> HomeworkRecord:
        record = record.validated()
        with self._lock:
            records = self._load()
            idx = self._index_of(records, record.uid)
            updated = record.model_copy(
                update={"updated_at": next_updated_at(records[idx].updated_at)}, deep=True
            )
            records[idx] = updated
            self._save(records)
            return updated

    def patch(self, uid: str, patch: Patch) -> HomeworkRecord:
        with self._lock:
            records = self._load()
            idx = self._index_of(records, uid)
            current = records[idx]
            merged = current.apply_patch(patch, next_updated_at(current.updated_at))
            records[idx] = merged
            self._save(records)
            return merged

    def delete(self, uid: str) -> None:
        with self._lock:
            records = self._load()
            idx = self._index_of(records, uid)
            current = records[idx]
            records[idx] = current.model_copy(
                update={"deleted": True, "updated_at": next_updated_at(current.updated_at)}
            )
            self._save(records)
            logger.debug("soft-deleted %s in %s", uid, self._path)
