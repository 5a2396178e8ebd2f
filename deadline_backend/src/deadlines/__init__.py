"""
Deadline tracker package.

Value types live in deadlines.datetimes and deadlines.models, storage
backends behind deadlines.repositories.Repository, and the HTTP API in
deadlines.main.
"""
from .datetimes import Datetime, TimeDiff
from .errors import (
    NotFoundError,
    RepoError,
    SerdeError,
    SqlError,
    UnavailableError,
    UnknownError,
)
from .models import Deadline, sort_deadlines
from .repositories import InMemoryRepository, Repository, get_repository, init_repo
from .schemas import HomeworkRecord, NewHomework, Patch

__all__ = [
    "Datetime",
    "TimeDiff",
    "Deadline",
    "sort_deadlines",
    "HomeworkRecord",
    "NewHomework",
    "Patch",
    "Repository",
    "InMemoryRepository",
    "init_repo",
    "get_repository",
    "RepoError",
    "NotFoundError",
    "UnavailableError",
    "SerdeError",
    "SqlError",
    "UnknownError",
]
