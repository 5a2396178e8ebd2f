import pytest

from deadlines.db import SQLiteRepository
from deadlines.json_store import JsonRepository
from deadlines.repositories import InMemoryRepository
from deadlines.schemas import NewHomework


@pytest.fixture(params=["memory", "json", "sqlite"])
def repo(request, tmp_path):
    """Each contract test runs once per storage backend."""
    if request.param == "memory":
        yield InMemoryRepository()
    elif request.param == "json":
        yield JsonRepository(tmp_path / "json-data")
    else:
        r = SQLiteRepository(tmp_path / "sqlite-data")
        yield r
        r.close()


def make_payload(
    name="Problem set",
    due_text="2025-01-10 09:00",
    difficulty=5,
    progress=0,
    tags=None,
    milestones=None,
):
    return NewHomework(
        name=name,
        due_text=due_text,
        difficulty=difficulty,
        progress=progress,
        tags=tags if tags is not None else [],
        milestones=milestones if milestones is not None else [],
    )
