import json

import pytest

from conftest import make_payload
from deadlines.errors import NotFoundError
from deadlines.json_store import JsonRepository
from deadlines.schemas import Patch


@pytest.fixture
def json_repo(tmp_path):
    return JsonRepository(tmp_path / "data")


class TestFileLayout:
    def test_creates_directory_and_empty_collection(self, tmp_path):
        data_dir = tmp_path / "a" / "b"
        repo = JsonRepository(data_dir)
        assert repo.path == data_dir / "deadlines.json"
        assert json.loads(repo.path.read_text()) == []

    def test_existing_file_is_kept(self, tmp_path):
        first = JsonRepository(tmp_path)
        rec = first.create(make_payload())
        second = JsonRepository(tmp_path)
        assert second.get(rec.uid) == rec

    def test_record_fields_on_disk(self, json_repo):
        rec = json_repo.create(
            make_payload(name="Reading", tags=["Optional"], milestones=[(50, "Midpoint Review")])
        )
        data = json.loads(json_repo.path.read_text())
        assert data == [
            {
                "uid": rec.uid,
                "name": "Reading",
                "due_text": "2025-01-10 09:00",
                "difficulty": 5,
                "progress": 0,
                "tags": ["Optional"],
                "milestones": [[50, "Midpoint Review"]],
                "deleted": False,
                "created_at": rec.created_at,
                "updated_at": rec.updated_at,
                "schema_version": 1,
            }
        ]

    def test_reload_yields_equal_records(self, tmp_path):
        repo = JsonRepository(tmp_path)
        created = [
            repo.create(make_payload(name=f"Task {i}", due_text=f"2025-01-0{9 - i} 12:00", tags=[str(i)]))
            for i in range(4)
        ]
        repo.delete(created[2].uid)

        reloaded = JsonRepository(tmp_path)
        for rec in created:
            fetched = reloaded.get(rec.uid)
            assert fetched.model_dump(exclude={"deleted", "updated_at"}) == rec.model_dump(
                exclude={"deleted", "updated_at"}
            )
        assert [r.name for r in reloaded.list()] == ["Task 3", "Task 1", "Task 0"]


class TestCorruptFile:
    def test_unparseable_file_reads_as_empty(self, json_repo):
        json_repo.path.write_text("{ not json")
        assert json_repo.list() == []
        assert json_repo.get("anything") is None

    def test_invalid_records_read_as_empty(self, json_repo):
        json_repo.path.write_text(json.dumps([{"uid": "x", "name": "missing fields"}]))
        assert json_repo.list() == []

    def test_one_overlong_name_makes_whole_file_read_as_empty(self, json_repo):
        rec = json_repo.create(make_payload(name="Valid"))
        data = json.loads(json_repo.path.read_text())
        data.append({**data[0], "uid": "01ARZ3NDEKTSV4RRFFQ69G5FAV", "name": "x" * 201})
        json_repo.path.write_text(json.dumps(data))

        assert json_repo.list() == []
        assert json_repo.get(rec.uid) is None

    def test_next_write_replaces_corrupt_content(self, json_repo):
        json_repo.path.write_text("garbage")
        rec = json_repo.create(make_payload())
        assert [r["uid"] for r in json.loads(json_repo.path.read_text())] == [rec.uid]


class TestUnchangedOnFailure:
    def test_patch_missing_uid_leaves_file_bytes_unchanged(self, json_repo):
        json_repo.create(make_payload(name="One"))
        json_repo.create(make_payload(name="Two"))
        before = json_repo.path.read_bytes()

        with pytest.raises(NotFoundError):
            json_repo.patch("01ARZ3NDEKTSV4RRFFQ69G5FAV", Patch(progress=5))

        assert json_repo.path.read_bytes() == before

    def test_delete_missing_uid_leaves_file_bytes_unchanged(self, json_repo):
        json_repo.create(make_payload())
        before = json_repo.path.read_bytes()
        with pytest.raises(NotFoundError):
            json_repo.delete("missing")
        assert json_repo.path.read_bytes() == before
