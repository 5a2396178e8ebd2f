from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .datetimes import normalize_due_text

SCHEMA_VERSION = 1

# (percentage 0..100, label); serialized as a two-element JSON array
Milestone = Tuple[int, str]


def _validate_name(v: str) -> str:
    """
    Strip whitespace and enforce 1..200 length.
    """
    if v is None:
        raise ValueError("name is required")
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("name length must be between 1 and 200 characters")
    return s


def _validate_milestones(v: List[Milestone]) -> List[Milestone]:
    for percentage, _label in v:
        if not (0 <= percentage <= 100):
            raise ValueError("milestone percentage must be between 0 and 100")
    return v


# PUBLIC_INTERFACE
class NewHomework(BaseModel):
    """
    Creation payload. The repository assigns uid, timestamps, the deleted flag
    and the schema version.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Linear algebra problem set 4",
                "due_text": "2025-01-10 09:00",
                "difficulty": 6,
                "progress": 20,
                "tags": ["Academic", "Math"],
                "milestones": [[50, "Midpoint review"]],
            }
        }
    )

    name: str = Field(..., description="Display name of the deadline", min_length=1, max_length=200)
    due_text: str = Field(..., description='Due date as "YYYY-MM-DD HH:MM"')
    difficulty: int = Field(default=5, ge=1, le=10, description="Difficulty from 1 to 10")
    progress: int = Field(default=0, ge=0, le=100, description="Completion percentage")
    tags: List[str] = Field(default_factory=list, description="Free-form tags, order preserved")
    milestones: List[Milestone] = Field(
        default_factory=list, description="Ordered (percentage, label) pairs"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("due_text")
    @classmethod
    def validate_due_text(cls, v: str) -> str:
        """
        Parse the due date and store it in canonical zero-padded form.
        """
        return normalize_due_text(v)

    @field_validator("milestones")
    @classmethod
    def validate_milestones(cls, v: List[Milestone]) -> List[Milestone]:
        return _validate_milestones(v)


# PUBLIC_INTERFACE
class Patch(BaseModel):
    """
    Sparse partial update.

    Only fields that were explicitly provided are applied; everything else on
    the stored record is left untouched. Applying a patch always refreshes
    updated_at, even when no value actually changes.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    due_text: Optional[str] = None
    difficulty: Optional[int] = Field(default=None, ge=1, le=10)
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    tags: Optional[List[str]] = None
    milestones: Optional[List[Milestone]] = None
    deleted: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_name(v)

    @field_validator("due_text")
    @classmethod
    def validate_due_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return normalize_due_text(v)

    @field_validator("milestones")
    @classmethod
    def validate_milestones(cls, v: Optional[List[Milestone]]) -> Optional[List[Milestone]]:
        if v is None:
            return v
        return _validate_milestones(v)

    def changes(self) -> Dict[str, Any]:
        """Return the explicitly provided, non-null fields."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


# PUBLIC_INTERFACE
class HomeworkRecord(NewHomework):
    """
    Persisted representation of a deadline.

    Fields on top of NewHomework:
    - uid: sortable unique identifier assigned at creation, never reassigned
    - deleted: soft-delete flag; deleted records are hidden from list()
    - created_at / updated_at: integer epoch seconds
    - schema_version: persisted layout version, currently always 1
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uid": "01JGZ6XKQ8T3M5V0N2B4C6D8E9",
                "name": "Linear algebra problem set 4",
                "due_text": "2025-01-10 09:00",
                "difficulty": 6,
                "progress": 20,
                "tags": ["Academic", "Math"],
                "milestones": [[50, "Midpoint review"]],
                "deleted": False,
                "created_at": 1735689600,
                "updated_at": 1735693200,
                "schema_version": 1,
            }
        }
    )

    uid: str = Field(..., min_length=1, description="Opaque unique identifier")
    deleted: bool = Field(default=False, description="Soft-delete flag")
    created_at: int = Field(..., description="Creation time, epoch seconds")
    updated_at: int = Field(..., description="Last modification time, epoch seconds")
    schema_version: int = Field(default=SCHEMA_VERSION, description="Persisted layout version")

    @classmethod
    def from_new(cls, payload: NewHomework, uid: str, now: int) -> "HomeworkRecord":
        return cls(
            uid=uid,
            name=payload.name,
            due_text=payload.due_text,
            difficulty=payload.difficulty,
            progress=payload.progress,
            tags=list(payload.tags),
            milestones=list(payload.milestones),
            deleted=False,
            created_at=now,
            updated_at=now,
            schema_version=SCHEMA_VERSION,
        )

    def validated(self) -> "HomeworkRecord":
        """
        Re-run field validation. model_copy(update=...) skips it, so a record
        built that way may hold values that must never reach storage.
        """
        return HomeworkRecord.model_validate(self.model_dump())

    def apply_patch(self, patch: Patch, now: int) -> "HomeworkRecord":
        """Return a copy with the patch merged in and updated_at set to now."""
        return self.model_copy(update={**patch.changes(), "updated_at": now}, deep=True)


# PUBLIC_INTERFACE
class DeadlineOut(HomeworkRecord):
    """
    Record returned by the API, with urgency derived at response time.
    """

    urgency: float = Field(..., description="difficulty * (100 - progress) / hours until due")
