from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..datetimes import Datetime
from ..errors import NotFoundError
from ..models import SORT_ORDERS, Deadline, sort_deadlines
from ..repositories import Repository, get_repository
from ..schemas import DeadlineOut, HomeworkRecord, NewHomework, Patch

router = APIRouter(
    prefix="/api/v1/deadlines",
    tags=["deadlines"],
)


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _to_out(record: HomeworkRecord, now: Optional[Datetime] = None) -> DeadlineOut:
    deadline = Deadline.from_record(record, now)
    return DeadlineOut(**record.model_dump(), urgency=deadline.urgency)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=DeadlineOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Deadline",
    description="Create a new deadline and return the stored record.",
    responses={
        201: {"description": "Deadline created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_deadline(payload: NewHomework, repo: Repository = Depends(_get_repo)) -> DeadlineOut:
    """
    Create a new deadline.
    """
    return _to_out(repo.create(payload))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[DeadlineOut],
    summary="List Deadlines",
    description=(
        "List deadlines that have not been deleted.\n\n"
        "Query parameters:\n"
        "- sort: due_date (earliest first, default), urgency (highest first) "
        "or progress (lowest first)"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "Invalid query parameters"},
    },
)
def list_deadlines(
    sort: Optional[str] = Query("due_date", description="One of due_date, urgency, progress"),
    repo: Repository = Depends(_get_repo),
) -> List[DeadlineOut]:
    """
    List deadlines with urgency derived against a single "now".
    """
    order = (sort or "due_date").strip().lower()
    if order not in SORT_ORDERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"sort must be one of: {', '.join(SORT_ORDERS)}",
        )

    now = Datetime.now()
    records = {r.uid: r for r in repo.list()}
    deadlines = [Deadline.from_record(r, now) for r in records.values()]
    return [
        DeadlineOut(**records[d.id].model_dump(), urgency=d.urgency)
        for d in sort_deadlines(deadlines, order)
    ]


# PUBLIC_INTERFACE
@router.get(
    "/{uid}",
    response_model=DeadlineOut,
    summary="Get Deadline",
    description="Get a single deadline by uid. Soft-deleted deadlines are still returned.",
    responses={
        200: {"description": "Deadline found"},
        404: {"description": "Deadline not found"},
    },
)
def get_deadline(uid: str, repo: Repository = Depends(_get_repo)) -> DeadlineOut:
    """
    Retrieve a single deadline by its uid.
    """
    record = repo.get(uid)
    if record is None:
        raise NotFoundError(uid)
    return _to_out(record)


# PUBLIC_INTERFACE
@router.put(
    "/{uid}",
    response_model=DeadlineOut,
    summary="Replace Deadline",
    description=(
        "Replace every editable field of a deadline. Omitted fields take their schema defaults. "
        "uid, created_at and the deleted flag are kept."
    ),
    responses={
        200: {"description": "Deadline updated"},
        404: {"description": "Deadline not found"},
    },
)
def put_deadline(uid: str, payload: NewHomework, repo: Repository = Depends(_get_repo)) -> DeadlineOut:
    """
    Full replace implemented through the repository's update operation.
    """
    current = repo.get(uid)
    if current is None:
        raise NotFoundError(uid)
    replacement = HomeworkRecord(
        **payload.model_dump(),
        uid=current.uid,
        deleted=current.deleted,
        created_at=current.created_at,
        updated_at=current.updated_at,
        schema_version=current.schema_version,
    )
    return _to_out(repo.update(replacement))


# PUBLIC_INTERFACE
@router.patch(
    "/{uid}",
    response_model=DeadlineOut,
    summary="Update Deadline",
    description="Partially update fields of a deadline. Only provided fields change.",
    responses={
        200: {"description": "Deadline updated"},
        404: {"description": "Deadline not found"},
    },
)
def patch_deadline(uid: str, payload: Patch, repo: Repository = Depends(_get_repo)) -> DeadlineOut:
    """
    Partial update of a deadline.
    """
    return _to_out(repo.patch(uid, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{uid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Deadline",
    description="Soft-delete a deadline. It disappears from the list but can still be fetched.",
    responses={
        204: {"description": "Deadline deleted"},
        404: {"description": "Deadline not found"},
    },
)
def delete_deadline(uid: str, repo: Repository = Depends(_get_repo)) -> None:
    """
    Delete a deadline. Returns 204 on success, 404 if it never existed.
    """
    repo.delete(uid)
    return None
