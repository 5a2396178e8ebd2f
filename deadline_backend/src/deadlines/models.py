from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .datetimes import Datetime
from .schemas import HomeworkRecord, NewHomework, Patch

# Floor for hours-until-due so urgency spikes instead of dividing by zero or
# flipping sign once the due moment has passed.
URGENCY_HOURS_FLOOR = 0.0001

SORT_ORDERS = ("due_date", "urgency", "progress")


# PUBLIC_INTERFACE
@dataclass
class Deadline:
    """
    In-memory domain aggregate for a deadline item.

    Fields:
    - id: record uid, empty for an unsaved draft
    - name: display name
    - due_date: when the item is due
    - difficulty: 1..10
    - progress: completion percentage 0..100
    - milestones: ordered (percentage, label) pairs
    - urgency: derived score; recomputed on every change and never persisted
    - tags: order-preserving, duplicates allowed
    """

    id: str
    name: str
    due_date: Datetime
    difficulty: int
    progress: int = 0
    milestones: List[Tuple[int, str]] = field(default_factory=list)
    urgency: float = 0.0
    tags: List[str] = field(default_factory=list)

    @classmethod
    def new(cls, id: str, name: str, due_date: Datetime, difficulty: int) -> "Deadline":
        return cls(id=id, name=name, due_date=due_date, difficulty=difficulty)

    @classmethod
    def from_record(cls, record: HomeworkRecord, now: Optional[Datetime] = None) -> "Deadline":
        """Build a Deadline from a stored record and derive its urgency."""
        deadline = cls(
            id=record.uid,
            name=record.name,
            due_date=Datetime.parse(record.due_text),
            difficulty=record.difficulty,
            progress=record.progress,
            milestones=[(p, label) for p, label in record.milestones],
            tags=list(record.tags),
        )
        deadline.update_urgency(now)
        return deadline

    def hours_until_due(self, now: Optional[Datetime] = None) -> float:
        """Hours from now until due; negative when overdue."""
        return self.due_date.time_diff(now or Datetime.now()).to_hours()

    def update_urgency(self, now: Optional[Datetime] = None) -> float:
        """
        Recompute urgency = difficulty * (100 - progress) / hours_until_due.

        hours_until_due is floored at a small positive constant.
        """
        hours_left = max(self.hours_until_due(now), URGENCY_HOURS_FLOOR)
        self.urgency = self.difficulty * (100 - self.progress) / hours_left
        return self.urgency

    def to_new_homework(self) -> NewHomework:
        return NewHomework(
            name=self.name,
            due_text=self.due_date.to_string(),
            difficulty=self.difficulty,
            progress=self.progress,
            tags=list(self.tags),
            milestones=list(self.milestones),
        )

    def to_patch(self) -> Patch:
        """A patch carrying every editable field of this deadline."""
        return Patch(
            name=self.name,
            due_text=self.due_date.to_string(),
            difficulty=self.difficulty,
            progress=self.progress,
            tags=list(self.tags),
            milestones=list(self.milestones),
        )


# PUBLIC_INTERFACE
def sort_deadlines(items: Iterable[Deadline], order: str = "due_date") -> List[Deadline]:
    """
    Return deadlines sorted for display.

    - due_date: earliest first
    - urgency: highest first
    - progress: lowest first
    """
    if order == "due_date":
        return sorted(items, key=lambda d: d.due_date)
    if order == "urgency":
        return sorted(items, key=lambda d: d.urgency, reverse=True)
    if order == "progress":
        return sorted(items, key=lambda d: d.progress)
    raise ValueError(f"unknown sort order {order!r}; expected one of {', '.join(SORT_ORDERS)}")


# PUBLIC_INTERFACE
def parse_tags(text: str) -> List[str]:
    """Split comma-separated tag input, trimming whitespace and dropping empties."""
    return [t.strip() for t in text.split(",") if t.strip()]
