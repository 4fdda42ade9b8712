# src/taskdesk/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

MIN_PROGRESS = 0
MAX_PROGRESS = 100


class TaskStatus(StrEnum):
    """
    Task lifecycle status as the task service spells it.

    Notes:
    - The service stores status as a free string; unknown values are read as
      pending so a bad row never breaks the whole list.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_api(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.PENDING


@dataclass(slots=True, frozen=True)
class FieldValues:
    """The two coupled, user-editable fields of a task."""

    progress: int
    status: TaskStatus


@dataclass(slots=True)
class Task:
    id: int
    employee_id: int
    title: str
    description: str
    progress: int
    status: TaskStatus
    deadline: str

    created_at: str = ""
    updated_at: str = ""

    @property
    def fields(self) -> FieldValues:
        return FieldValues(progress=self.progress, status=self.status)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        try:
            progress = int(data.get("progress") or 0)
        except (TypeError, ValueError):
            progress = 0
        progress = max(MIN_PROGRESS, min(MAX_PROGRESS, progress))

        return cls(
            id=int(data["id"]),
            employee_id=int(data.get("employee_id") or 0),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            progress=progress,
            status=TaskStatus.from_api(data.get("status")),
            deadline=str(data.get("deadline") or ""),
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )


def build_update_payload(task: Task, values: FieldValues) -> dict[str, Any]:
    """
    PUT /tasks/{id} body: the task's unedited fields with the edited
    progress/status on top. The service replaces the whole record, so every
    field must be present.
    """
    return {
        "employee_id": task.employee_id,
        "title": task.title,
        "description": task.description,
        "deadline": task.deadline,
        "progress": int(values.progress),
        "status": values.status.value,
    }


def build_create_payload(
        *,
        employee_id: int,
        title: str,
        description: str,
        deadline: str,
) -> dict[str, Any]:
    """New tasks always start untouched: 0% and pending."""
    return {
        "employee_id": int(employee_id),
        "title": title,
        "description": description,
        "deadline": deadline,
        "progress": MIN_PROGRESS,
        "status": TaskStatus.PENDING.value,
    }
