# src/taskdesk/core/session.py

"""
Who is using the client.

A Session is created once after login and passed explicitly into the views
that need identity (permission checks, "is this my comment"). There is no
process-wide current user.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..comments.comment_models import Comment
    from ..tasks.task_models import Task


class Role(StrEnum):
    EMPLOYEE = "employee"
    MANAGER = "manager"

    @classmethod
    def from_api(cls, raw: str | None) -> Role:
        if raw and str(raw).strip().lower() == cls.MANAGER.value:
            return cls.MANAGER
        return cls.EMPLOYEE


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    name: str
    role: Role

    created_at: str = ""
    updated_at: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.username or f"User {self.id}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=int(data["id"]),
            username=str(data.get("username") or ""),
            name=str(data.get("name") or ""),
            role=Role.from_api(data.get("role")),
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )


@dataclass(slots=True, frozen=True)
class Session:
    user_id: int
    username: str
    role: Role
    token: str
    name: str = ""

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    @property
    def display_name(self) -> str:
        return self.name or self.username or f"User {self.user_id}"

    def can_edit_progress(self, task: Task) -> bool:
        # Progress belongs to the assignee.
        return self.role == Role.EMPLOYEE and task.employee_id == self.user_id

    def can_delete_comment(self, comment: Comment) -> bool:
        return comment.user_id == self.user_id or self.is_manager

    def can_manage_tasks(self) -> bool:
        return self.is_manager
