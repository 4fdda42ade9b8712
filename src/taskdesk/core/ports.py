# src/taskdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
The HTTP client in taskdesk.api is one implementation; tests use an
in-memory fake. Every method raises SyncError subclasses only.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..comments.comment_models import Comment
    from ..tasks.task_models import Task
    from .session import User

TaskPayload = dict[str, Any]
# {"employee_id", "title", "description", "deadline", "progress", "status"}


class TaskTransport(Protocol):
    # Tasks
    async def list_tasks(self, *, employee_id: int) -> list[Task]: ...
    async def fetch_task(self, task_id: int) -> Task: ...
    async def update_task(self, task_id: int, payload: TaskPayload) -> None: ...
    async def create_task(self, payload: TaskPayload) -> Task: ...
    async def delete_task(self, task_id: int) -> None: ...

    # Users (comment authors, assignees)
    async def fetch_user(self, user_id: int) -> User: ...
    async def list_users(self) -> list[User]: ...

    # Comments
    async def list_comments(self, *, task_id: int) -> list[Comment]: ...
    async def create_comment(self, *, task_id: int, text: str) -> Comment: ...
    async def delete_comment(self, comment_id: int) -> None: ...
