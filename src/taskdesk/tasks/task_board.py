# src/taskdesk/tasks/task_board.py

"""
A task list view with editable progress.

The board owns its DraftStore and SyncController; both go away with it.
Employees see and edit their own tasks; managers pick an employee and can
create/delete tasks for them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from ..core.errors import AuthorizationError, SyncError, friendly_error_message
from ..core.ports import TaskTransport
from ..core.session import Session
from .draft_store import DraftRecord, DraftStore
from .sync_controller import SaveResult, SyncController
from .task_models import Task, TaskStatus, build_create_payload

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TaskRow:
    task: Task
    draft: DraftRecord
    editable: bool


class TaskBoard:
    def __init__(self, transport: TaskTransport, session: Session, *, employee_id: int | None = None) -> None:
        self._transport = transport
        self.session = session
        self.employee_id = session.user_id if employee_id is None else int(employee_id)
        self.drafts = DraftStore()
        self.sync = SyncController(self.drafts, transport)
        self.error: str | None = None
        self.loaded = False

    async def load(self) -> bool:
        """Fetch the task list and re-seed every draft from it."""
        try:
            tasks = await self._transport.list_tasks(employee_id=self.employee_id)
        except SyncError as e:
            logger.info("Loading tasks for employee %s failed (%s): %s", self.employee_id, e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return False

        self.drafts.seed(tasks)
        self.error = None
        self.loaded = True
        logger.info("Loaded %d tasks for employee %s", len(tasks), self.employee_id)
        return True

    def rows(self) -> list[TaskRow]:
        out: list[TaskRow] = []
        for task in self.drafts.tasks():
            draft = self.drafts.get(task.id)
            if draft is None:
                continue
            out.append(TaskRow(task=task, draft=draft, editable=self.session.can_edit_progress(task)))
        return out

    def draft(self, task_id: int) -> DraftRecord | None:
        return self.drafts.get(task_id)

    # ---- progress editing ----

    def edit(self, task_id: int, *, progress: object = None, status: TaskStatus | str | None = None) -> DraftRecord | None:
        task = self.drafts.truth(task_id)
        if task is None:
            return None
        if not self.session.can_edit_progress(task):
            self.drafts.fail(task_id, AuthorizationError("only the assignee can change progress", status=403))
            return None
        return self.drafts.edit(task_id, progress=progress, status=status)

    def reset(self, task_id: int) -> DraftRecord | None:
        return self.drafts.reset(task_id)

    async def save(self, task_id: int) -> SaveResult:
        return await self.sync.save(task_id)

    async def save_all(self) -> dict[int, SaveResult]:
        return await self.sync.save_all()

    # ---- manager actions ----

    async def create_task(self, *, title: str, description: str, deadline: str) -> Task | None:
        if not self.session.can_manage_tasks():
            self.error = friendly_error_message(AuthorizationError("only managers can create tasks", status=403))
            return None
        title = title.strip()
        if not title:
            self.error = "Task title is required."
            return None

        payload = build_create_payload(
            employee_id=self.employee_id,
            title=title,
            description=description.strip(),
            deadline=deadline.strip(),
        )
        try:
            task = await self._transport.create_task(payload)
        except SyncError as e:
            logger.info("Creating task failed (%s): %s", e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return None

        logger.info("Task %s created for employee %s", task.id, self.employee_id)
        await self.load()
        return task

    async def delete_task(self, task_id: int) -> bool:
        if not self.session.can_manage_tasks():
            self.error = friendly_error_message(AuthorizationError("only managers can delete tasks", status=403))
            return False
        try:
            await self._transport.delete_task(task_id)
        except SyncError as e:
            logger.info("Deleting task %s failed (%s): %s", task_id, e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return False

        self.drafts.forget(task_id)
        self.error = None
        return True

    def close(self) -> None:
        self.drafts.clear()
        self.loaded = False


def _parse_deadline(deadline: str) -> date | None:
    raw = (deadline or "").strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def deadline_hint(deadline: str, *, today: date | None = None) -> str:
    """Short human text for a deadline relative to today."""
    due = _parse_deadline(deadline)
    if due is None:
        return "no deadline"
    today = today or date.today()
    days_left = (due - today).days
    if days_left < 0:
        return f"overdue by {abs(days_left)} d"
    if days_left == 0:
        return "today"
    if days_left == 1:
        return "tomorrow"
    return f"{days_left} d left"
