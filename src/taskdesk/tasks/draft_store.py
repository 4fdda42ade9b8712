# src/taskdesk/tasks/draft_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..core.errors import ErrorKind, SyncError, friendly_error_message
from .coupling import FieldChange, couple
from .task_models import FieldValues, Task, TaskStatus

logger = logging.getLogger(__name__)

Coupler = Callable[[FieldValues, FieldChange], FieldValues]


@dataclass(slots=True)
class DraftRecord:
    """
    Local, unsaved view of one task's progress/status.

    Invariants:
    - dirty is False whenever (progress, status) equals the server truth
    - while saving is True the fields are frozen (edits are dropped)
    """

    progress: int
    status: TaskStatus
    dirty: bool = False
    saving: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None
    success: str | None = None

    @property
    def values(self) -> FieldValues:
        return FieldValues(progress=self.progress, status=self.status)

    @classmethod
    def from_task(cls, task: Task) -> DraftRecord:
        return cls(progress=task.progress, status=task.status)


class DraftStore:
    """
    Per-task drafts layered over the list of server-truth tasks.

    Owned by a single view (TaskBoard). Mutation happens only from the event
    loop thread, so no locking is needed.

    Every seed() bumps `generation`; a save that started under an older
    generation settles into nothing.
    """

    def __init__(self, coupler: Coupler = couple) -> None:
        self._couple = coupler
        self._truth: dict[int, Task] = {}
        self._order: list[int] = []
        self._drafts: dict[int, DraftRecord] = {}
        self.generation = 0

    # ---- reads ----

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._drafts

    def __len__(self) -> int:
        return len(self._drafts)

    def get(self, task_id: int) -> DraftRecord | None:
        return self._drafts.get(task_id)

    def truth(self, task_id: int) -> Task | None:
        return self._truth.get(task_id)

    def tasks(self) -> list[Task]:
        """Server-truth tasks in load order."""
        return [self._truth[i] for i in self._order if i in self._truth]

    def dirty_ids(self) -> list[int]:
        return [i for i in self._order if (d := self._drafts.get(i)) is not None and d.dirty]

    # ---- lifecycle ----

    def seed(self, tasks: Iterable[Task]) -> None:
        """(Re)initialize one clean draft per task; drop everything else."""
        self.generation += 1
        self._truth = {}
        self._order = []
        self._drafts = {}
        for task in tasks:
            if task.id not in self._truth:
                self._order.append(task.id)
            self._truth[task.id] = task
            self._drafts[task.id] = DraftRecord.from_task(task)
        logger.debug("Drafts seeded: %d tasks (generation=%d)", len(self._drafts), self.generation)

    def clear(self) -> None:
        self.seed(())

    # ---- user edits ----

    def edit(self, task_id: int, *, progress: object = None, status: TaskStatus | str | None = None) -> DraftRecord | None:
        """
        Apply a user edit to the current draft.

        No-op (returns None) for unknown ids and while the task is saving.
        """
        draft = self._drafts.get(task_id)
        truth = self._truth.get(task_id)
        if draft is None or truth is None:
            return None
        if draft.saving:
            logger.debug("Edit dropped: task %s is saving", task_id)
            return None

        result = self._couple(draft.values, FieldChange(progress=progress, status=status))
        draft.progress = result.progress
        draft.status = result.status
        draft.dirty = result != truth.fields
        draft.error = None
        draft.error_kind = None
        draft.success = None
        return draft

    def reset(self, task_id: int) -> DraftRecord | None:
        """Restore the draft to the last known server values."""
        draft = self._drafts.get(task_id)
        truth = self._truth.get(task_id)
        if draft is None or truth is None or draft.saving or not draft.dirty:
            return None

        draft.progress = truth.progress
        draft.status = truth.status
        draft.dirty = False
        draft.error = None
        draft.error_kind = None
        return draft

    def fail(self, task_id: int, error: SyncError) -> None:
        """Record an error on a draft without touching its fields."""
        draft = self._drafts.get(task_id)
        if draft is None:
            return
        draft.error = friendly_error_message(error)
        draft.error_kind = error.kind
        draft.success = None

    # ---- save transitions (SyncController only) ----

    def mark_saving(self, task_id: int) -> bool:
        draft = self._drafts.get(task_id)
        if draft is None or draft.saving:
            return False
        draft.saving = True
        draft.error = None
        draft.error_kind = None
        draft.success = None
        return True

    def mark_settled(
            self,
            task_id: int,
            *,
            generation: int,
            fresh: Task | None = None,
            error: SyncError | None = None,
            success: str | None = None,
    ) -> bool:
        """
        Finish a save.

        - fresh given: replace truth and reconcile the draft to it (clean)
        - error given: keep the draft fields and dirty flag, store the error
        Returns False when the settlement was discarded (stale generation or
        the task is gone).
        """
        if generation != self.generation:
            logger.debug("Stale settlement for task %s discarded (generation %d != %d)", task_id, generation, self.generation)
            return False
        draft = self._drafts.get(task_id)
        if draft is None:
            return False

        draft.saving = False

        if fresh is not None:
            self._truth[task_id] = fresh
            if task_id not in self._order:
                self._order.append(task_id)
            draft.progress = fresh.progress
            draft.status = fresh.status
            draft.dirty = False

        if error is not None:
            draft.error = friendly_error_message(error)
            draft.error_kind = error.kind
            draft.success = None
        else:
            draft.error = None
            draft.error_kind = None
            draft.success = success
        return True

    def forget(self, task_id: int) -> None:
        """Drop a task that no longer exists on the server."""
        self._truth.pop(task_id, None)
        self._drafts.pop(task_id, None)
        if task_id in self._order:
            self._order.remove(task_id)
