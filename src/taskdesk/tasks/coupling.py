# src/taskdesk/tasks/coupling.py

"""
Progress/status coupling.

A task's status is a label for its progress: 0 is pending, 100 is completed,
anything in between is in progress. Edits to either field are folded into a
consistent pair here. Everything in this module is pure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .task_models import MAX_PROGRESS, MIN_PROGRESS, FieldValues, TaskStatus

# Progress assigned when a task at 0% is explicitly marked as started.
STARTED_PROGRESS = 10


@dataclass(slots=True, frozen=True)
class FieldChange:
    """A single user edit. None means "field not touched"."""

    progress: Any = None
    status: TaskStatus | str | None = None


def parse_progress(raw: Any) -> int | None:
    """
    Turn user input into a clamped progress value.

    Returns None for anything non-numeric (the previous value is kept).
    Floats are truncated; numeric strings are accepted.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip().rstrip("%").strip()
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
    elif isinstance(raw, int | float):
        value = float(raw)
    else:
        return None

    if math.isnan(value):
        return None
    if math.isinf(value):
        return MAX_PROGRESS if value > 0 else MIN_PROGRESS
    return max(MIN_PROGRESS, min(MAX_PROGRESS, int(value)))


def parse_status(raw: TaskStatus | str | None) -> TaskStatus | None:
    if raw is None:
        return None
    if isinstance(raw, TaskStatus):
        return raw
    try:
        return TaskStatus(str(raw).strip().lower())
    except ValueError:
        return None


def status_for_progress(progress: int) -> TaskStatus:
    if progress >= MAX_PROGRESS:
        return TaskStatus.COMPLETED
    if progress <= MIN_PROGRESS:
        return TaskStatus.PENDING
    return TaskStatus.IN_PROGRESS


def couple(current: FieldValues, change: FieldChange) -> FieldValues:
    """
    Apply one edit to (progress, status) and return a consistent pair.

    Priority:
    1. progress is clamped to [0, 100]; non-numeric input keeps the old value
    2. an explicit progress change to 100 -> completed
    3. an explicit progress change to 0 -> pending
    4. status -> completed forces progress 100
    5. status -> pending forces progress 0
    6. status -> in_progress from 0 moves progress to STARTED_PROGRESS
    7. otherwise status follows progress (pending -> in_progress when a
       task moves off 0)

    Requesting in_progress on a task at 100 is ignored: progress wins.
    """
    new_progress = parse_progress(change.progress)
    requested = parse_status(change.status)

    if new_progress is None and requested is None:
        return current

    progress = current.progress if new_progress is None else new_progress
    progress_pinned = new_progress is not None and new_progress in (MIN_PROGRESS, MAX_PROGRESS)

    if not progress_pinned:
        if requested == TaskStatus.COMPLETED:
            progress = MAX_PROGRESS
        elif requested == TaskStatus.PENDING:
            progress = MIN_PROGRESS
        elif requested == TaskStatus.IN_PROGRESS and progress == MIN_PROGRESS:
            progress = STARTED_PROGRESS

    return FieldValues(progress=progress, status=status_for_progress(progress))
