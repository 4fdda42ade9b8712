# src/taskdesk/tasks/sync_controller.py

"""
Save drafts to the task service.

save(task_id):
- guard: draft exists, is dirty, is not already saving (double-submit is dropped)
- send the full record (unedited fields + draft progress/status)
- on failure: keep the draft as-is, store a classified error
- on success: fetch the task again and reconcile truth + draft from it

The server may normalize what it receives (e.g. derive status on its side), so
the payload we sent is never taken as the new truth.

No automatic retries; the user retries by saving again.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from ..core.errors import SyncError, TransportError
from ..core.ports import TaskTransport
from .draft_store import DraftStore
from .task_models import build_update_payload

logger = logging.getLogger(__name__)

SAVED_MESSAGE = "Progress updated."


class SaveResult(StrEnum):
    SKIPPED = "skipped"
    SAVED = "saved"
    FAILED = "failed"
    # The write went through but the follow-up fetch failed.
    UNCONFIRMED = "unconfirmed"


class SyncController:
    def __init__(self, store: DraftStore, transport: TaskTransport) -> None:
        self._store = store
        self._transport = transport

    async def save(self, task_id: int) -> SaveResult:
        store = self._store
        draft = store.get(task_id)
        task = store.truth(task_id)
        if draft is None or task is None or not draft.dirty or draft.saving:
            return SaveResult.SKIPPED

        generation = store.generation
        payload = build_update_payload(task, draft.values)
        store.mark_saving(task_id)
        logger.info("Saving task %s: progress=%s status=%s", task_id, payload["progress"], payload["status"])

        try:
            await self._transport.update_task(task_id, payload)
        except SyncError as e:
            logger.info("Save failed for task %s (%s): %s", task_id, e.kind.value, e.message)
            store.mark_settled(task_id, generation=generation, error=e)
            return SaveResult.FAILED
        except Exception as e:
            logger.exception("Unexpected error while saving task %s", task_id)
            store.mark_settled(task_id, generation=generation, error=TransportError(str(e) or type(e).__name__))
            return SaveResult.FAILED

        try:
            fresh = await self._transport.fetch_task(task_id)
        except SyncError as e:
            # The write may have been applied; keep the draft (still dirty) so
            # the user sees their values and can re-send them.
            logger.warning("Task %s saved but re-fetch failed (%s): %s", task_id, e.kind.value, e.message)
            store.mark_settled(task_id, generation=generation, error=e)
            return SaveResult.UNCONFIRMED
        except Exception as e:
            logger.exception("Unexpected error while re-fetching task %s", task_id)
            store.mark_settled(task_id, generation=generation, error=TransportError(str(e) or type(e).__name__))
            return SaveResult.UNCONFIRMED

        applied = store.mark_settled(task_id, generation=generation, fresh=fresh, success=SAVED_MESSAGE)
        if applied:
            logger.info("Task %s saved: progress=%s status=%s", task_id, fresh.progress, fresh.status.value)
        return SaveResult.SAVED

    async def save_all(self) -> dict[int, SaveResult]:
        """Save every dirty draft concurrently (one request pair per task)."""
        ids = self._store.dirty_ids()
        if not ids:
            return {}
        results = await asyncio.gather(*(self.save(i) for i in ids))
        return dict(zip(ids, results))
