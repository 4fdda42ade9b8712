# src/taskdesk/comments/comment_thread.py

from __future__ import annotations

import logging

from ..core.entity_cache import CacheState, EntityCache
from ..core.errors import AuthorizationError, SyncError, friendly_error_message
from ..core.ports import TaskTransport
from ..core.session import Role, Session, User
from .comment_models import Comment

logger = logging.getLogger(__name__)

UNKNOWN_ROLE = "unknown"


class CommentThread:
    """
    Comments of one task plus their authors.

    Authors are resolved through an EntityCache owned by the thread, after the
    comment list loads (ensure_authors), never while formatting. Formatting
    only reads what is already resolved.
    """

    def __init__(self, transport: TaskTransport, session: Session, task_id: int) -> None:
        self._transport = transport
        self.session = session
        self.task_id = int(task_id)
        self.authors: EntityCache[int, User] = EntityCache(transport.fetch_user, name="author")
        self.comments: list[Comment] = []
        self.error: str | None = None

    async def load(self) -> bool:
        try:
            self.comments = await self._transport.list_comments(task_id=self.task_id)
        except SyncError as e:
            logger.info("Loading comments for task %s failed (%s): %s", self.task_id, e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return False

        self.error = None
        # A fresh list is a new reason to look up authors that failed before.
        await self.ensure_authors(retry_failed=True)
        return True

    async def ensure_authors(self, *, retry_failed: bool = False) -> None:
        ids = [c.user_id for c in self.comments if c.user_id != self.session.user_id]
        if ids:
            await self.authors.ensure_resolved(ids, retry_failed=retry_failed)

    # ---- formatting helpers (no I/O) ----

    def author_name(self, comment: Comment) -> str:
        if comment.user_id == self.session.user_id:
            return self.session.display_name
        user = self.authors.peek(comment.user_id)
        if user is not None:
            return user.display_name
        return f"User {comment.user_id}"

    def author_role(self, comment: Comment) -> Role | str:
        if comment.user_id == self.session.user_id:
            return self.session.role
        user = self.authors.peek(comment.user_id)
        return user.role if user is not None else UNKNOWN_ROLE

    def author_pending(self, comment: Comment) -> bool:
        return self.authors.state(comment.user_id) == CacheState.PENDING

    def can_delete(self, comment: Comment) -> bool:
        return self.session.can_delete_comment(comment)

    # ---- mutations ----

    async def add(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            self.error = "Comment text is required."
            return False
        try:
            await self._transport.create_comment(task_id=self.task_id, text=text)
        except SyncError as e:
            logger.info("Adding comment to task %s failed (%s): %s", self.task_id, e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return False
        return await self.load()

    async def delete(self, comment_id: int) -> bool:
        comment = next((c for c in self.comments if c.id == comment_id), None)
        if comment is None:
            self.error = f"Comment {comment_id} is not in this thread."
            return False
        if not self.can_delete(comment):
            self.error = friendly_error_message(
                AuthorizationError("only the author or a manager can delete a comment", status=403)
            )
            return False
        try:
            await self._transport.delete_comment(comment_id)
        except SyncError as e:
            logger.info("Deleting comment %s failed (%s): %s", comment_id, e.kind.value, e.message)
            self.error = friendly_error_message(e)
            return False
        return await self.load()

    def close(self) -> None:
        self.authors.clear()
        self.comments = []
