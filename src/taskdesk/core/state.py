# src/taskdesk/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..comments.comment_thread import CommentThread
from ..tasks.task_board import TaskBoard
from .ports import TaskTransport
from .session import Session


@dataclass
class AppState:
    # Store Settings on the state for easy access in command handlers.
    settings: Any

    client: TaskTransport
    session: Session | None = None

    # Open views. Each owns its drafts/cache; replacing a view drops them.
    board: TaskBoard | None = None
    thread: CommentThread | None = None

    def close_views(self) -> None:
        if self.board is not None:
            self.board.close()
            self.board = None
        if self.thread is not None:
            self.thread.close()
            self.thread = None
