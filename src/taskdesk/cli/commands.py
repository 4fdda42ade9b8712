# src/taskdesk/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..api.auth import open_session
from ..comments.comment_thread import CommentThread
from ..core.errors import SyncError, friendly_error_message
from ..core.state import AppState
from ..tasks.coupling import parse_status
from ..tasks.sync_controller import SaveResult
from ..tasks.task_board import TaskBoard, TaskRow, deadline_hint

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

NOT_LOGGED_IN = "Not logged in. Use /login <username> <password>."
NO_BOARD = "No task list open. Use /tasks first."


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


def _format_row(row: TaskRow) -> str:
    task, draft = row.task, row.draft
    line = (
        f"#{task.id} {task.title} | {draft.progress}% {draft.status.value}"
        f" | due {task.deadline[:10] or '-'} ({deadline_hint(task.deadline)})"
    )
    if draft.dirty:
        line += f" [unsaved; server: {task.progress}% {task.status.value}]"
    if draft.saving:
        line += " [saving...]"
    if draft.error:
        line += f"\n    ! {draft.error}"
    elif draft.success:
        line += f"\n    {draft.success}"
    return line


def _format_board(board: TaskBoard) -> str:
    rows = board.rows()
    if not rows:
        return f"No tasks for employee {board.employee_id}."
    return "\n".join([f"Tasks of employee {board.employee_id}:", *(_format_row(r) for r in rows)])


def _format_thread(thread: CommentThread) -> str:
    if not thread.comments:
        return f"No comments on task {thread.task_id} yet."
    lines = [f"Comments on task {thread.task_id}:"]
    for c in thread.comments:
        role = thread.author_role(c)
        role_s = role.value if hasattr(role, "value") else str(role)
        mark = " (x)" if thread.can_delete(c) else ""
        lines.append(f"  [{c.id}] {thread.author_name(c)} <{role_s}> {c.created_at[:16]}{mark}")
        lines.append(f"      {c.text}")
    return "\n".join(lines)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) < 2:
        return "Usage: /login <username> <password>"
    username, password = args[0], " ".join(args[1:])

    if emit:
        with contextlib.suppress(Exception):
            emit(f"Logging in as {username}...")

    state.close_views()
    try:
        state.session = await open_session(state.client, username, password)
    except SyncError as e:
        state.session = None
        return f"Login failed: {friendly_error_message(e)}"
    s = state.session
    return f"Logged in as {s.display_name} (id={s.user_id}, role={s.role.value})."


async def cmd_whoami(state: AppState, args: list[str]) -> str:
    s = state.session
    if s is None:
        return NOT_LOGGED_IN
    return f"{s.display_name} (id={s.user_id}, role={s.role.value})"


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> my tasks (employees)
    /tasks <emp_id>   -> tasks of an employee (managers)
    """
    if state.session is None:
        return NOT_LOGGED_IN

    employee_id: int | None = None
    if args:
        employee_id = _parse_id(args[0])
        if employee_id is None:
            return "Usage: /tasks [employee_id]"
    elif state.session.is_manager:
        return "Managers: /tasks <employee_id>"

    if state.board is not None:
        state.board.close()
    board = TaskBoard(state.client, state.session, employee_id=employee_id)
    state.board = board
    if not await board.load():
        return board.error or "Failed to load tasks."
    return _format_board(board)


async def cmd_progress(state: AppState, args: list[str]) -> str:
    if state.board is None:
        return NO_BOARD
    if len(args) != 2 or _parse_id(args[0]) is None:
        return "Usage: /progress <task_id> <0-100>"
    task_id = int(args[0])
    if state.board.drafts.truth(task_id) is None:
        return f"Task {task_id} is not in the open list."
    state.board.edit(task_id, progress=args[1])
    draft = state.board.draft(task_id)
    if draft is not None and draft.error:
        return draft.error
    row = next(r for r in state.board.rows() if r.task.id == task_id)
    return _format_row(row)


async def cmd_status(state: AppState, args: list[str]) -> str:
    if state.board is None:
        return NO_BOARD
    if len(args) != 2 or _parse_id(args[0]) is None:
        return "Usage: /status <task_id> <pending|in_progress|completed>"
    task_id = int(args[0])
    if state.board.drafts.truth(task_id) is None:
        return f"Task {task_id} is not in the open list."
    if parse_status(args[1]) is None:
        return f"Unknown status: {args[1]}. Usage: /status <task_id> <pending|in_progress|completed>"
    state.board.edit(task_id, status=args[1])
    draft = state.board.draft(task_id)
    if draft is not None and draft.error:
        return draft.error
    row = next(r for r in state.board.rows() if r.task.id == task_id)
    return _format_row(row)


async def cmd_reset(state: AppState, args: list[str]) -> str:
    if state.board is None:
        return NO_BOARD
    if len(args) != 1 or _parse_id(args[0]) is None:
        return "Usage: /reset <task_id>"
    task_id = int(args[0])
    if state.board.reset(task_id) is None:
        return f"Nothing to reset for task {task_id}."
    return f"Task {task_id} reset to server values."


async def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /save            -> save every unsaved task
    /save <task_id>  -> save one task
    """
    board = state.board
    if board is None:
        return NO_BOARD

    if args:
        task_id = _parse_id(args[0])
        if task_id is None:
            return "Usage: /save [task_id]"
        results = {task_id: await board.save(task_id)}
    else:
        if emit and board.drafts.dirty_ids():
            with contextlib.suppress(Exception):
                emit(f"Saving {len(board.drafts.dirty_ids())} task(s)...")
        results = await board.save_all()

    if not results or all(r == SaveResult.SKIPPED for r in results.values()):
        return "Nothing to save."

    lines: list[str] = []
    for task_id, result in results.items():
        draft = board.draft(task_id)
        if result == SaveResult.SAVED:
            lines.append(f"#{task_id}: {draft.success if draft else 'saved'}")
        elif result == SaveResult.SKIPPED:
            lines.append(f"#{task_id}: nothing to save")
        else:
            detail = draft.error if draft and draft.error else result.value
            lines.append(f"#{task_id}: {detail}")
    return "\n".join(lines)


async def cmd_comments(state: AppState, args: list[str]) -> str:
    if state.session is None:
        return NOT_LOGGED_IN
    if len(args) != 1 or _parse_id(args[0]) is None:
        return "Usage: /comments <task_id>"

    if state.thread is not None:
        state.thread.close()
    thread = CommentThread(state.client, state.session, int(args[0]))
    state.thread = thread
    if not await thread.load():
        return thread.error or "Failed to load comments."
    return _format_thread(thread)


async def cmd_comment(state: AppState, args: list[str]) -> str:
    if state.session is None:
        return NOT_LOGGED_IN
    if len(args) < 2 or _parse_id(args[0]) is None:
        return "Usage: /comment <task_id> <text...>"
    task_id = int(args[0])

    thread = state.thread
    if thread is None or thread.task_id != task_id:
        if thread is not None:
            thread.close()
        thread = CommentThread(state.client, state.session, task_id)
        state.thread = thread

    if not await thread.add(" ".join(args[1:])):
        return thread.error or "Failed to add comment."
    return _format_thread(thread)


async def cmd_uncomment(state: AppState, args: list[str]) -> str:
    thread = state.thread
    if thread is None:
        return "No comments open. Use /comments <task_id> first."
    if len(args) != 1 or _parse_id(args[0]) is None:
        return "Usage: /uncomment <comment_id>"
    if not await thread.delete(int(args[0])):
        return thread.error or "Failed to delete comment."
    return _format_thread(thread)


async def cmd_newtask(state: AppState, args: list[str]) -> str:
    """/newtask <deadline YYYY-MM-DD> <title...> | <description...>"""
    board = state.board
    if board is None:
        return NO_BOARD
    if len(args) < 2:
        return "Usage: /newtask <YYYY-MM-DD> <title> | <description>"
    deadline = args[0]
    title, _, description = " ".join(args[1:]).partition("|")
    task = await board.create_task(title=title, description=description, deadline=deadline)
    if task is None:
        return board.error or "Failed to create task."
    return f"Task {task.id} created.\n{_format_board(board)}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Log in: /login <username> <password>.")
registry.register("whoami", cmd_whoami, help_text="Show the current user.")
registry.register("tasks", cmd_tasks, help_text="Open a task list: /tasks [employee_id].")
registry.register("progress", cmd_progress, help_text="Edit progress: /progress <task_id> <0-100>.")
registry.register(
    "status", cmd_status, help_text="Edit status: /status <task_id> <pending|in_progress|completed>."
)
registry.register("reset", cmd_reset, help_text="Drop unsaved edits: /reset <task_id>.")
registry.register("save", cmd_save, help_text="Save edits: /save [task_id].")
registry.register("comments", cmd_comments, help_text="Show comments: /comments <task_id>.")
registry.register("comment", cmd_comment, help_text="Add a comment: /comment <task_id> <text>.")
registry.register("uncomment", cmd_uncomment, help_text="Delete a comment: /uncomment <comment_id>.")
registry.register(
    "newtask", cmd_newtask, help_text="Managers: /newtask <YYYY-MM-DD> <title> | <description>."
)
