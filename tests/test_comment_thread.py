# tests/test_comment_thread.py

from __future__ import annotations

import pytest

from taskdesk.comments.comment_models import Comment
from taskdesk.comments.comment_thread import UNKNOWN_ROLE, CommentThread
from taskdesk.core.errors import TransportError
from taskdesk.core.session import Role, Session

from .fakes import FakeTaskTransport, make_session


def with_comments(transport: FakeTaskTransport) -> FakeTaskTransport:
    transport.comments = [
        Comment(id=1, task_id=2, user_id=1, text="Status?"),
        Comment(id=2, task_id=2, user_id=7, text="Almost done"),
        Comment(id=3, task_id=2, user_id=1, text="Great"),
        Comment(id=4, task_id=2, user_id=8, text="Need help?"),
        Comment(id=5, task_id=9, user_id=8, text="other task"),
    ]
    return transport


@pytest.mark.asyncio
async def test_authors_resolved_once_each_and_self_not_fetched(
        transport: FakeTaskTransport, employee: Session
) -> None:
    thread = CommentThread(with_comments(transport), employee, task_id=2)
    assert await thread.load() is True

    assert [c.id for c in thread.comments] == [1, 2, 3, 4]
    assert transport.count("fetch_user", 1) == 1
    assert transport.count("fetch_user", 8) == 1
    assert transport.count("fetch_user", 7) == 0

    by_id = {c.id: c for c in thread.comments}
    assert thread.author_name(by_id[1]) == "Big Boss"
    assert thread.author_role(by_id[1]) == Role.MANAGER
    assert thread.author_name(by_id[2]) == "Alice"
    assert thread.author_role(by_id[2]) == Role.EMPLOYEE


@pytest.mark.asyncio
async def test_failed_author_shows_unknown_and_is_retried_on_reload(
        transport: FakeTaskTransport, employee: Session
) -> None:
    with_comments(transport).fail("fetch_user", TransportError("users service down"))
    thread = CommentThread(transport, employee, task_id=2)
    await thread.load()

    failed = [c for c in thread.comments if c.user_id in (1, 8) and thread.author_role(c) == UNKNOWN_ROLE]
    assert failed, "one of the authors should have failed to resolve"
    assert thread.author_name(failed[0]) == f"User {failed[0].user_id}"

    await thread.load()
    assert all(thread.author_role(c) != UNKNOWN_ROLE for c in thread.comments)


@pytest.mark.asyncio
async def test_ensure_authors_without_retry_does_not_refetch_failures(
        transport: FakeTaskTransport, employee: Session
) -> None:
    with_comments(transport).users.pop(8)
    thread = CommentThread(transport, employee, task_id=2)
    await thread.load()
    assert transport.count("fetch_user", 8) == 1

    await thread.ensure_authors()
    assert transport.count("fetch_user", 8) == 1


@pytest.mark.asyncio
async def test_delete_permissions(transport: FakeTaskTransport, employee: Session, manager: Session) -> None:
    with_comments(transport)

    mine = CommentThread(transport, employee, task_id=2)
    await mine.load()
    by_id = {c.id: c for c in mine.comments}
    assert mine.can_delete(by_id[2]) is True
    assert mine.can_delete(by_id[4]) is False

    assert await mine.delete(4) is False
    assert "not allowed" in (mine.error or "")
    assert transport.count("delete_comment") == 0

    boss = CommentThread(transport, manager, task_id=2)
    await boss.load()
    assert await boss.delete(4) is True
    assert [c.id for c in boss.comments] == [1, 2, 3]


@pytest.mark.asyncio
async def test_add_comment_reloads_thread(transport: FakeTaskTransport) -> None:
    bob = make_session(user_id=8, username="bob")
    transport.author_id = 8
    thread = CommentThread(transport, bob, task_id=2)

    assert await thread.add("   ") is False
    assert await thread.add("On it") is True
    assert [c.text for c in thread.comments] == ["On it"]
    assert thread.author_name(thread.comments[0]) == "Bob"


@pytest.mark.asyncio
async def test_load_error_is_stored(transport: FakeTaskTransport, employee: Session) -> None:
    transport.fail("list_comments", TransportError("timeout"))
    thread = CommentThread(transport, employee, task_id=2)
    assert await thread.load() is False
    assert thread.error
