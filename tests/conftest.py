# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdesk.core.session import Role, Session, User
from taskdesk.core.state import AppState
from taskdesk.tasks.task_models import TaskStatus

from .fakes import FakeTaskTransport, make_session, make_task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskdesk-test",
        log_level="DEBUG",
        api_base_url="http://test/api/v1",
        api_token=None,
        username=None,
        password=None,
        auto_login=False,
        http_timeout_seconds=1.0,
        http_connect_timeout_seconds=1.0,
        data_dir=tmp_path / "data",
    )


@pytest.fixture()
def employee() -> Session:
    return make_session(user_id=7, role=Role.EMPLOYEE, username="alice")


@pytest.fixture()
def manager() -> Session:
    return make_session(user_id=1, role=Role.MANAGER, username="boss")


@pytest.fixture()
def transport() -> FakeTaskTransport:
    """Employee 7 owns tasks 1-3; employee 8 owns task 4."""
    return FakeTaskTransport(
        tasks=[
            make_task(1, employee_id=7, progress=0, status=TaskStatus.PENDING),
            make_task(2, employee_id=7, progress=40, status=TaskStatus.IN_PROGRESS),
            make_task(3, employee_id=7, progress=100, status=TaskStatus.COMPLETED),
            make_task(4, employee_id=8, progress=20, status=TaskStatus.IN_PROGRESS),
        ],
        users=[
            User(id=1, username="boss", name="Big Boss", role=Role.MANAGER),
            User(id=7, username="alice", name="Alice", role=Role.EMPLOYEE),
            User(id=8, username="bob", name="Bob", role=Role.EMPLOYEE),
        ],
    )


@pytest.fixture()
def state(settings: SimpleNamespace, transport: FakeTaskTransport, employee: Session) -> AppState:
    """AppState wired with the in-memory transport and a logged-in employee."""
    return AppState(settings=settings, client=transport, session=employee)
