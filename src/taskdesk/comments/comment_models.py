# src/taskdesk/comments/comment_models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class Comment:
    id: int
    task_id: int
    user_id: int
    text: str
    created_at: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Comment:
        return cls(
            id=int(data["id"]),
            task_id=int(data.get("task_id") or 0),
            user_id=int(data.get("user_id") or 0),
            text=str(data.get("text") or ""),
            created_at=str(data.get("created_at") or ""),
        )
