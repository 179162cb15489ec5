# src/services/events.py
from __future__ import annotations
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from src.models.event import Event

# Типы событий (используй в сервисах и фильтрах ленты)
BUDDY_ADDED = "buddy_added"
BUDDY_REMOVED = "buddy_removed"
USER_BLOCKED = "user_blocked"
USER_UNBLOCKED = "user_unblocked"

USER_REGISTERED = "user_registered"
PAIRING_CHANGED = "pairing_changed"

COURSE_ENROLLED = "course_enrolled"
COURSE_UNENROLLED = "course_unenrolled"


def log_event(
    db: Session,
    *,
    type: str,
    actor_id: int,
    target_user_id: Optional[int] = None,
    course_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
) -> Event:
    """
    Единая точка записи событий. Вызывается в той же транзакции, что и бизнес-операция.
    Не делает commit: событие фиксируется вместе с изменением или не фиксируется вовсе.
    """
    ev = Event(
        type=type,
        actor_id=actor_id,
        target_user_id=target_user_id,
        course_id=course_id,
        data=(data or {}),
    )
    db.add(ev)
    return ev
