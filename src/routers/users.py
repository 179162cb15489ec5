# src/routers/users.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from src.db import get_db
from src.schemas.user import UserView
from src.services import buddies, users
from src.services.errors import BuddyError
from src.services.events import BUDDY_ADDED, BUDDY_REMOVED, USER_BLOCKED, USER_UNBLOCKED
from src.services.notifications import SocketNotifier, get_notifier
from src.utils.errors import to_http
from src.utils.session_dep import get_session_user_id

router = APIRouter()


# =========================
# SELF
# =========================

@router.get("", response_model=UserView)
def get_self(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    """Текущий пользователь (по UserId из сессии) с актуальным buddyCount."""
    try:
        return users.get_self(db, user_id)
    except BuddyError as e:
        raise to_http(e)


@router.put("", response_model=dict)
def update_pairing_enabled(
    pairing_enabled: bool = Query(..., alias="pairingEnabled"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    """Включить/выключить подбор пары для себя: PUT /api/users?pairingEnabled=true"""
    try:
        users.set_pairing_enabled(db, user_id, pairing_enabled)
    except BuddyError as e:
        raise to_http(e)
    return {"success": True}


# =========================
# БАДДИ
# =========================

@router.get("/buddy", response_model=List[UserView])
def get_buddies(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    """
    Мои бадди по возрастанию id. Заблокированные (в любую сторону) не возвращаются.
    buddyCount у каждого - его собственный счёт, не зависящий от смотрящего.
    """
    return buddies.list_buddies(db, user_id)


@router.get("/blocked", response_model=List[UserView])
def get_blocked(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    """Пользователи, которых я заблокировал."""
    return buddies.list_blocked(db, user_id)


@router.get("/buddy/course/{course_id}", response_model=List[UserView])
def get_buddies_in_course(
    course_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    """Мои бадди, записанные на курс course_id."""
    try:
        return buddies.list_buddies_in_course(db, user_id, course_id)
    except BuddyError as e:
        raise to_http(e)


@router.post("/buddy/{other_id}", response_model=dict)
def add_buddy(
    other_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
    notifier: SocketNotifier = Depends(get_notifier),
):
    try:
        created = buddies.add_buddy(db, user_id, other_id)
    except BuddyError as e:
        raise to_http(e)
    if created:
        notifier.publish(BUDDY_ADDED, actor_id=user_id, target_user_id=other_id)
    return {"success": True, "created": created}


@router.delete("/buddy/{other_id}", response_model=dict)
def remove_buddy(
    other_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
    notifier: SocketNotifier = Depends(get_notifier),
):
    try:
        removed = buddies.remove_buddy(db, user_id, other_id)
    except BuddyError as e:
        raise to_http(e)
    if removed:
        notifier.publish(BUDDY_REMOVED, actor_id=user_id, target_user_id=other_id)
    return {"success": True, "removed": removed}


@router.post("/buddy/{other_id}/block", response_model=dict)
def block_user(
    other_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
    notifier: SocketNotifier = Depends(get_notifier),
):
    """Заблокировать пользователя: связь (если была) удаляется в той же транзакции."""
    try:
        changed = buddies.block(db, user_id, other_id)
    except BuddyError as e:
        raise to_http(e)
    if changed:
        notifier.publish(USER_BLOCKED, actor_id=user_id, target_user_id=other_id)
    return {"success": True}


@router.delete("/buddy/{other_id}/block", response_model=dict)
def unblock_user(
    other_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
    notifier: SocketNotifier = Depends(get_notifier),
):
    """Снять свою блокировку. Связь НЕ восстанавливается - бадди нужно добавить заново."""
    try:
        removed = buddies.unblock(db, user_id, other_id)
    except BuddyError as e:
        raise to_http(e)
    if removed:
        notifier.publish(USER_UNBLOCKED, actor_id=user_id, target_user_id=other_id)
    return {"success": True}


# =========================
# ПО ID (последним, чтобы не перехватывать /buddy и /blocked)
# =========================

@router.get("/{user_id}", response_model=UserView)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Публичный профиль по id. Сессия не нужна."""
    try:
        return users.get_user(db, user_id)
    except BuddyError as e:
        raise to_http(e)
