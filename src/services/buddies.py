# src/services/buddies.py
"""
Граф бадди: симметричные связи (BuddyLink) и направленные блокировки (Block).

Инварианты после каждой закоммиченной операции:
  • связь симметрична и без петель (одна строка на пару, user_min < user_max);
  • блокировка в любую сторону исключает связь: block() удаляет связь в той же
    транзакции, add_buddy() отказывает при блокировке в любую сторону;
  • buddyCount - размер списка бадди с учётом блокировок, никогда не хранится.

Сервис не знает про HTTP: принимает целые id, возвращает UserView или
бросает NotFound / Forbidden. Ошибки БД пробрасываются как есть (после rollback).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.block import Block
from src.models.buddy import BuddyLink
from src.models.course import Course
from src.models.enrollment import Enrollment
from src.models.user import User
from src.schemas.user import UserView
from src.services.errors import Forbidden, NotFound
from src.services.events import (
    log_event,
    BUDDY_ADDED,
    BUDDY_REMOVED,
    USER_BLOCKED,
    USER_UNBLOCKED,
)

log = logging.getLogger(__name__)

# Пределы INTEGER в БД (BIGINT / SQLite): id за ними заведомо не существует
MIN_DB_ID = -(2 ** 63)
MAX_DB_ID = 2 ** 63 - 1


# =========================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# =========================

def _sorted_pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def fits_db_id(value: int) -> bool:
    return MIN_DB_ID <= value <= MAX_DB_ID


@contextmanager
def _atomic(db: Session):
    """Одна операция = одна транзакция: commit при успехе, rollback при любой ошибке."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def _lock_pair(db: Session, caller_id: int, other_id: int) -> Dict[int, User]:
    """
    Блокирует строки обоих пользователей (SELECT ... FOR UPDATE, по возрастанию id),
    чтобы мутации одной пары шли строго по очереди. Возвращает {id: User}.
    """
    for uid in (caller_id, other_id):
        if not fits_db_id(uid):
            raise NotFound("user_not_found", f"User {uid} not found")
    rows = (
        db.query(User)
        .filter(User.id.in_((caller_id, other_id)))
        .order_by(User.id.asc())
        .with_for_update()
        .all()
    )
    users = {u.id: u for u in rows}
    if caller_id not in users:
        raise NotFound("user_not_found", f"User {caller_id} not found")
    if other_id not in users:
        raise NotFound("user_not_found", f"User {other_id} not found")
    return users


def _find_link(db: Session, a: int, b: int) -> Optional[BuddyLink]:
    umin, umax = _sorted_pair(a, b)
    return (
        db.query(BuddyLink)
        .filter(BuddyLink.user_min == umin, BuddyLink.user_max == umax)
        .first()
    )


def _find_block(db: Session, blocker_id: int, blocked_id: int) -> Optional[Block]:
    return (
        db.query(Block)
        .filter(Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)
        .first()
    )


def _is_blocked_either(db: Session, a: int, b: int) -> bool:
    hit = (
        db.query(Block.id)
        .filter(or_(
            and_(Block.blocker_id == a, Block.blocked_id == b),
            and_(Block.blocker_id == b, Block.blocked_id == a),
        ))
        .first()
    )
    return hit is not None


def _blocked_ids(db: Session, user_id: int) -> Set[int]:
    """Все, с кем у user_id есть блокировка в любую сторону."""
    rows = (
        db.query(Block.blocker_id, Block.blocked_id)
        .filter(or_(Block.blocker_id == user_id, Block.blocked_id == user_id))
        .all()
    )
    return {blocked if blocker == user_id else blocker for blocker, blocked in rows}


def buddy_ids(db: Session, user_id: int) -> List[int]:
    """Соседи user_id в графе минус заблокированные (в любую сторону), по возрастанию id."""
    rows = (
        db.query(BuddyLink.user_min, BuddyLink.user_max)
        .filter(or_(BuddyLink.user_min == user_id, BuddyLink.user_max == user_id))
        .all()
    )
    others = {umax if umin == user_id else umin for umin, umax in rows}
    return sorted(others - _blocked_ids(db, user_id))


def buddy_counts(db: Session, user_ids: Iterable[int]) -> Dict[int, int]:
    """
    Пакетный подсчёт buddyCount для набора пользователей (два запроса на весь набор).
    Счёт "нейтральный": считается от лица самого пользователя, а не смотрящего.
    """
    ids = set(user_ids)
    if not ids:
        return {}

    neighbors: Dict[int, Set[int]] = {uid: set() for uid in ids}

    links = (
        db.query(BuddyLink.user_min, BuddyLink.user_max)
        .filter(or_(BuddyLink.user_min.in_(ids), BuddyLink.user_max.in_(ids)))
        .all()
    )
    for umin, umax in links:
        if umin in ids:
            neighbors[umin].add(umax)
        if umax in ids:
            neighbors[umax].add(umin)

    blocks = (
        db.query(Block.blocker_id, Block.blocked_id)
        .filter(or_(Block.blocker_id.in_(ids), Block.blocked_id.in_(ids)))
        .all()
    )
    for blocker, blocked in blocks:
        if blocker in ids:
            neighbors[blocker].discard(blocked)
        if blocked in ids:
            neighbors[blocked].discard(blocker)

    return {uid: len(n) for uid, n in neighbors.items()}


def to_view(user: User, buddy_count: int) -> UserView:
    return UserView(
        id=user.id,
        name=user.name,
        email=user.email,
        pairing_enabled=bool(user.pairing_enabled),
        buddy_count=buddy_count,
    )


def _views(db: Session, users: List[User]) -> List[UserView]:
    counts = buddy_counts(db, [u.id for u in users])
    return [to_view(u, counts.get(u.id, 0)) for u in users]


# =========================
# ЧТЕНИЕ
# =========================

def get_user(db: Session, user_id: int) -> UserView:
    if not fits_db_id(user_id):
        raise NotFound("user_not_found", f"User {user_id} not found")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("user_not_found", f"User {user_id} not found")
    return to_view(user, len(buddy_ids(db, user_id)))


def get_self(db: Session, caller_id: int) -> UserView:
    return get_user(db, caller_id)


def list_buddies(db: Session, caller_id: int) -> List[UserView]:
    ids = buddy_ids(db, caller_id)
    if not ids:
        return []
    users = db.query(User).filter(User.id.in_(ids)).order_by(User.id.asc()).all()
    return _views(db, users)


def list_buddies_in_course(db: Session, caller_id: int, course_id: int) -> List[UserView]:
    """Бадди caller_id, записанные на курс course_id (по возрастанию id)."""
    if not fits_db_id(course_id) or db.query(Course.id).filter(Course.id == course_id).first() is None:
        raise NotFound("course_not_found", f"Course {course_id} not found")

    ids = buddy_ids(db, caller_id)
    if not ids:
        return []
    users = (
        db.query(User)
        .join(Enrollment, Enrollment.user_id == User.id)
        .filter(Enrollment.course_id == course_id, User.id.in_(ids))
        .order_by(User.id.asc())
        .all()
    )
    return _views(db, users)


def list_blocked(db: Session, caller_id: int) -> List[UserView]:
    """Кого caller_id заблокировал сам (обратные блокировки сюда не входят)."""
    users = (
        db.query(User)
        .join(Block, Block.blocked_id == User.id)
        .filter(Block.blocker_id == caller_id)
        .order_by(User.id.asc())
        .all()
    )
    return _views(db, users)


# =========================
# МУТАЦИИ
# =========================

def add_buddy(db: Session, caller_id: int, other_id: int) -> bool:
    """
    Создаёт связь {caller_id, other_id}. Идемпотентно: если связь уже есть - False.
    Forbidden: связь с собой или блокировка в любую сторону. NotFound: нет пользователя.
    """
    if caller_id == other_id:
        raise Forbidden("self_link", "Cannot add yourself as a buddy")

    umin, umax = _sorted_pair(caller_id, other_id)
    try:
        with _atomic(db):
            _lock_pair(db, caller_id, other_id)
            if _is_blocked_either(db, caller_id, other_id):
                raise Forbidden("blocked", "Buddy link is not allowed between blocked users")
            if _find_link(db, umin, umax):
                return False
            db.add(BuddyLink(user_min=umin, user_max=umax))
            log_event(db, type=BUDDY_ADDED, actor_id=caller_id, target_user_id=other_id)
    except IntegrityError:
        # Параллельная вставка той же пары: связь уже есть - это успех без изменений
        if _find_link(db, umin, umax) is None:
            raise
        return False

    log.info("buddy added: %s <-> %s", caller_id, other_id)
    return True


def remove_buddy(db: Session, caller_id: int, other_id: int) -> bool:
    """Удаляет связь, если она есть. Идемпотентно. Блокировки не трогает."""
    with _atomic(db):
        _lock_pair(db, caller_id, other_id)
        link = _find_link(db, caller_id, other_id)
        if not link:
            return False
        db.delete(link)
        log_event(db, type=BUDDY_REMOVED, actor_id=caller_id, target_user_id=other_id)

    log.info("buddy removed: %s <-> %s", caller_id, other_id)
    return True


def block(db: Session, caller_id: int, other_id: int) -> bool:
    """
    Атомарно: гарантирует Block(caller_id -> other_id) и удаляет связь пары, если была.
    Идемпотентно: повторный вызов ничего не меняет и возвращает False.
    """
    if caller_id == other_id:
        raise Forbidden("self_block", "Cannot block yourself")

    try:
        with _atomic(db):
            _lock_pair(db, caller_id, other_id)
            changed = False

            link = _find_link(db, caller_id, other_id)
            if link:
                db.delete(link)
                changed = True

            if not _find_block(db, caller_id, other_id):
                db.add(Block(blocker_id=caller_id, blocked_id=other_id))
                changed = True

            if changed:
                log_event(
                    db, type=USER_BLOCKED, actor_id=caller_id, target_user_id=other_id,
                    data={"link_dissolved": link is not None},
                )
    except IntegrityError:
        # Параллельный block той же пары уже всё сделал
        if _find_block(db, caller_id, other_id) is None or _find_link(db, caller_id, other_id):
            raise
        return False

    if changed:
        log.info("user blocked: %s -> %s", caller_id, other_id)
    return changed


def unblock(db: Session, caller_id: int, other_id: int) -> bool:
    """
    Снимает только СВОЮ блокировку (caller_id -> other_id). Связь не восстанавливается:
    её нужно создать заново через add_buddy. Обратная блокировка, если есть, остаётся.
    """
    with _atomic(db):
        _lock_pair(db, caller_id, other_id)
        existing = _find_block(db, caller_id, other_id)
        if not existing:
            return False
        db.delete(existing)
        log_event(db, type=USER_UNBLOCKED, actor_id=caller_id, target_user_id=other_id)

    log.info("user unblocked: %s -> %s", caller_id, other_id)
    return True
