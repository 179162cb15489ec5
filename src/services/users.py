# src/services/users.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.user import User
from src.schemas.user import UserView
from src.services import buddies
from src.services.errors import Conflict, NotFound
from src.services.events import log_event, USER_REGISTERED, PAIRING_CHANGED

log = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: int) -> UserView:
    return buddies.get_user(db, user_id)


def get_self(db: Session, caller_id: int) -> UserView:
    return buddies.get_self(db, caller_id)


def set_pairing_enabled(db: Session, caller_id: int, enabled: bool) -> None:
    """Меняет флаг pairing ровно у одного пользователя - у вызывающего."""
    user = db.query(User).filter(User.id == caller_id).first()
    if not user:
        raise NotFound("user_not_found", f"User {caller_id} not found")

    if bool(user.pairing_enabled) == enabled:
        return

    try:
        user.pairing_enabled = enabled
        log_event(db, type=PAIRING_CHANGED, actor_id=caller_id, data={"pairing_enabled": enabled})
        db.commit()
    except Exception:
        db.rollback()
        raise
    log.info("pairing %s for user %s", "enabled" if enabled else "disabled", caller_id)


def register_user(db: Session, name: str, email: str) -> UserView:
    """
    Регистрирует пользователя. Email уникален (без учёта регистра).
    Новый пользователь стартует с выключенным pairing и без бадди.
    """
    email = _normalize_email(email)
    if db.query(User.id).filter(User.email == email).first() is not None:
        raise Conflict("email_taken", f"Email {email} is already registered")

    user = User(name=name.strip(), email=email, pairing_enabled=False)
    db.add(user)
    try:
        db.flush()
        log_event(db, type=USER_REGISTERED, actor_id=user.id)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("email_taken", f"Email {email} is already registered")
    except Exception:
        db.rollback()
        raise
    db.refresh(user)

    log.info("user registered: id=%s", user.id)
    return buddies.to_view(user, 0)
