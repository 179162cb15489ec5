# src/routers/events.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.event import Event
from src.schemas.event import EventOut
from src.utils.session_dep import get_session_user_id

router = APIRouter()


@router.get("", response_model=List[EventOut])
def list_events(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    types: Optional[List[str]] = Query(None, description="Точные типы событий"),
):
    """
    События, видимые текущему пользователю: actor == me или target == me.
    Новые сверху.
    """
    base = select(Event).where(
        or_(Event.actor_id == user_id, Event.target_user_id == user_id)
    )

    tset = [t.strip().lower() for t in (types or []) if t and t.strip()]
    if tset:
        base = base.where(Event.type.in_(tset))

    base = base.order_by(Event.created_at.desc(), Event.id.desc()).offset(offset).limit(limit)
    return db.execute(base).scalars().all()
