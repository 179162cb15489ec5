# src/routers/auth.py
"""
Роутер сессии. Регистрирует пользователя и кладёт его id в подписанную cookie-сессию
под ключом UserId. Вход существующих пользователей выполняет внешний слой аутентификации,
который пишет тот же ключ.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.db import get_db
from src.schemas.user import UserRegister, UserView
from src.services import users
from src.services.errors import BuddyError
from src.utils.errors import to_http
from src.utils.session_dep import login_session, logout_session

router = APIRouter()


@router.post("/register", response_model=UserView)
def register(payload: UserRegister, request: Request, db: Session = Depends(get_db)):
    """
    /api/auth/register - JSON: { "name": "...", "email": "..." }
    409, если email уже занят.
    """
    try:
        view = users.register_user(db, payload.name, payload.email)
    except BuddyError as e:
        raise to_http(e)
    login_session(request, view.id)
    return view


@router.post("/logout", response_model=dict)
def logout(request: Request):
    logout_session(request)
    return {"success": True}
