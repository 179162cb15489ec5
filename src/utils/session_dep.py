# src/utils/session_dep.py
"""
Идентификация вызывающего пользователя по сессии.
- get_session_user_id: FastAPI-зависимость, достаёт UserId из подписанной cookie-сессии
- SESSION_USER_KEY: ключ, под которым внешний слой аутентификации кладёт id пользователя
Ядро (src/services/*) про сессию ничего не знает: id передаётся явным аргументом.
"""

from typing import Any, Optional

from fastapi import HTTPException, Request

SESSION_USER_KEY = "UserId"


def _coerce_user_id(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw.strip())
    return None


def get_session_user_id(request: Request) -> int:
    """
    Зависимость для ручек "от себя": без UserId в сессии запрос
    отклоняется здесь же, до входа в сервисы.
    """
    user_id = _coerce_user_id(request.session.get(SESSION_USER_KEY))
    if user_id is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "not_authenticated", "message": "Session has no UserId"},
        )
    return user_id


def login_session(request: Request, user_id: int) -> None:
    request.session[SESSION_USER_KEY] = user_id


def logout_session(request: Request) -> None:
    request.session.pop(SESSION_USER_KEY, None)
